# ABOUTME: Models package for intent-matcher data structures.
# ABOUTME: Exports the Member, Intent, Match and IntroductionRequest SQLModels and their enums.

from intent_matcher.models.base import utcnow
from intent_matcher.models.intent import (
    AnalysisStatus,
    Availability,
    ExperienceLevel,
    Intent,
    IntentAnalysis,
    IntentCategory,
    IntentType,
    Visibility,
)
from intent_matcher.models.introduction import (
    IntroductionCategory,
    IntroductionRequest,
    IntroductionStatus,
)
from intent_matcher.models.match import Match, MatchExplanation, MatchStatus, make_pair_key
from intent_matcher.models.member import Member

__all__ = [
    "AnalysisStatus",
    "Availability",
    "ExperienceLevel",
    "Intent",
    "IntentAnalysis",
    "IntentCategory",
    "IntentType",
    "IntroductionCategory",
    "IntroductionRequest",
    "IntroductionStatus",
    "Match",
    "MatchExplanation",
    "MatchStatus",
    "Member",
    "Visibility",
    "make_pair_key",
    "utcnow",
]
