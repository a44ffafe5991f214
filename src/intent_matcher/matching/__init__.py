# ABOUTME: Matching package for candidate search, scoring and match lifecycle.
# ABOUTME: Exports CandidateQuery, the scoring functions and MatchOrchestrator.

from intent_matcher.matching.filters import COMPLEMENTARY_TYPES, CandidateQuery, OverlapRule
from intent_matcher.matching.orchestrator import MatchOrchestrator, coerce_match_status
from intent_matcher.matching.scorer import build_explanation, calculate_score, score_intents

__all__ = [
    "COMPLEMENTARY_TYPES",
    "CandidateQuery",
    "MatchOrchestrator",
    "OverlapRule",
    "build_explanation",
    "calculate_score",
    "coerce_match_status",
    "score_intents",
]
