# ABOUTME: Display module for Rich terminal output formatting.
# ABOUTME: Exports tables and panels for members, intents, matches, introductions and errors.

from intent_matcher.display.errors import display_api_key_help, display_error
from intent_matcher.display.status import (
    display_generation_summary,
    display_intent,
    display_introduction,
    display_match,
    display_stats,
    display_sweep_summary,
)
from intent_matcher.display.tables import IntroductionTable, MatchTable, MemberTable

__all__ = [
    "IntroductionTable",
    "MatchTable",
    "MemberTable",
    "display_api_key_help",
    "display_error",
    "display_generation_summary",
    "display_intent",
    "display_introduction",
    "display_match",
    "display_stats",
    "display_sweep_summary",
]
