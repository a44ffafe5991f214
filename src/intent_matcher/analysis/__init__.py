# ABOUTME: Analysis package wrapping the language model used for intents and explanations.
# ABOUTME: Exports the OpenAI client, normalizer, explainer, mapper and provider exceptions.

from intent_matcher.analysis.client import OpenAIClient
from intent_matcher.analysis.exceptions import (
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
)
from intent_matcher.analysis.explainer import MatchExplainer
from intent_matcher.analysis.mapper import map_analysis_payload
from intent_matcher.analysis.normalizer import IntentNormalizer
from intent_matcher.analysis.prompts import FALLBACK_EXPLANATION

__all__ = [
    "FALLBACK_EXPLANATION",
    "IntentNormalizer",
    "MatchExplainer",
    "OpenAIClient",
    "ProviderAuthError",
    "ProviderError",
    "ProviderRateLimitError",
    "map_analysis_payload",
]
