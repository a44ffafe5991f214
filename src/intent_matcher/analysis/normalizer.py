# ABOUTME: Intent normalizer that turns free-text intent statements into structured analyses.
# ABOUTME: Calls the language model with the fixed taxonomy prompt and validates the result.

import logging

from intent_matcher.analysis.client import OpenAIClient
from intent_matcher.analysis.exceptions import ProviderError
from intent_matcher.analysis.mapper import map_analysis_payload
from intent_matcher.analysis.prompts import ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt
from intent_matcher.errors import AnalysisFailedError
from intent_matcher.models import IntentAnalysis

logger = logging.getLogger(__name__)

ANALYSIS_TEMPERATURE = 0.3


class IntentNormalizer:
    """Analyzes intent statements through a language model."""

    def __init__(self, client: OpenAIClient | None) -> None:
        """Initialize the normalizer.

        Args:
            client: Configured OpenAI client, or None when no API key is
                available. Without a client every analysis fails.
        """
        self._client = client

    def analyze(self, raw_text: str) -> IntentAnalysis:
        """Analyze an intent statement.

        Args:
            raw_text: The member's free-text intent.

        Returns:
            The structured analysis.

        Raises:
            AnalysisFailedError: If the provider is unavailable, rejects the
                request, or returns output that does not fit the taxonomy.
        """
        if self._client is None:
            raise AnalysisFailedError(
                "No OpenAI API key configured. Run 'intent-matcher login' first."
            )

        try:
            payload = self._client.complete_json(
                ANALYSIS_SYSTEM_PROMPT,
                build_analysis_prompt(raw_text),
                temperature=ANALYSIS_TEMPERATURE,
            )
        except ProviderError as e:
            logger.warning("Intent analysis request failed: %s", e)
            raise AnalysisFailedError(f"Failed to analyze intent: {e}") from e

        analysis = map_analysis_payload(payload)
        logger.info(
            "Analyzed intent as %s with %d categories and %d domains",
            analysis.intent_type.value,
            len(analysis.categories),
            len(analysis.domains),
        )
        return analysis
