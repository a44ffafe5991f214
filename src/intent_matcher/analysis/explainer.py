# ABOUTME: Match explainer that asks the language model for a short, friendly match rationale.
# ABOUTME: Falls back to a fixed sentence whenever generation fails or returns nothing.

import logging

from intent_matcher.analysis.client import OpenAIClient
from intent_matcher.analysis.exceptions import ProviderError
from intent_matcher.analysis.prompts import (
    EXPLANATION_SYSTEM_PROMPT,
    FALLBACK_EXPLANATION,
    build_explanation_prompt,
)
from intent_matcher.models import Intent

logger = logging.getLogger(__name__)


class MatchExplainer:
    """Generates the human-readable reason attached to a match."""

    def __init__(self, client: OpenAIClient | None) -> None:
        self._client = client

    def explain(self, intent_a: Intent, intent_b: Intent, name_a: str, name_b: str) -> str:
        """Explain why two intents were matched.

        Never raises for provider problems; the fallback sentence is returned instead.

        Args:
            intent_a: The querying member's intent.
            intent_b: The candidate's intent.
            name_a: Full name of the querying member.
            name_b: Full name of the candidate.

        Returns:
            A short explanation.
        """
        if self._client is None:
            return FALLBACK_EXPLANATION

        try:
            reason = self._client.complete_text(
                EXPLANATION_SYSTEM_PROMPT,
                build_explanation_prompt(intent_a, intent_b, name_a, name_b),
            )
        except ProviderError as e:
            logger.warning("Match explanation failed, using fallback: %s", e)
            return FALLBACK_EXPLANATION

        if not reason:
            logger.warning("Match explanation was empty, using fallback")
            return FALLBACK_EXPLANATION
        return reason
