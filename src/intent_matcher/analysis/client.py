# ABOUTME: OpenAI API client wrapper for intent analysis and match explanations.
# ABOUTME: Wraps the openai library and maps its failures onto provider exceptions.

import json
import logging
from typing import Any

import openai
from openai import OpenAI

from intent_matcher.analysis.exceptions import (
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
)

logger = logging.getLogger(__name__)


class OpenAIClient:
    """Wrapper around the openai library for chat completions."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 30.0) -> None:
        """Create a client for the given API key.

        Retries are disabled; a failed call surfaces immediately so callers
        decide what to do with it.

        Args:
            api_key: OpenAI API key.
            model: Chat model name used for every request.
            timeout: Per-request timeout in seconds.

        Raises:
            ProviderAuthError: If the API key is empty.
        """
        if not api_key or not api_key.strip():
            raise ProviderAuthError("An OpenAI API key is required")
        self.model = model
        self._client = OpenAI(api_key=api_key.strip(), timeout=timeout, max_retries=0)

    def validate_key(self) -> bool:
        """Test whether the API key is accepted by making a cheap API call.

        Returns:
            True if the key is valid, False if the provider rejects it.

        Raises:
            ProviderError: If the check fails for a reason other than authentication.
        """
        try:
            self._client.models.list()
        except Exception as e:
            error = self._wrap_exception(e)
            if isinstance(error, ProviderAuthError):
                return False
            raise error from e
        return True

    def complete_json(
        self, system_prompt: str, user_prompt: str, temperature: float = 0.3
    ) -> dict[str, Any]:
        """Request a JSON object completion.

        Args:
            system_prompt: Instructions for the model.
            user_prompt: The request content.
            temperature: Sampling temperature.

        Returns:
            The decoded JSON object.

        Raises:
            ProviderAuthError: If the API key is rejected.
            ProviderRateLimitError: If the provider rate limits the request.
            ProviderError: For any other failure, including empty or non-JSON output.
        """
        content = self._complete(
            system_prompt,
            user_prompt,
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        if not content:
            raise ProviderError("No content in provider response")

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise ProviderError(f"Provider returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ProviderError("Provider returned JSON that is not an object")
        return payload

    def complete_text(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 150,
    ) -> str:
        """Request a short free-text completion.

        Returns:
            The stripped completion text, possibly empty.

        Raises:
            ProviderError: Or a subclass, if the request fails.
        """
        content = self._complete(
            system_prompt,
            user_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return (content or "").strip()

    def _complete(self, system_prompt: str, user_prompt: str, **options: Any) -> str | None:
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                **options,
            )
        except Exception as e:
            raise self._wrap_exception(e) from e

        if not completion.choices:
            raise ProviderError("Provider response contained no choices")
        return completion.choices[0].message.content

    def _wrap_exception(self, exception: Exception) -> ProviderError:
        """Convert an openai library exception to the matching provider exception.

        Args:
            exception: The original exception from the openai library.

        Returns:
            The appropriate ProviderError subclass for the exception.
        """
        logger.debug("OpenAI request failed: %s", exception)

        if isinstance(exception, openai.RateLimitError):
            return ProviderRateLimitError(str(exception))

        if isinstance(exception, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return ProviderAuthError(str(exception))

        return ProviderError(str(exception))
