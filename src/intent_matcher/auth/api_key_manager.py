# ABOUTME: API key manager for securely storing the OpenAI API key.
# ABOUTME: Uses the OS keyring and resolves the key from settings before falling back to it.

import keyring

from intent_matcher.config import Settings


class ApiKeyManager:
    """Service for managing OpenAI API key storage using the OS keyring."""

    SERVICE_NAME = "intent-matcher"
    ACCOUNT_NAME = "openai"
    MIN_KEY_LENGTH = 20

    def validate_key_format(self, api_key: str) -> bool:
        """Validate the format of an API key.

        Performs basic validation: non-empty, no inner whitespace, reasonable length.

        Args:
            api_key: The key string to validate.

        Returns:
            True if the key format appears valid, False otherwise.
        """
        if not api_key or not api_key.strip():
            return False
        stripped = api_key.strip()
        return len(stripped) >= self.MIN_KEY_LENGTH and not any(c.isspace() for c in stripped)

    def store_key(self, api_key: str) -> None:
        """Store the API key in the OS keyring.

        Args:
            api_key: The OpenAI API key to store.
        """
        keyring.set_password(self.SERVICE_NAME, self.ACCOUNT_NAME, api_key.strip())

    def get_key(self) -> str | None:
        """Retrieve the API key from the OS keyring.

        Returns:
            The stored key if found, None otherwise.
        """
        return keyring.get_password(self.SERVICE_NAME, self.ACCOUNT_NAME)

    def delete_key(self) -> None:
        """Delete the API key from the OS keyring."""
        keyring.delete_password(self.SERVICE_NAME, self.ACCOUNT_NAME)

    def resolve_key(self, settings: Settings) -> str | None:
        """Return the key from settings, or the keyring when settings has none.

        Args:
            settings: Application settings, which may carry INTENT_MATCHER_OPENAI_API_KEY.

        Returns:
            The API key, or None if neither source has one.
        """
        if settings.openai_api_key:
            return settings.openai_api_key
        return self.get_key()
