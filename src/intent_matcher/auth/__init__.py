# ABOUTME: Auth package for intent-matcher credential management.
# ABOUTME: Provides ApiKeyManager for secure OpenAI API key storage using OS keyring.

from intent_matcher.auth.api_key_manager import ApiKeyManager

__all__ = ["ApiKeyManager"]
