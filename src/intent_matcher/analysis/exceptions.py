# ABOUTME: Custom exceptions for language model provider operations.
# ABOUTME: Provides specific error types for auth failures, rate limits, and other failures.


class ProviderError(Exception):
    """Base exception for all language model provider errors."""

    pass


class ProviderAuthError(ProviderError):
    """Exception raised when the API key is missing, invalid, or lacks permission."""

    pass


class ProviderRateLimitError(ProviderError):
    """Exception raised when the provider's rate limiting or quota is triggered."""

    pass
