# ABOUTME: Exception hierarchy for intent-matcher application errors.
# ABOUTME: Every domain failure surfaced to callers derives from IntentMatcherError.


class IntentMatcherError(Exception):
    """Base exception for all intent-matcher errors.

    This is the root exception class for the application. All custom
    exceptions inherit from it so the CLI can render them uniformly.
    """

    pass


class NotFoundError(IntentMatcherError):
    """A member, intent, match or introduction request does not exist."""

    pass


class OwnerNotFoundError(NotFoundError):
    """The member an intent belongs to does not exist."""

    pass


class NoActiveIntentError(NotFoundError):
    """The member has no active intent to update."""

    pass


class UnauthorizedError(IntentMatcherError):
    """The acting member is not a party to the resource."""

    pass


class InvalidInputError(IntentMatcherError):
    """Input failed validation (length, enumeration value, target)."""

    pass


class InvalidTargetError(InvalidInputError):
    """A member tried to target themselves."""

    pass


class InvalidTransitionError(InvalidInputError):
    """A status change was requested from a state that does not allow it."""

    pass


class DuplicatePendingError(IntentMatcherError):
    """A pending request already exists for the same sender and recipient."""

    pass


class AnalysisFailedError(IntentMatcherError):
    """The text-analysis provider was unavailable or returned malformed output."""

    pass


class NoEligibleIntentError(IntentMatcherError):
    """The member's intent cannot take part in matching.

    Raised when there is no active intent, it is paused, matching consent
    was withdrawn, or the intent was never successfully analyzed.
    """

    pass


class ConcurrentModificationError(IntentMatcherError):
    """A concurrent write won a race on a storage constraint."""

    pass
