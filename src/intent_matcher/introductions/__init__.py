# ABOUTME: Introductions package for member-initiated introduction requests.
# ABOUTME: Exports IntroductionWorkflow and its input validation helpers.

from intent_matcher.introductions.workflow import (
    IntroductionWorkflow,
    coerce_category,
    coerce_decision,
    validate_description,
    validate_message,
)

__all__ = [
    "IntroductionWorkflow",
    "coerce_category",
    "coerce_decision",
    "validate_description",
    "validate_message",
]
