# ABOUTME: Intents package for storing and querying member intents.
# ABOUTME: Exports IntentStore and its input validation helpers.

from intent_matcher.intents.store import IntentStore, coerce_visibility, validate_intent_text

__all__ = ["IntentStore", "coerce_visibility", "validate_intent_text"]
