# ABOUTME: Maps raw language model analysis payloads to IntentAnalysis models.
# ABOUTME: Normalizes enum spellings and turns schema violations into AnalysisFailedError.

from typing import Any

from pydantic import ValidationError

from intent_matcher.errors import AnalysisFailedError
from intent_matcher.models import IntentAnalysis

_ENUM_KEYS = ("intentType", "intent_type", "experienceLevel", "experience_level", "availability")


def map_analysis_payload(payload: dict[str, Any]) -> IntentAnalysis:
    """Map a decoded analysis response to an IntentAnalysis.

    Accepts camelCase or snake_case keys. Enum values are matched
    case-insensitively; anything outside the taxonomy is rejected.

    Args:
        payload: JSON object returned by the analysis model.

    Returns:
        Validated IntentAnalysis.

    Raises:
        AnalysisFailedError: If the payload does not fit the analysis schema.
    """
    cleaned = dict(payload)
    for key in _ENUM_KEYS:
        if key in cleaned:
            cleaned[key] = _normalize_enum_value(cleaned[key])

    try:
        return IntentAnalysis.model_validate(cleaned)
    except ValidationError as e:
        raise AnalysisFailedError(f"Malformed intent analysis: {_summarize(e)}") from e


def _normalize_enum_value(value: Any) -> Any:
    """Lower-case and snake-case string enum values; leave everything else alone."""
    if isinstance(value, str):
        return value.strip().lower().replace(" ", "_")
    return value


def _summarize(error: ValidationError) -> str:
    """Render a validation error as a single short line."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(item) for item in detail["loc"]) or "payload"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)
