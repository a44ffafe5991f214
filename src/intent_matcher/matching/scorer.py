# ABOUTME: Pure scoring functions that rate how well two analyzed intents complement each other.
# ABOUTME: Produces the 0-100 match score and the structured explanation stored with a match.

import math

from intent_matcher.models import Availability, Intent, IntentType, MatchExplanation

SHARED_DOMAIN_POINTS = 15
COMPLEMENTARY_POINTS = 30
SHARED_CATEGORY_POINTS = 10
CONFIDENCE_WEIGHT = 20
AVAILABILITY_POINTS = 5
NEUTRAL_CONFIDENCE = 0.5
MAX_SCORE = 100

# Directional pairs that earn the complementarity bonus.
_COMPLEMENTARY_PAIRS = {
    (IntentType.RECEIVING, IntentType.GIVING),
    (IntentType.RECEIVING, IntentType.BOTH),
    (IntentType.GIVING, IntentType.RECEIVING),
    (IntentType.GIVING, IntentType.BOTH),
    (IntentType.BOTH, IntentType.BOTH),
}


def shared_domains(intent_a: Intent, intent_b: Intent) -> list[str]:
    """Return A's domains that B also lists, in A's order without repeats."""
    other = set(intent_b.domains)
    result: list[str] = []
    for domain in intent_a.domains:
        if domain in other and domain not in result:
            result.append(domain)
    return result


def is_complementary(type_a: IntentType | None, type_b: IntentType | None) -> bool:
    """Whether A's intent type complements B's, evaluated from A's side."""
    return (type_a, type_b) in _COMPLEMENTARY_PAIRS


def shared_category_confidences(intent_a: Intent, intent_b: Intent) -> list[float]:
    """Average confidence per category of A whose name B also has.

    Returns:
        One value per shared category entry of A: (confidence_a + confidence_b) / 2.
    """
    b_confidence: dict[str, float] = {}
    for entry in intent_b.category_entries:
        b_confidence.setdefault(entry.category, entry.confidence)

    return [
        (entry.confidence + b_confidence[entry.category]) / 2
        for entry in intent_a.category_entries
        if entry.category in b_confidence
    ]


def mean_confidence(confidences: list[float]) -> float:
    """Mean of the shared-category confidences, or 0.5 when there are none."""
    if not confidences:
        return NEUTRAL_CONFIDENCE
    return sum(confidences) / len(confidences)


def _same_availability(intent_a: Intent, intent_b: Intent) -> bool:
    availability_a = intent_a.availability or Availability.NOT_SPECIFIED
    availability_b = intent_b.availability or Availability.NOT_SPECIFIED
    return availability_a == availability_b and availability_a != Availability.NOT_SPECIFIED


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_score(intent_a: Intent, intent_b: Intent) -> int:
    """Score how well B serves A.

    Args:
        intent_a: The querying member's intent.
        intent_b: The candidate's intent.

    Returns:
        Integer score clamped to [0, 100].
    """
    confidences = shared_category_confidences(intent_a, intent_b)

    total = 0.0
    total += SHARED_DOMAIN_POINTS * len(shared_domains(intent_a, intent_b))
    if is_complementary(intent_a.intent_type, intent_b.intent_type):
        total += COMPLEMENTARY_POINTS
    total += SHARED_CATEGORY_POINTS * len(confidences)
    total += CONFIDENCE_WEIGHT * mean_confidence(confidences)
    if _same_availability(intent_a, intent_b):
        total += AVAILABILITY_POINTS

    return max(0, _round_half_up(min(total, MAX_SCORE)))


def complementary_notes(
    intent_a: Intent, intent_b: Intent, first_name_a: str, first_name_b: str
) -> list[str]:
    """Describe how the two intent types complement each other.

    Only exact seeking/offering pairs and both/both pairs get a note.
    """
    pair = (intent_a.intent_type, intent_b.intent_type)
    if pair == (IntentType.RECEIVING, IntentType.GIVING):
        return [f"{first_name_a} is seeking what {first_name_b} is offering"]
    if pair == (IntentType.GIVING, IntentType.RECEIVING):
        return [f"{first_name_a} is offering what {first_name_b} is seeking"]
    if pair == (IntentType.BOTH, IntentType.BOTH):
        return ["Both members have complementary giving and receiving intents"]
    return []


def build_explanation(
    intent_a: Intent,
    intent_b: Intent,
    first_name_a: str,
    first_name_b: str,
    reason: str,
) -> MatchExplanation:
    """Assemble the structured explanation for a match."""
    return MatchExplanation(
        reason=reason,
        shared_domains=shared_domains(intent_a, intent_b),
        complementary_intents=complementary_notes(intent_a, intent_b, first_name_a, first_name_b),
        confidence=mean_confidence(shared_category_confidences(intent_a, intent_b)),
    )


def score_intents(
    intent_a: Intent,
    intent_b: Intent,
    first_name_a: str,
    first_name_b: str,
    reason: str,
) -> tuple[int, MatchExplanation]:
    """Score a pair and build its explanation in one call.

    Args:
        intent_a: The querying member's intent.
        intent_b: The candidate's intent.
        first_name_a: First name of A, used in the complementarity note.
        first_name_b: First name of B.
        reason: Free-text reason from the explainer.

    Returns:
        Tuple of (score, explanation).
    """
    return (
        calculate_score(intent_a, intent_b),
        build_explanation(intent_a, intent_b, first_name_a, first_name_b, reason),
    )
