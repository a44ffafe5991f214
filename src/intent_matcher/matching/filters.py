# ABOUTME: Defines candidate query criteria used to pull matchable intents from storage.
# ABOUTME: Encodes intent-type complementarity and the domain/category overlap rules.

from enum import Enum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field

from intent_matcher.models import Intent, IntentType

COMPLEMENTARY_TYPES: dict[IntentType, tuple[IntentType, ...]] = {
    IntentType.RECEIVING: (IntentType.GIVING, IntentType.BOTH),
    IntentType.GIVING: (IntentType.RECEIVING, IntentType.BOTH),
    IntentType.BOTH: (IntentType.RECEIVING, IntentType.GIVING, IntentType.BOTH),
}


class OverlapRule(str, Enum):
    """Which shared attributes a candidate must have with the querying intent."""

    DOMAINS_OR_CATEGORIES = "domains_or_categories"  # browse: any shared domain or category
    DOMAINS = "domains"  # matching: a shared domain, when the caller lists any


class CandidateQuery(BaseModel):
    """Search criteria for candidate intents."""

    owner_id: Annotated[UUID, Field(description="Member whose own intent is excluded")]

    intent_types: Annotated[
        list[IntentType], Field(description="Intent types a candidate may have")
    ]

    domains: Annotated[
        list[str], Field(default_factory=list, description="Querying intent's domains")
    ]

    categories: Annotated[
        list[str], Field(default_factory=list, description="Querying intent's category names")
    ]

    overlap: Annotated[
        OverlapRule, Field(description="How candidates must overlap the querying intent")
    ] = OverlapRule.DOMAINS_OR_CATEGORIES

    include_private: Annotated[
        bool, Field(description="Whether private intents may be returned")
    ] = True

    limit: Annotated[int, Field(ge=1, description="Maximum candidates to return")] = 20

    @classmethod
    def for_intent(
        cls, intent: Intent, limit: int, overlap: OverlapRule = OverlapRule.DOMAINS_OR_CATEGORIES
    ) -> "CandidateQuery":
        """Build the query for an analyzed intent.

        Browsing by domains or categories never returns private intents;
        algorithmic matching only requires consent to match.

        Args:
            intent: The querying member's intent. Must have an intent type.
            limit: Maximum candidates to return.
            overlap: Overlap rule to apply.

        Returns:
            CandidateQuery describing compatible candidates.
        """
        if intent.intent_type is None:
            raise ValueError("Cannot build a candidate query for an unanalyzed intent")
        return cls(
            owner_id=intent.owner_id,
            intent_types=list(COMPLEMENTARY_TYPES[intent.intent_type]),
            domains=list(intent.domains),
            categories=intent.category_names,
            overlap=overlap,
            include_private=overlap == OverlapRule.DOMAINS,
            limit=limit,
        )

    def accepts(self, candidate: Intent) -> bool:
        """Whether a candidate satisfies the overlap rule."""
        shares_domain = bool(set(self.domains) & set(candidate.domains))
        if self.overlap == OverlapRule.DOMAINS:
            return shares_domain or not self.domains
        return shares_domain or bool(set(self.categories) & set(candidate.category_names))
