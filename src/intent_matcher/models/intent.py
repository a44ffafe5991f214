# ABOUTME: SQLModel for a member's current intent plus the analysis structures that feed it.
# ABOUTME: Defines the intent taxonomy enums, IntentAnalysis, and the Intent table.

from datetime import datetime
from enum import Enum
from typing import Annotated, Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import Field as PydanticField
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, Column, Index, text
from sqlmodel import Field, SQLModel

from intent_matcher.models.base import utcnow

MAX_INTENT_TEXT_LENGTH = 2000


class IntentType(str, Enum):
    """Whether a member is seeking, offering, or both."""

    RECEIVING = "receiving"
    GIVING = "giving"
    BOTH = "both"


class ExperienceLevel(str, Enum):
    """Self-described seniority extracted from the intent text."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class Availability(str, Enum):
    """How soon the member wants to act on the intent."""

    IMMEDIATE = "immediate"
    WITHIN_MONTH = "within_month"
    FLEXIBLE = "flexible"
    NOT_SPECIFIED = "not_specified"


class Visibility(str, Enum):
    """Who may discover the intent."""

    PUBLIC = "public"
    MEMBERS_ONLY = "members_only"
    PRIVATE = "private"


class AnalysisStatus(str, Enum):
    """Whether the structured intent fields came from a successful analysis."""

    COMPLETE = "complete"
    FAILED = "failed"


class IntentCategory(BaseModel):
    """A category the analyzer assigned to an intent, with its confidence."""

    category: str
    subcategories: list[str] = PydanticField(default_factory=list)
    confidence: Annotated[float, PydanticField(ge=0, le=1)]

    @field_validator("category")
    @classmethod
    def _normalize_category(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("category name must not be empty")
        return normalized


class IntentAnalysis(BaseModel):
    """Structured result of analyzing a free-text intent statement.

    Accepts both snake_case and camelCase keys so provider payloads can be
    validated directly.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    intent_type: IntentType
    categories: list[IntentCategory] = PydanticField(default_factory=list)
    domains: list[str] = PydanticField(default_factory=list)
    experience_level: ExperienceLevel | None = None
    availability: Availability = Availability.NOT_SPECIFIED

    @field_validator("availability", mode="before")
    @classmethod
    def _default_availability(cls, value: Any) -> Any:
        return Availability.NOT_SPECIFIED if value is None else value

    @field_validator("domains")
    @classmethod
    def _dedupe_domains(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for domain in value:
            cleaned = domain.strip()
            if cleaned and cleaned not in seen:
                seen.append(cleaned)
        return seen


class Intent(SQLModel, table=True):
    """A member's intent record.

    Only one record per owner may be active at a time; the partial unique
    index backs up the check the intent store performs.
    """

    __tablename__ = "intents"
    __table_args__ = (
        Index(
            "uq_intents_active_owner",
            "owner_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    owner_id: UUID = Field(foreign_key="members.id", index=True)
    raw_text: str = Field(max_length=MAX_INTENT_TEXT_LENGTH)

    intent_type: IntentType | None = Field(default=None, index=True)
    categories: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    domains: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    experience_level: ExperienceLevel | None = None
    availability: Availability = Availability.NOT_SPECIFIED
    analysis_status: AnalysisStatus = AnalysisStatus.COMPLETE

    is_active: bool = Field(default=True, index=True)
    is_paused: bool = False
    visibility: Visibility = Visibility.MEMBERS_ONLY
    consent_to_match: bool = True
    consent_to_contact: bool = False

    last_processed_at: datetime = Field(default_factory=utcnow, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    @property
    def category_entries(self) -> list[IntentCategory]:
        """Return the stored categories as validated IntentCategory objects."""
        return [IntentCategory.model_validate(entry) for entry in self.categories]

    @property
    def category_names(self) -> list[str]:
        """Return the category names in stored order."""
        return [entry["category"] for entry in self.categories]

    @property
    def is_matchable(self) -> bool:
        """Whether this intent may take part in algorithmic matching."""
        return (
            self.is_active
            and not self.is_paused
            and self.consent_to_match
            and self.intent_type is not None
            and self.analysis_status == AnalysisStatus.COMPLETE
        )

    def apply_analysis(self, analysis: IntentAnalysis | None) -> None:
        """Overwrite the analyzed fields.

        Args:
            analysis: Result from the normalizer, or None when analysis failed
                and the intent is being stored unanalyzed.
        """
        if analysis is None:
            self.intent_type = None
            self.categories = []
            self.domains = []
            self.experience_level = None
            self.availability = Availability.NOT_SPECIFIED
            self.analysis_status = AnalysisStatus.FAILED
            return

        self.intent_type = analysis.intent_type
        self.categories = [category.model_dump() for category in analysis.categories]
        self.domains = list(analysis.domains)
        self.experience_level = analysis.experience_level
        self.availability = analysis.availability
        self.analysis_status = AnalysisStatus.COMPLETE
