# ABOUTME: SQLModel for proposed matches between two members' intents.
# ABOUTME: Holds the score, explanation, status state machine fields, and pair keys.

from datetime import datetime
from enum import Enum
from typing import Annotated, Any
from uuid import UUID, uuid4

from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from intent_matcher.models.base import utcnow


class MatchStatus(str, Enum):
    """Lifecycle states of a match."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


OPEN_MATCH_STATUSES = (MatchStatus.PENDING, MatchStatus.ACCEPTED)


class MatchExplanation(BaseModel):
    """Why two intents were matched."""

    reason: str
    shared_domains: list[str] = PydanticField(default_factory=list)
    complementary_intents: list[str] = PydanticField(default_factory=list)
    confidence: Annotated[float, PydanticField(ge=0, le=1)]


def make_pair_key(member_one: UUID, member_two: UUID) -> str:
    """Build an order-independent key for a pair of members.

    Args:
        member_one: ID of one member.
        member_two: ID of the other member.

    Returns:
        The two IDs sorted and joined with a colon.
    """
    first, second = sorted((str(member_one), str(member_two)))
    return f"{first}:{second}"


class Match(SQLModel, table=True):
    """A system-proposed pairing of two members.

    member_a is always the member whose request generated the match. The
    unique open_pair_key mirrors pair_key only while the match is pending or
    accepted, so at most one open match can exist per unordered pair.
    """

    __tablename__ = "matches"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    member_a_id: UUID = Field(foreign_key="members.id", index=True)
    member_b_id: UUID = Field(foreign_key="members.id", index=True)
    intent_a_id: UUID = Field(foreign_key="intents.id")
    intent_b_id: UUID = Field(foreign_key="intents.id")

    pair_key: str = Field(index=True)
    open_pair_key: str | None = Field(default=None, unique=True)

    score: int = Field(ge=0, le=100, index=True)
    explanation: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    status: MatchStatus = Field(default=MatchStatus.PENDING, index=True)
    viewed_by_a: bool = False
    viewed_by_b: bool = False

    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    @property
    def explanation_details(self) -> MatchExplanation:
        """Return the stored explanation as a MatchExplanation."""
        return MatchExplanation.model_validate(self.explanation)

    def involves(self, member_id: UUID) -> bool:
        """Whether the member is one of the two parties."""
        return member_id in (self.member_a_id, self.member_b_id)

    def counterpart_of(self, member_id: UUID) -> UUID:
        """Return the other party's member ID."""
        return self.member_b_id if member_id == self.member_a_id else self.member_a_id

    def is_past_expiry(self, now: datetime) -> bool:
        """Whether a pending match has outlived its expiry time."""
        return self.status == MatchStatus.PENDING and self.expires_at <= now

    def set_status(self, status: MatchStatus) -> None:
        """Move to a new status and keep the open-pair slot in step."""
        self.status = status
        self.open_pair_key = self.pair_key if status in OPEN_MATCH_STATUSES else None
