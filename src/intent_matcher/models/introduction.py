# ABOUTME: SQLModel for direct introduction requests between two members.
# ABOUTME: Defines request categories, statuses, length limits, and automatic expiry.

from datetime import datetime, timedelta
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from intent_matcher.models.base import utcnow

MIN_MESSAGE_LENGTH = 10
MAX_MESSAGE_LENGTH = 500
MAX_DESCRIPTION_LENGTH = 200
DEFAULT_EXPIRY_DAYS = 30


class IntroductionStatus(str, Enum):
    """Lifecycle states of an introduction request."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class IntroductionCategory(str, Enum):
    """What the sender hopes to get out of the introduction."""

    MENTORSHIP = "mentorship"
    JOB_OPPORTUNITY = "job_opportunity"
    COLLABORATION = "collaboration"
    NETWORKING = "networking"
    SPEAKING_OPPORTUNITY = "speaking_opportunity"
    LEARNING = "learning"
    HIRING = "hiring"
    VOLUNTEERING = "volunteering"
    OTHER = "other"


def default_expiry() -> datetime:
    """Expiry assigned to requests created without one."""
    return utcnow() + timedelta(days=DEFAULT_EXPIRY_DAYS)


class IntroductionRequest(SQLModel, table=True):
    """A member-initiated request to be introduced to another member."""

    __tablename__ = "introduction_requests"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    from_member_id: UUID = Field(foreign_key="members.id", index=True)
    to_member_id: UUID = Field(foreign_key="members.id", index=True)

    message: str = Field(max_length=MAX_MESSAGE_LENGTH)
    intent_category: IntroductionCategory
    intent_description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)

    status: IntroductionStatus = Field(default=IntroductionStatus.PENDING, index=True)
    viewed_at: datetime | None = None
    responded_at: datetime | None = None

    expires_at: datetime = Field(default_factory=default_expiry, index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    def is_past_expiry(self, now: datetime) -> bool:
        """Whether a pending request has outlived its expiry time."""
        return self.status == IntroductionStatus.PENDING and self.expires_at <= now
