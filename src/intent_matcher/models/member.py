# ABOUTME: SQLModel for community members, the directory every intent and match points at.
# ABOUTME: Stores identity and display names used in match explanations.

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from intent_matcher.models.base import utcnow


class Member(SQLModel, table=True):
    """Represents a member of the networking community."""

    __tablename__ = "members"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, unique=True, description="Lower-cased login email")
    first_name: str
    last_name: str
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        """Return the full name of the member."""
        return f"{self.first_name} {self.last_name}".strip()
