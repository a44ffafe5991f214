# ABOUTME: Shared helpers for SQLModel table definitions.
# ABOUTME: Provides the timezone-aware UTC clock used for every persisted timestamp.

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime.

    SQLModel stores datetime fields as UTC and hands them back with tzinfo
    attached, so values read from the database compare directly against this.

    Returns:
        Timezone-aware datetime representing the current UTC time.
    """
    return datetime.now(UTC)
