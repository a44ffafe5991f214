# ABOUTME: Database service for managing SQLite connections and the member directory.
# ABOUTME: Provides session management shared by the intent, match and introduction services.

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from uuid import UUID

from sqlmodel import Session, SQLModel, col, create_engine, select

from intent_matcher.errors import InvalidInputError
from intent_matcher.models import Member


class DatabaseService:
    """Service for managing database connections and member records."""

    DEFAULT_DB_PATH = Path.home() / ".intent-matcher" / "data.db"

    def __init__(self, db_path: Path | None = None) -> None:
        """Initialize the database service.

        Args:
            db_path: Path to the SQLite database file. Defaults to ~/.intent-matcher/data.db
        """
        self.db_path = db_path if db_path is not None else self.DEFAULT_DB_PATH
        self._engine = create_engine(f"sqlite:///{self.db_path}", echo=False)

    def init_db(self) -> None:
        """Initialize the database by creating tables and parent directories."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        SQLModel.metadata.create_all(self._engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session as a context manager.

        Yields:
            SQLModel Session for database operations.
        """
        with Session(self._engine, expire_on_commit=False) as session:
            yield session

    def add_member(self, email: str, first_name: str, last_name: str) -> Member:
        """Register a new member.

        Args:
            email: Contact email, stored lower-cased. Must be unique.
            first_name: Given name used in match explanations.
            last_name: Family name.

        Returns:
            The saved Member with ID populated.

        Raises:
            InvalidInputError: If a field is blank or the email is already registered.
        """
        normalized_email = email.strip().lower()
        first_name = first_name.strip()
        last_name = last_name.strip()
        if not normalized_email or "@" not in normalized_email:
            raise InvalidInputError(f"Invalid email address: {email!r}")
        if not first_name or not last_name:
            raise InvalidInputError("First and last name are required")
        if self.get_member_by_email(normalized_email) is not None:
            raise InvalidInputError(f"A member with email {normalized_email} already exists")

        member = Member(email=normalized_email, first_name=first_name, last_name=last_name)
        with self.get_session() as session:
            session.add(member)
            session.commit()
            session.refresh(member)
            return member

    def get_member(self, member_id: UUID) -> Member | None:
        """Retrieve a member by ID.

        Args:
            member_id: The member's UUID.

        Returns:
            The Member if found, None otherwise.
        """
        with self.get_session() as session:
            return session.get(Member, member_id)

    def get_member_by_email(self, email: str) -> Member | None:
        """Retrieve a member by email address (case-insensitive).

        Args:
            email: The email address to search for.

        Returns:
            The Member if found, None otherwise.
        """
        with self.get_session() as session:
            statement = select(Member).where(Member.email == email.strip().lower())
            return session.exec(statement).first()

    def get_members(self, limit: int = 100, offset: int = 0) -> list[Member]:
        """Retrieve members ordered by registration time.

        Args:
            limit: Maximum number of members to return.
            offset: Number of members to skip.

        Returns:
            List of Member objects.
        """
        with self.get_session() as session:
            statement = (
                select(Member).order_by(col(Member.created_at)).offset(offset).limit(limit)
            )
            return list(session.exec(statement).all())
