# ABOUTME: Introduction workflow for direct member-to-member introduction requests.
# ABOUTME: Validates, creates, answers, cancels and expires requests between two members.

import logging
from datetime import timedelta
from uuid import UUID

from sqlalchemy import ColumnElement
from sqlmodel import Session, col, select

from intent_matcher.database import DatabaseService
from intent_matcher.errors import (
    DuplicatePendingError,
    InvalidInputError,
    InvalidTargetError,
    NotFoundError,
    UnauthorizedError,
)
from intent_matcher.models import (
    IntroductionCategory,
    IntroductionRequest,
    IntroductionStatus,
    utcnow,
)
from intent_matcher.models.introduction import (
    DEFAULT_EXPIRY_DAYS,
    MAX_DESCRIPTION_LENGTH,
    MAX_MESSAGE_LENGTH,
    MIN_MESSAGE_LENGTH,
)

logger = logging.getLogger(__name__)

RESPONSE_DECISIONS = (IntroductionStatus.ACCEPTED, IntroductionStatus.DECLINED)


def validate_message(message: str) -> str:
    """Strip a request message and check its length."""
    text = (message or "").strip()
    if not MIN_MESSAGE_LENGTH <= len(text) <= MAX_MESSAGE_LENGTH:
        raise InvalidInputError(
            f"Message must be between {MIN_MESSAGE_LENGTH} and {MAX_MESSAGE_LENGTH} "
            f"characters (got {len(text)})"
        )
    return text


def validate_description(description: str | None) -> str | None:
    """Strip an optional description; blank becomes None."""
    if description is None:
        return None
    text = description.strip()
    if len(text) > MAX_DESCRIPTION_LENGTH:
        raise InvalidInputError(
            f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters (got {len(text)})"
        )
    return text or None


def coerce_category(value: IntroductionCategory | str) -> IntroductionCategory:
    """Convert a category or its string form."""
    try:
        return IntroductionCategory(value)
    except ValueError as e:
        allowed = ", ".join(c.value for c in IntroductionCategory)
        raise InvalidInputError(
            f"Invalid introduction category {value!r}; expected one of: {allowed}"
        ) from e


def coerce_decision(value: IntroductionStatus | str) -> IntroductionStatus:
    """Convert a response decision; only accepted and declined are allowed."""
    try:
        decision = IntroductionStatus(value)
    except ValueError as e:
        raise InvalidInputError(f"Invalid decision {value!r}; expected accepted or declined") from e
    if decision not in RESPONSE_DECISIONS:
        raise InvalidInputError(f"Invalid decision {value!r}; expected accepted or declined")
    return decision


class IntroductionWorkflow:
    """Manages introduction requests between members.

    Pending requests past their expiry are relabeled expired whenever they
    are read or acted on, and in bulk by expire_stale().
    """

    def __init__(self, db_service: DatabaseService, expiry_days: int = DEFAULT_EXPIRY_DAYS) -> None:
        """Initialize the workflow.

        Args:
            db_service: Database service for sessions and member lookups.
            expiry_days: Days a pending request stays open.
        """
        self._db_service = db_service
        self._expiry_days = expiry_days

    def create(
        self,
        from_id: UUID,
        to_id: UUID,
        message: str,
        category: IntroductionCategory | str,
        description: str | None = None,
    ) -> IntroductionRequest:
        """Send an introduction request.

        Args:
            from_id: Sending member.
            to_id: Receiving member.
            message: Personal note, 10 to 500 characters after stripping.
            category: What the sender hopes to get from the introduction.
            description: Optional short context, at most 200 characters.

        Returns:
            The persisted pending request.

        Raises:
            InvalidInputError: If the message, category or description is invalid.
            InvalidTargetError: If the sender targets themselves.
            NotFoundError: If the sender or recipient does not exist.
            DuplicatePendingError: If the sender already has a pending request to the recipient.
        """
        text = validate_message(message)
        intent_category = coerce_category(category)
        intent_description = validate_description(description)

        if from_id == to_id:
            raise InvalidTargetError("You cannot send an introduction request to yourself")
        if self._db_service.get_member(from_id) is None:
            raise NotFoundError(f"Sender {from_id} not found")
        if self._db_service.get_member(to_id) is None:
            raise NotFoundError(f"Recipient {to_id} not found")

        with self._db_service.get_session() as session:
            pending_stmt = select(IntroductionRequest).where(
                IntroductionRequest.from_member_id == from_id,
                IntroductionRequest.to_member_id == to_id,
                IntroductionRequest.status == IntroductionStatus.PENDING,
            )
            pending = self._drop_expired(session, list(session.exec(pending_stmt).all()))
            if pending:
                raise DuplicatePendingError(
                    "You already have a pending introduction request to this member"
                )

            request = IntroductionRequest(
                from_member_id=from_id,
                to_member_id=to_id,
                message=text,
                intent_category=intent_category,
                intent_description=intent_description,
                expires_at=utcnow() + timedelta(days=self._expiry_days),
            )
            session.add(request)
            session.commit()
            session.refresh(request)

        logger.info("Introduction request %s sent from %s to %s", request.id, from_id, to_id)
        return request

    def respond(
        self, request_id: UUID, recipient_id: UUID, decision: IntroductionStatus | str
    ) -> IntroductionRequest:
        """Accept or decline a pending request as its recipient.

        Raises:
            InvalidInputError: If the decision is not accepted or declined.
            NotFoundError: If the request does not exist or is no longer pending.
            UnauthorizedError: If the request is not addressed to recipient_id.
        """
        status = coerce_decision(decision)

        with self._db_service.get_session() as session:
            request = self._load(session, request_id)
            if request.to_member_id != recipient_id:
                raise UnauthorizedError("Only the recipient can respond to this request")
            if request.status != IntroductionStatus.PENDING:
                raise NotFoundError(f"Introduction request {request_id} is no longer pending")

            request.status = status
            request.responded_at = utcnow()
            session.add(request)
            session.commit()
            session.refresh(request)

        logger.info("Introduction request %s %s", request_id, status.value)
        return request

    def mark_viewed(self, request_id: UUID, recipient_id: UUID) -> IntroductionRequest:
        """Record when the recipient first saw the request. Later calls change nothing.

        Raises:
            NotFoundError: If the request does not exist.
            UnauthorizedError: If the request is not addressed to recipient_id.
        """
        with self._db_service.get_session() as session:
            request = self._load(session, request_id)
            if request.to_member_id != recipient_id:
                raise UnauthorizedError("Only the recipient can mark this request as viewed")
            if request.viewed_at is None:
                request.viewed_at = utcnow()
                session.add(request)
                session.commit()
                session.refresh(request)
            return request

    def cancel(self, request_id: UUID, sender_id: UUID) -> None:
        """Withdraw a pending request. The record is deleted.

        Raises:
            NotFoundError: If the request does not exist or is no longer pending.
            UnauthorizedError: If sender_id did not send the request.
        """
        with self._db_service.get_session() as session:
            request = self._load(session, request_id)
            if request.from_member_id != sender_id:
                raise UnauthorizedError("Only the sender can cancel this request")
            if request.status != IntroductionStatus.PENDING:
                raise NotFoundError(f"Introduction request {request_id} is no longer pending")

            session.delete(request)
            session.commit()

        logger.info("Introduction request %s cancelled by sender", request_id)

    def get(self, request_id: UUID, member_id: UUID) -> IntroductionRequest:
        """Return a request visible to its sender or recipient.

        Raises:
            NotFoundError: If the request does not exist.
            UnauthorizedError: If the member is neither sender nor recipient.
        """
        with self._db_service.get_session() as session:
            request = self._load(session, request_id)
            if member_id not in (request.from_member_id, request.to_member_id):
                raise UnauthorizedError("You are not a party to this introduction request")
            return request

    def list_sent(
        self, from_id: UUID, status: IntroductionStatus | str | None = None
    ) -> list[IntroductionRequest]:
        """Requests sent by a member, newest first."""
        return self._list(col(IntroductionRequest.from_member_id) == from_id, status)

    def list_received(
        self, to_id: UUID, status: IntroductionStatus | str | None = None
    ) -> list[IntroductionRequest]:
        """Requests addressed to a member, newest first."""
        return self._list(col(IntroductionRequest.to_member_id) == to_id, status)

    def expire_stale(self) -> int:
        """Relabel every pending request past its expiry as expired.

        Returns:
            Number of requests expired.
        """
        with self._db_service.get_session() as session:
            statement = select(IntroductionRequest).where(
                IntroductionRequest.status == IntroductionStatus.PENDING,
                IntroductionRequest.expires_at <= utcnow(),
            )
            stale = list(session.exec(statement).all())
            for request in stale:
                request.status = IntroductionStatus.EXPIRED
                session.add(request)
            if stale:
                session.commit()

        if stale:
            logger.info("Expired %d stale introduction requests", len(stale))
        return len(stale)

    def _list(
        self, party_clause: ColumnElement[bool], status: IntroductionStatus | str | None
    ) -> list[IntroductionRequest]:
        self.expire_stale()
        with self._db_service.get_session() as session:
            statement = select(IntroductionRequest).where(party_clause)
            if status is not None:
                statement = statement.where(
                    IntroductionRequest.status == self._coerce_status(status)
                )
            statement = statement.order_by(col(IntroductionRequest.created_at).desc())
            return list(session.exec(statement).all())

    @staticmethod
    def _coerce_status(value: IntroductionStatus | str) -> IntroductionStatus:
        try:
            return IntroductionStatus(value)
        except ValueError as e:
            allowed = ", ".join(s.value for s in IntroductionStatus)
            raise InvalidInputError(
                f"Invalid request status {value!r}; expected one of: {allowed}"
            ) from e

    @staticmethod
    def _drop_expired(
        session: Session, requests: list[IntroductionRequest]
    ) -> list[IntroductionRequest]:
        """Expire overdue pending requests and return the ones still pending."""
        now = utcnow()
        still_pending = []
        for request in requests:
            if request.is_past_expiry(now):
                request.status = IntroductionStatus.EXPIRED
                session.add(request)
                session.commit()
            else:
                still_pending.append(request)
        return still_pending

    def _load(self, session: Session, request_id: UUID) -> IntroductionRequest:
        request = session.get(IntroductionRequest, request_id)
        if request is None:
            raise NotFoundError(f"Introduction request {request_id} not found")
        self._drop_expired(session, [request])
        return request
