# ABOUTME: Coordinates IntentStore, MatchExplainer, the scorer and DatabaseService for matching.
# ABOUTME: Generates pending matches and drives the match status state machine with lazy expiry.

import logging
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, or_, select

from intent_matcher.analysis.explainer import MatchExplainer
from intent_matcher.database import DatabaseService
from intent_matcher.errors import (
    InvalidInputError,
    InvalidTransitionError,
    NoEligibleIntentError,
    NotFoundError,
    OwnerNotFoundError,
    UnauthorizedError,
)
from intent_matcher.matching.scorer import build_explanation, calculate_score
from intent_matcher.models import Match, MatchStatus, make_pair_key, utcnow

if TYPE_CHECKING:
    from intent_matcher.intents.store import IntentStore

logger = logging.getLogger(__name__)

RESPONSE_STATUSES = (MatchStatus.ACCEPTED, MatchStatus.DECLINED)


def coerce_match_status(value: MatchStatus | str) -> MatchStatus:
    """Convert a match status or its string form.

    Raises:
        InvalidInputError: If the value is not a known status.
    """
    try:
        return MatchStatus(value)
    except ValueError as e:
        allowed = ", ".join(s.value for s in MatchStatus)
        raise InvalidInputError(
            f"Invalid match status {value!r}; expected one of: {allowed}"
        ) from e


class MatchOrchestrator:
    """Coordinates match generation and match lifecycle operations.

    Handles the full matching flow including:
    - Checking the caller's intent is eligible
    - Pulling candidates from the intent store
    - Scoring and explaining each candidate pair
    - Persisting pending matches without duplicating open pairs
    - Accept, decline, view and expiry transitions
    """

    def __init__(
        self,
        db_service: DatabaseService,
        intent_store: "IntentStore",
        explainer: MatchExplainer,
        min_score: int = 30,
        candidate_overfetch: int = 2,
        expiry_days: int = 30,
    ) -> None:
        """Initialize the match orchestrator.

        Args:
            db_service: Database service for sessions and member lookups.
            intent_store: Intent store supplying the caller's intent and candidates.
            explainer: Explainer producing the free-text match reason.
            min_score: Candidates scoring below this are not matched.
            candidate_overfetch: Candidates fetched per requested match.
            expiry_days: Days a pending match stays open.
        """
        self._db_service = db_service
        self._intent_store = intent_store
        self._explainer = explainer
        self._min_score = min_score
        self._candidate_overfetch = candidate_overfetch
        self._expiry_days = expiry_days

    def generate_matches(self, owner_id: UUID, limit: int = 10) -> list[Match]:
        """Generate new pending matches for a member.

        Args:
            owner_id: Member requesting matches.
            limit: Maximum number of new matches to create.

        Returns:
            The newly created matches, in candidate order.

        Raises:
            InvalidInputError: If limit is not positive.
            OwnerNotFoundError: If the member does not exist.
            NoEligibleIntentError: If the member's intent cannot take part in matching.
        """
        if limit < 1:
            raise InvalidInputError("limit must be at least 1")

        member = self._db_service.get_member(owner_id)
        if member is None:
            raise OwnerNotFoundError(f"Member {owner_id} not found")

        intent = self._intent_store.get(owner_id)
        if intent is None or not intent.is_matchable:
            raise NoEligibleIntentError(
                "Member has no active, unpaused, analyzed intent with consent to match"
            )

        self._expire_for_member(owner_id)
        candidates = self._intent_store.match_pool(intent, limit * self._candidate_overfetch)

        created: list[Match] = []
        for candidate in candidates:
            pair_key = make_pair_key(owner_id, candidate.owner_id)
            if self._has_open_match(pair_key):
                continue

            score = calculate_score(intent, candidate)
            if score < self._min_score:
                continue

            other = self._db_service.get_member(candidate.owner_id)
            if other is None:
                continue

            reason = self._explainer.explain(intent, candidate, member.full_name, other.full_name)
            explanation = build_explanation(
                intent, candidate, member.first_name, other.first_name, reason
            )
            match = Match(
                member_a_id=owner_id,
                member_b_id=candidate.owner_id,
                intent_a_id=intent.id,
                intent_b_id=candidate.id,
                pair_key=pair_key,
                score=score,
                explanation=explanation.model_dump(),
                expires_at=utcnow() + timedelta(days=self._expiry_days),
            )
            match.set_status(MatchStatus.PENDING)

            saved = self._insert(match)
            if saved is None:
                continue
            created.append(saved)
            if len(created) >= limit:
                break

        logger.info(
            "Generated %d matches for member %s from %d candidates",
            len(created),
            owner_id,
            len(candidates),
        )
        return created

    def update_status(self, match_id: UUID, member_id: UUID, status: MatchStatus | str) -> Match:
        """Accept or decline a pending match.

        Args:
            match_id: The match to update.
            member_id: The acting member; must be one of the two parties.
            status: Target status, accepted or declined.

        Returns:
            The updated match.

        Raises:
            InvalidInputError: If the status is unknown.
            InvalidTransitionError: If the target is not accepted/declined or the
                match is no longer pending.
            NotFoundError: If the match does not exist.
            UnauthorizedError: If the member is not a party to the match.
        """
        target = coerce_match_status(status)
        if target not in RESPONSE_STATUSES:
            raise InvalidTransitionError(
                f"A match can only be accepted or declined, not {target.value}"
            )

        with self._db_service.get_session() as session:
            match = self._load_for_party(session, match_id, member_id)
            if match.status != MatchStatus.PENDING:
                raise InvalidTransitionError(
                    f"Match {match_id} is {match.status.value} and can no longer change"
                )

            match.set_status(target)
            session.add(match)
            session.commit()
            session.refresh(match)

        logger.info("Match %s %s by member %s", match_id, target.value, member_id)
        return match

    def mark_viewed(self, match_id: UUID, member_id: UUID) -> Match:
        """Record that a party has seen the match. Repeated calls change nothing.

        Raises:
            NotFoundError: If the match does not exist.
            UnauthorizedError: If the member is not a party to the match.
        """
        with self._db_service.get_session() as session:
            match = self._load_for_party(session, match_id, member_id)
            if member_id == match.member_a_id:
                match.viewed_by_a = True
            if member_id == match.member_b_id:
                match.viewed_by_b = True
            session.add(match)
            session.commit()
            session.refresh(match)
            return match

    def get_match(self, match_id: UUID, member_id: UUID) -> Match:
        """Return a single match visible to one of its parties.

        Raises:
            NotFoundError: If the match does not exist.
            UnauthorizedError: If the member is not a party to the match.
        """
        with self._db_service.get_session() as session:
            return self._load_for_party(session, match_id, member_id)

    def get_matches(self, owner_id: UUID, status: MatchStatus | str | None = None) -> list[Match]:
        """List every match the member is part of.

        Args:
            owner_id: Member on either side of the match.
            status: Optional status filter.

        Returns:
            Matches sorted by score (highest first), then newest first.
        """
        target = coerce_match_status(status) if status is not None else None
        self._expire_for_member(owner_id)

        with self._db_service.get_session() as session:
            statement = select(Match).where(
                or_(Match.member_a_id == owner_id, Match.member_b_id == owner_id)
            )
            if target is not None:
                statement = statement.where(Match.status == target)
            statement = statement.order_by(col(Match.score).desc(), col(Match.created_at).desc())
            return list(session.exec(statement).all())

    def expire_stale(self) -> int:
        """Relabel every pending match past its expiry as expired.

        Returns:
            Number of matches expired.
        """
        with self._db_service.get_session() as session:
            statement = select(Match).where(
                Match.status == MatchStatus.PENDING,
                Match.expires_at <= utcnow(),
            )
            expired = self._expire(session, list(session.exec(statement).all()))

        if expired:
            logger.info("Expired %d stale matches", expired)
        return expired

    def _expire_for_member(self, member_id: UUID) -> int:
        with self._db_service.get_session() as session:
            statement = select(Match).where(
                or_(Match.member_a_id == member_id, Match.member_b_id == member_id),
                Match.status == MatchStatus.PENDING,
                Match.expires_at <= utcnow(),
            )
            return self._expire(session, list(session.exec(statement).all()))

    @staticmethod
    def _expire(session: Session, matches: list[Match]) -> int:
        for match in matches:
            match.set_status(MatchStatus.EXPIRED)
            session.add(match)
        if matches:
            session.commit()
        return len(matches)

    def _load_for_party(self, session: Session, match_id: UUID, member_id: UUID) -> Match:
        """Load a match for one of its parties, expiring it first if it is overdue."""
        match = session.get(Match, match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        if not match.involves(member_id):
            raise UnauthorizedError(f"Member {member_id} is not a party to match {match_id}")

        if match.is_past_expiry(utcnow()):
            self._expire(session, [match])
            session.refresh(match)
        return match

    def _has_open_match(self, pair_key: str) -> bool:
        with self._db_service.get_session() as session:
            statement = select(Match.id).where(Match.open_pair_key == pair_key)
            return session.exec(statement).first() is not None

    def _insert(self, match: Match) -> Match | None:
        with self._db_service.get_session() as session:
            session.add(match)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.warning("Open match for pair %s already exists; skipping", match.pair_key)
                return None
            session.refresh(match)
            return match

