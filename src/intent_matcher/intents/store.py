# ABOUTME: Intent store that owns each member's single active intent and its lifecycle.
# ABOUTME: Runs analysis before writing, enforces one active intent per owner, and finds candidates.

import logging
from collections.abc import Callable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from intent_matcher.analysis.normalizer import IntentNormalizer
from intent_matcher.config import AnalysisFailurePolicy
from intent_matcher.database import DatabaseService
from intent_matcher.errors import (
    AnalysisFailedError,
    ConcurrentModificationError,
    InvalidInputError,
    NoActiveIntentError,
    OwnerNotFoundError,
)
from intent_matcher.matching.filters import CandidateQuery, OverlapRule
from intent_matcher.models import AnalysisStatus, Intent, IntentAnalysis, Visibility, utcnow
from intent_matcher.models.intent import MAX_INTENT_TEXT_LENGTH

logger = logging.getLogger(__name__)


def validate_intent_text(raw_text: str) -> str:
    """Strip and validate intent text.

    Raises:
        InvalidInputError: If the text is empty or longer than the maximum.
    """
    text = (raw_text or "").strip()
    if not text:
        raise InvalidInputError("Intent text must not be empty")
    if len(text) > MAX_INTENT_TEXT_LENGTH:
        raise InvalidInputError(
            f"Intent text must be at most {MAX_INTENT_TEXT_LENGTH} characters (got {len(text)})"
        )
    return text


def coerce_visibility(value: Visibility | str) -> Visibility:
    """Convert a visibility value or its string form.

    Raises:
        InvalidInputError: If the value is not a known visibility.
    """
    try:
        return Visibility(value)
    except ValueError as e:
        allowed = ", ".join(v.value for v in Visibility)
        raise InvalidInputError(f"Invalid visibility {value!r}; expected one of: {allowed}") from e


class IntentStore:
    """Persists intents and answers candidate queries.

    Every operation is scoped to one owner. External analysis always runs
    before a write transaction opens.
    """

    def __init__(
        self,
        db_service: DatabaseService,
        normalizer: IntentNormalizer,
        failure_policy: AnalysisFailurePolicy = AnalysisFailurePolicy.ABORT,
    ) -> None:
        """Initialize the intent store.

        Args:
            db_service: Database service providing sessions and the member directory.
            normalizer: Normalizer used to analyze intent text.
            failure_policy: What to do when analysis fails.
        """
        self._db_service = db_service
        self._normalizer = normalizer
        self._failure_policy = failure_policy

    def create_or_update(
        self,
        owner_id: UUID,
        raw_text: str,
        visibility: Visibility | str = Visibility.MEMBERS_ONLY,
        consent_to_match: bool = True,
        consent_to_contact: bool = False,
    ) -> Intent:
        """Create the owner's active intent or update it in place.

        Args:
            owner_id: Member who owns the intent.
            raw_text: Free-text intent statement.
            visibility: Who may discover the intent.
            consent_to_match: Whether the owner opts into algorithmic matching.
            consent_to_contact: Whether the owner agrees to be contacted.

        Returns:
            The persisted active intent.

        Raises:
            InvalidInputError: If the text or visibility is invalid.
            OwnerNotFoundError: If the member does not exist.
            AnalysisFailedError: If analysis fails and the policy is abort.
            ConcurrentModificationError: If a concurrent write created an active intent first.
        """
        text = validate_intent_text(raw_text)
        visibility = coerce_visibility(visibility)
        if self._db_service.get_member(owner_id) is None:
            raise OwnerNotFoundError(f"Member {owner_id} not found")

        analysis = self._analyze(owner_id, text)

        with self._db_service.get_session() as session:
            intent = self._active_intent(session, owner_id)
            created = intent is None
            if intent is None:
                intent = Intent(owner_id=owner_id, raw_text=text)
            else:
                intent.raw_text = text

            intent.apply_analysis(analysis)
            intent.visibility = visibility
            intent.consent_to_match = consent_to_match
            intent.consent_to_contact = consent_to_contact
            intent.last_processed_at = utcnow()

            session.add(intent)
            self._commit(session, owner_id)
            session.refresh(intent)

        action = "Created" if created else "Updated"
        logger.info("%s intent %s for member %s", action, intent.id, owner_id)
        return intent

    def get(self, owner_id: UUID) -> Intent | None:
        """Return the owner's active intent, or None."""
        with self._db_service.get_session() as session:
            return self._active_intent(session, owner_id)

    def get_by_id(self, intent_id: UUID) -> Intent | None:
        """Return any intent record by ID, including inactive ones."""
        with self._db_service.get_session() as session:
            return session.get(Intent, intent_id)

    def pause(self, owner_id: UUID) -> Intent:
        """Temporarily remove the owner's intent from matching."""
        return self._update_active(owner_id, lambda intent: setattr(intent, "is_paused", True))

    def resume(self, owner_id: UUID) -> Intent:
        """Return a paused intent to matching."""
        return self._update_active(owner_id, lambda intent: setattr(intent, "is_paused", False))

    def soft_delete(self, owner_id: UUID) -> Intent:
        """Deactivate the owner's intent.

        The record is kept so matches that reference it stay intact.
        """
        return self._update_active(owner_id, lambda intent: setattr(intent, "is_active", False))

    def set_visibility(self, owner_id: UUID, visibility: Visibility | str) -> Intent:
        """Change who may discover the owner's intent."""
        value = coerce_visibility(visibility)
        return self._update_active(owner_id, lambda intent: setattr(intent, "visibility", value))

    def set_consent(
        self, owner_id: UUID, consent_to_match: bool, consent_to_contact: bool
    ) -> Intent:
        """Replace both consent flags on the owner's intent."""

        def apply(intent: Intent) -> None:
            intent.consent_to_match = consent_to_match
            intent.consent_to_contact = consent_to_contact

        return self._update_active(owner_id, apply)

    def find_candidates(self, owner_id: UUID, limit: int = 20) -> list[Intent]:
        """Find other members' intents compatible with the owner's.

        Candidates share at least one domain or category name with the
        owner's intent and have a complementary intent type. Private intents
        are never returned.

        Args:
            owner_id: Member whose intent drives the search.
            limit: Maximum candidates to return.

        Returns:
            Compatible intents, most recently processed first. Empty when the
            owner's intent is missing, paused, not consenting, or unanalyzed.

        Raises:
            InvalidInputError: If limit is not positive.
        """
        if limit < 1:
            raise InvalidInputError("limit must be at least 1")

        intent = self.get(owner_id)
        if intent is None or not intent.is_matchable:
            return []
        return self.search(CandidateQuery.for_intent(intent, limit))

    def match_pool(self, intent: Intent, limit: int) -> list[Intent]:
        """Candidates considered when generating matches for an intent.

        When the intent lists domains, candidates must share at least one.
        """
        return self.search(CandidateQuery.for_intent(intent, limit, OverlapRule.DOMAINS))

    def search(self, query: CandidateQuery) -> list[Intent]:
        """Run a candidate query.

        Args:
            query: Criteria describing acceptable candidates.

        Returns:
            Up to query.limit matchable intents, most recently processed first.
        """
        statement = (
            select(Intent)
            .where(
                Intent.owner_id != query.owner_id,
                Intent.is_active == True,  # noqa: E712
                Intent.is_paused == False,  # noqa: E712
                Intent.consent_to_match == True,  # noqa: E712
                Intent.analysis_status == AnalysisStatus.COMPLETE,
                col(Intent.intent_type).in_(query.intent_types),
            )
            .order_by(col(Intent.last_processed_at).desc())
        )
        if not query.include_private:
            statement = statement.where(Intent.visibility != Visibility.PRIVATE)

        candidates: list[Intent] = []
        with self._db_service.get_session() as session:
            for intent in session.exec(statement):
                if query.accepts(intent):
                    candidates.append(intent)
                    if len(candidates) >= query.limit:
                        break
        return candidates

    def _analyze(self, owner_id: UUID, text: str) -> IntentAnalysis | None:
        try:
            return self._normalizer.analyze(text)
        except AnalysisFailedError:
            if self._failure_policy == AnalysisFailurePolicy.ABORT:
                raise
            logger.warning("Analysis failed for member %s; storing intent unanalyzed", owner_id)
            return None

    def _update_active(self, owner_id: UUID, mutate: Callable[[Intent], None]) -> Intent:
        with self._db_service.get_session() as session:
            intent = self._active_intent(session, owner_id)
            if intent is None:
                raise NoActiveIntentError(f"Member {owner_id} has no active intent")
            mutate(intent)
            session.add(intent)
            self._commit(session, owner_id)
            session.refresh(intent)
            return intent

    @staticmethod
    def _active_intent(session: Session, owner_id: UUID) -> Intent | None:
        statement = select(Intent).where(
            Intent.owner_id == owner_id,
            Intent.is_active == True,  # noqa: E712
        )
        return session.exec(statement).first()

    @staticmethod
    def _commit(session: Session, owner_id: UUID) -> None:
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            logger.warning("Concurrent intent write for member %s lost a race", owner_id)
            raise ConcurrentModificationError(
                f"Another active intent was written for member {owner_id}; retry the request"
            ) from e
