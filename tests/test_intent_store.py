# ABOUTME: Tests for the intent store.
# ABOUTME: Covers the intent lifecycle, failure policies, validation, and candidate search.

from datetime import timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from intent_matcher.config import AnalysisFailurePolicy
from intent_matcher.errors import (
    AnalysisFailedError,
    InvalidInputError,
    NoActiveIntentError,
    OwnerNotFoundError,
)
from intent_matcher.intents import IntentStore
from intent_matcher.matching import CandidateQuery, OverlapRule
from intent_matcher.models import AnalysisStatus, IntentType, Visibility, utcnow


@pytest.fixture
def normalizer(make_analysis) -> MagicMock:
    """A normalizer that returns a giving DeFi mentorship analysis."""
    mock = MagicMock()
    mock.analyze.return_value = make_analysis()
    return mock


@pytest.fixture
def store(db_service, normalizer) -> IntentStore:
    """An IntentStore using the abort policy."""
    return IntentStore(db_service, normalizer)


class TestCreateOrUpdate:
    """Tests for IntentStore.create_or_update."""

    def test_creates_analyzed_intent(self, store, normalizer, make_member) -> None:
        """A first submission should create an analyzed active intent."""
        member = make_member()

        intent = store.create_or_update(member.id, "  I mentor DeFi builders  ")

        normalizer.analyze.assert_called_once_with("I mentor DeFi builders")
        assert intent.raw_text == "I mentor DeFi builders"
        assert intent.intent_type == IntentType.GIVING
        assert intent.domains == ["DeFi"]
        assert intent.category_names == ["mentorship"]
        assert intent.analysis_status == AnalysisStatus.COMPLETE
        assert intent.is_active is True
        assert intent.visibility == Visibility.MEMBERS_ONLY
        assert intent.consent_to_match is True
        assert intent.consent_to_contact is False

    def test_second_submission_updates_in_place(
        self, store, normalizer, make_member, make_analysis
    ) -> None:
        """Two submissions leave one active intent reflecting the second."""
        member = make_member()
        first = store.create_or_update(member.id, "I mentor DeFi builders")

        normalizer.analyze.return_value = make_analysis(
            intent_type=IntentType.RECEIVING, domains=("NFT",)
        )
        second = store.create_or_update(
            member.id, "I want NFT advice", visibility="public", consent_to_contact=True
        )

        assert second.id == first.id
        current = store.get(member.id)
        assert current is not None
        assert current.raw_text == "I want NFT advice"
        assert current.intent_type == IntentType.RECEIVING
        assert current.domains == ["NFT"]
        assert current.visibility == Visibility.PUBLIC
        assert current.consent_to_contact is True
        assert current.last_processed_at >= first.last_processed_at

    def test_unknown_owner_rejected(self, store, normalizer) -> None:
        """Intents can only be written for registered members."""
        with pytest.raises(OwnerNotFoundError):
            store.create_or_update(uuid4(), "I mentor DeFi builders")
        normalizer.analyze.assert_not_called()

    @pytest.mark.parametrize("text", ["", "   ", "x" * 2001])
    def test_invalid_text_rejected(self, store, normalizer, make_member, text: str) -> None:
        """Blank and oversized texts should be rejected before analysis."""
        member = make_member()
        with pytest.raises(InvalidInputError):
            store.create_or_update(member.id, text)
        normalizer.analyze.assert_not_called()

    def test_text_at_maximum_length_accepted(self, store, make_member) -> None:
        """Exactly 2000 characters is allowed."""
        member = make_member()
        intent = store.create_or_update(member.id, "x" * 2000)
        assert len(intent.raw_text) == 2000

    def test_invalid_visibility_rejected(self, store, make_member) -> None:
        """Unknown visibility values should raise InvalidInputError."""
        member = make_member()
        with pytest.raises(InvalidInputError):
            store.create_or_update(member.id, "I mentor DeFi builders", visibility="everyone")

    def test_abort_policy_writes_nothing(self, store, normalizer, make_member) -> None:
        """With the abort policy a failed analysis leaves storage unchanged."""
        member = make_member()
        normalizer.analyze.side_effect = AnalysisFailedError("provider down")

        with pytest.raises(AnalysisFailedError):
            store.create_or_update(member.id, "I mentor DeFi builders")

        assert store.get(member.id) is None

    def test_abort_policy_keeps_previous_intent(self, store, normalizer, make_member) -> None:
        """A failed update should not touch the existing intent."""
        member = make_member()
        store.create_or_update(member.id, "I mentor DeFi builders")
        normalizer.analyze.side_effect = AnalysisFailedError("provider down")

        with pytest.raises(AnalysisFailedError):
            store.create_or_update(member.id, "Something new")

        current = store.get(member.id)
        assert current is not None
        assert current.raw_text == "I mentor DeFi builders"

    def test_store_unanalyzed_policy(self, db_service, normalizer, make_member) -> None:
        """With store_unanalyzed the intent is saved but never matchable."""
        store = IntentStore(
            db_service, normalizer, failure_policy=AnalysisFailurePolicy.STORE_UNANALYZED
        )
        member = make_member()
        normalizer.analyze.side_effect = AnalysisFailedError("provider down")

        intent = store.create_or_update(member.id, "I mentor DeFi builders")

        assert intent.analysis_status == AnalysisStatus.FAILED
        assert intent.intent_type is None
        assert intent.categories == []
        assert intent.domains == []
        assert intent.is_matchable is False


class TestLifecycle:
    """Tests for pause, resume, delete, visibility and consent."""

    def test_operations_require_active_intent(self, store, make_member) -> None:
        """Lifecycle operations without an active intent raise NoActiveIntentError."""
        member = make_member()
        for operation in (store.pause, store.resume, store.soft_delete):
            with pytest.raises(NoActiveIntentError):
                operation(member.id)
        with pytest.raises(NoActiveIntentError):
            store.set_visibility(member.id, Visibility.PUBLIC)
        with pytest.raises(NoActiveIntentError):
            store.set_consent(member.id, True, True)

    def test_pause_and_resume_toggle_candidacy(self, store, normalizer, make_member, make_analysis):
        """A paused intent disappears from candidates and returns on resume unchanged."""
        seeker = make_member()
        mentor = make_member()
        mentor_intent = store.create_or_update(mentor.id, "I mentor DeFi builders")
        normalizer.analyze.return_value = make_analysis(intent_type=IntentType.RECEIVING)
        store.create_or_update(seeker.id, "I need a DeFi mentor")

        assert [c.id for c in store.find_candidates(seeker.id)] == [mentor_intent.id]

        store.pause(mentor.id)
        assert store.find_candidates(seeker.id) == []

        resumed = store.resume(mentor.id)
        assert [c.id for c in store.find_candidates(seeker.id)] == [mentor_intent.id]
        assert resumed.raw_text == mentor_intent.raw_text
        assert resumed.categories == mentor_intent.categories

    def test_soft_delete_keeps_record(self, store, make_member) -> None:
        """A deleted intent is no longer active but can still be fetched by ID."""
        member = make_member()
        intent = store.create_or_update(member.id, "I mentor DeFi builders")

        store.soft_delete(member.id)

        assert store.get(member.id) is None
        historical = store.get_by_id(intent.id)
        assert historical is not None
        assert historical.is_active is False

    def test_new_intent_after_delete(self, store, make_member) -> None:
        """Submitting after a delete creates a fresh active intent."""
        member = make_member()
        old = store.create_or_update(member.id, "I mentor DeFi builders")
        store.soft_delete(member.id)

        new = store.create_or_update(member.id, "I mentor DeFi builders again")

        assert new.id != old.id
        assert new.is_active is True

    def test_set_visibility_and_consent(self, store, make_member) -> None:
        """Visibility and consent updates should persist."""
        member = make_member()
        store.create_or_update(member.id, "I mentor DeFi builders")

        store.set_visibility(member.id, "private")
        store.set_consent(member.id, consent_to_match=False, consent_to_contact=True)

        current = store.get(member.id)
        assert current.visibility == Visibility.PRIVATE
        assert current.consent_to_match is False
        assert current.consent_to_contact is True
        assert current.is_matchable is False

    def test_set_visibility_rejects_unknown(self, store, make_member) -> None:
        """An unknown visibility is rejected before touching storage."""
        member = make_member()
        store.create_or_update(member.id, "I mentor DeFi builders")
        with pytest.raises(InvalidInputError):
            store.set_visibility(member.id, "secret")


class TestCandidateSearch:
    """Tests for find_candidates, match_pool and search."""

    def test_excludes_own_and_incompatible_intents(
        self, store, make_member, save_intent
    ) -> None:
        """Only other members' complementary, matchable intents are returned."""
        seeker = make_member()
        save_intent(seeker.id, intent_type=IntentType.RECEIVING)
        giver = save_intent(make_member().id, intent_type=IntentType.GIVING)
        both = save_intent(make_member().id, intent_type=IntentType.BOTH)
        save_intent(make_member().id, intent_type=IntentType.RECEIVING)
        save_intent(make_member().id, consent_to_match=False)
        save_intent(make_member().id, analysis_status=AnalysisStatus.FAILED)
        save_intent(make_member().id, is_active=False)

        found = {c.id for c in store.find_candidates(seeker.id)}

        assert found == {giver.id, both.id}

    def test_requires_shared_domain_or_category(self, store, make_member, save_intent) -> None:
        """Candidates must overlap on a domain or a category name."""
        seeker = make_member()
        save_intent(
            seeker.id,
            intent_type=IntentType.RECEIVING,
            domains=("DeFi",),
            categories=(("mentorship", 0.9),),
        )
        by_domain = save_intent(make_member().id, domains=("DeFi",), categories=())
        by_category = save_intent(
            make_member().id, domains=("NFT",), categories=(("mentorship", 0.5),)
        )
        save_intent(make_member().id, domains=("NFT",), categories=(("hiring", 0.5),))

        found = {c.id for c in store.find_candidates(seeker.id)}

        assert found == {by_domain.id, by_category.id}

    def test_most_recently_processed_first_with_limit(
        self, store, make_member, save_intent
    ) -> None:
        """Results are ordered by processing time and capped at the limit."""
        seeker = make_member()
        save_intent(seeker.id, intent_type=IntentType.RECEIVING)
        now = utcnow()
        older = save_intent(make_member().id, last_processed_at=now - timedelta(days=2))
        newest = save_intent(make_member().id, last_processed_at=now)
        middle = save_intent(make_member().id, last_processed_at=now - timedelta(days=1))

        assert [c.id for c in store.find_candidates(seeker.id)] == [
            newest.id,
            middle.id,
            older.id,
        ]
        assert [c.id for c in store.find_candidates(seeker.id, limit=2)] == [
            newest.id,
            middle.id,
        ]

    def test_unmatchable_owner_gets_no_candidates(self, store, make_member, save_intent) -> None:
        """A paused or missing owner intent yields an empty list."""
        paused = make_member()
        save_intent(paused.id, intent_type=IntentType.RECEIVING, is_paused=True)
        save_intent(make_member().id)

        assert store.find_candidates(paused.id) == []
        assert store.find_candidates(uuid4()) == []

    def test_match_pool_requires_shared_domain(self, store, make_member, save_intent) -> None:
        """Generation candidates must share a domain, not just a category."""
        seeker = make_member()
        seeker_intent = save_intent(seeker.id, intent_type=IntentType.RECEIVING)
        by_domain = save_intent(make_member().id, categories=())
        save_intent(make_member().id, domains=("NFT",))

        pool = store.match_pool(seeker_intent, limit=10)

        assert [c.id for c in pool] == [by_domain.id]

    def test_match_pool_without_domains_accepts_any(
        self, store, make_member, save_intent
    ) -> None:
        """An intent with no domains considers every compatible candidate."""
        seeker = make_member()
        seeker_intent = save_intent(seeker.id, intent_type=IntentType.RECEIVING, domains=())
        save_intent(make_member().id, domains=("NFT",))
        save_intent(make_member().id, domains=("DAO",), categories=())

        assert len(store.match_pool(seeker_intent, limit=10)) == 2

    def test_search_with_explicit_query(self, store, make_member, save_intent) -> None:
        """search should accept a hand-built CandidateQuery."""
        giver = save_intent(make_member().id)
        query = CandidateQuery(
            owner_id=uuid4(),
            intent_types=[IntentType.GIVING],
            domains=["DeFi"],
            overlap=OverlapRule.DOMAINS,
            limit=5,
        )

        assert [c.id for c in store.search(query)] == [giver.id]

    def test_limit_must_be_positive(self, store, make_member, save_intent) -> None:
        """A limit below one is rejected with an input error."""
        seeker = make_member()
        save_intent(seeker.id, intent_type=IntentType.RECEIVING)

        with pytest.raises(InvalidInputError):
            store.find_candidates(seeker.id, limit=0)

    def test_large_limit_is_accepted(self, store, make_member, save_intent) -> None:
        """Limits beyond a thousand are allowed."""
        seeker = make_member()
        save_intent(seeker.id, intent_type=IntentType.RECEIVING)
        giver = save_intent(make_member().id)

        assert [c.id for c in store.find_candidates(seeker.id, limit=5000)] == [giver.id]

    def test_private_intents_are_not_browsable(self, store, make_member, save_intent) -> None:
        """Private intents never show up when browsing for candidates."""
        seeker = make_member()
        save_intent(seeker.id, intent_type=IntentType.RECEIVING)
        visible = save_intent(make_member().id, visibility=Visibility.PUBLIC)
        save_intent(make_member().id, visibility=Visibility.PRIVATE)

        assert [c.id for c in store.find_candidates(seeker.id)] == [visible.id]

    def test_private_intents_stay_in_match_pool(self, store, make_member, save_intent) -> None:
        """Private intents with consent still take part in algorithmic matching."""
        seeker = make_member()
        seeker_intent = save_intent(seeker.id, intent_type=IntentType.RECEIVING)
        hidden = save_intent(make_member().id, visibility=Visibility.PRIVATE)

        assert [c.id for c in store.match_pool(seeker_intent, limit=10)] == [hidden.id]
