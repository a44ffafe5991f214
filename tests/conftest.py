# ABOUTME: Shared pytest fixtures for intent-matcher tests.
# ABOUTME: Provides temporary databases, member and intent factories, and analysis builders.

import itertools
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest

from intent_matcher.database import DatabaseService
from intent_matcher.models import (
    Availability,
    Intent,
    IntentAnalysis,
    IntentCategory,
    IntentType,
    Member,
)


@pytest.fixture
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def db_service(temp_db_path: Path) -> DatabaseService:
    """Create a DatabaseService with a temporary database."""
    service = DatabaseService(db_path=temp_db_path)
    service.init_db()
    return service


@pytest.fixture
def make_member(db_service: DatabaseService) -> Callable[..., Member]:
    """Factory that registers members with unique emails."""
    counter = itertools.count(1)

    def _make(first_name: str = "Ada", last_name: str = "Lovelace", email: str | None = None):
        number = next(counter)
        return db_service.add_member(email or f"member{number}@example.com", first_name, last_name)

    return _make


@pytest.fixture
def make_analysis() -> Callable[..., IntentAnalysis]:
    """Factory for IntentAnalysis objects."""

    def _make(
        intent_type: IntentType = IntentType.GIVING,
        categories: tuple[tuple[str, float], ...] = (("mentorship", 0.9),),
        domains: tuple[str, ...] = ("DeFi",),
        availability: Availability = Availability.NOT_SPECIFIED,
    ) -> IntentAnalysis:
        return IntentAnalysis(
            intent_type=intent_type,
            categories=[
                IntentCategory(category=name, confidence=confidence)
                for name, confidence in categories
            ],
            domains=list(domains),
            availability=availability,
        )

    return _make


@pytest.fixture
def build_intent(make_analysis: Callable[..., IntentAnalysis]) -> Callable[..., Intent]:
    """Factory for unsaved, analyzed Intent objects."""

    def _build(
        owner_id: UUID,
        raw_text: str = "I want to help people grow in DeFi",
        **fields: Any,
    ) -> Intent:
        analysis_fields = {
            key: fields.pop(key)
            for key in ("intent_type", "categories", "domains", "availability")
            if key in fields
        }
        intent = Intent(owner_id=owner_id, raw_text=raw_text)
        intent.apply_analysis(make_analysis(**analysis_fields))
        for key, value in fields.items():
            setattr(intent, key, value)
        return intent

    return _build


@pytest.fixture
def save_intent(
    db_service: DatabaseService, build_intent: Callable[..., Intent]
) -> Callable[..., Intent]:
    """Factory that persists an analyzed intent directly, bypassing analysis."""

    def _save(owner_id: UUID, **fields: Any) -> Intent:
        intent = build_intent(owner_id, **fields)
        with db_service.get_session() as session:
            session.add(intent)
            session.commit()
            session.refresh(intent)
        return intent

    return _save
