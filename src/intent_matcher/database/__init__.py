# ABOUTME: Database package for the intent-matcher persistence layer.
# ABOUTME: Provides DatabaseService for SQLite operations and aggregate statistics.

from intent_matcher.database.service import DatabaseService
from intent_matcher.database.stats import get_database_stats

__all__ = ["DatabaseService", "get_database_stats"]
