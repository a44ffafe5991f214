# ABOUTME: Database statistics functionality for the status command.
# ABOUTME: Provides aggregated counts of members, intents, matches and introduction requests.

from typing import Any

from sqlmodel import func, select

from intent_matcher.database.service import DatabaseService
from intent_matcher.models import AnalysisStatus, Intent, IntroductionRequest, Match, Member


def get_database_stats(db_service: DatabaseService) -> dict[str, Any]:
    """Get statistics about the stored community data.

    Args:
        db_service: The DatabaseService instance to query.

    Returns:
        Dictionary containing:
            - total_members: Number of registered members
            - active_intents: Number of active intents
            - paused_intents: Number of active intents currently paused
            - unanalyzed_intents: Number of active intents whose analysis failed
            - match_status_distribution: Dict mapping match status value to count
            - average_match_score: Mean score over all matches, or None if there are none
            - introduction_status_distribution: Dict mapping request status value to count
    """
    with db_service.get_session() as session:
        total_members = session.exec(select(func.count()).select_from(Member)).one()

        active_stmt = (
            select(func.count()).select_from(Intent).where(Intent.is_active == True)  # noqa: E712
        )
        active_intents = session.exec(active_stmt).one()

        paused_stmt = (
            select(func.count())
            .select_from(Intent)
            .where(Intent.is_active == True, Intent.is_paused == True)  # noqa: E712
        )
        paused_intents = session.exec(paused_stmt).one()

        unanalyzed_stmt = (
            select(func.count())
            .select_from(Intent)
            .where(
                Intent.is_active == True,  # noqa: E712
                Intent.analysis_status == AnalysisStatus.FAILED,
            )
        )
        unanalyzed_intents = session.exec(unanalyzed_stmt).one()

        match_stmt = select(Match.status, func.count()).group_by(
            Match.status  # type: ignore[arg-type]
        )
        match_status_distribution = {
            status.value: count for status, count in session.exec(match_stmt).all()
        }

        average_score = session.exec(select(func.avg(Match.score))).one()

        intro_stmt = select(IntroductionRequest.status, func.count()).group_by(
            IntroductionRequest.status  # type: ignore[arg-type]
        )
        introduction_status_distribution = {
            status.value: count for status, count in session.exec(intro_stmt).all()
        }

    return {
        "total_members": total_members,
        "active_intents": active_intents,
        "paused_intents": paused_intents,
        "unanalyzed_intents": unanalyzed_intents,
        "match_status_distribution": match_status_distribution,
        "average_match_score": (
            round(float(average_score), 1) if average_score is not None else None
        ),
        "introduction_status_distribution": introduction_status_distribution,
    }
