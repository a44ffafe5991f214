# ABOUTME: Rich table rendering for members, matches and introduction requests.
# ABOUTME: Provides table classes with color-coded scores and statuses and truncated long text.

from uuid import UUID

from rich.table import Table

from intent_matcher.models import IntroductionRequest, Match, MatchStatus, Member

STATUS_COLORS: dict[str, str] = {
    "pending": "yellow",
    "accepted": "green",
    "declined": "red",
    "expired": "dim",
}


def _truncate(text: str | None, max_length: int) -> str:
    """Truncate text to max length with ellipsis.

    Args:
        text: The text to truncate, or None.
        max_length: Maximum length before truncation.

    Returns:
        Truncated text with ellipsis, or empty string if None.
    """
    if text is None:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def _status_styled(status: str) -> str:
    color = STATUS_COLORS.get(status, "white")
    return f"[{color}]{status}[/{color}]"


class MemberTable:
    """Renders Member records as a Rich table."""

    def render(self, members: list[Member], title: str | None = "Members") -> Table:
        """Render members as a Rich Table.

        Args:
            members: Members to display.
            title: Optional title for the table.

        Returns:
            Rich Table with one row per member.
        """
        table = Table(title=title, show_lines=False)
        table.add_column("#", style="dim", width=4)
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Email", style="white")
        table.add_column("Joined", style="dim")

        for idx, member in enumerate(members, 1):
            table.add_row(
                str(idx),
                member.full_name,
                member.email,
                member.created_at.strftime("%Y-%m-%d"),
            )
        return table


class MatchTable:
    """Renders Match data as Rich tables from one member's point of view.

    Creates formatted tables with color-coded scores and statuses,
    truncated domain lists, and an unseen marker for the viewer.
    """

    MAX_DOMAINS_LENGTH = 30

    def _get_score_styled(self, score: int) -> str:
        """Get the score with color styling.

        Args:
            score: Match score between 0 and 100.

        Returns:
            Rich-formatted string, green for strong matches and red for weak ones.
        """
        if score >= 70:
            color = "green"
        elif score >= 50:
            color = "yellow"
        else:
            color = "red"
        return f"[{color}]{score}[/{color}]"

    def render(
        self,
        matches: list[Match],
        viewer_id: UUID,
        names: dict[UUID, str],
        title: str | None = "Matches",
    ) -> Table:
        """Render matches as a Rich Table.

        Args:
            matches: Matches to display.
            viewer_id: Member looking at the table; the other party is shown.
            names: Full names keyed by member ID.
            title: Optional title for the table.

        Returns:
            Rich Table with formatted match data.
        """
        table = Table(title=title, show_lines=False)
        table.add_column("#", style="dim", width=4)
        table.add_column("Match ID", style="dim", no_wrap=True)
        table.add_column("With", style="cyan", no_wrap=True)
        table.add_column("Score", width=6)
        table.add_column("Status", width=9)
        table.add_column("Shared Domains", style="magenta", max_width=self.MAX_DOMAINS_LENGTH)
        table.add_column("New", width=4)
        table.add_column("Expires", style="dim")

        for idx, match in enumerate(matches, 1):
            counterpart = match.counterpart_of(viewer_id)
            seen = match.viewed_by_a if viewer_id == match.member_a_id else match.viewed_by_b
            domains = ", ".join(match.explanation_details.shared_domains)
            expires = ""
            if match.status == MatchStatus.PENDING:
                expires = match.expires_at.strftime("%Y-%m-%d")

            table.add_row(
                str(idx),
                str(match.id),
                names.get(counterpart, str(counterpart)),
                self._get_score_styled(match.score),
                _status_styled(match.status.value),
                _truncate(domains, self.MAX_DOMAINS_LENGTH),
                "" if seen else "[bold yellow]*[/bold yellow]",
                expires,
            )

        return table


class IntroductionTable:
    """Renders IntroductionRequest data as Rich tables."""

    MAX_MESSAGE_LENGTH = 40

    def render(
        self,
        requests: list[IntroductionRequest],
        names: dict[UUID, str],
        sent: bool,
        title: str | None = None,
    ) -> Table:
        """Render introduction requests as a Rich Table.

        Args:
            requests: Requests to display.
            names: Full names keyed by member ID.
            sent: True for the sender's outbox, False for the recipient's inbox.
            title: Optional title for the table.

        Returns:
            Rich Table with formatted request data.
        """
        table = Table(title=title, show_lines=False)
        table.add_column("#", style="dim", width=4)
        table.add_column("Request ID", style="dim", no_wrap=True)
        table.add_column("To" if sent else "From", style="cyan", no_wrap=True)
        table.add_column("Category", style="magenta")
        table.add_column("Status", width=9)
        table.add_column("Message", style="white", max_width=self.MAX_MESSAGE_LENGTH)
        table.add_column("Sent", style="dim")

        for idx, request in enumerate(requests, 1):
            other = request.to_member_id if sent else request.from_member_id
            table.add_row(
                str(idx),
                str(request.id),
                names.get(other, str(other)),
                request.intent_category.value,
                _status_styled(request.status.value),
                _truncate(request.message, self.MAX_MESSAGE_LENGTH),
                request.created_at.strftime("%Y-%m-%d"),
            )

        return table
