# ABOUTME: Status and detail panels for intents, matches, introductions and database statistics.
# ABOUTME: Provides Rich panels summarizing operations and showing single records in full.

from typing import Any
from uuid import UUID

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from intent_matcher.models import AnalysisStatus, Intent, IntroductionRequest, Match


def display_generation_summary(count: int, member_name: str, duration_seconds: float) -> Panel:
    """Display a summary panel for a match generation run.

    Args:
        count: Number of new matches created.
        member_name: Name of the member matches were generated for.
        duration_seconds: Time taken to generate.

    Returns:
        Rich Panel containing the generation summary.
    """
    if count == 0:
        result_text = "[yellow]No new matches[/yellow]"
    elif count == 1:
        result_text = "[green]1 new match[/green]"
    else:
        result_text = f"[green]{count} new matches[/green]"

    content = Text()
    content.append("Member: ", style="dim")
    content.append(f"{member_name}\n", style="cyan")
    content.append("Results: ", style="dim")
    content.append_text(Text.from_markup(result_text))
    content.append("\n")
    content.append("Duration: ", style="dim")
    content.append(f"{duration_seconds:.2f}s", style="blue")

    return Panel(
        content,
        title="Match Generation",
        border_style="green" if count > 0 else "yellow",
        padding=(1, 2),
    )


def _details_table() -> Table:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Label", style="dim")
    table.add_column("Value")
    return table


def _format_distribution(distribution: dict[str, int]) -> str:
    return ", ".join(f"{status}: {count}" for status, count in sorted(distribution.items()))


def display_stats(stats: dict[str, Any]) -> Panel:
    """Render database statistics as a Rich Panel.

    Args:
        stats: Dictionary of database statistics from get_database_stats.

    Returns:
        Rich Panel containing formatted database statistics.
    """
    table = _details_table()
    table.add_row("Members:", f"[cyan]{stats.get('total_members', 0)}[/cyan]")
    table.add_row("Active Intents:", f"[cyan]{stats.get('active_intents', 0)}[/cyan]")
    table.add_row("Paused Intents:", f"[cyan]{stats.get('paused_intents', 0)}[/cyan]")
    table.add_row("Unanalyzed Intents:", f"[cyan]{stats.get('unanalyzed_intents', 0)}[/cyan]")

    match_dist = stats.get("match_status_distribution") or {}
    table.add_row("Matches:", f"[cyan]{sum(match_dist.values())}[/cyan]")
    if match_dist:
        table.add_row("By Status:", _format_distribution(match_dist))

    average = stats.get("average_match_score")
    if average is not None:
        table.add_row("Average Score:", f"[cyan]{average}[/cyan]")

    intro_dist = stats.get("introduction_status_distribution") or {}
    table.add_row("Introductions:", f"[cyan]{sum(intro_dist.values())}[/cyan]")
    if intro_dist:
        table.add_row("By Status:", _format_distribution(intro_dist))

    return Panel(
        table,
        title="Database Statistics",
        border_style="blue",
        padding=(1, 2),
    )


def display_intent(intent: Intent) -> Panel:
    """Render a member's intent and its analysis.

    Args:
        intent: The intent to show.

    Returns:
        Rich Panel with the raw text, analysis and flags.
    """
    table = _details_table()
    table.add_row("Intent:", Text(intent.raw_text))

    if intent.analysis_status == AnalysisStatus.FAILED:
        table.add_row("Analysis:", "[red]failed - this intent cannot be matched[/red]")
    else:
        intent_type = intent.intent_type.value if intent.intent_type else "-"
        table.add_row("Type:", f"[cyan]{intent_type}[/cyan]")
        for entry in intent.category_entries:
            subcategories = ", ".join(entry.subcategories) or "-"
            table.add_row(
                "Category:",
                f"{entry.category} ({entry.confidence:.0%}) [dim]{subcategories}[/dim]",
            )
        table.add_row("Domains:", ", ".join(intent.domains) or "-")
        level = intent.experience_level.value if intent.experience_level else "-"
        table.add_row("Experience:", level)
        table.add_row("Availability:", intent.availability.value)

    table.add_row("Visibility:", intent.visibility.value)
    table.add_row("Consent:", _consent_text(intent))
    table.add_row("Updated:", intent.last_processed_at.strftime("%Y-%m-%d %H:%M UTC"))

    return Panel(
        table,
        title="Paused Intent" if intent.is_paused else "Active Intent",
        border_style="yellow" if intent.is_paused else "green",
        padding=(1, 2),
    )


def _consent_text(intent: Intent) -> str:
    match_text = "[green]match[/green]" if intent.consent_to_match else "[red]no match[/red]"
    contact_text = (
        "[green]contact[/green]" if intent.consent_to_contact else "[red]no contact[/red]"
    )
    return f"{match_text}, {contact_text}"


def display_match(match: Match, viewer_id: UUID, names: dict[UUID, str]) -> Panel:
    """Render a single match with its explanation.

    Args:
        match: The match to show.
        viewer_id: Member viewing the match.
        names: Full names keyed by member ID.

    Returns:
        Rich Panel with the score, status and explanation.
    """
    explanation = match.explanation_details
    counterpart = match.counterpart_of(viewer_id)

    table = _details_table()
    table.add_row("With:", f"[cyan]{names.get(counterpart, str(counterpart))}[/cyan]")
    table.add_row("Score:", f"[bold]{match.score}[/bold]/100")
    table.add_row("Status:", match.status.value)
    table.add_row("Why:", Text(explanation.reason))
    if explanation.shared_domains:
        table.add_row("Shared Domains:", ", ".join(explanation.shared_domains))
    for note in explanation.complementary_intents:
        table.add_row("Complement:", note)
    table.add_row("Confidence:", f"{explanation.confidence:.0%}")
    table.add_row("Expires:", match.expires_at.strftime("%Y-%m-%d"))

    return Panel(
        table,
        title=f"Match {match.id}",
        border_style="green" if match.score >= 70 else "yellow",
        padding=(1, 2),
    )


def display_introduction(request: IntroductionRequest, names: dict[UUID, str]) -> Panel:
    """Render a single introduction request.

    Args:
        request: The request to show.
        names: Full names keyed by member ID.

    Returns:
        Rich Panel with the parties, message and status.
    """
    table = _details_table()
    table.add_row("From:", names.get(request.from_member_id, str(request.from_member_id)))
    table.add_row("To:", names.get(request.to_member_id, str(request.to_member_id)))
    table.add_row("Category:", request.intent_category.value)
    if request.intent_description:
        table.add_row("About:", Text(request.intent_description))
    table.add_row("Message:", Text(request.message))
    table.add_row("Status:", request.status.value)
    if request.responded_at is not None:
        table.add_row("Responded:", request.responded_at.strftime("%Y-%m-%d %H:%M UTC"))
    table.add_row("Expires:", request.expires_at.strftime("%Y-%m-%d"))

    return Panel(
        table,
        title="Introduction Request",
        border_style="cyan",
        padding=(1, 2),
    )


def display_sweep_summary(matches_expired: int, introductions_expired: int) -> Panel:
    """Summarize an expiry sweep."""
    content = Text()
    content.append("Matches expired: ", style="dim")
    content.append(f"{matches_expired}\n", style="cyan")
    content.append("Introduction requests expired: ", style="dim")
    content.append(str(introductions_expired), style="cyan")

    return Panel(
        content,
        title="Expiry Sweep",
        border_style="blue",
        padding=(1, 2),
    )
