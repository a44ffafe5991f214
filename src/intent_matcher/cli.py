# ABOUTME: CLI for the intent-matcher networking engine using Typer.
# ABOUTME: Provides login, member, intent, match, introduction, status and sweep commands.

import logging
import time
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from typing import Annotated
from uuid import UUID

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt

from intent_matcher.analysis import IntentNormalizer, MatchExplainer, OpenAIClient
from intent_matcher.analysis.exceptions import ProviderError
from intent_matcher.auth import ApiKeyManager
from intent_matcher.config import AnalysisFailurePolicy, Settings, get_settings
from intent_matcher.database import DatabaseService, get_database_stats
from intent_matcher.display import (
    IntroductionTable,
    MatchTable,
    MemberTable,
    display_api_key_help,
    display_error,
    display_generation_summary,
    display_intent,
    display_introduction,
    display_match,
    display_stats,
    display_sweep_summary,
)
from intent_matcher.errors import IntentMatcherError, NotFoundError
from intent_matcher.intents import IntentStore
from intent_matcher.introductions import IntroductionWorkflow
from intent_matcher.matching import MatchOrchestrator
from intent_matcher.models import IntroductionCategory, Member, Visibility

app = typer.Typer(
    name="intent-matcher",
    help="Match community members by what they seek and what they offer.",
    add_completion=False,
)
members_app = typer.Typer(help="Register and list community members.")
intent_app = typer.Typer(help="Submit and manage a member's intent.")
matches_app = typer.Typer(help="Generate and respond to matches.")
intro_app = typer.Typer(help="Send and answer introduction requests.")

app.add_typer(members_app, name="members")
app.add_typer(intent_app, name="intent")
app.add_typer(matches_app, name="matches")
app.add_typer(intro_app, name="intro")

console = Console()

_state = {"verbose": False}

DECISION_ALIASES = {"accept": "accepted", "decline": "declined"}

EmailArg = Annotated[str, typer.Argument(help="Email address of the acting member.")]


def _configure_logging(settings: Settings, verbose: bool) -> None:
    """Route library logging through Rich on stderr."""
    level = logging.DEBUG if verbose else logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=verbose)],
        force=True,
    )


@contextmanager
def _handle_errors() -> Generator[None, None, None]:
    """Render domain errors as panels and exit with status 1."""
    try:
        yield
    except IntentMatcherError as e:
        console.print(display_error(e, verbose=_state["verbose"]))
        raise typer.Exit(code=1) from None


def _get_db_service() -> DatabaseService:
    settings = get_settings()
    db_service = DatabaseService(db_path=settings.db_path)
    db_service.init_db()
    return db_service


def _build_client(settings: Settings) -> OpenAIClient | None:
    """Build an OpenAI client if an API key is configured."""
    api_key = ApiKeyManager().resolve_key(settings)
    if not api_key:
        return None
    return OpenAIClient(
        api_key, model=settings.openai_model, timeout=settings.llm_timeout_seconds
    )


def _build_intent_store(db_service: DatabaseService, client: OpenAIClient | None) -> IntentStore:
    settings = get_settings()
    return IntentStore(
        db_service,
        IntentNormalizer(client),
        failure_policy=settings.analysis_failure_policy,
    )


def _build_orchestrator(db_service: DatabaseService) -> MatchOrchestrator:
    settings = get_settings()
    client = _build_client(settings)
    return MatchOrchestrator(
        db_service,
        _build_intent_store(db_service, client),
        MatchExplainer(client),
        min_score=settings.min_match_score,
        candidate_overfetch=settings.candidate_overfetch,
        expiry_days=settings.match_expiry_days,
    )


def _build_workflow(db_service: DatabaseService) -> IntroductionWorkflow:
    return IntroductionWorkflow(db_service, expiry_days=get_settings().introduction_expiry_days)


def _resolve_member(db_service: DatabaseService, email: str) -> Member:
    member = db_service.get_member_by_email(email)
    if member is None:
        raise NotFoundError(f"No member with email {email}")
    return member


def _names(db_service: DatabaseService, member_ids: Iterable[UUID]) -> dict[UUID, str]:
    names: dict[UUID, str] = {}
    for member_id in set(member_ids):
        member = db_service.get_member(member_id)
        if member is not None:
            names[member_id] = member.full_name
    return names


def _normalize_decision(decision: str) -> str:
    value = decision.strip().lower()
    return DECISION_ALIASES.get(value, value)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging and error tracebacks."),
    ] = False,
) -> None:
    """Intent matching CLI.

    Members describe what they seek or offer; the engine analyzes the text,
    proposes scored matches, and handles introduction requests.
    """
    _state["verbose"] = verbose
    _configure_logging(get_settings(), verbose)
    if ctx.invoked_subcommand is None:
        console.print("[dim]Use --help to see available commands.[/dim]")


@app.command()
def login(
    validate: Annotated[
        bool,
        typer.Option(
            "--validate/--no-validate",
            help="Check the key with OpenAI before storing.",
        ),
    ] = True,
) -> None:
    """Store the OpenAI API key used for intent analysis.

    The key is kept in the OS keyring. INTENT_MATCHER_OPENAI_API_KEY
    takes precedence when set.
    """
    settings = get_settings()
    key_manager = ApiKeyManager()

    console.print()
    console.print(display_api_key_help())
    console.print()

    api_key = Prompt.ask("[bold]Paste your OpenAI API key[/bold]", password=True)

    if not key_manager.validate_key_format(api_key):
        console.print("[red]Error: Invalid API key format.[/red]")
        console.print(
            f"[dim]The key should be at least {key_manager.MIN_KEY_LENGTH} characters "
            "with no spaces.[/dim]"
        )
        raise typer.Exit(code=1)

    if validate:
        console.print("[dim]Validating key with OpenAI...[/dim]")
        try:
            client = OpenAIClient(
                api_key, model=settings.openai_model, timeout=settings.llm_timeout_seconds
            )
            if not client.validate_key():
                console.print("[red]Error: OpenAI rejected the API key.[/red]")
                raise typer.Exit(code=1)
        except ProviderError as e:
            console.print(f"[red]Error: Could not validate the key - {e}[/red]")
            raise typer.Exit(code=1) from None

    key_manager.store_key(api_key)
    console.print("[green]Success! API key stored in the keyring.[/green]")


@app.command()
def logout() -> None:
    """Remove the stored OpenAI API key from the keyring."""
    key_manager = ApiKeyManager()
    if key_manager.get_key() is None:
        console.print("[yellow]No API key stored in the keyring.[/yellow]")
        return

    key_manager.delete_key()
    console.print("[green]API key removed from the keyring.[/green]")
    if get_settings().openai_api_key:
        console.print("[dim]INTENT_MATCHER_OPENAI_API_KEY is still set and will be used.[/dim]")


@members_app.command("add")
def members_add(
    email: Annotated[str, typer.Argument(help="Member email address.")],
    first_name: Annotated[str, typer.Option("--first", "-f", help="First name.")],
    last_name: Annotated[str, typer.Option("--last", "-l", help="Last name.")],
) -> None:
    """Register a new member."""
    db_service = _get_db_service()
    with _handle_errors():
        member = db_service.add_member(email, first_name, last_name)
    console.print(f"[green]Added member [bold]{member.full_name}[/bold] ({member.email}).[/green]")


@members_app.command("list")
def members_list(
    limit: Annotated[int, typer.Option("--limit", help="Maximum members to show.")] = 100,
) -> None:
    """List registered members."""
    db_service = _get_db_service()
    members = db_service.get_members(limit=limit)
    if not members:
        console.print("[yellow]No members registered.[/yellow]")
        return
    console.print(MemberTable().render(members))


@intent_app.command("submit")
def intent_submit(
    email: EmailArg,
    text: Annotated[str, typer.Argument(help="What you are looking for or offering.")],
    visibility: Annotated[
        Visibility, typer.Option("--visibility", help="Who may discover the intent.")
    ] = Visibility.MEMBERS_ONLY,
    consent_to_match: Annotated[
        bool, typer.Option("--match/--no-match", help="Take part in algorithmic matching.")
    ] = True,
    consent_to_contact: Annotated[
        bool, typer.Option("--contact/--no-contact", help="Allow other members to contact you.")
    ] = False,
) -> None:
    """Create or replace a member's intent.

    The text is analyzed before anything is saved; a second submission
    replaces the first. Without an API key the intent is only stored when
    the analysis failure policy is store_unanalyzed.
    """
    settings = get_settings()
    db_service = _get_db_service()
    client = _build_client(settings)
    if client is None and settings.analysis_failure_policy == AnalysisFailurePolicy.ABORT:
        console.print("[red]Error: No OpenAI API key configured.[/red]")
        console.print(display_api_key_help())
        raise typer.Exit(code=1)

    store = _build_intent_store(db_service, client)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        console.print("[dim]Analyzing intent...[/dim]")
        intent = store.create_or_update(
            member.id,
            text,
            visibility=visibility,
            consent_to_match=consent_to_match,
            consent_to_contact=consent_to_contact,
        )
    console.print(display_intent(intent))


@intent_app.command("show")
def intent_show(email: EmailArg) -> None:
    """Show a member's active intent."""
    db_service = _get_db_service()
    store = _build_intent_store(db_service, None)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        intent = store.get(member.id)
    if intent is None:
        console.print("[yellow]No active intent. Use 'intent submit' to create one.[/yellow]")
        return
    console.print(display_intent(intent))


@intent_app.command("pause")
def intent_pause(email: EmailArg) -> None:
    """Pause a member's intent so it is left out of matching."""
    db_service = _get_db_service()
    store = _build_intent_store(db_service, None)
    with _handle_errors():
        store.pause(_resolve_member(db_service, email).id)
    console.print("[green]Intent paused.[/green]")


@intent_app.command("resume")
def intent_resume(email: EmailArg) -> None:
    """Resume a paused intent."""
    db_service = _get_db_service()
    store = _build_intent_store(db_service, None)
    with _handle_errors():
        store.resume(_resolve_member(db_service, email).id)
    console.print("[green]Intent resumed.[/green]")


@intent_app.command("delete")
def intent_delete(email: EmailArg) -> None:
    """Deactivate a member's intent. Existing matches are kept."""
    db_service = _get_db_service()
    store = _build_intent_store(db_service, None)
    with _handle_errors():
        store.soft_delete(_resolve_member(db_service, email).id)
    console.print("[green]Intent deleted.[/green]")


@intent_app.command("visibility")
def intent_visibility(
    email: EmailArg,
    visibility: Annotated[Visibility, typer.Argument(help="New visibility.")],
) -> None:
    """Change who may discover a member's intent."""
    db_service = _get_db_service()
    store = _build_intent_store(db_service, None)
    with _handle_errors():
        intent = store.set_visibility(_resolve_member(db_service, email).id, visibility)
    console.print(f"[green]Visibility set to {intent.visibility.value}.[/green]")


@intent_app.command("consent")
def intent_consent(
    email: EmailArg,
    consent_to_match: Annotated[
        bool, typer.Option("--match/--no-match", help="Take part in algorithmic matching.")
    ],
    consent_to_contact: Annotated[
        bool, typer.Option("--contact/--no-contact", help="Allow other members to contact you.")
    ],
) -> None:
    """Update both consent flags on a member's intent."""
    db_service = _get_db_service()
    store = _build_intent_store(db_service, None)
    with _handle_errors():
        intent = store.set_consent(
            _resolve_member(db_service, email).id, consent_to_match, consent_to_contact
        )
    console.print(display_intent(intent))


@intent_app.command("candidates")
def intent_candidates(
    email: EmailArg,
    limit: Annotated[int, typer.Option("--limit", help="Maximum candidates to show.")] = 20,
) -> None:
    """List members whose intents complement this member's."""
    db_service = _get_db_service()
    store = _build_intent_store(db_service, None)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        candidates = store.find_candidates(member.id, limit=limit)

    if not candidates:
        console.print("[yellow]No compatible intents found.[/yellow]")
        return

    names = _names(db_service, (c.owner_id for c in candidates))
    for candidate in candidates:
        console.print(f"[bold cyan]{names.get(candidate.owner_id, candidate.owner_id)}[/bold cyan]")
        console.print(display_intent(candidate))


@matches_app.command("generate")
def matches_generate(
    email: EmailArg,
    limit: Annotated[
        int | None, typer.Option("--limit", help="Maximum new matches to create.")
    ] = None,
) -> None:
    """Generate new matches for a member."""
    db_service = _get_db_service()
    orchestrator = _build_orchestrator(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        started = time.perf_counter()
        matches = orchestrator.generate_matches(
            member.id, limit=limit if limit is not None else get_settings().default_match_limit
        )
        duration = time.perf_counter() - started

    if matches:
        names = _names(db_service, (m.member_b_id for m in matches))
        console.print(MatchTable().render(matches, member.id, names, title="New Matches"))
        console.print()
    console.print(display_generation_summary(len(matches), member.full_name, duration))


@matches_app.command("list")
def matches_list(
    email: EmailArg,
    status: Annotated[
        str | None, typer.Option("--status", "-s", help="Only show matches in this status.")
    ] = None,
) -> None:
    """List a member's matches, best first."""
    db_service = _get_db_service()
    orchestrator = _build_orchestrator(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        matches = orchestrator.get_matches(member.id, status=status)

    if not matches:
        console.print("[yellow]No matches found.[/yellow]")
        return
    names = _names(db_service, (m.counterpart_of(member.id) for m in matches))
    console.print(MatchTable().render(matches, member.id, names))


@matches_app.command("view")
def matches_view(
    email: EmailArg,
    match_id: Annotated[UUID, typer.Argument(help="Match ID.")],
) -> None:
    """Show a match in full and mark it as seen."""
    db_service = _get_db_service()
    orchestrator = _build_orchestrator(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        match = orchestrator.mark_viewed(match_id, member.id)
    names = _names(db_service, (match.member_a_id, match.member_b_id))
    console.print(display_match(match, member.id, names))


@matches_app.command("respond")
def matches_respond(
    email: EmailArg,
    match_id: Annotated[UUID, typer.Argument(help="Match ID.")],
    decision: Annotated[str, typer.Argument(help="accept or decline.")],
) -> None:
    """Accept or decline a pending match."""
    db_service = _get_db_service()
    orchestrator = _build_orchestrator(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        match = orchestrator.update_status(match_id, member.id, _normalize_decision(decision))
    console.print(f"[green]Match {match.status.value}.[/green]")


@intro_app.command("send")
def intro_send(
    email: EmailArg,
    to_email: Annotated[str, typer.Argument(help="Email address of the member to meet.")],
    message: Annotated[str, typer.Option("--message", "-m", help="Personal note (10-500 chars).")],
    category: Annotated[
        IntroductionCategory, typer.Option("--category", "-c", help="Reason for the introduction.")
    ] = IntroductionCategory.NETWORKING,
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Short context (max 200 chars).")
    ] = None,
) -> None:
    """Send an introduction request to another member."""
    db_service = _get_db_service()
    workflow = _build_workflow(db_service)
    with _handle_errors():
        sender = _resolve_member(db_service, email)
        recipient = _resolve_member(db_service, to_email)
        request = workflow.create(sender.id, recipient.id, message, category, description)
    console.print(f"[green]Introduction request sent to {recipient.full_name}.[/green]")
    console.print(f"[dim]Request ID: {request.id}[/dim]")


@intro_app.command("respond")
def intro_respond(
    email: EmailArg,
    request_id: Annotated[UUID, typer.Argument(help="Introduction request ID.")],
    decision: Annotated[str, typer.Argument(help="accept or decline.")],
) -> None:
    """Accept or decline an introduction request addressed to you."""
    db_service = _get_db_service()
    workflow = _build_workflow(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        request = workflow.respond(request_id, member.id, _normalize_decision(decision))
    console.print(f"[green]Introduction request {request.status.value}.[/green]")


@intro_app.command("view")
def intro_view(
    email: EmailArg,
    request_id: Annotated[UUID, typer.Argument(help="Introduction request ID.")],
) -> None:
    """Show an introduction request; the recipient's first view is recorded."""
    db_service = _get_db_service()
    workflow = _build_workflow(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        request = workflow.get(request_id, member.id)
        if request.to_member_id == member.id:
            request = workflow.mark_viewed(request_id, member.id)
    names = _names(db_service, (request.from_member_id, request.to_member_id))
    console.print(display_introduction(request, names))


@intro_app.command("cancel")
def intro_cancel(
    email: EmailArg,
    request_id: Annotated[UUID, typer.Argument(help="Introduction request ID.")],
) -> None:
    """Withdraw a pending introduction request you sent."""
    db_service = _get_db_service()
    workflow = _build_workflow(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        workflow.cancel(request_id, member.id)
    console.print("[green]Introduction request cancelled.[/green]")


@intro_app.command("sent")
def intro_sent(
    email: EmailArg,
    status: Annotated[
        str | None, typer.Option("--status", "-s", help="Only show requests in this status.")
    ] = None,
) -> None:
    """List introduction requests a member has sent."""
    db_service = _get_db_service()
    workflow = _build_workflow(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        requests = workflow.list_sent(member.id, status=status)
    if not requests:
        console.print("[yellow]No introduction requests sent.[/yellow]")
        return
    names = _names(db_service, (r.to_member_id for r in requests))
    console.print(IntroductionTable().render(requests, names, sent=True, title="Sent Requests"))


@intro_app.command("received")
def intro_received(
    email: EmailArg,
    status: Annotated[
        str | None, typer.Option("--status", "-s", help="Only show requests in this status.")
    ] = None,
) -> None:
    """List introduction requests a member has received."""
    db_service = _get_db_service()
    workflow = _build_workflow(db_service)
    with _handle_errors():
        member = _resolve_member(db_service, email)
        requests = workflow.list_received(member.id, status=status)
    if not requests:
        console.print("[yellow]No introduction requests received.[/yellow]")
        return
    names = _names(db_service, (r.from_member_id for r in requests))
    console.print(
        IntroductionTable().render(requests, names, sent=False, title="Received Requests")
    )


@app.command()
def status() -> None:
    """Show database statistics and API key status."""
    settings = get_settings()
    db_service = _get_db_service()

    console.print(display_stats(get_database_stats(db_service)))
    console.print()

    if ApiKeyManager().resolve_key(settings):
        console.print("[green]OpenAI API key configured.[/green]")
    else:
        console.print("[yellow]No OpenAI API key configured. Run 'intent-matcher login'.[/yellow]")


@app.command()
def sweep() -> None:
    """Expire pending matches and introduction requests past their expiry date."""
    db_service = _get_db_service()
    matches_expired = _build_orchestrator(db_service).expire_stale()
    introductions_expired = _build_workflow(db_service).expire_stale()
    console.print(display_sweep_summary(matches_expired, introductions_expired))


if __name__ == "__main__":
    app()
