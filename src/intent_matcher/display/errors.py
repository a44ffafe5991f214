# ABOUTME: Error display helpers for formatting error messages with Rich.
# ABOUTME: Provides user-friendly error panels for domain errors and missing API keys.

import traceback

from rich.panel import Panel
from rich.text import Text


def display_error(error: Exception, verbose: bool = False) -> Panel:
    """Format an error as a Rich Panel.

    Args:
        error: The exception to display.
        verbose: If True, include full traceback information.

    Returns:
        A Rich Panel containing formatted error information.
    """
    error_type = type(error).__name__
    error_message = str(error)

    content = Text()
    content.append(f"{error_type}: ", style="bold red")
    content.append(error_message, style="red")

    if verbose:
        content.append("\n\n")
        content.append("Traceback:", style="dim")
        content.append("\n")
        tb_text = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        content.append(tb_text, style="dim")

    return Panel(
        content,
        title="Error",
        border_style="red",
        padding=(1, 2),
    )


def display_api_key_help() -> Panel:
    """Display help information for configuring the OpenAI API key.

    Returns:
        A Rich Panel explaining both ways to provide the key.
    """
    help_text = """[bold cyan]Intent analysis needs an OpenAI API key.[/bold cyan]

1. Create a key at [link=https://platform.openai.com/api-keys]platform.openai.com/api-keys[/link]
2. Either store it in your OS keyring:
     [bold]intent-matcher login[/bold]
3. Or export it for this shell:
     [bold]export INTENT_MATCHER_OPENAI_API_KEY=sk-...[/bold]

[dim]Matches can still be generated without a key; they use a generic explanation.[/dim]"""

    return Panel(
        Text.from_markup(help_text),
        title="API Key Help",
        border_style="cyan",
        padding=(1, 2),
    )
