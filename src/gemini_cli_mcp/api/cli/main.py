"""gemini-cli-mcp CLI entry point."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from gemini_cli_mcp.application.settings_loader import SettingsLoader
from gemini_cli_mcp.application.task_service import TaskService
from gemini_cli_mcp.core.domain.config_schema import GeminiCliSettings
from gemini_cli_mcp.core.domain.errors import ConfigError, GeminiCliMcpError
from gemini_cli_mcp.core.domain.models import TaskOutcome
from gemini_cli_mcp.infrastructure.logging.log_forwarder import StructlogSink
from gemini_cli_mcp.infrastructure.logging.setup import configure_logging

app = typer.Typer(
    name="gemini-cli-mcp",
    help="MCP server that delegates tasks to the Gemini CLI agent",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


def _load_settings(config: Optional[Path], debug: bool) -> GeminiCliSettings:
    try:
        settings = SettingsLoader().load(config)
    except ConfigError as e:
        err_console.print("[bold red]Configuration error:[/bold red]", Text(str(e)))
        raise typer.Exit(code=2) from e
    if debug:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    return settings


def _render_outcome(outcome: TaskOutcome) -> Panel:
    subtitle_parts = []
    if outcome.session_id:
        subtitle_parts.append(f"session: {outcome.session_id}")
    if outcome.total_cost_usd is not None:
        subtitle_parts.append(f"cost: ${outcome.total_cost_usd:.4f}")
    return Panel(
        Text(outcome.result) if outcome.result else Text("(empty result)", style="dim"),
        title="[bold green]Gemini CLI result[/bold green]",
        subtitle=" | ".join(subtitle_parts) or None,
        border_style="green",
    )


@app.command()
def serve(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML settings file"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """Run the MCP server on stdio."""
    from gemini_cli_mcp.api.server import run_stdio_server

    settings = _load_settings(config, debug)
    configure_logging(settings.log_level, json_logs=True)
    asyncio.run(run_stdio_server(settings))


@app.command()
def run(
    task: str = typer.Argument(..., help="Task to delegate to the agent"),
    cwd: Optional[Path] = typer.Option(
        None, "--cwd", help="Working directory for the agent (default: current directory)"
    ),
    history_id: Optional[str] = typer.Option(
        None, "--history-id", help="Continue a previous session"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML settings file"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the outcome as JSON"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """Run one task locally and print its outcome."""
    settings = _load_settings(config, debug)
    configure_logging(settings.log_level, json_logs=False)
    service = TaskService(settings)

    try:
        outcome = asyncio.run(
            service.run_task(
                task,
                str((cwd or Path.cwd()).expanduser().resolve()),
                StructlogSink(),
                history_id=history_id,
            )
        )
    except GeminiCliMcpError as e:
        err_console.print("[bold red]Error:[/bold red]", Text(str(e)))
        raise typer.Exit(code=1) from e

    if as_json:
        console.print_json(outcome.to_json())
    else:
        console.print(_render_outcome(outcome))


@app.command()
def version():
    """Show gemini-cli-mcp version."""
    from gemini_cli_mcp import __version__

    console.print(f"[bold blue]Version:[/bold blue] [cyan]{__version__}[/cyan]")


if __name__ == "__main__":
    app()
