"""
FinTerm - CLI Application
"""
import asyncio
from typing import List, Optional

import typer
from rich.console import Console

from finterm.cli.renderer import RichRenderer
from finterm.config import settings
from finterm.core.enums import ViewMode
from finterm.integrations.market_data_client import MarketDataClient
from finterm.logger import logger, logger_manager
from finterm.managers.session import TerminalSession

# Create Typer app
app = typer.Typer(
    name="finterm",
    help="Command-driven market data terminal",
    add_completion=False,
)

console = Console()


def _set_log_level(level: str) -> None:
    try:
        logger_manager.set_level(level)
    except ValueError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=2)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override the file log level"),
):
    """
    FinTerm market data terminal

    Without a subcommand the interactive terminal starts.
    """
    if version:
        console.print(f"[cyan]{settings.APP_NAME}[/cyan] v{settings.APP_VERSION}")
        raise typer.Exit()

    if log_level:
        _set_log_level(log_level)

    if ctx.invoked_subcommand is None:
        from finterm.cli.interactive import start_interactive_cli
        start_interactive_cli()


@app.command()
def run():
    """
    Start the interactive terminal
    """
    from finterm.cli.interactive import start_interactive_cli
    start_interactive_cli()


@app.command()
def cmd(words: List[str] = typer.Argument(..., help="Command line, e.g. DES AAPL")):
    """
    Run a single command, print the result and exit
    """
    line = " ".join(words)

    async def _run():
        session = TerminalSession(MarketDataClient(), ticker_enabled=False)
        async with session:
            return await session.submit_command(line)

    view = asyncio.run(_run())
    renderer = RichRenderer(console)
    renderer.render_view(view, lambda text: None)
    logger.debug(f"One-shot command {line!r} finished in mode {view.mode.value}")
    if view.mode is ViewMode.ERROR:
        raise typer.Exit(code=1)


@app.command()
def ticker():
    """
    Poll the live ticker strip once and print it
    """
    async def _run():
        session = TerminalSession(MarketDataClient(), ticker_enabled=False)
        async with session:
            return await session.poller.poll_once()

    snapshot = asyncio.run(_run())
    RichRenderer(console).render_ticker(snapshot)
    if snapshot.is_empty:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
