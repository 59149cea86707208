"""
Interactive CLI REPL
Binds TAB, UP, DOWN and ENTER to the session's input controller and shows
suggestions, recent commands and the live ticker strip in the bottom toolbar.
F1-F4 launch the welcome-screen shortcuts; a bare row number opens DES for
that row of the current view.
"""
import asyncio
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.application import get_app_or_none
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from finterm.cli.command_registry import QUICK_LAUNCH
from finterm.cli.renderer import RichRenderer, ticker_line
from finterm.integrations.market_data_client import DataProvider, MarketDataClient
from finterm.logger import logger
from finterm.managers.session import TerminalSession
from finterm.models.payloads import TickerSnapshot

MAX_TOOLBAR_SUGGESTIONS = 5
RECENT_COMMANDS = 5


class ReplRenderer(RichRenderer):
    """Rich renderer whose ticker lives in the prompt toolbar."""

    def render_ticker(self, snapshot: TickerSnapshot) -> None:
        app = get_app_or_none()
        if app is not None:
            app.invalidate()


class InteractiveCLI:
    """
    Interactive terminal with autocomplete, history and a live ticker strip
    """

    def __init__(self, provider: Optional[DataProvider] = None, console: Optional[Console] = None):
        self.console = console or Console()
        self.renderer = ReplRenderer(self.console)
        self.session = TerminalSession(provider or MarketDataClient(), self.renderer)
        self._syncing = False

    # ------------------------------------------------------------------
    # Buffer <-> InputState synchronisation
    # ------------------------------------------------------------------

    def _on_text_changed(self, buffer: Buffer) -> None:
        if self._syncing:
            return
        state = self.session.on_text_change(buffer.text)
        if buffer.text != state.buffer:
            self._push(buffer)

    def _push(self, buffer: Buffer) -> None:
        """Copy the session's buffer into the prompt, cursor at end."""
        self._syncing = True
        try:
            text = self.session.input.buffer
            buffer.text = text
            buffer.cursor_position = len(text)
        finally:
            self._syncing = False

    def _key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("tab")
        def _(event):
            self.session.on_tab_accept()
            self._push(event.current_buffer)

        @kb.add("up")
        def _(event):
            self.session.on_history_prev()
            self._push(event.current_buffer)

        @kb.add("down")
        def _(event):
            self.session.on_history_next()
            self._push(event.current_buffer)

        for key, command in QUICK_LAUNCH:
            kb.add(key)(self._launcher(command))

        return kb

    def _launcher(self, command: str):
        def launch(event):
            self.session.dispatch(command)
        return launch

    def handle_line(self, line: str) -> None:
        """Submit a line read at the prompt.

        A bare number selects that row of the current view.
        """
        text = line.strip()
        if text.isdigit() and self.renderer.rows:
            self.session.on_text_change("")
            self.renderer.select_row(int(text))
            return
        self.session.on_text_change(line)
        self.session.on_submit()

    def _toolbar(self) -> str:
        suggestions = self.session.input.suggestions[:MAX_TOOLBAR_SUGGESTIONS]
        hint = "  ".join(f"{meta.name}: {meta.description}" for meta in suggestions)
        recent = " | ".join(entry.text for entry in self.session.input.history.recent(RECENT_COMMANDS))
        lines = [hint] if hint else []
        if recent:
            lines.append(f"Recent: {recent}")
        lines.append(ticker_line(self.session.ticker))
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run_async(self) -> None:
        prompt = PromptSession(
            key_bindings=self._key_bindings(),
            bottom_toolbar=self._toolbar,
            refresh_interval=1.0,
        )
        prompt.default_buffer.on_text_changed += self._on_text_changed

        await self.session.start()
        self.renderer.render_view(self.session.view_state, self.session.dispatch)
        try:
            with patch_stdout():
                while True:
                    try:
                        line = await prompt.prompt_async("FINTERM> ")
                    except (EOFError, KeyboardInterrupt):
                        break
                    self.handle_line(line)
        finally:
            await self.session.stop()
            self.console.print("\n[dim]Session ended[/dim]\n")
            logger.info("Interactive CLI session ended")

    def run(self) -> None:
        asyncio.run(self.run_async())


def start_interactive_cli():
    """Start the interactive CLI"""
    cli = InteractiveCLI()
    cli.run()
