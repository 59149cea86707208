"""
Terminal session

Owns every piece of mutable terminal state: the input line (buffer,
suggestions, history), the ViewState (through the fetch orchestrator) and
the ticker snapshot (through the poller). All of it is mutated from the
event loop thread only, at keystroke, submit, fetch-resolve and timer
boundaries.

``submit_command`` (awaitable) and ``dispatch`` (fire and forget) are the
inbound port for commands and share one path: canonicalize, record in
history, parse, hand to the orchestrator. Keyboard ENTER and renderer
callbacks both use ``dispatch``.
"""
import asyncio
from typing import Optional, Set

from finterm.cli import input_controller
from finterm.cli.input_controller import InputState
from finterm.cli.parser import normalize, parse_command
from finterm.cli.renderer import Renderer
from finterm.config import settings
from finterm.core.view_state import ViewState
from finterm.integrations.market_data_client import DataProvider
from finterm.logger import logger
from finterm.managers.fetch_orchestrator import FetchOrchestrator
from finterm.models.payloads import TickerSnapshot
from finterm.threads.ticker_poller import TickerPoller


class TerminalSession:
    """One interactive terminal session."""

    def __init__(
        self,
        provider: DataProvider,
        renderer: Optional[Renderer] = None,
        *,
        ticker_enabled: Optional[bool] = None,
        ticker_interval: Optional[float] = None,
    ):
        self._provider = provider
        self._renderer = renderer
        self.input = InputState()
        self.orchestrator = FetchOrchestrator(provider, on_change=self._view_changed)
        self.ticker_enabled = settings.TICKER.enabled if ticker_enabled is None else ticker_enabled
        self.poller = TickerPoller(provider, interval=ticker_interval, on_update=self._ticker_updated)
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def view_state(self) -> ViewState:
        return self.orchestrator.view_state

    @property
    def ticker(self) -> TickerSnapshot:
        return self.poller.snapshot

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self.ticker_enabled:
            self.poller.start()
        logger.info("Terminal session started")

    async def stop(self) -> None:
        await self.poller.stop()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._provider.aclose()
        logger.info("Terminal session ended")

    async def __aenter__(self) -> "TerminalSession":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Dispatch port
    # ------------------------------------------------------------------

    def _accept(self, text: str) -> Optional[str]:
        """Canonicalize ``text`` and record it in history."""
        line = normalize(text)
        if not line:
            return None
        logger.info(f"Command submitted: {line}")
        self.input = input_controller.record_submission(self.input, line)
        return line

    async def submit_command(self, text: str) -> ViewState:
        """Run ``text`` through the pipeline and return the resulting ViewState."""
        line = self._accept(text)
        if line is None:
            return self.view_state
        return await self.orchestrator.dispatch(parse_command(line))

    def dispatch(self, text: str) -> Optional[asyncio.Task]:
        """Submit ``text`` without waiting for the response.

        History is updated immediately; the fetch runs as a task so
        commands may overlap and the orchestrator decides which outcome
        is shown. This is the callback handed to the renderer.
        """
        line = self._accept(text)
        if line is None:
            return None
        task = asyncio.get_running_loop().create_task(self.orchestrator.dispatch(parse_command(line)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    # ------------------------------------------------------------------
    # Keystroke events
    # ------------------------------------------------------------------

    def on_text_change(self, raw: str) -> InputState:
        self.input = input_controller.on_text_change(self.input, raw)
        return self.input

    def on_tab_accept(self) -> InputState:
        self.input = input_controller.on_tab_accept(self.input)
        return self.input

    def on_history_prev(self) -> InputState:
        self.input = input_controller.on_history_prev(self.input)
        return self.input

    def on_history_next(self) -> InputState:
        self.input = input_controller.on_history_next(self.input)
        return self.input

    def on_submit(self) -> Optional[asyncio.Task]:
        line = input_controller.submitted_line(self.input)
        if line is None:
            return None
        return self.dispatch(line)

    # ------------------------------------------------------------------
    # Renderer plumbing
    # ------------------------------------------------------------------

    def _view_changed(self, view: ViewState) -> None:
        if self._renderer is not None:
            self._renderer.render_view(view, self.dispatch)

    def _ticker_updated(self, snapshot: TickerSnapshot) -> None:
        if self._renderer is not None:
            self._renderer.render_ticker(snapshot)
