"""
Ticker Poller - live strip refresh loop

Runs as its own asyncio task for the lifetime of a session: polls once on
start, then every ``interval`` seconds. A failed poll keeps the previous
snapshot so the strip never blanks on a transient error. The poller never
touches the ViewState.
"""
import asyncio
from datetime import datetime
from typing import Callable, List, Optional

from finterm.cli.command_registry import TICKER_STRIP, SymbolLabel
from finterm.config import settings
from finterm.core.exceptions import ConfigurationError, ProviderError
from finterm.integrations.market_data_client import DataProvider
from finterm.logger import logger
from finterm.models.payloads import LabeledQuote, TickerSnapshot


class TickerPoller:
    """Background refresh of the live ticker strip."""

    def __init__(
        self,
        provider: DataProvider,
        interval: Optional[float] = None,
        symbols: Optional[List[SymbolLabel]] = None,
        on_update: Optional[Callable[[TickerSnapshot], None]] = None,
    ):
        self._provider = provider
        self.interval = settings.TICKER.poll_interval_seconds if interval is None else interval
        if self.interval <= 0:
            raise ConfigurationError(f"Ticker poll interval must be positive, got {self.interval}")
        self._symbols = list(symbols) if symbols is not None else list(TICKER_STRIP)
        self._labels = {item.symbol: item.label for item in self._symbols}
        self._on_update = on_update
        self._snapshot = TickerSnapshot()
        self._task: Optional[asyncio.Task] = None
        self.poll_count = 0
        self.failure_count = 0

    @property
    def snapshot(self) -> TickerSnapshot:
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Start the loop on the running event loop (idempotent)."""
        if self.running:
            return self._task
        logger.info(f"Starting ticker poller ({len(self._symbols)} symbols, every {self.interval}s)")
        self._task = asyncio.create_task(self._run(), name="ticker-poller")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Ticker poller stopped")

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    async def poll_once(self) -> TickerSnapshot:
        """Fetch the strip once; on failure keep the current snapshot."""
        self.poll_count += 1
        try:
            response = await self._provider.fetch_quotes(item.symbol for item in self._symbols)
        except ProviderError as exc:
            self.failure_count += 1
            logger.warning(f"Ticker poll failed, keeping previous snapshot: {exc}")
            return self._snapshot
        except Exception:
            self.failure_count += 1
            logger.exception("Ticker poll failed unexpectedly, keeping previous snapshot")
            return self._snapshot

        if not response.data:
            # An empty answer would blank the strip just like an error
            logger.warning("Ticker poll returned no quotes, keeping previous snapshot")
            return self._snapshot

        self._snapshot = TickerSnapshot(
            items=tuple(
                LabeledQuote(quote=q, label=self._labels.get(q.symbol, q.symbol))
                for q in response.data
            ),
            fetched_at=datetime.now(),
        )
        logger.debug(f"Ticker snapshot updated ({len(self._snapshot.items)} quotes)")

        if self._on_update is not None:
            try:
                self._on_update(self._snapshot)
            except Exception:
                logger.exception("Ticker update listener failed")
        return self._snapshot
