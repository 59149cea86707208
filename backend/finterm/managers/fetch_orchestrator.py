"""
Fetch Orchestrator

Maps parsed commands to provider requests and applies their outcomes to the
ViewState.

Sequencing:
    Every dispatch takes the next sequence number and becomes the
    authoritative request. Earlier requests are never cancelled; when one
    of them resolves after a newer dispatch, its outcome is logged and
    dropped. CLEAR revokes authority altogether, so nothing in flight can
    leave the WELCOME screen.

Errors never escape ``dispatch``: unknown commands, missing tickers, empty
results and provider failures all end in an ERROR ViewState.
"""
from __future__ import annotations

import itertools
from typing import Callable, Dict, Optional

from finterm.cli.command_registry import (
    COIN_SUFFIX,
    COMMANDS,
    ETF_THEMES,
    INDEX_LABELS,
    SECTOR_ETFS,
    SymbolLabel,
)
from finterm.cli.parser import ParsedCommand, ParseResult, UnknownCommand
from finterm.core.exceptions import ProviderError
from finterm.core.view_state import (
    WELCOME,
    Cleared,
    CommandFailed,
    CommandIssued,
    CommandSucceeded,
    ViewEvent,
    ViewState,
    transition,
)
from finterm.integrations.market_data_client import DataProvider
from finterm.logger import logger
from finterm.models.market import ProviderResponse
from finterm.models.payloads import (
    CryptoPayload,
    DescriptionPayload,
    EconomyPayload,
    FinancialsPayload,
    HeatmapCell,
    HeatmapPayload,
    HelpPayload,
    LabeledQuote,
    NewsPayload,
    Payload,
    QuoteListPayload,
    ThemedPayload,
)

FETCH_FAILED_MESSAGE = "Failed to fetch data. Check connection or try again."


class ResultUnavailable(Exception):
    """The provider answered but had nothing for the requested ticker."""


def unknown_command_message(text: str) -> str:
    return f"Unknown command: {text}. Type HELP for available commands."


def missing_argument_message(command: str) -> str:
    if command == "FA":
        return "Financial data unavailable: no ticker given. Usage: FA <TICKER>"
    return f"Ticker not found: no ticker given. Usage: {command} <TICKER>"


def _label_index(labels) -> Dict[str, SymbolLabel]:
    return {item.symbol: item for item in labels}


_ETF_THEMES = _label_index(ETF_THEMES)
_SECTORS = _label_index(SECTOR_ETFS)


def _left_join(response: ProviderResponse, labels: Dict[str, SymbolLabel]):
    items = []
    for quote in response.data:
        meta = labels.get(quote.symbol)
        items.append(LabeledQuote(
            quote=quote,
            label=meta.label if meta else None,
            detail=meta.detail if meta else None,
        ))
    return tuple(items)


# ============================================================================
# RESPONSE SHAPING (one handler per command)
# ============================================================================

def _shape_indices(command: ParsedCommand, response: ProviderResponse) -> Payload:
    quotes = tuple(
        LabeledQuote(quote=q, label=INDEX_LABELS.get(q.symbol, q.symbol))
        for q in response.data
    )
    return QuoteListPayload(kind=command.name, quotes=quotes)


def _shape_quotes(command: ParsedCommand, response: ProviderResponse) -> Payload:
    return QuoteListPayload(kind=command.name, quotes=tuple(LabeledQuote(quote=q) for q in response.data))


def _shape_heatmap(command: ParsedCommand, response: ProviderResponse) -> Payload:
    return HeatmapPayload(kind=command.name, cells=tuple(HeatmapCell.from_quote(q) for q in response.data))


def _shape_crypto(command: ParsedCommand, response: ProviderResponse) -> Payload:
    coins = tuple(q for q in response.data if q.symbol.endswith(COIN_SUFFIX))
    equities = tuple(q for q in response.data if not q.symbol.endswith(COIN_SUFFIX))
    return CryptoPayload(kind=command.name, coins=coins, equities=equities)


def _shape_etf(command: ParsedCommand, response: ProviderResponse) -> Payload:
    return ThemedPayload(kind=command.name, items=_left_join(response, _ETF_THEMES))


def _shape_sectors(command: ParsedCommand, response: ProviderResponse) -> Payload:
    return ThemedPayload(kind=command.name, items=_left_join(response, _SECTORS))


def _shape_economy(command: ParsedCommand, response: ProviderResponse) -> Payload:
    return EconomyPayload(kind=command.name, quotes=tuple(response.data))


def _shape_news(command: ParsedCommand, response: ProviderResponse) -> Payload:
    return NewsPayload(kind=command.name, items=tuple(response.news))


def _shape_description(command: ParsedCommand, response: ProviderResponse) -> Payload:
    quote = response.first_quote()
    if quote is None:
        raise ResultUnavailable(f"Ticker not found: {command.argument}")
    return DescriptionPayload(kind=command.name, quote=quote, news=tuple(response.news))


def _shape_financials(command: ParsedCommand, response: ProviderResponse) -> Payload:
    quote = response.first_quote()
    if quote is None:
        raise ResultUnavailable(f"Financial data unavailable for {command.argument}")
    return FinancialsPayload.from_quote(command.name, quote)


def _help(command: ParsedCommand) -> Payload:
    return HelpPayload(kind=command.name, commands=tuple(COMMANDS))


# Commands answered without a provider call (catalog entries with fetches=False)
LOCAL_BUILDERS: Dict[str, Callable[[ParsedCommand], Payload]] = {
    "HELP": _help,
}


SHAPERS: Dict[str, Callable[[ParsedCommand, ProviderResponse], Payload]] = {
    "WEI": _shape_indices,
    "GP": _shape_heatmap,
    "STX": _shape_quotes,
    "CRYP": _shape_crypto,
    "ETF": _shape_etf,
    "SECF": _shape_sectors,
    "INDU": _shape_quotes,
    "RV": _shape_quotes,
    "ECO": _shape_economy,
    "NEWS": _shape_news,
    "DES": _shape_description,
    "FA": _shape_financials,
}


class FetchOrchestrator:
    """Owns the ViewState and the authoritative-request slot."""

    def __init__(
        self,
        provider: DataProvider,
        on_change: Optional[Callable[[ViewState], None]] = None,
    ) -> None:
        self._provider = provider
        self._on_change = on_change
        self._sequence = itertools.count(1)
        self._authoritative: Optional[int] = None
        self._view = WELCOME

    @property
    def view_state(self) -> ViewState:
        return self._view

    @property
    def authoritative_sequence(self) -> Optional[int]:
        return self._authoritative

    def _apply(self, event: ViewEvent) -> ViewState:
        self._view = transition(self._view, event)
        if self._on_change is not None:
            try:
                self._on_change(self._view)
            except Exception:
                logger.exception("View change listener failed")
        return self._view

    def _issue(self) -> int:
        seq = next(self._sequence)
        self._authoritative = seq
        return seq

    def _is_authoritative(self, seq: int) -> bool:
        return self._authoritative == seq

    async def dispatch(self, parsed: ParseResult) -> ViewState:
        """Run one command to completion and return the resulting ViewState.

        The returned state is the live one, which after a stale resolution
        belongs to a newer command.
        """
        if isinstance(parsed, UnknownCommand):
            self._issue()
            logger.info(f"Unknown command: {parsed.text!r}")
            return self._apply(CommandFailed(label=parsed.text, message=unknown_command_message(parsed.text)))

        name = parsed.name
        if name == "CLEAR":
            self._authoritative = None
            return self._apply(Cleared())

        seq = self._issue()
        self._apply(CommandIssued(label=parsed.text))

        if not parsed.meta.fetches:
            return self._apply(CommandSucceeded(label=parsed.text, payload=LOCAL_BUILDERS[name](parsed)))

        if parsed.meta.takes_argument and not parsed.argument:
            logger.info(f"{name} submitted without a ticker")
            return self._apply(CommandFailed(label=parsed.text, message=missing_argument_message(name)))

        symbols = parsed.meta.resolve_symbols(parsed.argument)
        logger.debug(f"Request #{seq} issued for {parsed.text} ({len(symbols)} symbols)")

        try:
            response = await self._provider.fetch_quotes(symbols)
            event: ViewEvent = CommandSucceeded(label=parsed.text, payload=SHAPERS[name](parsed, response))
        except ResultUnavailable as exc:
            event = CommandFailed(label=parsed.text, message=str(exc))
        except ProviderError as exc:
            logger.warning(f"Request #{seq} for {parsed.text} failed: {exc}")
            event = CommandFailed(label=parsed.text, message=FETCH_FAILED_MESSAGE)
        except Exception:
            logger.exception(f"Request #{seq} for {parsed.text} failed unexpectedly")
            event = CommandFailed(label=parsed.text, message=FETCH_FAILED_MESSAGE)

        if not self._is_authoritative(seq):
            logger.debug(f"Discarding stale response #{seq} for {parsed.text} (authoritative: {self._authoritative})")
            return self._view

        logger.debug(f"Request #{seq} resolved for {parsed.text}")
        return self._apply(event)
