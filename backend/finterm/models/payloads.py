"""
Typed view payloads, one per command kind, plus the ticker strip snapshot.

The orchestrator builds these from a ``ProviderResponse``; the renderer
switches on the payload type. Payloads are immutable.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

from finterm.cli.command_registry import (
    COMMODITY_SYMBOLS,
    VOLATILITY_SYMBOLS,
    YIELD_LABELS,
    YIELD_SERIES_PREFIX,
    CommandMeta,
)
from finterm.models.market import Figure, NewsItem, Quote

# Heatmap colour saturates at a 12.5% move
HEATMAP_SCALE = 8.0
HEATMAP_MAX_INTENSITY = 100.0


@dataclass(frozen=True)
class LabeledQuote:
    quote: Quote
    label: Optional[str] = None  # None when the symbol has no metadata
    detail: Optional[str] = None

    @property
    def symbol(self) -> str:
        return self.quote.symbol


@dataclass(frozen=True)
class HeatmapCell:
    quote: Quote
    intensity: float  # 0..100
    direction: str  # "up" | "down"

    @classmethod
    def from_quote(cls, quote: Quote) -> HeatmapCell:
        intensity = min(abs(quote.change_percent or 0.0) * HEATMAP_SCALE, HEATMAP_MAX_INTENSITY)
        return cls(quote=quote, intensity=intensity, direction="up" if quote.is_up else "down")


@dataclass(frozen=True)
class QuoteListPayload:
    """WEI, STX, INDU and RV: plain quote sequences."""
    kind: str
    quotes: Tuple[LabeledQuote, ...]


@dataclass(frozen=True)
class HeatmapPayload:
    kind: str
    cells: Tuple[HeatmapCell, ...]


@dataclass(frozen=True)
class CryptoPayload:
    kind: str
    coins: Tuple[Quote, ...]
    equities: Tuple[Quote, ...]


@dataclass(frozen=True)
class ThemedPayload:
    """ETF themes and SECF sectors: quotes left-joined with metadata."""
    kind: str
    items: Tuple[LabeledQuote, ...]


@dataclass(frozen=True)
class EconomyPayload:
    kind: str
    quotes: Tuple[Quote, ...]

    @property
    def volatility(self) -> Tuple[Quote, ...]:
        return tuple(q for q in self.quotes if q.symbol in VOLATILITY_SYMBOLS)

    @property
    def yields(self) -> Tuple[LabeledQuote, ...]:
        return tuple(
            LabeledQuote(quote=q, label=YIELD_LABELS.get(q.symbol, q.symbol))
            for q in self.quotes
            if q.symbol in YIELD_LABELS or q.symbol.startswith(YIELD_SERIES_PREFIX)
        )

    @property
    def commodities(self) -> Tuple[Quote, ...]:
        return tuple(q for q in self.quotes if q.symbol in COMMODITY_SYMBOLS)


@dataclass(frozen=True)
class NewsPayload:
    kind: str
    items: Tuple[NewsItem, ...]


@dataclass(frozen=True)
class DescriptionPayload:
    kind: str
    quote: Quote
    news: Tuple[NewsItem, ...]

    @property
    def symbol(self) -> str:
        return self.quote.symbol


@dataclass(frozen=True)
class FinancialsPayload:
    """Financial-ratio projection of a single quote."""
    kind: str
    symbol: str
    name: Optional[str] = None
    price: Optional[float] = None
    revenue: Optional[Figure] = None
    net_income: Optional[Figure] = None
    ebitda: Optional[Figure] = None
    eps: Optional[Figure] = None
    book_value: Optional[Figure] = None
    gross_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    net_margin: Optional[float] = None
    roe: Optional[float] = None
    debt_to_equity: Optional[Figure] = None
    pe: Optional[float] = None
    forward_pe: Optional[float] = None
    ps: Optional[float] = None
    pb: Optional[float] = None
    peg_ratio: Optional[float] = None

    @classmethod
    def from_quote(cls, kind: str, quote: Quote) -> FinancialsPayload:
        return cls(
            kind=kind,
            symbol=quote.symbol,
            name=quote.name,
            price=quote.price,
            revenue=quote.revenue,
            net_income=quote.net_income,
            ebitda=quote.ebitda,
            eps=quote.eps,
            book_value=quote.book_value,
            gross_margin=quote.gross_margin,
            operating_margin=quote.operating_margin,
            net_margin=quote.net_margin,
            roe=quote.roe,
            debt_to_equity=quote.debt_to_equity,
            pe=quote.pe,
            forward_pe=quote.forward_pe,
            ps=quote.ps,
            pb=quote.pb,
            peg_ratio=quote.peg_ratio,
        )


@dataclass(frozen=True)
class HelpPayload:
    kind: str
    commands: Tuple[CommandMeta, ...]


Payload = Union[
    QuoteListPayload,
    HeatmapPayload,
    CryptoPayload,
    ThemedPayload,
    EconomyPayload,
    NewsPayload,
    DescriptionPayload,
    FinancialsPayload,
    HelpPayload,
]


@dataclass(frozen=True)
class TickerSnapshot:
    """Latest live strip, replaced wholesale on every successful poll."""
    items: Tuple[LabeledQuote, ...] = ()
    fetched_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.items
