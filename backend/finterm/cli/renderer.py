"""
Terminal renderer.

``Renderer`` is the contract the session hands finished ViewStates and
ticker snapshots to. ``RichRenderer`` draws them with rich tables and
panels. Absent provider fields are shown as ``PLACEHOLDER``.

List-like views number their rows. ``select_row(n)`` sends ``DES <SYMBOL>``
for row ``n`` back through the dispatch callback of the last render, the
same port typed commands use.
"""
from typing import Callable, Iterable, Optional, Protocol, Tuple, Union

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from finterm.cli.command_registry import QUICK_LAUNCH
from finterm.config import settings
from finterm.core.enums import ViewMode
from finterm.core.view_state import ViewState
from finterm.logger import logger
from finterm.models.market import NewsItem, Quote
from finterm.models.payloads import (
    CryptoPayload,
    DescriptionPayload,
    EconomyPayload,
    FinancialsPayload,
    HeatmapPayload,
    HelpPayload,
    NewsPayload,
    QuoteListPayload,
    ThemedPayload,
    TickerSnapshot,
)

PLACEHOLDER = "-"
DES_NEWS_LIMIT = 5
HEATMAP_COLUMNS = 6

Dispatch = Callable[[str], object]


class Renderer(Protocol):
    def render_view(self, view: ViewState, dispatch: Dispatch) -> None:
        ...

    def render_ticker(self, snapshot: TickerSnapshot) -> None:
        ...


# ============================================================================
# FORMATTING HELPERS
# ============================================================================

def fmt_number(value: Optional[Union[float, str]], digits: int = 2) -> str:
    if value is None or value == "":
        return PLACEHOLDER
    if isinstance(value, str):
        return value
    return f"{value:,.{digits}f}"


def fmt_price(value: Optional[float], digits: int = 2) -> str:
    if value is None:
        return PLACEHOLDER
    return f"${value:,.{digits}f}"


def fmt_percent(value: Optional[float], digits: int = 2, signed: bool = True) -> str:
    if value is None:
        return PLACEHOLDER
    sign = "+" if signed and value > 0 else ""
    return f"{sign}{value:.{digits}f}%"


def fmt_change(quote: Quote) -> Text:
    style = "green" if quote.is_up else "red"
    if quote.change is None and quote.change_percent is None:
        return Text(PLACEHOLDER, style="dim")
    change = fmt_number(quote.change)
    if quote.change is not None and quote.change >= 0:
        change = "+" + change
    return Text(f"{change} ({fmt_percent(quote.change_percent, signed=False)})", style=style)


def row_symbols(payload) -> Tuple[str, ...]:
    """Symbols of the numbered rows of ``payload``, in display order."""
    if isinstance(payload, QuoteListPayload):
        return tuple(item.symbol for item in payload.quotes)
    if isinstance(payload, ThemedPayload):
        return tuple(item.symbol for item in payload.items)
    if isinstance(payload, HeatmapPayload):
        return tuple(cell.quote.symbol for cell in payload.cells)
    if isinstance(payload, CryptoPayload):
        return tuple(q.symbol for q in payload.coins + payload.equities)
    return ()


def ticker_line(snapshot: TickerSnapshot) -> str:
    """Plain one-line rendition of the strip (used by the REPL toolbar)."""
    if snapshot.is_empty:
        return "MARKETS  loading..."
    parts = []
    for item in snapshot.items:
        q = item.quote
        arrow = "▲" if q.is_up else "▼"
        pct = abs(q.change_percent) if q.change_percent is not None else None
        parts.append(f"{item.label} {fmt_number(q.price)} {arrow}{fmt_percent(pct, signed=False)}")
    return "MARKETS  " + "   ".join(parts)


class RichRenderer:
    """Render ViewStates to a rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.rows: Tuple[str, ...] = ()
        self._dispatch: Optional[Dispatch] = None

    # ------------------------------------------------------------------
    # Renderer contract
    # ------------------------------------------------------------------

    def render_view(self, view: ViewState, dispatch: Dispatch) -> None:
        self._dispatch = dispatch
        self.rows = row_symbols(view.payload) if view.mode is ViewMode.DATA else ()
        if view.mode is ViewMode.WELCOME:
            self.console.clear()
            self.console.print(self.welcome())
        elif view.mode is ViewMode.LOADING:
            self.console.print(f"[yellow]{view.label}[/yellow] [dim]fetching data...[/dim]")
        elif view.mode is ViewMode.ERROR:
            self.console.print(Panel(view.message or "", title=view.label or "ERROR",
                                     border_style="red", box=box.ROUNDED))
        else:
            self.console.print(self.build(view.payload, view.label))

    def render_ticker(self, snapshot: TickerSnapshot) -> None:
        self.console.print(Text(ticker_line(snapshot), style="bold"))

    def select_row(self, number: int):
        """Drill into row ``number`` (1-based) of the current view with DES."""
        if self._dispatch is None or not 1 <= number <= len(self.rows):
            logger.debug(f"No row {number} to select ({len(self.rows)} rows shown)")
            return None
        return self._dispatch(f"DES {self.rows[number - 1]}")

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def welcome(self) -> Panel:
        return Panel.fit(
            f"[bold cyan]{settings.APP_NAME}[/bold cyan]\n"
            f"[dim]Version {settings.APP_VERSION}[/dim]\n\n"
            "[yellow]Type HELP for available commands. TAB completes, ↑/↓ browse history.[/yellow]\n"
            "[dim]Enter a row number to open DES for that row.[/dim]\n\n"
            + "  ".join(f"[bold]{key.upper()}[/bold] {command}" for key, command in QUICK_LAUNCH),
            box=box.ROUNDED,
            border_style="cyan",
        )

    def build(self, payload, label: str):
        if isinstance(payload, HelpPayload):
            return self._help(payload)
        if isinstance(payload, QuoteListPayload):
            return self._quote_list(payload, label)
        if isinstance(payload, HeatmapPayload):
            return self._heatmap(payload, label)
        if isinstance(payload, CryptoPayload):
            return Group(self._quote_table("Coins", payload.coins, first_row=1),
                         self._quote_table("Crypto Equities", payload.equities,
                                           first_row=len(payload.coins) + 1))
        if isinstance(payload, ThemedPayload):
            return self._themed(payload, label)
        if isinstance(payload, EconomyPayload):
            return self._economy(payload)
        if isinstance(payload, NewsPayload):
            return self._news("Top Market News", payload.items)
        if isinstance(payload, DescriptionPayload):
            return self._description(payload)
        if isinstance(payload, FinancialsPayload):
            return self._financials(payload)
        return Text(f"Nothing to display for {label}", style="dim")

    def _help(self, payload: HelpPayload) -> Table:
        table = Table(title="Available Commands", box=box.ROUNDED)
        table.add_column("Command", style="cyan", no_wrap=True)
        table.add_column("Description", style="white")
        table.add_column("Example", style="dim")
        for meta in payload.commands:
            table.add_row(meta.usage, meta.description, ", ".join(meta.examples))
        return table

    def _quote_list(self, payload: QuoteListPayload, label: str) -> Table:
        table = Table(title=label, box=box.ROUNDED)
        table.add_column("#", style="dim", justify="right")
        table.add_column("Symbol", style="cyan", no_wrap=True)
        if payload.kind == "WEI":
            table.add_column("Index")
        table.add_column("Price", justify="right")
        table.add_column("Change", justify="right")
        if payload.kind in ("STX", "RV"):
            table.add_column("Mkt Cap", justify="right")
            table.add_column("P/E", justify="right")
            table.add_column("Fwd P/E", justify="right")
        if payload.kind == "RV":
            table.add_column("PEG", justify="right")
            table.add_column("P/S", justify="right")
            table.add_column("P/B", justify="right")
        if payload.kind == "STX":
            table.add_column("Rating")

        for number, item in enumerate(payload.quotes, start=1):
            q = item.quote
            row = [str(number), q.symbol]
            if payload.kind == "WEI":
                row.append(item.label or q.symbol)
            row += [fmt_number(q.price), fmt_change(q)]
            if payload.kind in ("STX", "RV"):
                row += [fmt_number(q.market_cap), fmt_number(q.pe, 1), fmt_number(q.forward_pe, 1)]
            if payload.kind == "RV":
                row += [fmt_number(q.peg_ratio), fmt_number(q.ps), fmt_number(q.pb)]
            if payload.kind == "STX":
                row.append((q.recommendation or "HOLD").upper())
            table.add_row(*row)
        return table

    def _heatmap(self, payload: HeatmapPayload, label: str) -> Table:
        table = Table(title=label, box=box.SIMPLE, show_header=False)
        for _ in range(HEATMAP_COLUMNS):
            table.add_column(justify="center")
        cells = []
        for number, cell in enumerate(payload.cells, start=1):
            level = int(cell.intensity // 34)  # three shades per direction
            base = "green" if cell.direction == "up" else "red"
            style = [f"{base}", f"bold {base}", f"bold white on {base}"][min(level, 2)]
            text = f"{number}. {cell.quote.symbol}\n{fmt_percent(cell.quote.change_percent)}"
            cells.append(Text(text, style=style))
        for start in range(0, len(cells), HEATMAP_COLUMNS):
            row = cells[start:start + HEATMAP_COLUMNS]
            row += [Text("")] * (HEATMAP_COLUMNS - len(row))
            table.add_row(*row)
        return table

    def _quote_table(self, title: str, quotes: Iterable[Quote], first_row: Optional[int] = None) -> Table:
        """Plain quote table; rows are numbered from ``first_row`` when given."""
        table = Table(title=title, box=box.ROUNDED)
        if first_row is not None:
            table.add_column("#", style="dim", justify="right")
        table.add_column("Symbol", style="cyan", no_wrap=True)
        table.add_column("Price", justify="right")
        table.add_column("Change", justify="right")
        table.add_column("Volume", justify="right")
        for offset, q in enumerate(quotes):
            row = [q.symbol, fmt_price(q.price), fmt_change(q), fmt_number(q.volume, 0)]
            if first_row is not None:
                row.insert(0, str(first_row + offset))
            table.add_row(*row)
        return table

    def _themed(self, payload: ThemedPayload, label: str) -> Table:
        heading = "Theme" if payload.kind == "ETF" else "Sector"
        table = Table(title=label, box=box.ROUNDED)
        table.add_column("#", style="dim", justify="right")
        table.add_column("Symbol", style="cyan", no_wrap=True)
        table.add_column(heading)
        if payload.kind == "ETF":
            table.add_column("Focus", style="dim")
        table.add_column("Price", justify="right")
        table.add_column("Change", justify="right")
        for number, item in enumerate(payload.items, start=1):
            row = [str(number), item.symbol, item.label or PLACEHOLDER]
            if payload.kind == "ETF":
                row.append(item.detail or PLACEHOLDER)
            row += [fmt_price(item.quote.price), fmt_change(item.quote)]
            table.add_row(*row)
        return table

    def _economy(self, payload: EconomyPayload) -> Group:
        vix = Table(title="Volatility", box=box.ROUNDED)
        vix.add_column("Symbol", style="cyan")
        vix.add_column("Level", justify="right")
        vix.add_column("Change", justify="right")
        for q in payload.volatility:
            vix.add_row(q.symbol, fmt_number(q.price), fmt_change(q))

        yields = Table(title="Treasury Yields", box=box.ROUNDED)
        yields.add_column("Tenor", style="cyan")
        yields.add_column("Yield", justify="right")
        yields.add_column("Change", justify="right")
        for item in payload.yields:
            yields.add_row(item.label or item.symbol, fmt_percent(item.quote.price, signed=False),
                           fmt_number(item.quote.change))

        commodities = self._quote_table("Commodities", payload.commodities)
        return Group(vix, yields, commodities)

    def _news(self, title: str, items: Iterable[NewsItem]) -> Table:
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("Headline", style="white")
        table.add_column("Publisher", style="cyan")
        table.add_column("Published", style="dim")
        for item in items:
            table.add_row(item.title or PLACEHOLDER, item.publisher or PLACEHOLDER, item.published or PLACEHOLDER)
        return table

    def _description(self, payload: DescriptionPayload) -> Group:
        q = payload.quote
        header = Text.assemble(
            (f"{q.symbol} ", "bold cyan"),
            (q.name or "", "bold white"),
            "  ",
            (fmt_price(q.price), "white"),
            "  ",
            fmt_change(q),
        )
        metrics = Table(box=box.SIMPLE, show_header=False)
        metrics.add_column(style="dim")
        metrics.add_column(justify="right")
        target = PLACEHOLDER
        if q.target_low is not None or q.target_high is not None:
            target = f"{fmt_price(q.target_low, 0)} - {fmt_price(q.target_high, 0)}"
        for name, value in (
            ("Sector", q.sector or PLACEHOLDER),
            ("Industry", q.industry or PLACEHOLDER),
            ("Market Cap", fmt_number(q.market_cap)),
            ("Employees", fmt_number(q.employees, 0)),
            ("P/E Ratio (TTM)", fmt_number(q.pe)),
            ("Forward P/E", fmt_number(q.forward_pe)),
            ("PEG Ratio", fmt_number(q.peg_ratio)),
            ("Price Target", target),
            ("Consensus", q.recommendation or PLACEHOLDER),
            ("Website", q.website or PLACEHOLDER),
        ):
            metrics.add_row(name, value)
        about = Panel(q.description or "No description available.", title="Description", box=box.ROUNDED)
        return Group(header, metrics, about, self._news("Latest News", payload.news[:DES_NEWS_LIMIT]))

    def _financials(self, payload: FinancialsPayload) -> Table:
        table = Table(title=f"{payload.symbol} Financial Analysis", box=box.ROUNDED)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        for name, value in (
            ("Revenue", fmt_number(payload.revenue)),
            ("Net Income", fmt_number(payload.net_income)),
            ("EBITDA", fmt_number(payload.ebitda)),
            ("EPS", fmt_number(payload.eps)),
            ("Book Value", fmt_number(payload.book_value)),
            ("Gross Margin", fmt_percent(payload.gross_margin, signed=False)),
            ("Operating Margin", fmt_percent(payload.operating_margin, signed=False)),
            ("Net Margin", fmt_percent(payload.net_margin, signed=False)),
            ("ROE", fmt_percent(payload.roe, signed=False)),
            ("Debt / Equity", fmt_number(payload.debt_to_equity)),
            ("P/E", fmt_number(payload.pe)),
            ("Forward P/E", fmt_number(payload.forward_pe)),
            ("P/S", fmt_number(payload.ps)),
            ("P/B", fmt_number(payload.pb)),
            ("PEG", fmt_number(payload.peg_ratio)),
        ):
            table.add_row(name, value)
        return table
