from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CommandMeta:
    """Metadata for a terminal command.

    This is the single source of truth for:
    - usage string
    - short description (also searched by autocomplete)
    - examples
    - argument arity and the symbol set the command requests
    """

    name: str  # upper-case command name, e.g. "WEI"
    usage: str  # full usage line, e.g. "DES <TICKER>"
    description: str
    examples: List[str]
    arity: int = 0  # 0 = bare command, 1 = takes a ticker
    symbols: Tuple[str, ...] = ()  # fixed symbol set for bare commands
    fetches: bool = True  # False for local commands (HELP, CLEAR)

    @property
    def takes_argument(self) -> bool:
        return self.arity > 0

    def resolve_symbols(self, argument: Optional[str] = None) -> Tuple[str, ...]:
        """Symbol set requested from the provider for this command.

        Argument commands request only their ticker; an absent ticker
        resolves to the empty set.
        """
        if self.takes_argument:
            return (argument,) if argument else ()
        return self.symbols


@dataclass(frozen=True)
class SymbolLabel:
    """Display metadata for a symbol inside a fixed set."""

    symbol: str
    label: str
    detail: Optional[str] = None


# ============================================================================
# FIXED SYMBOL SETS
# ============================================================================

TICKER_STRIP: List[SymbolLabel] = [
    SymbolLabel("^GSPC", "S&P 500"),
    SymbolLabel("^NDX", "NASDAQ 100"),
    SymbolLabel("^DJI", "DOW JONES"),
    SymbolLabel("^VIX", "VIX"),
    SymbolLabel("^FTSE", "FTSE 100"),
    SymbolLabel("^N225", "NIKKEI 225"),
    SymbolLabel("^GDAXI", "DAX"),
    SymbolLabel("^HSI", "HANG SENG"),
    SymbolLabel("^AXJO", "ASX 200"),
    SymbolLabel("EURUSD=X", "EUR/USD"),
    SymbolLabel("GC=F", "GOLD"),
    SymbolLabel("CL=F", "CRUDE OIL"),
    SymbolLabel("BTC-USD", "BITCOIN"),
    SymbolLabel("ETH-USD", "ETHEREUM"),
]

WORLD_INDICES = (
    "^GSPC", "^NDX", "^DJI", "^FTSE", "^N225",
    "^GDAXI", "^HSI", "^AXJO", "^GSPTSE", "^FCHI",
)

# Labels for WEI cards; symbols missing here are shown by symbol
INDEX_LABELS: Dict[str, str] = {item.symbol: item.label for item in TICKER_STRIP}
INDEX_LABELS.update({"^GSPTSE": "S&P/TSX", "^FCHI": "CAC 40"})

GLOBAL_PERFORMANCE = (
    "SPY", "QQQ", "IWM", "TLT", "GLD", "USO", "EEM", "FXI", "UUP",
    "SLV", "SOXX", "XLF", "XLE", "VNQ", "EMB", "HYG", "LQD",
)

STOCK_WATCHLIST = (
    "AAPL", "GOOGL", "NVDA", "AMD", "IBM", "CRWD", "NOW", "AMZN", "CART",
    "WMT", "RKLB", "LUNR", "ONDS", "ASTS", "NBIS", "IREN", "SOFI", "COIN",
    "HOOD", "NEE", "OKLO", "VRT", "RIVN", "RGTI", "IONQ", "EXAS", "BEAM",
)

CRYPTO = (
    "BTC-USD", "ETH-USD", "SOL-USD", "XRP-USD", "ADA-USD", "DOGE-USD",
    "DOT-USD", "LINK-USD", "AVAX-USD", "MATIC-USD",
    "MSTR", "COIN", "HOOD", "RIOT", "MARA",
)

# Symbols ending with this suffix are coins, everything else is an equity
COIN_SUFFIX = "-USD"

ETF_THEMES: List[SymbolLabel] = [
    SymbolLabel("ARKK", "Innovation", "Disruptive Innovation"),
    SymbolLabel("ARKG", "Genomics", "Genomic Revolution"),
    SymbolLabel("SPACE", "Space", "Space Exploration"),
    SymbolLabel("QTUM", "Quantum", "Quantum Computing"),
    SymbolLabel("CYBER", "Cybersecurity", "Cyber Security"),
    SymbolLabel("MEME", "Meme", "Meme Stocks"),
    SymbolLabel("SMH", "Semiconductors", "Semiconductor Index"),
    SymbolLabel("ICLN", "Clean Energy", "Global Clean Energy"),
    SymbolLabel("CLOU", "Cloud", "Cloud Computing"),
    SymbolLabel("AIQ", "AI", "Artificial Intelligence"),
    SymbolLabel("BOTZ", "Robotics", "Robotics & AI"),
    SymbolLabel("ESPO", "Gaming", "Video Gaming & Esports"),
    SymbolLabel("LIT", "Lithium", "Lithium & Battery Tech"),
    SymbolLabel("URA", "Uranium", "Global Uranium"),
    SymbolLabel("BLOK", "Blockchain", "Blockchain Tech"),
    SymbolLabel("MJ", "Cannabis", "Cannabis Index"),
    SymbolLabel("IDRV", "Autonomous", "Self-Driving EV"),
    SymbolLabel("SNSR", "IoT", "Internet of Things"),
    SymbolLabel("PHO", "Water", "Water Resources"),
    SymbolLabel("WOOD", "Timber", "Timber & Forestry"),
]

SECTOR_ETFS: List[SymbolLabel] = [
    SymbolLabel("XLK", "Technology"),
    SymbolLabel("XLF", "Financials"),
    SymbolLabel("XLV", "Health Care"),
    SymbolLabel("XLE", "Energy"),
    SymbolLabel("XLI", "Industrials"),
    SymbolLabel("XLP", "Consumer Staples"),
    SymbolLabel("XLY", "Consumer Disc."),
    SymbolLabel("XLB", "Materials"),
    SymbolLabel("XLU", "Utilities"),
    SymbolLabel("XLRE", "Real Estate"),
    SymbolLabel("XLC", "Communication"),
]

INDUSTRY_ETFS = ("KIE", "IAI", "XHE", "XBI", "XRT", "XHB", "XSW", "XTN", "XME", "XES")

RELATIVE_VALUE = ("AAPL", "MSFT", "GOOGL", "AMZN", "META", "NFLX", "NVDA", "TSLA", "CRM", "ADBE")

ECONOMY = (
    "^VIX", "^TNX", "^FVX", "^TYX", "DGS10", "DGS2", "DGS30",
    "BZ=F", "GC=F", "CL=F", "NG=F",
)

VOLATILITY_SYMBOLS = ("^VIX",)
YIELD_LABELS: Dict[str, str] = {"^TNX": "10-Year", "^FVX": "5-Year", "^TYX": "30-Year"}
YIELD_SERIES_PREFIX = "DGS"
COMMODITY_SYMBOLS = ("GC=F", "CL=F", "SI=F", "NG=F")

NEWS_SYMBOLS = ("SPY", "QQQ", "IWM", "DIA")

# Welcome-screen shortcuts: (key, command line), bound in the REPL
QUICK_LAUNCH: Tuple[Tuple[str, str], ...] = (
    ("f1", "WEI"),
    ("f2", "GP"),
    ("f3", "DES AAPL"),
    ("f4", "STX"),
)


# ============================================================================
# COMMAND CATALOG (declaration order is the autocomplete and HELP order)
# ============================================================================

COMMANDS: List[CommandMeta] = [
    CommandMeta(
        name="WEI",
        usage="WEI",
        description="World Equity Indices",
        examples=["WEI"],
        symbols=WORLD_INDICES,
    ),
    CommandMeta(
        name="GP",
        usage="GP",
        description="Global Performance Heatmap",
        examples=["GP"],
        symbols=GLOBAL_PERFORMANCE,
    ),
    CommandMeta(
        name="NEWS",
        usage="NEWS",
        description="Top Market News",
        examples=["NEWS"],
        symbols=NEWS_SYMBOLS,
    ),
    CommandMeta(
        name="ECO",
        usage="ECO",
        description="Economic Calendar & Yields",
        examples=["ECO"],
        symbols=ECONOMY,
    ),
    CommandMeta(
        name="SECF",
        usage="SECF",
        description="Sector Performance",
        examples=["SECF"],
        symbols=tuple(item.symbol for item in SECTOR_ETFS),
    ),
    CommandMeta(
        name="INDU",
        usage="INDU",
        description="Industry View",
        examples=["INDU"],
        symbols=INDUSTRY_ETFS,
    ),
    CommandMeta(
        name="RV",
        usage="RV",
        description="Relative Valuation",
        examples=["RV"],
        symbols=RELATIVE_VALUE,
    ),
    CommandMeta(
        name="DES",
        usage="DES <TICKER>",
        description="Company Description (e.g., DES AAPL)",
        examples=["DES AAPL"],
        arity=1,
    ),
    CommandMeta(
        name="FA",
        usage="FA <TICKER>",
        description="Financial Analysis (e.g., FA PLTR)",
        examples=["FA PLTR"],
        arity=1,
    ),
    CommandMeta(
        name="STX",
        usage="STX",
        description="Stock Screener (Top 20)",
        examples=["STX"],
        symbols=STOCK_WATCHLIST,
    ),
    CommandMeta(
        name="CRYP",
        usage="CRYP",
        description="Crypto Market Overview",
        examples=["CRYP"],
        symbols=CRYPTO,
    ),
    CommandMeta(
        name="ETF",
        usage="ETF",
        description="ETF Trends & Themes",
        examples=["ETF"],
        symbols=tuple(item.symbol for item in ETF_THEMES),
    ),
    CommandMeta(
        name="HELP",
        usage="HELP",
        description="Show Commands",
        examples=["HELP"],
        fetches=False,
    ),
    CommandMeta(
        name="CLEAR",
        usage="CLEAR",
        description="Clear Screen",
        examples=["CLEAR"],
        fetches=False,
    ),
]

_COMMANDS_BY_NAME: Dict[str, CommandMeta] = {meta.name: meta for meta in COMMANDS}


def get_command(name: str) -> Optional[CommandMeta]:
    """Look up a command by (case-insensitive) name."""
    return _COMMANDS_BY_NAME.get(name.upper())
