"""
Market Data Provider Client Integration

Thin async client for the ``GET /ticker`` endpoint. Every failure mode the
terminal cares about (network, timeout, server error, unreadable body) is
raised as ``ProviderError``; everything else is handled by the caller.
"""
from typing import Iterable, List, Optional, Protocol

import httpx
from pydantic import ValidationError

from finterm.config import settings
from finterm.core.exceptions import ConfigurationError, ProviderError
from finterm.logger import logger
from finterm.models.market import ProviderResponse


class DataProvider(Protocol):
    """Contract the orchestrator and the ticker poller depend on."""

    async def fetch_quotes(self, symbols: Iterable[str]) -> ProviderResponse:
        ...

    async def aclose(self) -> None:
        ...


def _symbol_list(symbols: Iterable[str]) -> List[str]:
    """Upper-case and de-duplicate, keeping first-seen order."""
    seen: List[str] = []
    for symbol in symbols:
        symbol = symbol.strip().upper()
        if symbol and symbol not in seen:
            seen.append(symbol)
    return seen


class MarketDataClient:
    """Client for the market data provider's ticker endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        ticker_path: Optional[str] = None,
        symbols_param: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        config = settings.PROVIDER
        self.base_url = (base_url if base_url is not None else config.base_url).rstrip("/")
        self.ticker_path = ticker_path or config.ticker_path
        self.symbols_param = symbols_param or config.symbols_param
        timeout = config.timeout_seconds if timeout_seconds is None else timeout_seconds
        self.timeout = timeout if timeout and timeout > 0 else None

        if not self.base_url:
            raise ConfigurationError("Market data provider base URL is not configured")

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.timeout)

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.ticker_path}"

    async def fetch_quotes(self, symbols: Iterable[str]) -> ProviderResponse:
        """Fetch quotes (and any attached news) for ``symbols``.

        Raises:
            ProviderError: network failure, timeout, HTTP 5xx, or a body
                that is not a valid provider payload
        """
        symbol_list = _symbol_list(symbols)
        params = {self.symbols_param: ",".join(symbol_list)}
        logger.debug(f"GET {self.url} symbols={params[self.symbols_param]}")

        try:
            response = await self._client.get(self.url, params=params)
        except httpx.HTTPError as exc:
            logger.warning(f"Error connecting to market data provider: {exc!r}")
            raise ProviderError(f"Provider request failed: {exc}") from exc

        if response.status_code >= 500:
            logger.error(
                f"Market data provider error: status={response.status_code} "
                f"body={response.text[:500]}"
            )
            raise ProviderError(f"Provider returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            logger.error(f"Market data provider returned non-JSON body: {response.text[:200]}")
            raise ProviderError("Provider returned a malformed payload") from exc

        if not isinstance(body, dict):
            raise ProviderError("Provider returned a malformed payload")

        try:
            parsed = ProviderResponse.model_validate(body)
        except ValidationError as exc:
            logger.error(f"Market data provider payload failed validation: {exc}")
            raise ProviderError("Provider returned a malformed payload") from exc

        if parsed.error:
            logger.warning(
                f"Market data provider reported: {parsed.error} "
                f"(status={response.status_code}, symbols={','.join(symbol_list)})"
            )
        logger.debug(f"Received {len(parsed.data)} quotes, {len(parsed.news)} news items")
        return parsed

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
