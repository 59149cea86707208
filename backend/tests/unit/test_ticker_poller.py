"""
Unit tests for the TickerPoller.
"""

import asyncio

import pytest
from unittest.mock import Mock

from finterm.cli.command_registry import TICKER_STRIP, SymbolLabel
from finterm.core.exceptions import ConfigurationError, ProviderError
from finterm.threads.ticker_poller import TickerPoller
from tests.fixtures.fake_provider import FakeProvider, make_quote, make_response


@pytest.mark.unit
class TestPollOnce:

    def test_requests_ticker_strip_symbols(self, fake_provider):
        poller = TickerPoller(fake_provider, interval=60)
        asyncio.run(poller.poll_once())
        assert fake_provider.calls == [tuple(item.symbol for item in TICKER_STRIP)]

    def test_success_replaces_snapshot_with_labels(self):
        provider = FakeProvider(make_response([make_quote("^GSPC"), make_quote("BTC-USD")]))
        poller = TickerPoller(provider, interval=60)
        snapshot = asyncio.run(poller.poll_once())
        assert [item.label for item in snapshot.items] == ["S&P 500", "BITCOIN"]
        assert snapshot.fetched_at is not None
        assert poller.snapshot is snapshot

    def test_starts_empty(self, fake_provider):
        poller = TickerPoller(fake_provider, interval=60)
        assert poller.snapshot.is_empty

    def test_failure_keeps_previous_snapshot(self):
        provider = FakeProvider(
            make_response([make_quote("^GSPC", price=5000)]),
            ProviderError("timeout"),
            make_response([make_quote("^GSPC", price=5100)]),
            ProviderError("timeout"),
        )
        poller = TickerPoller(provider, interval=60)

        async def scenario():
            prices = []
            for _ in range(4):
                snapshot = await poller.poll_once()
                prices.append(snapshot.items[0].quote.price)
            return prices

        assert asyncio.run(scenario()) == [5000, 5000, 5100, 5100]
        assert poller.poll_count == 4
        assert poller.failure_count == 2

    def test_empty_data_keeps_previous_snapshot(self):
        provider = FakeProvider(make_response([make_quote("^DJI")]), make_response([]))
        poller = TickerPoller(provider, interval=60)

        async def scenario():
            await poller.poll_once()
            return await poller.poll_once()

        snapshot = asyncio.run(scenario())
        assert [item.symbol for item in snapshot.items] == ["^DJI"]

    def test_unexpected_exception_keeps_snapshot(self):
        provider = FakeProvider(RuntimeError("bug"))
        poller = TickerPoller(provider, interval=60)
        assert asyncio.run(poller.poll_once()).is_empty
        assert poller.failure_count == 1

    def test_custom_symbols(self):
        provider = FakeProvider(make_response([make_quote("AAPL")]))
        poller = TickerPoller(provider, interval=60, symbols=[SymbolLabel("AAPL", "APPLE")])
        snapshot = asyncio.run(poller.poll_once())
        assert provider.calls == [("AAPL",)]
        assert snapshot.items[0].label == "APPLE"


@pytest.mark.unit
class TestListener:

    def test_on_update_called_on_success_only(self):
        provider = FakeProvider(make_response([make_quote("^GSPC")]), ProviderError("down"))
        listener = Mock()
        poller = TickerPoller(provider, interval=60, on_update=listener)

        async def scenario():
            await poller.poll_once()
            await poller.poll_once()

        asyncio.run(scenario())
        listener.assert_called_once_with(poller.snapshot)

    def test_listener_failure_is_contained(self):
        provider = FakeProvider(make_response([make_quote("^GSPC")]))
        poller = TickerPoller(provider, interval=60, on_update=Mock(side_effect=RuntimeError("x")))
        snapshot = asyncio.run(poller.poll_once())
        assert not snapshot.is_empty


@pytest.mark.unit
class TestLoop:

    def test_rejects_non_positive_interval(self, fake_provider):
        with pytest.raises(ConfigurationError):
            TickerPoller(fake_provider, interval=0)

    def test_default_interval_from_settings(self, fake_provider):
        from finterm.config import settings
        poller = TickerPoller(fake_provider)
        assert poller.interval == settings.TICKER.poll_interval_seconds

    def test_polls_immediately_then_on_interval(self):
        provider = FakeProvider(default=make_response([make_quote("^GSPC")]))
        poller = TickerPoller(provider, interval=0.01)

        async def scenario():
            poller.start()
            await asyncio.sleep(0)
            first = len(provider.calls)
            await asyncio.sleep(0.05)
            running = poller.running
            await poller.stop()
            return first, running

        first, running = asyncio.run(scenario())
        assert first == 1
        assert running
        assert len(provider.calls) >= 2
        assert not poller.running

    def test_start_is_idempotent(self, fake_provider):
        poller = TickerPoller(fake_provider, interval=60)

        async def scenario():
            task = poller.start()
            same = poller.start() is task
            await poller.stop()
            return same

        assert asyncio.run(scenario())

    def test_stop_without_start(self, fake_provider):
        poller = TickerPoller(fake_provider, interval=60)
        asyncio.run(poller.stop())
        assert not poller.running

