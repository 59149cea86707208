"""
Unit tests for the FetchOrchestrator.

Covers response shaping per command, error outcomes and the
sequence-number discipline for overlapping requests.
"""

import asyncio

import httpx
import pytest
from unittest.mock import Mock, patch

from finterm.cli.command_registry import COMMANDS, CRYPTO, ETF_THEMES, WORLD_INDICES, CommandMeta
from finterm.cli.parser import ParsedCommand, parse_command
from finterm.core.enums import ViewMode
from finterm.core.exceptions import ProviderError
from finterm.managers.fetch_orchestrator import FETCH_FAILED_MESSAGE, FetchOrchestrator
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
)
from tests.fixtures.fake_provider import FakeProvider, Gate, make_quote, make_response


def _run(orchestrator, line):
    return asyncio.run(orchestrator.dispatch(parse_command(line)))


@pytest.mark.unit
class TestLocalCommands:
    """HELP, CLEAR and unknown commands never reach the provider."""

    def test_help_lists_catalog_verbatim(self, fake_provider):
        orchestrator = FetchOrchestrator(fake_provider)
        view = _run(orchestrator, "HELP")
        assert view.mode is ViewMode.DATA
        assert isinstance(view.payload, HelpPayload)
        assert view.payload.commands == tuple(COMMANDS)
        assert fake_provider.calls == []

    def test_unknown_command(self, fake_provider):
        orchestrator = FetchOrchestrator(fake_provider)
        view = _run(orchestrator, "foo")
        assert view.mode is ViewMode.ERROR
        assert "FOO" in view.message
        assert fake_provider.calls == []

    def test_local_commands_follow_catalog_flag(self, fake_provider):
        meta = CommandMeta(name="TIME", usage="TIME", description="Clock", examples=["TIME"], fetches=False)
        builders = {"TIME": lambda command: HelpPayload(kind=command.name, commands=())}
        with patch("finterm.managers.fetch_orchestrator.LOCAL_BUILDERS", builders):
            view = asyncio.run(FetchOrchestrator(fake_provider).dispatch(ParsedCommand(meta=meta, text="TIME")))
        assert view.mode is ViewMode.DATA
        assert view.payload.kind == "TIME"
        assert fake_provider.calls == []

    def test_only_help_and_clear_skip_the_provider(self):
        assert [meta.name for meta in COMMANDS if not meta.fetches] == ["HELP", "CLEAR"]

    def test_clear_returns_to_welcome(self, fake_provider):
        fake_provider.queue(make_response([make_quote("^GSPC")]))
        orchestrator = FetchOrchestrator(fake_provider)
        _run(orchestrator, "WEI")
        view = _run(orchestrator, "CLEAR")
        assert view.mode is ViewMode.WELCOME
        assert len(fake_provider.calls) == 1

    @pytest.mark.parametrize("line, fragment", [
        ("DES", "Ticker not found"),
        ("FA", "Financial data unavailable"),
    ])
    def test_missing_ticker(self, fake_provider, line, fragment):
        orchestrator = FetchOrchestrator(fake_provider)
        view = _run(orchestrator, line)
        assert view.mode is ViewMode.ERROR
        assert fragment in view.message
        assert fake_provider.calls == []


@pytest.mark.unit
class TestShaping:

    def test_wei_requests_world_indices_and_labels_them(self):
        provider = FakeProvider(make_response([make_quote("^GSPC"), make_quote("^FCHI"), make_quote("^XYZ")]))
        view = _run(FetchOrchestrator(provider), "wei")
        assert provider.calls == [WORLD_INDICES]
        assert view.mode is ViewMode.DATA
        assert view.label == "WEI"
        assert isinstance(view.payload, QuoteListPayload)
        assert [q.label for q in view.payload.quotes] == ["S&P 500", "CAC 40", "^XYZ"]

    def test_gp_builds_heatmap(self):
        provider = FakeProvider(make_response([make_quote("SPY", change=-1, change_percent=-2.0)]))
        view = _run(FetchOrchestrator(provider), "GP")
        assert isinstance(view.payload, HeatmapPayload)
        cell = view.payload.cells[0]
        assert cell.direction == "down"
        assert cell.intensity == pytest.approx(16.0)

    def test_cryp_partitions_on_usd_suffix(self):
        provider = FakeProvider(make_response([
            make_quote("BTC-USD"), make_quote("MSTR"), make_quote("ETH-USD"), make_quote("USDX"),
        ]))
        view = _run(FetchOrchestrator(provider), "CRYP")
        assert provider.calls == [CRYPTO]
        assert isinstance(view.payload, CryptoPayload)
        assert [q.symbol for q in view.payload.coins] == ["BTC-USD", "ETH-USD"]
        assert [q.symbol for q in view.payload.equities] == ["MSTR", "USDX"]

    def test_etf_left_joins_themes(self):
        provider = FakeProvider(make_response([make_quote("ARKK"), make_quote("NEWETF")]))
        view = _run(FetchOrchestrator(provider), "ETF")
        assert provider.calls == [tuple(t.symbol for t in ETF_THEMES)]
        assert isinstance(view.payload, ThemedPayload)
        first, second = view.payload.items
        assert (first.symbol, first.label, first.detail) == ("ARKK", "Innovation", "Disruptive Innovation")
        assert (second.symbol, second.label) == ("NEWETF", None)

    def test_secf_joins_sector_names(self):
        provider = FakeProvider(make_response([make_quote("XLK"), make_quote("XLRE")]))
        view = _run(FetchOrchestrator(provider), "SECF")
        assert [item.label for item in view.payload.items] == ["Technology", "Real Estate"]

    @pytest.mark.parametrize("line", ["STX", "INDU", "RV"])
    def test_plain_quote_lists(self, line):
        provider = FakeProvider(make_response([make_quote("AAPL", pe=30.0)]))
        view = _run(FetchOrchestrator(provider), line)
        assert isinstance(view.payload, QuoteListPayload)
        assert view.payload.kind == line
        assert view.payload.quotes[0].quote.pe == 30.0

    def test_eco_keeps_all_quotes(self):
        provider = FakeProvider(make_response([make_quote("^VIX"), make_quote("^TNX"), make_quote("GC=F")]))
        view = _run(FetchOrchestrator(provider), "ECO")
        assert isinstance(view.payload, EconomyPayload)
        assert len(view.payload.quotes) == 3
        assert [q.symbol for q in view.payload.volatility] == ["^VIX"]

    def test_news_discards_quotes(self):
        news = [{"title": "Stocks rally", "publisher": "Wire", "link": "https://x", "published": "1h ago"}]
        provider = FakeProvider(make_response([make_quote("SPY")], news=news))
        view = _run(FetchOrchestrator(provider), "NEWS")
        assert isinstance(view.payload, NewsPayload)
        assert [n.title for n in view.payload.items] == ["Stocks rally"]

    def test_empty_list_result_is_still_data(self):
        provider = FakeProvider(make_response([]))
        view = _run(FetchOrchestrator(provider), "INDU")
        assert view.mode is ViewMode.DATA
        assert view.payload.quotes == ()


@pytest.mark.unit
class TestSingleTicker:

    def test_des_found(self):
        news = [{"title": f"n{i}"} for i in range(8)]
        provider = FakeProvider(make_response([make_quote("AAPL", name="Apple Inc.")], news=news))
        view = _run(FetchOrchestrator(provider), "DES AAPL")
        assert provider.calls == [("AAPL",)]
        assert view.mode is ViewMode.DATA
        assert view.label == "DES AAPL"
        assert isinstance(view.payload, DescriptionPayload)
        assert view.payload.symbol == "AAPL"
        assert len(view.payload.news) == 8

    def test_des_not_found(self):
        provider = FakeProvider(make_response([]))
        view = _run(FetchOrchestrator(provider), "DES ZZZZ")
        assert view.mode is ViewMode.ERROR
        assert "not found" in view.message
        assert "ZZZZ" in view.message

    def test_fa_found(self):
        provider = FakeProvider(make_response([make_quote("PLTR", pe=200.0, netMargin=12.0)]))
        view = _run(FetchOrchestrator(provider), "FA PLTR")
        assert isinstance(view.payload, FinancialsPayload)
        assert view.payload.net_margin == 12.0

    def test_fa_unavailable(self):
        provider = FakeProvider(make_response([], error="No data"))
        view = _run(FetchOrchestrator(provider), "FA NOPE")
        assert view.mode is ViewMode.ERROR
        assert "unavailable" in view.message


@pytest.mark.unit
class TestProviderFailures:

    def test_provider_error_becomes_error_view(self):
        provider = FakeProvider(ProviderError("connection refused"))
        view = _run(FetchOrchestrator(provider), "WEI")
        assert view.mode is ViewMode.ERROR
        assert view.message == FETCH_FAILED_MESSAGE

    def test_unexpected_exception_is_contained(self):
        provider = FakeProvider(RuntimeError("bug"))
        view = _run(FetchOrchestrator(provider), "DES AAPL")
        assert view.mode is ViewMode.ERROR
        assert view.message == FETCH_FAILED_MESSAGE

    def test_transport_error_class_is_not_special(self):
        # The client wraps httpx errors; a raw one still ends in ERROR
        provider = FakeProvider(httpx.ConnectError("down"))
        view = _run(FetchOrchestrator(provider), "GP")
        assert view.mode is ViewMode.ERROR


@pytest.mark.unit
class TestListener:

    def test_listener_sees_loading_then_data(self):
        provider = FakeProvider(make_response([make_quote("^GSPC")]))
        listener = Mock()
        _run(FetchOrchestrator(provider, on_change=listener), "WEI")
        modes = [call.args[0].mode for call in listener.call_args_list]
        assert modes == [ViewMode.LOADING, ViewMode.DATA]

    def test_listener_failure_does_not_break_dispatch(self):
        provider = FakeProvider(make_response([make_quote("^GSPC")]))
        listener = Mock(side_effect=RuntimeError("render failed"))
        view = _run(FetchOrchestrator(provider, on_change=listener), "WEI")
        assert view.mode is ViewMode.DATA


@pytest.mark.unit
class TestSequencing:
    """Only the most recently issued request may update the view."""

    def test_late_response_does_not_clobber_newer_command(self):
        async def scenario():
            slow = Gate(make_response([make_quote("^GSPC")]))
            provider = FakeProvider(slow, make_response([make_quote("AAPL")]))
            orchestrator = FetchOrchestrator(provider)

            first = asyncio.create_task(orchestrator.dispatch(parse_command("WEI")))
            await asyncio.sleep(0)
            assert orchestrator.view_state.is_loading

            second = await orchestrator.dispatch(parse_command("DES AAPL"))
            assert second.payload.symbol == "AAPL"

            slow.release()
            await first
            return orchestrator.view_state

        view = asyncio.run(scenario())
        assert view.mode is ViewMode.DATA
        assert view.label == "DES AAPL"

    def test_stale_response_discarded_while_newer_still_loading(self):
        async def scenario():
            first_gate = Gate(make_response([make_quote("^GSPC")]))
            second_gate = Gate(make_response([make_quote("AAPL")]))
            provider = FakeProvider(first_gate, second_gate)
            orchestrator = FetchOrchestrator(provider)

            first = asyncio.create_task(orchestrator.dispatch(parse_command("WEI")))
            second = asyncio.create_task(orchestrator.dispatch(parse_command("DES AAPL")))
            await asyncio.sleep(0)

            first_gate.release()
            await first
            assert orchestrator.view_state.is_loading
            assert orchestrator.view_state.label == "DES AAPL"

            second_gate.release()
            await second
            return orchestrator.view_state

        view = asyncio.run(scenario())
        assert view.label == "DES AAPL"
        assert view.mode is ViewMode.DATA

    def test_stale_failure_is_discarded_too(self):
        async def scenario():
            failing = Gate(ProviderError("timeout"))
            provider = FakeProvider(failing, make_response([make_quote("SPY")]))
            orchestrator = FetchOrchestrator(provider)

            first = asyncio.create_task(orchestrator.dispatch(parse_command("WEI")))
            await asyncio.sleep(0)
            await orchestrator.dispatch(parse_command("GP"))
            failing.release()
            await first
            return orchestrator.view_state

        view = asyncio.run(scenario())
        assert view.mode is ViewMode.DATA
        assert view.label == "GP"

    def test_clear_wins_over_pending_request(self):
        async def scenario():
            slow = Gate(make_response([make_quote("^GSPC")]))
            orchestrator = FetchOrchestrator(FakeProvider(slow))

            pending = asyncio.create_task(orchestrator.dispatch(parse_command("WEI")))
            await asyncio.sleep(0)
            cleared = await orchestrator.dispatch(parse_command("CLEAR"))
            assert cleared.mode is ViewMode.WELCOME
            assert orchestrator.authoritative_sequence is None

            slow.release()
            await pending
            return orchestrator.view_state

        assert asyncio.run(scenario()).mode is ViewMode.WELCOME

    def test_local_command_also_takes_authority(self):
        async def scenario():
            slow = Gate(make_response([make_quote("^GSPC")]))
            orchestrator = FetchOrchestrator(FakeProvider(slow))

            pending = asyncio.create_task(orchestrator.dispatch(parse_command("WEI")))
            await asyncio.sleep(0)
            await orchestrator.dispatch(parse_command("HELP"))
            slow.release()
            await pending
            return orchestrator.view_state

        view = asyncio.run(scenario())
        assert isinstance(view.payload, HelpPayload)

    def test_sequence_numbers_increase(self, fake_provider):
        orchestrator = FetchOrchestrator(fake_provider)
        _run(orchestrator, "WEI")
        first = orchestrator.authoritative_sequence
        _run(orchestrator, "GP")
        assert orchestrator.authoritative_sequence > first
