"""
Unit tests for payload records and provider models.
"""

import pytest

from finterm.models.market import ProviderResponse, Quote
from finterm.models.payloads import EconomyPayload, FinancialsPayload, HeatmapCell, TickerSnapshot
from tests.fixtures.fake_provider import make_quote


@pytest.mark.unit
class TestQuoteModel:

    def test_camel_case_fields(self):
        quote = Quote.model_validate(make_quote("AAPL", forwardPE=25.5, pegRatio=1.8, marketCap="3.1T"))
        assert quote.forward_pe == 25.5
        assert quote.peg_ratio == 1.8
        assert quote.market_cap == "3.1T"

    def test_absent_fields_are_none(self):
        quote = Quote.model_validate({"symbol": "^VIX"})
        assert quote.price is None
        assert quote.description is None

    def test_unknown_fields_ignored(self):
        quote = Quote.model_validate({"symbol": "X", "someNewField": 1})
        assert quote.symbol == "X"

    def test_yield_alias(self):
        assert Quote.model_validate({"symbol": "^TNX", "yield": 4.2}).yield_ == 4.2

    def test_is_up(self):
        assert Quote(symbol="A", change=0.0).is_up
        assert not Quote(symbol="A", change=-0.1).is_up
        assert Quote(symbol="A").is_up

    def test_null_data_is_empty(self):
        response = ProviderResponse.model_validate({"data": None, "news": None})
        assert response.data == []
        assert response.first_quote() is None


@pytest.mark.unit
class TestHeatmapCell:

    def test_intensity_scales_with_move(self):
        cell = HeatmapCell.from_quote(Quote(symbol="SPY", change=-1.0, change_percent=-2.5))
        assert cell.intensity == pytest.approx(20.0)
        assert cell.direction == "down"

    def test_intensity_saturates(self):
        cell = HeatmapCell.from_quote(Quote(symbol="SLV", change=5.0, change_percent=30.0))
        assert cell.intensity == 100.0
        assert cell.direction == "up"

    def test_missing_percent_is_flat(self):
        assert HeatmapCell.from_quote(Quote(symbol="X")).intensity == 0.0


@pytest.mark.unit
class TestEconomyPanels:

    def test_sub_panels_filter_by_symbol(self):
        quotes = tuple(Quote(symbol=s) for s in ("^VIX", "^TNX", "DGS2", "^FVX", "GC=F", "NG=F", "BZ=F"))
        payload = EconomyPayload(kind="ECO", quotes=quotes)
        assert [q.symbol for q in payload.volatility] == ["^VIX"]
        assert [(y.symbol, y.label) for y in payload.yields] == [
            ("^TNX", "10-Year"), ("DGS2", "DGS2"), ("^FVX", "5-Year"),
        ]
        assert [q.symbol for q in payload.commodities] == ["GC=F", "NG=F"]


@pytest.mark.unit
class TestFinancials:

    def test_projection_keeps_ratio_fields(self):
        quote = Quote.model_validate(make_quote("PLTR", pe=250.0, grossMargin=80.1, roe=9.5, description="x"))
        payload = FinancialsPayload.from_quote("FA", quote)
        assert payload.symbol == "PLTR"
        assert payload.pe == 250.0
        assert payload.gross_margin == 80.1
        assert payload.roe == 9.5
        assert not hasattr(payload, "description")


def test_empty_snapshot():
    assert TickerSnapshot().is_empty
