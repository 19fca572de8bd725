"""
Unit Tests for the OKX Savings Client and Adapter

Run with:
    pytest tests/unit/test_okx.py -v
"""

import pytest
import pytest_asyncio

from core.exceptions import ExchangeHTTPError, ExchangeResponseError, RateLimitedError
from exchanges.okx import MIN_LENDING_AMOUNT, OKXExchange
from exchanges.okx.api_client import OKXAPIClient
from exchanges.okx.schemas import OKXLendingRateHistory, OKXLendingRateSummary


@pytest_asyncio.fixture
async def api_client():
    async with OKXAPIClient(throttle_interval=0.0) as client:
        yield client


@pytest.fixture
def exchange(bare_settings):
    return OKXExchange(bare_settings)


def summary(ccy="USDT", est_rate=0.0401):
    return OKXLendingRateSummary(ccy=ccy, avg_rate=0.0384, pre_rate=0.0391, est_rate=est_rate)


# ============================================
# Client Tests
# ============================================

class TestLendingRateSummary:

    @pytest.mark.asyncio
    async def test_decodes_summary(self, api_client, monkeypatch):
        captured = {}

        async def mock_get(path, params=None):
            captured["params"] = params
            return {"code": "0", "msg": "", "data": [{
                "ccy": "USDT",
                "avgAmt": "16843534.09",
                "avgRate": "0.0384",
                "preRate": "0.0391",
                "estRate": "0.0401"
            }]}

        monkeypatch.setattr(api_client, "_get", mock_get)

        rows = await api_client.get_lending_rate_summary("usdt")

        assert captured["params"] == {"ccy": "USDT"}
        assert rows[0].est_rate == 0.0401

    @pytest.mark.asyncio
    async def test_error_code_raises(self, api_client, monkeypatch):
        async def mock_get(path, params=None):
            return {"code": "51000", "msg": "Parameter ccy error", "data": []}

        monkeypatch.setattr(api_client, "_get", mock_get)

        with pytest.raises(ExchangeResponseError) as exc_info:
            await api_client.get_lending_rate_summary("USDT")
        assert exc_info.value.code == "51000"


class TestLendingRateHistory:

    @pytest.mark.asyncio
    async def test_limit_capped_at_100(self, api_client, monkeypatch):
        captured = {}

        async def mock_get(path, params=None):
            captured["params"] = params
            return {"code": "0", "msg": "", "data": [
                {"ccy": "USDT", "amt": "1", "rate": "0.0392", "ts": "1704106800000"}
            ]}

        monkeypatch.setattr(api_client, "_get", mock_get)

        rows = await api_client.get_lending_rate_history("USDT", limit=500)

        assert captured["params"]["limit"] == 100
        assert rows[0].ts == 1704106800000

    @pytest.mark.asyncio
    async def test_throttle_code_raises_rate_limited(self, api_client, monkeypatch):
        async def mock_get(path, params=None):
            return {"code": "50011", "msg": "Too Many Requests", "data": []}

        monkeypatch.setattr(api_client, "_get", mock_get)

        with pytest.raises(RateLimitedError):
            await api_client.get_lending_rate_history("USDT")


# ============================================
# Adapter Tests
# ============================================

class TestOKXExchange:

    @pytest.mark.asyncio
    async def test_estimated_rate_converted_to_percent(self, exchange, monkeypatch):
        async def mock_summary(ccy):
            return [summary(est_rate=0.0401)]

        async def mock_history(ccy, limit=100):
            return []

        monkeypatch.setattr(exchange.client, "get_lending_rate_summary", mock_summary)
        monkeypatch.setattr(exchange.client, "get_lending_rate_history", mock_history)

        product = await exchange.fetch_product("USDT")

        assert product.apy == 4.01
        assert product.min_amount == MIN_LENDING_AMOUNT
        assert product.max_amount is None

    @pytest.mark.asyncio
    async def test_zero_rate_is_not_eligible(self, exchange, monkeypatch):
        async def mock_summary(ccy):
            return [summary(est_rate=0.0)]

        monkeypatch.setattr(exchange.client, "get_lending_rate_summary", mock_summary)

        assert await exchange.fetch_product("USDT") is None

    @pytest.mark.asyncio
    async def test_hourly_history_newest_kept_and_ordered(self, exchange, monkeypatch):
        async def mock_summary(ccy):
            return [summary(est_rate=0.05)]

        async def mock_history(ccy, limit=100):
            # OKX sends newest first
            return [
                OKXLendingRateHistory(ccy="USDT", rate=0.01 * (i % 7), ts=1000 - i)
                for i in range(20)
            ]

        monkeypatch.setattr(exchange.client, "get_lending_rate_summary", mock_summary)
        monkeypatch.setattr(exchange.client, "get_lending_rate_history", mock_history)

        product = await exchange.fetch_product("USDT")

        oldest_first = [round(0.01 * (i % 7) * 100, 2) for i in reversed(range(20))]
        assert product.apy_history["1d"] == oldest_first[-12:]
        assert product.apy_history["1w"] == oldest_first + [5.0] * 8

    @pytest.mark.asyncio
    async def test_history_failure_degrades_to_current_rate(self, exchange, monkeypatch):
        async def mock_summary(ccy):
            return [summary(ccy=ccy, est_rate=0.03)]

        async def mock_history(ccy, limit=100):
            raise ExchangeHTTPError("okx", 503, "unavailable")

        monkeypatch.setattr(exchange.client, "get_lending_rate_summary", mock_summary)
        monkeypatch.setattr(exchange.client, "get_lending_rate_history", mock_history)

        products = await exchange.get_products()

        assert [p.apy for p in products] == [3.0, 3.0, 3.0]
        assert all(set(p.apy_history["1m"]) == {3.0} for p in products)
