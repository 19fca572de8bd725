"""
Unit Tests for the HTTP API

Uses FastAPI's TestClient against an application built with static
exchanges, so no request leaves the process.

Run with:
    pytest tests/unit/test_api.py -v
"""

import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.main import CLIENT_CLOSED_REQUEST, create_app
from services.aggregator import ProductAggregator
from services.product_service import ProductService
from storage.cache import ProductCache


@pytest.fixture
def exchanges(make_exchange):
    return [
        make_exchange("binance", {"USDT": 4.0}),
        make_exchange("bybit", {"USDT": 5.25, "USDC": 3.1}),
        make_exchange("okx", {"USDC": 4.4}),
    ]


@pytest.fixture
def client(exchanges, bare_settings):
    app = create_app(exchanges=exchanges, config=bare_settings)
    with TestClient(app) as test_client:
        yield test_client


class TestProductsEndpoint:

    def test_default_is_usdt_sorted(self, client):
        response = client.get("/products")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [p["id"] for p in body["data"]] == ["bybit-usdt-flexible", "binance-usdt-flexible"]
        assert all(p["currency"] == "USDT" for p in body["data"])

    def test_camel_case_product_fields(self, client):
        product = client.get("/products", params={"coin": "USDC"}).json()["data"][0]

        assert product["exchange"] == "Okx"
        assert product["exchangeLogo"] == "/logos/okx.svg"
        assert product["apy"] == 4.4
        assert len(product["apyHistory"]["1d"]) == 12
        assert len(product["apyHistory"]["1w"]) == 28
        assert len(product["apyHistory"]["1m"]) == 120
        assert "minAmount" in product
        assert product["maxAmount"] is None
        assert isinstance(product["updateTime"], int)

    def test_empty_result_is_success(self, client):
        response = client.get("/products", params={"coin": "DAI", "period": "1m"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}

    def test_second_request_served_from_cache(self, client, exchanges):
        client.get("/products", params={"coin": "USDT", "period": "1w"})
        client.get("/products", params={"coin": "USDT", "period": "1w"})

        assert exchanges[0].calls == 3

    def test_include_inactive_returns_placeholders(self, client):
        body = client.get("/products", params={"coin": "DAI", "include_inactive": "true"}).json()

        assert len(body["data"]) == 3
        assert all(p["apy"] == 0 for p in body["data"])

    def test_invalid_coin_is_400_envelope(self, client):
        response = client.get("/products", params={"coin": "BUSD"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "coin" in body["error"]
        assert "data" not in body

    def test_invalid_period_is_400_envelope(self, client):
        response = client.get("/products", params={"period": "1y"})

        assert response.status_code == 400
        assert "period" in response.json()["error"]

    def test_unexpected_error_is_500_envelope(self, make_exchange, bare_settings):
        app = create_app(exchanges=[make_exchange("okx", fail=RuntimeError("secret detail"))], config=bare_settings)

        with TestClient(app) as test_client:
            response = test_client.get("/products")

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to fetch products"}


class TestClientDisconnect:

    @pytest.mark.asyncio
    async def test_disconnect_cancels_aggregation(self, make_exchange, bare_settings):
        started = asyncio.Event()
        cancelled = asyncio.Event()

        class SlowAggregator(ProductAggregator):
            async def aggregate(self, currency):
                started.set()
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    cancelled.set()
                    raise
                return []

        cache = ProductCache()
        service = ProductService(SlowAggregator([make_exchange("okx", {"USDT": 4.0})]), cache)

        async def is_disconnected():
            return started.is_set()

        request = SimpleNamespace(
            app=SimpleNamespace(state=SimpleNamespace(product_service=service)),
            is_disconnected=is_disconnected
        )

        app = create_app(exchanges=[], config=bare_settings.model_copy(update={"disconnect_poll_interval": 0.01}))
        endpoint = next(route.endpoint for route in app.routes if getattr(route, "path", None) == "/products")

        response = await endpoint(request, period="1d", coin="USDT", include_inactive=False)

        assert response.status_code == CLIENT_CLOSED_REQUEST
        assert cancelled.is_set()
        assert len(cache) == 0


class TestSystemEndpoints:

    def test_root_lists_exchanges(self, client):
        body = client.get("/").json()
        assert body["exchanges"] == ["binance", "bybit", "okx"]

    def test_health_reports_exchanges_and_cache(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["exchanges"] == {"binance": True, "bybit": True, "okx": True}
        assert "hits" in body["cache"]

    def test_exchanges_endpoint(self, client):
        body = client.get("/exchanges").json()

        names = [entry["name"] for entry in body["exchanges"]]
        assert names == ["binance", "bybit", "okx"]
        assert "capabilities" in body["exchanges"][0]
