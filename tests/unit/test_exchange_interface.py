"""
Unit Tests for Exchange Interface, Product Schema and Manager

These tests verify that:
- ExchangeInterface is properly defined as an abstract class
- get_products() always returns one Product per currency and never raises
  vendor errors
- Product enforces its invariants
- ExchangeManager registers adapters and manages their lifecycle

Run with:
    pytest tests/unit/test_exchange_interface.py -v
"""

import pytest
from pydantic import ValidationError

from core.exceptions import ExchangeTimeoutError, PayloadSchemaError
from core.exchange_interface import ExchangeInterface
from core.exchange_manager import ExchangeManager
from core.schemas import ApiResponse, Product, SUPPORTED_CURRENCIES
from exchanges.binance import BinanceExchange
from exchanges.bitget import BitgetExchange
from exchanges.bybit import BybitExchange
from exchanges.okx import OKXExchange


def product_payload(**overrides):
    payload = {
        "id": "okx-usdt-flexible",
        "exchange": "OKX",
        "exchange_logo": "/logos/okx.svg",
        "currency": "USDT",
        "apy": 4.0,
        "apy_history": {"1d": [4.0] * 12, "1w": [4.0] * 28, "1m": [4.0] * 120},
        "min_amount": 1.0,
        "max_amount": None,
        "update_time": 1704110400000
    }
    payload.update(overrides)
    return payload


# ============================================
# Tests for ExchangeInterface
# ============================================

class TestExchangeInterface:
    """Test the ExchangeInterface abstract class"""

    def test_cannot_instantiate_abstract_interface(self):
        with pytest.raises(TypeError):
            ExchangeInterface()

    def test_supports_method_returns_correct_values(self, make_exchange):
        exchange = make_exchange("dummy")
        assert exchange.supports("rate_history") is False
        assert exchange.supports("nonexistent_feature") is False

    @pytest.mark.asyncio
    async def test_health_check_default_returns_true(self):
        class Minimal(ExchangeInterface):
            name = "minimal"
            display_name = "Minimal"

            async def fetch_product(self, currency):
                return None

        assert await Minimal().health_check() is True

    @pytest.mark.asyncio
    async def test_one_product_per_currency_in_order(self, make_exchange):
        exchange = make_exchange("okx", {"USDC": 5.0, "USDT": 4.0})

        products = await exchange.get_products()

        assert [p.currency for p in products] == list(SUPPORTED_CURRENCIES)
        assert [p.apy for p in products] == [4.0, 5.0, 0.0]

    @pytest.mark.asyncio
    async def test_vendor_errors_become_placeholders(self, make_exchange):
        exchange = make_exchange("okx", {"USDT": 4.0}, fail=ExchangeTimeoutError("okx", "timeout"))

        products = await exchange.get_products()

        assert len(products) == 3
        assert all(p.apy == 0 and not p.is_active for p in products)

    @pytest.mark.asyncio
    async def test_invalid_product_values_become_placeholders(self, make_exchange):
        exchange = make_exchange("okx", {"USDT": -1.0})

        products = await exchange.get_products()

        assert products[0].apy == 0

    @pytest.mark.asyncio
    async def test_defects_propagate(self, make_exchange):
        exchange = make_exchange("okx", fail=KeyError("bug"))

        with pytest.raises(KeyError):
            await exchange.get_products()

    @pytest.mark.asyncio
    async def test_idempotent_apart_from_update_time(self, make_exchange):
        exchange = make_exchange("okx", {"USDT": 4.0, "DAI": 3.0})

        first = await exchange.get_products()
        second = await exchange.get_products()

        strip = lambda products: [p.model_dump(exclude={"update_time"}) for p in products]
        assert strip(first) == strip(second)

    def test_placeholder_shape(self, make_exchange):
        placeholder = make_exchange("okx").make_placeholder("DAI")

        assert placeholder.id == "okx-dai-flexible"
        assert placeholder.apy == 0.0
        assert placeholder.apy_history["1m"] == [0.0] * 120


class TestUncredentialedAdapters:
    """Signed exchanges without keys yield placeholders for every currency"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exchange_class", [BinanceExchange, BitgetExchange])
    async def test_placeholders_without_credentials(self, exchange_class, bare_settings):
        exchange = exchange_class(bare_settings)

        products = await exchange.get_products()

        assert [p.currency for p in products] == list(SUPPORTED_CURRENCIES)
        assert all(p.apy == 0 for p in products)

    def test_public_exchanges_need_no_credentials(self, bare_settings):
        assert BybitExchange(bare_settings).has_credentials()
        assert OKXExchange(bare_settings).has_credentials()


# ============================================
# Tests for Product Schema
# ============================================

class TestProductSchema:

    def test_valid_product(self):
        product = Product(**product_payload())
        assert product.is_active

    def test_wrong_history_length_rejected(self):
        with pytest.raises(ValidationError):
            Product(**product_payload(apy_history={"1d": [4.0] * 11, "1w": [4.0] * 28, "1m": [4.0] * 120}))

    def test_missing_period_rejected(self):
        with pytest.raises(ValidationError):
            Product(**product_payload(apy_history={"1d": [4.0] * 12, "1w": [4.0] * 28}))

    def test_negative_apy_rejected(self):
        with pytest.raises(ValidationError):
            Product(**product_payload(apy=-0.1))

    def test_unsupported_currency_rejected(self):
        with pytest.raises(ValidationError):
            Product(**product_payload(currency="BUSD"))

    def test_max_below_min_rejected(self):
        with pytest.raises(ValidationError):
            Product(**product_payload(min_amount=100.0, max_amount=10.0))

    def test_products_are_frozen(self):
        product = Product(**product_payload())
        with pytest.raises(ValidationError):
            product.apy = 9.0

    def test_serialized_with_camel_case_keys(self):
        dumped = Product(**product_payload()).model_dump(mode="json", by_alias=True)
        assert dumped["exchangeLogo"] == "/logos/okx.svg"
        assert dumped["apyHistory"]["1w"] == [4.0] * 28
        assert dumped["maxAmount"] is None
        assert dumped["updateTime"] == 1704110400000


class TestApiResponse:

    def test_success_envelope(self):
        content = ApiResponse(success=True, data=[Product(**product_payload())]).to_content()
        assert content["success"] is True
        assert content["data"][0]["id"] == "okx-usdt-flexible"
        assert "error" not in content

    def test_empty_success_envelope_keeps_data(self):
        assert ApiResponse(success=True, data=[]).to_content() == {"success": True, "data": []}

    def test_failure_envelope(self):
        assert ApiResponse(success=False, error="boom").to_content() == {"success": False, "error": "boom"}


# ============================================
# Tests for ExchangeManager
# ============================================

class TestExchangeManager:

    def test_default_registry_order(self, bare_settings):
        manager = ExchangeManager(config=bare_settings)
        assert manager.list_exchanges() == ["binance", "bybit", "okx", "bitget"]
        assert len(manager) == 4

    def test_duplicate_names_rejected(self, make_exchange):
        with pytest.raises(ValueError):
            ExchangeManager([make_exchange("okx"), make_exchange("okx")])

    def test_describe_exchanges(self, bare_settings):
        manager = ExchangeManager(config=bare_settings)
        described = {entry["name"]: entry for entry in manager.describe_exchanges()}

        assert described["binance"]["credentialsConfigured"] is False
        assert described["bybit"]["credentialsConfigured"] is True
        assert described["bitget"]["capabilities"]["tiered_rates"] is True

    @pytest.mark.asyncio
    async def test_lifecycle_reaches_every_exchange(self, make_exchange):
        exchanges = [make_exchange("okx"), make_exchange("bybit")]
        manager = ExchangeManager(exchanges)

        await manager.initialize_all()
        await manager.shutdown_all()

        assert all(ex.initialized and ex.closed for ex in exchanges)

    @pytest.mark.asyncio
    async def test_health_check_all(self, make_exchange):
        manager = ExchangeManager([make_exchange("okx"), make_exchange("bybit")])
        assert await manager.health_check_all() == {"okx": True, "bybit": True}
