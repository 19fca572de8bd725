"""
Shared fixtures for unit tests.
"""

import pytest

from core.config import Settings
from core.exchange_interface import ExchangeInterface


@pytest.fixture
def test_settings():
    """Settings isolated from any local .env file, with all credentials set."""
    return Settings(
        _env_file=None,
        binance_api_key="binance-key",
        binance_secret_key="binance-secret",
        bitget_api_key="bitget-key",
        bitget_secret_key="bitget-secret",
        bitget_passphrase="bitget-pass",
        retry_backoff=0.0,
        history_request_delay=0.0
    )


@pytest.fixture
def bare_settings():
    """Settings with no exchange credentials."""
    return Settings(_env_file=None, retry_backoff=0.0, history_request_delay=0.0)


class StaticExchange(ExchangeInterface):
    """Adapter serving fixed APYs per currency, without network access."""

    capabilities = {"rate_history": False, "tiered_rates": False, "signed_requests": False}

    def __init__(self, name, rates, fail=None):
        super().__init__()
        self.name = name
        self.display_name = name.capitalize()
        self.logo = f"/logos/{name}.svg"
        self.rates = rates
        self.fail = fail
        self.calls = 0
        self.initialized = False
        self.closed = False

    async def fetch_product(self, currency):
        self.calls += 1
        if self.fail is not None:
            raise self.fail
        apy = self.rates.get(currency)
        if apy is None:
            return None
        return self.make_product(currency, apy=apy)

    async def initialize(self):
        self.initialized = True

    async def shutdown(self):
        self.closed = True


@pytest.fixture
def make_exchange():
    """Factory for StaticExchange instances: make_exchange("okx", {"USDT": 4.0})."""
    def factory(name, rates=None, fail=None):
        return StaticExchange(name, rates or {}, fail=fail)
    return factory
