"""
Binance Exchange Adapter

This module implements the ExchangeInterface for Binance Simple Earn
(flexible products).

API Documentation:
    https://developers.binance.com/docs/simple_earn/

Endpoints Used:
    - GET /sapi/v1/simple-earn/flexible/list         current APR per product
    - GET /sapi/v1/simple-earn/flexible/history/rateHistory   daily APR history

Selection:
    Only products that can be purchased and are not sold out are eligible.
    When several are eligible for the same asset, the highest
    latestAnnualPercentageRate wins.

Units:
    Binance reports fractions; APY = rate * 100, two decimals.

Authentication:
    Both endpoints are signed. Without BINANCE_API_KEY and BINANCE_SECRET_KEY
    the adapter is disabled and only produces placeholders.

Structure:
    exchanges/binance/
    ├── __init__.py          # This file (BinanceExchange class)
    ├── api_client.py        # Signed REST client
    └── schemas.py           # Response schemas
"""

from typing import List, Optional

from core.config import Settings, settings
from core.exceptions import ExchangeError, RateLimitedError
from core.exchange_interface import ExchangeInterface
from core.schemas import Product
from core.utils.rates import pick_highest, to_percent
from core.utils.time import current_utc_timestamp
from .api_client import BinanceAPIClient


DAY_MS = 24 * 60 * 60 * 1000

# rateHistory rejects ranges longer than three months
HISTORY_DAYS = 90


class BinanceExchange(ExchangeInterface):
    """
    Binance Simple Earn Adapter

    Attributes:
        name: Exchange identifier ("binance")
        client: Signed Simple Earn client

    Example:
        >>> exchange = BinanceExchange()
        >>> await exchange.initialize()
        >>> products = await exchange.get_products()
        >>> await exchange.shutdown()
    """

    name = "binance"
    display_name = "Binance"
    logo = "/logos/binance.svg"

    capabilities = {
        "rate_history": True,
        "tiered_rates": False,
        "signed_requests": True
    }

    def __init__(self, config: Optional[Settings] = None):
        """
        Args:
            config: Settings to read credentials and transport options from
        """
        super().__init__()
        self.config = config or settings
        self.client = BinanceAPIClient(
            api_key=self.config.binance_api_key,
            secret_key=self.config.binance_secret_key,
            base_url=self.config.binance_base_url,
            timeout=self.config.request_timeout,
            max_retries=self.config.max_retries,
            retry_backoff=self.config.retry_backoff,
            throttle_interval=self.config.history_request_delay
        )

    # ============================================
    # Lifecycle
    # ============================================

    async def initialize(self) -> None:
        self.logger.info("Initializing Binance adapter...")
        await self.client.__aenter__()

    async def shutdown(self) -> None:
        await self.client.__aexit__(None, None, None)
        self.logger.info("Binance adapter shut down")

    async def health_check(self) -> bool:
        try:
            return await self.client.get_system_status()
        except ExchangeError as e:
            self.logger.error(f"Binance health check failed: {e}")
            return False

    def has_credentials(self) -> bool:
        return self.config.binance_credentials_configured

    # ============================================
    # Adapter
    # ============================================

    async def fetch_product(self, currency: str) -> Optional[Product]:
        """
        Fetch the best flexible product for a currency, with its APR history.

        Binance Endpoint:
            GET /sapi/v1/simple-earn/flexible/list?asset=<currency>
        """
        rows = await self.client.get_flexible_products(currency)

        eligible = [
            row for row in rows
            if row.asset.upper() == currency and row.can_purchase and not row.is_sold_out
        ]
        best = pick_highest(eligible, rate=lambda row: row.latest_annual_percentage_rate)
        if best is None:
            return None

        apy = to_percent(best.latest_annual_percentage_rate)
        history = await self._fetch_history(best.product_id, currency)

        return self.make_product(
            currency,
            apy=apy,
            history=history,
            min_amount=best.min_purchase_amount
        )

    async def _fetch_history(self, product_id: str, currency: str) -> List[float]:
        """
        Daily APR history in percentage points, oldest first.

        Any failure, throttling included, yields an empty list so the product
        falls back to current-rate fill instead of disappearing.
        """
        end_time = current_utc_timestamp(milliseconds=True)
        start_time = end_time - HISTORY_DAYS * DAY_MS

        try:
            rows = await self.client.get_rate_history(product_id, start_time, end_time)
        except RateLimitedError:
            self.logger.warning(f"Binance rate history throttled for {currency}; using current rate")
            return []
        except ExchangeError as e:
            self.logger.warning(f"Binance rate history unavailable for {currency}: {e}")
            return []

        ordered = sorted(rows, key=lambda row: row.time)
        return [to_percent(row.annual_percentage_rate) for row in ordered]
