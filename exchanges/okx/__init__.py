"""
OKX Exchange Adapter

This module implements the ExchangeInterface for OKX Savings (simple earn
lending).

API Documentation:
    https://www.okx.com/docs-v5/en/#financial-product-savings

Endpoints Used:
    - GET /api/v5/finance/savings/lending-rate-summary   current estimated rate
    - GET /api/v5/finance/savings/lending-rate-history   hourly rate history

Units:
    OKX reports fractions; APY = estRate * 100, two decimals.

Limitations:
    - No amount bounds in the API; OKX's minimum lending amount of 1 is used
      and there is no maximum
"""

from typing import List, Optional

from core.config import Settings, settings
from core.exceptions import ExchangeError, RateLimitedError
from core.exchange_interface import ExchangeInterface
from core.schemas import Product
from core.utils.rates import pick_highest, to_percent
from .api_client import OKXAPIClient


MIN_LENDING_AMOUNT = 1.0


class OKXExchange(ExchangeInterface):
    """
    OKX Savings Adapter

    Attributes:
        name: Exchange identifier ("okx")
        client: Public OKX savings client
    """

    name = "okx"
    display_name = "OKX"
    logo = "/logos/okx.svg"

    capabilities = {
        "rate_history": True,
        "tiered_rates": False,
        "signed_requests": False
    }

    def __init__(self, config: Optional[Settings] = None):
        super().__init__()
        self.config = config or settings
        self.client = OKXAPIClient(
            base_url=self.config.okx_base_url,
            timeout=self.config.request_timeout,
            max_retries=self.config.max_retries,
            retry_backoff=self.config.retry_backoff,
            throttle_interval=self.config.history_request_delay
        )

    # ============================================
    # Lifecycle
    # ============================================

    async def initialize(self) -> None:
        self.logger.info("Initializing OKX adapter...")
        await self.client.__aenter__()

    async def shutdown(self) -> None:
        await self.client.__aexit__(None, None, None)
        self.logger.info("OKX adapter shut down")

    async def health_check(self) -> bool:
        try:
            return await self.client.get_server_time() is not None
        except ExchangeError as e:
            self.logger.error(f"OKX health check failed: {e}")
            return False

    # ============================================
    # Adapter
    # ============================================

    async def fetch_product(self, currency: str) -> Optional[Product]:
        """
        Fetch the current lending rate and its hourly history for a currency.

        OKX Endpoint:
            GET /api/v5/finance/savings/lending-rate-summary?ccy=<currency>
        """
        rows = await self.client.get_lending_rate_summary(currency)

        eligible = [row for row in rows if row.ccy.upper() == currency and row.est_rate > 0]
        summary = pick_highest(eligible, rate=lambda row: row.est_rate)
        if summary is None:
            return None

        history = await self._fetch_history(currency)

        return self.make_product(
            currency,
            apy=to_percent(summary.est_rate),
            history=history,
            min_amount=MIN_LENDING_AMOUNT
        )

    async def _fetch_history(self, currency: str) -> List[float]:
        """Hourly rates in percentage points, oldest first; empty on any failure."""
        try:
            rows = await self.client.get_lending_rate_history(currency)
        except RateLimitedError:
            self.logger.warning(f"OKX rate history throttled for {currency}; using current rate")
            return []
        except ExchangeError as e:
            self.logger.warning(f"OKX rate history unavailable for {currency}: {e}")
            return []

        ordered = sorted(rows, key=lambda row: row.ts)
        return [to_percent(row.rate) for row in ordered if row.ccy.upper() == currency]
