"""
Bybit Exchange Adapter

This module implements the ExchangeInterface for Bybit Earn (FlexibleSaving).

API Documentation:
    https://bybit-exchange.github.io/docs/v5/earn/product-info

Endpoints Used:
    - GET /v5/earn/product?category=FlexibleSaving&coin=<coin>

Limitations:
    - No rate-history endpoint: every history period is filled with the
      current estimateApr
    - Public endpoint, no credentials needed

Selection:
    Only "Available" products are eligible; the highest estimateApr wins.

Structure:
    exchanges/bybit/
    ├── __init__.py          # This file (BybitExchange class)
    ├── api_client.py        # REST API client with aiohttp
    └── schemas.py           # Response schemas
"""

from typing import Optional

from core.config import Settings, settings
from core.exceptions import ExchangeError
from core.exchange_interface import ExchangeInterface
from core.schemas import Product
from core.utils.rates import pick_highest
from .api_client import BybitAPIClient


class BybitExchange(ExchangeInterface):
    """
    Bybit Earn Adapter

    Attributes:
        name: Exchange identifier ("bybit")
        client: Public Bybit Earn client

    Example:
        >>> exchange = BybitExchange()
        >>> await exchange.initialize()
        >>> products = await exchange.get_products()
    """

    name = "bybit"
    display_name = "Bybit"
    logo = "/logos/bybit.svg"

    capabilities = {
        "rate_history": False,
        "tiered_rates": False,
        "signed_requests": False
    }

    def __init__(self, config: Optional[Settings] = None):
        super().__init__()
        self.config = config or settings
        self.client = BybitAPIClient(
            base_url=self.config.bybit_base_url,
            timeout=self.config.request_timeout,
            max_retries=self.config.max_retries,
            retry_backoff=self.config.retry_backoff
        )

    # ============================================
    # Lifecycle
    # ============================================

    async def initialize(self) -> None:
        self.logger.info("Initializing Bybit adapter...")
        await self.client.__aenter__()

    async def shutdown(self) -> None:
        await self.client.__aexit__(None, None, None)
        self.logger.info("Bybit adapter shut down")

    async def health_check(self) -> bool:
        """Lightweight server-time call."""
        try:
            return await self.client.get_server_time() is not None
        except ExchangeError as e:
            self.logger.error(f"Bybit health check failed: {e}")
            return False

    # ============================================
    # Adapter
    # ============================================

    async def fetch_product(self, currency: str) -> Optional[Product]:
        """
        Fetch the best available FlexibleSaving product for a currency.

        Bybit Endpoint:
            GET /v5/earn/product?category=FlexibleSaving&coin=<currency>
        """
        items = await self.client.get_flexible_products(currency)

        eligible = [
            item for item in items
            if item.coin.upper() == currency and item.status == "Available"
        ]
        best = pick_highest(eligible, rate=lambda item: item.estimate_apr)
        if best is None:
            return None

        return self.make_product(
            currency,
            apy=best.estimate_apr,
            min_amount=best.min_stake_amount,
            max_amount=best.max_stake_amount
        )
