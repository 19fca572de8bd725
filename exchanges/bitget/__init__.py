"""
Bitget Exchange Adapter

This module implements the ExchangeInterface for Bitget Earn savings
(flexible products only).

API Documentation:
    https://www.bitget.com/api-doc/earn/savings/Savings-Products

Endpoints Used:
    - GET /api/v2/earn/savings/product   products with their tiered APY ladder

Selection:
    Eligible products are flexible and in progress. Each product's rate is
    taken from select_tier() (second tier of a multi-tier ladder, otherwise
    the only tier); the product with the highest selected rate wins. The
    reported amount bounds are those of the selected tier.

Units:
    currentApy is already in percent; only rounded to two decimals.

Limitations:
    - No rate history endpoint; history is filled with the current APY
    - Signed endpoint: without key, secret and passphrase the adapter is disabled
"""

from typing import Optional

from core.config import Settings, settings
from core.exceptions import ExchangeError
from core.exchange_interface import ExchangeInterface
from core.schemas import Product
from core.utils.rates import pick_highest, select_tier
from .api_client import BitgetAPIClient


FLEXIBLE = "flexible"
IN_PROGRESS = "in_progress"


class BitgetExchange(ExchangeInterface):
    """
    Bitget Savings Adapter

    Attributes:
        name: Exchange identifier ("bitget")
        client: Signed Bitget Earn client
    """

    name = "bitget"
    display_name = "Bitget"
    logo = "/logos/bitget.svg"

    capabilities = {
        "rate_history": False,
        "tiered_rates": True,
        "signed_requests": True
    }

    def __init__(self, config: Optional[Settings] = None):
        super().__init__()
        self.config = config or settings
        self.client = BitgetAPIClient(
            api_key=self.config.bitget_api_key,
            secret_key=self.config.bitget_secret_key,
            passphrase=self.config.bitget_passphrase,
            base_url=self.config.bitget_base_url,
            timeout=self.config.request_timeout,
            max_retries=self.config.max_retries,
            retry_backoff=self.config.retry_backoff
        )

    # ============================================
    # Lifecycle
    # ============================================

    async def initialize(self) -> None:
        self.logger.info("Initializing Bitget adapter...")
        await self.client.__aenter__()

    async def shutdown(self) -> None:
        await self.client.__aexit__(None, None, None)
        self.logger.info("Bitget adapter shut down")

    async def health_check(self) -> bool:
        try:
            return await self.client.get_server_time() is not None
        except ExchangeError as e:
            self.logger.error(f"Bitget health check failed: {e}")
            return False

    def has_credentials(self) -> bool:
        return self.config.bitget_credentials_configured

    # ============================================
    # Adapter
    # ============================================

    async def fetch_product(self, currency: str) -> Optional[Product]:
        """
        Fetch the best flexible savings product for a currency.

        Bitget Endpoint:
            GET /api/v2/earn/savings/product?coin=<currency>&filter=available
        """
        rows = await self.client.get_savings_products(currency)

        candidates = []
        for row in rows:
            if row.coin.upper() != currency or row.period_type != FLEXIBLE or row.status != IN_PROGRESS:
                continue
            if not row.apy_list:
                continue
            tier = select_tier(row.apy_list, lower_bound=lambda t: t.min_step_val)
            candidates.append(tier)

        best = pick_highest(candidates, rate=lambda tier: tier.current_apy)
        if best is None:
            return None

        return self.make_product(
            currency,
            apy=best.current_apy,
            min_amount=best.min_step_val,
            max_amount=best.max_step_val
        )
