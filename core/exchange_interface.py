"""
Exchange Interface - Abstract Contract for All Earn Adapters

This module defines the abstract base class that all exchange adapters must implement.
By enforcing a consistent interface, we ensure:
- All exchanges expose the same methods
- Easy to add new exchanges without modifying the aggregator
- Vendor failures never leak past the adapter

Design Philosophy:
    "Program to an interface, not an implementation"

    The aggregator works with ExchangeInterface, not specific exchange
    implementations. Each adapter only has to implement fetch_product() for a
    single currency; get_products() turns that into the fixed-shape,
    never-failing list the aggregator relies on.

Failure Contract:
    fetch_product() may raise any ExchangeError. get_products() captures it in
    a FetchOutcome and resolves every outcome to a Product before returning,
    so its result always has exactly one Product per supported currency.
    A pydantic ValidationError raised while building a Product is treated as
    a PayloadSchemaError. Any other exception is a programming defect and
    propagates.

Example:
    class BybitExchange(ExchangeInterface):
        name = "bybit"
        display_name = "Bybit"

        async def fetch_product(self, currency):
            items = await self.client.get_flexible_products(currency)
            ...
            return self.make_product(currency, apy=4.25)

    products = await BybitExchange().get_products()
    # -> [Product(USDT), Product(USDC), Product(DAI)]
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from core.exceptions import ExchangeError, PayloadSchemaError
from core.logging import get_logger
from core.schemas import Product, SUPPORTED_CURRENCIES
from core.utils.rates import build_apy_history, round_rate
from core.utils.time import current_utc_timestamp


# ============================================
# Per-Currency Outcome
# ============================================

@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of fetching one currency from one exchange.

    Exactly one of the following holds:
        - product is set: an active product was found
        - error is set: the fetch failed with a vendor-scoped error
        - neither: the exchange has no eligible product for the currency
    """

    currency: str
    product: Optional[Product] = None
    error: Optional[ExchangeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ExchangeInterface(ABC):
    """
    Abstract Base Class for Exchange Earn Adapters

    Class Attributes:
        name: Unique identifier (lowercase, e.g., "binance")
        display_name: Human-readable name shown in Product.exchange
        logo: Logo reference passed through in Product.exchange_logo
        capabilities: Which optional features this adapter supports

    Abstract Methods (MUST be implemented by all exchanges):
        - fetch_product: Fetch and normalize one currency

    Optional Methods (can be overridden):
        - initialize / shutdown: Open and close HTTP sessions
        - health_check: Verify the exchange API is reachable
        - has_credentials: Report whether required API keys are configured
    """

    # ============================================
    # Class Attributes (must be set by subclasses)
    # ============================================

    name: str
    display_name: str
    logo: str = ""

    capabilities: Dict[str, bool] = {
        "rate_history": False,
        "tiered_rates": False,
        "signed_requests": False
    }

    currencies: Sequence[str] = SUPPORTED_CURRENCIES

    def __init__(self):
        self.logger = get_logger(type(self).__module__)

    # ============================================
    # Adapter Method
    # ============================================

    @abstractmethod
    async def fetch_product(self, currency: str) -> Optional[Product]:
        """
        Fetch the flexible-savings product for one currency.

        Args:
            currency: One of SUPPORTED_CURRENCIES

        Returns:
            Product with apy > 0, or None if the exchange has no eligible
            product for this currency right now

        Raises:
            ExchangeError: For any vendor-scoped failure (network, timeout,
                HTTP status, business error code, schema mismatch, missing
                credentials). get_products() converts it into a placeholder.
        """
        ...

    # ============================================
    # Public Boundary
    # ============================================

    async def get_products(self) -> List[Product]:
        """
        Fetch every supported currency concurrently and normalize the results.

        Returns:
            List[Product]: Exactly one Product per currency, in currency order.
                           Unavailable currencies are zero-APY placeholders.

        Notes:
            - Never raises ExchangeError
            - Missing credentials short-circuit to placeholders without any request
        """
        if not self.has_credentials():
            self.logger.warning(f"{self.display_name} disabled: API credentials not configured")
            return [self.make_placeholder(currency) for currency in self.currencies]

        outcomes = await asyncio.gather(
            *(self._fetch_outcome(currency) for currency in self.currencies)
        )
        return [self._resolve(outcome) for outcome in outcomes]

    async def _fetch_outcome(self, currency: str) -> FetchOutcome:
        try:
            product = await self.fetch_product(currency)
        except ExchangeError as e:
            return FetchOutcome(currency=currency, error=e)
        except ValidationError as e:
            # Vendor values that violate Product invariants (e.g. max < min)
            error = PayloadSchemaError(self.name, f"{currency} product rejected: {e.error_count()} error(s)")
            return FetchOutcome(currency=currency, error=error)
        return FetchOutcome(currency=currency, product=product)

    def _resolve(self, outcome: FetchOutcome) -> Product:
        """Turn an outcome into a Product; errors and empty results become placeholders."""
        if not outcome.ok:
            self.logger.warning(f"{self.display_name} {outcome.currency} unavailable: {outcome.error}")
            return self.make_placeholder(outcome.currency)

        if outcome.product is None or outcome.product.apy <= 0:
            self.logger.info(f"{self.display_name} has no active {outcome.currency} product")
            return self.make_placeholder(outcome.currency)

        return outcome.product

    # ============================================
    # Product Construction Helpers
    # ============================================

    def product_id(self, currency: str) -> str:
        """Stable id: "<exchange>-<currency>-flexible"."""
        return f"{self.name}-{currency.lower()}-flexible"

    def make_product(
        self,
        currency: str,
        apy: float,
        history: Sequence[float] = (),
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None
    ) -> Product:
        """
        Build a normalized Product.

        Args:
            currency: Currency code
            apy: Current APY in percentage points
            history: Historical APY samples in percentage points, oldest first
            min_amount: Minimum investment, if known
            max_amount: Maximum investment, None for unbounded
        """
        apy = round_rate(apy)
        return Product(
            id=self.product_id(currency),
            exchange=self.display_name,
            exchange_logo=self.logo,
            currency=currency,
            apy=apy,
            apy_history=build_apy_history([round_rate(s) for s in history], apy),
            min_amount=min_amount,
            max_amount=max_amount,
            update_time=current_utc_timestamp(milliseconds=True)
        )

    def make_placeholder(self, currency: str) -> Product:
        """Zero-APY record meaning "no active product for this currency here"."""
        return self.make_product(currency, apy=0.0)

    # ============================================
    # Lifecycle Methods (Optional Overrides)
    # ============================================

    async def initialize(self) -> None:
        """Open network resources. Called once by ExchangeManager.initialize_all()."""
        pass

    async def shutdown(self) -> None:
        """Release network resources. Called by ExchangeManager.shutdown_all()."""
        pass

    async def health_check(self) -> bool:
        """Return True if the exchange API is reachable. Default assumes healthy."""
        return True

    def has_credentials(self) -> bool:
        """Return False when required API credentials are missing."""
        return True

    # ============================================
    # Capability Checks
    # ============================================

    def supports(self, feature: str) -> bool:
        """
        Check if this exchange supports a specific feature.

        Example:
            >>> if exchange.supports("rate_history"):
            ...     print("Real history is available")
        """
        return self.capabilities.get(feature, False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(name={self.name})>"
