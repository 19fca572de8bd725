"""
Product Aggregator

Fans out to every registered exchange adapter concurrently and merges their
products into one ranked list for a currency.

Pipeline:
    1. asyncio.gather over every adapter's get_products()
    2. concatenate in registry order
    3. keep products for the requested currency with apy > 0
    4. stable sort by apy, highest first (registry order breaks ties)

Adapters never raise vendor errors (they resolve them to placeholders), so an
exception escaping gather() here is a defect and propagates to the caller.
"""

import asyncio
from typing import List, Sequence

from core.exchange_interface import ExchangeInterface
from core.logging import get_logger
from core.schemas import Product


logger = get_logger(__name__)


def rank_products(products: Sequence[Product]) -> List[Product]:
    """Stable sort by APY descending."""
    return sorted(products, key=lambda product: product.apy, reverse=True)


class ProductAggregator:
    """
    Merge products from all exchanges.

    Example:
        >>> aggregator = ProductAggregator(manager.all_exchanges())
        >>> products = await aggregator.aggregate("USDC")
        >>> [p.exchange for p in products]
        ['OKX', 'Bybit', 'Binance']
    """

    def __init__(self, exchanges: Sequence[ExchangeInterface]):
        self.exchanges = list(exchanges)

    async def collect(self) -> List[Product]:
        """Every adapter's products concatenated in registry order, placeholders included."""
        results = await asyncio.gather(
            *(exchange.get_products() for exchange in self.exchanges)
        )
        return [product for products in results for product in products]

    async def aggregate(self, currency: str) -> List[Product]:
        """
        Active products for one currency, highest APY first.

        Returns:
            List[Product]: Possibly empty when no exchange has an active product
        """
        products = await self.collect()

        active = [
            product for product in products
            if product.currency == currency and product.apy > 0
        ]

        logger.info(f"Aggregated {len(active)} active {currency} product(s) from {len(self.exchanges)} exchange(s)")
        return rank_products(active)
