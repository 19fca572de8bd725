"""
Product Service

Composes the cache and the aggregator into the read path behind
GET /products.
"""

from typing import List

from core.logging import get_logger
from core.schemas import Product
from services.aggregator import ProductAggregator, rank_products
from storage.cache import ProductCache


logger = get_logger(__name__)


class ProductService:
    """Cached access to aggregated products."""

    def __init__(self, aggregator: ProductAggregator, cache: ProductCache):
        self.aggregator = aggregator
        self.cache = cache

    async def get_products(self, currency: str, period: str, include_inactive: bool = False) -> List[Product]:
        """
        Products for a currency, served from cache when fresh.

        Args:
            currency: USDT, USDC or DAI
            period: 1d, 1w or 1m (cache key only; every product carries all periods)
            include_inactive: Also return zero-APY placeholders (never cached)

        Notes:
            - Only non-empty results are written to the cache
            - If the caller is cancelled mid-aggregation nothing is written
        """
        if include_inactive:
            products = await self.aggregator.collect()
            return rank_products([product for product in products if product.currency == currency])

        cached = self.cache.get(currency, period)
        if cached is not None:
            return cached

        logger.info(f"Cache miss for {currency}/{period}, aggregating")
        products = await self.aggregator.aggregate(currency)
        self.cache.set(currency, period, products)
        return products
