"""
In-Memory Product Cache

Short-lived cache in front of the aggregator, keyed by (currency, period).

Entries hold an immutable tuple of Products and the clock reading at write
time. An entry is served while it is younger than the TTL; after that it reads
as a miss and is overwritten by the next successful aggregation. There is no
background cleanup: the key space is at most 3 currencies x 3 periods.

Empty results are never stored, so a total vendor outage is retried on the
next request instead of being pinned for a whole TTL.

Usage:
    cache = ProductCache(ttl_seconds=120)
    products = cache.get("USDT", "1d")
    if products is None:
        products = await aggregator.aggregate("USDT")
        cache.set("USDT", "1d", products)
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from core.logging import get_logger
from core.schemas import Product


logger = get_logger(__name__)

CacheKey = Tuple[str, str]


@dataclass(frozen=True)
class CacheEntry:
    products: Tuple[Product, ...]
    written_at: float


class ProductCache:
    """
    TTL cache of aggregated products.

    Attributes:
        ttl_seconds: Maximum age of a servable entry
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(self, ttl_seconds: float = 120.0, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def get(self, currency: str, period: str) -> Optional[List[Product]]:
        """
        Return the cached products for (currency, period), or None on a miss.

        An entry older than the TTL is a miss.
        """
        key = (currency, period)
        entry = self._entries.get(key)

        if entry is None or self.clock() - entry.written_at >= self.ttl_seconds:
            self._misses += 1
            logger.debug(f"Cache miss for {currency}/{period}")
            return None

        self._hits += 1
        logger.debug(f"Cache hit for {currency}/{period}")
        return list(entry.products)

    def set(self, currency: str, period: str, products: Sequence[Product]) -> bool:
        """
        Store products for (currency, period).

        Returns:
            bool: False (and nothing stored) when products is empty
        """
        if not products:
            logger.debug(f"Not caching empty result for {currency}/{period}")
            return False

        self._entries[(currency, period)] = CacheEntry(
            products=tuple(products),
            written_at=self.clock()
        )
        return True

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, float]:
        """Entry count, hit/miss counters and the configured TTL."""
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "ttlSeconds": self.ttl_seconds
        }

    def __len__(self) -> int:
        return len(self._entries)
