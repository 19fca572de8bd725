"""
Storage Package

Handles caching of aggregated products.

Current implementation:
- ProductCache: in-process TTL cache keyed by (currency, period)

Nothing is persisted; a restart starts with an empty cache.
"""

from .cache import ProductCache

__all__ = ["ProductCache"]
