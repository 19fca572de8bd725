"""
Services Package

- ProductAggregator: concurrent fan-out to exchange adapters, filter and rank
- ProductService: cache-first read path used by the HTTP layer
"""

from .aggregator import ProductAggregator
from .product_service import ProductService

__all__ = ["ProductAggregator", "ProductService"]
