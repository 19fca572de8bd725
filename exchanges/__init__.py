"""
Exchange Adapters Package

Each exchange (Binance, Bybit, OKX, Bitget) has its own subfolder with:
- __init__.py: Adapter class implementing ExchangeInterface
- api_client.py: Async REST client (aiohttp) built on base_client.BaseAPIClient
- schemas.py: Pydantic models for the vendor's raw responses

Adding an exchange means adding a subfolder and registering the adapter in
ExchangeManager; the aggregator and HTTP layer stay unchanged.
"""
