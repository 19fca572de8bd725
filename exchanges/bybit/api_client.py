"""
Bybit Earn REST API Client

This module provides an async HTTP client for Bybit's public earn product
endpoint. No authentication is required.

API Documentation:
    https://bybit-exchange.github.io/docs/v5/earn/product-info

Endpoints Used:
    - GET /v5/earn/product?category=FlexibleSaving&coin=<coin>
    - GET /v5/market/time (health check)

Response Envelope:
    {"retCode": 0, "retMsg": "OK", "result": {...}}
    retCode != 0 is a business error; 10006 means rate limited.

Usage:
    async with BybitAPIClient() as client:
        products = await client.get_flexible_products("USDT")
"""

from typing import Any, Dict, List, Optional
from pydantic import ValidationError

from core.exceptions import ExchangeResponseError, PayloadSchemaError, RateLimitedError
from core.utils.time import to_epoch_ms
from exchanges.base_client import BaseAPIClient
from .schemas import BybitEarnProduct, BybitEarnProductResult


# Bybit retCode for "too many visits"
RATE_LIMIT_CODE = 10006


class BybitAPIClient(BaseAPIClient):
    """
    Async HTTP client for Bybit Earn.

    Example:
        >>> async with BybitAPIClient() as client:
        ...     products = await client.get_flexible_products("USDC")
    """

    exchange = "bybit"
    BASE_URL = "https://api.bybit.com"

    EARN_PRODUCT_PATH = "/v5/earn/product"
    SERVER_TIME_PATH = "/v5/market/time"

    async def _get_result(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET and unwrap Bybit's envelope.

        Returns:
            The "result" object

        Raises:
            RateLimitedError: retCode 10006
            ExchangeResponseError: Any other non-zero retCode
            PayloadSchemaError: Envelope missing
        """
        data = await self._get(path, params)

        if not isinstance(data, dict) or "retCode" not in data:
            raise PayloadSchemaError(self.exchange, f"unexpected envelope from {path}")

        ret_code = data.get("retCode")
        if ret_code != 0:
            message = data.get("retMsg", "Unknown error")
            if ret_code == RATE_LIMIT_CODE:
                raise RateLimitedError(self.exchange, 429, message)
            raise ExchangeResponseError(self.exchange, str(ret_code), message)

        return data.get("result") or {}

    # ============================================
    # API Methods
    # ============================================

    async def get_server_time(self) -> Optional[int]:
        """
        Get Bybit server time in milliseconds (health checks).

        Bybit Endpoint:
            GET /v5/market/time
        """
        result = await self._get_result(self.SERVER_TIME_PATH)
        seconds = result.get("timeSecond")
        return to_epoch_ms(seconds) if seconds else None

    async def get_flexible_products(self, coin: str) -> List[BybitEarnProduct]:
        """
        Fetch FlexibleSaving products for a coin.

        Args:
            coin: Coin code (e.g., "USDT")

        Returns:
            Decoded product entries (may be empty)
        """
        params = {"category": "FlexibleSaving", "coin": coin.upper()}

        self.logger.debug(f"Fetching flexible products: {coin}")
        result = await self._get_result(self.EARN_PRODUCT_PATH, params)

        try:
            decoded = BybitEarnProductResult.model_validate(result)
        except ValidationError as e:
            raise PayloadSchemaError(self.exchange, f"unexpected earn product payload: {e.error_count()} error(s)")

        return decoded.items
