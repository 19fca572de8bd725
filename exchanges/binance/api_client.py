"""
Binance Simple Earn REST API Client

This module provides an async HTTP client for the Binance Simple Earn
(flexible) endpoints. Both endpoints are USER_DATA endpoints: every request
carries the API key header and an HMAC-SHA256 signature over the query
string, which includes a millisecond timestamp.

API Documentation:
    https://developers.binance.com/docs/simple_earn/

Endpoints Used:
    - GET /sapi/v1/simple-earn/flexible/list
    - GET /sapi/v1/simple-earn/flexible/history/rateHistory
    - GET /sapi/v1/system/status (health check, unsigned)

Rate Limits:
    - rateHistory is heavily weighted; calls go through the client throttle
      (one at a time, spaced by throttle_interval)
    - HTTP 429/418 or error code -1003 raise RateLimitedError

Usage:
    async with BinanceAPIClient(api_key="...", secret_key="...") as client:
        products = await client.get_flexible_products("USDT")
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode
from pydantic import ValidationError

from core.exceptions import (
    ExchangeResponseError,
    MissingCredentialsError,
    PayloadSchemaError,
    RateLimitedError,
)
from core.signing import binance_query_signature
from core.utils.time import current_utc_timestamp
from exchanges.base_client import BaseAPIClient
from .schemas import (
    BinanceFlexibleListResponse,
    BinanceFlexibleProduct,
    BinanceRateHistoryResponse,
    BinanceRateHistoryRow,
)


# Binance error code for "too many requests"
RATE_LIMIT_CODE = -1003


class BinanceAPIClient(BaseAPIClient):
    """
    Async HTTP client for Binance Simple Earn.

    Attributes:
        api_key: Binance API key (sent as X-MBX-APIKEY)
        secret_key: Binance secret used for request signatures
        recv_window: Allowed clock skew window in milliseconds

    Example:
        >>> async with BinanceAPIClient(api_key="k", secret_key="s") as client:
        ...     rows = await client.get_rate_history("USDT001", start, end)
    """

    exchange = "binance"
    BASE_URL = "https://api.binance.com"

    FLEXIBLE_LIST_PATH = "/sapi/v1/simple-earn/flexible/list"
    RATE_HISTORY_PATH = "/sapi/v1/simple-earn/flexible/history/rateHistory"
    SYSTEM_STATUS_PATH = "/sapi/v1/system/status"

    def __init__(
        self,
        api_key: str = "",
        secret_key: str = "",
        recv_window: int = 5000,
        **kwargs
    ):
        """
        Args:
            api_key: Binance API key
            secret_key: Binance secret key
            recv_window: recvWindow parameter in milliseconds
            **kwargs: Passed through to BaseAPIClient (base_url, timeout, ...)
        """
        super().__init__(**kwargs)
        self.api_key = api_key
        self.secret_key = secret_key
        self.recv_window = recv_window

    # ============================================
    # Signed Request Helper
    # ============================================

    def build_signed_query(self, params: Dict[str, Any], timestamp: Optional[int] = None) -> str:
        """
        Build the full signed query string for a USER_DATA endpoint.

        The signature is computed over the exact urlencoded string that is
        sent, then appended as the last parameter.

        Raises:
            MissingCredentialsError: If key or secret is not configured
        """
        if not self.api_key or not self.secret_key:
            raise MissingCredentialsError(self.exchange)

        query = dict(params)
        query["recvWindow"] = self.recv_window
        query["timestamp"] = timestamp if timestamp is not None else current_utc_timestamp(milliseconds=True)

        query_string = urlencode(query)
        signature = binance_query_signature(query_string, self.secret_key)
        return f"{query_string}&signature={signature}"

    async def _signed_get(self, path: str, params: Dict[str, Any]) -> Any:
        """
        GET a signed endpoint and check for an embedded Binance error object.

        The query is signed per attempt, so a retried request is not
        rejected for a stale timestamp outside recvWindow.

        Raises:
            MissingCredentialsError: No credentials configured
            RateLimitedError: Error code -1003
            ExchangeResponseError: Any other {"code": ..., "msg": ...} body
        """
        data = await self._get(
            path,
            headers={"X-MBX-APIKEY": self.api_key},
            query=lambda: self.build_signed_query(params)
        )

        if isinstance(data, dict) and "code" in data and "rows" not in data:
            code = data.get("code")
            message = data.get("msg", "")
            if code == RATE_LIMIT_CODE:
                raise RateLimitedError(self.exchange, 429, message or "too many requests")
            raise ExchangeResponseError(self.exchange, str(code), message)

        return data

    # ============================================
    # API Methods
    # ============================================

    async def get_system_status(self) -> bool:
        """
        Check Binance system status (unsigned).

        Response Format:
            {"status": 0, "msg": "normal"}   # 0 = normal, 1 = maintenance
        """
        data = await self._get(self.SYSTEM_STATUS_PATH)
        return isinstance(data, dict) and data.get("status") == 0

    async def get_flexible_products(self, asset: str) -> List[BinanceFlexibleProduct]:
        """
        Fetch flexible Simple Earn products for an asset.

        Args:
            asset: Asset code (e.g., "USDT")

        Returns:
            List of decoded product rows (may be empty)

        Raises:
            ExchangeError: On any vendor-scoped failure
        """
        self.logger.debug(f"Fetching flexible products: {asset}")

        data = await self._signed_get(self.FLEXIBLE_LIST_PATH, {"asset": asset.upper(), "size": 100})

        try:
            response = BinanceFlexibleListResponse.model_validate(data)
        except ValidationError as e:
            raise PayloadSchemaError(self.exchange, f"unexpected flexible list payload: {e.error_count()} error(s)")

        return response.rows

    async def get_rate_history(
        self,
        product_id: str,
        start_time: int,
        end_time: int,
        size: int = 100
    ) -> List[BinanceRateHistoryRow]:
        """
        Fetch daily APR history for a flexible product.

        Args:
            product_id: Binance product id (e.g., "USDT001")
            start_time: Start of range in epoch ms (range may not exceed 3 months)
            end_time: End of range in epoch ms
            size: Rows per page (max 100)

        Returns:
            History rows in the order Binance sends them (newest first)

        Notes:
            - Throttled: calls are serialized and spaced out
        """
        params = {
            "productId": product_id,
            "aprPeriod": "DAY",
            "startTime": start_time,
            "endTime": end_time,
            "size": min(size, 100)
        }

        async with self.throttled():
            self.logger.debug(f"Fetching rate history: {product_id}")
            data = await self._signed_get(self.RATE_HISTORY_PATH, params)

        try:
            response = BinanceRateHistoryResponse.model_validate(data)
        except ValidationError as e:
            raise PayloadSchemaError(self.exchange, f"unexpected rate history payload: {e.error_count()} error(s)")

        return response.rows
