"""
Bitget Earn REST API Client

This module provides an async HTTP client for Bitget's savings product
endpoint. The endpoint is private: every request carries ACCESS-KEY,
ACCESS-SIGN, ACCESS-TIMESTAMP and ACCESS-PASSPHRASE headers, where the
signature is a base64 HMAC-SHA256 over timestamp + METHOD + path?query.

API Documentation:
    https://www.bitget.com/api-doc/earn/savings/Savings-Products

Endpoints Used:
    - GET /api/v2/earn/savings/product?coin=<coin>&filter=available
    - GET /api/v2/public/time (health check, unsigned)

Usage:
    async with BitgetAPIClient(api_key="k", secret_key="s", passphrase="p") as client:
        products = await client.get_savings_products("USDT")
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode
from pydantic import TypeAdapter, ValidationError

from core.exceptions import (
    ExchangeResponseError,
    MissingCredentialsError,
    PayloadSchemaError,
    RateLimitedError,
)
from core.signing import bitget_signature
from core.utils.time import current_utc_timestamp
from exchanges.base_client import BaseAPIClient
from .schemas import BitgetSavingsProduct


SUCCESS_CODE = "00000"
RATE_LIMIT_CODE = "429"

_product_rows = TypeAdapter(List[BitgetSavingsProduct])


class BitgetAPIClient(BaseAPIClient):
    """
    Async HTTP client for Bitget Earn savings.

    Attributes:
        api_key: Bitget API key
        secret_key: Bitget secret used for signatures
        passphrase: Bitget API passphrase
        locale: Value of the locale header
    """

    exchange = "bitget"
    BASE_URL = "https://api.bitget.com"

    SAVINGS_PRODUCT_PATH = "/api/v2/earn/savings/product"
    SERVER_TIME_PATH = "/api/v2/public/time"

    def __init__(
        self,
        api_key: str = "",
        secret_key: str = "",
        passphrase: str = "",
        locale: str = "en-US",
        **kwargs
    ):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.secret_key = secret_key
        self.passphrase = passphrase
        self.locale = locale

    # ============================================
    # Signed Request Helper
    # ============================================

    def build_auth_headers(
        self,
        method: str,
        request_path: str,
        query_string: str = "",
        body: str = "",
        timestamp: Optional[str] = None
    ) -> Dict[str, str]:
        """
        Build the ACCESS-* headers for a private request.

        Raises:
            MissingCredentialsError: If key, secret or passphrase is missing
        """
        if not self.api_key or not self.secret_key or not self.passphrase:
            raise MissingCredentialsError(self.exchange)

        timestamp = timestamp or str(current_utc_timestamp(milliseconds=True))
        signature = bitget_signature(timestamp, method, request_path, self.secret_key, query_string, body)

        return {
            "ACCESS-KEY": self.api_key,
            "ACCESS-SIGN": signature,
            "ACCESS-TIMESTAMP": timestamp,
            "ACCESS-PASSPHRASE": self.passphrase,
            "locale": self.locale
        }

    async def _get_data(self, path: str, params: Optional[Dict[str, Any]] = None, signed: bool = False) -> Any:
        """
        GET (optionally signed) and unwrap Bitget's envelope.

        Returns:
            The "data" field

        Raises:
            RateLimitedError: code "429"
            ExchangeResponseError: Any other code != "00000"
            PayloadSchemaError: Envelope missing
        """
        query_string = urlencode(params) if params else ""
        full_path = f"{path}?{query_string}" if query_string else path

        auth_headers = None
        if signed:
            # Signed per attempt so a retry carries a fresh ACCESS-TIMESTAMP
            auth_headers = lambda: self.build_auth_headers("GET", path, query_string)

        data = await self._get(full_path, auth_headers=auth_headers)

        if not isinstance(data, dict) or "code" not in data:
            raise PayloadSchemaError(self.exchange, f"unexpected envelope from {path}")

        code = str(data.get("code"))
        if code != SUCCESS_CODE:
            message = data.get("msg", "")
            if code == RATE_LIMIT_CODE:
                raise RateLimitedError(self.exchange, 429, message or "too many requests")
            raise ExchangeResponseError(self.exchange, code, message)

        return data.get("data")

    # ============================================
    # API Methods
    # ============================================

    async def get_server_time(self) -> Optional[int]:
        """Server time in milliseconds (health checks)."""
        data = await self._get_data(self.SERVER_TIME_PATH)
        server_time = data.get("serverTime") if isinstance(data, dict) else None
        return int(server_time) if server_time else None

    async def get_savings_products(self, coin: str) -> List[BitgetSavingsProduct]:
        """
        Fetch available savings products for a coin.

        Args:
            coin: Coin code (e.g., "USDT")

        Returns:
            Decoded product rows (flexible and fixed; may be empty)
        """
        params = {"coin": coin.upper(), "filter": "available"}

        self.logger.debug(f"Fetching savings products: {coin}")
        rows = await self._get_data(self.SAVINGS_PRODUCT_PATH, params, signed=True)

        try:
            return _product_rows.validate_python(rows or [])
        except ValidationError as e:
            raise PayloadSchemaError(self.exchange, f"unexpected savings product payload: {e.error_count()} error(s)")
