"""
OKX Savings REST API Client

This module provides an async HTTP client for OKX's public savings
lending-rate endpoints. No authentication is required.

API Documentation:
    https://www.okx.com/docs-v5/en/#financial-product-savings

Endpoints Used:
    - GET /api/v5/finance/savings/lending-rate-summary?ccy=<ccy>
    - GET /api/v5/finance/savings/lending-rate-history?ccy=<ccy>&limit=100
    - GET /api/v5/public/time (health check)

Rate Limits:
    - lending-rate-history: 6 requests / second per IP, throttled here
    - HTTP 429 or code "50011" raise RateLimitedError

Usage:
    async with OKXAPIClient() as client:
        summary = await client.get_lending_rate_summary("USDT")
"""

from typing import Any, Dict, List, Optional
from pydantic import TypeAdapter, ValidationError

from core.exceptions import ExchangeResponseError, PayloadSchemaError, RateLimitedError
from exchanges.base_client import BaseAPIClient
from .schemas import OKXLendingRateHistory, OKXLendingRateSummary


# OKX code for "Too Many Requests"
RATE_LIMIT_CODE = "50011"

_summary_rows = TypeAdapter(List[OKXLendingRateSummary])
_history_rows = TypeAdapter(List[OKXLendingRateHistory])


class OKXAPIClient(BaseAPIClient):
    """
    Async HTTP client for OKX savings lending rates.

    Example:
        >>> async with OKXAPIClient() as client:
        ...     rows = await client.get_lending_rate_history("USDC")
    """

    exchange = "okx"
    BASE_URL = "https://www.okx.com"

    SUMMARY_PATH = "/api/v5/finance/savings/lending-rate-summary"
    HISTORY_PATH = "/api/v5/finance/savings/lending-rate-history"
    SERVER_TIME_PATH = "/api/v5/public/time"

    async def _get_data(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET and unwrap OKX's envelope.

        Returns:
            The "data" list

        Raises:
            RateLimitedError: code "50011"
            ExchangeResponseError: Any other code != "0"
            PayloadSchemaError: Envelope missing
        """
        data = await self._get(path, params)

        if not isinstance(data, dict) or "code" not in data:
            raise PayloadSchemaError(self.exchange, f"unexpected envelope from {path}")

        code = str(data.get("code"))
        if code != "0":
            message = data.get("msg", "")
            if code == RATE_LIMIT_CODE:
                raise RateLimitedError(self.exchange, 429, message or "too many requests")
            raise ExchangeResponseError(self.exchange, code, message)

        return data.get("data") or []

    # ============================================
    # API Methods
    # ============================================

    async def get_server_time(self) -> Optional[int]:
        """Server time in milliseconds (health checks)."""
        rows = await self._get_data(self.SERVER_TIME_PATH)
        ts = rows[0].get("ts") if rows and isinstance(rows[0], dict) else None
        return int(ts) if ts else None

    async def get_lending_rate_summary(self, ccy: str) -> List[OKXLendingRateSummary]:
        """
        Fetch the current lending-rate summary for a currency.

        Args:
            ccy: Currency code (e.g., "USDT")

        Returns:
            Decoded summary rows (normally exactly one)
        """
        self.logger.debug(f"Fetching lending rate summary: {ccy}")
        rows = await self._get_data(self.SUMMARY_PATH, {"ccy": ccy.upper()})

        try:
            return _summary_rows.validate_python(rows)
        except ValidationError as e:
            raise PayloadSchemaError(self.exchange, f"unexpected lending summary payload: {e.error_count()} error(s)")

    async def get_lending_rate_history(self, ccy: str, limit: int = 100) -> List[OKXLendingRateHistory]:
        """
        Fetch hourly lending-rate history for a currency.

        Args:
            ccy: Currency code
            limit: Number of rows (max 100)

        Returns:
            Decoded history rows, newest first as sent by OKX

        Notes:
            - Throttled: calls are serialized and spaced out
        """
        params = {"ccy": ccy.upper(), "limit": min(limit, 100)}

        async with self.throttled():
            self.logger.debug(f"Fetching lending rate history: {ccy}")
            rows = await self._get_data(self.HISTORY_PATH, params)

        try:
            return _history_rows.validate_python(rows)
        except ValidationError as e:
            raise PayloadSchemaError(self.exchange, f"unexpected lending history payload: {e.error_count()} error(s)")
