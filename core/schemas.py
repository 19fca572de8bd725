"""
Normalized Data Schemas

This module defines the Pydantic models that every exchange adapter produces
and the HTTP layer serves.

Key Principle:
    Regardless of which exchange the data comes from (Binance, Bybit, OKX,
    Bitget), it gets normalized into the Product schema. The dashboard only
    ever sees this one shape.

Models:
    - Product: one flexible-savings offer for one currency at one exchange
    - ApiResponse: the JSON envelope returned by GET /products

Serialization:
    Fields are snake_case in Python and camelCase on the wire
    (exchange_logo -> exchangeLogo). Always dump with by_alias=True.
"""

from typing import Dict, List, Literal, Optional, Tuple, get_args
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# ============================================
# Enumerations & Constants
# ============================================

Currency = Literal["USDT", "USDC", "DAI"]
"""Supported stablecoins. Adapters never emit anything else."""

Period = Literal["1d", "1w", "1m"]
"""History window keys used by the dashboard chart."""

SUPPORTED_CURRENCIES: Tuple[str, ...] = get_args(Currency)
SUPPORTED_PERIODS: Tuple[str, ...] = get_args(Period)

HISTORY_POINTS: Dict[str, int] = {
    "1d": 12,
    "1w": 28,
    "1m": 120,
}
"""Fixed number of samples per history period."""


# ============================================
# Product Schema
# ============================================

class Product(BaseModel):
    """
    Flexible-savings product, normalized across exchanges.

    Attributes:
        id: "<exchange>-<currency>-flexible", unique within one response
        exchange: Exchange display name (e.g., "Binance")
        exchange_logo: Opaque logo reference passed through to the dashboard
        currency: One of USDT, USDC, DAI
        apy: Current annual percentage yield in percentage points (4.25 == 4.25%)
        apy_history: Period key -> samples, oldest first, fixed length per period
        min_amount: Minimum subscription amount, if known
        max_amount: Maximum subscription amount, None means no upper bound
        update_time: Epoch milliseconds when this record was produced

    Example:
        >>> Product(
        ...     id="bybit-usdt-flexible",
        ...     exchange="Bybit",
        ...     exchange_logo="/logos/bybit.svg",
        ...     currency="USDT",
        ...     apy=4.25,
        ...     apy_history={"1d": [4.25] * 12, "1w": [4.25] * 28, "1m": [4.25] * 120},
        ...     min_amount=10.0,
        ...     update_time=1704110400000,
        ... )

    Notes:
        - apy == 0 marks a placeholder ("no active product") record
        - instances are frozen; the cache hands out the same objects repeatedly
    """

    id: str = Field(..., description="Stable identifier derived from exchange and currency")

    exchange: str = Field(..., description="Exchange display name", examples=["Binance", "OKX"])

    exchange_logo: str = Field(..., description="Logo reference for the dashboard")

    currency: Currency = Field(..., description="Stablecoin code")

    apy: float = Field(..., ge=0, description="Current APY in percentage points")

    apy_history: Dict[Period, List[float]] = Field(
        ...,
        description="Historical APY samples per period (oldest first)"
    )

    min_amount: Optional[float] = Field(default=None, ge=0, description="Minimum investment amount")

    max_amount: Optional[float] = Field(default=None, ge=0, description="Maximum investment amount")

    update_time: int = Field(..., ge=0, description="Creation time in epoch milliseconds")

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "okx-usdc-flexible",
                "exchange": "OKX",
                "exchangeLogo": "/logos/okx.svg",
                "currency": "USDC",
                "apy": 5.12,
                "apyHistory": {"1d": [5.12] * 12, "1w": [5.12] * 28, "1m": [5.12] * 120},
                "minAmount": 1.0,
                "maxAmount": None,
                "updateTime": 1704110400000
            }
        }
    )

    @field_validator("apy_history")
    @classmethod
    def validate_history_lengths(cls, v: Dict[str, List[float]]) -> Dict[str, List[float]]:
        """Every period must be present with exactly its fixed number of non-negative samples."""
        for period, points in HISTORY_POINTS.items():
            samples = v.get(period)
            if samples is None:
                raise ValueError(f"apy_history is missing period '{period}'")
            if len(samples) != points:
                raise ValueError(
                    f"apy_history['{period}'] must have {points} samples, got {len(samples)}"
                )
            if any(sample < 0 for sample in samples):
                raise ValueError(f"apy_history['{period}'] contains a negative sample")
        return v

    @model_validator(mode="after")
    def validate_amount_bounds(self) -> "Product":
        """max_amount, when present, cannot be below min_amount."""
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.max_amount < self.min_amount
        ):
            raise ValueError(
                f"max_amount ({self.max_amount}) is below min_amount ({self.min_amount})"
            )
        return self

    @property
    def is_active(self) -> bool:
        """True unless this is a zero-APY placeholder."""
        return self.apy > 0


# ============================================
# API Envelope
# ============================================

class ApiResponse(BaseModel):
    """
    JSON envelope for GET /products.

    Success:  {"success": true, "data": [...]}
    Failure:  {"success": false, "error": "message"}
    """

    success: bool
    data: Optional[List[Product]] = None
    error: Optional[str] = None

    def to_content(self) -> dict:
        """Serialize for JSONResponse with camelCase keys, omitting the unused branch."""
        content = {"success": self.success}
        if self.data is not None:
            content["data"] = [product.model_dump(mode="json", by_alias=True) for product in self.data]
        if self.error is not None:
            content["error"] = self.error
        return content
