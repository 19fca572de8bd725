"""
Binance Simple Earn Response Schemas

Explicit decode step for Binance payloads. A payload that does not match
raises pydantic.ValidationError, which the API client converts into
PayloadSchemaError.

Rates are fractions ("0.0425" == 4.25%).
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BinanceModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BinanceFlexibleProduct(BinanceModel):
    """
    One row of GET /sapi/v1/simple-earn/flexible/list.

    Example row:
        {
          "asset": "USDT",
          "latestAnnualPercentageRate": "0.04250000",
          "tierAnnualPercentageRate": {"0-200USDT": 0.05},
          "canPurchase": true,
          "canRedeem": true,
          "isSoldOut": false,
          "minPurchaseAmount": "0.10000000",
          "productId": "USDT001",
          "status": "PURCHASING"
        }
    """

    asset: str
    latest_annual_percentage_rate: float = Field(..., ge=0)
    can_purchase: bool = False
    is_sold_out: bool = False
    min_purchase_amount: Optional[float] = Field(default=None, ge=0)
    product_id: str
    status: str = ""


class BinanceFlexibleListResponse(BinanceModel):
    rows: List[BinanceFlexibleProduct] = Field(default_factory=list)
    total: int = 0


class BinanceRateHistoryRow(BinanceModel):
    """
    One row of GET /sapi/v1/simple-earn/flexible/history/rateHistory.

    Example row:
        {"productId": "USDT001", "asset": "USDT", "annualPercentageRate": "0.0412", "time": 1704067200000}
    """

    product_id: str = ""
    asset: str = ""
    annual_percentage_rate: float = Field(..., ge=0)
    time: int


class BinanceRateHistoryResponse(BinanceModel):
    rows: List[BinanceRateHistoryRow] = Field(default_factory=list)
    # Binance sends total as a string on this endpoint
    total: int = 0
