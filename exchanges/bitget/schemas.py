"""
Bitget Earn Savings Response Schemas

Bitget wraps payloads in {"code": "00000", "msg": "success", "data": [...]}.
The envelope is checked by the API client; these models decode `data`.

currentApy is already in percentage points ("4.5" == 4.5%).
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.utils.rates import parse_amount


class BitgetModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BitgetApyTier(BitgetModel):
    """
    One rate bracket of a savings product.

    Example:
        {"rateLevel": "1", "minStepVal": "500", "maxStepVal": "10000", "currentApy": "4"}
    """

    rate_level: str = ""
    min_step_val: float = Field(default=0.0, ge=0)
    max_step_val: Optional[float] = None
    current_apy: float = Field(..., ge=0)

    @field_validator("max_step_val", mode="before")
    @classmethod
    def unbounded_max_is_none(cls, v):
        """Empty or non-positive maxStepVal means the bracket has no upper bound."""
        amount = parse_amount(v)
        if amount is None or amount <= 0:
            return None
        return amount


class BitgetSavingsProduct(BitgetModel):
    """
    Row of GET /api/v2/earn/savings/product.

    Example row:
        {
          "productId": "1012",
          "coin": "USDT",
          "periodType": "flexible",
          "period": "",
          "apyType": "ladder",
          "advanceRedeem": "Yes",
          "settleMethod": "daily",
          "apyList": [
            {"rateLevel": "0", "minStepVal": "0", "maxStepVal": "500", "currentApy": "10"},
            {"rateLevel": "1", "minStepVal": "500", "maxStepVal": "10000", "currentApy": "4"}
          ],
          "status": "in_progress",
          "productLevel": "normal"
        }
    """

    product_id: str
    coin: str
    period_type: str
    apy_type: str = "single"
    apy_list: List[BitgetApyTier] = Field(default_factory=list)
    status: str
    product_level: str = "normal"
