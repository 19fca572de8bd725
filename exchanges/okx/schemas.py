"""
OKX Savings Response Schemas

OKX wraps every payload in {"code": "0", "msg": "", "data": [...]}. The
envelope is checked by the API client; these models decode the `data` rows.

Rates are fractions ("0.0401" == 4.01%).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.utils.time import to_epoch_ms


class OKXModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class OKXLendingRateSummary(OKXModel):
    """
    Row of GET /api/v5/finance/savings/lending-rate-summary.

    Example row:
        {
          "ccy": "USDT",
          "avgAmt": "16843534.09",
          "avgAmtUsd": "16848921.62",
          "avgRate": "0.0384",
          "preRate": "0.0391",
          "estRate": "0.0401"
        }

    estRate (next-hour estimate) is the rate reported as current APY.
    """

    ccy: str
    avg_rate: float = Field(default=0.0, ge=0)
    pre_rate: float = Field(default=0.0, ge=0)
    est_rate: float = Field(..., ge=0)


class OKXLendingRateHistory(OKXModel):
    """
    Row of GET /api/v5/finance/savings/lending-rate-history (hourly, newest first).

    Example row:
        {"ccy": "USDT", "amt": "14316534.07", "rate": "0.0392", "ts": "1704106800000"}
    """

    ccy: str
    rate: float = Field(..., ge=0)
    ts: int

    @field_validator("ts", mode="before")
    @classmethod
    def normalize_ts(cls, v):
        return to_epoch_ms(v)
