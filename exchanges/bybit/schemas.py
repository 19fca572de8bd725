"""
Bybit Earn Response Schemas

Bybit wraps every payload in {"retCode", "retMsg", "result"}. The envelope
is checked by the API client; these models decode `result`.

estimateApr is already a percentage string ("4.25%").
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from core.logging import get_logger
from core.utils.rates import parse_amount, parse_percent


logger = get_logger(__name__)


class BybitModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class BybitEarnProduct(BybitModel):
    """
    One entry of GET /v5/earn/product (category=FlexibleSaving).

    Example entry:
        {
          "category": "FlexibleSaving",
          "estimateApr": "4.25%",
          "coin": "USDT",
          "minStakeAmount": "10",
          "maxStakeAmount": "2000000",
          "precision": "8",
          "productId": "428",
          "status": "Available"
        }
    """

    category: str = "FlexibleSaving"
    estimate_apr: float = Field(..., ge=0)
    coin: str
    min_stake_amount: Optional[float] = None
    max_stake_amount: Optional[float] = None
    product_id: str
    status: str

    @field_validator("estimate_apr", mode="before")
    @classmethod
    def parse_apr(cls, v):
        """Parse "4.25%" into 4.25."""
        if isinstance(v, str):
            return parse_percent(v)
        return v

    @field_validator("min_stake_amount", "max_stake_amount", mode="before")
    @classmethod
    def empty_amount_is_none(cls, v):
        """Bybit sends "" for an unbounded amount."""
        return parse_amount(v)


class BybitEarnProductResult(BybitModel):
    items: List[BybitEarnProduct] = Field(default_factory=list, alias="list")

    @field_validator("items", mode="before")
    @classmethod
    def skip_malformed_items(cls, v):
        """Drop entries that fail to decode (e.g. estimateApr ""), keeping the rest."""
        if not isinstance(v, list):
            return v

        items = []
        for raw in v:
            try:
                items.append(BybitEarnProduct.model_validate(raw))
            except ValidationError as e:
                product_id = raw.get("productId") if isinstance(raw, dict) else None
                logger.warning(f"Skipping malformed Bybit earn item {product_id}: {e.error_count()} error(s)")
        return items
