"""
Upstream Response Models
========================
Pydantic models for the calculator's response envelope.

The calculator sends ``errors`` as either a string or a list of
``{"error": ...}`` objects, and ``mode`` as either one object or a list.
Both are collapsed to lists here so nothing downstream checks shapes.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _RawModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RawMoneyAmount(_RawModel):
    amount: float
    currency: str


class RawPriceBound(_RawModel):
    money_amount: RawMoneyAmount = Field(alias="moneyAmount")


class RawPrice(_RawModel):
    min: RawPriceBound
    max: RawPriceBound


class RawTransitTimes(_RawModel):
    min: float
    max: float
    unit: Optional[str] = None


class RawMode(_RawModel):
    mode: str
    price: RawPrice
    transit_times: RawTransitTimes = Field(alias="transitTimes")


class RawEstimatedFreightRates(_RawModel):
    num_quotes: Optional[int] = Field(default=None, alias="numQuotes")
    mode: List[RawMode] = Field(default_factory=list)

    @field_validator("mode", mode="before")
    @classmethod
    def _mode_as_list(cls, value: Any) -> Any:
        if not value:
            return []
        if isinstance(value, dict):
            return [value]
        return value


class RawResponse(_RawModel):
    comment: Optional[List[str]] = Field(default=None, alias="_comment")
    estimated_freight_rates: Optional[RawEstimatedFreightRates] = Field(
        default=None, alias="estimatedFreightRates"
    )
    errors: List[str] = Field(default_factory=list)

    @field_validator("errors", mode="before")
    @classmethod
    def _errors_as_strings(cls, value: Any) -> Any:
        if not value:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [
                item.get("error") or str(item) if isinstance(item, dict) else str(item)
                for item in value
            ]
        return value


class RawEnvelope(_RawModel):
    response: RawResponse
