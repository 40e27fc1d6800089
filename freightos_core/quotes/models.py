"""
Quote Models
============
Request and normalized result types for freight quotes.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..rate_limit.models import RateLimitStatus

WeightUnit = Literal["kg", "lb", "ton", "oz"]
DimensionUnit = Literal["cm", "inch", "m"]
VolumeUnit = Literal["cbm", "cft", "liter"]


class QuoteRequest(BaseModel):
    """Cargo and route description for one quote call."""
    model_config = ConfigDict(frozen=True)

    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    loadtype: str = Field(min_length=1)
    weight: float = Field(gt=0)
    weight_unit: Optional[WeightUnit] = None
    width: Optional[float] = Field(default=None, gt=0)
    length: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    dimension_unit: Optional[DimensionUnit] = None
    volume: Optional[float] = Field(default=None, gt=0)
    volume_unit: Optional[VolumeUnit] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    mode: Optional[str] = None
    haz_code: Optional[str] = None
    estimate: bool = False


@dataclass(frozen=True)
class PriceRange:
    amount: float
    currency: str


@dataclass(frozen=True)
class TransitTimes:
    min: float
    max: float
    unit: Optional[str] = None


@dataclass(frozen=True)
class FreightRate:
    """One shipping mode's price and transit range."""
    mode: str
    min_price: PriceRange
    max_price: PriceRange
    transit_times: TransitTimes


@dataclass
class QuoteResult:
    """
    Normalized quote outcome.

    Either ``errors`` is non-empty (error outcome, ``rates`` is None) or
    ``rates`` holds zero or more entries (success outcome); never both.
    """
    rates: Optional[List[FreightRate]] = None
    num_quotes: Optional[int] = None
    errors: List[str] = field(default_factory=list)
    origin: Optional[str] = None
    destination: Optional[str] = None
    rate_limit: Optional[RateLimitStatus] = None

    @property
    def is_error(self) -> bool:
        return bool(self.errors)

    @property
    def no_rates(self) -> bool:
        """Successful lookup that found nothing for the route/cargo."""
        return not self.errors and not self.rates
