"""
Response Normalizer
===================
Flattens the calculator's nested response into a QuoteResult.
"""

from typing import Any, Dict

import structlog
from pydantic import ValidationError

from ..exceptions import MalformedResponseError
from .models import FreightRate, PriceRange, QuoteResult, TransitTimes
from .raw import RawEnvelope, RawMode

logger = structlog.get_logger(__name__)


def _flatten_mode(raw: RawMode) -> FreightRate:
    low = raw.price.min.money_amount
    high = raw.price.max.money_amount
    return FreightRate(
        mode=raw.mode,
        min_price=PriceRange(amount=low.amount, currency=low.currency),
        max_price=PriceRange(amount=high.amount, currency=high.currency),
        transit_times=TransitTimes(
            min=raw.transit_times.min,
            max=raw.transit_times.max,
            unit=raw.transit_times.unit,
        ),
    )


def parse_envelope(payload: Dict[str, Any]) -> RawEnvelope:
    """Validate the raw JSON body against the expected envelope."""
    try:
        return RawEnvelope.model_validate(payload)
    except ValidationError as e:
        logger.error("Unexpected response shape", error=str(e))
        raise MalformedResponseError(
            "Unexpected response shape from Freightos API", details=e.errors()
        ) from e


def normalize_response(payload: Dict[str, Any]) -> QuoteResult:
    """
    Normalize an upstream body.

    Errors win: when the body lists any, rates are not looked at. A rates
    block with ``numQuotes`` of 0 or no modes is a successful empty lookup,
    not an error.

    Raises:
        MalformedResponseError: If the body does not match the envelope
    """
    response = parse_envelope(payload).response

    if response.errors:
        return QuoteResult(errors=list(response.errors))

    rates = response.estimated_freight_rates
    if rates is None:
        return QuoteResult(rates=[])

    if rates.num_quotes == 0 or not rates.mode:
        return QuoteResult(rates=[], num_quotes=0)

    return QuoteResult(
        rates=[_flatten_mode(m) for m in rates.mode],
        num_quotes=rates.num_quotes,
    )
