"""
Freight Quotes
==============
Request parameters and response normalization for the shipping calculator.
"""

from .models import (
    FreightRate,
    PriceRange,
    QuoteRequest,
    QuoteResult,
    TransitTimes,
)
from .params import build_params, encode_params, format_number
from .normalizer import normalize_response, parse_envelope

__all__ = [
    # Models
    "QuoteRequest",
    "QuoteResult",
    "FreightRate",
    "PriceRange",
    "TransitTimes",
    # Parameters
    "build_params",
    "encode_params",
    "format_number",
    # Normalization
    "normalize_response",
    "parse_envelope",
]
