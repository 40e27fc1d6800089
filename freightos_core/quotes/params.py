"""
Quote Request Parameters
========================
Maps a QuoteRequest onto the calculator's query parameters.

Measured values carry their unit as a suffix with no separator
(``500lb``, ``120cm``). Weight in kilograms is sent bare since that is the
upstream default.
"""

from typing import List, Optional, Tuple
from urllib.parse import urlencode

from .models import QuoteRequest

Params = List[Tuple[str, str]]


def format_number(value: float) -> str:
    """Render a number the way the calculator expects (``15000``, ``2.5``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _with_unit(value: float, unit: Optional[str]) -> str:
    return f"{format_number(value)}{unit or ''}"


def build_params(request: QuoteRequest, *, compare: bool = False) -> Params:
    """
    Build ordered query parameters for a quote request.

    Args:
        request: Cargo and route description
        compare: Omit ``mode`` so every available mode is returned

    Returns:
        List of (key, value) pairs, ``format=json`` always last
    """
    params: Params = [
        ("origin", request.origin),
        ("destination", request.destination),
        ("loadtype", request.loadtype),
    ]

    if request.weight_unit and request.weight_unit != "kg":
        params.append(("weight", _with_unit(request.weight, request.weight_unit)))
    else:
        params.append(("weight", format_number(request.weight)))

    for name in ("width", "length", "height"):
        value = getattr(request, name)
        if value is not None:
            params.append((name, _with_unit(value, request.dimension_unit)))

    if request.volume is not None:
        params.append(("volume", _with_unit(request.volume, request.volume_unit)))

    if request.quantity is not None and request.quantity > 1:
        params.append(("quantity", str(request.quantity)))
    if request.mode and not compare:
        params.append(("mode", request.mode))
    if request.estimate:
        params.append(("estimate", "true"))
    if request.haz_code:
        params.append(("hazCode", request.haz_code))

    params.append(("format", "json"))
    return params


def encode_params(params: Params) -> str:
    """URL-encode parameters into a query string."""
    return urlencode(params)
