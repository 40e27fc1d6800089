"""
Freightos CLI

Freight quotes and rate comparison from the command line. Every command
prints a JSON document on stdout; logs go to stderr.

Usage:
    freightos get-quote --origin CNNGB --destination GBSOU --loadtype container40HC --weight 15000
    freightos compare-rates --origin SHA --destination LAX --loadtype boxes --weight 20
    freightos rate-limit
"""

import asyncio
import json
import os
from enum import Enum
from typing import Any, Dict, Optional

import typer
from pydantic import ValidationError

from freightos_core.config import DEFAULT_RATE_LIMIT_FILE, FreightosConfig, load_config
from freightos_core.exceptions import ConfigError, FreightosError
from freightos_core.http import FreightosClient
from freightos_core.logging_config import log_event, setup_logging
from freightos_core.quotes import QuoteRequest, QuoteResult, format_number
from freightos_core.rate_limit import (
    InMemoryCallStore,
    JsonFileCallStore,
    RateLimitStatus,
    RollingWindowLimiter,
)

app = typer.Typer(
    name="freightos",
    help="Freightos freight quotes and rate comparison",
    add_completion=False,
)


class WeightUnit(str, Enum):
    kg = "kg"
    lb = "lb"
    ton = "ton"
    oz = "oz"


class DimensionUnit(str, Enum):
    cm = "cm"
    inch = "inch"
    m = "m"


class VolumeUnit(str, Enum):
    cbm = "cbm"
    cft = "cft"
    liter = "liter"


# Shared quote options
ORIGIN = typer.Option(..., "--origin", help="Origin address, airport code (3-letter), or port code (5-letter)")
DESTINATION = typer.Option(..., "--destination", help="Destination address, airport code, or port code")
LOADTYPE = typer.Option(
    ...,
    "--loadtype",
    help="Load type: boxes, crate, pallets, container20, container40, container40HC, container45, container45HC",
)
WEIGHT = typer.Option(..., "--weight", help="Weight per unit (default: kg)")
WEIGHT_UNIT = typer.Option(None, "--weight-unit", help="Weight unit (default: kg)")
WIDTH = typer.Option(None, "--width", help="Width (default: cm)")
LENGTH = typer.Option(None, "--length", help="Length (default: cm)")
HEIGHT = typer.Option(None, "--height", help="Height (default: cm)")
DIMENSION_UNIT = typer.Option(None, "--dimension-unit", help="Dimension unit (default: cm)")
VOLUME = typer.Option(None, "--volume", help="Volume (default: cbm)")
VOLUME_UNIT = typer.Option(None, "--volume-unit", help="Volume unit (default: cbm)")
QUANTITY = typer.Option(None, "--quantity", help="Number of units (default: 1)")
MODE = typer.Option(None, "--mode", help="Shipping mode: air, LCL, FCL, LTL, FTL, express")
HAZ_CODE = typer.Option(None, "--haz-code", help="UN hazard code for dangerous goods")


def format_rate_limit_status(status: RateLimitStatus) -> Dict[str, Any]:
    resets_at = status.resets_at_datetime
    return {
        "callsInLastHour": status.calls_in_window,
        "limit": status.limit,
        "remaining": status.remaining,
        "percentUsed": f"{status.percent_used}%",
        "resetsAt": resets_at.isoformat() if resets_at else None,
        "warning": status.warning,
        "status": status.level,
    }


def format_quote_result(result: QuoteResult) -> Dict[str, Any]:
    formatted: Dict[str, Any] = {"success": True}

    if result.origin:
        formatted["origin"] = result.origin
    if result.destination:
        formatted["destination"] = result.destination

    if result.rates:
        formatted["rates"] = [
            {
                "mode": rate.mode,
                "priceRange": (
                    f"{rate.min_price.currency} {format_number(rate.min_price.amount)} - "
                    f"{format_number(rate.max_price.amount)}"
                ),
                "transitTime": (
                    f"{format_number(rate.transit_times.min)} - "
                    f"{format_number(rate.transit_times.max)} days"
                ),
                "minPrice": {"amount": rate.min_price.amount, "currency": rate.min_price.currency},
                "maxPrice": {"amount": rate.max_price.amount, "currency": rate.max_price.currency},
                "transitDays": {
                    "min": rate.transit_times.min,
                    "max": rate.transit_times.max,
                    "unit": rate.transit_times.unit,
                },
            }
            for rate in result.rates
        ]
        formatted["rateCount"] = len(result.rates)
    elif result.num_quotes == 0:
        formatted["rateCount"] = 0
        formatted["message"] = "No rates available for this route/cargo combination"

    if result.rate_limit:
        formatted["rateLimit"] = format_rate_limit_status(result.rate_limit)

    if result.errors:
        formatted["success"] = False
        formatted["errors"] = list(result.errors)

    return formatted


def format_error(error: FreightosError) -> Dict[str, Any]:
    formatted: Dict[str, Any] = {
        "success": False,
        "errorType": type(error).__name__,
        "errors": getattr(error, "errors", None) or [error.message],
    }
    if error.status_code is not None:
        formatted["statusCode"] = error.status_code
    rate_limit = getattr(error, "rate_limit", None)
    if rate_limit is not None:
        formatted["rateLimit"] = format_rate_limit_status(rate_limit)
    return formatted


def emit(data: Dict[str, Any]) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


def create_limiter(rate_limit_file, no_persist: bool) -> RollingWindowLimiter:
    store = InMemoryCallStore() if no_persist else JsonFileCallStore(rate_limit_file)
    return RollingWindowLimiter(store)


def create_client(config: FreightosConfig, no_persist: bool = False) -> FreightosClient:
    return FreightosClient(config, limiter=create_limiter(config.rate_limit_file, no_persist))


def _config(ctx: typer.Context) -> FreightosConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        emit({"success": False, "errorType": "ConfigError", "errors": [e.message]})
        raise typer.Exit(code=1)


def _build_request(**fields) -> QuoteRequest:
    values = {k: (v.value if isinstance(v, Enum) else v) for k, v in fields.items()}
    try:
        return QuoteRequest(**values)
    except ValidationError as e:
        emit({
            "success": False,
            "errorType": "ValidationError",
            "errors": [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ],
        })
        raise typer.Exit(code=2)


def _run_quote(ctx: typer.Context, operation: str, request: QuoteRequest) -> None:
    config = _config(ctx)
    log_event("quote.requested", level="DEBUG", operation=operation,
              origin=request.origin, destination=request.destination)

    async def _call() -> QuoteResult:
        async with create_client(config, ctx.obj.get("no_persist", False)) as client:
            return await getattr(client, operation)(request)

    try:
        result = asyncio.run(_call())
    except FreightosError as e:
        emit(format_error(e))
        raise typer.Exit(code=1)

    emit(format_quote_result(result))
    if result.errors:
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to config.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
    no_persist: bool = typer.Option(False, "--no-persist", help="Track the rate limit in memory only"),
):
    """Freightos freight quotes and rate comparison."""
    setup_logging(
        command=ctx.invoked_subcommand or "",
        level="DEBUG" if verbose else "ERROR",
        json_output=json_logs,
    )
    ctx.obj = {"config_path": config_path, "no_persist": no_persist}


@app.command("list-tools")
def list_tools(ctx: typer.Context):
    """List all available commands."""
    client = create_client(_config(ctx), ctx.obj.get("no_persist", False))
    emit({
        "tools": client.tools(),
        "webUrls": client.web_urls(),
        "rateLimit": format_rate_limit_status(client.rate_limit_status()),
    })


@app.command("rate-limit")
def rate_limit(ctx: typer.Context):
    """Check current API rate limit status."""
    try:
        rate_limit_file = load_config(ctx.obj.get("config_path")).rate_limit_file
    except ConfigError:
        # quota tracking does not need an endpoint
        rate_limit_file = os.environ.get("FREIGHTOS_RATE_LIMIT_FILE") or DEFAULT_RATE_LIMIT_FILE
    limiter = create_limiter(rate_limit_file, ctx.obj.get("no_persist", False))
    emit(format_rate_limit_status(limiter.current_status()))


@app.command("get-quote")
def get_quote(
    ctx: typer.Context,
    origin: str = ORIGIN,
    destination: str = DESTINATION,
    loadtype: str = LOADTYPE,
    weight: float = WEIGHT,
    weight_unit: Optional[WeightUnit] = WEIGHT_UNIT,
    width: Optional[float] = WIDTH,
    length: Optional[float] = LENGTH,
    height: Optional[float] = HEIGHT,
    dimension_unit: Optional[DimensionUnit] = DIMENSION_UNIT,
    volume: Optional[float] = VOLUME,
    volume_unit: Optional[VolumeUnit] = VOLUME_UNIT,
    quantity: Optional[int] = QUANTITY,
    mode: Optional[str] = MODE,
    haz_code: Optional[str] = HAZ_CODE,
):
    """Get detailed freight rate quotes."""
    request = _build_request(
        origin=origin, destination=destination, loadtype=loadtype,
        weight=weight, weight_unit=weight_unit,
        width=width, length=length, height=height, dimension_unit=dimension_unit,
        volume=volume, volume_unit=volume_unit, quantity=quantity,
        mode=mode, haz_code=haz_code,
    )
    _run_quote(ctx, "get_quote", request)


@app.command("get-estimate")
def get_estimate(
    ctx: typer.Context,
    origin: str = ORIGIN,
    destination: str = DESTINATION,
    loadtype: str = LOADTYPE,
    weight: float = WEIGHT,
    weight_unit: Optional[WeightUnit] = WEIGHT_UNIT,
    width: Optional[float] = WIDTH,
    length: Optional[float] = LENGTH,
    height: Optional[float] = HEIGHT,
    dimension_unit: Optional[DimensionUnit] = DIMENSION_UNIT,
    volume: Optional[float] = VOLUME,
    volume_unit: Optional[VolumeUnit] = VOLUME_UNIT,
    quantity: Optional[int] = QUANTITY,
    mode: Optional[str] = MODE,
    haz_code: Optional[str] = HAZ_CODE,
):
    """Get quick rate estimates (faster, less precise)."""
    request = _build_request(
        origin=origin, destination=destination, loadtype=loadtype,
        weight=weight, weight_unit=weight_unit,
        width=width, length=length, height=height, dimension_unit=dimension_unit,
        volume=volume, volume_unit=volume_unit, quantity=quantity,
        mode=mode, haz_code=haz_code,
    )
    _run_quote(ctx, "get_estimate", request)


@app.command("compare-rates")
def compare_rates(
    ctx: typer.Context,
    origin: str = ORIGIN,
    destination: str = DESTINATION,
    loadtype: str = LOADTYPE,
    weight: float = WEIGHT,
    weight_unit: Optional[WeightUnit] = WEIGHT_UNIT,
    width: Optional[float] = WIDTH,
    length: Optional[float] = LENGTH,
    height: Optional[float] = HEIGHT,
    dimension_unit: Optional[DimensionUnit] = DIMENSION_UNIT,
    volume: Optional[float] = VOLUME,
    volume_unit: Optional[VolumeUnit] = VOLUME_UNIT,
    quantity: Optional[int] = QUANTITY,
    haz_code: Optional[str] = HAZ_CODE,
):
    """Compare rates across all shipping modes."""
    request = _build_request(
        origin=origin, destination=destination, loadtype=loadtype,
        weight=weight, weight_unit=weight_unit,
        width=width, length=length, height=height, dimension_unit=dimension_unit,
        volume=volume, volume_unit=volume_unit, quantity=quantity,
        haz_code=haz_code,
    )
    _run_quote(ctx, "compare_rates", request)


if __name__ == "__main__":
    app()
