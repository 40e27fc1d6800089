"""
Freightos Client Configuration
==============================
Endpoint and rate limit settings, read from a ``config.json`` of the form::

    {"freightos": {"quoteApiUrl": "...", "webAppUrl": "...", "shipmentsUrl": "..."}}

Environment variables override file values.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigError

DEFAULT_RATE_LIMIT_FILE = Path.home() / ".cache" / "freightos-shipment-manager" / "ratelimit.json"
DEFAULT_TIMEOUT = 30.0

ENV_OVERRIDES = {
    "FREIGHTOS_QUOTE_API_URL": "quoteApiUrl",
    "FREIGHTOS_WEB_APP_URL": "webAppUrl",
    "FREIGHTOS_SHIPMENTS_URL": "shipmentsUrl",
    "FREIGHTOS_RATE_LIMIT_FILE": "rateLimitFile",
    "FREIGHTOS_TIMEOUT": "timeout",
}


class FreightosConfig(BaseModel):
    """Configuration for the Freightos calculator client."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    quote_api_url: str = Field(alias="quoteApiUrl", min_length=1)
    web_app_url: Optional[str] = Field(default=None, alias="webAppUrl")
    shipments_url: Optional[str] = Field(default=None, alias="shipmentsUrl")
    rate_limit_file: Path = Field(default=DEFAULT_RATE_LIMIT_FILE, alias="rateLimitFile")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)


def candidate_paths(explicit: Optional[Union[str, Path]] = None) -> List[Path]:
    """Config locations in lookup order."""
    paths: List[Path] = []
    if explicit:
        paths.append(Path(explicit).expanduser())
    env_path = os.environ.get("FREIGHTOS_CONFIG")
    if env_path:
        paths.append(Path(env_path).expanduser())
    paths.append(Path.cwd() / "config.json")
    paths.append(Path.home() / ".config" / "freightos" / "config.json")
    return paths


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    section = data.get("freightos") if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise ConfigError(f"Config file {path} has no 'freightos' section")
    return section


def load_config(path: Optional[Union[str, Path]] = None) -> FreightosConfig:
    """
    Load configuration from the first config file found, then the environment.

    Args:
        path: Explicit config file; it must exist when given

    Raises:
        ConfigError: If no usable configuration is found
    """
    tried = candidate_paths(path)
    if path and not tried[0].exists():
        raise ConfigError(f"Config file not found: {tried[0]}")

    values: Dict[str, Any] = {}
    for candidate in tried:
        if candidate.exists():
            values.update(_read_file(candidate))
            break

    for env_name, key in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            values[key] = env_value

    if not (values.get("quoteApiUrl") or values.get("quote_api_url")):
        raise ConfigError(
            "Missing required config freightos.quoteApiUrl. Tried: "
            + ", ".join(str(p) for p in tried)
        )

    try:
        return FreightosConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid Freightos configuration: {e}") from e
