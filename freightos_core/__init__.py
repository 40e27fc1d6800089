"""
Freightos Core Library
======================
Client for the Freightos shipping calculator with a local hourly quota.
"""

__version__ = "0.1.0"

import structlog

from freightos_core.logging_config import configure_structlog

if not structlog.is_configured():
    configure_structlog()

# Configuration
from freightos_core.config import FreightosConfig, load_config

# Errors
from freightos_core.exceptions import (
    FreightosError,
    ConfigError,
    QuotaExceededError,
    TransportError,
    ServiceUnavailableError,
    ServiceTimeoutError,
    UpstreamBusinessError,
    MalformedResponseError,
)

# Rate Limiting
from freightos_core.rate_limit import (
    RollingWindowLimiter,
    JsonFileCallStore,
    InMemoryCallStore,
    RateLimitStatus,
    PersistenceResult,
)

# Quotes
from freightos_core.quotes import (
    QuoteRequest,
    QuoteResult,
    FreightRate,
    PriceRange,
    TransitTimes,
    build_params,
    normalize_response,
)

# Client
from freightos_core.http import FreightosClient

__all__ = [
    "__version__",
    # Configuration
    "FreightosConfig",
    "load_config",
    # Errors
    "FreightosError",
    "ConfigError",
    "QuotaExceededError",
    "TransportError",
    "ServiceUnavailableError",
    "ServiceTimeoutError",
    "UpstreamBusinessError",
    "MalformedResponseError",
    # Rate Limiting
    "RollingWindowLimiter",
    "JsonFileCallStore",
    "InMemoryCallStore",
    "RateLimitStatus",
    "PersistenceResult",
    # Quotes
    "QuoteRequest",
    "QuoteResult",
    "FreightRate",
    "PriceRange",
    "TransitTimes",
    "build_params",
    "normalize_response",
    # Client
    "FreightosClient",
]
