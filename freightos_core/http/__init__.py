from .client import FreightosClient, TOOLS, quota_message
from ..exceptions import (
    FreightosError,
    QuotaExceededError,
    TransportError,
    ServiceUnavailableError,
    ServiceTimeoutError,
    UpstreamBusinessError,
    MalformedResponseError,
)

__all__ = [
    "FreightosClient",
    "TOOLS",
    "quota_message",
    "FreightosError",
    "QuotaExceededError",
    "TransportError",
    "ServiceUnavailableError",
    "ServiceTimeoutError",
    "UpstreamBusinessError",
    "MalformedResponseError",
]
