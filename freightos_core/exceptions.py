from typing import Any, List, Optional


class FreightosError(Exception):
    """Base exception for all Freightos client failures."""
    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ConfigError(FreightosError):
    """Raised when the client configuration is missing or invalid."""
    pass


class QuotaExceededError(FreightosError):
    """Raised when the local hourly quota is used up; no request was sent."""
    def __init__(self, message: str, rate_limit=None):
        self.rate_limit = rate_limit
        super().__init__(message)

    @property
    def resets_at(self) -> Optional[int]:
        return self.rate_limit.resets_at if self.rate_limit else None


class TransportError(FreightosError):
    """Raised when the HTTP call fails or returns a non-success status."""
    pass


class ServiceUnavailableError(TransportError):
    """Raised when the calculator cannot be reached."""
    pass


class ServiceTimeoutError(ServiceUnavailableError):
    """Raised specifically on timeouts."""
    pass


class UpstreamBusinessError(FreightosError):
    """Raised when a 200 response carries errors in its body."""
    def __init__(self, errors: List[str], rate_limit=None, status_code: Optional[int] = None):
        self.errors = list(errors)
        self.rate_limit = rate_limit
        super().__init__(
            f"Freightos API errors: {', '.join(self.errors)}",
            status_code=status_code,
            details=self.errors,
        )


class MalformedResponseError(FreightosError):
    """Raised when the response body is not the expected JSON envelope."""
    pass
