import logging
from typing import Dict, List, Optional

import httpx

from .. import __version__
from ..config import FreightosConfig
from ..exceptions import (
    FreightosError,
    MalformedResponseError,
    QuotaExceededError,
    ServiceTimeoutError,
    ServiceUnavailableError,
    TransportError,
    UpstreamBusinessError,
)
from ..quotes import QuoteRequest, QuoteResult, build_params, normalize_response
from ..quotes.params import Params
from ..rate_limit import (
    JsonFileCallStore,
    RateLimitStatus,
    RollingWindowLimiter,
    format_clock_time,
)

logger = logging.getLogger(__name__)

TOOLS = [
    {"name": "get-quote", "description": "Get detailed freight rate quotes"},
    {"name": "get-estimate", "description": "Get quick rate estimates (faster)"},
    {"name": "compare-rates", "description": "Compare rates across all shipping modes"},
    {"name": "list-tools", "description": "List all available commands"},
    {"name": "rate-limit", "description": "Check current rate limit status"},
]


def quota_message(status: RateLimitStatus) -> str:
    return (
        f"Rate limit exceeded: {status.calls_in_window}/{status.limit} calls "
        f"in the last hour. Try again at {format_clock_time(status.resets_at, 'later')}."
    )


class FreightosClient:
    """
    Client for the Freightos public shipping calculator.

    Every quote call runs the same sequence: pre-flight quota check, GET,
    record the call, status check, normalize, attach fresh quota status.

    Features:
    - Local rolling-hour quota (no network call once exhausted).
    - Typed errors for transport, upstream business and shape failures.
    - Normalized results regardless of the upstream's variable shapes.
    """

    def __init__(
        self,
        config: FreightosConfig,
        limiter: Optional[RollingWindowLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        raise_on_quota: bool = False,
    ):
        """
        Args:
            config: Endpoint and timeout settings
            limiter: Quota tracker; defaults to the file at ``config.rate_limit_file``
            http_client: Pre-built client, mainly for tests; not closed by us
            raise_on_quota: Raise QuotaExceededError instead of returning an error result
        """
        self.config = config
        self.limiter = limiter or RollingWindowLimiter(
            JsonFileCallStore(config.rate_limit_file)
        )
        self.raise_on_quota = raise_on_quota
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, *args):
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                headers=self._get_headers(),
            )
        return self._client

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"freightos-core/{__version__}",
        }

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _map_exception(self, exc: httpx.HTTPError) -> FreightosError:
        """Map httpx exceptions to transport errors."""
        if isinstance(exc, httpx.TimeoutException):
            return ServiceTimeoutError("Request to Freightos API timed out")
        if isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
            return ServiceUnavailableError(f"Failed to connect to Freightos API: {exc}")
        return TransportError(f"Freightos API request failed: {exc}")

    async def _request(self, params: Params, request: QuoteRequest) -> QuoteResult:
        """Make a request to the Freightos API with rate limit checking."""
        acquired = self.limiter.try_acquire()
        if not acquired.allowed:
            status = acquired.status
            message = quota_message(status)
            if self.raise_on_quota:
                raise QuotaExceededError(message, rate_limit=status)
            return QuoteResult(errors=[message], rate_limit=status)

        client = self._get_client()
        try:
            response = await client.get(
                self.config.quote_api_url,
                params=params,
                headers=self._get_headers(),
            )
        except httpx.HTTPError as e:
            raise self._map_exception(e) from e

        self.limiter.record_call()

        if not response.is_success:
            logger.warning(
                f"Freightos API returned HTTP {response.status_code}",
                extra={"extra_data": {"status_code": response.status_code}},
            )
            raise TransportError(
                f"Freightos API error ({response.status_code}): {response.text}",
                status_code=response.status_code,
                details=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                "Freightos API returned a non-JSON body",
                status_code=response.status_code,
                details=response.text,
            ) from e

        result = normalize_response(payload)
        result.origin = request.origin
        result.destination = request.destination
        result.rate_limit = self.limiter.current_status()

        if result.errors:
            raise UpstreamBusinessError(
                result.errors,
                rate_limit=result.rate_limit,
                status_code=response.status_code,
            )

        return result

    # Quote operations

    async def get_quote(self, request: QuoteRequest) -> QuoteResult:
        """Get detailed freight rate quotes."""
        return await self._request(build_params(request), request)

    async def get_estimate(self, request: QuoteRequest) -> QuoteResult:
        """Get quick rate estimates (faster, less precise)."""
        request = request.model_copy(update={"estimate": True})
        return await self._request(build_params(request), request)

    async def compare_rates(self, request: QuoteRequest) -> QuoteResult:
        """Compare rates across all available shipping modes."""
        return await self._request(build_params(request, compare=True), request)

    # Utilities

    def rate_limit_status(self) -> RateLimitStatus:
        return self.limiter.current_status()

    def tools(self) -> List[Dict[str, str]]:
        """Available CLI commands with descriptions."""
        return [dict(tool) for tool in TOOLS]

    def web_urls(self) -> Dict[str, Optional[str]]:
        """Web app URLs used by the browser automation agent."""
        return {
            "webAppUrl": self.config.web_app_url,
            "shipmentsUrl": self.config.shipments_url,
        }
