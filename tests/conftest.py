"""
Shared fixtures for freightos-core tests.
"""

import json

import httpx
import pytest

from freightos_core.config import FreightosConfig
from freightos_core.rate_limit import RATE_LIMIT_WINDOW_MS, JsonFileCallStore, RollingWindowLimiter

QUOTE_API_URL = "https://ship.freightos.com/api/shippingCalculator"


class FakeClock:
    """Settable clock returning seconds since the epoch."""

    def __init__(self, now: float = 1_760_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    @property
    def now_ms(self) -> int:
        return int(self.now * 1000)

    def advance(self, seconds: float) -> None:
        self.now += seconds


def mode_entry(mode, low, high, currency="USD", tmin=20, tmax=30):
    return {
        "mode": mode,
        "price": {
            "min": {"moneyAmount": {"amount": low, "currency": currency}},
            "max": {"moneyAmount": {"amount": high, "currency": currency}},
        },
        "transitTimes": {"unit": "days", "min": tmin, "max": tmax},
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limit_file(tmp_path):
    return tmp_path / "cache" / "ratelimit.json"


@pytest.fixture
def limiter(rate_limit_file, clock):
    return RollingWindowLimiter(JsonFileCallStore(rate_limit_file), clock=clock)


@pytest.fixture
def config(rate_limit_file):
    return FreightosConfig(
        quote_api_url=QUOTE_API_URL,
        web_app_url="https://www.freightos.com/app",
        shipments_url="https://www.freightos.com/app/shipments",
        rate_limit_file=rate_limit_file,
    )


@pytest.fixture
def fill_history(rate_limit_file, clock):
    """Write ``count`` recent calls to the rate limit file."""
    def _fill(count: int, age_ms: int = 1000):
        rate_limit_file.parent.mkdir(parents=True, exist_ok=True)
        calls = [clock.now_ms - age_ms - i for i in range(count)]
        rate_limit_file.write_text(json.dumps({"calls": calls}))
        return calls
    return _fill


@pytest.fixture
def stored_calls(rate_limit_file):
    def _read():
        if not rate_limit_file.exists():
            return []
        return json.loads(rate_limit_file.read_text())["calls"]
    return _read


@pytest.fixture
def multi_mode_payload():
    return {
        "response": {
            "estimatedFreightRates": {
                "numQuotes": 2,
                "mode": [
                    mode_entry("air", 4200, 5100, tmin=3, tmax=6),
                    mode_entry("sea", 1800, 2300, tmin=28, tmax=35),
                ],
            }
        }
    }


class UpstreamRecorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code=200, json_body=None, text=None, exc=None):
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json_body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def window_ms():
    return RATE_LIMIT_WINDOW_MS
