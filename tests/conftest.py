import json
from typing import Any

import httpx
import pytest

from styngr.config import Configuration
from styngr.service import StyngrService

API_SERVER = "https://api.test/api"
USER_ID = 42


def make_track(track_id: str, title: str = "Song", key: str = "secret-key") -> dict[str, Any]:
    return {
        "trackId": track_id,
        "title": title,
        "artistNames": ["Artist A", "Artist B"],
        "isLiked": False,
        "customMetadata": {"id": f"asset-{track_id}", "key": key},
    }


class FakeClock:
    """Controllable replacement for time.time"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    """In-memory Styngr backend served through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[tuple[int, Any]]] = {}

    def route(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        """Register a response. Later registrations for the same route queue up."""
        self._routes.setdefault((method, "/api" + path), []).append((status, body))

    def reset_route(self, method: str, path: str) -> None:
        self._routes.pop((method, "/api" + path), None)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responses = self._routes.get((request.method, request.url.path))
        if not responses:
            return httpx.Response(404, json={"message": "Not found"})

        status, body = responses[0] if len(responses) == 1 else responses.pop(0)
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path == "/api" + path
        ]

    def bodies(self, method: str, path: str) -> list[Any]:
        return [json.loads(r.content) if r.content else None for r in self.calls(method, path)]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def configuration():
    return Configuration(api_key="api-key", app_id="app-1", api_server=API_SERVER)


@pytest.fixture
def backend():
    b = FakeBackend()
    b.route("POST", "/v1/sdk/tokens", {"token": "token-1"})
    b.route("POST", "/v1/sdk/radio/app-1/bundle/purchase", {"transactionId": "trx-1"})
    b.route("POST", "/v1/sdk/payments/confirm", {})
    b.route("GET", "/v1/sdk/radio/app-1/bundle/available", {
        "availableRadioBundles": [{"id": "SUBSCRIPTION_RADIO_BUNDLE_FREE", "price": 0}],
    })
    b.route("GET", "/v2/sdk/integration/playlists", {
        "playlists": [
            {"id": "P1", "title": "Chill", "description": None, "duration": 3725, "trackCount": 12},
            {"id": "P2", "title": "Rock", "duration": 600, "trackCount": 3},
        ],
    })
    b.route("POST", "/v2/sdk/integration/playlists/P1/start", {
        "sessionId": "S1",
        "track": make_track("T1"),
    })
    b.route("POST", "/v2/sdk/integration/playlists/P1/next", make_track("T2"))
    b.route("POST", "/v2/sdk/integration/playlists/P1/skip", make_track("T3"))
    return b


@pytest.fixture
def service(configuration, backend, clock):
    s = StyngrService()
    s.set_configuration(configuration, http_client=backend.client(), clock=clock)
    return s
