import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from styngr.config import Configuration
from styngr.errors import MissingFieldError, RemoteError

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/sdk/tokens"
TOKEN_LIFETIME = "PT15M"
TOKEN_LIFETIME_SECONDS = 15 * 60
TOKEN_REFRESH_MARGIN_SECONDS = 60  # Refresh a minute before the backend expires it
PLATFORM = "DISCORD"


@dataclass
class RawResponse:
    status: int
    body: bytes

    def json(self) -> Any:
        """Decode the body. Raises RemoteError if it is not JSON."""
        try:
            return json.loads(self.body)
        except ValueError as e:
            raise RemoteError(f"Response body is not valid JSON: {e}", status=self.status) from e


@dataclass
class _CachedToken:
    value: str
    expires_at: float


class CloudClient:
    """Thin async client for the Styngr SDK backend.

    Handles the token exchange for a user and the two flavours of call the
    backend accepts: bearer-token calls made on behalf of a user, and calls
    authenticated with the application's API key.
    """

    def __init__(
        self,
        configuration: Configuration,
        http_client: httpx.AsyncClient | None = None,
        clock=time.time,
    ):
        self.configuration = configuration
        self._http = http_client or httpx.AsyncClient(timeout=configuration.timeout)
        self._clock = clock
        self._tokens: dict[int, _CachedToken] = {}

    def _url(self, path: str) -> str:
        return f"{self.configuration.api_server}/{path.lstrip('/')}"

    async def _request(self, method: str, path: str, headers: dict[str, str], body: Any = None) -> RawResponse:
        url = self._url(path)
        try:
            response = await self._http.request(method, url, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RemoteError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            logger.warning("%s %s returned %s", method, path, response.status_code)
            raise RemoteError(
                f"{method} {path} returned {response.status_code}",
                status=response.status_code,
            )

        logger.debug("%s %s -> %s", method, path, response.status_code)
        return RawResponse(status=response.status_code, body=response.content)

    async def get_token(self, user_id: int) -> str:
        """Exchange a user id for a bearer token, reusing it until it is close to expiring."""
        cached = self._tokens.get(user_id)
        now = self._clock()
        if cached and now < cached.expires_at:
            return cached.value

        result = await self._request(
            "POST",
            TOKEN_PATH,
            headers={"x-api-token": self.configuration.api_key},
            body={
                "appId": self.configuration.app_id,
                "userId": str(user_id),
                "deviceId": str(user_id),
                "expiresIn": TOKEN_LIFETIME,
                "platform": PLATFORM,
            },
        )
        body = result.json()
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise MissingFieldError("token")

        self._tokens[user_id] = _CachedToken(
            value=token,
            expires_at=now + TOKEN_LIFETIME_SECONDS - TOKEN_REFRESH_MARGIN_SECONDS,
        )
        return token

    def forget_token(self, user_id: int) -> None:
        """Drop a cached token (call when the user leaves)."""
        self._tokens.pop(user_id, None)

    async def call(self, token: str, path: str, method: str, body: Any = None) -> RawResponse:
        """Call the backend on behalf of a user."""
        return await self._request(method, path, headers={"Authorization": f"Bearer {token}"}, body=body)

    async def call_as_api(self, path: str, method: str, body: Any = None) -> RawResponse:
        """Call the backend authenticated as the application itself."""
        return await self._request(method, path, headers={"x-api-token": self.configuration.api_key}, body=body)

    async def aclose(self) -> None:
        await self._http.aclose()
