"""Reddit OAuth2 client-credentials token cache."""

import asyncio
import logging
import time
from typing import Callable, Optional

import httpx

from app.core.config import Settings
from app.core.errors import AuthError
from app.reddit.schemas import Credential

logger = logging.getLogger(__name__)


class TokenCache:
    """Holds one application-only bearer token and refreshes it on demand.

    The token is kept for ``token_ttl_seconds`` (50 minutes by default, ten
    minutes short of Reddit's one hour lifetime). Refreshes are serialised so
    concurrent callers on an expired cache share a single upstream request.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.http_client = http_client
        self.settings = settings
        self._clock = clock
        self._credential: Optional[Credential] = None
        self._lock = asyncio.Lock()

    def _cached(self) -> Optional[str]:
        if self._credential and self._clock() < self._credential.expires_at:
            return self._credential.token
        return None

    async def get_token(self) -> str:
        """Return a valid bearer token, fetching a new one if needed.

        Raises:
            AuthError: If credentials are missing or Reddit refuses them
        """
        token = self._cached()
        if token:
            return token

        async with self._lock:
            # Another caller may have refreshed while we waited
            token = self._cached()
            if token:
                return token

            self._credential = await self._request_token()
            return self._credential.token

    def invalidate(self) -> None:
        """Drop the cached token so the next call fetches a fresh one."""
        self._credential = None

    async def _request_token(self) -> Credential:
        client_id = self.settings.reddit_client_id
        client_secret = self.settings.reddit_client_secret.get_secret_value()
        if not client_id or not client_secret:
            raise AuthError(
                "Reddit API credentials not configured. "
                "Please set REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET"
            )

        logger.info("Requesting new Reddit OAuth2 token")

        try:
            response = await self.http_client.post(
                self.settings.reddit_token_url,
                auth=httpx.BasicAuth(client_id, client_secret),
                data={"grant_type": "client_credentials"},
                headers={"User-Agent": self.settings.reddit_user_agent},
                timeout=self.settings.reddit_timeout_seconds,
            )
        except httpx.HTTPError as e:
            logger.error(f"Reddit token endpoint unreachable: {e}")
            raise AuthError(f"Failed to authenticate with Reddit API: {e}") from e

        if not response.is_success:
            logger.error(f"Reddit token request failed: {response.status_code}")
            raise AuthError(
                "Failed to authenticate with Reddit API: "
                f"{response.status_code} {response.reason_phrase}",
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise AuthError("Reddit token response was not valid JSON") from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise AuthError("No access token received from Reddit API")

        logger.info("Reddit OAuth2 token obtained")
        return Credential(
            token=token,
            expires_at=self._clock() + self.settings.token_ttl_seconds,
        )
