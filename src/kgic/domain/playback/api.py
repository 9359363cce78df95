"""
HTTP client for the site's own podcast API.

Used by the player to sign storage URLs and report plays.
"""

from typing import Optional

import httpx
from loguru import logger

from .state import TrackId

SIGN_URL_PATH = "/api/podcasts/sign-url"
INCREMENT_PLAY_PATH = "/api/podcasts/increment-play"


class SiteApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def sign_url(self, url: str) -> Optional[str]:
        """Exchange a storage URL for a time-limited signed URL.

        Returns:
            The signed URL, or None when the API declined or was unreachable
        """
        try:
            response = await self._http.post(SIGN_URL_PATH, json={"url": url})
        except httpx.HTTPError as e:
            logger.debug(f"sign-url request failed: {e}")
            return None
        if response.status_code != 200:
            logger.debug(f"sign-url returned {response.status_code}")
            return None
        try:
            data = response.json()
        except ValueError:
            return None
        signed = data.get("url") if isinstance(data, dict) else None
        return signed if isinstance(signed, str) and signed else None

    async def increment_play(self, track_id: TrackId) -> None:
        """Ask the server to increment a podcast's play counter.

        Raises:
            httpx.HTTPError: On transport failure or non-success status
        """
        response = await self._http.post(INCREMENT_PLAY_PATH, json={"id": track_id})
        response.raise_for_status()
