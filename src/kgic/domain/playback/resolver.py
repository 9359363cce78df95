"""
Playback URL resolution for podcast audio.

Storage-hosted objects may need a signed, time-limited URL; anything else
(externally hosted audio, already signed URLs) passes through untouched.
"""

from typing import Awaitable, Callable, Optional
from urllib.parse import parse_qs, urlparse

from loguru import logger

# Path segment identifying objects in the hosted storage service
STORAGE_OBJECT_SEGMENT = "/storage/v1/object/"

# Path segment of URLs that are already signed
SIGNED_OBJECT_SEGMENT = "/storage/v1/object/sign/"

Signer = Callable[[str], Awaitable[Optional[str]]]


def is_storage_url(url: str) -> bool:
    """Check whether a URL points at a storage-hosted object."""
    if not url:
        return False
    try:
        return STORAGE_OBJECT_SEGMENT in urlparse(url).path
    except ValueError:
        return STORAGE_OBJECT_SEGMENT in url


def is_signed_url(url: str) -> bool:
    """Check whether a storage URL already carries a signature."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return SIGNED_OBJECT_SEGMENT in url or "token=" in url
    return SIGNED_OBJECT_SEGMENT in parsed.path or "token" in parse_qs(parsed.query)


class UrlResolver:
    """Resolve audio URLs to playable URLs, signing storage objects.

    `resolve()` never raises: any signing failure degrades to the input URL.
    """

    def __init__(self, signer: Signer) -> None:
        self._signer = signer

    async def resolve(self, url: str) -> str:
        if not is_storage_url(url):
            return url
        if is_signed_url(url):
            return url
        return await self.sign(url)

    async def sign(self, url: str) -> str:
        """Request a fresh signed URL, falling back to the original."""
        try:
            signed = await self._signer(url)
        except Exception as e:
            logger.debug(f"Signing failed for {url}: {e}")
            return url
        if not signed:
            logger.debug(f"No signed URL returned for {url}")
            return url
        return signed
