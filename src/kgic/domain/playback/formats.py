"""
Audio format probing.

Maps an audio URL's extension to a MIME type and asks the output whether it
can decode it, so the play affordance can be disabled up front.
"""

from typing import Optional
from urllib.parse import urlparse

from .output import AudioOutput

MIME_BY_EXTENSION = {
    "mp3": "audio/mpeg",
    "m4a": "audio/mp4",
    "mp4": "audio/mp4",
    "aac": "audio/aac",
    "ogg": "audio/ogg",
    "oga": "audio/ogg",
    "opus": "audio/ogg",
    "wav": "audio/wav",
    "flac": "audio/flac",
}


def extension_of(url: str) -> str:
    """Lowercase file extension of a URL path, ignoring the query string."""
    path = urlparse(url).path if "://" in url else url.split("?", 1)[0]
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def mime_for_url(url: str) -> Optional[str]:
    """Guess the audio MIME type from a URL, or None when unknown."""
    return MIME_BY_EXTENSION.get(extension_of(url))


def is_playable(url: str, output: AudioOutput) -> bool:
    """Proactive capability check.

    Unknown extensions are assumed playable; only a known type the output
    refuses is reported as unsupported.
    """
    mime = mime_for_url(url)
    if mime is None:
        return True
    return output.can_play_type(mime)
