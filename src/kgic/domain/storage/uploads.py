"""
Upload validation and object naming for podcast audio and cover art.
"""

import uuid
from datetime import datetime, timezone
from typing import NamedTuple, Optional

PODCASTS_BUCKET = "podcasts"
AUDIO_PREFIX = "public/audios"
COVER_ART_PREFIX = "public/cover-art"

AUDIO_EXTENSIONS = frozenset({"mp3", "m4a"})
AUDIO_MIME_TYPES = frozenset(
    {"audio/mpeg", "audio/mp3", "audio/mp4", "audio/x-m4a", "audio/aac"}
)
DEFAULT_AUDIO_EXTENSION = "mp3"
DEFAULT_AUDIO_MIME = "audio/mpeg"

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp"})
IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
MAX_IMAGE_BYTES = 5 * 1024 * 1024

UNSUPPORTED_AUDIO_MESSAGE = "Unsupported audio format. Please upload MP3 or M4A."
UNSUPPORTED_IMAGE_MESSAGE = "Unsupported image format. Please upload JPG, PNG, or WebP."
IMAGE_TOO_LARGE_MESSAGE = "File too large. Maximum size is 5MB."


class UploadRejected(Exception):
    """Raised when an uploaded file fails validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidatedUpload(NamedTuple):
    extension: str
    content_type: str


def file_extension(filename: Optional[str]) -> str:
    """Lowercased extension of a file name, empty when there is none."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def validate_audio(filename: Optional[str], content_type: Optional[str]) -> ValidatedUpload:
    """Check an audio upload against the allow-list.

    A missing extension is treated as mp3 and a missing MIME type is stored
    as audio/mpeg. There is no size cap.

    Raises:
        UploadRejected: If the extension or MIME type is not allowed
    """
    extension = file_extension(filename) or DEFAULT_AUDIO_EXTENSION
    if extension not in AUDIO_EXTENSIONS:
        raise UploadRejected(UNSUPPORTED_AUDIO_MESSAGE)
    if content_type and content_type not in AUDIO_MIME_TYPES:
        raise UploadRejected(UNSUPPORTED_AUDIO_MESSAGE)
    return ValidatedUpload(extension, content_type or DEFAULT_AUDIO_MIME)


def validate_image(
    filename: Optional[str], content_type: Optional[str], size: int
) -> ValidatedUpload:
    """Check a cover art upload against the format allow-list and size cap.

    Raises:
        UploadRejected: If the format is not allowed or the file is too large
    """
    extension = file_extension(filename)
    if extension not in IMAGE_EXTENSIONS or content_type not in IMAGE_MIME_TYPES:
        raise UploadRejected(UNSUPPORTED_IMAGE_MESSAGE)
    if size > MAX_IMAGE_BYTES:
        raise UploadRejected(IMAGE_TOO_LARGE_MESSAGE)
    return ValidatedUpload(extension, content_type)


def object_path(
    prefix: str,
    extension: str,
    today: Optional[datetime] = None,
    uid: Optional[str] = None,
) -> str:
    """Build a unique object path: <prefix>/<YYYY-MM-DD>/<uuid>.<ext>."""
    today = today or datetime.now(timezone.utc)
    uid = uid or str(uuid.uuid4())
    return f"{prefix}/{today:%Y-%m-%d}/{uid}.{extension}"
