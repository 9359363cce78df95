"""
Storage domain: hosted blob store client and upload validation.
"""

from .blob_store import BlobStore, BlobStoreError, UploadResult, object_path_from_url
from .uploads import UploadRejected, validate_audio, validate_image

__all__ = [
    "BlobStore",
    "BlobStoreError",
    "UploadRejected",
    "UploadResult",
    "object_path_from_url",
    "validate_audio",
    "validate_image",
]
