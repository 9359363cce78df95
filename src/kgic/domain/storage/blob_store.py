"""
Blob store client for the hosted storage REST API.
"""

from typing import NamedTuple, Optional
from urllib.parse import quote, urlparse

import requests
from loguru import logger

from kgic.core.config import SupabaseConfig

STORAGE_PATH = "/storage/v1"


class BlobStoreError(Exception):
    """Raised when the storage service rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UploadResult(NamedTuple):
    path: str
    public_url: str


def object_path_from_url(url: str, bucket: str) -> Optional[str]:
    """Extract the object path inside `bucket` from a storage URL.

    Handles both public URLs (.../object/public/<bucket>/<path>) and signed
    URLs (.../object/sign/<bucket>/<path>?token=...).

    Returns:
        The object path, or None if the URL does not point into the bucket
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None

    parts = [part for part in parsed.path.split("/") if part]
    if bucket not in parts:
        return None
    path = "/".join(parts[parts.index(bucket) + 1 :])
    return path or None


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)
    return str(payload)


class BlobStore:
    """Bucket/object operations authenticated with the service role key."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._service_key = service_key
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: SupabaseConfig) -> "BlobStore":
        return cls(config.url, config.service_role)

    def _headers(self, content_type: str = "application/json") -> dict[str, str]:
        return {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Content-Type": content_type,
        }

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{STORAGE_PATH}/{path}"
        headers = kwargs.pop("headers", None) or self._headers()
        try:
            response = self._session.request(
                method, url, headers=headers, timeout=self._timeout, **kwargs
            )
        except requests.RequestException as e:
            raise BlobStoreError(str(e)) from e
        if not response.ok:
            raise BlobStoreError(_error_message(response), response.status_code)
        return response

    def ensure_bucket(self, bucket: str, public: bool = True) -> None:
        """Create the bucket if needed; an existing bucket is not an error."""
        try:
            self._request(
                "POST", "bucket", json={"id": bucket, "name": bucket, "public": public}
            )
            logger.info(f"Created storage bucket {bucket}")
        except BlobStoreError as e:
            logger.debug(f"Bucket {bucket} not created: {e}")

    def upload(
        self, bucket: str, path: str, data: bytes, content_type: str
    ) -> UploadResult:
        """Upload an object without overwriting an existing one.

        Raises:
            BlobStoreError: If the storage service rejects the upload
        """
        headers = self._headers(content_type)
        headers["x-upsert"] = "false"
        self._request(
            "POST", f"object/{bucket}/{quote(path)}", data=data, headers=headers
        )
        logger.info(f"Uploaded {len(data)} bytes to {bucket}/{path}")
        return UploadResult(path=path, public_url=self.get_public_url(bucket, path))

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}{STORAGE_PATH}/object/public/{bucket}/{quote(path)}"

    def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        """Create a time-limited URL for an object.

        Raises:
            BlobStoreError: If signing fails
        """
        response = self._request(
            "POST", f"object/sign/{bucket}/{quote(path)}", json={"expiresIn": expires_in}
        )
        try:
            signed = response.json().get("signedURL")
        except (ValueError, AttributeError):
            signed = None
        if not signed:
            raise BlobStoreError("Failed to sign URL")
        return f"{self.base_url}{STORAGE_PATH}{signed}"
