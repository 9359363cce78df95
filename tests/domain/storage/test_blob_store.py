"""Tests for the hosted blob store client."""

from unittest.mock import Mock

import pytest

from kgic.domain.storage.blob_store import (
    BlobStore,
    BlobStoreError,
    object_path_from_url,
)

BASE_URL = "https://proj.supabase.co"


def make_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = ""
    response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def session() -> Mock:
    return Mock()


@pytest.fixture
def blob_store(session) -> BlobStore:
    return BlobStore(BASE_URL, "service-key", session=session)


class TestObjectPathFromUrl:
    def test_public_url(self):
        url = f"{BASE_URL}/storage/v1/object/public/podcasts/public/audios/2025-01-01/a.mp3"
        assert object_path_from_url(url, "podcasts") == "public/audios/2025-01-01/a.mp3"

    def test_signed_url(self):
        url = f"{BASE_URL}/storage/v1/object/sign/podcasts/public/audios/a.mp3?token=t"
        assert object_path_from_url(url, "podcasts") == "public/audios/a.mp3"

    def test_other_bucket(self):
        url = f"{BASE_URL}/storage/v1/object/public/avatars/a.png"
        assert object_path_from_url(url, "podcasts") is None

    def test_not_a_url(self):
        assert object_path_from_url("podcasts/a.mp3", "podcasts") is None


class TestBlobStore:
    def test_upload_returns_public_url(self, blob_store, session):
        session.request.return_value = make_response(payload={"Key": "podcasts/x"})

        result = blob_store.upload("podcasts", "public/audios/d/a.mp3", b"ID3", "audio/mpeg")

        assert result.path == "public/audios/d/a.mp3"
        assert result.public_url == (
            f"{BASE_URL}/storage/v1/object/public/podcasts/public/audios/d/a.mp3"
        )
        method, url = session.request.call_args.args
        headers = session.request.call_args.kwargs["headers"]
        assert method == "POST"
        assert url == f"{BASE_URL}/storage/v1/object/podcasts/public/audios/d/a.mp3"
        assert headers["Content-Type"] == "audio/mpeg"
        assert headers["x-upsert"] == "false"

    def test_upload_error(self, blob_store, session):
        session.request.return_value = make_response(
            status_code=409, payload={"message": "The resource already exists"}
        )
        with pytest.raises(BlobStoreError, match="already exists"):
            blob_store.upload("podcasts", "a.mp3", b"", "audio/mpeg")

    def test_create_signed_url(self, blob_store, session):
        session.request.return_value = make_response(
            payload={"signedURL": "/object/sign/podcasts/a.mp3?token=abc"}
        )

        url = blob_store.create_signed_url("podcasts", "a.mp3", 43200)

        assert url == f"{BASE_URL}/storage/v1/object/sign/podcasts/a.mp3?token=abc"
        assert session.request.call_args.kwargs["json"] == {"expiresIn": 43200}

    def test_create_signed_url_missing_field(self, blob_store, session):
        session.request.return_value = make_response(payload={})
        with pytest.raises(BlobStoreError):
            blob_store.create_signed_url("podcasts", "a.mp3", 60)

    def test_ensure_bucket_ignores_existing(self, blob_store, session):
        """Test an already existing bucket is not an error."""
        session.request.return_value = make_response(
            status_code=400, payload={"message": "Bucket already exists"}
        )
        blob_store.ensure_bucket("podcasts")
        assert session.request.call_args.kwargs["json"] == {
            "id": "podcasts",
            "name": "podcasts",
            "public": True,
        }
