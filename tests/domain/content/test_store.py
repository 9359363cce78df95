"""Tests for the hosted content store client."""

from unittest.mock import Mock

import pytest
import requests

from kgic.core.config import SupabaseConfig
from kgic.domain.content.models import Collection, Podcast
from kgic.domain.content.store import ContentStore, ContentStoreError, Order

BASE_URL = "https://proj.supabase.co"


def make_response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.content = b"x" if payload is not None or text else b""
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session() -> Mock:
    return Mock()


@pytest.fixture
def store(session) -> ContentStore:
    return ContentStore(BASE_URL, "anon-key", session=session)


class TestList:
    def test_builds_postgrest_query(self, store, session):
        """Test filters and ordering use PostgREST syntax."""
        session.request.return_value = make_response(payload=[{"id": 1}])

        rows = store.list(
            "podcasts",
            filters={"status": "published"},
            order=[Order("published_at", descending=True), Order("title")],
            limit=5,
        )

        assert rows == [{"id": 1}]
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == "GET"
        assert url == f"{BASE_URL}/rest/v1/podcasts"
        assert kwargs["params"] == {
            "select": "*",
            "status": "eq.published",
            "order": "published_at.desc,title.asc",
            "limit": "5",
        }
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["headers"]["Authorization"] == "Bearer anon-key"

    def test_nulls_last(self, store, session):
        session.request.return_value = make_response(payload=[])
        store.list(
            Collection.ANNOUNCEMENTS,
            order=[Order("starts_at", descending=True, nulls_last=True)],
        )
        params = session.request.call_args.kwargs["params"]
        assert params["order"] == "starts_at.desc.nullslast"

    def test_unknown_table_rejected(self, store):
        with pytest.raises(ValueError):
            store.list("users")

    def test_list_records_validates(self, store, session):
        """Test rows are validated into typed records."""
        session.request.return_value = make_response(
            payload=[{"id": 3, "title": "Ep", "audio_url": "https://a/b.mp3", "extra": 1}]
        )
        podcasts = store.list_records(Podcast)
        assert isinstance(podcasts[0], Podcast)
        assert podcasts[0].title == "Ep"


class TestWrites:
    def test_user_token_used_for_authorization(self, session):
        store = ContentStore(BASE_URL, "anon-key", access_token="user-jwt", session=session)
        session.request.return_value = make_response(payload=[{"id": 1, "name": "Choir"}])

        store.insert("ministries", {"name": "Choir"})

        kwargs = session.request.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer user-jwt"
        assert kwargs["headers"]["Prefer"] == "return=representation"
        assert kwargs["json"] == {"name": "Choir"}

    def test_update_filters_by_id(self, store, session):
        session.request.return_value = make_response(payload=[{"id": 4, "pinned": True}])
        row = store.update("announcements", 4, {"pinned": True})
        assert row == {"id": 4, "pinned": True}
        assert session.request.call_args.args[0] == "PATCH"
        assert session.request.call_args.kwargs["params"] == {"id": "eq.4"}

    def test_update_missing_row(self, store, session):
        session.request.return_value = make_response(payload=[])
        with pytest.raises(ContentStoreError) as exc_info:
            store.update("books", 99, {"price": 1})
        assert exc_info.value.status_code == 404

    def test_delete(self, store, session):
        session.request.return_value = make_response(status_code=204)
        assert store.delete("books", 7) is None
        assert session.request.call_args.args[0] == "DELETE"

    def test_get_missing(self, store, session):
        session.request.return_value = make_response(payload=[])
        assert store.get("prayers", "nope") is None

    def test_rpc(self, store, session):
        session.request.return_value = make_response(status_code=204)
        store.rpc("increment_podcast_play_count", {"p_id": 5})
        assert session.request.call_args.args[1] == (
            f"{BASE_URL}/rest/v1/rpc/increment_podcast_play_count"
        )
        assert session.request.call_args.kwargs["json"] == {"p_id": 5}


class TestErrors:
    def test_error_message_surfaced(self, store, session):
        """Test the backend's message is kept verbatim."""
        session.request.return_value = make_response(
            status_code=400,
            payload={"message": 'null value in column "title" violates not-null constraint'},
        )
        with pytest.raises(ContentStoreError) as exc_info:
            store.insert("prayers", {})
        assert exc_info.value.message == (
            'null value in column "title" violates not-null constraint'
        )
        assert exc_info.value.status_code == 400

    def test_plain_text_error(self, store, session):
        session.request.return_value = make_response(status_code=503, text="unavailable")
        with pytest.raises(ContentStoreError, match="unavailable"):
            store.list("books")

    def test_transport_error(self, store, session):
        session.request.side_effect = requests.ConnectionError("dns failure")
        with pytest.raises(ContentStoreError, match="dns failure"):
            store.list("books")


def test_from_config_privileged():
    config = SupabaseConfig(url=BASE_URL, anon_key="anon", service_role="service")
    assert ContentStore.from_config(config)._api_key == "anon"
    assert ContentStore.from_config(config, privileged=True)._api_key == "service"
