"""Tests for content records."""

import pytest
from pydantic import ValidationError

from kgic.domain.content.models import (
    RECORD_TYPES,
    Collection,
    Podcast,
    SmallGroup,
    record_type_for,
    writable_fields,
)


class TestPodcast:
    def test_to_track_defaults_artist(self):
        podcast = Podcast(id=5, title="Ep", audio_url="https://a/ep.mp3")
        track = podcast.to_track()
        assert track.id == 5
        assert track.artist == "KGIC"
        assert track.audio_url == "https://a/ep.mp3"

    def test_to_track_keeps_artist_and_art(self):
        podcast = Podcast(
            id="u1",
            title="Ep",
            artist="Pastor Lee",
            audio_url="https://a/ep.mp3",
            image_url="https://a/cover.png",
        )
        track = podcast.to_track()
        assert track.artist == "Pastor Lee"
        assert track.image_url == "https://a/cover.png"

    def test_rejects_negative_duration(self):
        with pytest.raises(ValidationError):
            Podcast(title="Ep", audio_url="x.mp3", duration_seconds=-1)

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            Podcast(title="Ep", audio_url="x.mp3", status="live")


def test_every_collection_has_a_record_type():
    assert set(RECORD_TYPES) == set(Collection)
    assert record_type_for("small_groups") is SmallGroup


def test_unknown_collection():
    with pytest.raises(ValueError):
        record_type_for("users")


def test_writable_fields_exclude_server_columns():
    fields = writable_fields(SmallGroup)
    assert "name" in fields
    assert not {"id", "created_at", "updated_at"} & fields
