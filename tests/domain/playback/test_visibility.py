"""Tests for the mini-player visibility policy."""

import pytest

from kgic.domain.playback.state import SessionState, TrackDescriptor, Transport
from kgic.domain.playback.visibility import (
    is_podcasts_route,
    needs_countdown_tick,
    should_show,
)

NOW = 1_700_000_000_000


@pytest.fixture
def paused() -> SessionState:
    track = TrackDescriptor(id=1, title="Sermon", artist="KGIC", audio_url="a.mp3")
    return SessionState(
        current_track=track,
        transport=Transport.PAUSED,
        has_ever_played=True,
        last_paused_at_ms=NOW - 30_000,
    )


class TestShouldShow:
    def test_podcasts_route_always_shows(self):
        """Test the listing route shows the bar even before any playback."""
        assert should_show("/podcasts", SessionState(), now=NOW)
        assert should_show("/podcasts/42", SessionState(), now=NOW)

    def test_hidden_before_first_play(self):
        assert not should_show("/", SessionState(), now=NOW)

    def test_playing_shows_everywhere(self, paused):
        playing = paused._replace(transport=Transport.PLAYING, last_paused_at_ms=None)
        assert should_show("/about", playing, now=NOW)

    def test_within_grace_window(self, paused):
        """Test a pause 30s ago keeps the bar visible."""
        assert should_show("/prayers", paused, now=NOW)

    def test_after_grace_window(self, paused):
        """Test a pause 61s ago hides the bar."""
        state = paused._replace(last_paused_at_ms=NOW - 61_000)
        assert not should_show("/prayers", state, now=NOW)

    def test_custom_grace_window(self, paused):
        assert not should_show("/prayers", paused, now=NOW, grace_window_ms=10_000)

    def test_ended_uses_grace_window(self, paused):
        ended = paused._replace(transport=Transport.ENDED)
        assert should_show("/give", ended, now=NOW)


class TestCountdownTick:
    def test_tick_only_while_counting_down(self, paused):
        """Test the tick runs only for a paused session off the listing."""
        assert needs_countdown_tick("/about", paused)
        assert not needs_countdown_tick("/podcasts", paused)
        assert not needs_countdown_tick(
            "/about", paused._replace(transport=Transport.PLAYING, last_paused_at_ms=None)
        )
        assert not needs_countdown_tick("/about", SessionState())


def test_is_podcasts_route():
    assert is_podcasts_route("/podcasts")
    assert not is_podcasts_route("/")
    assert not is_podcasts_route(None)
