"""Tests for audio format probing."""

from kgic.domain.playback.formats import extension_of, is_playable, mime_for_url


def test_extension_ignores_query():
    assert extension_of("https://x.example.com/a/b.MP3?token=1") == "mp3"
    assert extension_of("https://x.example.com/stream") == ""
    assert extension_of("local/file.m4a") == "m4a"


def test_mime_for_url():
    assert mime_for_url("https://x.example.com/a.mp3") == "audio/mpeg"
    assert mime_for_url("https://x.example.com/a.m4a") == "audio/mp4"
    assert mime_for_url("https://x.example.com/a.opus") == "audio/ogg"
    assert mime_for_url("https://x.example.com/a") is None


def test_is_playable(output):
    """Test only known formats the output refuses are unplayable."""
    output.unsupported.add("audio/ogg")
    assert is_playable("https://x.example.com/a.mp3", output)
    assert not is_playable("https://x.example.com/a.ogg", output)
    assert is_playable("https://x.example.com/live", output)
