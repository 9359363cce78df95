"""Shared fixtures for playback tests."""

import asyncio
from typing import Optional

import pytest

from kgic.domain.playback.coordinator import PlaybackCoordinator
from kgic.domain.playback.output import AudioOutput, PlaybackStartError
from kgic.domain.playback.reporter import PlayCountReporter
from kgic.domain.playback.resolver import UrlResolver
from kgic.domain.playback.state import EventKind, PlaybackEvent, TrackDescriptor

STORAGE_BASE = "https://proj.supabase.co/storage/v1/object/public/podcasts"


class FakeAudioOutput(AudioOutput):
    """In-memory audio output that emits events like a real device."""

    def __init__(self, unsupported: tuple[str, ...] = ()) -> None:
        super().__init__()
        self.unsupported = set(unsupported)
        self.failing_sources: set[str] = set()
        self.calls: list[tuple] = []
        self.volume: Optional[int] = None
        self.closed = False

    def can_play_type(self, mime_type: str) -> bool:
        return mime_type not in self.unsupported

    async def load(self, url: str) -> None:
        self.calls.append(("load", url))
        self.source = url
        self.position = 0.0
        self.duration = 0.0

    async def play(self) -> None:
        self.calls.append(("play", self.source))
        if self.source in self.failing_sources:
            raise PlaybackStartError(f"cannot decode {self.source}")
        self._emit(PlaybackEvent(EventKind.PLAY))

    async def pause(self) -> None:
        self.calls.append(("pause", self.source))
        self._emit(PlaybackEvent(EventKind.PAUSE))

    async def seek(self, seconds: float) -> None:
        self.calls.append(("seek", seconds))
        self.position = seconds

    async def set_volume(self, percent: int) -> None:
        self.calls.append(("volume", percent))
        self.volume = percent

    async def close(self) -> None:
        self.closed = True

    def loads(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "load"]

    def emit(self, event: PlaybackEvent) -> None:
        self._emit(event)


class RecordingSigner:
    """Signer double recording requested URLs."""

    def __init__(self, result: Optional[str] = None) -> None:
        self.result = result
        self.requests: list[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def __call__(self, url: str) -> Optional[str]:
        self.requests.append(url)
        if self.gate is not None:
            await self.gate.wait()
        return self.result


class RecordingSender:
    """Play-count sender double."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.sent: list = []

    async def __call__(self, track_id) -> None:
        self.sent.append(track_id)
        if self.error is not None:
            raise self.error


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def output() -> FakeAudioOutput:
    return FakeAudioOutput()


@pytest.fixture
def signer() -> RecordingSigner:
    return RecordingSigner()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def reporter(sender: RecordingSender) -> PlayCountReporter:
    return PlayCountReporter(sender)


@pytest.fixture
def coordinator(output, signer, reporter, clock) -> PlaybackCoordinator:
    return PlaybackCoordinator(output, UrlResolver(signer), reporter, clock=clock)


@pytest.fixture
def external_track() -> TrackDescriptor:
    return TrackDescriptor(
        id=1,
        title="Sunday Sermon",
        artist="KGIC",
        audio_url="https://cdn.example.com/sermon.mp3",
    )


@pytest.fixture
def other_track() -> TrackDescriptor:
    return TrackDescriptor(
        id=2,
        title="Midweek Devotional",
        artist="Pastor Kim",
        audio_url="https://cdn.example.com/devotional.m4a",
    )


@pytest.fixture
def storage_track() -> TrackDescriptor:
    return TrackDescriptor(
        id="c0ffee",
        title="Worship Night",
        artist="KGIC",
        audio_url=f"{STORAGE_BASE}/public/audios/2025-03-02/abc.mp3",
    )


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
