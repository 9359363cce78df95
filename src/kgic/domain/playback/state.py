"""
Playback session state for the podcast player.

The session is a single immutable value replaced on every change. Output
events are folded into it by `reduce()`, so every transport transition
lives in one place.
"""

import time
from enum import Enum
from typing import NamedTuple, Optional, Union

TrackId = Union[str, int]

UNSUPPORTED_FORMAT_MESSAGE = (
    "This audio format isn't supported by your player. Please use Download to listen."
)
PLAYBACK_FAILED_MESSAGE = (
    "Playback failed. Please use Download to listen or try another player."
)


class TrackDescriptor(NamedTuple):
    """Immutable description of a playable track."""

    id: TrackId
    title: str
    artist: str
    audio_url: str
    image_url: Optional[str] = None


class Transport(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


class EventKind(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    ENDED = "ended"
    TIME_UPDATE = "timeupdate"
    LOADED_METADATA = "loadedmetadata"
    ERROR = "error"


class PlaybackEvent(NamedTuple):
    """Event emitted by the audio output."""

    kind: EventKind
    position: float = 0.0
    duration: float = 0.0
    message: Optional[str] = None


class SessionState(NamedTuple):
    """Process-wide playback session (immutable, use `._replace()`)."""

    current_track: Optional[TrackDescriptor] = None
    transport: Transport = Transport.IDLE
    position_seconds: float = 0.0
    duration_seconds: float = 0.0
    volume_percent: int = 70
    has_ever_played: bool = False
    last_paused_at_ms: Optional[int] = None
    advisory: Optional[str] = None  # user-facing playback warning

    @property
    def is_playing(self) -> bool:
        return self.transport is Transport.PLAYING

    @property
    def progress_percent(self) -> float:
        """Position as a percentage of duration, 0 while duration is unknown."""
        if self.duration_seconds <= 0:
            return 0.0
        progress = self.position_seconds / self.duration_seconds * 100
        return max(0.0, min(100.0, progress))


def now_ms() -> int:
    """Current wall clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def clamp_percent(value: float) -> int:
    """Clamp a percentage into the integer range 0-100."""
    return int(max(0, min(100, round(value))))


def reduce(state: SessionState, event: PlaybackEvent, at_ms: int) -> SessionState:
    """Apply an output event to the session state.

    Args:
        state: Current session state
        event: Event emitted by the audio output
        at_ms: Event time in epoch milliseconds

    Returns:
        The new session state
    """
    if event.kind is EventKind.PLAY:
        if state.current_track is None:
            return state
        return state._replace(
            transport=Transport.PLAYING,
            has_ever_played=True,
            last_paused_at_ms=None,
            advisory=None,
        )

    if event.kind is EventKind.PAUSE:
        if state.transport is Transport.ENDED:
            # end of stream may be followed by a pause; stay ended
            return state._replace(last_paused_at_ms=at_ms)
        return state._replace(transport=Transport.PAUSED, last_paused_at_ms=at_ms)

    if event.kind is EventKind.ENDED:
        return state._replace(
            transport=Transport.ENDED,
            position_seconds=0.0,
            last_paused_at_ms=at_ms,
        )

    if event.kind is EventKind.TIME_UPDATE:
        return state._replace(position_seconds=max(0.0, event.position))

    if event.kind is EventKind.LOADED_METADATA:
        return state._replace(duration_seconds=max(0.0, event.duration))

    if event.kind is EventKind.ERROR:
        last_paused = (
            at_ms if state.transport is Transport.PLAYING else state.last_paused_at_ms
        )
        return state._replace(
            transport=Transport.PAUSED,
            last_paused_at_ms=last_paused,
            advisory=event.message or PLAYBACK_FAILED_MESSAGE,
        )

    return state
