"""Playback domain - global podcast playback coordination.

This domain handles:
- Playback session state and the output event reducer
- The single audio output resource (mpv via JSON IPC)
- Signed-URL resolution for storage-hosted audio
- Play-count reporting with a local optimistic counter
- Mini-player visibility across routes
"""

from .coordinator import PlaybackCoordinator, get_coordinator, shutdown_coordinator
from .output import (
    AudioOutput,
    MpvAudioOutput,
    MpvCommandError,
    PlaybackStartError,
    check_mpv_available,
)
from .reporter import PlayCountReporter
from .resolver import UrlResolver, is_signed_url, is_storage_url
from .state import (
    EventKind,
    PlaybackEvent,
    SessionState,
    TrackDescriptor,
    Transport,
    reduce,
)
from .visibility import needs_countdown_tick, should_show

__all__ = [
    # Coordinator
    "PlaybackCoordinator",
    "get_coordinator",
    "shutdown_coordinator",
    # Output
    "AudioOutput",
    "MpvAudioOutput",
    "MpvCommandError",
    "PlaybackStartError",
    "check_mpv_available",
    # Resolution and reporting
    "UrlResolver",
    "is_signed_url",
    "is_storage_url",
    "PlayCountReporter",
    # State
    "EventKind",
    "PlaybackEvent",
    "SessionState",
    "TrackDescriptor",
    "Transport",
    "reduce",
    # Visibility
    "needs_countdown_tick",
    "should_show",
]
