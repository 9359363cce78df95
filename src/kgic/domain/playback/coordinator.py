"""
Global playback coordinator.

One coordinator per process owns the single audio output and the playback
session. Pages (or CLI commands) call `play()`/`toggle_play_pause()` and
observe state through `subscribe()`; only the coordinator commands the output.
"""

import asyncio
from typing import Callable, Optional

from loguru import logger

from kgic.core.config import Config

from .formats import is_playable
from .output import AudioOutput, MpvCommandError, PlaybackStartError
from .reporter import PlayCountReporter
from .resolver import UrlResolver, is_storage_url
from .state import (
    PLAYBACK_FAILED_MESSAGE,
    UNSUPPORTED_FORMAT_MESSAGE,
    PlaybackEvent,
    SessionState,
    TrackDescriptor,
    TrackId,
    Transport,
    clamp_percent,
    now_ms,
    reduce,
)

StateListener = Callable[[SessionState], None]

# Failures raised by an output while starting or commanding playback
OUTPUT_ERRORS = (
    PlaybackStartError,
    MpvCommandError,
    RuntimeError,
    OSError,
    asyncio.TimeoutError,
)


class PlaybackCoordinator:
    def __init__(
        self,
        output: AudioOutput,
        resolver: UrlResolver,
        reporter: Optional[PlayCountReporter] = None,
        volume: int = 70,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._output = output
        self._resolver = resolver
        self._reporter = reporter
        self._clock = clock
        self._state = SessionState(volume_percent=clamp_percent(volume))
        self._listeners: list[StateListener] = []
        self._sequence = 0
        # Track whose audio the output currently holds
        self._source_track: Optional[TrackId] = None
        # Attached exactly once for the lifetime of the session
        self._output.subscribe(self._on_event)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def output(self) -> AudioOutput:
        return self._output

    @property
    def reporter(self) -> Optional[PlayCountReporter]:
        return self._reporter

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    async def play(self, track: TrackDescriptor) -> bool:
        """Start a track, or toggle it if it is already current.

        Returns:
            True if playback started (or the toggle was issued), False if it
            failed; failures are reported through `state.advisory`.
        """
        current = self._state.current_track
        if current is not None and current.id == track.id:
            logger.debug(f"Track {track.id} already current, toggling")
            await self.toggle_play_pause()
            return True

        if not track.audio_url:
            self._set_state(self._state._replace(advisory=PLAYBACK_FAILED_MESSAGE))
            return False

        if not is_playable(track.audio_url, self._output):
            logger.info(f"Unsupported audio format for track {track.id}")
            self._sequence += 1
            await self._silence_output()
            self._source_track = None
            self._set_state(
                self._state._replace(
                    current_track=track,
                    transport=Transport.PAUSED,
                    position_seconds=0.0,
                    duration_seconds=0.0,
                    advisory=UNSUPPORTED_FORMAT_MESSAGE,
                )
            )
            return False

        self._sequence += 1
        sequence = self._sequence

        # Optimistic: the UI reflects the new track before audio starts
        self._set_state(
            self._state._replace(
                current_track=track,
                transport=Transport.PLAYING,
                position_seconds=0.0,
                duration_seconds=0.0,
                has_ever_played=True,
                last_paused_at_ms=None,
                advisory=None,
            )
        )

        if self._reporter is not None:
            self._reporter.report_play(track.id)

        url = await self._resolver.resolve(track.audio_url)
        if sequence != self._sequence:
            logger.debug(f"Discarding stale resolution for track {track.id}")
            return False

        self._source_track = track.id

        try:
            await self._start(url)
            return True
        except OUTPUT_ERRORS as e:
            first_error = e

        if is_storage_url(track.audio_url) and url == track.audio_url:
            logger.debug(f"Retrying track {track.id} with a fresh signed URL")
            signed = await self._resolver.sign(track.audio_url)
            if sequence != self._sequence:
                return False
            if signed != url:
                try:
                    await self._start(signed)
                    return True
                except OUTPUT_ERRORS as e:
                    first_error = e

        if sequence != self._sequence:
            return False

        logger.warning(f"Playback failed for track {track.id}: {first_error}")
        await self._silence_output()
        self._set_state(
            self._state._replace(
                transport=Transport.PAUSED,
                last_paused_at_ms=self._clock(),
                advisory=PLAYBACK_FAILED_MESSAGE,
            )
        )
        return False

    async def toggle_play_pause(self) -> None:
        """Pause if playing, resume otherwise.

        Transport state follows the output's own events, never this call.
        """
        current = self._state.current_track
        if current is None:
            return
        if self._source_track != current.id:
            # the output holds no audio for this track; resuming would play another one
            logger.debug(f"Track {current.id} has no loaded audio, ignoring toggle")
            return
        try:
            if self._state.is_playing:
                await self._output.pause()
            else:
                await self._output.play()
        except OUTPUT_ERRORS as e:
            logger.warning(f"Toggle failed: {e}")
            self._set_state(self._state._replace(advisory=PLAYBACK_FAILED_MESSAGE))

    async def seek(self, percent: float) -> None:
        duration = self._state.duration_seconds
        if duration <= 0:
            return
        seconds = max(0.0, min(100.0, percent)) * duration / 100
        try:
            await self._output.seek(seconds)
        except OUTPUT_ERRORS as e:
            logger.warning(f"Seek failed: {e}")
            return
        self._set_state(self._state._replace(position_seconds=seconds))

    async def set_volume(self, percent: float) -> None:
        volume = clamp_percent(percent)
        try:
            await self._output.set_volume(volume)
        except OUTPUT_ERRORS as e:
            logger.warning(f"Volume change failed: {e}")
        self._set_state(self._state._replace(volume_percent=volume))

    def next(self) -> None:
        # No playlist ordering exists for podcasts
        logger.info("Next track requested; playlist navigation is not available")

    def previous(self) -> None:
        logger.info("Previous track requested; playlist navigation is not available")

    async def close(self) -> None:
        if self._reporter is not None:
            await self._reporter.drain()
        await self._output.close()

    async def _start(self, url: str) -> None:
        if self._output.source != url:
            await self._output.load(url)
        await self._output.play()

    async def _silence_output(self) -> None:
        if self._output.source is None:
            return
        try:
            await self._output.pause()
        except OUTPUT_ERRORS as e:
            logger.debug(f"Pause failed: {e}")

    def _on_event(self, event: PlaybackEvent) -> None:
        current = self._state.current_track
        if current is not None and self._source_track != current.id:
            return
        self._set_state(reduce(self._state, event, self._clock()))

    def _set_state(self, state: SessionState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in self._listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("Playback state listener failed")


_coordinator: Optional[PlaybackCoordinator] = None
_api = None


def get_coordinator(config: Config) -> PlaybackCoordinator:
    """Get or create the process-wide playback coordinator."""
    global _coordinator, _api
    if _coordinator is None:
        from .api import SiteApiClient
        from .output import MpvAudioOutput

        _api = SiteApiClient(
            config.site.api_base_url, timeout=config.site.request_timeout_seconds
        )
        output = MpvAudioOutput(
            socket_path=config.player.mpv_socket_path, volume=config.player.volume
        )
        _coordinator = PlaybackCoordinator(
            output,
            UrlResolver(_api.sign_url),
            PlayCountReporter(_api.increment_play),
            volume=config.player.volume,
        )
        logger.info("Playback coordinator created")
    return _coordinator


async def shutdown_coordinator() -> None:
    """Close the process-wide coordinator, its output and API client."""
    global _coordinator, _api
    if _coordinator is not None:
        coordinator, _coordinator = _coordinator, None
        await coordinator.close()
    if _api is not None:
        api, _api = _api, None
        await api.close()
