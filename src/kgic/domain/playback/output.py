"""
Audio output resource for the playback coordinator.

`AudioOutput` is the single output device the coordinator commands.
`MpvAudioOutput` drives one long-lived mpv process over JSON IPC and turns
mpv property changes into playback events.
"""

import asyncio
import json
import os
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

from .state import EventKind, PlaybackEvent

EventListener = Callable[[PlaybackEvent], None]

# Seconds to wait for mpv to confirm a freshly loaded file
LOAD_TIMEOUT = 15.0

# Seconds to wait for a single IPC reply
COMMAND_TIMEOUT = 5.0

# Property observers registered with mpv (observer id, property name)
OBSERVED_PROPERTIES = ((1, "pause"), (2, "time-pos"), (3, "duration"))


class PlaybackStartError(Exception):
    """Raised when the output cannot start playback of its source."""


class MpvCommandError(Exception):
    """Raised when mpv answers an IPC command with an error."""


class AudioOutput(ABC):
    """A single audio output device emitting playback events."""

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []
        self.source: Optional[str] = None
        self.position: float = 0.0
        self.duration: float = 0.0

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: PlaybackEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"Playback event listener failed on {event.kind}")

    def can_play_type(self, mime_type: str) -> bool:
        """Report whether this output can decode the given MIME type."""
        return True

    @abstractmethod
    async def load(self, url: str) -> None: ...

    @abstractmethod
    async def play(self) -> None: ...

    @abstractmethod
    async def pause(self) -> None: ...

    @abstractmethod
    async def seek(self, seconds: float) -> None: ...

    @abstractmethod
    async def set_volume(self, percent: int) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...


def check_mpv_available() -> bool:
    """Check if MPV is available on the system."""
    return shutil.which("mpv") is not None


class MpvAudioOutput(AudioOutput):
    """Audio output backed by an idle mpv process."""

    SUPPORTED_MIME_PREFIXES = ("audio/",)

    def __init__(self, socket_path: Optional[str] = None, volume: int = 70) -> None:
        super().__init__()
        if socket_path:
            self._socket_path = Path(socket_path)
        else:
            self._socket_path = (
                Path(tempfile.gettempdir()) / f"kgic-mpv-{os.getpid()}.sock"
            )
        self._initial_volume = volume
        self._process: Optional[subprocess.Popen] = None
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._read_task: Optional[asyncio.Task] = None
        self._pending: dict[int, asyncio.Future] = {}
        self._request_id = 1
        self._idle = True
        self._load_result: Optional[asyncio.Future] = None

    def can_play_type(self, mime_type: str) -> bool:
        return mime_type.startswith(self.SUPPORTED_MIME_PREFIXES)

    async def start(self) -> None:
        """Start mpv (once) and attach the event reader."""
        if self._process and self._process.poll() is None and self._writer:
            return

        self._socket_path.unlink(missing_ok=True)
        logger.info(f"Starting MPV player with socket: {self._socket_path}")

        self._process = subprocess.Popen(
            [
                "mpv",
                "--idle=yes",
                "--no-video",
                "--no-terminal",
                "--load-scripts=no",
                f"--volume={self._initial_volume}",
                f"--input-ipc-server={self._socket_path}",
            ],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
        )

        for _ in range(100):
            if self._socket_path.exists():
                break
            await asyncio.sleep(0.05)
        else:
            self._process.kill()
            raise RuntimeError("mpv IPC socket did not appear")

        self._reader, self._writer = await asyncio.open_unix_connection(
            str(self._socket_path)
        )
        self._read_task = asyncio.create_task(self._read_loop(), name="kgic-mpv-events")
        for observer_id, name in OBSERVED_PROPERTIES:
            await self._command(["observe_property", observer_id, name])

    async def load(self, url: str) -> None:
        await self.start()
        previous = self._load_result
        if previous is not None and not previous.done():
            previous.set_result(f"Superseded by {url}")
        self._load_result = asyncio.get_running_loop().create_future()
        self.source = url
        self.position = 0.0
        self.duration = 0.0
        await self._command(["loadfile", url, "replace"])

    async def play(self) -> None:
        await self.start()
        if self._idle and self.source and self._load_result is None:
            # mpv unloads the file at end of stream; reload to replay
            await self.load(self.source)

        pending = self._load_result
        await self._command(["set_property", "pause", False])
        await self._await_load(pending)
        # mpv reports no pause change when already unpaused or still loading
        self._emit(PlaybackEvent(EventKind.PLAY))

    async def pause(self) -> None:
        if not self._writer:
            return
        await self._command(["set_property", "pause", True])

    async def seek(self, seconds: float) -> None:
        await self.start()
        await self._command(["set_property", "time-pos", max(0.0, seconds)])

    async def set_volume(self, percent: int) -> None:
        await self.start()
        await self._command(["set_property", "volume", max(0, min(100, percent))])

    async def close(self) -> None:
        if self._read_task:
            self._read_task.cancel()
            try:
                await self._read_task
            except asyncio.CancelledError:
                pass
            self._read_task = None
        if self._writer:
            self._writer.close()
            try:
                await self._writer.wait_closed()
            except OSError:
                pass
            self._reader = None
            self._writer = None
        if self._process and self._process.poll() is None:
            self._process.terminate()
            try:
                await asyncio.to_thread(self._process.wait, 3)
            except subprocess.TimeoutExpired:
                self._process.kill()
        self._process = None
        self._socket_path.unlink(missing_ok=True)

    async def _await_load(self, pending: Optional[asyncio.Future]) -> None:
        """Wait for mpv to confirm the load behind `pending`, if any."""
        if pending is None:
            return
        try:
            error = await asyncio.wait_for(pending, timeout=LOAD_TIMEOUT)
        except asyncio.TimeoutError as e:
            raise PlaybackStartError(f"Timed out loading {self.source}") from e
        finally:
            # a newer load owns the slot once it has replaced it
            if self._load_result is pending:
                self._load_result = None
        if error:
            raise PlaybackStartError(error)

    async def _command(self, command: list[Any]) -> Any:
        if not self._writer:
            raise RuntimeError("mpv IPC is not connected")

        request_id = self._request_id
        self._request_id += 1
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future

        payload = {"command": command, "request_id": request_id}
        self._writer.write((json.dumps(payload) + "\n").encode("utf-8"))
        await self._writer.drain()

        try:
            reply = await asyncio.wait_for(future, timeout=COMMAND_TIMEOUT)
        finally:
            self._pending.pop(request_id, None)

        if reply.get("error") != "success":
            raise MpvCommandError(f"{command[0]}: {reply.get('error')}")
        return reply.get("data")

    async def _read_loop(self) -> None:
        assert self._reader is not None
        while True:
            line = await self._reader.readline()
            if not line:
                logger.warning("mpv IPC closed")
                self._emit(PlaybackEvent(EventKind.ERROR, message="Audio output stopped"))
                return
            try:
                message = json.loads(line.decode("utf-8"))
            except json.JSONDecodeError:
                continue

            if "event" in message:
                self._handle_event(message)
                continue

            future = self._pending.get(message.get("request_id"))
            if future and not future.done():
                future.set_result(message)

    def _handle_event(self, message: dict[str, Any]) -> None:
        event = message["event"]

        if event == "property-change":
            name = message.get("name")
            data = message.get("data")
            if name == "pause" and data is not None:
                if self.source and not self._idle:
                    self._emit(
                        PlaybackEvent(EventKind.PAUSE if data else EventKind.PLAY)
                    )
            elif name == "time-pos" and data is not None:
                self.position = float(data)
                self._emit(PlaybackEvent(EventKind.TIME_UPDATE, position=self.position))
            elif name == "duration" and data is not None:
                self.duration = float(data)
                self._emit(
                    PlaybackEvent(EventKind.LOADED_METADATA, duration=self.duration)
                )

        elif event == "file-loaded":
            self._idle = False
            if self._load_result and not self._load_result.done():
                self._load_result.set_result(None)

        elif event == "end-file":
            reason = message.get("reason")
            if reason == "eof":
                self._idle = True
                self._emit(PlaybackEvent(EventKind.ENDED))
            elif reason == "error":
                self._idle = True
                error = message.get("file_error") or "unknown error"
                logger.warning(f"mpv failed to play {self.source}: {error}")
                if self._load_result and not self._load_result.done():
                    self._load_result.set_result(error)
                else:
                    self._emit(PlaybackEvent(EventKind.ERROR, message=str(error)))
