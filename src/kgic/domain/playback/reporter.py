"""
Play-count reporting.

Plays are reported to the server fire-and-forget; a local optimistic
counter keeps the displayed count current without waiting for the server.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger

from .state import TrackId

Sender = Callable[[TrackId], Awaitable[None]]


class PlayCountReporter:
    def __init__(self, sender: Sender) -> None:
        self._sender = sender
        self._last_reported: Optional[TrackId] = None
        self._counts: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()

    def seed(self, track_id: TrackId, count: int) -> None:
        """Set the server-known play count for a track."""
        self._counts[str(track_id)] = max(0, int(count))

    def count_for(self, track_id: TrackId) -> int:
        return self._counts.get(str(track_id), 0)

    def report_play(self, track_id: TrackId) -> bool:
        """Report that a track became current.

        Detached from the caller: returns immediately and never raises.

        Returns:
            True if an increment was sent, False if it was a repeat
        """
        if self._last_reported is not None and str(self._last_reported) == str(track_id):
            return False
        self._last_reported = track_id
        self._counts[str(track_id)] = self.count_for(track_id) + 1

        try:
            task = asyncio.get_running_loop().create_task(self._send(track_id))
        except RuntimeError:
            logger.debug(f"No event loop; play of {track_id} not reported")
            return False
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def drain(self) -> None:
        """Wait for in-flight reports (used at shutdown)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _send(self, track_id: TrackId) -> None:
        try:
            await self._sender(track_id)
        except Exception as e:
            logger.debug(f"Play count report for {track_id} dropped: {e}")
