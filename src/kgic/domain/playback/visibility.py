"""
Mini-player visibility policy.

The persistent playback bar always shows on the podcasts listing, shows
anywhere while audio plays, and lingers for a grace window after a pause
or the end of a track.
"""

from typing import Optional

from .state import SessionState, now_ms

PODCASTS_ROUTE = "/podcasts"

GRACE_WINDOW_MS = 60_000

# Re-evaluation interval while counting down the grace window
TICK_INTERVAL_SECONDS = 1.0


def is_podcasts_route(route: Optional[str]) -> bool:
    return bool(route) and route.startswith(PODCASTS_ROUTE)


def should_show(
    route: Optional[str],
    state: SessionState,
    now: Optional[int] = None,
    grace_window_ms: int = GRACE_WINDOW_MS,
) -> bool:
    """Decide whether the mini-player renders on a route.

    Args:
        route: Current route path
        state: Current playback session state
        now: Evaluation time in epoch ms (default: wall clock)
        grace_window_ms: How long the bar lingers after a pause

    Returns:
        True if the mini-player should be visible
    """
    if is_podcasts_route(route) or state.is_playing:
        return True
    if not state.has_ever_played or state.last_paused_at_ms is None:
        return False
    now = now_ms() if now is None else now
    return now - state.last_paused_at_ms < grace_window_ms


def needs_countdown_tick(route: Optional[str], state: SessionState) -> bool:
    """True only while visibility depends on the grace window countdown."""
    if is_podcasts_route(route):
        return False
    return not state.is_playing and state.last_paused_at_ms is not None
