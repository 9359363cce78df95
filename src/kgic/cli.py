"""
KGIC CLI - Entry point

Runs the web API, lists published podcast episodes, and plays an episode
through the global playback coordinator with a one-line mini-player.
"""

import argparse
import asyncio
import sys
from typing import Optional

from loguru import logger
from rich.live import Live
from rich.table import Table
from rich.text import Text

from kgic.core.config import Config, load_config
from kgic.core.console import get_console, print_error, print_notice
from kgic.core.output import setup_from_config
from kgic.domain.content import ContentStore, ContentStoreError, Podcast
from kgic.domain.content.listings import (
    format_date,
    format_duration,
    list_published_podcasts,
)
from kgic.domain.playback import (
    SessionState,
    check_mpv_available,
    get_coordinator,
    shutdown_coordinator,
)
from kgic.domain.playback.visibility import (
    TICK_INTERVAL_SECONDS,
    needs_countdown_tick,
    should_show,
)

# The terminal is never the podcasts listing
CLI_ROUTE = "/"

BAR_WIDTH = 30


def render_mini_player(state: SessionState, bar_width: int = BAR_WIDTH) -> Text:
    """Render the session as a single mini-player line."""
    line = Text()
    track = state.current_track
    if track is None:
        return line

    line.append("▶ " if state.is_playing else "⏸ ", style="player.state")
    line.append(track.title, style="player.title")
    line.append(f" · {track.artist} ", style="player.artist")

    filled = int(bar_width * state.progress_percent / 100)
    line.append("█" * filled, style="player.bar")
    line.append("░" * (bar_width - filled), style="player.bar.empty")

    position = format_duration(state.position_seconds) or "0:00"
    duration = format_duration(state.duration_seconds) or "--:--"
    line.append(f" {position} / {duration}", style="player.time")
    line.append(f"  vol {state.volume_percent}%", style="player.volume")

    if state.advisory:
        line.append(f"  {state.advisory}", style="advisory")
    return line


def redraw_timeout(state: SessionState) -> Optional[float]:
    """Seconds until the mini-player must be re-checked without a state change.

    None means only a new session state can change what is shown.
    """
    if needs_countdown_tick(CLI_ROUTE, state):
        return TICK_INTERVAL_SECONDS
    return None


def _content_store(config: Config) -> Optional[ContentStore]:
    if not config.supabase.is_configured:
        print_error("Supabase is not configured (set SUPABASE_URL and SUPABASE_ANON_KEY)")
        return None
    return ContentStore.from_config(config.supabase)


def run_serve(config: Config, host: str, port: int, reload: bool = False) -> int:
    import uvicorn

    logger.info(f"Starting web API on {host}:{port}")
    uvicorn.run("web.backend.main:app", host=host, port=port, reload=reload, app_dir=".")
    return 0


def run_podcasts(config: Config) -> int:
    """Print published episodes, newest first."""
    store = _content_store(config)
    if store is None:
        return 1

    try:
        podcasts = list_published_podcasts(store)
    except ContentStoreError as e:
        print_error(f"Could not load podcasts: {e.message}")
        return 1

    if not podcasts:
        print_notice("No published podcasts")
        return 0

    table = Table(title="Podcasts")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Artist")
    table.add_column("Duration", justify="right")
    table.add_column("Published")
    table.add_column("Plays", justify="right")
    for podcast in podcasts:
        table.add_row(
            str(podcast.id),
            podcast.title,
            podcast.artist or "",
            format_duration(podcast.duration_seconds),
            format_date(podcast.published_at),
            str(podcast.play_count),
        )
    get_console().print(table)
    return 0


async def _play(config: Config, podcast: Podcast) -> int:
    coordinator = get_coordinator(config)
    if coordinator.reporter is not None and podcast.id is not None:
        coordinator.reporter.seed(podcast.id, podcast.play_count)

    try:
        started = await coordinator.play(podcast.to_track())
        if not started:
            print_notice(coordinator.state.advisory or "Playback failed")
            return 1

        grace_window_ms = config.player.grace_window_seconds * 1000
        changed = asyncio.Event()
        coordinator.subscribe(lambda _state: changed.set())

        with Live(
            render_mini_player(coordinator.state),
            console=get_console(),
            refresh_per_second=4,
            transient=True,
        ) as live:
            while should_show(
                CLI_ROUTE, coordinator.state, grace_window_ms=grace_window_ms
            ):
                changed.clear()
                live.update(render_mini_player(coordinator.state))
                try:
                    await asyncio.wait_for(
                        changed.wait(), redraw_timeout(coordinator.state)
                    )
                except asyncio.TimeoutError:
                    pass
        return 0
    finally:
        await shutdown_coordinator()


def run_play(config: Config, podcast_id: str) -> int:
    """Play one episode until the mini-player would hide."""
    if not check_mpv_available():
        print_error("mpv is not installed or not on PATH")
        return 1

    store = _content_store(config)
    if store is None:
        return 1

    try:
        podcast = store.get_record(Podcast, podcast_id)
    except ContentStoreError as e:
        print_error(f"Could not load podcast: {e.message}")
        return 1
    if podcast is None:
        print_error(f"Podcast {podcast_id} not found")
        return 1

    try:
        return asyncio.run(_play(config, podcast))
    except KeyboardInterrupt:
        return 130


def main() -> None:
    """Main entry point for the kgic command."""
    parser = argparse.ArgumentParser(
        description="KGIC - church site API and podcast player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the web API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes"
    )

    subparsers.add_parser("podcasts", help="List published podcast episodes")

    play_parser = subparsers.add_parser("play", help="Play a podcast episode")
    play_parser.add_argument("id", help="Podcast id")

    args = parser.parse_args()

    config = load_config()
    setup_from_config(config.logging)

    if args.subcommand == "serve":
        sys.exit(run_serve(config, args.host, args.port, reload=args.reload))
    elif args.subcommand == "podcasts":
        sys.exit(run_podcasts(config))
    elif args.subcommand == "play":
        sys.exit(run_play(config, args.id))

    parser.print_help()
    sys.exit(1)


if __name__ == "__main__":
    main()
