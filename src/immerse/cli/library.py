"""Pod maintenance commands — archive, reshuffle, rotate."""

from __future__ import annotations

import typer

from immerse.cli.utils import (
    config_from_state,
    get_state,
    make_engine,
    print_event,
    print_result,
    print_results,
)
from immerse.core.batch import run_batch
from immerse.core.config import ImmerseConfig
from immerse.core.errors import ImmerseError
from immerse.library.pod import archive_stale, ensure_layout, pending_videos
from immerse.player.mpd import reshuffle as reshuffle_playlist
from immerse.utils.console import console


def _archive(config: ImmerseConfig) -> None:
    moved = archive_stale(config)
    if not moved:
        console.print("[dim]Nothing to archive.[/dim]")
        return
    for path in moved:
        console.print(f"[green]Archived:[/green] {path.parent.name}/{path.name}")


def _reshuffle(config: ImmerseConfig) -> None:
    try:
        reshuffle_playlist(config)
    except ImmerseError as e:
        console.print(f"[red]Reshuffle failed:[/red] {e}")
        raise typer.Exit(1)


def archive(ctx: typer.Context) -> None:
    """Move items older than the staleness threshold out of current/."""
    config = config_from_state(get_state(ctx))
    ensure_layout(config)
    _archive(config)


def reshuffle(ctx: typer.Context) -> None:
    """Rebuild the MPD playlist from current/ and shuffle it."""
    _reshuffle(config_from_state(get_state(ctx)))


def rotate(ctx: typer.Context) -> None:
    """Archive stale items, condense new library videos, then reshuffle."""
    config = config_from_state(get_state(ctx))
    ensure_layout(config)
    _archive(config)

    videos = pending_videos(config)
    failed = 0
    if videos:
        console.print(f"[bold]Condensing {len(videos)} new videos...[/bold]\n")
        results = run_batch(
            videos, config, make_engine(config), on_event=print_event, on_result=print_result
        )
        failed = print_results(results)
    else:
        console.print(f"[dim]No new videos in {config.library.video_dir}.[/dim]")

    _reshuffle(config)
    if failed:
        raise typer.Exit(1)
