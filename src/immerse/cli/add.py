"""immerse add command — condense videos (files, folders, URLs) into the pod."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from immerse.cli.utils import (
    config_from_state,
    expand_inputs,
    get_state,
    make_engine,
    print_event,
    print_result,
    print_results,
)
from immerse.core.batch import run_batch
from immerse.core.errors import ImmerseError
from immerse.downloader.resolver import resolve
from immerse.library.pod import ensure_layout
from immerse.player.mpd import reshuffle as reshuffle_playlist
from immerse.utils.console import console


def add(
    ctx: typer.Context,
    inputs: Annotated[
        list[str],
        typer.Argument(help="Video files, folders, glob patterns, URLs, or .txt lists."),
    ],
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-r", help="Search folders recursively."),
    ] = False,
    shuffle: Annotated[
        bool,
        typer.Option("--shuffle", "-s", help="Reshuffle the playlist afterwards."),
    ] = False,
) -> None:
    """Condense videos into the pod's current/ folder.

    URLs are downloaded into the library video folder first. Videos are
    processed in parallel, up to the configured worker count.
    """
    config = config_from_state(get_state(ctx))
    engine = make_engine(config)

    expanded = expand_inputs(inputs, recursive=recursive)
    if not expanded:
        console.print("[red]No inputs resolved. Check your paths or patterns.[/red]")
        raise typer.Exit(1)

    videos: list[Path] = []
    for item in expanded:
        try:
            source = resolve(item, config.library.video_dir, config.condense.language_priority)
            videos.append(source.video_path)
        except ImmerseError as e:
            console.print(f"[red]Skipped:[/red] {e}")

    if not videos:
        raise typer.Exit(1)

    ensure_layout(config)
    console.print(f"[bold]Condensing {len(videos)} videos ({config.workers} workers)...[/bold]\n")
    results = run_batch(videos, config, engine, on_event=print_event, on_result=print_result)
    failed = print_results(results)

    if shuffle:
        try:
            reshuffle_playlist(config)
        except ImmerseError as e:
            console.print(f"[red]Reshuffle failed:[/red] {e}")
            raise typer.Exit(1)

    if failed:
        raise typer.Exit(1)
