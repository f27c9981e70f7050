"""immerse probe command — list a video's audio or subtitle streams."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from immerse.cli.utils import config_from_state, get_state, make_engine
from immerse.core.errors import ImmerseError
from immerse.core.languages import language_name
from immerse.core.models import StreamKind
from immerse.media.tracks import select_track, streams_of_kind
from immerse.utils.console import console


class ProbeKind(str, Enum):
    a = "a"
    s = "s"

    @property
    def stream_kind(self) -> StreamKind:
        return StreamKind.AUDIO if self is ProbeKind.a else StreamKind.SUBTITLE


def probe(
    ctx: typer.Context,
    kind: Annotated[ProbeKind, typer.Argument(help="a = audio streams, s = subtitle streams.")],
    video: Annotated[Path, typer.Argument(help="Video file to inspect.")],
) -> None:
    """Show the streams of one kind and which one would be selected."""
    config = config_from_state(get_state(ctx))
    engine = make_engine(config)

    if not video.is_file():
        console.print(f"[red]File not found: {video}[/red]")
        raise typer.Exit(1)

    try:
        streams = engine.probe_streams(video)
    except ImmerseError as e:
        console.print(f"[red]Probe failed:[/red] {e}")
        raise typer.Exit(1)

    stream_kind = kind.stream_kind
    selected = select_track(streams, stream_kind, config.condense.language_priority)

    table = Table(title=f"{stream_kind.value.capitalize()} streams — {video.name}")
    table.add_column("Index", justify="right", style="cyan")
    table.add_column("Language")
    table.add_column("Title")
    table.add_column("Codec", style="dim")
    table.add_column("", style="green")

    for stream in streams_of_kind(streams, stream_kind):
        language = stream.language or "-"
        if stream.language:
            language = f"{stream.language} ({language_name(stream.language)})"
        marker = "selected" if stream.index == selected else ""
        table.add_row(str(stream.index), language, stream.title or "", stream.codec or "", marker)

    console.print(table)
    if selected is None:
        console.print("[dim]No stream matches the language priority; the first one is used.[/dim]")
