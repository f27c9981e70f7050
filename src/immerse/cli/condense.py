"""immerse condense command — condense a single video."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from immerse.cli.utils import config_from_state, get_state, make_engine, print_event
from immerse.core.errors import ImmerseError, OverwriteConflict
from immerse.core.pipeline import condense_video
from immerse.utils.console import console


def condense(
    ctx: typer.Context,
    input_path: Annotated[
        Path,
        typer.Option("--input", "-i", help="Video file to condense."),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file. Default: <pod>/current/<title>.<fmt>"),
    ] = None,
    subtitles: Annotated[
        Optional[Path],
        typer.Option("--subs", "-s", help="External subtitle file to use."),
    ] = None,
) -> None:
    """Condense one video to its speech-bearing audio."""
    config = config_from_state(get_state(ctx))
    engine = make_engine(config)

    try:
        result = condense_video(
            input_path,
            config,
            engine,
            output=output,
            subtitles=subtitles,
            on_event=print_event,
        )
    except OverwriteConflict as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(1)
    except ImmerseError as e:
        console.print(f"[red]Failed:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Saved:[/green] {result.output}")
