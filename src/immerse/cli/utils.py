"""Shared CLI utilities."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.table import Table

from immerse.core.config import ImmerseConfig, load_config
from immerse.core.errors import ConfigError, ToolUnavailable
from immerse.core.events import PipelineEvent, Stage
from immerse.core.models import CondenseResult, CondenseStatus
from immerse.library.pod import VIDEO_EXTENSIONS, find_videos
from immerse.media.engine import FFmpegEngine
from immerse.utils.console import console


@dataclass(frozen=True)
class CliState:
    """Global flags, captured once by the app callback."""

    force: bool = False
    no_condense: bool = False
    verbose: bool = False
    config_file: Path | None = None


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.obj if isinstance(ctx.obj, CliState) else None
    if state is None and ctx.parent is not None:
        return get_state(ctx.parent)
    return state or CliState()


def config_from_state(state: CliState, **overrides: object) -> ImmerseConfig:
    """Build the immutable config for this invocation, or exit on error."""
    if state.force:
        overrides["overwrite"] = True
    if state.no_condense:
        overrides["condense_enabled"] = False
    try:
        return load_config(state.config_file, **overrides)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)


def make_engine(config: ImmerseConfig) -> FFmpegEngine:
    """Build the media engine for this invocation, or exit if ffmpeg is missing."""
    engine = FFmpegEngine(timeout=config.tool_timeout, cancel_event=threading.Event())
    try:
        engine.check()
    except ToolUnavailable as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return engine


def expand_inputs(inputs: list[str], recursive: bool = False) -> list[str]:
    """Expand globs, directories and URL/path list files into individual inputs."""
    expanded = []
    for inp in inputs:
        # URL, pass through
        if inp.startswith(("http://", "https://")):
            expanded.append(inp)
            continue

        path = Path(inp)

        # .txt file: one URL or path per line
        if path.suffix == ".txt" and path.is_file():
            for line in path.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    expanded.append(line)
            continue

        if path.is_dir():
            expanded.extend(str(v) for v in find_videos(path, recursive=recursive))
            continue

        # Try as glob pattern if it contains wildcards
        if any(c in inp for c in "*?["):
            matches = sorted(Path(".").glob(inp))
            if matches:
                expanded.extend(
                    str(m) for m in matches if m.is_file() and m.suffix.lower() in VIDEO_EXTENSIONS
                )
                continue

        # Regular file/path
        expanded.append(inp)

    return list(dict.fromkeys(expanded))


def print_event(event: PipelineEvent) -> None:
    if event.stage == Stage.FALLBACK:
        console.print(f"[yellow]{event.video.name}:[/yellow] {event.message}")
    elif event.stage == Stage.DONE:
        console.print(f"[green]{event.video.name}:[/green] {event.message}")
    else:
        console.print(f"[dim]{event.video.name}: {event.message}[/dim]")


_STATUS_STYLE = {
    CondenseStatus.CONDENSED: "green",
    CondenseStatus.UNCONDENSED: "yellow",
    CondenseStatus.RAW: "cyan",
    CondenseStatus.SKIPPED: "dim",
    CondenseStatus.FAILED: "red",
}


def print_result(result: CondenseResult) -> None:
    """Report a skipped or failed video as soon as it finishes.

    Successful videos are already announced by their DONE event.
    """
    if result.ok:
        return
    style = _STATUS_STYLE[result.status]
    console.print(f"[{style}]{result.status.value}:[/{style}] {result.video.name}: {result.error}")


def print_results(results: Sequence[CondenseResult]) -> int:
    """Print a summary table and return the number of failed items."""
    console.print()
    table = Table(title=f"Batch Results ({len(results)} files)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Input", max_width=50, no_wrap=True)
    table.add_column("Status")
    table.add_column("Output", max_width=50, no_wrap=True)

    failed = 0
    for i, result in enumerate(results, 1):
        style = _STATUS_STYLE[result.status]
        detail = str(result.output) if result.ok else (result.error or "")
        table.add_row(
            str(i), result.video.name, f"[{style}]{result.status.value}[/{style}]", detail
        )
        if result.status == CondenseStatus.FAILED:
            failed += 1

    console.print(table)
    succeeded = sum(1 for r in results if r.ok)
    console.print(f"\n[bold]{succeeded}/{len(results)} succeeded[/bold]")
    return failed
