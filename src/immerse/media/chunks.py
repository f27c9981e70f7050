"""Per-interval chunk cutting and ordered concatenation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from immerse.core.errors import InputError
from immerse.core.models import Chunk, Interval
from immerse.media.engine import FFmpegEngine

logger = logging.getLogger(__name__)


def chunk_name(start: float, suffix: str) -> str:
    """File name for a chunk, carrying its start time in milliseconds.

    Zero-padding keeps lexical and chronological order in agreement, but
    ordering always comes from ``Chunk.start``.
    """
    return f"{round(start * 1000):010d}{suffix}"


def extract_chunk(
    engine: FFmpegEngine,
    source: Path,
    out_dir: Path,
    interval: Interval,
) -> Chunk:
    """Cut one interval out of the full audio without re-encoding."""
    out_path = out_dir / chunk_name(interval.start, source.suffix)
    engine.cut(source, out_path, interval.start, interval.end)
    return Chunk(path=out_path, start=interval.start, end=interval.end)


def extract_chunks(
    engine: FFmpegEngine,
    source: Path,
    out_dir: Path,
    intervals: Iterable[Interval],
) -> list[Chunk]:
    out_dir.mkdir(parents=True, exist_ok=True)
    return [extract_chunk(engine, source, out_dir, interval) for interval in intervals]


def escape_concat_path(path: Path) -> str:
    """Quote a path for an ffmpeg concat list line."""
    return "'" + str(path.resolve()).replace("'", "'\\''") + "'"


def write_concat_list(chunks: Sequence[Chunk], list_path: Path) -> Path:
    lines = [f"file {escape_concat_path(chunk.path)}" for chunk in chunks]
    list_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return list_path


def concatenate(
    engine: FFmpegEngine,
    chunks: Iterable[Chunk],
    out_path: Path,
    title: str,
    list_path: Path,
) -> Path:
    """Join chunks into one file in ascending start-time order.

    Args:
        engine: Media engine.
        chunks: Chunks in any order.
        out_path: Final file.
        title: Title tag for the output; all other metadata is dropped.
        list_path: Where the concat list is written.

    Raises:
        InputError: If there are no chunks.
    """
    ordered = sorted(chunks, key=lambda chunk: chunk.start)
    if not ordered:
        raise InputError("Nothing to concatenate: no chunks")

    write_concat_list(ordered, list_path)
    logger.debug("Concatenating %d chunks into %s", len(ordered), out_path.name)
    return engine.concat(list_path, out_path, title)
