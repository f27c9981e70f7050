"""Subtitle acquisition with internal/external fallback.

Two sources can supply the cue file for a video: a subtitle stream embedded
in the container, or a sidecar file next to it. ``prefer_internal_subs``
decides which one is tried first; the other is the fallback. Either way the
result is an SRT file at ``output_path``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from pysubs2.exceptions import Pysubs2Error

from immerse.core.config import CondenseConfig
from immerse.core.errors import EngineFailure
from immerse.core.models import Stream, StreamKind
from immerse.media.engine import FFmpegEngine
from immerse.media.tracks import select_track, streams_of_kind
from immerse.subtitles.converter import convert_to_srt

logger = logging.getLogger(__name__)


def try_internal(
    engine: FFmpegEngine,
    video: Path,
    output_path: Path,
    streams: Sequence[Stream],
    priority: Sequence[str],
) -> bool:
    """Extract the best-matching embedded subtitle stream to ``output_path``."""
    if not streams_of_kind(streams, StreamKind.SUBTITLE):
        logger.debug("No internal subtitle streams in %s", video.name)
        return False

    index = select_track(streams, StreamKind.SUBTITLE, priority)
    if index is None:
        logger.debug("No subtitle stream matches %s, using the first one", list(priority))
    try:
        engine.extract_subtitles(video, output_path, index)
    except EngineFailure as e:
        logger.debug("Internal subtitle extraction failed: %s", e)
        output_path.unlink(missing_ok=True)
        return False
    return True


def try_external(external: Path | None, output_path: Path) -> bool:
    """Convert a sidecar subtitle file to SRT at ``output_path``."""
    if external is None or not external.is_file():
        return False
    try:
        convert_to_srt(external, output_path)
    except (Pysubs2Error, ValueError) as e:
        logger.debug("Could not convert %s: %s", external.name, e)
        output_path.unlink(missing_ok=True)
        return False
    return True


def acquire_subtitles(
    engine: FFmpegEngine,
    video: Path,
    external: Path | None,
    output_path: Path,
    config: CondenseConfig,
    streams: Sequence[Stream] | None = None,
) -> bool:
    """Obtain a cue file for ``video`` at ``output_path``.

    Args:
        engine: Media engine used for probing and internal extraction.
        video: Source video.
        external: Sidecar subtitle candidate, or None.
        output_path: Where the SRT file is written.
        config: Supplies the language priority and source preference.
        streams: Probe result for ``video``; probed here when omitted.

    Returns:
        True when a cue file was produced, False when both sources failed.
    """
    if streams is None:
        streams = engine.probe_streams(video)

    def internal_step() -> bool:
        return try_internal(engine, video, output_path, streams, config.language_priority)

    def external_step() -> bool:
        return try_external(external, output_path)

    steps: list[tuple[str, Callable[[], bool]]]
    if config.prefer_internal_subs:
        if output_path.is_file():
            # Re-run over an existing extraction; only the internal-first
            # order may reuse it.
            logger.debug("Reusing existing subtitles at %s", output_path)
            return True
        steps = [("internal", internal_step), ("external", external_step)]
    else:
        steps = [("external", external_step), ("internal", internal_step)]

    for name, step in steps:
        if step():
            logger.debug("Subtitles for %s from %s source", video.name, name)
            return True
    return False
