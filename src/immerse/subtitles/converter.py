"""External subtitle files: discovery next to a video and conversion to SRT.

Sidecar subtitles come in whatever format the release shipped (SRT, ASS,
VTT). The interval computer only reads SRT timing lines, so everything is
normalized through pysubs2 first.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pysubs2

from immerse.core.languages import file_tags

SUBTITLE_SUFFIXES = (".srt", ".ass", ".ssa", ".vtt")


def convert_to_srt(source: Path, output: Path) -> Path:
    """Convert a subtitle file of any supported format to SRT.

    Comment events (ASS) are dropped; styling is discarded by the SRT writer.

    Raises:
        FileNotFoundError: If ``source`` does not exist.
        pysubs2.exceptions.Pysubs2Error: If the file cannot be parsed.
    """
    source = Path(source)
    if not source.is_file():
        raise FileNotFoundError(f"Subtitle file not found: {source}")

    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)

    subs = pysubs2.load(str(source))
    subs.events = [event for event in subs.events if not event.is_comment]
    subs.sort()
    subs.save(str(output), format_="srt")
    return output


def find_external_subtitles(video: Path, priority: Iterable[str] = ()) -> Path | None:
    """Find a subtitle file co-located with a video.

    Looks for ``<stem>.<lang>.<ext>`` for each priority language (any common
    tag form, e.g. ``jpn``/``ja``), then for a plain ``<stem>.<ext>``.

    Returns:
        The first match, or None.
    """
    video = Path(video)
    for language in priority:
        for tag in file_tags(language):
            for suffix in SUBTITLE_SUFFIXES:
                candidate = video.with_name(f"{video.stem}.{tag}{suffix}")
                if candidate.is_file():
                    return candidate

    for suffix in SUBTITLE_SUFFIXES:
        candidate = video.with_suffix(suffix)
        if candidate.is_file():
            return candidate
    return None
