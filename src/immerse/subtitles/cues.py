"""Subtitle cue timing and speech-interval computation.

Only the timing lines of an SRT file matter here:

    00:01:02,500 --> 00:01:04,000

Everything else (indices, text, blank lines) is ignored. The cues are then
swept left to right, padded, and merged into the intervals that drive chunk
extraction.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from immerse.core.models import Cue, Interval

MAX_CUE_SECONDS = 30.0

_TIMESTAMP = r"(\d{1,2}):(\d{2}):(\d{2})[,.](\d{3})"
_TIMING_RE = re.compile(rf"^\s*{_TIMESTAMP}\s*-->\s*{_TIMESTAMP}")


def _to_seconds(h: str, m: str, s: str, ms: str) -> float:
    return int(h) * 3600 + int(m) * 60 + int(s) + int(ms) / 1000.0


def parse_cue_line(line: str) -> Cue | None:
    """Parse one timing line, or return None for anything else."""
    match = _TIMING_RE.match(line)
    if match is None:
        return None
    groups = match.groups()
    start = _to_seconds(*groups[:4])
    end = _to_seconds(*groups[4:])
    if start > end:
        return None
    return Cue(start=start, end=end)


def parse_cues(lines: Iterable[str]) -> list[Cue]:
    """Parse every timing line, in file order."""
    cues = []
    for line in lines:
        cue = parse_cue_line(line)
        if cue is not None:
            cues.append(cue)
    return cues


def load_cues(path: Path) -> list[Cue]:
    """Read cues from an SRT file."""
    text = Path(path).read_text(encoding="utf-8-sig", errors="replace")
    return parse_cues(text.splitlines())


def compute_intervals(
    cues: Iterable[Cue],
    padding: float,
    max_cue_seconds: float = MAX_CUE_SECONDS,
) -> list[Interval]:
    """Merge padded cues into sorted, non-overlapping speech intervals.

    Cues that are empty, inverted, or longer than ``max_cue_seconds`` are
    dropped. Each remaining cue is widened by ``padding`` on both sides
    (never below zero) and merged into the running interval when the
    overlap, normalized by the cue's padded length, is positive. The last
    interval gives its trailing padding back so it does not run past the
    end of the media.

    Args:
        cues: Cues in file order.
        padding: Seconds added before and after each cue.
        max_cue_seconds: Longest cue considered plausible.

    Returns:
        Intervals ordered by start. Empty when no cue survives.
    """
    padded = []
    for cue in cues:
        length = cue.end - cue.start
        if length <= 0 or length > max_cue_seconds:
            continue
        padded.append((max(cue.start - padding, 0.0), cue.end + padding))

    # Sweep in start order rather than file order; ties keep file order.
    padded.sort(key=lambda span: span[0])

    intervals: list[Interval] = []
    if not padded:
        return intervals

    cur_start, cur_end = padded[0]
    for start, end in padded[1:]:
        overlap = (min(cur_end, end) - max(cur_start, start)) / (end - start)
        if overlap > 0:
            cur_start = min(cur_start, start)
            cur_end = max(cur_end, end)
        else:
            intervals.append(Interval(cur_start, cur_end))
            cur_start, cur_end = start, end

    intervals.append(Interval(cur_start, max(cur_end - padding, cur_start)))
    return intervals


def total_duration(intervals: Iterable[Interval]) -> float:
    return sum(i.duration for i in intervals)
