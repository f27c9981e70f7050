"""Shared data models for immerse."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class StreamKind(str, Enum):
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    VIDEO = "video"
    OTHER = "other"

    @classmethod
    def from_codec_type(cls, codec_type: str | None) -> StreamKind:
        """Map an ffprobe ``codec_type`` to a StreamKind."""
        try:
            return cls(codec_type or "")
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Stream:
    """One demuxable elementary stream, as reported by the probe."""

    index: int
    kind: StreamKind
    language: str | None = None
    title: str | None = None
    codec: str | None = None


@dataclass(frozen=True)
class Cue:
    """Timing of one subtitle entry, in seconds."""

    start: float
    end: float


@dataclass(frozen=True)
class Interval:
    """A merged, padded span of continuous speech, in seconds."""

    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class Chunk:
    """A lossless audio segment cut for a single Interval."""

    path: Path
    start: float
    end: float


class CondenseStatus(str, Enum):
    CONDENSED = "condensed"  # speech-only output
    UNCONDENSED = "uncondensed"  # subtitle fallback, full audio
    RAW = "raw"  # condensing disabled
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class CondenseResult:
    """Outcome of one video's pipeline run."""

    video: Path
    status: CondenseStatus
    output: Path | None = None
    intervals: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (
            CondenseStatus.CONDENSED,
            CondenseStatus.UNCONDENSED,
            CondenseStatus.RAW,
        )


@dataclass
class VideoSource:
    """Resolved video source, either a local file or a download."""

    video_path: Path
    source_url: str | None = None
    title: str = ""
    duration: float | None = None
