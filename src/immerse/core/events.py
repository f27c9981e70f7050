"""Pipeline progress events.

The condensation pipeline reports each state transition through an optional
callback, so the CLI (or a test) can follow a run without the pipeline
knowing how progress is displayed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable


class Stage(str, Enum):
    """States of one video's condensation run, in order."""

    START = "start"
    AUDIO_EXTRACTED = "audio_extracted"
    SUBTITLES_RESOLVED = "subtitles_resolved"
    INTERVALS_COMPUTED = "intervals_computed"
    CHUNKS_EXTRACTED = "chunks_extracted"
    CONCATENATED = "concatenated"
    FALLBACK = "fallback"
    DONE = "done"


@dataclass
class PipelineEvent:
    """A transition reported during pipeline execution.

    Attributes:
        video: The video being processed.
        stage: State just entered.
        message: Human-readable status message.
        data: Optional payload (interval count, output path, ...).
    """

    video: Path
    stage: Stage
    message: str
    data: dict | None = field(default=None)


EventCallback = Callable[[PipelineEvent], None]
