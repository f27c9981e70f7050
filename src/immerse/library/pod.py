"""Immersion pod layout: current/ and week-bucketed archive/ folders.

    <music_dir>/<pod_subdir>/
        current/                 freshly condensed audio, played by MPD
        archive/2026-42/         rotated-out audio, by ISO year and week
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta
from pathlib import Path

from immerse.core.config import ImmerseConfig
from immerse.utils.paths import output_filename

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = (".mp4", ".mkv", ".webm", ".avi", ".mov", ".ts", ".flv", ".m4v")


def current_dir(config: ImmerseConfig) -> Path:
    return config.library.pod_dir / "current"


def archive_root(config: ImmerseConfig) -> Path:
    return config.library.pod_dir / "archive"


def ensure_layout(config: ImmerseConfig) -> None:
    """Create the pod directories if they are missing."""
    current_dir(config).mkdir(parents=True, exist_ok=True)
    archive_root(config).mkdir(parents=True, exist_ok=True)


def archive_bucket(when: datetime) -> str:
    """Archive folder name for a timestamp: ``<iso-year>-<iso-week>``."""
    year, week, _ = when.isocalendar()
    return f"{year}-{week:02d}"


def stale_files(config: ImmerseConfig, now: datetime | None = None) -> list[Path]:
    """Files in current/ older than ``staleness_days``, oldest first."""
    folder = current_dir(config)
    if not folder.is_dir():
        return []
    now = now or datetime.now()
    cutoff = (now - timedelta(days=config.library.staleness_days)).timestamp()
    files = [
        p
        for p in folder.iterdir()
        if p.is_file() and not p.name.startswith(".") and p.stat().st_mtime < cutoff
    ]
    return sorted(files, key=lambda p: p.stat().st_mtime)


def archive_stale(config: ImmerseConfig, now: datetime | None = None) -> list[Path]:
    """Move stale files from current/ into their archive week folder.

    Files are bucketed by their own modification time. Moves are renames
    within the pod, so they are atomic. An archived file with the same name
    is replaced.

    Returns:
        The new paths of the archived files.
    """
    moved = []
    for path in stale_files(config, now):
        modified = datetime.fromtimestamp(path.stat().st_mtime)
        bucket = archive_root(config) / archive_bucket(modified)
        bucket.mkdir(parents=True, exist_ok=True)
        dest = bucket / path.name
        os.replace(path, dest)
        logger.debug("Archived %s -> %s", path.name, bucket.name)
        moved.append(dest)
    return moved


def is_in_pod(config: ImmerseConfig, filename: str) -> bool:
    """Whether a file of this name is in current/ or any archive folder."""
    if (current_dir(config) / filename).exists():
        return True
    root = archive_root(config)
    return root.is_dir() and any((bucket / filename).exists() for bucket in root.iterdir())


def find_videos(folder: Path, recursive: bool = False) -> list[Path]:
    """Video files in a folder, sorted by path."""
    pattern = "**/*" if recursive else "*"
    return sorted(
        p
        for p in Path(folder).glob(pattern)
        if p.is_file() and p.suffix.lower() in VIDEO_EXTENSIONS and not p.name.startswith(".")
    )


def pending_videos(config: ImmerseConfig) -> list[Path]:
    """Videos in ``video_dir`` whose audio is not yet anywhere in the pod."""
    video_dir = config.library.video_dir
    if not video_dir.is_dir():
        return []
    fmt = config.condense.audio_format
    return [v for v in find_videos(video_dir) if not is_in_pod(config, output_filename(v, fmt))]
