"""Filesystem helpers: title cleanup, per-job workspaces, atomic publishing."""

from __future__ import annotations

import errno
import logging
import os
import re
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from immerse.core.config import ImmerseConfig
from immerse.core.errors import OverwriteConflict

logger = logging.getLogger(__name__)

# Release noise stripped from file names before they become titles.
TITLE_NOISE_PATTERNS: tuple[str, ...] = (
    r"\[[^\]]*\]",  # [Group], [ABCD1234]
    r"\((?:\d{3,4}p|[^)]*(?:x26[45]|hevc|avc|aac|flac|bd|web)[^)]*)\)",  # (1080p), (BD x265)
    r"\b\d{3,4}p\b",  # 720p
    r"\b(?:x26[45]|h\.?26[45]|hevc|avc|10bit|8bit)\b",
    r"\b(?:web-?dl|webrip|bluray|bdrip|hdtv|dvdrip)\b",
    r"\b(?:aac|ac3|flac|opus|dts)(?:\d\.\d)?\b",
)

_NOISE_RES = [re.compile(p, re.IGNORECASE) for p in TITLE_NOISE_PATTERNS]


def clean_title(name: str) -> str:
    """Turn a release-style file name into a readable title.

    ``[Sub] Show_-_03_(1080p)`` becomes ``Show - 03``. Falls back to the
    input when cleanup would leave nothing.
    """
    title = name
    for pattern in _NOISE_RES:
        title = pattern.sub(" ", title)
    title = re.sub(r"[_.]+", " ", title)
    title = re.sub(r"\s+", " ", title)
    title = title.strip(" -")
    return title or name.strip()


def slugify(text: str) -> str:
    """Convert text to a filesystem-safe slug."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text[:80].strip("-")


def output_filename(video: Path, audio_format: str) -> str:
    """Name of the published audio file for a video."""
    return f"{clean_title(video.stem)}.{audio_format}"


@dataclass(frozen=True)
class Job:
    """One video's processing run and the scratch tree it owns."""

    video: Path
    root: Path
    config: ImmerseConfig

    @property
    def suffix(self) -> str:
        return f".{self.config.condense.audio_format}"

    @property
    def audio(self) -> Path:
        return self.root / f"audio{self.suffix}"

    @property
    def subtitles(self) -> Path:
        return self.root / "subtitles.srt"

    @property
    def chunks_dir(self) -> Path:
        return self.root / "chunks"

    @property
    def concat_list(self) -> Path:
        return self.root / "concat.txt"

    @property
    def condensed(self) -> Path:
        return self.root / f"condensed{self.suffix}"


@contextmanager
def job_workspace(video: Path, config: ImmerseConfig) -> Iterator[Job]:
    """Create a private scratch directory for one video and always remove it.

    The directory lives under ``config.scratch_dir`` (system temp dir when
    unset) and is deleted on every exit path: return, exception, or
    cancellation.
    """
    scratch = config.scratch_dir
    if scratch is not None:
        scratch.mkdir(parents=True, exist_ok=True)
    prefix = f"immerse-{slugify(video.stem) or 'job'}-"
    root = Path(tempfile.mkdtemp(prefix=prefix, dir=scratch))
    logger.debug("Workspace for %s: %s", video.name, root)
    try:
        yield Job(video=video, root=root, config=config)
    finally:
        shutil.rmtree(root, ignore_errors=True)


def publish(source: Path, dest: Path, overwrite: bool = True) -> Path:
    """Move a finished file into place atomically.

    Same filesystem: a single rename. Otherwise the file is copied next to
    the destination under a hidden name first, then renamed, so readers of
    the destination directory never see a partial file.

    With ``overwrite`` off the last step is a hard link instead of a rename.
    Linking fails when the destination already exists, so of two jobs
    publishing to one name only the first succeeds.

    Raises:
        OverwriteConflict: If ``overwrite`` is off and ``dest`` exists.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    place = os.replace if overwrite else _link_exclusive
    try:
        place(source, dest)
        return dest
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    fd, name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".part", dir=dest.parent)
    os.close(fd)
    staging = Path(name)
    try:
        shutil.copy2(source, staging)
        place(staging, dest)
    finally:
        staging.unlink(missing_ok=True)
    source.unlink(missing_ok=True)
    return dest


def _link_exclusive(source: Path, dest: Path) -> None:
    try:
        os.link(source, dest)
    except FileExistsError as e:
        raise OverwriteConflict(dest) from e
    os.unlink(source)
