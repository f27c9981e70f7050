"""Resolve input to a local video source — URL or local file."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from urllib.parse import urlparse

from immerse.core.errors import InputError
from immerse.core.models import VideoSource


def is_url(input_path: str) -> bool:
    """Check if the input looks like a URL."""
    parsed = urlparse(input_path)
    return parsed.scheme in ("http", "https")


def resolve(input_path: str, video_dir: Path, languages: Sequence[str] = ()) -> VideoSource:
    """Resolve input to a VideoSource.

    Local files are returned as-is. URLs are downloaded into ``video_dir``
    with yt-dlp, along with any subtitles available in ``languages``.

    Raises:
        InputError: If a local file does not exist.
    """
    if is_url(input_path):
        from immerse.downloader.ytdlp import download

        return download(input_path, output_dir=video_dir, languages=languages)

    path = Path(input_path)
    if not path.is_file():
        raise InputError(f"File not found: {input_path}")

    return VideoSource(video_path=path, title=path.stem)
