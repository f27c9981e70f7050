"""yt-dlp wrapper for fetching videos into the library's video folder."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

from rich.progress import BarColumn, Progress, TaskID, TextColumn, TimeRemainingColumn

from immerse.core.errors import InputError, ToolUnavailable
from immerse.core.languages import short_code
from immerse.core.models import VideoSource
from immerse.utils.console import console

DEFAULT_FORMAT = "bestvideo[height<=720]+bestaudio/best[height<=720]/best"
_MANIFEST_NAME = ".downloads.jsonl"


def _make_progress() -> Progress:
    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        TimeRemainingColumn(),
        console=console,
    )


def load_manifest(output_dir: Path) -> list[dict]:
    """Load the download manifest (JSONL), skipping corrupt lines."""
    manifest_path = output_dir / _MANIFEST_NAME
    if not manifest_path.is_file():
        return []
    entries = []
    for line in manifest_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    return entries


def _append_manifest(output_dir: Path, entry: dict) -> None:
    with open(output_dir / _MANIFEST_NAME, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False) + "\n")


def find_downloaded(url: str, output_dir: Path) -> VideoSource | None:
    """Return the earlier download of ``url`` if its file is still intact."""
    for entry in reversed(load_manifest(output_dir)):
        if entry.get("url") != url or not entry.get("path"):
            continue
        path = Path(entry["path"])
        if not path.is_file():
            continue
        expected_size = entry.get("size_bytes")
        if expected_size is not None and path.stat().st_size != expected_size:
            console.print(f"[yellow]Previous download changed on disk:[/yellow] {path}")
            continue
        return VideoSource(
            video_path=path,
            source_url=url,
            title=entry.get("title", path.stem),
            duration=entry.get("duration"),
        )
    return None


def subtitle_langs(languages: Sequence[str]) -> list[str]:
    """yt-dlp subtitle language list for container tags (``jpn`` -> ``ja``)."""
    langs: list[str] = []
    for tag in languages:
        code = short_code(tag) or tag
        if code not in langs:
            langs.append(code)
    return langs


def download(
    url: str,
    output_dir: Path,
    languages: Sequence[str] = (),
    fmt: str = DEFAULT_FORMAT,
) -> VideoSource:
    """Download a video from URL using yt-dlp.

    Subtitles in ``languages`` are saved next to the video as
    ``<name>.<lang>.srt`` (or .vtt), where sidecar discovery picks them up.

    Args:
        url: Video URL.
        output_dir: Directory to save the file (the library video folder).
        languages: Subtitle languages to fetch, in priority order.
        fmt: yt-dlp format string.

    Returns:
        VideoSource with local video path and metadata.

    Raises:
        ToolUnavailable: If yt-dlp is not installed.
        InputError: If the download fails or produces no file.
    """
    try:
        import yt_dlp
    except ImportError as e:
        raise ToolUnavailable("yt-dlp", "pip install yt-dlp") from e

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    previous = find_downloaded(url, output_dir)
    if previous is not None:
        console.print(f"[dim]Already downloaded:[/dim] {previous.video_path}")
        return previous

    progress = _make_progress()
    task_id: TaskID | None = None

    def _progress_hook(d: dict) -> None:
        nonlocal task_id
        if d["status"] == "downloading":
            total = d.get("total_bytes") or d.get("total_bytes_estimate") or 0
            if task_id is None and total > 0:
                task_id = progress.add_task("Downloading", total=total)
            if task_id is not None:
                progress.update(task_id, completed=d.get("downloaded_bytes", 0))
        elif d["status"] == "finished" and task_id is not None:
            progress.update(task_id, completed=progress.tasks[task_id].total)

    opts = {
        "format": fmt,
        "outtmpl": str(output_dir / "%(title)s [%(id)s].%(ext)s"),
        "writesubtitles": bool(languages),
        "subtitleslangs": subtitle_langs(languages),
        "subtitlesformat": "srt/vtt/best",
        "progress_hooks": [_progress_hook],
        "quiet": True,
        "no_warnings": True,
    }

    console.print(f"[bold]Downloading:[/bold] {url}")
    try:
        with yt_dlp.YoutubeDL(opts) as ydl:
            with progress:
                info = ydl.extract_info(url, download=True)
            video_path = Path(ydl.prepare_filename(info))
    except yt_dlp.utils.DownloadError as e:
        raise InputError(f"Download failed for {url}: {e}") from e

    if not video_path.is_file():
        # Merged formats can change the extension
        matches = sorted(video_path.parent.glob(f"{video_path.stem}.*"))
        matches = [m for m in matches if m.suffix not in (".srt", ".vtt", ".part")]
        if not matches:
            raise InputError(f"Download completed but no file found for {url}")
        video_path = matches[0]

    title = info.get("title", video_path.stem)
    duration = info.get("duration")
    console.print(f"[green]Downloaded:[/green] {video_path.name}")

    _append_manifest(
        output_dir,
        {
            "url": url,
            "title": title,
            "path": str(video_path),
            "size_bytes": video_path.stat().st_size,
            "duration": duration,
            "downloaded_at": datetime.now(timezone.utc).isoformat(),
        },
    )
    return VideoSource(video_path=video_path, source_url=url, title=title, duration=duration)
