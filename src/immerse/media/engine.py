"""Media engine: the ffmpeg/ffprobe adapter.

The rest of immerse depends only on the operations defined here: stream
probing, single-stream extraction, lossless time-range cutting, and
concat-demuxer joining. Every invocation is blocking, honors an optional
per-call timeout, and watches an optional cancel event; either one kills the
child process before raising.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import threading
import time
from pathlib import Path

from immerse.core.errors import EngineFailure, EngineTimeout, JobCancelled, ToolUnavailable
from immerse.core.models import Stream, StreamKind

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.25
_INSTALL_HINT = "brew install ffmpeg  (or: apt install ffmpeg)"


def check_ffmpeg() -> bool:
    """Check if ffmpeg and ffprobe are available on the system."""
    return shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None


def _format_seconds(value: float) -> str:
    return f"{max(value, 0.0):.3f}"


class FFmpegEngine:
    """Runs ffmpeg/ffprobe for the condensation pipeline.

    Args:
        ffmpeg: ffmpeg executable name or path.
        ffprobe: ffprobe executable name or path.
        timeout: Per-invocation limit in seconds, or None for no limit.
        cancel_event: When set, the running process is killed and
            JobCancelled is raised.
    """

    def __init__(
        self,
        ffmpeg: str = "ffmpeg",
        ffprobe: str = "ffprobe",
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe
        self.timeout = timeout
        self.cancel_event = cancel_event

    def check(self) -> None:
        """Raise ToolUnavailable unless both tools are on PATH."""
        for tool in (self.ffmpeg, self.ffprobe):
            if shutil.which(tool) is None:
                raise ToolUnavailable(tool, _INSTALL_HINT)

    # -- process handling -------------------------------------------------

    def run(self, cmd: list[str]) -> str:
        """Run a command to completion and return its stdout.

        Raises:
            ToolUnavailable: If the executable does not exist.
            EngineFailure: If the process exits non-zero.
            EngineTimeout: If the process outlives ``timeout``.
            JobCancelled: If ``cancel_event`` is set while it runs.
        """
        logger.debug("Running: %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ToolUnavailable(cmd[0], _INSTALL_HINT) from e

        with proc:
            try:
                stdout, stderr = self._communicate(proc, cmd)
            except BaseException:
                proc.kill()
                raise

        if proc.returncode != 0:
            raise EngineFailure(cmd, proc.returncode, stderr.decode(errors="replace"))
        return stdout.decode(errors="replace")

    def _communicate(self, proc: subprocess.Popen, cmd: list[str]) -> tuple[bytes, bytes]:
        deadline = time.monotonic() + self.timeout if self.timeout else None
        while True:
            try:
                return proc.communicate(timeout=_POLL_SECONDS)
            except subprocess.TimeoutExpired:
                if self.cancel_event is not None and self.cancel_event.is_set():
                    raise JobCancelled(f"Cancelled: {cmd[0]}")
                if deadline is not None and time.monotonic() > deadline:
                    raise EngineTimeout(cmd, self.timeout)

    def _ffmpeg(self, *args: str) -> list[str]:
        return [self.ffmpeg, "-hide_banner", "-nostdin", "-loglevel", "error", "-y", *args]

    # -- operations -------------------------------------------------------

    def probe_streams(self, video: Path) -> list[Stream]:
        """Enumerate the streams of a container, in probe order."""
        cmd = [
            self.ffprobe,
            "-v",
            "error",
            "-show_streams",
            "-of",
            "json",
            str(video),
        ]
        try:
            data = json.loads(self.run(cmd) or "{}")
        except json.JSONDecodeError as e:
            raise EngineFailure(cmd, 0, f"Unreadable ffprobe output: {e}") from e
        return [_parse_stream(s) for s in data.get("streams", [])]

    def extract_audio(
        self,
        video: Path,
        output: Path,
        stream_index: int | None,
        codec: str,
        bitrate: str,
    ) -> Path:
        """Extract one audio stream, re-encoded to ``codec`` at ``bitrate``.

        With no index, the first audio stream is used.
        """
        output.parent.mkdir(parents=True, exist_ok=True)
        stream_map = f"0:{stream_index}" if stream_index is not None else "0:a:0"
        self.run(
            self._ffmpeg(
                "-i",
                str(video),
                "-map",
                stream_map,
                "-vn",  # no video, no cover art
                "-c:a",
                codec,
                "-b:a",
                bitrate,
                "-map_metadata",
                "-1",
                str(output),
            )
        )
        return output

    def extract_subtitles(self, video: Path, output: Path, stream_index: int | None) -> Path:
        """Extract one subtitle stream to SRT.

        Bitmap subtitle codecs cannot be converted and make ffmpeg fail.
        """
        output.parent.mkdir(parents=True, exist_ok=True)
        stream_map = f"0:{stream_index}" if stream_index is not None else "0:s:0"
        self.run(
            self._ffmpeg(
                "-i",
                str(video),
                "-map",
                stream_map,
                "-c:s",
                "srt",
                "-f",
                "srt",
                str(output),
            )
        )
        return output

    def cut(self, source: Path, output: Path, start: float, end: float) -> Path:
        """Copy ``[start, end]`` of ``source`` into ``output`` without re-encoding."""
        self.run(
            self._ffmpeg(
                "-ss",
                _format_seconds(start),
                "-i",
                str(source),
                "-t",
                _format_seconds(end - start),
                "-c",
                "copy",
                "-map_metadata",
                "-1",
                str(output),
            )
        )
        return output

    def concat(self, list_path: Path, output: Path, title: str) -> Path:
        """Join the files named in a concat list, tagging only the title."""
        output.parent.mkdir(parents=True, exist_ok=True)
        self.run(
            self._ffmpeg(
                "-f",
                "concat",
                "-safe",
                "0",
                "-i",
                str(list_path),
                "-map_metadata",
                "-1",
                "-metadata",
                f"title={title}",
                "-c",
                "copy",
                str(output),
            )
        )
        return output


def _parse_stream(raw: dict) -> Stream:
    tags = {str(k).lower(): v for k, v in (raw.get("tags") or {}).items()}
    language = (tags.get("language") or "").lower() or None
    if language == "und":
        language = None
    return Stream(
        index=int(raw.get("index", 0)),
        kind=StreamKind.from_codec_type(raw.get("codec_type")),
        language=language,
        title=tags.get("title"),
        codec=raw.get("codec_name"),
    )
