"""Shared test fixtures."""

import os
from pathlib import Path

import pytest

import immerse.core.config as config_module
from immerse.core.config import CondenseConfig, ImmerseConfig, LibraryConfig
from immerse.core.errors import EngineFailure
from immerse.core.models import Stream, StreamKind

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FULL_AUDIO = b"FULL-AUDIO"

DEFAULT_STREAMS = [
    Stream(0, StreamKind.VIDEO, codec="h264"),
    Stream(1, StreamKind.AUDIO, language="eng", codec="aac"),
    Stream(2, StreamKind.AUDIO, language="jpn", codec="aac"),
    Stream(3, StreamKind.SUBTITLE, language="eng", codec="subrip"),
    Stream(4, StreamKind.SUBTITLE, language="jpn", codec="subrip"),
]

TWO_CUES_SRT = """1
00:00:01,000 --> 00:00:02,000
一

2
00:00:05,000 --> 00:00:06,500
二
"""


class FakeEngine:
    """Stands in for FFmpegEngine, writing marker bytes instead of media.

    Cut chunks contain ``[start-end]`` and concat joins chunk bytes in list
    order, so the final file spells out the order the chunks were joined in.
    """

    def __init__(
        self,
        streams: list[Stream] | None = None,
        subtitle_srt: str | None = TWO_CUES_SRT,
        fail_audio: bool = False,
    ):
        self.streams = DEFAULT_STREAMS if streams is None else streams
        self.subtitle_srt = subtitle_srt
        self.fail_audio = fail_audio
        self.cancel_event = None
        self.calls: list[tuple] = []
        self.titles: list[str] = []

    def probe_streams(self, video: Path) -> list[Stream]:
        self.calls.append(("probe", video))
        return list(self.streams)

    def extract_audio(self, video, output, stream_index, codec, bitrate):
        self.calls.append(("audio", stream_index))
        if self.fail_audio:
            raise EngineFailure(["ffmpeg", "-i", str(video)], 1, "Invalid data found")
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(FULL_AUDIO)
        return output

    def extract_subtitles(self, video, output, stream_index):
        self.calls.append(("subtitles", stream_index))
        if self.subtitle_srt is None:
            raise EngineFailure(["ffmpeg"], 1, "bitmap subtitles")
        output.write_text(self.subtitle_srt, encoding="utf-8")
        return output

    def cut(self, source, output, start, end):
        self.calls.append(("cut", start, end))
        output.write_bytes(f"[{start:.1f}-{end:.1f}]".encode())
        return output

    def concat(self, list_path, output, title):
        self.calls.append(("concat", list_path))
        self.titles.append(title)
        data = b""
        for line in list_path.read_text(encoding="utf-8").splitlines():
            quoted = line[len("file ") :]
            path = quoted[1:-1].replace("'\\''", "'")
            data += Path(path).read_bytes()
        output.write_bytes(data)
        return output


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own config files and IMMERSE_ variables out of tests."""
    monkeypatch.setattr(config_module, "_USER_CONFIG", tmp_path / "no-user-config.toml")
    monkeypatch.setattr(config_module, "_PROJECT_CONFIG", tmp_path / "no-project-config.toml")
    for name in list(os.environ):
        if name.startswith("IMMERSE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sample_srt(fixtures_dir: Path) -> Path:
    return fixtures_dir / "sample.srt"


@pytest.fixture
def sample_ass(fixtures_dir: Path) -> Path:
    return fixtures_dir / "sample.ass"


@pytest.fixture
def fake_engine():
    """Factory for FakeEngine instances."""
    return FakeEngine


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for configs rooted in tmp_path."""

    def _make(**overrides) -> ImmerseConfig:
        condense = CondenseConfig(**overrides.pop("condense", {"padding": 0.0}))
        library = LibraryConfig(
            video_dir=tmp_path / "videos",
            music_dir=tmp_path / "music",
            **overrides.pop("library", {}),
        )
        overrides.setdefault("scratch_dir", tmp_path / "scratch")
        return ImmerseConfig(condense=condense, library=library, **overrides)

    return _make


@pytest.fixture
def video(tmp_path: Path) -> Path:
    videos = tmp_path / "videos"
    videos.mkdir(exist_ok=True)
    path = videos / "[Group] Show_-_01_(1080p).mkv"
    path.write_bytes(b"fake video")
    return path
