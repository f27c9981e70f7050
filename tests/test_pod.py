"""Tests for the immersion pod layout and rotation."""

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from immerse.library.pod import (
    archive_bucket,
    archive_root,
    archive_stale,
    current_dir,
    ensure_layout,
    find_videos,
    is_in_pod,
    pending_videos,
    stale_files,
)

NOW = datetime(2024, 3, 20, 12, 0)


def _touch(path: Path, when: datetime) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"audio")
    ts = when.timestamp()
    os.utime(path, (ts, ts))
    return path


@pytest.mark.parametrize(
    "when, bucket",
    [
        (datetime(2021, 1, 3), "2020-53"),
        (datetime(2024, 1, 8), "2024-02"),
        (datetime(2024, 12, 30), "2025-01"),
    ],
)
def test_archive_bucket_uses_iso_week(when, bucket):
    assert archive_bucket(when) == bucket


def test_ensure_layout(make_config):
    config = make_config()
    ensure_layout(config)
    assert current_dir(config).is_dir()
    assert archive_root(config).is_dir()
    assert current_dir(config).parent == config.library.pod_dir


def test_stale_files(make_config):
    config = make_config()
    old = _touch(current_dir(config) / "old.mp3", NOW - timedelta(days=10))
    older = _touch(current_dir(config) / "older.mp3", NOW - timedelta(days=20))
    _touch(current_dir(config) / "fresh.mp3", NOW - timedelta(days=2))
    _touch(current_dir(config) / ".Show.mp3.part", NOW - timedelta(days=30))

    assert stale_files(config, NOW) == [older, old]


def test_stale_files_without_pod(make_config):
    assert stale_files(make_config(), NOW) == []


def test_archive_stale_buckets_by_own_mtime(make_config):
    config = make_config(library={"staleness_days": 7})
    week_a = datetime(2024, 3, 4, 9, 0)  # ISO week 10
    week_b = datetime(2024, 2, 26, 9, 0)  # ISO week 9
    _touch(current_dir(config) / "a.mp3", week_a)
    _touch(current_dir(config) / "b.mp3", week_b)
    _touch(current_dir(config) / "new.mp3", NOW)

    moved = archive_stale(config, NOW)

    assert sorted(p.relative_to(archive_root(config)).as_posix() for p in moved) == [
        "2024-09/b.mp3",
        "2024-10/a.mp3",
    ]
    assert [p.name for p in current_dir(config).iterdir()] == ["new.mp3"]


def test_is_in_pod(make_config):
    config = make_config()
    _touch(current_dir(config) / "now.mp3", NOW)
    _touch(archive_root(config) / "2024-01" / "then.mp3", NOW)

    assert is_in_pod(config, "now.mp3")
    assert is_in_pod(config, "then.mp3")
    assert not is_in_pod(config, "never.mp3")


def test_find_videos(tmp_path):
    (tmp_path / "b.MKV").touch()
    (tmp_path / "a.mp4").touch()
    (tmp_path / "a.srt").touch()
    (tmp_path / ".hidden.mkv").touch()
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.webm").touch()

    assert [p.name for p in find_videos(tmp_path)] == ["a.mp4", "b.MKV"]
    assert len(find_videos(tmp_path, recursive=True)) == 3


def test_pending_videos(make_config, tmp_path):
    config = make_config()
    videos = tmp_path / "videos"
    videos.mkdir()
    (videos / "[Grp] Done_(1080p).mkv").touch()
    (videos / "Archived.mkv").touch()
    (videos / "New.mkv").touch()
    _touch(current_dir(config) / "Done.mp3", NOW)
    _touch(archive_root(config) / "2024-01" / "Archived.mp3", NOW)

    assert [p.name for p in pending_videos(config)] == ["New.mkv"]


def test_pending_videos_without_video_dir(make_config):
    assert pending_videos(make_config()) == []
