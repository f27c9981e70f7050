"""Tests for the concurrent batch runner."""

import threading
from pathlib import Path

import pytest

from immerse.core.batch import condense_one, run_batch
from immerse.core.models import CondenseStatus
from immerse.core.pipeline import default_output


@pytest.fixture
def episodes(tmp_path: Path) -> list[Path]:
    folder = tmp_path / "videos"
    folder.mkdir(exist_ok=True)
    paths = []
    for i in range(1, 5):
        path = folder / f"ep{i:02d}.mkv"
        path.write_bytes(b"video")
        paths.append(path)
    return paths


def test_results_in_input_order(make_config, fake_engine, episodes):
    config = make_config(workers=3)
    ordered = list(reversed(episodes))

    results = run_batch(ordered, config, fake_engine())

    assert [r.video for r in results] == ordered
    assert all(r.status == CondenseStatus.CONDENSED for r in results)
    assert {r.output.name for r in results} == {"ep01.mp3", "ep02.mp3", "ep03.mp3", "ep04.mp3"}


def test_duplicates_processed_once(make_config, fake_engine, episodes):
    engine = fake_engine()
    results = run_batch([episodes[0], episodes[0], episodes[1]], make_config(), engine)
    assert len(results) == 2
    assert sum(1 for c in engine.calls if c[0] == "probe") == 2


def test_failure_isolated(make_config, fake_engine, episodes, tmp_path):
    missing = tmp_path / "videos" / "gone.mkv"
    config = make_config()

    results = run_batch([episodes[0], missing, episodes[1]], config, fake_engine())

    assert [r.status for r in results] == [
        CondenseStatus.CONDENSED,
        CondenseStatus.FAILED,
        CondenseStatus.CONDENSED,
    ]
    assert "not found" in results[1].error


def test_existing_output_skipped(make_config, fake_engine, episodes):
    config = make_config()
    existing = default_output(episodes[0], config)
    existing.parent.mkdir(parents=True)
    existing.write_bytes(b"old")

    results = run_batch(episodes[:2], config, fake_engine())

    assert results[0].status == CondenseStatus.SKIPPED
    assert results[0].output == existing
    assert not results[0].ok
    assert results[1].status == CondenseStatus.CONDENSED
    assert existing.read_bytes() == b"old"


def test_engine_failure_becomes_result(make_config, fake_engine, episodes):
    result = condense_one(episodes[0], make_config(), fake_engine(fail_audio=True))
    assert result.status == CondenseStatus.FAILED
    assert "ffmpeg failed" in result.error


def test_on_result_called_per_video(make_config, fake_engine, episodes):
    seen = []
    run_batch(episodes, make_config(workers=2), fake_engine(), on_result=seen.append)
    assert sorted(r.video for r in seen) == sorted(episodes)


def test_interrupt_sets_cancel_event(make_config, fake_engine, episodes):
    engine = fake_engine()
    engine.cancel_event = threading.Event()

    def interrupt(result):
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        run_batch(episodes, make_config(workers=1), engine, on_result=interrupt)

    assert engine.cancel_event.is_set()


def test_empty_batch(make_config, fake_engine):
    assert run_batch([], make_config(), fake_engine()) == []


def test_same_title_published_once_under_concurrency(make_config, fake_engine, tmp_path):
    """Two releases of one episode race for a single output name."""
    folder = tmp_path / "videos"
    folder.mkdir()
    videos = [folder / "[GroupA] Show - 01.mkv", folder / "[GroupB] Show - 01.mkv"]
    for v in videos:
        v.write_bytes(b"video")

    class LockstepEngine(fake_engine):
        # Both workers pass the early existence check before either publishes
        barrier = threading.Barrier(2, timeout=10)

        def probe_streams(self, video):
            self.barrier.wait()
            return super().probe_streams(video)

    config = make_config(workers=2)
    results = run_batch(videos, config, LockstepEngine())

    statuses = sorted(r.status.value for r in results)
    assert statuses == [CondenseStatus.CONDENSED.value, CondenseStatus.SKIPPED.value]
    winner = next(r for r in results if r.status == CondenseStatus.CONDENSED)
    loser = next(r for r in results if r.status == CondenseStatus.SKIPPED)
    assert loser.output == winner.output
    assert winner.output.name == "Show - 01.mp3"
    assert winner.output.read_bytes() == b"[1.0-2.0][5.0-6.5]"


def test_unexpected_error_fails_one_video(make_config, fake_engine, episodes):
    class GarbledProbeEngine(fake_engine):
        def probe_streams(self, video):
            if video == episodes[0]:
                raise ValueError("Expecting value: line 1 column 1 (char 0)")
            return super().probe_streams(video)

    results = run_batch(episodes[:2], make_config(workers=1), GarbledProbeEngine())

    assert [r.status for r in results] == [CondenseStatus.FAILED, CondenseStatus.CONDENSED]
    assert "Expecting value" in results[0].error
