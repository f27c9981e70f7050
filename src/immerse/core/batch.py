"""Bounded worker pool for condensing many videos.

Each video is an independent unit of work with its own workspace, so the
queue is drained by ``config.workers`` threads; the pipelines spend their time
waiting on ffmpeg. A failure in one video becomes that video's result and
never stops the others.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from immerse.core.config import ImmerseConfig
from immerse.core.errors import ImmerseError, OverwriteConflict
from immerse.core.events import EventCallback
from immerse.core.models import CondenseResult, CondenseStatus
from immerse.core.pipeline import condense_video
from immerse.media.engine import FFmpegEngine

logger = logging.getLogger(__name__)

ResultCallback = Callable[[CondenseResult], None]


def condense_one(
    video: Path,
    config: ImmerseConfig,
    engine: FFmpegEngine,
    on_event: EventCallback | None = None,
) -> CondenseResult:
    """Run one pipeline, turning its errors into a result."""
    try:
        return condense_video(video, config, engine, on_event=on_event)
    except OverwriteConflict as e:
        logger.info("Skipping %s: %s", video.name, e)
        return CondenseResult(
            video=video, status=CondenseStatus.SKIPPED, output=e.path, error=str(e)
        )
    except (ImmerseError, OSError) as e:
        logger.error("Failed %s: %s", video.name, e)
        return CondenseResult(video=video, status=CondenseStatus.FAILED, error=str(e))
    except Exception as e:
        logger.exception("Unexpected error while condensing %s", video.name)
        return CondenseResult(video=video, status=CondenseStatus.FAILED, error=str(e))


def run_batch(
    videos: Sequence[Path],
    config: ImmerseConfig,
    engine: FFmpegEngine,
    on_event: EventCallback | None = None,
    on_result: ResultCallback | None = None,
) -> list[CondenseResult]:
    """Condense videos concurrently, up to ``config.workers`` at a time.

    Args:
        videos: Videos to process. Duplicates are processed once.
        config: Resolved configuration snapshot.
        engine: Shared media engine. Its cancel event, if any, is set when
            the batch is interrupted, which kills running ffmpeg processes.
        on_event: Pipeline event callback, called from worker threads.
        on_result: Called in the submitting thread as each video finishes.

    Returns:
        One result per unique video, in input order.
    """
    unique = list(dict.fromkeys(Path(v) for v in videos))
    results: list[CondenseResult | None] = [None] * len(unique)

    executor = ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="condense")
    try:
        futures = {
            executor.submit(condense_one, video, config, engine, on_event): i
            for i, video in enumerate(unique)
        }
        for future in as_completed(futures):
            result = future.result()
            results[futures[future]] = result
            if on_result:
                on_result(result)
    except BaseException:
        if engine.cancel_event is not None:
            engine.cancel_event.set()
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    executor.shutdown(wait=True)
    return [r for r in results if r is not None]
