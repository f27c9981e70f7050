"""Condensation pipeline: one video in, one speech-only audio file out.

    start -> audio_extracted -> subtitles_resolved -> intervals_computed
          -> chunks_extracted -> concatenated -> done

When no usable subtitles exist the run branches to ``fallback`` and
publishes the full audio unsegmented. Every intermediate file lives in the
job workspace, which is removed on all exit paths; the destination only ever
receives a finished file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from immerse.core.config import ImmerseConfig
from immerse.core.errors import InputError, OverwriteConflict, SubtitleUnavailable
from immerse.core.events import EventCallback, PipelineEvent, Stage
from immerse.core.models import CondenseResult, CondenseStatus, Interval, Stream, StreamKind
from immerse.library.pod import current_dir
from immerse.media.chunks import concatenate, extract_chunks
from immerse.media.engine import FFmpegEngine
from immerse.media.tracks import select_track
from immerse.subtitles.acquire import acquire_subtitles
from immerse.subtitles.converter import find_external_subtitles
from immerse.subtitles.cues import compute_intervals, load_cues, total_duration
from immerse.utils.paths import Job, clean_title, job_workspace, output_filename, publish

logger = logging.getLogger(__name__)


def default_output(video: Path, config: ImmerseConfig) -> Path:
    """Destination in the pod's current/ folder for a video."""
    return current_dir(config) / output_filename(video, config.condense.audio_format)


def condense_video(
    video: Path,
    config: ImmerseConfig,
    engine: FFmpegEngine,
    output: Path | None = None,
    subtitles: Path | None = None,
    on_event: EventCallback | None = None,
) -> CondenseResult:
    """Run the full condensation pipeline for one video.

    Args:
        video: Source video file.
        config: Resolved configuration snapshot.
        engine: Media engine.
        output: Destination file. Defaults to ``<pod>/current/<title>.<fmt>``.
        subtitles: Explicit external subtitle file. Defaults to a sidecar
            file found next to the video.
        on_event: Optional callback for state transitions.

    Returns:
        The result with status ``condensed``, ``uncondensed`` (subtitle
        fallback) or ``raw`` (condensing disabled).

    Raises:
        InputError: If the video does not exist.
        OverwriteConflict: If the destination exists, or appears while the
            video is processed, and overwrite is off.
        EngineFailure: If probing or audio extraction fails.
    """
    video = Path(video)
    if not video.is_file():
        raise InputError(f"File not found: {video}")
    if subtitles is not None and not Path(subtitles).is_file():
        raise InputError(f"Subtitle file not found: {subtitles}")

    output = Path(output) if output is not None else default_output(video, config)
    if output.exists() and not config.overwrite:
        raise OverwriteConflict(output)

    def emit(stage: Stage, message: str, data: dict | None = None) -> None:
        if on_event:
            on_event(PipelineEvent(video=video, stage=stage, message=message, data=data))

    with job_workspace(video, config) as job:
        emit(Stage.START, f"Processing {video.name}")

        streams = engine.probe_streams(video)
        audio_index = select_track(streams, StreamKind.AUDIO, config.condense.language_priority)
        if audio_index is None:
            logger.debug("No audio stream matches priority, using the default stream")
        engine.extract_audio(
            video,
            job.audio,
            audio_index,
            codec=config.condense.codec,
            bitrate=config.condense.bitrate,
        )
        emit(Stage.AUDIO_EXTRACTED, "Audio extracted", {"stream": audio_index})

        if not config.condense_enabled:
            publish(job.audio, output, overwrite=config.overwrite)
            emit(Stage.DONE, "Copied raw audio", {"output": output})
            return CondenseResult(video=video, status=CondenseStatus.RAW, output=output)

        try:
            _resolve_subtitles(job, engine, streams, subtitles)
            emit(Stage.SUBTITLES_RESOLVED, "Subtitles ready")
            intervals = _speech_intervals(job)
        except SubtitleUnavailable as e:
            logger.warning("%s; keeping full audio for %s", e, video.name)
            emit(Stage.FALLBACK, str(e))
            publish(job.audio, output, overwrite=config.overwrite)
            emit(Stage.DONE, "Copied full audio", {"output": output})
            return CondenseResult(video=video, status=CondenseStatus.UNCONDENSED, output=output)
        emit(
            Stage.INTERVALS_COMPUTED,
            f"{len(intervals)} speech intervals",
            {"intervals": len(intervals), "seconds": total_duration(intervals)},
        )

        chunks = extract_chunks(engine, job.audio, job.chunks_dir, intervals)
        emit(Stage.CHUNKS_EXTRACTED, f"{len(chunks)} chunks cut")

        concatenate(engine, chunks, job.condensed, clean_title(video.stem), job.concat_list)
        emit(Stage.CONCATENATED, "Chunks joined")

        publish(job.condensed, output, overwrite=config.overwrite)
        emit(Stage.DONE, "Condensed", {"output": output})
        return CondenseResult(
            video=video,
            status=CondenseStatus.CONDENSED,
            output=output,
            intervals=len(intervals),
        )


def _resolve_subtitles(
    job: Job,
    engine: FFmpegEngine,
    streams: list[Stream],
    subtitles: Path | None,
) -> None:
    """Write the job's cue file, or raise SubtitleUnavailable."""
    condense = job.config.condense
    external = subtitles
    if external is None:
        external = find_external_subtitles(job.video, condense.language_priority)

    if not acquire_subtitles(engine, job.video, external, job.subtitles, condense, streams):
        raise SubtitleUnavailable(f"No subtitles for {job.video.name}")


def _speech_intervals(job: Job) -> list[Interval]:
    condense = job.config.condense
    cues = load_cues(job.subtitles)
    intervals = compute_intervals(cues, condense.padding, condense.max_cue_seconds)
    if not intervals:
        raise SubtitleUnavailable(f"Subtitles for {job.video.name} contain no usable cues")
    return intervals
