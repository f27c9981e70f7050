"""Stream selection by language priority."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from immerse.core.models import Stream, StreamKind


def select_track(
    streams: Sequence[Stream],
    kind: StreamKind,
    priority: Iterable[str],
) -> int | None:
    """Pick the stream index for the most preferred available language.

    Languages are tried in priority order; within one language, streams keep
    their probe order. Tags must match exactly.

    Returns:
        The stream index, or None when no stream of ``kind`` carries any of
        the priority languages. Callers then let the engine pick its
        default stream.
    """
    candidates = streams_of_kind(streams, kind)
    for language in priority:
        for stream in candidates:
            if stream.language == language:
                return stream.index
    return None


def streams_of_kind(streams: Sequence[Stream], kind: StreamKind) -> list[Stream]:
    return [s for s in streams if s.kind == kind]
