"""Tests for chunk extraction and ordered concatenation."""

from pathlib import Path

import pytest

from immerse.core.errors import InputError
from immerse.core.models import Chunk, Interval
from immerse.media.chunks import (
    chunk_name,
    concatenate,
    escape_concat_path,
    extract_chunks,
    write_concat_list,
)


def test_chunk_name_is_zero_padded_millis():
    assert chunk_name(2.5, ".mp3") == "0000002500.mp3"
    assert chunk_name(3723.456, ".ogg") == "0003723456.ogg"


def test_chunk_names_sort_chronologically():
    starts = [100.0, 9.5, 20.0, 0.0]
    names = sorted(chunk_name(s, ".mp3") for s in starts)
    assert names == [chunk_name(s, ".mp3") for s in sorted(starts)]


def test_extract_chunks(fake_engine, tmp_path: Path):
    engine = fake_engine()
    source = tmp_path / "audio.mp3"
    source.write_bytes(b"audio")
    intervals = [Interval(1.0, 2.0), Interval(5.0, 6.5)]

    chunks = extract_chunks(engine, source, tmp_path / "chunks", intervals)

    assert [c.start for c in chunks] == [1.0, 5.0]
    assert chunks[0].path.name == "0000001000.mp3"
    assert all(c.path.is_file() for c in chunks)
    assert [c for c in engine.calls if c[0] == "cut"] == [("cut", 1.0, 2.0), ("cut", 5.0, 6.5)]


def test_concatenate_orders_by_start(fake_engine, tmp_path: Path):
    """Chunks handed over out of order are joined in start-time order."""
    engine = fake_engine()
    chunks = []
    for start in (10.0, 2.0, 20.0):
        path = tmp_path / f"chunk-{start:g}.mp3"
        path.write_bytes(f"<{start:g}>".encode())
        chunks.append(Chunk(path=path, start=start, end=start + 1))

    out = concatenate(engine, chunks, tmp_path / "out.mp3", "Show - 01", tmp_path / "list.txt")

    assert out.read_bytes() == b"<2><10><20>"
    assert engine.titles == ["Show - 01"]


def test_concatenate_empty_raises(fake_engine, tmp_path: Path):
    with pytest.raises(InputError):
        concatenate(fake_engine(), [], tmp_path / "out.mp3", "t", tmp_path / "list.txt")


def test_escape_concat_path_quotes(tmp_path: Path):
    path = tmp_path / "it's here.mp3"
    escaped = escape_concat_path(path)
    assert escaped.startswith("'") and escaped.endswith("'")
    assert "it'\\''s here.mp3" in escaped
    assert str(tmp_path.resolve()) in escaped


def test_write_concat_list(tmp_path: Path):
    a = tmp_path / "0000001000.mp3"
    b = tmp_path / "it's.mp3"
    list_path = write_concat_list(
        [Chunk(a, 1.0, 2.0), Chunk(b, 3.0, 4.0)], tmp_path / "concat.txt"
    )
    lines = list_path.read_text(encoding="utf-8").splitlines()
    assert lines == [
        f"file '{a.resolve()}'",
        "file '" + str(b.resolve()).replace("'", "'\\''") + "'",
    ]


def test_concatenate_handles_quote_in_path(fake_engine, tmp_path: Path):
    folder = tmp_path / "Bob's show"
    folder.mkdir()
    first = folder / "a.mp3"
    second = folder / "b.mp3"
    first.write_bytes(b"A")
    second.write_bytes(b"B")

    out = concatenate(
        fake_engine(),
        [Chunk(second, 5.0, 6.0), Chunk(first, 1.0, 2.0)],
        tmp_path / "out.mp3",
        "t",
        tmp_path / "list.txt",
    )
    assert out.read_bytes() == b"AB"
