from __future__ import annotations

from pathlib import Path

import pytest

from txtzip.exceptions import OutputCollisionError
from txtzip.writer import chunk_path, chunk_paths, write_archives


@pytest.mark.unit
def test_chunk_paths_single_buffer_keeps_output_name() -> None:
    assert chunk_paths(Path("out.md"), 1) == [Path("out.md")]


@pytest.mark.unit
def test_chunk_paths_insert_two_digit_index_before_extension() -> None:
    assert chunk_paths(Path("build/out.md"), 3) == [
        Path("build/out.01.md"),
        Path("build/out.02.md"),
        Path("build/out.03.md"),
    ]
    assert chunk_path(Path("archive"), 7) == Path("archive.07")
    assert chunk_path(Path("out.md"), 123) == Path("out.123.md")


@pytest.mark.unit
def test_write_archives_writes_utf8_chunks_in_order(tmp_path: Path) -> None:
    output = tmp_path / "out.md"

    written = write_archives(["one ✓", "two", "three"], output, overwrite=False)

    assert written == [tmp_path / "out.01.md", tmp_path / "out.02.md", tmp_path / "out.03.md"]
    assert [p.read_bytes() for p in written] == ["one ✓".encode(), b"two", b"three"]
    assert not output.exists()


@pytest.mark.unit
def test_write_archives_refuses_to_clobber(tmp_path: Path) -> None:
    output = tmp_path / "out.md"
    output.write_text("previous run", encoding="utf-8")

    with pytest.raises(OutputCollisionError) as exc_info:
        write_archives(["new"], output, overwrite=False)

    assert exc_info.value.path == output
    assert str(output) in str(exc_info.value)
    assert output.read_text(encoding="utf-8") == "previous run"


@pytest.mark.unit
def test_write_archives_aborts_at_first_collision_keeping_earlier_chunks(tmp_path: Path) -> None:
    output = tmp_path / "out.md"
    (tmp_path / "out.02.md").write_text("old", encoding="utf-8")

    with pytest.raises(OutputCollisionError):
        write_archives(["a", "b", "c"], output, overwrite=False)

    assert (tmp_path / "out.01.md").read_text(encoding="utf-8") == "a"
    assert (tmp_path / "out.02.md").read_text(encoding="utf-8") == "old"
    assert not (tmp_path / "out.03.md").exists()


@pytest.mark.unit
def test_write_archives_overwrites_when_allowed(tmp_path: Path) -> None:
    output = tmp_path / "nested" / "out.md"
    output.parent.mkdir()
    output.write_text("previous run", encoding="utf-8")

    write_archives(["new"], output, overwrite=True)

    assert output.read_text(encoding="utf-8") == "new"
