from __future__ import annotations

from typing import TYPE_CHECKING

from txtzip.exceptions import OutputCollisionError
from txtzip.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def chunk_path(output: Path, index: int) -> Path:
    """Insert a two-digit, 1-based chunk index before the output's extension.

    Args:
        output (Path): the configured output path, e.g. ``out.md``
        index (int): the 1-based chunk number

    Returns:
        Path: e.g. ``out.01.md``
    """
    return output.with_name(f"{output.stem}.{index:02d}{output.suffix}")


def chunk_paths(output: Path, count: int) -> list[Path]:
    """Target paths for ``count`` archive buffers.

    Args:
        output (Path): the configured output path
        count (int): the number of buffers

    Returns:
        list[Path]: ``[output]`` for a single buffer, numbered siblings otherwise
    """
    if count == 1:
        return [output]
    return [chunk_path(output, i) for i in range(1, count + 1)]


def write_archives(contents: Sequence[str], output: Path, *, overwrite: bool) -> list[Path]:
    """Write each archive buffer to its target path.

    Targets are written in order. The first one that already exists while
    ``overwrite`` is off aborts the whole write; chunks written before it are
    left in place.

    Args:
        contents (Sequence[str]): the buffer contents, in chunk order
        output (Path): the configured output path
        overwrite (bool): replace existing files

    Raises:
        OutputCollisionError: if a target exists and ``overwrite`` is False

    Returns:
        list[Path]: the written paths
    """
    written: list[Path] = []
    for target, text in zip(chunk_paths(output, len(contents)), contents, strict=True):
        if target.exists() and not overwrite:
            raise OutputCollisionError(path=target)
        target.parent.mkdir(parents=True, exist_ok=True)
        data = text.encode("utf-8")
        target.write_bytes(data)
        logger.info("Wrote archive", path=str(target), bytes=len(data))
        written.append(target)
    return written
