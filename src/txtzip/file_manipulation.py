from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from txtzip.config import BINARY_SNIFF_BYTES
from txtzip.filters import Decision
from txtzip.logging import logger

if TYPE_CHECKING:
    from txtzip.filters import FilterSet

# Control bytes that mark a file as binary; NUL, tab, LF, VT, FF and CR are allowed.
_BINARY_BYTES = frozenset([*range(1, 9), *range(14, 32), 127])


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def is_binary(data: bytes) -> bool:
    """Check whether a file's leading bytes look binary.

    Only the first :data:`~txtzip.config.BINARY_SNIFF_BYTES` bytes are looked at.

    Args:
        data (bytes): the file content, or at least its first bytes

    Returns:
        bool: True if a disallowed control byte is present
    """
    return any(b in _BINARY_BYTES for b in data[:BINARY_SNIFF_BYTES])


def decode_text(data: bytes) -> str:
    """Decode file bytes as UTF-8, replacing undecodable sequences."""
    return data.decode("utf-8", errors="replace")


def strip_empty_lines(text: str) -> str:
    """Drop every line that is empty once whitespace is trimmed.

    Args:
        text (str): the text to filter

    Returns:
        str: the remaining lines joined with ``\\n``
    """
    return "\n".join(line for line in text.split("\n") if line.strip())


def read_text_file(path: Path, *, strip_empty: bool = False) -> str | None:
    """Read a file for archiving.

    Args:
        path (Path): the file to read
        strip_empty (bool): remove blank lines from the decoded text

    Returns:
        str | None: the decoded text, or None when the file is binary
    """
    data = path.read_bytes()
    if is_binary(data):
        return None
    text = decode_text(data)
    return strip_empty_lines(text) if strip_empty else text


def walk_files(source: Path, filters: FilterSet) -> list[str]:
    """Collect accepted files under ``source``, depth first.

    Entries are visited in case-sensitive name order. Directories rejected by
    the ignore rules are pruned without being descended into.

    Args:
        source (Path): the resolved source root
        filters (FilterSet): the rules deciding which files are kept

    Returns:
        list[str]: accepted file paths relative to ``source``, POSIX separators
    """
    results: list[str] = []

    def walk(directory: Path) -> None:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
        for entry in entries:
            p = Path(entry.path)
            rel = relpath(p, source)
            if entry.is_dir(follow_symlinks=False):
                if filters.is_ignored(rel, is_dir=True):
                    logger.debug("Pruned directory", path=rel)
                    continue
                walk(p)
                continue
            if not entry.is_file():
                continue
            decision = filters.decide(rel)
            if decision is not Decision.ACCEPTED:
                logger.debug("Skipped file", path=rel, reason=str(decision))
                continue
            results.append(rel)

    walk(source)
    return results
