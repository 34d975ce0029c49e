from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from txtzip.config import guess_file_type, guess_language, is_markdown
from txtzip.file_manipulation import read_text_file
from txtzip.logging import logger
from txtzip.tree import build_tree, render_tree

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from txtzip.settings import Settings

_BACKTICK_RUN_RE = re.compile(r"`+")


def utf8_len(text: str) -> int:
    """Size of ``text`` once UTF-8 encoded."""
    return len(text.encode("utf-8"))


def choose_backtick_fence(text: str, *, min_len: int = 3) -> str:
    """Return a fence longer than any backtick run inside ``text``."""
    longest = max((len(m.group(0)) for m in _BACKTICK_RUN_RE.finditer(text)), default=0)
    return "`" * max(min_len, longest + 1)


# ------------------------------ Formatters ----------------------------------


class ArchiveFormatter:
    """Framing of file contents, the tree section and continuation markers."""

    name: ClassVar[str] = ""

    def format_file(self, rel: str, content: str) -> str:
        """Frame one file's (possibly stripped) content for the archive."""
        raise NotImplementedError

    def format_tree(self, tree_text: str) -> str:
        """Frame the rendered directory tree."""
        raise NotImplementedError

    def continuation_header(self, rel: str) -> str:
        """Marker opening a slice that continues a file from the previous chunk."""
        raise NotImplementedError

    def continuation_footer(self) -> str:
        """Marker closing a slice whose file continues in the next chunk."""
        raise NotImplementedError

    def marker_bytes(self, rel: str) -> int:
        """UTF-8 size of the header and footer framing a middle slice of ``rel``."""
        return utf8_len(self.continuation_header(rel)) + utf8_len(self.continuation_footer())


class MarkdownFormatter(ArchiveFormatter):
    """Markdown documents verbatim, every other file in a language-tagged code fence."""

    name = "markdown"

    def format_file(self, rel: str, content: str) -> str:
        header = f"## File: {rel}\n\n"
        if is_markdown(rel):
            return f"{header}{content}\n\n"
        fence = choose_backtick_fence(content)
        lang = guess_language(guess_file_type(rel))
        body = content if content.endswith("\n") or not content else content + "\n"
        return f"{header}{fence}{lang}\n{body}{fence}\n\n"

    def format_tree(self, tree_text: str) -> str:
        return f"## Directory Tree\n\n```text\n{tree_text}\n```\n\n"

    def continuation_header(self, rel: str) -> str:
        return f"<!-- Continuation of File: {rel} -->\n"

    def continuation_footer(self) -> str:
        return "\n<!-- File continues in next part -->\n"


class PlainFormatter(ArchiveFormatter):
    """The historical ``=== Start of File ===`` / ``=== End of File ===`` framing."""

    name = "plain"

    def format_file(self, rel: str, content: str) -> str:
        return f"\n=== Start of File: {rel} ===\n{content}\n=== End of File: {rel} ===\n"

    def format_tree(self, tree_text: str) -> str:
        return f"=== Directory Tree ===\n{tree_text}\n=== End of Directory Tree ===\n"

    def continuation_header(self, rel: str) -> str:
        return f"=== Continuation of File: {rel} ===\n"

    def continuation_footer(self) -> str:
        return "\n=== File continues in next part ===\n"


FORMATTERS: dict[str, type[ArchiveFormatter]] = {
    MarkdownFormatter.name: MarkdownFormatter,
    PlainFormatter.name: PlainFormatter,
}


def get_formatter(name: str) -> ArchiveFormatter:
    """Instantiate the formatter registered under ``name``.

    Args:
        name (str): ``"markdown"`` or ``"plain"``

    Raises:
        ValueError: if no formatter has that name

    Returns:
        ArchiveFormatter: a fresh formatter
    """
    try:
        return FORMATTERS[name]()
    except KeyError:
        msg = f"Unknown archive format: {name!r}"
        raise ValueError(msg) from None


# ------------------------------ Chunk assembly ------------------------------


@dataclass
class ArchiveBuffer:
    """Text accumulated for one output file."""

    parts: list[str] = field(default_factory=list)
    size: int = 0
    sealed: bool = False

    def append(self, text: str, nbytes: int | None = None) -> None:
        """Append ``text``; ``nbytes`` is its UTF-8 size when already known.

        Raises:
            RuntimeError: if the buffer has been sealed
        """
        if self.sealed:
            msg = "Cannot append to a sealed archive buffer"
            raise RuntimeError(msg)
        self.parts.append(text)
        self.size += utf8_len(text) if nbytes is None else nbytes

    def seal(self) -> None:
        self.sealed = True

    @property
    def content(self) -> str:
        return "".join(self.parts)


@dataclass
class ContinuationState:
    """Tracks a file whose content is being spread over several buffers."""

    continuing: bool = False
    path: str = ""


def _back_to_char_boundary(data: bytes, idx: int) -> int:
    # Move back over UTF-8 continuation bytes (0b10xxxxxx).
    idx = min(idx, len(data))
    while 0 < idx < len(data) and data[idx] & 0xC0 == 0x80:
        idx -= 1
    return idx


def _next_char_boundary(data: bytes, idx: int) -> int:
    idx += 1
    while idx < len(data) and data[idx] & 0xC0 == 0x80:
        idx += 1
    return idx


class ChunkAssembler:
    """Distribute formatted file contents over size-bounded buffers.

    With ``max_chunk_bytes == 0`` a single unbounded buffer is produced. With a
    bound, each file is cut at UTF-8 character boundaries into slices that fill
    the current buffer; a file cut in two gets a continuation footer at the
    end of the first slice and a continuation header in front of the next.
    Marker bytes are reserved before the slice is measured, so markers never
    push a buffer over the bound. When not even one character fits next to
    its markers, a non-empty buffer is sealed first; an empty one takes a
    single character and overflows by the minimum amount.
    """

    def __init__(self, max_chunk_bytes: int, formatter: ArchiveFormatter) -> None:
        if max_chunk_bytes < 0:
            msg = f"max_chunk_bytes must not be negative, got: {max_chunk_bytes}"
            raise ValueError(msg)
        self.max_chunk_bytes = max_chunk_bytes
        self.formatter = formatter
        self.buffers: list[ArchiveBuffer] = [ArchiveBuffer()]
        self.index = 0
        self.state = ContinuationState()

    @property
    def bounded(self) -> bool:
        return self.max_chunk_bytes > 0

    @property
    def current(self) -> ArchiveBuffer:
        return self.buffers[self.index]

    def remaining(self) -> int | None:
        """Free bytes in the current buffer, or None when unbounded."""
        if not self.bounded:
            return None
        return self.max_chunk_bytes - self.current.size

    def _start_new_buffer(self) -> None:
        self.current.seal()
        self.buffers.append(ArchiveBuffer())
        self.index += 1
        logger.debug("Started archive chunk", chunk=self.index + 1)

    def _roll_if_full(self) -> None:
        if self.bounded and self.current.size >= self.max_chunk_bytes:
            self._start_new_buffer()

    def add_tree(self, tree_text: str) -> None:
        """Place the directory tree section, never splitting it.

        If the tree does not fit in the current buffer it gets a sealed buffer
        of its own, inserted in front of the current one.

        Args:
            tree_text (str): the framed tree section
        """
        nbytes = utf8_len(tree_text)
        remaining = self.remaining()
        if remaining is not None and nbytes > remaining:
            tree_buffer = ArchiveBuffer()
            tree_buffer.append(tree_text, nbytes)
            tree_buffer.seal()
            self.buffers.insert(self.index, tree_buffer)
            self.index += 1
            return
        self.current.append(tree_text, nbytes)
        self._roll_if_full()

    def add_file(self, rel: str, formatted: str) -> None:
        """Emit one file's formatted content across as many buffers as needed.

        Args:
            rel (str): the file's relative path, used in continuation markers
            formatted (str): the framed content
        """
        data = formatted.encode("utf-8")
        pos = 0
        while pos < len(data):
            header = self.formatter.continuation_header(rel) if self.state.continuing else ""
            footer = ""
            remaining = self.remaining()
            if remaining is None:
                end = len(data)
            else:
                space = remaining - utf8_len(header)
                if len(data) - pos <= space:
                    end = len(data)
                else:
                    footer = self.formatter.continuation_footer()
                    end = _back_to_char_boundary(data, pos + max(0, space - utf8_len(footer)))
                    if end <= pos:
                        if self.current.size > 0:
                            self._start_new_buffer()
                            continue
                        end = _next_char_boundary(data, pos)
                    if end >= len(data):
                        footer = ""

            piece = header + data[pos:end].decode("utf-8") + footer
            self.state = ContinuationState(continuing=True, path=rel) if footer else ContinuationState()
            self.current.append(piece)
            pos = end
            self._roll_if_full()

    def finish(self) -> list[ArchiveBuffer]:
        """Seal every buffer and return them, minus a trailing empty one."""
        if len(self.buffers) > 1 and not self.current.parts:
            self.buffers.pop()
            self.index -= 1
        for buf in self.buffers:
            buf.seal()
        return self.buffers


def build_archive(settings: Settings, source: Path, rel_paths: Sequence[str]) -> list[ArchiveBuffer]:
    """Read, format and chunk the selected files.

    Binary files are skipped silently; they still appear in the tree, which is
    built from the selected paths.

    Args:
        settings (Settings): the run options (format, tree, chunk bound, stripping)
        source (Path): the resolved source root
        rel_paths (Sequence[str]): selected files, in traversal order

    Returns:
        list[ArchiveBuffer]: the sealed buffers, at least one
    """
    formatter = get_formatter(settings.format)
    assembler = ChunkAssembler(settings.max_chunk_bytes, formatter)
    if settings.max_chunk_bytes:
        marker_bytes = max((formatter.marker_bytes(rel) for rel in rel_paths), default=0)
        if settings.max_chunk_bytes <= marker_bytes:
            logger.warning(
                "Chunk size leaves no room beside continuation markers; split files will exceed it",
                max_chunk_bytes=settings.max_chunk_bytes,
                marker_bytes=marker_bytes,
            )
    if settings.tree:
        assembler.add_tree(formatter.format_tree(render_tree(build_tree(rel_paths))))

    archived = 0
    for rel in rel_paths:
        text = read_text_file(source / rel, strip_empty=settings.strip_empty_lines)
        if text is None:
            logger.debug("Skipped binary file", path=rel)
            continue
        assembler.add_file(rel, formatter.format_file(rel, text))
        archived += 1

    buffers = assembler.finish()
    logger.info("Archive assembled", files=archived, chunks=len(buffers))
    return buffers
