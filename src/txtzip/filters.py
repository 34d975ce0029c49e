"""Ignore rules and include/exclude globs deciding which paths enter an archive.

Two rule families are composed here:

* the ignore rule set: ``.gitignore`` lines plus :data:`~txtzip.config.ALWAYS_IGNORED`,
  compiled with full gitignore semantics (negation, anchoring, directory-only
  rules) by :class:`pathspec.GitIgnoreSpec`;
* include/exclude globs: plain patterns whose scope depends on their shape. A
  pattern without ``/`` matches the base name at any depth, a pattern with ``/``
  matches the whole relative path, with ``*`` and ``?`` kept inside one
  segment and ``**`` crossing ``/``.
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from enum import StrEnum, auto
from functools import cached_property
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import pathspec

from txtzip.config import ALWAYS_IGNORED, is_source_file

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from txtzip.settings import Settings


class Decision(StrEnum):
    """Outcome of evaluating one path against a :class:`FilterSet`."""

    ACCEPTED = auto()
    IGNORED = auto()
    NOT_SOURCE = auto()
    EXCLUDED = auto()
    NOT_INCLUDED = auto()


def normalize_globs(globs: Sequence[str]) -> list[str]:
    """Normalize a sequence of path glob patterns.

    Normalize a sequence of glob patterns by stripping whitespace, replacing
    backslashes with forward slashes and dropping a leading ``./``.

    Args:
        globs (Sequence[str]): the glob patterns to normalize

    Returns:
        list[str]: the normalized glob patterns
    """
    out: list[str] = []
    for g in globs:
        g2 = (g or "").strip().replace("\\", "/")
        g2 = g2.removeprefix("./")
        if not g2:
            continue
        out.append(g2)
    return out


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a path glob into a regex for the whole relative path.

    ``*`` and ``?`` never cross ``/``; ``**`` does, and ``**/`` also matches
    zero directories. Bracket classes follow :mod:`fnmatch` (``[!...]``
    negates) and never match ``/``. Everything else is literal, including a
    leading ``!``.

    Args:
        pattern (str): a normalized glob containing ``/``

    Returns:
        re.Pattern[str]: the compiled pattern, to be used with ``fullmatch``
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        ch = pattern[i]
        i += 1
        if ch == "*":
            if i < n and pattern[i] == "*":
                i += 1
                if i < n and pattern[i] == "/":
                    i += 1
                    out.append("(?:.*/)?")
                else:
                    out.append(".*")
            else:
                out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[":
            j = i
            if j < n and pattern[j] == "!":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            j = pattern.find("]", j)
            if j == -1:
                out.append(re.escape(ch))
                continue
            body = pattern[i:j]
            i = j + 1
            negate = body.startswith("!")
            items = "".join(c if c == "-" else re.escape(c) for c in body.removeprefix("!"))
            out.append(f"[^/{items}]" if negate else f"(?!/)[{items}]")
        else:
            out.append(re.escape(ch))
    return re.compile("".join(out), re.DOTALL)


@dataclass(frozen=True)
class GlobRule:
    """A single include or exclude pattern.

    Attributes:
        pattern: The normalized glob.
    """

    pattern: str

    @property
    def anchored(self) -> bool:
        """Whether the pattern is matched against the full relative path."""
        return "/" in self.pattern

    @cached_property
    def _regex(self) -> re.Pattern[str]:
        return glob_to_regex(self.pattern)

    def matches(self, rel: str) -> bool:
        """Check a source-relative POSIX path against the pattern.

        Args:
            rel (str): the relative path to check

        Returns:
            bool: True if the pattern matches
        """
        if not self.anchored:
            return fnmatch.fnmatchcase(PurePosixPath(rel).name, self.pattern)
        return self._regex.fullmatch(rel) is not None


def compile_globs(globs: Sequence[str]) -> tuple[GlobRule, ...]:
    """Compile raw glob strings into rules, dropping blanks."""
    return tuple(GlobRule(g) for g in normalize_globs(globs))


def load_ignore_lines(source: Path, filename: str = ".gitignore") -> list[str]:
    """Read the ignore file of the source root, if any.

    Args:
        source (Path): the source root
        filename (str): the ignore file name

    Returns:
        list[str]: the raw lines, or an empty list when the file is absent
    """
    p = source / filename
    if not p.is_file():
        return []
    return p.read_text(encoding="utf-8", errors="replace").splitlines()


def output_ignore_lines(source: Path, output: Path) -> list[str]:
    """Anchored ignore lines keeping the archive (and its chunks) out of itself.

    Args:
        source (Path): the resolved source root
        output (Path): the output path

    Returns:
        list[str]: gitignore lines, empty when the output lives outside ``source``
    """
    target = output if output.is_absolute() else Path.cwd() / output
    try:
        rel = target.resolve().relative_to(source)
    except ValueError:
        return []
    rel_posix = PurePosixPath(rel.as_posix())
    parent = "" if str(rel_posix.parent) == "." else f"{rel_posix.parent}/"
    stem = _escape(rel_posix.stem)
    suffix = _escape(rel_posix.suffix)
    return [f"/{_escape(str(rel_posix))}", f"/{_escape(parent)}{stem}.[0-9][0-9]*{suffix}"]


def _escape(text: str) -> str:
    return "".join("\\" + ch if ch in "[]*?!#\\" else ch for ch in text)


@dataclass(frozen=True)
class FilterSet:
    """Composed ignore, source-only, exclude and include rules.

    Attributes:
        ignore_lines: gitignore-style lines; later lines take precedence.
        include: include globs; empty means "everything".
        exclude: exclude globs.
        source_only: restrict files to known source code extensions.
    """

    ignore_lines: tuple[str, ...] = ()
    include: tuple[GlobRule, ...] = ()
    exclude: tuple[GlobRule, ...] = ()
    source_only: bool = False
    _ignore: pathspec.GitIgnoreSpec = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_ignore", pathspec.GitIgnoreSpec.from_lines(self.ignore_lines))

    @classmethod
    def build(
        cls,
        *,
        ignore_lines: Iterable[str] = (),
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
        source_only: bool = False,
    ) -> FilterSet:
        """Create a filter set whose static ignore names override ``ignore_lines``.

        Args:
            ignore_lines (Iterable[str]): project ignore-file lines
            include (Sequence[str]): include globs
            exclude (Sequence[str]): exclude globs
            source_only (bool): restrict to source code extensions

        Returns:
            FilterSet: the compiled filter set
        """
        return cls(
            ignore_lines=(*ignore_lines, *ALWAYS_IGNORED),
            include=compile_globs(include),
            exclude=compile_globs(exclude),
            source_only=source_only,
        )

    @classmethod
    def from_settings(cls, settings: Settings, source: Path) -> FilterSet:
        """Create the filter set for a run from its settings and the resolved source root."""
        return cls.build(
            ignore_lines=[*load_ignore_lines(source), *output_ignore_lines(source, settings.output)],
            include=settings.include,
            exclude=settings.exclude,
            source_only=settings.source_only,
        )

    def is_ignored(self, rel: str, *, is_dir: bool = False) -> bool:
        """Check a path against the ignore rule set only.

        Args:
            rel (str): source-relative POSIX path
            is_dir (bool): whether the path is a directory

        Returns:
            bool: True if the ignore rules reject the path
        """
        return self._ignore.match_file(rel + "/" if is_dir else rel)

    def decide(self, rel: str) -> Decision:
        """Run the full decision procedure for a file.

        Args:
            rel (str): source-relative POSIX path of a file

        Returns:
            Decision: why the file is rejected, or ``Decision.ACCEPTED``
        """
        if self.is_ignored(rel):
            return Decision.IGNORED
        if self.source_only and not is_source_file(rel):
            return Decision.NOT_SOURCE
        if any(rule.matches(rel) for rule in self.exclude):
            return Decision.EXCLUDED
        if self.include and not any(rule.matches(rel) for rule in self.include):
            return Decision.NOT_INCLUDED
        return Decision.ACCEPTED

    def accepts(self, rel: str) -> bool:
        """Shorthand for ``decide(rel) is Decision.ACCEPTED``."""
        return self.decide(rel) is Decision.ACCEPTED
