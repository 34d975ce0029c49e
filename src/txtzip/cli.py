"""txtzip: bundle a project's text files into archive documents for an LLM.

Overview
--------
Every text file under the source folder that survives the ignore rules
(``.gitignore`` plus a fixed list of always-ignored names), the optional
source-only extension filter and the include/exclude globs is written to a
markdown archive: markdown files verbatim, everything else in fenced code
blocks. ``--plain`` switches to the ``=== Start of File ===`` framing.

With ``--max-size`` the archive is split into numbered chunks
(``out.01.md``, ``out.02.md``, ...); a file cut by a chunk boundary carries
continuation markers on both sides.

Options are resolved from, lowest priority first: defaults, the project's
``.txtzip.yaml``, the ``TXTZIP_ARGS`` environment variable, the command line.

Usage
-----
    txtzip --source ./src --output ./output.md
    txtzip -w                       # overwrite the output file if it exists
    txtzip -S -e                    # source files only, strip empty lines
    txtzip -i "*.ts" -x "src/skip.ts" --tree --max-size 100k
"""

from __future__ import annotations

import argparse
import os
import shlex
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from txtzip import __version__
from txtzip.config import ENV_ARGS_VARIABLE
from txtzip.exceptions import ConfigurationError, TxtzipError
from txtzip.file_manipulation import walk_files
from txtzip.filters import FilterSet
from txtzip.logging import logger, setup_logging
from txtzip.output_construction import build_archive
from txtzip.settings import ENV_FILE, build_settings, find_config_file, load_config_file
from txtzip.writer import write_archives

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from txtzip.settings import Settings


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Every option defaults to ``argparse.SUPPRESS`` so that only the flags
    actually given override the config file.

    Returns:
        argparse.ArgumentParser: the parser
    """
    p = argparse.ArgumentParser(
        prog="txtzip",
        description="Bundle a project's text files into one or more archive documents.",
        epilog=f"Extra arguments can be passed through the {ENV_ARGS_VARIABLE} environment variable.",
        argument_default=argparse.SUPPRESS,
    )
    p.add_argument(
        "-s",
        "--source",
        type=Path,
        help="Source folder to archive (defaults to the current directory).",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file (defaults to text-archive.md, or text-archive.txt with --plain).",
    )
    p.add_argument(
        "-w",
        "--overwrite",
        action=argparse.BooleanOptionalAction,
        help="Overwrite the output file(s) if they exist.",
    )
    p.add_argument(
        "-S",
        "--source-only",
        action=argparse.BooleanOptionalAction,
        help="Only include files with source code related extensions.",
    )
    p.add_argument(
        "-e",
        "--strip-empty-lines",
        action=argparse.BooleanOptionalAction,
        help="Strip empty lines from files.",
    )
    p.add_argument(
        "-i",
        "--include",
        action="append",
        help="Include glob (repeatable). Without '/' it matches file names at any depth.",
    )
    p.add_argument(
        "-x",
        "--exclude",
        action="append",
        help="Exclude glob (repeatable). Without '/' it matches file names at any depth.",
    )
    p.add_argument(
        "-m",
        "--max-size",
        dest="max_chunk_bytes",
        help="Maximum size per output file, e.g. 100k or 1.5MB (0: unbounded).",
    )
    p.add_argument(
        "-t",
        "--tree",
        action=argparse.BooleanOptionalAction,
        help="Prepend a directory tree of the selected files.",
    )
    p.add_argument(
        "--format",
        choices=["markdown", "plain"],
        help="Archive framing.",
    )
    p.add_argument(
        "-p",
        "--plain",
        dest="format",
        action="store_const",
        const="plain",
        help="Use the plain '=== Start of File ===' framing.",
    )
    p.add_argument("--config", type=Path, help="Config file (defaults to <source>/.txtzip.yaml).")
    p.add_argument("--log-file", type=str, help="Log file path.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-file decisions.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def env_args(environ: Mapping[str, str]) -> list[str]:
    """Split the ``TXTZIP_ARGS`` environment variable like a shell would.

    Args:
        environ (Mapping[str, str]): the environment

    Raises:
        ConfigurationError: if the variable has unbalanced quotes

    Returns:
        list[str]: the extra arguments, possibly empty
    """
    raw = environ.get(ENV_ARGS_VARIABLE, "")
    try:
        return shlex.split(raw)
    except ValueError as e:
        msg = f"Cannot parse {ENV_ARGS_VARIABLE}: {e}"
        raise ConfigurationError(msg) from e


def parse_args(argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Resolve the run options from config file, environment and arguments.

    Arguments from ``TXTZIP_ARGS`` are parsed before the command line, so the
    command line wins for single-valued options and both contribute to
    repeatable ones.

    Args:
        argv (Sequence[str] | None): command-line arguments, ``sys.argv[1:]`` when None
        environ (Mapping[str, str] | None): the environment, ``os.environ`` when None

    Raises:
        ConfigurationError: if the config file or an option value is invalid

    Returns:
        Settings: the finalized options
    """
    environ = os.environ if environ is None else environ
    args = [*env_args(environ), *(sys.argv[1:] if argv is None else argv)]
    overrides: dict[str, Any] = vars(build_parser().parse_args(args))

    config_path: Path | None = overrides.pop("config", None)
    source = Path(overrides.get("source", Path.cwd()))
    if config_path is None:
        config_path = find_config_file(source)
    elif not config_path.is_file():
        msg = f"Config file not found: {config_path}"
        raise ConfigurationError(msg)

    file_options = load_config_file(config_path) if config_path is not None else {}
    return build_settings(file_options, overrides)


def run(settings: Settings) -> list[Path]:
    """Select, format, chunk and write the archive.

    Args:
        settings (Settings): the finalized options

    Raises:
        ConfigurationError: if the source folder does not exist

    Returns:
        list[Path]: the written archive files
    """
    source = settings.source.resolve()
    if not source.is_dir():
        msg = f"Source folder not found: {settings.source}"
        raise ConfigurationError(msg)

    filters = FilterSet.from_settings(settings, source)
    files = walk_files(source, filters)
    logger.info("Selected files", source=str(source), files=len(files))

    buffers = build_archive(settings, source, files)
    return write_archives([b.content for b in buffers], settings.output, overwrite=settings.overwrite)


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point.

    Args:
        argv (Sequence[str] | None): optional CLI arguments

    Returns:
        int: process exit code
    """
    if ENV_FILE:
        load_dotenv(ENV_FILE, override=False)
    try:
        settings = parse_args(argv)
        if settings.log_file or settings.verbose:
            setup_logging(settings.log_file or None, verbose=settings.verbose)
        written = run(settings)
    except (TxtzipError, OSError) as e:
        logger.error("Text archive failed", error=str(e))
        sys.stderr.write(f"Error: {e}\n")
        return 1

    print(f"Text archive created successfully: {len(written)} file(s) written")
    for path in written:
        print(f"  {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
