from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import find_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from txtzip.config import CONFIG_FILE_NAMES, DEFAULT_OUTPUT_NAME
from txtzip.exceptions import ConfigurationError

ENV_FILE = find_dotenv(usecwd=True)

_SIZE_PATTERN = re.compile(r"^(?P<number>\d+(?:\.\d+)?)\s*(?P<unit>[KMG]?)B?$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3}

# Config keys spelled like their command-line flag.
_CONFIG_ALIASES = {"max_size": "max_chunk_bytes"}


def parse_size(value: str | int) -> int:
    """Convert a human size string such as ``"64k"`` or ``"1.5MB"`` to bytes.

    Units are 1024 based; a bare number is a byte count. ``0`` means "no limit".

    Args:
        value (str | int): The size to convert.

    Raises:
        ValueError: If the value is negative or not a recognised size string.

    Returns:
        int: The size in bytes.
    """
    if isinstance(value, int):
        if value < 0:
            msg = f"Size must not be negative, got: {value}"
            raise ValueError(msg)
        return value
    m = _SIZE_PATTERN.match(value.strip())
    if not m:
        msg = f"Invalid size value: {value!r} (expected e.g. 500, 64k, 1.5MB, 2G)"
        raise ValueError(msg)
    return int(float(m.group("number")) * _SIZE_UNITS[m.group("unit").upper()])


class Settings(BaseModel):
    """Finalized options for one archiving run."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True, extra="forbid")

    source: Path = Field(default_factory=Path.cwd, description="Source folder to archive.")
    output: Path = Field(
        default=Path(f"{DEFAULT_OUTPUT_NAME}.md"),
        description="Output file; chunk indexes are inserted before its extension.",
    )
    overwrite: bool = Field(default=False, description="Overwrite existing output files.")
    source_only: bool = Field(default=False, description="Only include source code extensions.")
    strip_empty_lines: bool = Field(default=False, description="Strip empty lines from files.")
    include: list[str] = Field(default_factory=list, description="Include glob.")
    exclude: list[str] = Field(default_factory=list, description="Exclude glob.")
    max_chunk_bytes: int = Field(default=0, ge=0, description="Maximum bytes per output file (0: unbounded).")
    tree: bool = Field(default=False, description="Prepend a directory tree.")
    format: Literal["markdown", "plain"] = Field(default="markdown", description="Archive framing.")
    log_file: str = Field(default="", description="Log file path.")
    verbose: bool = Field(default=False, description="Debug logging.")

    @model_validator(mode="before")
    @classmethod
    def _default_output_for_format(cls, data: Any) -> Any:  # noqa: ANN401
        if isinstance(data, dict) and "output" not in data and data.get("format") == "plain":
            return {**data, "output": Path(f"{DEFAULT_OUTPUT_NAME}.txt")}
        return data

    @field_validator("max_chunk_bytes", mode="before")
    @classmethod
    def _parse_max_chunk_bytes(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            return parse_size(value)
        return value

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            return [value]
        return value


def find_config_file(source: Path) -> Path | None:
    """Locate the project config file in ``source``.

    Args:
        source (Path): The source folder.

    Returns:
        Path | None: The first existing config file name, or None.
    """
    for name in CONFIG_FILE_NAMES:
        candidate = source / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a mapping of ``Settings`` field names.

    Dashed keys (``strip-empty-lines``) are accepted as aliases of the
    underscored field names, and ``max-size`` stands for ``max_chunk_bytes``
    as on the command line. Relative ``source`` and ``output`` values are
    resolved against the config file's directory.

    Args:
        path (Path): The config file.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML, or
            does not contain a mapping.

    Returns:
        dict[str, Any]: The raw option values.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        msg = f"Cannot load config file {path}: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a mapping, got {type(data).__name__}"
        raise ConfigurationError(msg)

    out: dict[str, Any] = {}
    for k, v in data.items():
        key = str(k).replace("-", "_")
        out[_CONFIG_ALIASES.get(key, key)] = v
    for key in ("source", "output"):
        if key in out and not Path(str(out[key])).is_absolute():
            out[key] = path.parent / str(out[key])
    return out


def build_settings(*layers: dict[str, Any]) -> Settings:
    """Merge option layers (later wins) into a validated ``Settings``.

    Args:
        *layers (dict[str, Any]): Option mappings, lowest priority first.

    Raises:
        ConfigurationError: If the merged options do not validate.

    Returns:
        Settings: The finalized options.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer)
    try:
        return Settings(**merged)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg) from e
