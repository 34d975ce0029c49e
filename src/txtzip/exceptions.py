from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TxtzipError(Exception):
    """Base exception for errors in the txtzip package."""

    message: str = "txtzip failed."

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ConfigurationError(TxtzipError):
    """Raised when options, the config file or a size string cannot be resolved."""

    message: str = "Invalid configuration."


@dataclass(frozen=True)
class OutputCollisionError(TxtzipError):
    """Raised when an archive target already exists and overwriting is not allowed."""

    path: Path = Path()
    message: str = "Output file already exists; use --overwrite to replace it."

    def __str__(self) -> str:
        return f"{self.message} ({self.path})"
