"""Concatenate a project's text files into size-bounded archive documents."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("txtzip")
except PackageNotFoundError:
    __version__ = "0.0.0"
