"""podcast-trends: US podcast trends with Japanese narration."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("podcast-trends")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = ["__version__"]
