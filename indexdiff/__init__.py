"""indexdiff package initialization."""

from __future__ import annotations

from .api import (
    ComparisonReport,
    ConfigError,
    IndexDiffError,
    RemoteError,
    compare,
    run_comparison,
    stale_indices,
)

__all__ = [
    "__version__",
    "ComparisonReport",
    "ConfigError",
    "IndexDiffError",
    "RemoteError",
    "compare",
    "get_version",
    "run_comparison",
    "stale_indices",
]

__version__ = "0.3.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
