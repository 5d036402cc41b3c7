"""Exception hierarchy shared by indexdiff modules."""

from __future__ import annotations


class IndexDiffError(RuntimeError):
    """Base class for indexdiff failures."""


class ConfigError(IndexDiffError):
    """Raised when accounts or settings are missing or invalid."""


class RemoteError(IndexDiffError):
    """Raised when the remote search service rejects or fails a request."""
