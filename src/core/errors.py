"""Singerframe exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class SingerFrameError(Exception):
    """Base exception for all singerframe failures."""


class EtlConfigError(SingerFrameError):
    """Raised for invalid runtime configuration."""


class CatalogError(SingerFrameError):
    """Raised when a catalog or one of its streams is unavailable."""


class InputReadError(SingerFrameError):
    """Raised when a stream input file cannot be read."""


class SnapshotStoreError(SingerFrameError):
    """Raised for snapshot load and persistence failures."""


class TypeCoercionError(SnapshotStoreError):
    """Raised when merged snapshot columns cannot be cast to a target dtype."""


class ExportError(SingerFrameError):
    """Raised for output export failures."""
