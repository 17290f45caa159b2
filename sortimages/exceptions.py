"""
Exception types raised while sorting images.

Only ArgumentError is fatal; the others are caught at the per-file boundary
in ImageSorter.process_file and turned into failed outcomes.
"""

from pathlib import Path
from typing import Optional


class SortImagesError(Exception):
    """Base class for all sort-images errors."""


class ArgumentError(SortImagesError):
    """Malformed invocation: wrong argument count, bad path, bad option value."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class MetadataUnavailable(SortImagesError):
    """File carries no parseable capture timestamp."""

    def __init__(self, path: Path):
        super().__init__(f"No capture timestamp found in {path}")
        self.path = path


class CollisionError(SortImagesError):
    """A file with the same name already exists at the destination."""

    def __init__(self, source: Path, destination: Path):
        super().__init__(f"Destination already exists: {destination}")
        self.source = source
        self.destination = destination
