"""
Destination folder naming and layout policies.

Everything in this module is pure: paths are computed, never touched.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path, PurePath, PurePosixPath
from typing import Optional, Tuple

from .constants import DEFAULT_RAW_FOLDER, FLATTEN_FOLDERS, RAW_EXTENSIONS


class Layout(Enum):
    """How files are laid out beneath the date folders."""
    COMBINED = "combined"     # raw and standard images share one date folder
    SPLIT_RAW = "split-raw"   # raw files go to <date>/<raw_folder>
    MERGE_RAW = "merge-raw"   # combined, and <date>/<raw_folder> merges into <date>
    FLATTEN = "flatten"       # in place only: lift files out of Video/raw folders

    @classmethod
    def from_name(cls, name: str) -> "Layout":
        for layout in cls:
            if layout.value == name.strip().lower().replace("_", "-"):
                return layout
        raise ValueError(f"Unknown layout: {name!r} (choose from {', '.join(cls.names())})")

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(layout.value for layout in cls)


@dataclass(frozen=True)
class DestinationPolicy:
    layout: Layout = Layout.COMBINED
    raw_folder: str = DEFAULT_RAW_FOLDER
    raw_extensions: Tuple[str, ...] = RAW_EXTENSIONS
    flatten_folders: Tuple[str, ...] = FLATTEN_FOLDERS

    def is_raw(self, file_name: str) -> bool:
        return PurePath(file_name).suffix.lower() in self.raw_extensions


DEFAULT_POLICY = DestinationPolicy()


def format_date_folder(timestamp: datetime) -> str:
    """Format a timestamp as YYYY-MM-DD, independent of locale and timezone."""
    return f"{timestamp.year:04d}-{timestamp.month:02d}-{timestamp.day:02d}"


def resolve(timestamp: datetime, policy: DestinationPolicy = DEFAULT_POLICY,
            file_name: Optional[str] = None) -> PurePosixPath:
    """Compute the relative destination folder for a file captured at timestamp."""
    folder = PurePosixPath(format_date_folder(timestamp))
    if policy.layout is Layout.SPLIT_RAW and file_name and policy.is_raw(file_name):
        folder = folder / policy.raw_folder
    return folder


def is_placed(parent: Path, expected: PurePath) -> bool:
    """Check whether parent already ends with the expected folder components.

    Components are compared by exact name: a folder called "old 2023-07-04"
    does not count as "2023-07-04".
    """
    wanted = expected.parts
    actual = parent.parts
    return len(actual) > len(wanted) and actual[-len(wanted):] == wanted


def in_place_target(parent: Path, expected: PurePath,
                    policy: DestinationPolicy = DEFAULT_POLICY) -> Optional[Path]:
    """Return the directory a file in parent should move to, or None if it is placed.

    Besides the plain parent/<date>[/<raw_folder>] case, this handles switching
    an already-sorted tree between layouts: under SPLIT_RAW a raw file sitting
    in its date folder moves down into the raw sub-folder, and under MERGE_RAW
    a file sitting in a raw sub-folder of the right date moves back up.
    """
    if is_placed(parent, expected):
        return None

    date_folder = expected.parts[0]
    if len(expected.parts) > 1 and parent.name == date_folder:
        return parent.joinpath(*expected.parts[1:])
    if (policy.layout is Layout.MERGE_RAW and parent.name == policy.raw_folder
            and parent.parent.name == date_folder):
        return parent.parent
    return parent.joinpath(*expected.parts)


def flatten_target(parent: Path, policy: DestinationPolicy = DEFAULT_POLICY) -> Optional[Path]:
    """Return the folder a file should be lifted into by the flatten layout."""
    if parent.name in policy.flatten_folders or parent.name == policy.raw_folder:
        return parent.parent
    return None
