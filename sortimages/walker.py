"""
Depth-first directory traversal with optional pruning of emptied directories.
"""

import os
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .constants import get_logger

logger = get_logger()

FileCallback = Callable[[Path], None]
PruneCallback = Callable[[Path], None]


def list_directory(directory: Path) -> Tuple[List[Path], List[Path]]:
    """Return (subdirectories, regular files) of a directory, sorted by name.

    Symlinked directories are reported as neither, so the walk never leaves
    the tree it was given.
    """
    subdirs = []
    files = []
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(Path(entry.path))
            elif entry.is_file(follow_symlinks=False):
                files.append(Path(entry.path))
    return sorted(subdirs), sorted(files)


def walk(root: Path, per_file: FileCallback, prune_empty_dirs: bool = False,
         on_prune: Optional[PruneCallback] = None, exclude: Optional[Path] = None) -> None:
    """Visit every file below root, subdirectories before files at each level.

    With prune_empty_dirs, each directory below root that is empty once its
    own contents have been handled is removed. Removal is non-recursive, so
    a directory still holding anything (a file that failed to move, or one
    that appeared meanwhile) always survives.

    A subdirectory equal to exclude is not entered, which keeps files that
    were just moved into a destination inside root from being visited again.
    """
    _walk(Path(root), per_file, prune_empty_dirs, on_prune, exclude, is_root=True)


def _walk(directory: Path, per_file: FileCallback, prune_empty_dirs: bool,
          on_prune: Optional[PruneCallback], exclude: Optional[Path], is_root: bool) -> None:
    try:
        subdirs, files = list_directory(directory)
    except OSError as e:
        logger.error(f"Cannot read directory {directory}: {e}")
        return

    for subdir in subdirs:
        if subdir == exclude:
            continue
        _walk(subdir, per_file, prune_empty_dirs, on_prune, exclude, is_root=False)

    for file_path in files:
        per_file(file_path)

    if prune_empty_dirs and not is_root:
        remove_if_empty(directory, on_prune)


def prune_empty(root: Path, on_prune: Optional[PruneCallback] = None) -> None:
    """Remove every empty directory below root, deepest first."""
    root = Path(root)
    for thisdir, _, _ in os.walk(root, topdown=False):
        directory = Path(thisdir)
        if directory != root:
            remove_if_empty(directory, on_prune)


def remove_if_empty(directory: Path, on_prune: Optional[PruneCallback] = None) -> bool:
    """Delete directory if it has no entries at all. Returns True if deleted."""
    try:
        if any(directory.iterdir()):
            return False
        directory.rmdir()
    except OSError as e:
        # Repopulated between the check and the rmdir, or not permitted
        logger.warning(f"Could not delete {directory}: {e}")
        return False

    if on_prune:
        on_prune(directory)
    return True
