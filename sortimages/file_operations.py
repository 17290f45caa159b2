"""
Safe file relocation: no overwrite, no partial copies, no lost files.
"""

import errno
import os
import shutil
from pathlib import Path, PurePath
from typing import Optional

from .constants import UNABLE_TO_PROCESS, get_logger
from .destinations import DEFAULT_POLICY, DestinationPolicy, in_place_target
from .exceptions import CollisionError, SortImagesError
from .models import FileRecord, ProcessingOutcome

COPY_BUFFER_SIZE = 1024 * 1024


class FileOperations:
    """Moves files into destination folders and reports what happened.

    A move is all-or-nothing. On the same filesystem the file is hard-linked
    at the destination (an exclusive create, so an existing file there is
    never replaced) and then unlinked at the source. Where hard links are
    not possible, e.g. across devices, the bytes are copied into an
    exclusively created file, synced and verified before the source goes.
    """

    def __init__(self, dry_run: bool = False, policy: DestinationPolicy = DEFAULT_POLICY):
        self.dry_run = dry_run
        self.policy = policy
        self.logger = get_logger()

    def move_into(self, record: FileRecord, dest_root: Optional[Path],
                  expected: PurePath) -> ProcessingOutcome:
        """Move a file into its expected folder.

        With dest_root the file goes to dest_root/expected. Without it the
        tree is reorganized in place: a file whose parent already is the
        expected folder is skipped without touching the disk.
        """
        if dest_root is None:
            target_dir = in_place_target(record.parent, expected, self.policy)
            if target_dir is None:
                self.logger.debug(f"Already in place: {record.path}")
                return ProcessingOutcome.skipped(record.path)
        else:
            target_dir = Path(dest_root).joinpath(*expected.parts)

        return self.move_to_directory(record, target_dir)

    def move_to_directory(self, record: FileRecord, target_dir: Path) -> ProcessingOutcome:
        """Move a file into target_dir under its own name."""
        dest = target_dir / record.name
        if dest == record.path:
            return ProcessingOutcome.skipped(record.path)

        try:
            self.ensure_directory(target_dir)
            self.move_file_safely(record.path, dest)
        except (SortImagesError, OSError) as e:
            return ProcessingOutcome.failed(record.path, UNABLE_TO_PROCESS, str(e))

        return ProcessingOutcome.moved(record.path, dest)

    def ensure_directory(self, directory: Path) -> None:
        """Create directory and parents if needed; concurrent creation is fine."""
        if not self.dry_run:
            directory.mkdir(parents=True, exist_ok=True)

    def move_file_safely(self, source: Path, dest: Path) -> None:
        """Move source to dest, raising CollisionError if dest already exists.

        On any error the source is left untouched and dest is left as it
        was before the call.
        """
        if self.dry_run:
            if dest.exists():
                raise CollisionError(source, dest)
            self.logger.info(f"[dry-run] {source} -> {dest}")
            return

        try:
            os.link(source, dest)
        except FileExistsError:
            raise CollisionError(source, dest)
        except (OSError, NotImplementedError) as e:
            # Cross-device, or a filesystem without hard links
            self.logger.debug(f"Hard link unavailable for {source} ({e}), copying instead")
            self._copy_exclusive(source, dest)
        else:
            self._unlink_source(source, dest)

        self.logger.info(f"{source} -> {dest}")

    def _copy_exclusive(self, source: Path, dest: Path) -> None:
        created = False
        try:
            with open(source, 'rb') as src, open(dest, 'xb') as dst:
                created = True
                shutil.copyfileobj(src, dst, COPY_BUFFER_SIZE)
                dst.flush()
                os.fsync(dst.fileno())
            shutil.copystat(source, dest)

            expected_size = source.stat().st_size
            if dest.stat().st_size != expected_size:
                raise OSError(errno.EIO, f"Size mismatch after copy: {dest}")
        except FileExistsError:
            if created:
                self._discard(dest)
                raise
            raise CollisionError(source, dest)
        except BaseException:
            if created:
                self._discard(dest)
            raise

        self._unlink_source(source, dest)

    def _unlink_source(self, source: Path, dest: Path) -> None:
        """Remove the source once dest holds the data; undo dest if that fails."""
        try:
            source.unlink()
        except OSError:
            self._discard(dest)
            raise

    def _discard(self, dest: Path) -> None:
        try:
            dest.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not remove {dest}: {e}")
