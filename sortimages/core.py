"""
Core sorting functionality: walk a tree and move each file to its date folder.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from rich.logging import RichHandler
from rich.progress import Progress
from rich.table import Table

from .constants import UNABLE_TO_PROCESS, get_console, get_logger
from .destinations import DEFAULT_POLICY, DestinationPolicy, Layout, flatten_target, resolve
from .exceptions import ArgumentError, MetadataUnavailable
from .file_operations import FileOperations
from .models import FileRecord, ProcessingOutcome
from .progress import ProgressContext
from .stats import RunReport
from .timestamps import read_capture_time
from .walker import prune_empty, walk


class ImageSorter:
    """Sorts photos and videos into YYYY-MM-DD folders by capture date.

    Two modes are offered: copy_tree moves every file below a source
    directory into date folders under a separate destination, and reorganize
    shuffles files into date folders inside their current tree, deleting the
    directories that end up empty. A failure only ever affects the file it
    happened to; the run carries on and the RunReport says what went wrong.
    """

    def __init__(self, policy: DestinationPolicy = DEFAULT_POLICY, dry_run: bool = False,
                 workers: int = 1, verbose: bool = False, show_progress: bool = True):
        self.policy = policy
        self.dry_run = dry_run
        self.workers = max(1, workers)
        self.show_progress = show_progress
        self._root: Optional[Path] = None

        self.console = get_console()
        self.logger = get_logger()
        self._setup_logging(verbose)

        self.file_ops = FileOperations(dry_run=dry_run, policy=policy)

    def _setup_logging(self, verbose: bool) -> None:
        """Send program messages to the console, one line per event."""
        if not any(isinstance(h, RichHandler) for h in self.logger.handlers):
            console_handler = RichHandler(console=self.console, show_time=False,
                                          show_level=False, show_path=False, markup=False)
            console_handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(console_handler)
        self.logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    def copy_tree(self, source: Path, dest: Path) -> RunReport:
        """Move every file below source into dest/<YYYY-MM-DD>/."""
        if self.policy.layout is Layout.FLATTEN:
            raise ArgumentError("The flatten layout only applies to in-place reorganization")

        source = Path(source).absolute()
        dest = Path(dest).absolute()
        self.logger.info(f"Sorting {source} -> {dest}{' (dry run)' if self.dry_run else ''}")
        return self._run(source, dest_root=dest, prune=False)

    def reorganize(self, directory: Path) -> RunReport:
        """Move every file below directory into a date folder beside it."""
        directory = Path(directory).absolute()
        self.logger.info(f"Reorganizing {directory} in place{' (dry run)' if self.dry_run else ''}")
        return self._run(directory, dest_root=None, prune=not self.dry_run)

    def process_file(self, file_path: Path, dest_root: Optional[Path] = None) -> ProcessingOutcome:
        """Process a single file; never raises."""
        record = FileRecord.from_path(file_path)
        try:
            outcome = self._relocate(record, dest_root)
        except Exception as e:
            outcome = ProcessingOutcome.failed(record.path, UNABLE_TO_PROCESS, str(e))

        if outcome.is_failure:
            self.logger.error(f"Unable to process: {record.path} ({outcome.detail})")
        return outcome

    def _relocate(self, record: FileRecord, dest_root: Optional[Path]) -> ProcessingOutcome:
        if self.policy.layout is Layout.FLATTEN:
            target_dir = flatten_target(record.parent, self.policy)
            if target_dir is None or record.parent == self._root:
                return ProcessingOutcome.skipped(record.path)
            return self.file_ops.move_to_directory(record, target_dir)

        capture_time = read_capture_time(record.path)
        if capture_time is None:
            raise MetadataUnavailable(record.path)

        expected = resolve(capture_time, self.policy, record.name)
        return self.file_ops.move_into(record, dest_root, expected)

    def _run(self, root: Path, dest_root: Optional[Path], prune: bool) -> RunReport:
        report = RunReport()
        self._root = root

        def on_prune(directory: Path) -> None:
            self.logger.info(f"Deleting {directory}")
            report.record_pruned(directory)

        with self._progress() as progress_ctx:
            if self.workers == 1:
                def per_file(file_path: Path) -> None:
                    outcome = self.process_file(file_path, dest_root)
                    report.record(outcome)
                    progress_ctx.file_done(outcome)

                walk(root, per_file, prune_empty_dirs=prune, on_prune=on_prune, exclude=dest_root)
            else:
                with ThreadPoolExecutor(max_workers=self.workers) as executor:
                    futures = []

                    def submit(file_path: Path) -> None:
                        futures.append(executor.submit(self.process_file, file_path, dest_root))

                    walk(root, submit, exclude=dest_root)
                    for future in as_completed(futures):
                        outcome = future.result()
                        report.record(outcome)
                        progress_ctx.file_done(outcome)

                # Only once every file has landed, so no worker can still
                # be about to write into a directory being removed
                if prune:
                    prune_empty(root, on_prune)

        self._root = None
        return report

    @contextmanager
    def _progress(self) -> Iterator[ProgressContext]:
        if not self.show_progress:
            yield ProgressContext()
            return

        with Progress(console=self.console, transient=True) as progress:
            yield ProgressContext.start(progress, "Sorting files...")

    def print_summary(self, report: RunReport) -> None:
        """Print processing summary."""
        table = Table(title="Processing Summary")
        table.add_column("Category", style="cyan")
        table.add_column("Count", style="green")

        table.add_row("Moved", str(report.get_moved()))
        table.add_row("Already in place", str(report.get_skipped()))
        table.add_row("Failed", str(report.get_failed()))
        table.add_row("Directories deleted", str(len(report.pruned)))
        table.add_row("Total files", str(report.get_total_files()))

        self.console.print(table)

        if report.has_errors():
            self.console.print(f"\n[red]{report.get_failed()} file(s) could not be processed "
                               f"and were left where they were[/red]")
