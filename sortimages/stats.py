"""
Run report: per-file outcomes and pruned directories for one run.
"""

import threading
from pathlib import Path
from typing import Dict, List

from .models import Outcome, ProcessingOutcome


class RunReport:
    """Collects the outcome of every file visited during a run."""

    def __init__(self):
        self._outcomes: List[ProcessingOutcome] = []
        self._pruned: List[Path] = []
        self._lock = threading.Lock()

    def record(self, outcome: ProcessingOutcome) -> None:
        """Record the outcome of one file."""
        with self._lock:
            self._outcomes.append(outcome)

    def record_pruned(self, directory: Path) -> None:
        """Record a directory deleted because the run left it empty."""
        with self._lock:
            self._pruned.append(directory)

    @property
    def outcomes(self) -> List[ProcessingOutcome]:
        return list(self._outcomes)

    @property
    def pruned(self) -> List[Path]:
        return list(self._pruned)

    def with_status(self, status: Outcome) -> List[ProcessingOutcome]:
        return [outcome for outcome in self._outcomes if outcome.status is status]

    def get_counts(self) -> Dict[str, int]:
        """Get the number of files per outcome."""
        counts = {status.value: 0 for status in Outcome}
        for outcome in self._outcomes:
            counts[outcome.status.value] += 1
        return counts

    def has_errors(self) -> bool:
        """Check if any file failed to process."""
        return any(outcome.is_failure for outcome in self._outcomes)

    # Individual counts for the summary table
    def get_moved(self) -> int:
        return len(self.with_status(Outcome.MOVED))

    def get_skipped(self) -> int:
        return len(self.with_status(Outcome.SKIPPED))

    def get_failed(self) -> int:
        return len(self.with_status(Outcome.FAILED))

    def get_total_files(self) -> int:
        return len(self._outcomes)
