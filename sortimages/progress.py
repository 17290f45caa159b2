"""Progress display for a walk whose file count is not known up front."""

from typing import Optional

from rich.progress import Progress, TaskID

from .models import Outcome, ProcessingOutcome

_LABELS = {
    Outcome.MOVED: "Moved",
    Outcome.SKIPPED: "In place",
    Outcome.FAILED: "Failed",
}


class ProgressContext:
    """Open-ended progress task advanced once per processed file."""

    def __init__(self, progress: Optional[Progress] = None, task: Optional[TaskID] = None):
        self.progress = progress
        self.task = task

    @classmethod
    def start(cls, progress: Progress, description: str) -> "ProgressContext":
        return cls(progress, progress.add_task(description, total=None))

    @property
    def is_active(self) -> bool:
        return self.progress is not None and self.task is not None

    def file_done(self, outcome: ProcessingOutcome) -> None:
        """Show the last processed file and count it."""
        if not self.is_active:
            return
        label = _LABELS[outcome.status]
        self.progress.update(self.task, advance=1,
                             description=f"{label}: {outcome.source.name}")
