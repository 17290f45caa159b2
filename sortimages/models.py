"""
Per-file data passed between the walker, the mover and the report.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class FileRecord:
    """A file visited during a walk."""
    path: Path
    parent: Path
    name: str
    suffix: str

    @classmethod
    def from_path(cls, path: Path) -> "FileRecord":
        path = Path(path).absolute()
        return cls(path=path, parent=path.parent, name=path.name, suffix=path.suffix.lower())


class Outcome(Enum):
    MOVED = "moved"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ProcessingOutcome:
    """Result of processing one file."""
    source: Path
    status: Outcome
    destination: Optional[Path] = None
    reason: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def moved(cls, source: Path, destination: Path) -> "ProcessingOutcome":
        return cls(source=source, status=Outcome.MOVED, destination=destination)

    @classmethod
    def skipped(cls, source: Path) -> "ProcessingOutcome":
        return cls(source=source, status=Outcome.SKIPPED, destination=source)

    @classmethod
    def failed(cls, source: Path, reason: str, detail: Optional[str] = None) -> "ProcessingOutcome":
        return cls(source=source, status=Outcome.FAILED, reason=reason, detail=detail)

    @property
    def is_failure(self) -> bool:
        return self.status is Outcome.FAILED
