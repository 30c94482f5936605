"""Core data models shared across gocmt components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class AnnotationEntry:
    """A comment proposed by the annotation service.

    ``position`` is a literal fragment expected to appear in the source of the
    declaration the comment belongs to.
    """

    position: str
    comment: str


@dataclass
class SourceFile:
    """A Go file owned by a single pipeline worker."""

    path: Path
    raw: bytes
    text: str = ""


class FileState(str, Enum):
    """Pipeline states for a single file, in processing order."""

    PENDING = "pending"
    READING = "reading"
    FORMATTING = "formatting"
    PARSING = "parsing"
    ELIDING = "eliding"
    AWAITING_ANNOTATION = "awaiting_annotation"
    MERGING = "merging"
    REFORMATTING = "reformatting"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (FileState.DONE, FileState.FAILED)


@dataclass(frozen=True)
class FileOutcome:
    """Terminal result of processing one file."""

    path: Path
    state: FileState
    stage: Optional[str] = None
    error: Optional[str] = None
    comments_added: int = 0

    def __post_init__(self) -> None:
        if not self.state.terminal:
            raise ValueError(f"outcome state must be terminal, got {self.state.value}")

    @property
    def ok(self) -> bool:
        return self.state is FileState.DONE


@dataclass
class ProgressState:
    """Completion counters advanced once per finished file."""

    total: int
    completed: int = 0

    def advance(self) -> None:
        if self.completed >= self.total:
            raise ValueError("progress already complete")
        self.completed += 1

    @property
    def finished(self) -> bool:
        return self.completed >= self.total

    @property
    def percent(self) -> float:
        if self.total <= 0 or self.completed >= self.total:
            return 100.0
        return self.completed / self.total * 100


@dataclass(frozen=True)
class RunSummary:
    """Aggregate result of a batch run."""

    total: int
    outcomes: Tuple[FileOutcome, ...] = field(default_factory=tuple)
    nothing_to_do: bool = False

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.ok)
