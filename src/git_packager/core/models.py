from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal


DiffStatus = Literal["A", "M", "D"]


@dataclass(frozen=True)
class GitRunResult:
    argv: list[str]
    root: str
    stdout_bytes: bytes
    stderr: str
    exit_code: int
    duration_ms: int
    timed_out: bool

    @property
    def stdout(self) -> str:
        return self.stdout_bytes.decode("utf-8", errors="replace")

    def to_dict(self) -> dict[str, Any]:
        return {
            "argv": self.argv,
            "root": self.root,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exit_code": self.exit_code,
            "duration_ms": self.duration_ms,
            "timed_out": self.timed_out,
        }


@dataclass(frozen=True)
class RawDiffEntry:
    status: str
    path: str

    @property
    def is_deletion(self) -> bool:
        return self.status.startswith("D")


@dataclass(frozen=True)
class ClassifiedChangeSet:
    """
    Paths to package (`changed`) and paths to declare for removal (`removed`).
    The two sets never share a path.
    """
    changed: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        overlap = self.changed & self.removed
        if overlap:
            raise ValueError(f"Path(s) both changed and removed: {sorted(overlap)}")

    @property
    def is_empty(self) -> bool:
        return not self.changed and not self.removed

    def to_dict(self) -> dict[str, Any]:
        return {
            "changed": sorted(self.changed),
            "removed": sorted(self.removed),
        }


@dataclass
class StagingProject:
    root: Path
    revision: str | None
    staged: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "revision": self.revision,
            "staged": list(self.staged),
            "unresolved": list(self.unresolved),
            "missing": list(self.missing),
        }
