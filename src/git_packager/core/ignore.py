from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import pathspec


def _clean_patterns(lines: Iterable[str]) -> list[str]:
    patterns: list[str] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


@dataclass(frozen=True)
class IgnoreFilter:
    """
    Project-level ignore rules in gitignore syntax (the `.forceignore` file).
    """
    patterns: tuple[str, ...] = ()
    _spec: pathspec.GitIgnoreSpec = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_spec", pathspec.GitIgnoreSpec.from_lines(self.patterns))

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "IgnoreFilter":
        return cls(patterns=tuple(_clean_patterns(lines)))

    @classmethod
    def load(cls, ignore_path: Path) -> "IgnoreFilter":
        """A missing file means nothing is ignored."""
        if not ignore_path.is_file():
            return cls()
        return cls.from_lines(ignore_path.read_text(encoding="utf-8").splitlines())

    def ignores(self, path: str) -> bool:
        return bool(self.patterns) and self._spec.match_file(path)
