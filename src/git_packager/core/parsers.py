from __future__ import annotations

import re
from typing import Iterable

from .models import RawDiffEntry


def parse_name_status(lines: Iterable[str]) -> list[RawDiffEntry]:
    """
    Parses `git diff --name-status --no-renames` lines:
      M\tfile
      A\tfile
      D\tfile
    Lines without a path are dropped.
    """
    out: list[RawDiffEntry] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        parts = line.split("\t")
        status = parts[0].strip()
        path = parts[1] if len(parts) > 1 else ""
        if not path:
            continue
        out.append(RawDiffEntry(status=status, path=path))
    return out


def parse_ahead_behind(text: str) -> tuple[int, int]:
    """
    Parses `git rev-list --left-right --count left...right` output ("3\t5").
    Returns (left_only, right_only): commits only in the left ref, then only in the right.
    """
    parts = [p for p in re.split(r"\s+", text.strip()) if p]
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Unexpected rev-list --count output: {text!r}")
    return int(parts[0]), int(parts[1])
