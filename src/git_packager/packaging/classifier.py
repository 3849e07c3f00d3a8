from __future__ import annotations

from pathlib import PurePosixPath

from ..core.config import PackagerConfig
from ..core.git_runner import SafeGitRunner
from ..core.logging import get_logger
from ..core.logging_tags import DIFF
from ..core.models import ClassifiedChangeSet, RawDiffEntry
from ..core.parsers import parse_name_status
from ..core.whitespace import has_non_whitespace_changes
from ..resources import read_text_at_ref

logger = get_logger(__name__)


def is_packageable(path: str, config: PackagerConfig) -> bool:
    """Hidden files, ignored files and files outside every source root never ship."""
    if any(part.startswith(".") for part in PurePosixPath(path).parts) or config.ignore.ignores(path):
        return False
    return config.project.in_source_roots(path)


def _blob_pair(
    runner: SafeGitRunner,
    entry: RawDiffEntry,
    target: str,
    source: str | None,
) -> tuple[str, str]:
    # an added file has no target blob, a deleted one has no source blob
    before = "" if entry.status.startswith("A") else read_text_at_ref(runner, entry.path, target)
    after = "" if entry.is_deletion else read_text_at_ref(runner, entry.path, source)
    return before, after


def classify(
    diff_text: str,
    *,
    config: PackagerConfig,
    runner: SafeGitRunner,
    target: str,
    source: str | None = None,
    ignore_whitespace: bool = False,
) -> ClassifiedChangeSet:
    """
    Split raw `--name-status` output into changed and removed paths.
    Raises SourceUnavailable when a blob needed for whitespace comparison can't be read.
    """
    routed: dict[str, bool] = {}
    skipped = 0

    for entry in parse_name_status(diff_text.splitlines()):
        if not is_packageable(entry.path, config):
            skipped += 1
            continue

        if ignore_whitespace:
            before, after = _blob_pair(runner, entry, target, source)
            if not has_non_whitespace_changes(before, after):
                logger.debug(f"{DIFF} whitespace-only change skipped: {entry.path}")
                skipped += 1
                continue

        routed[entry.path] = entry.is_deletion

    changed = frozenset(p for p, deleted in routed.items() if not deleted)
    removed = frozenset(p for p, deleted in routed.items() if deleted)
    logger.info(f"{DIFF} {len(changed)} changed, {len(removed)} removed, {skipped} skipped")
    return ClassifiedChangeSet(changed=changed, removed=removed)
