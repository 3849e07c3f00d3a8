from __future__ import annotations

from ..core.git_runner import SafeGitRunner, require_ok
from ..core.parsers import parse_ahead_behind


def diff_range(runner: SafeGitRunner, target: str, source: str | None = None) -> str:
    """
    Raw `--name-status` diff between `target` and `source`, or between `target`
    and the working copy when `source` is None. Paths are project-relative.
    """
    args = ["diff", "--name-status", "--no-renames", "--no-color", "--relative", target]
    if source:
        args.append(source)

    res = require_ok(runner.run(args), context="diff_range(diff)")
    return res.stdout


def ahead_behind(runner: SafeGitRunner, target: str, source: str | None = None) -> tuple[int, int]:
    """
    (behind, ahead) of `source` (HEAD when None) relative to `target`.
    """
    rng = f"{target}...{source or 'HEAD'}"
    res = require_ok(
        runner.run(["rev-list", "--left-right", "--count", rng]),
        context="ahead_behind(rev-list)",
    )
    return parse_ahead_behind(res.stdout)
