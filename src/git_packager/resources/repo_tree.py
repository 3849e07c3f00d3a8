from __future__ import annotations

from ..core.git_runner import SafeGitRunner, require_ok
from ..core.security import normalize_relpath


def _lines(text: str) -> set[str]:
    return {ln.strip() for ln in text.splitlines() if ln.strip()}


def repo_tree(runner: SafeGitRunner, directory: str, ref: str | None = None) -> tuple[str, ...]:
    """
    Every file under `directory` at `ref` (`git ls-tree -r`), or in the working copy
    when `ref` is None. Paths are project-relative, posix style and sorted.

    The working copy is what git would see: tracked files still on disk plus untracked
    files not excluded by .gitignore.
    """
    rel = normalize_relpath(directory)

    if ref is None:
        present = require_ok(
            runner.run(["ls-files", "--cached", "--others", "--exclude-standard", "--", f"{rel}/"]),
            context=f"repo_tree({rel}@working copy)",
        )
        deleted = require_ok(
            runner.run(["ls-files", "--deleted", "--", f"{rel}/"]),
            context=f"repo_tree({rel}@working copy, deleted)",
        )
        return tuple(sorted(_lines(present.stdout) - _lines(deleted.stdout)))

    res = require_ok(
        runner.run(["ls-tree", "-r", "--name-only", ref, "--", f"{rel}/"]),
        context=f"repo_tree({rel}@{ref})",
    )
    return tuple(sorted(_lines(res.stdout)))
