from __future__ import annotations

from ..core.errors import SourceUnavailable
from ..core.git_runner import SafeGitRunner, require_ok
from ..core.security import ensure_within_root, normalize_relpath


def read_file_at_ref(runner: SafeGitRunner, path: str, ref: str | None = None) -> bytes:
    """
    Read a file's content at a git ref without checking out, or from the working
    copy when `ref` is None.
    """
    rel = normalize_relpath(path)
    if not rel:
        raise ValueError("path is required")

    if ref is None:
        target = ensure_within_root(runner.root, runner.root / rel)
        try:
            return target.read_bytes()
        except OSError as e:
            raise SourceUnavailable(f"Cannot read {rel} from working copy: {e}") from e

    # "./" makes the path relative to the project root rather than the repo top level
    res = require_ok(
        runner.run(["show", f"{ref}:./{rel}"]),
        context=f"read_file_at_ref({rel}@{ref})",
    )
    return res.stdout_bytes


def read_text_at_ref(runner: SafeGitRunner, path: str, ref: str | None = None) -> str:
    return read_file_at_ref(runner, path, ref).decode("utf-8", errors="replace")


def file_exists_at_ref(runner: SafeGitRunner, path: str, ref: str | None = None) -> bool:
    rel = normalize_relpath(path)
    if ref is None:
        return (runner.root / rel).is_file()

    res = runner.run(["cat-file", "-e", f"{ref}:./{rel}"])
    if res.timed_out:
        raise SourceUnavailable(f"file_exists_at_ref({rel}@{ref}) timed out")
    return res.exit_code == 0
