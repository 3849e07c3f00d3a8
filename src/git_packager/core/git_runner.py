from __future__ import annotations

import os
import signal
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .errors import GitPolicyError, SourceUnavailable
from .logging import get_logger
from .logging_tags import GIT
from .models import GitRunResult
from .security import resolve_root

logger = get_logger(__name__)


def _kill_process_tree_windows(pid: int) -> None:
    """
    Kill a process tree on Windows (git and the converter may spawn helper
    processes such as credential managers, node, pagers, etc.).
    """
    subprocess.run(
        ["taskkill", "/PID", str(pid), "/T", "/F"],
        capture_output=True,
        text=True,
    )


def _kill_process_group_posix(p: subprocess.Popen) -> None:
    """
    Kill entire process group on POSIX when start_new_session=True.
    Fallbacks to p.kill() if group kill fails.
    """
    try:
        os.killpg(p.pid, signal.SIGKILL)
    except OSError:
        try:
            p.kill()
        except OSError:
            pass


def _kill(p: subprocess.Popen) -> None:
    if os.name == "nt":
        _kill_process_tree_windows(p.pid)
    else:
        _kill_process_group_posix(p)


def require_ok(res: GitRunResult, context: str) -> GitRunResult:
    if res.timed_out:
        raise SourceUnavailable(f"{context} timed out: {' '.join(res.argv)}")
    if res.exit_code != 0:
        raise SourceUnavailable(f"{context} failed: {res.stderr.strip()}")
    return res


def run_process(
    *,
    argv: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    timeout_s: float | None,
) -> tuple[bytes, str, int, bool]:
    """
    Run a command using Popen + communicate(timeout) so that a timeout, when
    configured, is hard and leaves no stuck process behind.
    Returns: (stdout, stderr, exit_code, timed_out)
    """
    # POSIX: allow killing full process group
    popen_kwargs: dict = {}
    if os.name != "nt":
        popen_kwargs["start_new_session"] = True

    try:
        p = subprocess.Popen(
            argv,
            cwd=str(cwd),
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            shell=False,
            **popen_kwargs,
        )
    except FileNotFoundError as e:
        raise SourceUnavailable(f"{argv[0]} executable not found in PATH.") from e
    except OSError as e:
        raise SourceUnavailable(f"Failed to spawn {argv[0]}: {type(e).__name__}: {e}") from e

    try:
        out, err = p.communicate(timeout=timeout_s)
        stderr = (err or b"").decode("utf-8", errors="replace")
        return out or b"", stderr, int(p.returncode or 0), False

    except subprocess.TimeoutExpired:
        try:
            out, err = p.communicate(timeout=0.2)
        except (subprocess.TimeoutExpired, OSError, ValueError):
            out, err = (b"", b"")

        # Hard cleanup
        try:
            _kill(p)
        finally:
            try:
                p.wait(timeout=0.5)
            except subprocess.TimeoutExpired:
                pass

        return out or b"", (err or b"").decode("utf-8", errors="replace"), 124, True

    except Exception as e:
        # Ensure process is not left running
        try:
            _kill(p)
        except OSError:
            pass
        raise SourceUnavailable(f"Failed while running {argv[0]}: {type(e).__name__}: {e}") from e


@dataclass(frozen=True)
class GitRunnerConfig:
    """
    Runner configuration. `timeout_s=None` waits for git indefinitely.
    """
    timeout_s: float | None = None

    # Everything the packager needs is a read; nothing else may run.
    read_only_allowlist: tuple[str, ...] = (
        "rev-list",
        "diff",
        "show",
        "ls-tree",
        "cat-file",
        "ls-files",
    )


class SafeGitRunner:
    """
    Local, read-only git runner:
      - No shell
      - Enforces cwd=root
      - Optional hard timeout, killing stuck process trees / groups
      - Binary-safe stdout (file blobs are copied byte for byte)
    """

    def __init__(self, root: str | Path, config: GitRunnerConfig | None = None) -> None:
        self.root = resolve_root(root)
        self.config = config or GitRunnerConfig()

    def run(
        self,
        args: Iterable[str],
        *,
        env: dict[str, str] | None = None,
    ) -> GitRunResult:
        args_list = list(args)
        self._validate_args(args_list)

        argv = ["git", *args_list]
        logger.debug(f"{GIT} {' '.join(argv)}")

        start = time.perf_counter()
        stdout, stderr, exit_code, timed_out = run_process(
            argv=argv,
            cwd=self.root,
            env=self._build_env(env),
            timeout_s=self.config.timeout_s,
        )
        duration_ms = int((time.perf_counter() - start) * 1000)

        return GitRunResult(
            argv=argv,
            root=str(self.root),
            stdout_bytes=stdout,
            stderr=stderr,
            exit_code=exit_code,
            duration_ms=duration_ms,
            timed_out=timed_out,
        )

    def _validate_args(self, args_list: list[str]) -> None:
        if not args_list:
            raise GitPolicyError("Empty git args are not allowed.")

        subcmd = args_list[0].strip().lower()
        if subcmd not in self.config.read_only_allowlist:
            raise GitPolicyError(
                f"Blocked git subcommand: '{subcmd}'. "
                f"Allowed: {', '.join(self.config.read_only_allowlist)}"
            )

        lowered = [a.strip().lower() for a in args_list]
        if "--output" in lowered or any(a.startswith("--output=") for a in lowered):
            raise GitPolicyError(f"Blocked file-writing git flag: {args_list}")

    def _build_env(self, extra_env: dict[str, str] | None) -> dict[str, str]:
        """
        Build a controlled environment that prevents interactive hangs.
        """
        merged_env = dict(os.environ)
        merged_env.update(
            {
                "GIT_TERMINAL_PROMPT": "0",
                "GCM_INTERACTIVE": "Never",
                "GIT_PAGER": "cat",
                "LC_ALL": "C",
                "GIT_OPTIONAL_LOCKS": "0",
            }
        )

        if extra_env:
            merged_env.update(extra_env)

        return merged_env
