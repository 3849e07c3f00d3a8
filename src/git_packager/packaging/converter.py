from __future__ import annotations

import shutil
from pathlib import Path

from ..core.config import CONVERTED_MANIFEST
from ..core.errors import SourceUnavailable
from ..core.git_runner import run_process
from ..core.logging import get_logger
from ..core.logging_tags import CONVERT

logger = get_logger(__name__)


def convert(
    staging_root: Path,
    destination: Path,
    *,
    command: tuple[str, ...],
    timeout_s: float | None = None,
) -> None:
    """
    Run the external source-to-deploy converter on a staged project:
    `<command> -d <destination>` with the staged tree as working directory.
    """
    if not command:
        raise ValueError("converter command is empty")

    # resolves .cmd/.bat shims on Windows without going through a shell
    executable = shutil.which(command[0]) or command[0]
    argv = [executable, *command[1:], "-d", str(destination)]
    logger.info(f"{CONVERT} {' '.join(command)} -d {destination}")

    stdout, stderr, exit_code, timed_out = run_process(
        argv=argv,
        cwd=staging_root,
        env=None,
        timeout_s=timeout_s,
    )
    if timed_out:
        raise SourceUnavailable(f"Converter timed out after {timeout_s}s")
    if exit_code != 0:
        detail = stderr.strip() or stdout.decode("utf-8", errors="replace").strip()
        raise SourceUnavailable(f"Converter failed (exit {exit_code}): {detail}")


def manifest_of(converted: Path) -> Path:
    manifest = converted / CONVERTED_MANIFEST
    if not manifest.is_file():
        raise SourceUnavailable(f"Converter produced no {CONVERTED_MANIFEST} in {converted}")
    return manifest
