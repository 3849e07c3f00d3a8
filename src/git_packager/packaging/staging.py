from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Iterable

from ..core.config import DescriptorPolicy, PackagerConfig
from ..core.errors import UnresolvedPath
from ..core.git_runner import SafeGitRunner
from ..core.logging import get_logger
from ..core.logging_tags import STAGING
from ..core.models import StagingProject
from ..core.security import ensure_within_root, relativize
from ..resolvers import DEFAULT_REGISTRY, ResolverRegistry
from ..resources import file_exists_at_ref, read_file_at_ref

logger = get_logger(__name__)


def make_temp_dir(prefix: str = "git-packager-") -> Path:
    return Path(tempfile.mkdtemp(prefix=prefix))


def _copy_from_revision(runner: SafeGitRunner, rel: str, revision: str | None, dest_root: Path) -> None:
    dest = ensure_within_root(dest_root, dest_root / rel)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(read_file_at_ref(runner, rel, revision))


def assemble(
    paths: Iterable[str],
    revision: str | None,
    *,
    config: PackagerConfig,
    runner: SafeGitRunner,
    registry: ResolverRegistry = DEFAULT_REGISTRY,
) -> StagingProject:
    """
    Build a throwaway project tree holding every file of every component touched by
    `paths`, copied from `revision` (or the working copy when None).

    Unresolvable paths are skipped with a warning. Read failures raise SourceUnavailable.
    """
    project = config.project
    staging = StagingProject(root=make_temp_dir(), revision=revision)

    for source_root in project.source_roots:
        (staging.root / source_root).mkdir(parents=True, exist_ok=True)

    _copy_from_revision(runner, project.manifest_name, revision, staging.root)

    copied: set[str] = set()
    for path in sorted(paths):
        rel = relativize(project.root, path)
        try:
            resolver = registry.require(rel)
        except UnresolvedPath as e:
            logger.warning(f"{STAGING} {e}")
            staging.unresolved.append(rel)
            continue

        if not resolver.is_directory_shaped and not file_exists_at_ref(runner, rel, revision):
            logger.warning(f"{STAGING} {rel} does not exist at {revision or 'working copy'}, skipped")
            staging.missing.append(rel)
            continue

        # only files that really exist can be copied
        members = resolver.component_paths(rel, revision, runner=runner, policy=DescriptorPolicy.IF_EXISTS)
        if not members:
            logger.warning(f"{STAGING} nothing of {rel} exists at {revision or 'working copy'}, skipped")
            staging.missing.append(rel)
            continue
        for member in members:
            member = relativize(project.root, member)
            if member in copied:
                continue
            _copy_from_revision(runner, member, revision, staging.root)
            copied.add(member)
            staging.staged.append(member)

    logger.info(
        f"{STAGING} staged {len(staging.staged)} file(s) from {revision or 'working copy'} in {staging.root}"
    )
    return staging
