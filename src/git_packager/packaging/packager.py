"""
End-to-end packaging run.

    rev-list (behind check) → diff → classify → reconcile
        → stage removed set @ target → convert to a temp dir
        → stage changed set @ source → convert into the output dir
        → destructiveChanges.xml from the deletion manifest
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from ..core.config import DEFAULT_TARGET_REF, DESTRUCTIVE_CHANGES_FILE, PackagerConfig
from ..core.errors import BehindTarget, NoChanges, OutputConflict
from ..core.git_runner import SafeGitRunner
from ..core.logging import get_logger
from ..core.logging_tags import PACKAGE
from ..core.models import ClassifiedChangeSet, StagingProject
from ..resolvers import DEFAULT_REGISTRY, ResolverRegistry
from ..resources import ahead_behind, diff_range
from .classifier import classify
from .converter import convert, manifest_of
from .reconcile import reconcile_change_set
from .staging import assemble, make_temp_dir

logger = get_logger(__name__)

ConflictResolver = Callable[[Path], str]


@dataclass(frozen=True)
class PackageOptions:
    output_dir: str
    target: str = DEFAULT_TARGET_REF
    source: str | None = None
    ignore_whitespace: bool = False
    purge: bool = False
    no_delete: bool = False
    force: bool = False


@dataclass
class PackageResult:
    output_dir: Path
    change_set: ClassifiedChangeSet
    behind: int = 0
    destructive_changes: Path | None = None
    staging: list[StagingProject] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "output_dir": str(self.output_dir),
            **self.change_set.to_dict(),
            "behind": self.behind,
            "destructive_changes": str(self.destructive_changes) if self.destructive_changes else None,
            "unresolved": sorted({p for s in self.staging for p in s.unresolved}),
        }


def purge_folder(folder: Path) -> None:
    """Remove everything inside `folder`, keeping the folder itself."""
    for child in folder.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


class Packager:
    def __init__(
        self,
        config: PackagerConfig,
        runner: SafeGitRunner | None = None,
        registry: ResolverRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self.config = config
        self.runner = runner or SafeGitRunner(config.project.root, config=config.runner)
        self.registry = registry

    def check_behind(self, target: str, source: str | None, *, force: bool = False) -> int:
        behind, _ahead = ahead_behind(self.runner, target, source)
        if behind > 0:
            err = BehindTarget(source or '"working tree"', target, behind)
            if not force:
                raise err
            logger.warning(f"{PACKAGE} {err}")
        return behind

    def classify_changes(
        self,
        target: str,
        source: str | None = None,
        *,
        ignore_whitespace: bool = False,
    ) -> ClassifiedChangeSet:
        diff = diff_range(self.runner, target, source)
        classified = classify(
            diff,
            config=self.config,
            runner=self.runner,
            target=target,
            source=source,
            ignore_whitespace=ignore_whitespace,
        )
        return reconcile_change_set(
            classified,
            source,
            config=self.config,
            runner=self.runner,
            registry=self.registry,
        )

    def resolve_output_dir(self, output_dir: str) -> Path:
        out = Path(output_dir).expanduser()
        return out if out.is_absolute() else self.config.project.root / out

    def prepare_output_dir(self, out: Path, *, purge: bool, on_conflict: ConflictResolver | None) -> None:
        if out.exists() and not out.is_dir():
            raise OutputConflict(f"The output path {out} exists and is not a directory.")

        if out.is_dir():
            if not purge:
                choice = on_conflict(out).strip().lower() if on_conflict else "exit"
                if choice == "purge":
                    purge = True
                elif choice != "merge":
                    raise OutputConflict(f"The output path {out} already exists.")
            if purge:
                logger.info(f"{PACKAGE} Removing all files inside of {out}")
                try:
                    purge_folder(out)
                except OSError as e:
                    raise OutputConflict(f"Failed to purge {out}: {e}") from e

        out.mkdir(parents=True, exist_ok=True)

    def stage(self, paths: frozenset[str], revision: str | None) -> StagingProject:
        return assemble(paths, revision, config=self.config, runner=self.runner, registry=self.registry)

    def _convert(self, staging: StagingProject, destination: Path) -> None:
        convert(
            staging.root,
            destination,
            command=self.config.converter_command,
            timeout_s=self.config.runner.timeout_s,
        )

    def run(self, options: PackageOptions, on_conflict: ConflictResolver | None = None) -> PackageResult:
        behind = self.check_behind(options.target, options.source, force=options.force)
        change_set = self.classify_changes(
            options.target,
            options.source,
            ignore_whitespace=options.ignore_whitespace,
        )

        has_changes = bool(change_set.changed)
        has_deletions = bool(change_set.removed) and not options.no_delete
        if not has_changes and not has_deletions:
            raise NoChanges()

        result = PackageResult(
            output_dir=self.resolve_output_dir(options.output_dir),
            change_set=change_set,
            behind=behind,
        )
        temp_dirs: list[Path] = []
        try:
            deletion_manifest: Path | None = None
            if has_deletions:
                removed_project = self.stage(change_set.removed, options.target)
                result.staging.append(removed_project)
                temp_dirs.append(removed_project.root)
                converted = make_temp_dir(prefix="git-packager-destructive-")
                temp_dirs.append(converted)
                self._convert(removed_project, converted)
                deletion_manifest = manifest_of(converted)

            changed_project = self.stage(change_set.changed, options.source)
            result.staging.append(changed_project)
            temp_dirs.append(changed_project.root)

            self.prepare_output_dir(result.output_dir, purge=options.purge, on_conflict=on_conflict)

            if has_changes:
                self._convert(changed_project, result.output_dir)
            if deletion_manifest is not None:
                result.destructive_changes = result.output_dir / DESTRUCTIVE_CHANGES_FILE
                shutil.copyfile(deletion_manifest, result.destructive_changes)
        finally:
            for d in temp_dirs:
                shutil.rmtree(d, ignore_errors=True)

        logger.info(f"{PACKAGE} package written to {result.output_dir}")
        return result
