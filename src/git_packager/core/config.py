"""Project and packager configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import InvalidRootError
from .git_runner import GitRunnerConfig
from .ignore import IgnoreFilter
from .security import normalize_relpath, resolve_root

PROJECT_MANIFEST = "sfdx-project.json"
IGNORE_FILE = ".forceignore"
DESTRUCTIVE_CHANGES_FILE = "destructiveChanges.xml"
CONVERTED_MANIFEST = "package.xml"
DEFAULT_TARGET_REF = "master"
DEFAULT_CONVERTER_COMMAND = ("sfdx", "force:source:convert")


class DescriptorPolicy(str, Enum):
    """Whether a directory component's companion descriptor counts without existing."""

    ALWAYS = "always"
    IF_EXISTS = "if-exists"


@dataclass(frozen=True)
class ProjectConfig:
    """Declared layout of the project being packaged."""

    root: Path
    source_roots: tuple[str, ...]
    manifest_name: str = PROJECT_MANIFEST
    ignore_file: str = IGNORE_FILE

    def in_source_roots(self, path: str) -> bool:
        return any(path.startswith(root) for root in self.source_roots)


@dataclass(frozen=True)
class PackagerConfig:
    """Everything the classifier, reconciler and assembler need, passed explicitly."""

    project: ProjectConfig
    ignore: IgnoreFilter = field(default_factory=IgnoreFilter)
    descriptor_policy: DescriptorPolicy = DescriptorPolicy.ALWAYS
    converter_command: tuple[str, ...] = DEFAULT_CONVERTER_COMMAND
    runner: GitRunnerConfig = field(default_factory=GitRunnerConfig)


def load_project(root: str | Path, manifest_name: str = PROJECT_MANIFEST) -> ProjectConfig:
    """Read `packageDirectories[].path` from the project manifest."""
    project_root = resolve_root(root)
    manifest = project_root / manifest_name
    if not manifest.is_file():
        raise InvalidRootError(f"No {manifest_name} found in {project_root}")

    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidRootError(f"Invalid {manifest_name}: {e}") from e

    dirs = data.get("packageDirectories") or []
    source_roots = tuple(
        normalize_relpath(d["path"]) for d in dirs if isinstance(d, dict) and d.get("path")
    )
    if not source_roots:
        raise InvalidRootError(f"{manifest_name} declares no packageDirectories")

    return ProjectConfig(root=project_root, source_roots=source_roots, manifest_name=manifest_name)


def load_config(
    root: str | Path,
    *,
    descriptor_policy: DescriptorPolicy = DescriptorPolicy.ALWAYS,
    converter_command: tuple[str, ...] = DEFAULT_CONVERTER_COMMAND,
    timeout_s: float | None = None,
) -> PackagerConfig:
    project = load_project(root)
    return PackagerConfig(
        project=project,
        ignore=IgnoreFilter.load(project.root / project.ignore_file),
        descriptor_policy=descriptor_policy,
        converter_command=tuple(converter_command),
        runner=GitRunnerConfig(timeout_s=timeout_s),
    )
