"""Component resolvers: map one member path to every file of its metadata component."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol

from ..core.config import DescriptorPolicy
from ..core.git_runner import SafeGitRunner
from ..core.security import normalize_relpath
from ..resources import file_exists_at_ref, repo_tree

META_SUFFIX = "-meta.xml"


class Resolver(Protocol):
    name: str

    @property
    def is_directory_shaped(self) -> bool: ...

    def matches(self, path: str) -> bool: ...

    def component_key(self, path: str) -> str: ...

    def component_paths(
        self,
        path: str,
        revision: str | None,
        *,
        runner: SafeGitRunner,
        policy: DescriptorPolicy = DescriptorPolicy.ALWAYS,
    ) -> tuple[str, ...]: ...


def _dedupe(paths: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(paths))


@dataclass(frozen=True)
class FlatResolver:
    """A single file, paired with its `-meta.xml` sibling when that exists."""

    name: str = "flat"

    @property
    def is_directory_shaped(self) -> bool:
        return False

    def matches(self, path: str) -> bool:
        return "." in PurePosixPath(normalize_relpath(path)).name

    def component_key(self, path: str) -> str:
        return normalize_relpath(path)

    def sibling(self, path: str) -> str:
        rel = normalize_relpath(path)
        if rel.endswith(META_SUFFIX):
            return rel[: -len(META_SUFFIX)]
        return rel + META_SUFFIX

    def component_paths(
        self,
        path: str,
        revision: str | None,
        *,
        runner: SafeGitRunner,
        policy: DescriptorPolicy = DescriptorPolicy.ALWAYS,
    ) -> tuple[str, ...]:
        rel = normalize_relpath(path)
        sibling = self.sibling(rel)
        paths = [rel]
        if file_exists_at_ref(runner, sibling, revision):
            paths.append(sibling)
        # primary file first, descriptor second
        return _dedupe(sorted(paths, key=lambda p: p.endswith(META_SUFFIX)))


@dataclass(frozen=True)
class DirectoryResolver:
    """
    Every file under `<type_folder>/<component>/`. Components such as folder static
    resources also own a descriptor next to the directory
    (`<type_folder>/<component><descriptor_suffix>`); that descriptor resolves to the
    same component.

    With `flat_content`, files sitting directly in the type folder
    (`<type_folder>/<component>.<ext>`, e.g. a single-file static resource) belong to
    the component named by their stem, together with the descriptor.
    """

    name: str
    type_folder: str
    descriptor_suffix: str | None = None
    flat_content: bool = False

    @property
    def is_directory_shaped(self) -> bool:
        return True

    def _split(self, path: str) -> tuple[list[str], int, str] | None:
        parts = normalize_relpath(path).split("/")
        try:
            idx = parts.index(self.type_folder)
        except ValueError:
            return None

        depth = len(parts) - idx
        # <type_folder>/<component>/<file...>
        if depth >= 3:
            return parts, idx, parts[idx + 1]
        if depth != 2:
            return None

        filename = parts[-1]
        if self.descriptor_suffix and filename.endswith(self.descriptor_suffix):
            name = filename[: -len(self.descriptor_suffix)]
            return (parts, idx, name) if name else None
        if self.flat_content:
            name = filename.split(".", 1)[0]
            if name and name != filename:
                return parts, idx, name
        return None

    def matches(self, path: str) -> bool:
        return self._split(path) is not None

    def component_key(self, path: str) -> str:
        split = self._split(path)
        if split is None:
            raise ValueError(f"{self.name} resolver does not handle {path}")
        parts, idx, name = split
        return "/".join([*parts[: idx + 1], name])

    def descriptor(self, path: str) -> str | None:
        if not self.descriptor_suffix:
            return None
        return self.component_key(path) + self.descriptor_suffix

    def _flat_members(self, key: str, revision: str | None, runner: SafeGitRunner) -> list[str]:
        key_path = PurePosixPath(key)
        return [
            p
            for p in repo_tree(runner, key_path.parent.as_posix(), revision)
            if PurePosixPath(p).parent == key_path.parent
            and PurePosixPath(p).name.split(".", 1)[0] == key_path.name
        ]

    def component_paths(
        self,
        path: str,
        revision: str | None,
        *,
        runner: SafeGitRunner,
        policy: DescriptorPolicy = DescriptorPolicy.ALWAYS,
    ) -> tuple[str, ...]:
        key = self.component_key(path)
        paths = list(repo_tree(runner, key, revision))
        if self.flat_content:
            paths.extend(self._flat_members(key, revision, runner))

        descriptor = self.descriptor(path)
        if descriptor is not None:
            if policy is DescriptorPolicy.ALWAYS or file_exists_at_ref(runner, descriptor, revision):
                paths.append(descriptor)

        return _dedupe(paths)
