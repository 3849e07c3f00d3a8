from __future__ import annotations

from typing import Any

from ..core.config import DEFAULT_TARGET_REF
from ..packaging import PackageOptions
from .common import make_packager


def classify_changes(
    root: str = ".",
    target: str = DEFAULT_TARGET_REF,
    source: str | None = None,
    ignore_whitespace: bool = False,
    descriptor_policy: str = "always",
) -> dict[str, Any]:
    """
    Changed and removed paths between two revisions (or a revision and the
    working copy), after ignore rules, whitespace filtering and reconciliation.
    Nothing is staged or converted.
    """
    p = make_packager(root, descriptor_policy=descriptor_policy)
    change_set = p.classify_changes(target, source, ignore_whitespace=ignore_whitespace)
    return {
        "root": str(p.config.project.root),
        "target": target,
        "source": source,
        "source_roots": list(p.config.project.source_roots),
        **change_set.to_dict(),
    }


def package(
    output_dir: str,
    root: str = ".",
    target: str = DEFAULT_TARGET_REF,
    source: str | None = None,
    ignore_whitespace: bool = False,
    purge: bool = False,
    no_delete: bool = False,
    force: bool = False,
    converter_command: list[str] | None = None,
    timeout_s: float | None = None,
) -> dict[str, Any]:
    """
    Build a deployable package. Non-interactive: an existing output directory
    is merged into unless `purge` is set.
    """
    p = make_packager(root, converter_command=converter_command, timeout_s=timeout_s)
    options = PackageOptions(
        output_dir=output_dir,
        target=target,
        source=source,
        ignore_whitespace=ignore_whitespace,
        purge=purge,
        no_delete=no_delete,
        force=force,
    )
    result = p.run(options, on_conflict=lambda _out: "merge")
    return {"summary": "Package created.", **result.to_dict()}
