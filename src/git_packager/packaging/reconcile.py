"""
Deletion reconciliation for directory-shaped components.

A directory component can lose some of its files in a diff while others survive.
That is a content change, not a removal: the surviving files have to be deployed
and nothing is declared destructive. Only when nothing of the component is left
does the deletion stand, and then one path is enough to name the component.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from ..core.config import DescriptorPolicy, PackagerConfig
from ..core.git_runner import SafeGitRunner
from ..core.logging import get_logger
from ..core.logging_tags import RESOLVE
from ..core.models import ClassifiedChangeSet
from ..resolvers import DEFAULT_REGISTRY, ResolverRegistry
from .classifier import is_packageable

logger = get_logger(__name__)


@dataclass(frozen=True)
class Reconciliation:
    removed: frozenset[str]
    additional_changed: frozenset[str]


def reconcile(
    removed: Iterable[str],
    revision: str | None,
    *,
    runner: SafeGitRunner,
    registry: ResolverRegistry = DEFAULT_REGISTRY,
    policy: DescriptorPolicy = DescriptorPolicy.ALWAYS,
    accept: Callable[[str], bool] | None = None,
) -> Reconciliation:
    """
    `revision` is the state being packaged (source ref, or None for the working copy).
    Each removed path is judged against that state only, never against the other
    removed paths, so the result does not depend on iteration order.

    `accept` narrows the surviving members that count (e.g. drops ignored files).
    """
    removed = frozenset(removed)
    not_fully_removed: set[str] = set()
    survivors: set[str] = set()
    # component key -> removed paths of fully deleted directory components
    full_deletions: dict[str, set[str]] = {}

    for path in removed:
        resolver = registry.lookup(path)
        if resolver is None or not resolver.is_directory_shaped:
            continue

        members = set(resolver.component_paths(path, revision, runner=runner, policy=policy))
        members.discard(path)
        if accept is not None:
            members = {m for m in members if accept(m)}
        if members:
            logger.debug(f"{RESOLVE} partial deletion of {resolver.component_key(path)}: {path}")
            not_fully_removed.add(path)
            survivors |= members
        else:
            full_deletions.setdefault(resolver.component_key(path), set()).add(path)

    # keep one representative per fully deleted component
    collapsed = set()
    for paths in full_deletions.values():
        collapsed |= paths - {min(paths)}

    final_removed = removed - not_fully_removed - collapsed
    return Reconciliation(
        removed=frozenset(final_removed),
        additional_changed=frozenset(survivors - final_removed),
    )


def reconcile_change_set(
    change_set: ClassifiedChangeSet,
    revision: str | None,
    *,
    config: PackagerConfig,
    runner: SafeGitRunner,
    registry: ResolverRegistry = DEFAULT_REGISTRY,
) -> ClassifiedChangeSet:
    result = reconcile(
        change_set.removed,
        revision,
        runner=runner,
        registry=registry,
        policy=config.descriptor_policy,
        accept=lambda p: is_packageable(p, config),
    )
    changed = (change_set.changed | result.additional_changed) - result.removed
    return ClassifiedChangeSet(changed=frozenset(changed), removed=result.removed)
