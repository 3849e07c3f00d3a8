"""Resolver registry with deterministic, first-match selection."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..core.errors import UnresolvedPath
from .base import DirectoryResolver, FlatResolver, Resolver


@dataclass
class ResolverRegistry:
    """Ordered resolver table. Directory rules come before the flat catch-all."""

    _resolvers: list[Resolver] = field(default_factory=list)

    def register(self, resolver: Resolver) -> None:
        self._resolvers.append(resolver)

    def lookup(self, path: str) -> Resolver | None:
        for resolver in self._resolvers:
            if resolver.matches(path):
                return resolver
        return None

    def require(self, path: str) -> Resolver:
        resolver = self.lookup(path)
        if resolver is None:
            raise UnresolvedPath(path)
        return resolver

    def names(self) -> tuple[str, ...]:
        return tuple(r.name for r in self._resolvers)


def build_default_registry() -> ResolverRegistry:
    registry = ResolverRegistry()
    registry.register(DirectoryResolver(name="aura", type_folder="aura"))
    registry.register(DirectoryResolver(name="lwc", type_folder="lwc"))
    registry.register(DirectoryResolver(name="objects", type_folder="objects"))
    registry.register(DirectoryResolver(name="objectTranslations", type_folder="objectTranslations"))
    registry.register(
        DirectoryResolver(name="experiences", type_folder="experiences", descriptor_suffix=".site-meta.xml")
    )
    registry.register(
        DirectoryResolver(
            name="staticresources",
            type_folder="staticresources",
            descriptor_suffix=".resource-meta.xml",
            flat_content=True,
        )
    )
    registry.register(FlatResolver())
    return registry


DEFAULT_REGISTRY = build_default_registry()
