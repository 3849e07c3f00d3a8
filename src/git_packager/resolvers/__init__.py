from .base import DirectoryResolver, FlatResolver, Resolver
from .registry import DEFAULT_REGISTRY, ResolverRegistry, build_default_registry

__all__ = [
    "Resolver",
    "FlatResolver",
    "DirectoryResolver",
    "ResolverRegistry",
    "build_default_registry",
    "DEFAULT_REGISTRY",
]
