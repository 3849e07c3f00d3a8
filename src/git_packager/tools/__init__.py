from .package_tools import classify_changes, package

__all__ = [
    "classify_changes",
    "package",
]
