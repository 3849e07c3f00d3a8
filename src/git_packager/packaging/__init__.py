from .classifier import classify, is_packageable
from .reconcile import Reconciliation, reconcile, reconcile_change_set
from .staging import assemble
from .converter import convert, manifest_of
from .packager import PackageOptions, PackageResult, Packager, purge_folder

__all__ = [
    "classify",
    "is_packageable",
    "Reconciliation",
    "reconcile",
    "reconcile_change_set",
    "assemble",
    "convert",
    "manifest_of",
    "PackageOptions",
    "PackageResult",
    "Packager",
    "purge_folder",
]
