from .repo_tree import repo_tree
from .file_at_ref import file_exists_at_ref, read_file_at_ref, read_text_at_ref
from .diff_range import ahead_behind, diff_range

__all__ = [
    "repo_tree",
    "read_file_at_ref",
    "read_text_at_ref",
    "file_exists_at_ref",
    "diff_range",
    "ahead_behind",
]
