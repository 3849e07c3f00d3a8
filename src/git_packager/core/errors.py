from __future__ import annotations


class PackagerError(Exception):
    """Base error for the project."""


class InvalidRootError(PackagerError):
    pass


class GitPolicyError(PackagerError):
    pass


class SourceUnavailable(PackagerError):
    """A git read or external process failed."""


class UnresolvedPath(PackagerError):
    """No resolver matches the path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Could not resolve metadata for {path}")
        self.path = path


class BehindTarget(PackagerError):
    def __init__(self, source_label: str, target: str, behind: int) -> None:
        super().__init__(
            f"{source_label} is {behind} commit(s) behind {target}! "
            f"You probably want to rebase {target} into {source_label} before deploying!"
        )
        self.behind = behind


class NoChanges(PackagerError):
    def __init__(self) -> None:
        super().__init__("No changes found!")


class OutputConflict(PackagerError):
    pass
