from __future__ import annotations

import difflib


def _significant_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def has_non_whitespace_changes(a: str, b: str) -> bool:
    """
    True when `a` and `b` differ by more than whitespace: a line-level diff that
    ignores leading/trailing whitespace and blank lines still adds or removes a line.
    """
    matcher = difflib.SequenceMatcher(None, _significant_lines(a), _significant_lines(b), autojunk=False)
    return any(tag != "equal" for tag, *_ in matcher.get_opcodes())
