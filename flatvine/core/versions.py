"""Version-aware comparison for dotted release strings (``sort -V`` order)."""

from __future__ import annotations

import re

_COMPONENT = re.compile(r"\d+|[A-Za-z]+")


def version_key(version: str) -> tuple[tuple[int, int | str], ...]:
    """Split *version* into comparable components.

    Numeric runs compare numerically, so ``2.100`` sorts after ``2.36``;
    alphabetic runs sort before numbers at the same position.
    """
    parts: list[tuple[int, int | str]] = []
    for token in _COMPONENT.findall(version):
        if token.isdigit():
            parts.append((1, int(token)))
        else:
            parts.append((0, token))
    return tuple(parts)


def version_at_least(actual: str, minimum: str) -> bool:
    """Return True if *actual* >= *minimum* under version ordering."""
    if not version_key(actual):
        raise ValueError(f"not a version string: {actual!r}")
    return version_key(actual) >= version_key(minimum)
