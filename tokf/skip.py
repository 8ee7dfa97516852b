"""Line-level skip and keep filtering by regex."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence


def _compile_valid(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error:
            continue
    return compiled


def apply_skip(patterns: Sequence[str], lines: Sequence[str]) -> list[str]:
    """Remove lines matching any pattern; invalid patterns are ignored."""
    compiled = _compile_valid(patterns)
    if not compiled:
        return list(lines)
    return [line for line in lines if not any(r.search(line) for r in compiled)]


def apply_keep(patterns: Sequence[str], lines: Sequence[str]) -> list[str]:
    """Keep only lines matching at least one pattern; invalid patterns are ignored."""
    compiled = _compile_valid(patterns)
    if not compiled:
        return list(lines)
    return [line for line in lines if any(r.search(line) for r in compiled)]