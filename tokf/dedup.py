"""Collapse duplicate lines."""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence


def apply_dedup(lines: Sequence[str], window: int | None) -> list[str]:
    """Drop duplicate lines.

    With no window, a line equal to the previous kept line is dropped. With a
    window of n, a line already among the last n kept lines is dropped.
    """
    if window is None:
        return _dedup_consecutive(lines)
    return _dedup_windowed(lines, window)


def _dedup_consecutive(lines: Sequence[str]) -> list[str]:
    result: list[str] = []
    for line in lines:
        if not result or result[-1] != line:
            result.append(line)
    return result


def _dedup_windowed(lines: Sequence[str], window: int) -> list[str]:
    result: list[str] = []
    # A zero window never evicts, so it deduplicates across the whole input.
    recent: deque[str] = deque(maxlen=window or None)
    for line in lines:
        if line in recent:
            continue
        result.append(line)
        recent.append(line)
    return result