"""Group lines by an extracted key and count occurrences per label."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from tokf.config import GroupConfig
from tokf.extract import interpolate


@dataclass(frozen=True)
class GroupCount:
    """A label with its occurrence count."""

    label: str
    count: int


def collect_groups(config: GroupConfig, lines: Sequence[str]) -> list[GroupCount]:
    """Count matching lines per label, sorted alphabetically by label.

    Each matching line yields a key through the key template; the key is mapped
    to a label, or used as the label itself when no mapping exists. An invalid
    key pattern gives no groups.
    """
    try:
        regex = re.compile(config.key.pattern)
    except re.error:
        return []

    counts: Counter[str] = Counter()
    for line in lines:
        match = regex.search(line)
        if match:
            raw_key = interpolate(config.key.output, match)
            counts[config.labels.get(raw_key, raw_key)] += 1

    return [GroupCount(label, count) for label, count in sorted(counts.items())]


def render_group_counts(counts: Sequence[GroupCount], format: str, empty: str | None) -> str:
    """Render each group through ``format`` (``{label}``, ``{count}``), one per line.

    With no groups, ``empty`` is returned, or an empty string if it is ``None``.
    """
    if not counts:
        return empty or ""
    return "\n".join(
        format.replace("{label}", gc.label).replace("{count}", str(gc.count)) for gc in counts
    )