"""Per-line regex rewrite rules."""

from __future__ import annotations

import re
from collections.abc import Sequence

from tokf.config import ReplaceRule
from tokf.extract import interpolate


def apply_replace(rules: Sequence[ReplaceRule], lines: Sequence[str]) -> list[str]:
    """Apply rules to every line in order, chaining each rule's result into the next.

    A matching rule replaces the line with its interpolated output; a non-matching
    rule leaves it unchanged. Rules with invalid patterns are ignored.
    """
    compiled: list[tuple[re.Pattern[str], str]] = []
    for rule in rules:
        try:
            compiled.append((re.compile(rule.pattern), rule.output))
        except re.error:
            continue
    return [_rewrite(compiled, line) for line in lines]


def _rewrite(compiled: Sequence[tuple[re.Pattern[str], str]], line: str) -> str:
    current = line
    for regex, template in compiled:
        match = regex.search(current)
        if match:
            current = interpolate(template, match)
    return current