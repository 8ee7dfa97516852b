"""Regex extraction with numbered-group templates."""

from __future__ import annotations

import re
from collections.abc import Sequence

from tokf.config import ExtractRule


def apply_extract(rule: ExtractRule, lines: Sequence[str]) -> str:
    """Render the template for the first matching line.

    With an invalid pattern or no match, the lines are returned joined by newlines.
    """
    try:
        regex = re.compile(rule.pattern)
    except re.error:
        return "\n".join(lines)

    for line in lines:
        match = regex.search(line)
        if match:
            return interpolate(rule.output, match)
    return "\n".join(lines)


def interpolate(template: str, match: re.Match[str]) -> str:
    """Replace ``{0}``, ``{1}``, ... with capture groups; missing groups become empty.

    Higher-numbered placeholders are replaced first so ``{10}`` is not mangled by ``{1}``.
    """
    result = template
    for i in range(match.re.groups, -1, -1):
        result = result.replace(f"{{{i}}}", match.group(i) or "")
    return result