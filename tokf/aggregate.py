"""Sum and count numeric captures across a collected section."""

from __future__ import annotations

import re

from tokf.config import AggregateRule
from tokf.section import SectionMap

_INTEGER = re.compile(r"[+-]?[0-9]+")
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _parse_int(text: str) -> int | None:
    if not _INTEGER.fullmatch(text):
        return None
    value = int(text)
    if not _I64_MIN <= value <= _I64_MAX:
        return None
    return value


def run_aggregate(rule: AggregateRule, sections: SectionMap) -> dict[str, str]:
    """Count items matching the rule's pattern and sum their first capture.

    Returns the results as strings under the rule's ``sum`` and ``count_as`` names.
    A missing section or an invalid pattern gives an empty result.
    """
    section_data = sections.get(rule.from_)
    if section_data is None:
        return {}
    try:
        regex = re.compile(rule.pattern)
    except re.error:
        return {}

    total = 0
    count = 0
    for item in section_data.items():
        match = regex.search(item)
        if not match:
            continue
        count += 1
        if regex.groups >= 1 and match.group(1) is not None:
            number = _parse_int(match.group(1))
            if number is not None:
                total += number

    result: dict[str, str] = {}
    if rule.sum is not None:
        result[rule.sum] = str(total)
    if rule.count_as is not None:
        result[rule.count_as] = str(count)
    return result