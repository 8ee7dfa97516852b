"""Structured parse pipeline: a branch line plus grouped remaining lines."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from tokf.config import OutputConfig, ParseConfig
from tokf.extract import interpolate
from tokf.group import GroupCount, collect_groups, render_group_counts

_DEFAULT_FORMAT = "{branch}\n{group_counts}"
_DEFAULT_GROUP_FORMAT = "  {label}: {count}"
_UNRESOLVED = re.compile(r"\{[a-z_]+\}")


@dataclass
class ParseResult:
    """Named variables and group counts extracted by the parse pipeline."""

    vars: dict[str, str] = field(default_factory=dict)
    group_counts: list[GroupCount] = field(default_factory=list)


def run_parse(config: ParseConfig, lines: Sequence[str]) -> ParseResult:
    """Extract the branch variable from its line and group the lines after it."""
    variables: dict[str, str] = {}

    branch = config.branch
    if branch is not None:
        index = max(branch.line - 1, 0)
        if index < len(lines):
            try:
                regex = re.compile(branch.pattern)
            except re.error:
                regex = None
            if regex is not None:
                match = regex.search(lines[index])
                if match:
                    variables["branch"] = interpolate(branch.output, match)

    group_counts: list[GroupCount] = []
    if config.group is not None:
        start = min(branch.line, len(lines)) if branch is not None else 0
        group_counts = collect_groups(config.group, lines[start:])

    return ParseResult(vars=variables, group_counts=group_counts)


def render_output(output_config: OutputConfig, parse_result: ParseResult) -> str:
    """Fill the format template with variables and rendered group counts.

    Placeholders left unresolved are removed.
    """
    result = output_config.format if output_config.format is not None else _DEFAULT_FORMAT
    group_format = (
        output_config.group_counts_format
        if output_config.group_counts_format is not None
        else _DEFAULT_GROUP_FORMAT
    )
    group_counts_str = render_group_counts(
        parse_result.group_counts, group_format, output_config.empty
    )

    for key, value in parse_result.vars.items():
        result = result.replace(f"{{{key}}}", value)
    result = result.replace("{group_counts}", group_counts_str)
    return _UNRESOLVED.sub("", result)