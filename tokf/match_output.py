"""Whole-output substring rules that short-circuit filtering."""

from __future__ import annotations

from collections.abc import Sequence

from tokf.config import MatchOutputRule
from tokf.template import render_template


def find_matching_rule(
    rules: Sequence[MatchOutputRule], combined: str
) -> MatchOutputRule | None:
    """Return the first rule whose ``contains`` substring occurs in the output."""
    return next((rule for rule in rules if rule.contains in combined), None)


def _lines(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p.removesuffix("\r") for p in parts]


def render_output(output_tmpl: str, contains: str, combined: str) -> str:
    """Render a rule's template.

    ``{line_containing}`` is the first line holding ``contains`` and ``{output}``
    the whole combined output.
    """
    variables: dict[str, str] = {}
    line = next((ln for ln in _lines(combined) if contains in ln), None)
    if line is not None:
        variables["line_containing"] = line
    variables["output"] = combined
    return render_template(output_tmpl, variables, {})