"""Per-line cleanup before filtering and post-processing of the final output."""

from __future__ import annotations

import re
from collections.abc import Sequence

from tokf.config import FilterConfig

# CSI sequences (colours, cursor movement), OSC sequences terminated by BEL or
# ST (hyperlinks, titles), then single-character Fe escapes as a catch-all.
# OSC comes before the catch-all because ']' lies in the range @-_.
_ANSI = re.compile(r"\x1b(?:\[[0-9;]*[a-zA-Z]|\][^\x07\x1b]*(?:\x07|\x1b\\)|[@-_])")


def apply_line_cleanup(config: FilterConfig, lines: Sequence[str]) -> list[str]:
    """Strip ANSI escapes and/or surrounding whitespace from each line, as configured."""
    cleaned: list[str] = []
    for line in lines:
        if config.strip_ansi:
            line = _ANSI.sub("", line)
        if config.trim_lines:
            line = line.strip()
        cleaned.append(line)
    return cleaned


def _lines(text: str) -> list[str]:
    """Split on ``\\n`` or ``\\r\\n``; a final line ending adds no empty line."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p.removesuffix("\r") for p in parts]


def post_process_output(config: FilterConfig, output: str) -> str:
    """Remove or collapse blank lines in the final output, as configured.

    ``strip_empty_lines`` takes priority over ``collapse_empty_lines``. A trailing
    newline in the input is kept.
    """
    trailing_newline = output.endswith("\n")

    if config.strip_empty_lines:
        result = "\n".join(line for line in _lines(output) if line.strip())
        if result and trailing_newline:
            result += "\n"
        return result

    if config.collapse_empty_lines:
        kept: list[str] = []
        prev_was_empty = False
        for line in _lines(output):
            is_empty = not line.strip()
            if is_empty and prev_was_empty:
                continue
            kept.append(line)
            prev_was_empty = is_empty
        result = "\n".join(kept)
        if trailing_newline:
            result += "\n"
        return result

    return output