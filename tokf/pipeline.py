"""The full filter pipeline applied to a command's output."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tokf import match_output, parse
from tokf.aggregate import run_aggregate
from tokf.cleanup import apply_line_cleanup, post_process_output
from tokf.config import FilterConfig, OutputBranch, OutputConfig
from tokf.dedup import apply_dedup
from tokf.extract import apply_extract
from tokf.replace import apply_replace
from tokf.section import SectionMap, collect_sections
from tokf.skip import apply_keep, apply_skip
from tokf.template import render_template


@dataclass
class CommandResult:
    """Captured output of a finished command."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    combined: str = ""


@dataclass(frozen=True)
class FilterResult:
    """The result of applying a filter to command output."""

    output: str


def _lines(text: str) -> list[str]:
    """Split on ``\\n`` or ``\\r\\n``; a final line ending adds no empty line."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p.removesuffix("\r") for p in parts]


def _build_raw_lines(combined: str, config: FilterConfig) -> list[str]:
    lines = _lines(combined)
    if config.replace:
        lines = apply_replace(config.replace, lines)
    if config.strip_ansi or config.trim_lines:
        lines = apply_line_cleanup(config, lines)
    return lines


def apply(
    config: FilterConfig, result: CommandResult, args: Sequence[str] | None = None
) -> FilterResult:
    """Apply a filter configuration to a command result.

    Stages run in order: match_output, replace, per-line cleanup, skip/keep,
    dedup, parse, sections, branch selection by exit code, branch rendering or
    fallback, and finally blank-line post-processing.
    """
    rule = match_output.find_matching_rule(config.match_output, result.combined)
    if rule is not None:
        output = match_output.render_output(rule.output, rule.contains, result.combined)
        return FilterResult(post_process_output(config, output))

    lines = _build_raw_lines(result.combined, config)
    lines = apply_skip(config.skip, lines)
    lines = apply_keep(config.keep, lines)
    if config.dedup:
        lines = apply_dedup(lines, config.dedup_window)

    if config.parse is not None:
        parse_result = parse.run_parse(config.parse, lines)
        output_config = config.output if config.output is not None else OutputConfig()
        output = parse.render_output(output_config, parse_result)
        return FilterResult(post_process_output(config, output))

    # Section markers are matched against the original, unmodified lines.
    has_sections = bool(config.section)
    sections: SectionMap = (
        collect_sections(config.section, _lines(result.combined)) if has_sections else {}
    )

    branch = select_branch(config, result.exit_code)
    pre_filtered = "\n".join(lines)
    output = None
    if branch is not None:
        output = apply_branch(branch, pre_filtered, sections, has_sections)
    if output is None:
        output = apply_fallback(config, pre_filtered)

    return FilterResult(post_process_output(config, output))


def select_branch(config: FilterConfig, exit_code: int) -> OutputBranch | None:
    """Exit code 0 selects ``on_success``; anything else selects ``on_failure``."""
    return config.on_success if exit_code == 0 else config.on_failure


def apply_branch(
    branch: OutputBranch, combined: str, sections: SectionMap, has_sections: bool
) -> str | None:
    """Render a branch against the combined output.

    Returns ``None`` when sections were expected but nothing was collected,
    signalling that the fallback should be used.
    """
    variables = run_aggregate(branch.aggregate, sections) if branch.aggregate is not None else {}

    if branch.output is not None:
        if has_sections:
            any_collected = any(s.lines or s.blocks for s in sections.values())
            if not any_collected and not variables:
                return None
        variables["output"] = combined
        return render_template(branch.output, variables, sections)

    lines = _lines(combined)
    if branch.tail is not None and len(lines) > branch.tail:
        lines = lines[len(lines) - branch.tail :]
    if branch.head is not None:
        lines = lines[: branch.head]
    lines = apply_skip(branch.skip, lines)

    if branch.extract is not None:
        return apply_extract(branch.extract, lines)
    return "\n".join(lines)


def apply_fallback(config: FilterConfig, combined: str) -> str:
    """Keep the last ``fallback.tail`` lines if configured, else the whole output."""
    if config.fallback is not None and config.fallback.tail is not None:
        tail = config.fallback.tail
        lines = _lines(combined)
        if len(lines) > tail:
            return "\n".join(lines[len(lines) - tail :])
    return combined