"""Filter configuration model and TOML loading."""

from __future__ import annotations

import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")


def _where(ctx: str, key: str) -> str:
    return f"{ctx}.{key}" if ctx else key


def _as_table(value: Any, ctx: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{ctx or 'config'}: expected a table")
    return value


def _required_str(data: Mapping[str, Any], key: str, ctx: str) -> str:
    value = _optional_str(data, key, ctx)
    if value is None:
        raise ValueError(f"{_where(ctx, key)}: missing required field")
    return value


def _optional_str(data: Mapping[str, Any], key: str, ctx: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{_where(ctx, key)}: expected a string")
    return value


def _optional_count(data: Mapping[str, Any], key: str, ctx: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{_where(ctx, key)}: expected a non-negative integer")
    return value


def _flag(data: Mapping[str, Any], key: str, ctx: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"{_where(ctx, key)}: expected a boolean")
    return value


def _str_list(data: Mapping[str, Any], key: str, ctx: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{_where(ctx, key)}: expected a list of strings")
    return list(value)


def _str_map(data: Mapping[str, Any], key: str, ctx: str) -> dict[str, str]:
    value = _as_table(data.get(key, {}), _where(ctx, key))
    if not all(isinstance(v, str) for v in value.values()):
        raise ValueError(f"{_where(ctx, key)}: expected string values")
    return dict(value)


def _nested(
    data: Mapping[str, Any],
    key: str,
    ctx: str,
    build: Callable[[Mapping[str, Any], str], T],
) -> T | None:
    value = data.get(key)
    if value is None:
        return None
    where = _where(ctx, key)
    return build(_as_table(value, where), where)


def _table_list(
    data: Mapping[str, Any],
    key: str,
    ctx: str,
    build: Callable[[Mapping[str, Any], str], T],
) -> list[T]:
    value = data.get(key, [])
    where = _where(ctx, key)
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected a list of tables")
    return [build(_as_table(item, f"{where}[{i}]"), f"{where}[{i}]") for i, item in enumerate(value)]


@dataclass
class ExtractRule:
    """A regex whose first match is rendered through an output template."""

    pattern: str
    output: str

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> ExtractRule:
        return cls(_required_str(data, "pattern", ctx), _required_str(data, "output", ctx))


@dataclass
class ReplaceRule:
    """A per-line regex rewrite."""

    pattern: str
    output: str

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> ReplaceRule:
        return cls(_required_str(data, "pattern", ctx), _required_str(data, "output", ctx))


@dataclass
class AggregateRule:
    """Sum and/or count numeric captures over a collected section."""

    from_: str
    pattern: str
    sum: str | None = None
    count_as: str | None = None

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> AggregateRule:
        return cls(
            from_=_required_str(data, "from", ctx),
            pattern=_required_str(data, "pattern", ctx),
            sum=_optional_str(data, "sum", ctx),
            count_as=_optional_str(data, "count_as", ctx),
        )


@dataclass
class MatchOutputRule:
    """Replace the whole output when it contains a substring."""

    contains: str
    output: str

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> MatchOutputRule:
        return cls(_required_str(data, "contains", ctx), _required_str(data, "output", ctx))


@dataclass
class LineExtract:
    """Extract a value from a specific 1-based line."""

    line: int
    pattern: str
    output: str

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> LineExtract:
        line = _optional_count(data, "line", ctx)
        if line is None:
            raise ValueError(f"{_where(ctx, 'line')}: missing required field")
        return cls(line, _required_str(data, "pattern", ctx), _required_str(data, "output", ctx))


@dataclass
class GroupConfig:
    """Group lines by an extracted key, mapping keys to labels."""

    key: ExtractRule
    labels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> GroupConfig:
        key = _nested(data, "key", ctx, ExtractRule._from_table)
        if key is None:
            raise ValueError(f"{_where(ctx, 'key')}: missing required field")
        return cls(key, _str_map(data, "labels", ctx))


@dataclass
class ParseConfig:
    """Structured parsing: a branch line and grouped remaining lines."""

    branch: LineExtract | None = None
    group: GroupConfig | None = None

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> ParseConfig:
        return cls(
            branch=_nested(data, "branch", ctx, LineExtract._from_table),
            group=_nested(data, "group", ctx, GroupConfig._from_table),
        )


@dataclass
class OutputConfig:
    """Output formatting for the parse pipeline."""

    format: str | None = None
    group_counts_format: str | None = None
    empty: str | None = None

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> OutputConfig:
        return cls(
            format=_optional_str(data, "format", ctx),
            group_counts_format=_optional_str(data, "group_counts_format", ctx),
            empty=_optional_str(data, "empty", ctx),
        )


@dataclass
class Section:
    """A named region of output collected by enter/exit/match regexes."""

    name: str | None = None
    enter: str | None = None
    exit: str | None = None
    match_pattern: str | None = None
    split_on: str | None = None
    collect_as: str | None = None

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> Section:
        return cls(
            name=_optional_str(data, "name", ctx),
            enter=_optional_str(data, "enter", ctx),
            exit=_optional_str(data, "exit", ctx),
            match_pattern=_optional_str(data, "match", ctx),
            split_on=_optional_str(data, "split_on", ctx),
            collect_as=_optional_str(data, "collect_as", ctx),
        )


@dataclass
class OutputBranch:
    """How to render output for a success or failure exit code."""

    output: str | None = None
    aggregate: AggregateRule | None = None
    tail: int | None = None
    head: int | None = None
    skip: list[str] = field(default_factory=list)
    extract: ExtractRule | None = None

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> OutputBranch:
        return cls(
            output=_optional_str(data, "output", ctx),
            aggregate=_nested(data, "aggregate", ctx, AggregateRule._from_table),
            tail=_optional_count(data, "tail", ctx),
            head=_optional_count(data, "head", ctx),
            skip=_str_list(data, "skip", ctx),
            extract=_nested(data, "extract", ctx, ExtractRule._from_table),
        )


@dataclass
class FallbackConfig:
    """Used when no branch applies or sections collected nothing."""

    tail: int | None = None

    @classmethod
    def _from_table(cls, data: Mapping[str, Any], ctx: str) -> FallbackConfig:
        return cls(tail=_optional_count(data, "tail", ctx))


@dataclass
class FilterConfig:
    """A complete filter definition for one command."""

    command: str | list[str]
    match_output: list[MatchOutputRule] = field(default_factory=list)
    replace: list[ReplaceRule] = field(default_factory=list)
    strip_ansi: bool = False
    trim_lines: bool = False
    strip_empty_lines: bool = False
    collapse_empty_lines: bool = False
    skip: list[str] = field(default_factory=list)
    keep: list[str] = field(default_factory=list)
    dedup: bool = False
    dedup_window: int | None = None
    parse: ParseConfig | None = None
    output: OutputConfig | None = None
    section: list[Section] = field(default_factory=list)
    on_success: OutputBranch | None = None
    on_failure: OutputBranch | None = None
    fallback: FallbackConfig | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FilterConfig:
        """Build a config from a parsed mapping, raising ValueError on bad fields."""
        data = _as_table(data, "")
        command = data.get("command")
        if command is None:
            raise ValueError("command: missing required field")
        if isinstance(command, list):
            if not command or not all(isinstance(c, str) for c in command):
                raise ValueError("command: expected a string or a list of strings")
            command = list(command)
        elif not isinstance(command, str):
            raise ValueError("command: expected a string or a list of strings")

        return cls(
            command=command,
            match_output=_table_list(data, "match_output", "", MatchOutputRule._from_table),
            replace=_table_list(data, "replace", "", ReplaceRule._from_table),
            strip_ansi=_flag(data, "strip_ansi", ""),
            trim_lines=_flag(data, "trim_lines", ""),
            strip_empty_lines=_flag(data, "strip_empty_lines", ""),
            collapse_empty_lines=_flag(data, "collapse_empty_lines", ""),
            skip=_str_list(data, "skip", ""),
            keep=_str_list(data, "keep", ""),
            dedup=_flag(data, "dedup", ""),
            dedup_window=_optional_count(data, "dedup_window", ""),
            parse=_nested(data, "parse", "", ParseConfig._from_table),
            output=_nested(data, "output", "", OutputConfig._from_table),
            section=_table_list(data, "section", "", Section._from_table),
            on_success=_nested(data, "on_success", "", OutputBranch._from_table),
            on_failure=_nested(data, "on_failure", "", OutputBranch._from_table),
            fallback=_nested(data, "fallback", "", FallbackConfig._from_table),
        )

    @classmethod
    def from_toml(cls, text: str) -> FilterConfig:
        """Parse a TOML document into a config."""
        return cls.from_dict(tomllib.loads(text))