"""Template rendering with variables, section collections and pipe chains."""

from __future__ import annotations

import re
from collections.abc import Mapping

from tokf.section import SectionMap

# Nested `each:` templates stop being rendered past this depth.
MAX_DEPTH = 3

_UNSIGNED = re.compile(r"\+?[0-9]+")

_Value = str | list[str]


def render_template(template: str, vars: Mapping[str, str], sections: SectionMap) -> str:
    """Render ``{var}``, ``{var.count}`` and ``{var | pipe | ...}`` expressions.

    Names are looked up in ``vars`` first, then in ``sections``. Unknown names
    render as empty strings.
    """
    return _render(template, vars, sections, 0)


def _render(template: str, vars: Mapping[str, str], sections: SectionMap, depth: int) -> str:
    if depth >= MAX_DEPTH:
        return template
    spans = _find_expressions(template)
    if not spans:
        return template

    pieces: list[str] = []
    last = 0
    for start, end in spans:
        pieces.append(template[last:start])
        pieces.append(_evaluate(template[start + 1 : end - 1], vars, sections, depth))
        last = end
    pieces.append(template[last:])
    return "".join(pieces)


def _is_unescaped_quote(text: str, i: int) -> bool:
    return text[i] == '"' and (i == 0 or text[i - 1] != "\\")


def _find_expressions(template: str) -> list[tuple[int, int]]:
    """Return (start, end) spans of top-level ``{...}`` expressions, end exclusive."""
    spans: list[tuple[int, int]] = []
    i = 0
    while i < len(template):
        if template[i] == "{":
            close = _find_matching_close(template, i)
            if close is not None:
                spans.append((i, close + 1))
                i = close + 1
                continue
        i += 1
    return spans


def _find_matching_close(text: str, start: int) -> int | None:
    depth = 0
    in_quote = False
    for i in range(start, len(text)):
        ch = text[i]
        if _is_unescaped_quote(text, i):
            in_quote = not in_quote
        elif not in_quote:
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return i
    return None


def _split_pipes(expr: str) -> list[str]:
    """Split on ``|`` that is outside quotes and nested braces."""
    parts: list[str] = []
    last = 0
    brace_depth = 0
    in_quote = False
    for i, ch in enumerate(expr):
        if _is_unescaped_quote(expr, i):
            in_quote = not in_quote
        elif not in_quote:
            if ch == "{":
                brace_depth += 1
            elif ch == "}":
                brace_depth -= 1
            elif ch == "|" and brace_depth == 0:
                parts.append(expr[last:i])
                last = i + 1
    parts.append(expr[last:])
    return parts


def _evaluate(expr: str, vars: Mapping[str, str], sections: SectionMap, depth: int) -> str:
    name, *pipes = _split_pipes(expr)
    value = _resolve(name.strip(), vars, sections)
    for pipe in pipes:
        value = _apply_pipe(pipe.strip(), value, vars, sections, depth)
    return value if isinstance(value, str) else ", ".join(value)


def _resolve(name: str, vars: Mapping[str, str], sections: SectionMap) -> _Value:
    if "." in name:
        base, prop = name.split(".", 1)
        data = sections.get(base.strip())
        if prop.strip() == "count" and data is not None:
            return str(data.count())
        return ""
    if name in vars:
        return vars[name]
    data = sections.get(name)
    if data is not None:
        return list(data.items())
    return ""


def _apply_pipe(
    pipe: str, value: _Value, vars: Mapping[str, str], sections: SectionMap, depth: int
) -> _Value:
    if pipe.startswith("join:"):
        return _join(pipe[len("join:") :].strip(), value)
    if pipe.startswith("each:"):
        return _each(pipe[len("each:") :].strip(), value, vars, sections, depth)
    if pipe.startswith("truncate:"):
        return _truncate(pipe[len("truncate:") :].strip(), value)
    if pipe == "lines":
        return _split_lines(value) if isinstance(value, str) else value
    for prefix in ("keep:", "where:"):
        if pipe.startswith(prefix):
            return _keep(pipe[len(prefix) :].strip(), value)
    return value


def _join(arg: str, value: _Value) -> _Value:
    if isinstance(value, str):
        return value
    return _parse_string_arg(arg).join(value)


def _each(
    arg: str, value: _Value, vars: Mapping[str, str], sections: SectionMap, depth: int
) -> _Value:
    template = _parse_string_arg(arg)
    if isinstance(value, str):
        items = [value] if value else []
    else:
        items = value
    return [
        _render(template, {**vars, "index": str(i), "value": item}, sections, depth + 1)
        for i, item in enumerate(items, start=1)
    ]


def _truncate_one(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


def _truncate(arg: str, value: _Value) -> _Value:
    if not _UNSIGNED.fullmatch(arg):
        return value
    limit = int(arg)
    if isinstance(value, str):
        return _truncate_one(value, limit)
    return [_truncate_one(item, limit) for item in value]


def _split_lines(text: str) -> list[str]:
    """Split on ``\\n`` or ``\\r\\n``; a final line ending adds no empty line."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
        return [p.removesuffix("\r") for p in parts]
    return [p.removesuffix("\r") for p in parts[:-1]] + [parts[-1]]


def _keep(arg: str, value: _Value) -> _Value:
    try:
        regex = re.compile(_parse_string_arg(arg))
    except re.error:
        return value
    if isinstance(value, str):
        return value
    return [item for item in value if regex.search(item)]


def _parse_string_arg(arg: str) -> str:
    text = arg.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]
    return unescape(text)


_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


def unescape(s: str) -> str:
    """Turn ``\\n``, ``\\t``, ``\\"`` and ``\\\\`` into the characters they stand for."""
    out: list[str] = []
    chars = iter(s)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, None)
        if nxt is None:
            out.append("\\")
        elif nxt in _ESCAPES:
            out.append(_ESCAPES[nxt])
        else:
            out.append("\\" + nxt)
    return "".join(out)