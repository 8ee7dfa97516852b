"""Collect named regions of command output into lines or blocks."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from tokf.config import Section


@dataclass
class SectionData:
    """Lines collected by a section, and blocks if the section splits them."""

    lines: list[str] = field(default_factory=list)
    blocks: list[str] = field(default_factory=list)

    def count(self) -> int:
        """Block count if blocks were produced, otherwise line count."""
        return len(self.blocks) if self.blocks else len(self.lines)

    def items(self) -> list[str]:
        """Blocks if available, otherwise lines."""
        return self.blocks if self.blocks else self.lines


SectionMap = dict[str, SectionData]


class _InvalidPattern(Exception):
    pass


def _compile_optional(pattern: str | None) -> re.Pattern[str] | None:
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise _InvalidPattern(pattern) from exc


class _SectionRunner:
    """Per-section state during a single pass over the lines."""

    def __init__(self, section: Section, collect_as: str) -> None:
        self.collect_as = collect_as
        self.enter_re = _compile_optional(section.enter)
        self.exit_re = _compile_optional(section.exit)
        self.match_re = _compile_optional(section.match_pattern)
        self.split_re = _compile_optional(section.split_on)
        self.is_stateful = section.enter is not None
        # Stateless sections are always active.
        self.active = not self.is_stateful
        self.collected: list[str] = []

    @classmethod
    def build(cls, section: Section) -> _SectionRunner | None:
        if section.collect_as is None:
            return None
        try:
            return cls(section, section.collect_as)
        except _InvalidPattern:
            return None

    def process_line(self, line: str) -> None:
        if self.is_stateful:
            if not self.active:
                if self.enter_re is not None and self.enter_re.search(line):
                    self.active = True
                return
            if self.exit_re is not None and self.exit_re.search(line):
                self.active = False
                return
        if self.match_re is None or self.match_re.search(line):
            self.collected.append(line)

    def finish(self) -> tuple[str, SectionData]:
        data = SectionData(lines=self.collected)
        if self.split_re is not None:
            data.blocks = _split_into_blocks(data.lines, self.split_re)
        return self.collect_as, data


def _split_into_blocks(lines: Iterable[str], separator: re.Pattern[str]) -> list[str]:
    """Split lines into blocks at separator lines; no empty blocks are produced."""
    blocks: list[str] = []
    current: list[str] = []
    for line in lines:
        if separator.search(line):
            if current:
                blocks.append("\n".join(current))
                current = []
        else:
            current.append(line)
    if current:
        blocks.append("\n".join(current))
    return blocks


def collect_sections(sections: Sequence[Section], lines: Sequence[str]) -> SectionMap:
    """Run every section over the lines and collect the results by name.

    Sections without ``collect_as`` or with an invalid pattern are ignored. When
    several sections share a name, the last one wins.
    """
    runners = [r for r in map(_SectionRunner.build, sections) if r is not None]
    for line in lines:
        for runner in runners:
            runner.process_line(line)
    return dict(runner.finish() for runner in runners)