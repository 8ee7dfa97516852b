import pytest

from tokf.config import ExtractRule, GroupConfig, LineExtract, OutputConfig, ParseConfig
from tokf.group import GroupCount
from tokf.parse import ParseResult, render_output, run_parse


def _git_status_group():
    return GroupConfig(
        key=ExtractRule(pattern=r"^(.{2}) ", output="{1}"),
        labels={
            "M ": "modified",
            " M": "modified (unstaged)",
            "??": "untracked",
            "A ": "added",
            "D ": "deleted",
        },
    )


@pytest.fixture
def parse_config():
    return ParseConfig(
        branch=LineExtract(
            line=1,
            pattern=r"## (\S+?)(?:\.\.\.(\S+))?(?:\s+\[(.+)\])?$",
            output="{1}",
        ),
        group=_git_status_group(),
    )


@pytest.fixture
def output_config():
    return OutputConfig(
        format="{branch}{tracking_info}\n{group_counts}",
        group_counts_format="  {label}: {count}",
        empty="clean \u2014 nothing to commit",
    )


def test_run_parse_extracts_branch(parse_config):
    result = run_parse(parse_config, ["## main...origin/main", "M  src/main.rs"])
    assert result.vars["branch"] == "main"


def test_run_parse_collects_groups(parse_config):
    lines = ["## main...origin/main", "M  src/main.rs", "?? new.txt", "?? other.txt"]
    result = run_parse(parse_config, lines)
    assert result.group_counts == [GroupCount("modified", 1), GroupCount("untracked", 2)]


def test_run_parse_no_branch_config():
    config = ParseConfig(branch=None, group=_git_status_group())
    result = run_parse(config, ["M  src/main.rs", "?? new.txt"])
    assert result.vars == {}
    assert len(result.group_counts) == 2


def test_run_parse_empty_lines(parse_config):
    result = run_parse(parse_config, [])
    assert result.vars == {}
    assert result.group_counts == []


def test_run_parse_branch_line_out_of_bounds():
    config = ParseConfig(
        branch=LineExtract(line=99, pattern=r"## (\S+)", output="{1}"), group=None
    )
    assert run_parse(config, ["only one line"]).vars == {}


def test_run_parse_invalid_branch_regex():
    config = ParseConfig(
        branch=LineExtract(line=1, pattern="[invalid", output="{1}"), group=None
    )
    assert run_parse(config, ["## main...origin/main"]).vars == {}


def test_render_output_normal(parse_config, output_config):
    lines = [
        "## main...origin/main",
        "M  src/main.rs",
        " M src/lib.rs",
        "?? new.txt",
        "?? other.txt",
    ]
    rendered = render_output(output_config, run_parse(parse_config, lines))
    assert rendered == "main\n  modified: 1\n  modified (unstaged): 1\n  untracked: 2"


def test_render_output_clean_repo(parse_config, output_config):
    rendered = render_output(output_config, run_parse(parse_config, ["## main...origin/main"]))
    assert rendered == "main\nclean \u2014 nothing to commit"


def test_render_output_default_config():
    parse_result = ParseResult(
        vars={"branch": "main"}, group_counts=[GroupCount("modified", 3)]
    )
    assert render_output(OutputConfig(), parse_result) == "main\n  modified: 3"


def test_render_output_unresolved_vars_cleaned(output_config):
    parse_result = ParseResult(vars={"branch": "main"}, group_counts=[])
    assert render_output(output_config, parse_result) == "main\nclean \u2014 nothing to commit"