import re

from tokf.config import ExtractRule
from tokf.extract import apply_extract, interpolate


def test_extract_first_match_wins():
    rule = ExtractRule(r"(\S+)\s*->\s*(\S+)", "ok \u2713 {2}")
    lines = [
        "Enumerating objects: 5",
        "abc1234..def5678 main -> main",
        "another -> branch",
    ]
    assert apply_extract(rule, lines) == "ok \u2713 main"


def test_extract_no_match_passthrough():
    rule = ExtractRule("NOMATCH", "{1}")
    assert apply_extract(rule, ["line one", "line two"]) == "line one\nline two"


def test_extract_invalid_regex_passthrough():
    rule = ExtractRule("[invalid", "{1}")
    assert apply_extract(rule, ["line one", "line two"]) == "line one\nline two"


def test_extract_empty_lines_no_match():
    rule = ExtractRule(r"(\d+)", "{1}")
    assert apply_extract(rule, []) == ""


def test_interpolate_replaces_numbered_groups():
    match = re.search(r"^\[(\S+)\s+(\w+)\]", "[main abc1234] Add feature X")
    assert interpolate("ok \u2713 {2}", match) == "ok \u2713 abc1234"


def test_interpolate_group_zero_is_full_match():
    match = re.search(r"(hello) (world)", "hello world")
    assert interpolate("{0}", match) == "hello world"


def test_interpolate_missing_group_becomes_empty():
    match = re.search(r"(a)(b)?", "a")
    assert interpolate("{1}-{2}", match) == "a-"


def test_interpolate_reverse_order_prevents_partial_replace():
    match = re.search(r"(a)(b)(c)(d)(e)(f)(g)(h)(i)(j)(k)", "abcdefghijk")
    assert interpolate("{10}", match) == "j"


def test_extract_git_commit_pattern():
    rule = ExtractRule(r"^\[(\S+)\s+(\w+)\]", "ok \u2713 {2}")
    lines = [
        "[main abc1234] Add feature X",
        " 1 file changed, 10 insertions(+), 2 deletions(-)",
    ]
    assert apply_extract(rule, lines) == "ok \u2713 abc1234"


def test_extract_git_push_pattern():
    rule = ExtractRule(r"(\S+)\s*->\s*(\S+)", "ok \u2713 {2}")
    assert apply_extract(rule, ["   abc1234..def5678 main -> main"]) == "ok \u2713 main"