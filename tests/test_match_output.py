from tokf.config import MatchOutputRule
from tokf.match_output import find_matching_rule, render_output


def test_first_match_wins():
    rules = [
        MatchOutputRule(contains="up-to-date", output="ok (up-to-date)"),
        MatchOutputRule(contains="rejected", output="rejected!"),
    ]
    matched = find_matching_rule(rules, "Everything up-to-date")
    assert matched.output == "ok (up-to-date)"


def test_no_match_returns_none():
    rules = [MatchOutputRule(contains="NOMATCH", output="nope")]
    assert find_matching_rule(rules, "some output") is None


def test_empty_rules():
    assert find_matching_rule([], "anything") is None


def test_case_sensitive():
    rules = [MatchOutputRule(contains="Fatal", output="found")]
    assert find_matching_rule(rules, "fatal: error") is None
    assert find_matching_rule(rules, "Fatal: error") == rules[0]


def test_resolves_line_containing():
    output = render_output(
        "\u2717 {line_containing}",
        "fatal:",
        "some preamble\nfatal: bad revision\nmore stuff",
    )
    assert output == "\u2717 fatal: bad revision"


def test_resolves_output_var():
    assert render_output("matched: {output}", "keyword", "line with keyword") == (
        "matched: line with keyword"
    )


def test_plain_string_passthrough():
    assert render_output("ok (up-to-date)", "up-to-date", "Everything up-to-date") == (
        "ok (up-to-date)"
    )


def test_no_matching_line_empty_var():
    assert render_output("\u2717 {line_containing}", "fatal:", "no match here") == "\u2717 "