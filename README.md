# tokf

Config-driven filters that shrink noisy command output into short, readable
summaries. A filter is described in TOML and applied to a command's captured
output and exit code.

## Installation

```
pip install tokf
```

## Describing a filter

```toml
command = "git push"
strip_ansi = true
skip = ["^Enumerating", "^Counting"]

[on_success]
extract = { pattern = '(\S+)\s*->\s*(\S+)', output = "ok {2}" }

[on_failure]
tail = 5
```

`FilterConfig.from_toml(text)` parses such a document, and
`FilterConfig.from_dict(data)` builds a config from an already parsed mapping.
Both raise `ValueError` for missing or mistyped fields. `command` may be a
string or a list of strings.

## Applying it

```python
from tokf.config import FilterConfig
from tokf.pipeline import CommandResult, apply

with open("push.toml") as fh:
    config = FilterConfig.from_toml(fh.read())

result = CommandResult(
    exit_code=0,
    combined="Enumerating objects: 5\nabc1234..def5678 main -> main",
)
print(apply(config, result).output)   # ok main
```

`apply` returns a `FilterResult` whose `output` holds the filtered text.

## Processing order

1. `match_output` — the first rule whose `contains` substring appears wins;
   its `output` template may use `{line_containing}` and `{output}`
2. `replace` — per-line regex rewrites, chained in order
3. `strip_ansi` / `trim_lines` — per-line cleanup
4. `skip` / `keep` — top-level line filtering
5. `dedup` / `dedup_window` — collapse duplicate lines
6. `parse` with `output` — structured path (a branch line plus grouped counts)
7. `section` — state-machine line collection (`enter`, `exit`, `match`,
   `split_on`, `collect_as`), matched against the unmodified lines
8. `on_success` / `on_failure` — chosen by exit code; renders an `output`
   template (optionally with an `aggregate` rule), or applies `tail`, `head`,
   `skip` and `extract`
9. `fallback` — used when no branch applies or sections collected nothing;
   `tail` keeps the last lines
10. `strip_empty_lines` / `collapse_empty_lines` — final post-processing

## Templates

Branch `output` templates support `{var}`, `{section.count}` and pipe chains
such as `{items | each: "{index}. {value}" | join: "\n"}`, plus `truncate: N`,
`lines`, and `keep:` / `where:` regex filters. `{output}` always holds the
pre-filtered output. Unknown names render as empty strings.

## Building blocks

Each stage can be used on its own:

- `tokf.skip` — `apply_skip`, `apply_keep`
- `tokf.dedup` — `apply_dedup`
- `tokf.extract` — `apply_extract`, `interpolate`
- `tokf.replace` — `apply_replace`
- `tokf.section` — `collect_sections`, `SectionData`
- `tokf.aggregate` — `run_aggregate`
- `tokf.template` — `render_template`, `unescape`
- `tokf.group` — `collect_groups`, `render_group_counts`, `GroupCount`
- `tokf.parse` — `run_parse`, `render_output`, `ParseResult`
- `tokf.match_output` — `find_matching_rule`, `render_output`
- `tokf.cleanup` — `apply_line_cleanup`, `post_process_output`
- `tokf.pipeline` — `apply`, `select_branch`, `apply_branch`, `apply_fallback`
- `tokf.gain` — `format_num` for comma-separated counts

## What it does not do

tokf is a library only. It does not run commands — you supply their captured
output and exit code in a `CommandResult`. There is no command-line tool, no
lookup of filter files on disk, no scripting hook, and no record of runs or
token-savings reports; `tokf.gain` only provides number formatting.