from __future__ import annotations

from zephyr.style.parser import at_rule_name, parse_css, split_selectors


def test_parse_css_reads_rules_and_declarations() -> None:
    rules = parse_css(".a, .b > c { color: red; background: url(a;b.png) }")
    assert len(rules) == 1
    rule = rules[0]
    assert rule.selectors == [".a", ".b > c"]
    assert [(item.name, item.value) for item in rule.declarations] == [
        ("color", "red"),
        ("background", "url(a;b.png)"),
    ]


def test_parse_css_tracks_at_rules() -> None:
    css = (
        "@import url('x.css');\n"
        "@media (max-width: 600px) { .a { color: red } }\n"
        "@keyframes spin { from { opacity: 0 } to { opacity: 1 } }\n"
        "@font-face { font-family: Demo; src: url(demo.woff) }"
    )
    statement, media, start, end, font = parse_css(css)

    assert statement.statement
    assert statement.selectors == ["@import url('x.css')"]
    assert media.at_rules == ("@media (max-width: 600px)",)
    assert not media.in_keyframes
    assert start.selectors == ["from"] and start.in_keyframes
    assert end.selectors == ["to"]
    assert font.is_at_rule
    assert font.declarations[0].value == "Demo"


def test_parse_css_skips_comments_and_incomplete_rules() -> None:
    rules = parse_css("/* header */ .a { /* inline */ color: red } .b { color: blue")
    assert len(rules) == 1
    assert rules[0].declarations[0].name == "color"


def test_parse_css_keeps_strings_intact() -> None:
    rules = parse_css(".quote::before { content: '; }' }")
    assert rules[0].declarations[0].value == "'; }'"


def test_split_selectors_respects_parentheses() -> None:
    assert split_selectors("a:is(.x, .y),\n  b   c") == ["a:is(.x, .y)", "b c"]


def test_at_rule_name() -> None:
    assert at_rule_name("@media (max-width: 1px)") == "@media"
    assert at_rule_name("@Media(min-width:1px)") == "@media"
