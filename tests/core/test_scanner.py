"""Tests for the script tokenizer."""

from __future__ import annotations

from zephyr.core.scanner import (
    COMMENT,
    IDENT,
    REGEX,
    STRING,
    TEMPLATE,
    expression_end,
    find_unbalanced,
    match_brackets,
    referenced_identifiers,
    split_template,
    tokenize,
)


def test_tokenize_round_trips_source_text() -> None:
    source = "let total = items.length /* count */ + `${a}b` // done\n"
    tokens = tokenize(source)
    assert "".join(token.text for token in tokens) == source


def test_tokenize_classifies_strings_comments_and_templates() -> None:
    tokens = [token for token in tokenize("x = 'a;b' // note\ny = `t ${z}`") if token.significant or token.kind == COMMENT]
    kinds = [(token.kind, token.text) for token in tokens]
    assert (STRING, "'a;b'") in kinds
    assert (COMMENT, "// note") in kinds
    assert (TEMPLATE, "`t ${z}`") in kinds


def test_tokenize_tells_regex_from_division() -> None:
    regex = [token for token in tokenize("const re = /ab+c/gi") if token.kind == REGEX]
    assert [token.text for token in regex] == ["/ab+c/gi"]
    division = [token for token in tokenize("const half = total / 2 / 1") if token.kind == REGEX]
    assert division == []


def test_tokenize_prefers_longest_punctuator() -> None:
    texts = [token.text for token in tokenize("a ??= b === c") if token.significant]
    assert texts == ["a", "??=", "b", "===", "c"]


def test_match_brackets_pairs_nested_brackets() -> None:
    tokens = tokenize("f(a[0], {b: 1})")
    pairs = match_brackets(tokens)
    opener = next(index for index, token in enumerate(tokens) if token.text == "(")
    assert tokens[pairs[opener]].text == ")"
    assert pairs[pairs[opener]] == opener


def test_find_unbalanced_reports_missing_closer() -> None:
    assert find_unbalanced(tokenize("if (a) { b()")) is not None
    assert find_unbalanced(tokenize("if (a) { b() }")) is None
    stray = find_unbalanced(tokenize("a)"))
    assert stray is not None and stray.text == ")"


def test_expression_end_stops_at_line_break_without_continuation() -> None:
    tokens = tokenize("a + b\nfoo()")
    end = expression_end(tokens, 0, match_brackets(tokens))
    assert "".join(token.text for token in tokens[:end]) == "a + b"


def test_expression_end_continues_across_operator_lines() -> None:
    tokens = tokenize("a +\n  b\n  .trim(); next")
    end = expression_end(tokens, 0, match_brackets(tokens))
    assert tokens[end].text == ";"


def test_split_template_separates_substitutions() -> None:
    assert split_template("`Hi ${name}!`") == [(False, "Hi "), (True, "name"), (False, "!")]


def test_referenced_identifiers_skips_property_names() -> None:
    names = referenced_identifiers("user.name + count * `${other.value}`")
    assert names == ["user", "count", "other"]
