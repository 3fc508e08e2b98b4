"""Tests for literal parsing used by constant extraction."""

from __future__ import annotations

import pytest

from zephyr.core.literals import (
    UNDEFINED,
    LiteralError,
    RawExpression,
    is_static,
    parse_literal,
    parse_value,
    to_js,
)


def test_parse_literal_handles_scalars() -> None:
    assert parse_literal("42") == 42
    assert parse_literal("-1.5") == -1.5
    assert parse_literal("0x1F") == 31
    assert parse_literal("'it\\'s'") == "it's"
    assert parse_literal("`plain`") == "plain"
    assert parse_literal("true") is True
    assert parse_literal("null") is None
    assert parse_literal("undefined") is UNDEFINED


def test_parse_literal_handles_nested_structures() -> None:
    value = parse_literal("{ name: 'Ann', 'tags': ['a', 'b',], 1: { ok: false }, }")
    assert value == {"name": "Ann", "tags": ["a", "b"], "1": {"ok": False}}


def test_parse_literal_skips_comments() -> None:
    assert parse_literal("[1, /* two */ 2 // three\n]") == [1, 2]


def test_parse_literal_rejects_expressions() -> None:
    with pytest.raises(LiteralError):
        parse_literal("count + 1")
    with pytest.raises(LiteralError):
        parse_literal("`Hello ${name}`")


def test_parse_value_falls_back_to_raw_expression() -> None:
    value = parse_value(" Date.now() ")
    assert value == RawExpression("Date.now()")
    assert not is_static(value)
    assert not is_static([1, RawExpression("x")])
    assert is_static({"a": [1, "b"]})


def test_to_js_serializes_literals() -> None:
    assert to_js({"a": [1, True, None]}) == '{"a": [1, true, null]}'
    assert to_js(RawExpression("new Map()")) == "new Map()"
    assert to_js(UNDEFINED) == "undefined"
