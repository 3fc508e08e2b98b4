"""Tests for compile-time constant extraction."""

from __future__ import annotations

from zephyr.core.constants import extract_constants
from zephyr.core.literals import RawExpression


def test_extract_constants_reads_const_and_reactive_literals() -> None:
    script = """
    const title = "Counter"
    let count = $(0)
    const user = $({ name: 'Ann' })
    let plain = 5
    """
    constants = extract_constants(script)
    assert constants["title"] == "Counter"
    assert constants["count"] == 0
    assert constants["user"] == {"name": "Ann"}
    assert "plain" not in constants


def test_extract_constants_skips_computed_and_nested_declarations() -> None:
    script = """
    const doubled = $computed(() => count * 2)
    function helper() {
      const inner = 1
    }
    """
    constants = extract_constants(script)
    assert "doubled" not in constants
    assert "inner" not in constants


def test_extract_constants_keeps_unresolvable_values_raw() -> None:
    constants = extract_constants("const started = Date.now()")
    assert constants["started"] == RawExpression("Date.now()")


def test_extract_constants_overrides_win() -> None:
    constants = extract_constants("let count = $(0)\nconst count2 = 1", {"count": 7})
    assert constants["count"] == 7
    assert constants["count2"] == 1
