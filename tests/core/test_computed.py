"""Tests for computed properties."""

from __future__ import annotations

from zephyr.core.computed import ComputedEngine, parse_computed_arguments, process_computed

SCOPE = "zph-abc"


def test_parse_computed_arguments_handles_expression_and_deps() -> None:
    assert parse_computed_arguments("() => count * 2") == ("count * 2", None)
    assert parse_computed_arguments("() => user.name, [user]") == ("user.name", ["user"])


def test_parse_computed_arguments_wraps_block_bodies() -> None:
    expression, explicit = parse_computed_arguments("() => { return a + b }")
    assert expression == "(() => { return a + b })()"
    assert explicit is None


def test_process_infers_dependencies_and_builds_cascade() -> None:
    script = (
        "let count = $(1)\n"
        "const doubled = $computed(() => count * 2)\n"
        "const quadrupled = $computed(() => doubled * 2)"
    )
    result = ComputedEngine(SCOPE).process(script, ["count"])

    assert result.variables["doubled"].reactive_dependencies == ["count"]
    assert result.variables["quadrupled"].computed_dependencies == ["doubled"]
    assert result.reactive_dependents == {"count": ["doubled"]}
    assert result.computed_dependents == {"doubled": ["quadrupled"]}
    assert "// computed: doubled" in result.script
    assert "$computed" not in result.script


def test_process_generates_memoized_getters_and_wiring() -> None:
    script = "const doubled = $computed(() => count * 2)"
    result = process_computed(script, ["count"], SCOPE)

    assert "let _doubled_dirty = true;" in result.code
    assert "_doubled_cached = count() * 2;" in result.code
    assert "function invalidateDoubled()" in result.code
    assert "function updateDoubledDOM()" in result.code
    assert "const _original = updateCountDOM;" in result.code
    assert "invalidateDoubled();" in result.code


def test_process_respects_explicit_dependencies() -> None:
    script = "const label = $computed(() => user.name + suffix, [user])"
    result = ComputedEngine(SCOPE).process(script, ["user", "suffix"])
    assert result.variables["label"].reactive_dependencies == ["user"]


def test_process_warns_about_cycles() -> None:
    script = "const a = $computed(() => b + 1)\nconst b = $computed(() => a + 1)"
    result = ComputedEngine(SCOPE).process(script, [])
    assert result.warnings
    assert "depend on each other" in result.warnings[0]
