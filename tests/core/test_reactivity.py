"""Tests for reactive declarations and accessor generation."""

from __future__ import annotations

from zephyr.core.literals import RawExpression
from zephyr.core.reactivity import (
    ReactivityTransformer,
    collect_reactive_variables,
    find_reactive_declarations,
)

SCOPE = "zph-abc"


def test_find_reactive_declarations_only_matches_marker_calls() -> None:
    script = "let count = $(0)\nconst label = 'x'\nconst doubled = $computed(() => count * 2)"
    assert [item.name for item in find_reactive_declarations(script)] == ["count"]


def test_collect_reactive_variables_detects_objects_and_raw_values() -> None:
    variables = collect_reactive_variables("const user = $({ name: 'Ann' })\nlet started = $(Date.now())")
    assert variables["user"].is_object
    assert variables["user"].initial_value == {"name": "Ann"}
    assert variables["started"].initial_value == RawExpression("Date.now()")
    assert not variables["started"].has_static_value


def test_track_path_records_intermediate_paths() -> None:
    variables = collect_reactive_variables("const user = $({ address: { city: 'x' } })")
    variables["user"].track_path(["address", "city"])
    assert variables["user"].accessed_paths == ["address", "address.city"]


def test_transform_replaces_declaration_and_rewrites_usages() -> None:
    script = "let count = $(0)\nfunction increment() { count++ }"
    variables = collect_reactive_variables(script)
    result = ReactivityTransformer(SCOPE).transform(script, variables)

    assert result.script == "let _count = 0\nfunction increment() { count(count() + 1) }"
    assert "function count(value)" in result.code
    assert "_count = value;" in result.code
    assert "function updateCountDOM(value)" in result.code
    assert '[data-zph-abc][data-reactive=\\"count\\"]' in result.code


def test_transform_notifies_update_hooks_when_present() -> None:
    script = "let count = $(0)"
    variables = collect_reactive_variables(script)
    result = ReactivityTransformer(SCOPE).transform(script, variables, has_update_hooks=True)
    assert "_runUpdateCallbacks_zph_abc(['count'])" in result.code


def test_transform_generates_property_setters_for_tracked_paths() -> None:
    script = "const user = $({ name: 'Ann' })"
    variables = collect_reactive_variables(script)
    variables["user"].track_path(["name"])
    result = ReactivityTransformer(SCOPE).transform(script, variables)
    assert "function setUserName(value)" in result.code
    assert "_user.name = value;" in result.code


def test_transform_renders_non_static_values_on_ready() -> None:
    script = "let started = $(Date.now())"
    variables = collect_reactive_variables(script)
    result = ReactivityTransformer(SCOPE).transform(script, variables, rendered={"started"})
    assert result.script == "let _started = Date.now()"
    assert "updateStartedDOM(_started)" in result.code


def test_transform_keeps_mounted_indicator_text() -> None:
    script = "let mounted = $(false)"
    variables = collect_reactive_variables(script)
    result = ReactivityTransformer(SCOPE).transform(script, variables)
    assert "'Mounted'" in result.code
    assert "indicator" in result.code


def test_transform_rewrites_computed_reads_through_extra_names() -> None:
    script = "let count = $(1)\nconsole.log(doubled)"
    variables = collect_reactive_variables(script)
    result = ReactivityTransformer(SCOPE).transform(script, variables, extra_names={"doubled"})
    assert "console.log(doubled())" in result.script
