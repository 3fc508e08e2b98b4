"""Tests for rewriting reactive usages into accessor calls."""

from __future__ import annotations

import pytest

from zephyr.core.transformer import rewrite_reactive


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("count++", "count(count() + 1)"),
        ("count--", "count(count() - 1)"),
        ("++count", "count(count() + 1)"),
        ("count = 5;", "count(5);"),
        ("count += 2", "count(count() + 2)"),
        ("count *= factor", "count(count() * factor)"),
        ("count -= step * 2", "count(count() - (step * 2))"),
        ("console.log(count)", "console.log(count())"),
    ],
)
def test_rewrite_reactive_rewrites_reads_and_writes(code: str, expected: str) -> None:
    assert rewrite_reactive(code, {"count"}) == expected


def test_rewrite_reactive_rewrites_assigned_value_expression() -> None:
    assert rewrite_reactive("total = count * 2", {"count", "total"}) == "total(count() * 2)"


def test_rewrite_reactive_leaves_strings_comments_and_properties() -> None:
    code = "user.count = 1; log('count'); // count"
    assert rewrite_reactive(code, {"count"}) == code


def test_rewrite_reactive_leaves_calls_alone() -> None:
    assert rewrite_reactive("count()", {"count"}) == "count()"


def test_rewrite_reactive_respects_arrow_parameters() -> None:
    code = "const next = (count) => count + 1"
    assert rewrite_reactive(code, {"count"}) == code


def test_rewrite_reactive_respects_function_parameters() -> None:
    code = "function reset(count) { count = 0 }"
    assert rewrite_reactive(code, {"count"}) == code


def test_rewrite_reactive_expands_shorthand_properties() -> None:
    assert rewrite_reactive("const payload = { count }", {"count"}) == "const payload = { count: count() }"


def test_rewrite_reactive_keeps_object_keys() -> None:
    assert rewrite_reactive("const o = { count: count }", {"count"}) == "const o = { count: count() }"


def test_rewrite_reactive_rewrites_template_substitutions() -> None:
    assert rewrite_reactive("const label = `n=${count}`", {"count"}) == "const label = `n=${count()}`"


def test_rewrite_reactive_without_names_is_identity() -> None:
    assert rewrite_reactive("count++", set()) == "count++"


def test_rewrite_reactive_keeps_destructuring_keys() -> None:
    code = "const { count: alias } = obj;"
    assert rewrite_reactive(code, {"count"}) == code


def test_rewrite_reactive_keeps_top_level_destructured_names() -> None:
    code = "const { count } = obj;"
    assert rewrite_reactive(code, {"count"}) == code


def test_rewrite_reactive_keeps_nested_destructuring_keys() -> None:
    code = "function load() { const { count: alias } = obj; return alias; }"
    assert rewrite_reactive(code, {"count"}) == code


def test_rewrite_reactive_respects_top_level_for_loop_bindings() -> None:
    code = "for (let count = 0; count < 3; count++) { total += count; }\ncount++"
    assert rewrite_reactive(code, {"count"}) == (
        "for (let count = 0; count < 3; count++) { total += count; }\ncount(count() + 1)"
    )


def test_rewrite_reactive_for_loop_binding_ends_with_unbraced_body() -> None:
    code = "for (const count of list) log(count);\nlog(count)"
    assert rewrite_reactive(code, {"count"}) == "for (const count of list) log(count);\nlog(count())"


def test_rewrite_reactive_ignores_increment_after_line_break() -> None:
    assert rewrite_reactive("count\n++other", {"count"}) == "count()\n++other"
    assert rewrite_reactive("total\n++count", {"count"}) == "total\ncount(count() + 1)"
