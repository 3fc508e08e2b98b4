from __future__ import annotations

from zephyr.template.references import parse_references, resolve_expression


def test_parse_references_finds_all_forms() -> None:
    references = parse_references("<p>{{ user.name }} {{{ markup }}} {{@ trusted }}</p>")

    assert [item.expression for item in references] == ["user.name", "markup", "trusted"]
    assert [item.raw for item in references] == [False, True, True]
    assert references[0].variable == "user"
    assert references[0].path == ["name"]
    assert references[0].full_match == "{{ user.name }}"


def test_parse_references_skips_empty_and_unclosed() -> None:
    assert parse_references("{{ }} {{ open") == []


def test_resolve_expression() -> None:
    assert resolve_expression("user . address . city") == ("user", ["address", "city"])
    assert resolve_expression("items.length > 0") == ("items", [])
    assert resolve_expression("format(count)") == ("format", [])
    assert resolve_expression("'text'") == (None, [])


def test_reference_is_simple() -> None:
    simple, complex_ = parse_references("{{ user.name }}{{ count + 1 }}")
    assert simple.is_simple
    assert not complex_.is_simple
