from __future__ import annotations

from zephyr.template.context import TemplateContext
from zephyr.template.handlers import compile_event_handlers, mutated_variables


def test_inline_handler_is_lifted() -> None:
    context = TemplateContext(scope_id="zph-abc", reactive=frozenset({"count"}))
    result = compile_event_handlers('<button onclick="count++">+</button>', context)

    assert result.template == '<button onclick="handle0_zph_abc.call(this, event)">+</button>'
    handler = result.handlers[0]
    assert handler.event == "click"
    assert handler.code == "count(count() + 1);"
    assert "window.handle0_zph_abc = function (event) {" in result.code


def test_in_place_mutations_refresh_the_dom() -> None:
    context = TemplateContext(scope_id="zph-abc", reactive=frozenset({"items"}))
    result = compile_event_handlers('<button onclick="items.push(1)">add</button>', context)
    assert result.handlers[0].code == "items().push(1);"
    assert "updateItemsDOM(items());" in result.code


def test_component_tags_are_skipped() -> None:
    context = TemplateContext(scope_id="zph-abc")
    template = '<Child onclick="go()" />'
    result = compile_event_handlers(template, context)
    assert result.template == template
    assert result.code == ""


def test_mutated_variables() -> None:
    code = "user.name = 'x'; items.push(1); count = 2; other.list[0] = 1"
    assert mutated_variables(code, ["user", "items", "count"]) == ["user", "items"]
