from __future__ import annotations

from pathlib import Path

from zephyr.errors import WarningCollector
from zephyr.models import CompileResult, ParsedComponent, ResolvedImport
from zephyr.template.components import (
    apply_props,
    collect_child_scope_ids,
    render_components,
    render_usage,
)
from zephyr.template.markup import iter_tags


def _resolved(name: str, html: str, *, scope_id: str = "zph-b", is_store: bool = False) -> ResolvedImport:
    component = ParsedComponent(name=name, scope_id=scope_id, is_store=is_store)
    return ResolvedImport(
        alias=name,
        path=Path(f"/tmp/{name}.zph"),
        component=component,
        result=CompileResult(html=html, css="", js="", js_body="", component=component),
        instance_id=f"{name.lower()}-x",
    )


def test_apply_props_escapes_values() -> None:
    assert apply_props("<p>{{ props.label }} {{ label }}</p>", {"label": "<Hi>"}) == "<p>&lt;Hi&gt; &lt;Hi&gt;</p>"


def test_render_usage_fills_slot_and_instance() -> None:
    tag = next(iter_tags('<Button label="Go" data-test="x">'))
    rendered = render_usage('<button class="btn"><slot /></button>', tag, "button-x-1", "Click")
    assert rendered == '<button class="btn" data-instance="button-x-1" data-test="x">Click</button>'


def test_render_usage_wraps_text_only_children() -> None:
    tag = next(iter_tags("<Note />"))
    assert render_usage("Hello", tag, "note-x-1") == '<div data-instance="note-x-1">Hello</div>'


def test_render_components_numbers_usages() -> None:
    imports = {"Button": _resolved("Button", "<button>{{ label }}</button>")}
    markup = render_components('<Button label="A" /><Button label="B" />', imports)
    assert markup == (
        '<button data-instance="button-x-1">A</button><button data-instance="button-x-2">B</button>'
    )


def test_render_components_warns_once_about_unknown_tags() -> None:
    warnings = WarningCollector()
    markup = render_components("<Widget /><Widget />", {}, warnings=warnings, filename="App.zph")
    assert markup == "<Widget /><Widget />"
    assert [item.message for item in warnings] == ["Component <Widget> is used but not imported"]


def test_collect_child_scope_ids_skips_stores() -> None:
    imports = {
        "A": _resolved("A", "", scope_id="zph-a"),
        "B": _resolved("B", "", scope_id="zph-a"),
        "Cart": _resolved("Cart", "", scope_id="zph-c", is_store=True),
    }
    assert collect_child_scope_ids(imports) == ["zph-a"]
