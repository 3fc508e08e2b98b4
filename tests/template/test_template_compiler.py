from __future__ import annotations

from zephyr.template.compiler import TemplateCompiler
from zephyr.template.context import TemplateContext


def test_compile_runs_every_pass() -> None:
    context = TemplateContext(scope_id="zph-abc", constants={"count": 0}, reactive=frozenset({"count"}))
    result = TemplateCompiler().compile('<button onclick="count++">{{ count }}</button>', context)

    assert result.html == (
        '<button onclick="handle0_zph_abc.call(this, event)">'
        '<span data-reactive="count" data-zph-abc>0</span></button>'
    )
    assert result.rendered == ["count"]
    assert "window.handle0_zph_abc" in result.handler_js
    assert result.directive_js == ""


def test_compile_exports_functions_called_from_loops() -> None:
    context = TemplateContext(scope_id="zph-abc", reactive=frozenset({"items"}))
    result = TemplateCompiler().compile('<li @each="item in items" onclick="pick(item)">x</li>', context)
    assert "window.pick = pick;" in result.loop_exports_js


def test_compile_empty_template() -> None:
    result = TemplateCompiler().compile("", TemplateContext(scope_id="zph-abc"))
    assert result.html == ""
