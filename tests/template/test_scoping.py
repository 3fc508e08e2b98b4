from __future__ import annotations

from zephyr.template.scoping import apply_smart_scope, wrap_root


def test_apply_smart_scope_marks_targeted_elements() -> None:
    template = '<div class="a"><span>x</span><p id="b"></p><Child class="c" /></div>'
    assert apply_smart_scope(template, "zph-abc") == (
        '<div class="a" data-zph-abc><span>x</span><p id="b" data-zph-abc></p><Child class="c" /></div>'
    )


def test_apply_smart_scope_marks_compiler_markers() -> None:
    template = '<span data-reactive="count">0</span>'
    assert apply_smart_scope(template, "zph-abc") == '<span data-reactive="count" data-zph-abc>0</span>'


def test_apply_smart_scope_is_idempotent() -> None:
    once = apply_smart_scope('<p class="x">y</p>', "zph-abc")
    assert apply_smart_scope(once, "zph-abc") == once


def test_wrap_root() -> None:
    assert wrap_root("<p>x</p>", "zph-abc") == '<div data-zph-abc style="display: contents"><p>x</p></div>'
