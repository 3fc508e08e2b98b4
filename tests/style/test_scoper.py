from __future__ import annotations

from zephyr.session import SelectorCache
from zephyr.style.scoper import StyleScoper, scope_styles


def test_scope_prefixes_selectors() -> None:
    assert scope_styles(".btn, a { color: red; }", "zph-abc") == (
        "[data-zph-abc] .btn, [data-zph-abc] a {\n  color: red;\n}"
    )


def test_scope_keeps_root_and_marked_selectors() -> None:
    css = ":root { --gap: 4px }\n[data-zph-abc] .x { margin: 0 }"
    assert scope_styles(css, "zph-abc") == (
        ":root {\n  --gap: 4px;\n}\n[data-zph-abc] .x {\n  margin: 0;\n}"
    )


def test_scope_nests_media_blocks() -> None:
    css = "@media (max-width: 600px) { .a { color: red } }"
    assert scope_styles(css, "zph-abc") == (
        "@media (max-width: 600px) {\n  [data-zph-abc] .a {\n    color: red;\n  }\n}"
    )


def test_scope_leaves_keyframes_and_statements() -> None:
    css = "@import url(a.css);\n@keyframes spin { from { opacity: 0 } }"
    assert scope_styles(css, "zph-abc") == (
        "@import url(a.css);\n@keyframes spin {\n  from {\n    opacity: 0;\n  }\n}"
    )


def test_non_isolated_styles_reach_children() -> None:
    result = scope_styles(".title { color: red }", "zph-p", isolated=False, child_scope_ids=["zph-c"])
    assert result == "[data-zph-p] .title, [data-zph-p] [data-zph-c] .title {\n  color: red;\n}"


def test_isolated_styles_ignore_children() -> None:
    result = scope_styles(".title { color: red }", "zph-p", isolated=True, child_scope_ids=["zph-c"])
    assert result == "[data-zph-p] .title {\n  color: red;\n}"


def test_selector_cache_is_reused() -> None:
    cache = SelectorCache()
    scoper = StyleScoper(cache)
    scoper.scope(".a { x: 1 }\n.a { y: 2 }", "zph-abc")
    assert len(cache) == 1
    assert cache.hits == 1


def test_scope_empty_css() -> None:
    assert scope_styles("  \n", "zph-abc") == ""
