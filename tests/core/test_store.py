"""Tests for store components."""

from __future__ import annotations

from zephyr.core.store import compile_store, parse_store_script, store_binding

STORE_SCRIPT = """
let count = $(0)
let items = $([])
function increment() { count++ }
const clear = () => { items = [] }
const label = 'cart'
"""


def test_parse_store_script_collects_exports() -> None:
    definition = parse_store_script("Cart", STORE_SCRIPT)
    assert definition.name == "Cart"
    assert definition.variables == ["count", "items"]
    assert definition.functions == ["increment", "clear"]


def test_compile_store_registers_singleton() -> None:
    code = compile_store("Cart", STORE_SCRIPT, "zph-cart")

    assert 'window.__zephyrStores["Cart"] = window.__zephyrStores["Cart"] ||' in code
    assert "let _count = 0" in code
    assert "count(count() + 1)" in code
    assert "get count()" in code
    assert "set items(value)" in code
    assert "increment: increment," in code
    assert "clear: clear," in code
    assert "label:" not in code


def test_store_binding_reads_registry() -> None:
    assert store_binding("cart", "Cart") == 'const cart = window.__zephyrStores["Cart"];'
