"""Tests for TypeScript stripping and import hoisting."""

from __future__ import annotations

import pytest

from zephyr.core.script import TypeScriptStripper
from zephyr.errors import ScriptNormalizationError


@pytest.fixture
def stripper() -> TypeScriptStripper:
    return TypeScriptStripper()


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("let count: number = 5", "let count = 5"),
        ("function add(a: number, b: number): number { return a + b }", "function add(a, b) { return a + b }"),
        ("function label(value?: string) {}", "function label(value) {}"),
        ("const show = (x: number): string => String(x)", "const show = (x) => String(x)"),
        ("const el = document.getElementById('x') as HTMLElement", "const el = document.getElementById('x')"),
        ("try { run() } catch (error: unknown) { }", "try { run() } catch (error) { }"),
        ("function first<T>(items: T[]): T { return items[0] }", "function first(items) { return items[0] }"),
    ],
)
def test_normalize_strips_annotations(stripper: TypeScriptStripper, source: str, expected: str) -> None:
    assert stripper.normalize(source).body == expected


def test_normalize_removes_type_declarations(stripper: TypeScriptStripper) -> None:
    source = "interface User { name: string }\nexport type Id = string | number;\nlet total = 1"
    assert stripper.normalize(source).body == "let total = 1"


def test_normalize_keeps_plain_javascript(stripper: TypeScriptStripper) -> None:
    source = "const pick = (a, b) => a > b ? a : b\nconsole.log(pick(1, 2))"
    assert stripper.normalize(source).body == source


def test_normalize_hoists_static_imports(stripper: TypeScriptStripper) -> None:
    source = "import { format } from './format.js';\nconst later = import('./lazy.js')\nformat(1)"
    result = stripper.normalize(source)
    assert result.imports == ["import { format } from './format.js';"]
    assert result.body == "const later = import('./lazy.js')\nformat(1)"


def test_normalize_empty_script(stripper: TypeScriptStripper) -> None:
    result = stripper.normalize("   \n")
    assert result.body == ""
    assert result.imports == []


def test_normalize_rejects_unbalanced_brackets(stripper: TypeScriptStripper) -> None:
    with pytest.raises(ScriptNormalizationError) as excinfo:
        stripper.normalize("function broken() {", "Broken.zph")
    assert "Script compilation failed" in str(excinfo.value)
    assert excinfo.value.diagnostic.file == "Broken.zph"
    assert excinfo.value.source == "function broken() {"
