from __future__ import annotations

from zephyr.errors import (
    CircularImportError,
    CompilationError,
    CompileWarning,
    MissingImportError,
    WarningCollector,
    format_diagnostic,
    line_and_column,
)


def test_line_and_column() -> None:
    assert line_and_column("ab\ncd", 0) == (1, 1)
    assert line_and_column("ab\ncd", 4) == (2, 2)


def test_format_diagnostic_with_source() -> None:
    warning = CompileWarning(message="Odd", file="A.zph", line=2, column=3, suggestion="Fix it")
    text = format_diagnostic(warning, "one\ntwo three")
    assert text.splitlines() == [
        "warning: Odd",
        "  --> A.zph:2:3",
        "  2 | two three",
        "        ^",
        "  help: Fix it",
    ]


def test_format_diagnostic_for_errors() -> None:
    error = CompilationError("Broken", code="E1")
    assert format_diagnostic(error.diagnostic) == "error: Broken\n  --> <component>\n  code: E1"


def test_compilation_error_records_import_trail() -> None:
    error = MissingImportError("Card", "/app/Card.zph", file="/app/App.zph")
    error.add_import_context("App", "/app/Panel.zph")
    assert str(error) == (
        "Failed to import component 'Card' from '/app/Card.zph'\n"
        "  in component 'App' while importing '/app/Panel.zph'"
    )
    assert error.diagnostic.suggestion == "Check that the file exists at: /app/Card.zph"


def test_circular_import_error_message() -> None:
    error = CircularImportError(["a.zph", "b.zph", "a.zph"])
    assert error.message == "Circular dependency detected: a.zph -> b.zph -> a.zph"
    assert error.chain == ["a.zph", "b.zph", "a.zph"]


def test_warning_collector() -> None:
    collector = WarningCollector()
    collector.warn("first", file="A.zph")
    collector.extend([CompileWarning(message="second")])
    assert len(collector) == 2
    assert [item.message for item in collector] == ["first", "second"]
