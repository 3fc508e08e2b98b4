from __future__ import annotations

from types import SimpleNamespace

import pytest

from zephyr.errors import WarningCollector
from zephyr.style.leakage import (
    BroadSelectorCheck,
    GlobalSelectorCheck,
    LeakageCheck,
    LeakageFinding,
    detect_leakage,
    discover_checks,
)


class NoIdCheck(LeakageCheck):
    name = "no-id"

    def check(self, selector, rule):
        if selector.startswith("#"):
            return LeakageFinding(message=f"ID selector {selector}")
        return None


def test_detect_leakage_reports_global_and_broad_selectors() -> None:
    warnings = WarningCollector()
    css = "body { margin: 0 }\ndiv { color: red }\n.card p { x: y }\np:hover { x: y }\n:root, html { a: b }"

    found = detect_leakage(css, "Card", warnings)

    assert found == 2
    assert [item.message for item in warnings] == [
        'Potential style leakage: Global selector "body" should use :root',
        'Potential style leakage: Overly broad selector "div" may affect other components',
    ]
    assert all(item.file == "Card" for item in warnings)


def test_detect_leakage_skips_at_rules_and_keyframes() -> None:
    warnings = WarningCollector()
    css = "@font-face { font-family: X }\n@keyframes pulse { from { opacity: 0 } }"
    assert detect_leakage(css, "Card", warnings) == 0


def test_detect_leakage_flags_descendant_element_chains() -> None:
    warnings = WarningCollector()
    assert detect_leakage("ul li { margin: 0 }\nhtml.dark { color: white }", "Menu", warnings) == 2


def test_discover_checks_returns_builtins() -> None:
    classes = [type(check) for check in discover_checks()]
    assert GlobalSelectorCheck in classes
    assert BroadSelectorCheck in classes


def test_discover_checks_respects_enabled_filter() -> None:
    checks = discover_checks(["global-selector"])
    assert len(checks) == 1
    assert isinstance(checks[0], GlobalSelectorCheck)


def test_discover_checks_loads_entry_points(monkeypatch) -> None:
    entry = SimpleNamespace(name="no-id", load=lambda: NoIdCheck)

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            if kwargs.get("group") == "zephyr.leakage_checks":
                return self
            return []

    monkeypatch.setattr(
        "zephyr.style.leakage.metadata.entry_points",
        lambda: DummyEntryPoints([entry]),
        raising=False,
    )

    checks = discover_checks(["no-id"])
    assert len(checks) == 1
    warnings = WarningCollector()
    assert detect_leakage("#main { a: b }", "App", warnings, checks) == 1


def test_discover_checks_raises_for_unknown_name() -> None:
    with pytest.raises(ValueError):
        discover_checks(["does-not-exist"])
