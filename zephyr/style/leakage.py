"""Style leakage checks and their discovery."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from importlib import metadata
import re
from typing import Callable, Iterable, List, Optional, Sequence, Set

from ..errors import WarningCollector
from .parser import CssRule, parse_css

_ENTRY_POINT_GROUP = "zephyr.leakage_checks"

_GLOBAL_SELECTOR = re.compile(r"^(?:body|html|\*)(?=$|[\s>+~.#\[:])", re.I)
_BARE_ELEMENT = re.compile(r"^[a-z][a-z0-9-]*(?=$|\s*[\s>+~])", re.I)


@dataclass(frozen=True)
class LeakageFinding:
    message: str
    suggestion: Optional[str] = None


class LeakageCheck(ABC):
    """Contract for checks that flag selectors likely to escape a component."""

    name: str = ""

    @abstractmethod
    def check(self, selector: str, rule: CssRule) -> Optional[LeakageFinding]:
        """Return a finding when ``selector`` may leak, otherwise None."""


class GlobalSelectorCheck(LeakageCheck):
    name = "global-selector"

    def check(self, selector: str, rule: CssRule) -> Optional[LeakageFinding]:
        if not _GLOBAL_SELECTOR.match(selector):
            return None
        return LeakageFinding(
            message=f'Potential style leakage: Global selector "{selector}" should use :root',
            suggestion="Use :root { ... } for styles that are meant to be global",
        )


class BroadSelectorCheck(LeakageCheck):
    name = "broad-selector"

    def check(self, selector: str, rule: CssRule) -> Optional[LeakageFinding]:
        if _GLOBAL_SELECTOR.match(selector) or not _BARE_ELEMENT.match(selector):
            return None
        if re.search(r"[.#\[:]", selector):
            return None
        return LeakageFinding(
            message=f'Potential style leakage: Overly broad selector "{selector}" may affect other components',
            suggestion="Consider using a more specific selector or adding a class/ID to scope it better",
        )


_BUILTIN_FACTORIES: dict[str, Callable[[], LeakageCheck]] = {
    "global-selector": GlobalSelectorCheck,
    "broad-selector": BroadSelectorCheck,
}


def discover_checks(enabled: Sequence[str] | None = None) -> List[LeakageCheck]:
    """Return instantiated checks, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    checks: List[LeakageCheck] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], LeakageCheck]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, LeakageCheck):
            raise TypeError(f"Leakage check factory for '{name}' did not return a LeakageCheck instance")
        checks.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load leakage check entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> LeakageCheck:
            return _coerce_check(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown leakage checks requested: {missing}")

    return checks


def detect_leakage(
    css: str,
    component_name: str,
    warnings: WarningCollector,
    checks: Optional[Sequence[LeakageCheck]] = None,
) -> int:
    """Run ``checks`` over every selector of ``css``; return the finding count.

    Rules whose selector list contains ``:root`` are intentionally global and
    skipped, as are keyframe steps and ``@``-blocks.
    """
    if not css.strip():
        return 0
    active = list(checks) if checks is not None else discover_checks()
    found = 0
    for rule in parse_css(css):
        if rule.statement or rule.is_at_rule or rule.in_keyframes:
            continue
        if any(selector == ":root" for selector in rule.selectors):
            continue
        for selector in rule.selectors:
            for check in active:
                finding = check.check(selector, rule)
                if finding is None:
                    continue
                found += 1
                warnings.warn(finding.message, file=component_name, suggestion=finding.suggestion)
    return found


def _coerce_check(obj: object) -> LeakageCheck:
    if isinstance(obj, LeakageCheck):
        return obj
    if isinstance(obj, type) and issubclass(obj, LeakageCheck):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, LeakageCheck):
            return instance
    raise TypeError("Leakage check entry point must be a LeakageCheck subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    entry_points = metadata.entry_points()
    if hasattr(entry_points, "select"):
        return entry_points.select(group=_ENTRY_POINT_GROUP)  # type: ignore[return-value]
    return entry_points.get(_ENTRY_POINT_GROUP, [])  # type: ignore[return-value]


__all__ = [
    "BroadSelectorCheck",
    "GlobalSelectorCheck",
    "LeakageCheck",
    "LeakageFinding",
    "detect_leakage",
    "discover_checks",
]
