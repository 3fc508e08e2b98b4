"""State shared by the template compilation passes of one component."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set

from ..codegen import CodeRenderer, default_renderer
from ..errors import WarningCollector
from ..naming import capitalize, js_safe


@dataclass
class TemplateContext:
    """Names, constants and counters a template pass may consult."""

    scope_id: str
    constants: Dict[str, Any] = field(default_factory=dict)
    reactive: FrozenSet[str] = frozenset()
    computed: FrozenSet[str] = frozenset()
    warnings: WarningCollector = field(default_factory=WarningCollector)
    filename: Optional[str] = None
    renderer: CodeRenderer = field(default_factory=default_renderer)
    rendered: Set[str] = field(default_factory=set)
    _counters: Dict[str, int] = field(default_factory=dict)

    @property
    def safe_id(self) -> str:
        return js_safe(self.scope_id)

    @property
    def accessor_names(self) -> FrozenSet[str]:
        return self.reactive | self.computed

    def next_id(self, kind: str) -> int:
        """Return a per-component counter value for ``kind``."""
        value = self._counters.get(kind, 0)
        self._counters[kind] = value + 1
        return value

    def dependencies(self, names: Iterable[str], exclude: Iterable[str] = ()) -> List[str]:
        """Filter ``names`` down to accessor-backed names, keeping order."""
        excluded = set(exclude)
        accessors = self.accessor_names
        return [name for name in dict.fromkeys(names) if name in accessors and name not in excluded]

    def wiring_links(self, dependencies: Iterable[str], call: str) -> List[Dict[str, Any]]:
        """Chain ``call`` onto the update function of every dependency."""
        return [
            {"target": f"update{capitalize(name)}DOM", "calls": [call]}
            for name in dependencies
        ]

    def warn(self, message: str, suggestion: str | None = None) -> None:
        self.warnings.warn(message, file=self.filename, suggestion=suggestion)


__all__ = ["TemplateContext"]
