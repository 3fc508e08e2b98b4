"""Caches and registries whose lifetime is one compiler session."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .models import CompileResult, ParsedComponent


class SelectorCache:
    """Memoizes scoped selector rewrites keyed by (marker, selector)."""

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str], str] = {}
        self.hits = 0

    def get(self, marker: str, selector: str) -> Optional[str]:
        value = self._entries.get((marker, selector))
        if value is not None:
            self.hits += 1
        return value

    def store(self, marker: str, selector: str, scoped: str) -> None:
        self._entries[(marker, selector)] = scoped

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0

    def __len__(self) -> int:
        return len(self._entries)


class ScopeIdRegistry:
    """Tracks which component names produced each scope id."""

    def __init__(self) -> None:
        self._components: Dict[str, List[str]] = {}

    def register(self, scope_id: str, component_name: str) -> bool:
        """Record a component and return True when its scope id is shared."""
        names = self._components.setdefault(scope_id, [])
        if component_name not in names:
            names.append(component_name)
        return len(names) > 1

    def get_components(self, scope_id: str) -> List[str]:
        return list(self._components.get(scope_id, []))

    def has_collision(self, scope_id: str) -> bool:
        return len(self._components.get(scope_id, [])) > 1

    def get_collisions(self) -> Dict[str, List[str]]:
        return {
            scope_id: list(names)
            for scope_id, names in self._components.items()
            if len(names) > 1
        }

    def clear(self) -> None:
        self._components.clear()


@dataclass
class CachedImport:
    component: ParsedComponent
    result: CompileResult


@dataclass
class ImportCache:
    """Compiled imports keyed by resolved path for one top-level compile."""

    entries: Dict[Path, CachedImport] = field(default_factory=dict)

    def get(self, path: Path) -> Optional[CachedImport]:
        return self.entries.get(path)

    def store(self, path: Path, component: ParsedComponent, result: CompileResult) -> None:
        self.entries[path] = CachedImport(component=component, result=result)


@dataclass
class CompileSession:
    """State shared by every compile issued through one compiler."""

    selectors: SelectorCache = field(default_factory=SelectorCache)
    scope_ids: ScopeIdRegistry = field(default_factory=ScopeIdRegistry)

    def reset(self) -> None:
        self.selectors.clear()
        self.scope_ids.clear()


__all__ = ["CachedImport", "CompileSession", "ImportCache", "ScopeIdRegistry", "SelectorCache"]
