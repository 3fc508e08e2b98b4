"""Core data models shared across zephyr compiler stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import CompileWarning


@dataclass(frozen=True)
class ImportDeclaration:
    """``<import Name from "path">`` statement found in a component."""

    name: str
    path: str


@dataclass(frozen=True)
class ParsedComponent:
    """Sections of a component source file after splitting."""

    name: str
    scope_id: str
    script: str = ""
    template: str = ""
    style: str = ""
    style_isolated: bool = True
    imports: Tuple[ImportDeclaration, ...] = ()
    store: str = ""
    is_store: bool = False
    path: Optional[str] = None


@dataclass
class CompileResult:
    """Artifacts produced for one component and its imports."""

    html: str
    css: str
    js: str
    js_body: str
    component: ParsedComponent
    imports: List[str] = field(default_factory=list)
    warnings: List[CompileWarning] = field(default_factory=list)


@dataclass
class ResolvedImport:
    """Imported component compiled on behalf of a parent."""

    alias: str
    path: Path
    component: ParsedComponent
    result: CompileResult
    instance_id: str

    @property
    def scope_id(self) -> str:
        return self.component.scope_id

    @property
    def is_store(self) -> bool:
        return self.component.is_store


__all__ = ["CompileResult", "ImportDeclaration", "ParsedComponent", "ResolvedImport"]
