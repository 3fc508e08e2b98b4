"""Resolves ``<import>`` declarations into compiled child components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol

from ..errors import (
    CircularImportError,
    CompilationError,
    ImportResolutionError,
    MissingImportError,
)
from ..logging import get_logger
from ..models import CompileResult, ParsedComponent, ResolvedImport
from ..naming import instance_base_id
from ..session import ImportCache

logger = get_logger("imports")


class SourceLoader(Protocol):
    def load(self, path: Path) -> str:
        ...


class FileSourceLoader:
    """Reads component sources from the local filesystem."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def load(self, path: Path) -> str:
        return path.read_text(encoding=self.encoding)


@dataclass
class ResolutionContext:
    """Files currently being compiled (outermost first) and the shared cache."""

    chain: List[Path] = field(default_factory=list)
    cache: ImportCache = field(default_factory=ImportCache)

    def enter(self, path: Path) -> "ResolutionContext":
        return ResolutionContext(chain=[*self.chain, path], cache=self.cache)


CompileSource = Callable[[str, Path, ResolutionContext], CompileResult]


def normalize_path(path: Path) -> Path:
    return Path(path).expanduser().resolve()


class ImportResolver:
    """Loads, compiles and caches the components a component imports."""

    def __init__(self, loader: SourceLoader, compile_source: CompileSource) -> None:
        self._loader = loader
        self._compile_source = compile_source

    def resolve(
        self,
        component: ParsedComponent,
        path: Optional[Path],
        context: ResolutionContext,
    ) -> Dict[str, ResolvedImport]:
        """Compile every import of ``component``, keyed by import alias.

        Raises CircularImportError when an import re-enters a file that is
        still being compiled and MissingImportError when a file cannot be read.
        """
        resolved: Dict[str, ResolvedImport] = {}
        if not component.imports:
            return resolved
        base_dir = path.parent if path is not None else Path.cwd()

        for declaration in component.imports:
            target = normalize_path(base_dir / declaration.path)
            if target in context.chain:
                raise CircularImportError(
                    [*context.chain, target],
                    file=component.path,
                    suggestion="Remove the circular dependency by restructuring your components",
                )

            cached = context.cache.get(target)
            try:
                if cached is not None:
                    logger.debug("Import cache hit for %s", target)
                    result = cached.result
                else:
                    result = self._compile(declaration.name, target, component, context)
                    context.cache.store(target, result.component, result)
            except CompilationError as error:
                error.add_import_context(component.name, target)
                raise
            except Exception as exc:
                raise ImportResolutionError(
                    f"Failed to import component '{declaration.name}' from '{declaration.path}': {exc}",
                    file=component.path,
                    suggestion=f"Check that the file exists at the specified path: {target}",
                ) from exc

            resolved[declaration.name] = ResolvedImport(
                alias=declaration.name,
                path=target,
                component=result.component,
                result=result,
                instance_id=instance_base_id(declaration.name, component.scope_id),
            )
        return resolved

    def _compile(
        self, alias: str, target: Path, parent: ParsedComponent, context: ResolutionContext
    ) -> CompileResult:
        try:
            source = self._loader.load(target)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise MissingImportError(alias, target, file=parent.path) from exc
        logger.debug("Compiling import %s from %s", alias, target)
        return self._compile_source(source, target, context.enter(target))


__all__ = [
    "CompileSource",
    "FileSourceLoader",
    "ImportResolver",
    "ResolutionContext",
    "SourceLoader",
    "normalize_path",
]
