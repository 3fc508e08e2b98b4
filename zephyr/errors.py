"""Diagnostics raised and collected while compiling components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class CompileDiagnostic:
    """Location-aware description of a compile problem."""

    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    suggestion: Optional[str] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class CompileWarning:
    """Non-fatal issue reported alongside a successful compile."""

    message: str
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    suggestion: Optional[str] = None


class CompilationError(RuntimeError):
    """Raised when a component cannot be compiled."""

    def __init__(
        self,
        message: str,
        *,
        file: str | None = None,
        line: int | None = None,
        column: int | None = None,
        suggestion: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.diagnostic = CompileDiagnostic(
            message=message,
            file=file,
            line=line,
            column=column,
            suggestion=suggestion,
            code=code,
        )
        self.import_trail: List[Tuple[str, str]] = []

    @property
    def message(self) -> str:
        return self.diagnostic.message

    def add_import_context(self, component: str, path: Path | str) -> None:
        """Record the importing component and the path it was importing."""
        self.import_trail.append((component, str(path)))

    def __str__(self) -> str:
        text = self.diagnostic.message
        for component, path in self.import_trail:
            text += f"\n  in component '{component}' while importing '{path}'"
        return text


class StructuralParseError(CompilationError):
    """Raised when the component source cannot be split into sections."""


class CircularImportError(CompilationError):
    """Raised when a component transitively imports itself."""

    def __init__(self, chain: Sequence[Path | str], **kwargs) -> None:
        self.chain = [str(item) for item in chain]
        message = "Circular dependency detected: " + " -> ".join(self.chain)
        kwargs.setdefault("suggestion", "Remove one of the imports to break the cycle")
        super().__init__(message, **kwargs)


class MissingImportError(CompilationError):
    """Raised when an imported component file cannot be read."""

    def __init__(self, name: str, path: Path | str, **kwargs) -> None:
        self.name = name
        self.path = str(path)
        kwargs.setdefault("suggestion", f"Check that the file exists at: {path}")
        super().__init__(f"Failed to import component '{name}' from '{path}'", **kwargs)


class ImportResolutionError(CompilationError):
    """Raised when an imported component fails for an unexpected reason."""


class ScriptNormalizationError(CompilationError):
    """Raised when the script normalizer rejects the component script."""

    def __init__(self, reason: str, source: str, **kwargs) -> None:
        self.source = source
        message = f"Script compilation failed: {reason}\nSource script:\n{source}"
        super().__init__(message, **kwargs)


@dataclass
class WarningCollector:
    """Accumulates warnings for a single compile call."""

    warnings: List[CompileWarning] = field(default_factory=list)

    def warn(
        self,
        message: str,
        *,
        file: str | None = None,
        line: int | None = None,
        column: int | None = None,
        suggestion: str | None = None,
    ) -> CompileWarning:
        warning = CompileWarning(
            message=message, file=file, line=line, column=column, suggestion=suggestion
        )
        self.warnings.append(warning)
        return warning

    def extend(self, warnings: Sequence[CompileWarning]) -> None:
        self.warnings.extend(warnings)

    def __iter__(self) -> Iterator[CompileWarning]:
        return iter(self.warnings)

    def __len__(self) -> int:
        return len(self.warnings)


def line_and_column(text: str, offset: int) -> Tuple[int, int]:
    """Return 1-based line and column numbers for a character offset."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    last_newline = text.rfind("\n", 0, offset)
    column = offset - last_newline
    return line, column


def format_diagnostic(
    item: CompileDiagnostic | CompileWarning, source: str | None = None
) -> str:
    """Render a diagnostic or warning as human-readable text."""
    severity = "warning" if isinstance(item, CompileWarning) else "error"
    location = item.file or "<component>"
    if item.line is not None:
        location += f":{item.line}"
        if item.column is not None:
            location += f":{item.column}"
    lines = [f"{severity}: {item.message}", f"  --> {location}"]

    if source is not None and item.line is not None:
        source_lines = source.splitlines()
        if 0 < item.line <= len(source_lines):
            gutter = str(item.line)
            lines.append(f"  {gutter} | {source_lines[item.line - 1]}")
            if item.column is not None:
                pad = " " * (len(gutter) + 4 + item.column)
                lines.append(f"{pad}^")

    code = getattr(item, "code", None)
    if code:
        lines.append(f"  code: {code}")
    if item.suggestion:
        lines.append(f"  help: {item.suggestion}")
    return "\n".join(lines)


__all__ = [
    "CircularImportError",
    "CompilationError",
    "CompileDiagnostic",
    "CompileWarning",
    "ImportResolutionError",
    "MissingImportError",
    "ScriptNormalizationError",
    "StructuralParseError",
    "WarningCollector",
    "format_diagnostic",
    "line_and_column",
]
