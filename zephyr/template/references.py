"""Locates ``{{ }}``, ``{{{ }}}`` and ``{{@ }}`` references in templates."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import List, Optional

_PATH = re.compile(r"^[A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*$")
_LEADING_NAME = re.compile(r"^\s*([A-Za-z_$][\w$]*)")


@dataclass(frozen=True)
class ReactiveReference:
    """One interpolation in a template."""

    full_match: str
    expression: str
    start: int
    end: int
    raw: bool = False
    variable: Optional[str] = None
    path: List[str] = field(default_factory=list)

    @property
    def is_simple(self) -> bool:
        """True for a bare identifier or a dotted property path."""
        return bool(_PATH.match(self.expression))


def parse_references(template: str) -> List[ReactiveReference]:
    """Scan ``template`` left to right and return every reference."""
    references: List[ReactiveReference] = []
    index = 0
    length = len(template)
    while index < length:
        start = template.find("{{", index)
        if start < 0:
            break
        if template.startswith("{{{", start):
            close = template.find("}}}", start + 3)
            opening, closing, raw = 3, 3, True
        else:
            close = template.find("}}", start + 2)
            opening, closing, raw = 2, 2, False
        if close < 0:
            break
        expression = template[start + opening : close]
        if not raw and expression.lstrip().startswith("@"):
            raw = True
            expression = expression.lstrip()[1:]
        expression = expression.strip()
        end = close + closing
        if expression:
            variable, path = resolve_expression(expression)
            references.append(
                ReactiveReference(
                    full_match=template[start:end],
                    expression=expression,
                    start=start,
                    end=end,
                    raw=raw,
                    variable=variable,
                    path=path,
                )
            )
        index = end
    return references


def resolve_expression(expression: str) -> tuple[Optional[str], List[str]]:
    """Return the base variable and property path an expression reads.

    Property paths are only reported for plain dotted access; calls and
    indexing resolve to the base name with an empty path.
    """
    if _PATH.match(expression):
        parts = [part.strip() for part in expression.split(".")]
        return parts[0], parts[1:]
    leading = _LEADING_NAME.match(expression)
    if leading is None:
        return None, []
    return leading.group(1), []


__all__ = ["ReactiveReference", "parse_references", "resolve_expression"]
