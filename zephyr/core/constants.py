"""Compile-time constant extraction from component scripts."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from .declarations import COMPUTED, REACTIVE, scan_declarations
from .literals import parse_value


def extract_constants(script: str, overrides: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    """Return name -> value for statically known declarations.

    Reactive initializers win over plain ``const`` declarations of the same
    name and ``overrides`` win over both. Values that are not literals are
    kept as :class:`~zephyr.core.literals.RawExpression`.
    """
    constants: Dict[str, Any] = {}
    reactive: Dict[str, Any] = {}
    for declaration in scan_declarations(script):
        if declaration.kind == COMPUTED:
            continue
        if declaration.kind == REACTIVE:
            reactive[declaration.name] = parse_value(declaration.initializer)
        elif declaration.keyword == "const":
            constants[declaration.name] = parse_value(declaration.initializer)

    constants.update(reactive)
    if overrides:
        constants.update(overrides)
    return constants


__all__ = ["extract_constants"]
