"""Deterministic naming helpers: component names, scope ids, instance ids."""

from __future__ import annotations

from pathlib import PurePath
import re

SCOPE_PREFIX = "zph"
COMPONENT_SUFFIX = ".zph"

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_WORD_SPLIT = re.compile(r"[-_\s]+")
_UNSAFE_JS = re.compile(r"[^A-Za-z0-9_$]")


def string_hash(text: str) -> int:
    """Return the absolute value of a 32-bit ``h * 31 + c`` string hash."""
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    number = abs(value)
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_scope_id(component_name: str) -> str:
    """Map a component name to its stable scope id."""
    return f"{SCOPE_PREFIX}-{to_base36(string_hash(component_name))}"


def component_name_from_path(filename: str) -> str:
    """Derive a PascalCase component name from a file name."""
    stem = PurePath(filename.replace("\\", "/")).name
    if stem.endswith(COMPONENT_SUFFIX):
        stem = stem[: -len(COMPONENT_SUFFIX)]
    parts = [part for part in _WORD_SPLIT.split(stem) if part]
    return "".join(capitalize(part) for part in parts)


def instance_base_id(import_name: str, parent_scope_id: str) -> str:
    """Return the per-import instance id prefix used for rendered usages."""
    digest = to_base36(string_hash(f"{import_name}-{parent_scope_id}"))[:8]
    return f"{import_name.lower()}-{digest}"


def capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def js_safe(identifier: str) -> str:
    """Return ``identifier`` with characters illegal in JS names replaced."""
    return _UNSAFE_JS.sub("_", identifier)


def scope_attribute(scope_id: str) -> str:
    return f"data-{scope_id}"


def scope_marker(scope_id: str) -> str:
    return f"[{scope_attribute(scope_id)}]"


def scoped_query(scope_id: str, selector: str) -> str:
    """Selector matching ``selector`` on the scope root or inside it."""
    marker = scope_marker(scope_id)
    return f"{marker}{selector}, {marker} {selector}"


__all__ = [
    "COMPONENT_SUFFIX",
    "SCOPE_PREFIX",
    "capitalize",
    "component_name_from_path",
    "generate_scope_id",
    "instance_base_id",
    "js_safe",
    "scope_attribute",
    "scope_marker",
    "scoped_query",
    "string_hash",
    "to_base36",
]
