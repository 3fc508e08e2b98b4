"""Adds the scope attribute to template elements that styles or scripts target."""

from __future__ import annotations

from typing import List

from ..naming import scope_attribute
from .markup import iter_tags, rewrite_tag

SCOPED_ATTRIBUTES = (
    "class",
    "id",
    "data-reactive",
    "data-reactive-expr",
    "data-reactive-bind",
    "data-conditional",
    "data-loop",
)
_SCOPED_PREFIXES = ("data-zph-event-",)


def apply_smart_scope(template: str, scope_id: str) -> str:
    """Mark every element carrying a class, id or compiler marker."""
    marker = scope_attribute(scope_id)
    pieces: List[str] = []
    cursor = 0
    for tag in iter_tags(template):
        if tag.closing or tag.is_component:
            continue
        names = {attribute.name for attribute in tag.attributes}
        if marker in names:
            continue
        if not any(name in SCOPED_ATTRIBUTES or name.startswith(_SCOPED_PREFIXES) for name in names):
            continue
        pieces.append(template[cursor : tag.start])
        pieces.append(rewrite_tag(tag.text, add={marker: None}))
        cursor = tag.end
    pieces.append(template[cursor:])
    return "".join(pieces)


def wrap_root(html: str, scope_id: str) -> str:
    """Wrap a compiled fragment in a layout-neutral root carrying the scope."""
    return f'<div {scope_attribute(scope_id)} style="display: contents">{html}</div>'


__all__ = ["SCOPED_ATTRIBUTES", "apply_smart_scope", "wrap_root"]
