"""Renders ``<Child ...>`` usages with the compiled child markup."""

from __future__ import annotations

import html
import re
from typing import Dict, List, Mapping, Optional

from ..errors import WarningCollector
from ..models import ResolvedImport
from .markup import Tag, element_content, find_element_end, iter_tags, rewrite_tag

_SLOT = re.compile(r"<slot\s*/>|<slot\s*>\s*</slot>", re.I)
_MAX_USAGES = 10000


def render_components(
    markup: str,
    imports: Mapping[str, ResolvedImport],
    *,
    warnings: Optional[WarningCollector] = None,
    filename: Optional[str] = None,
) -> str:
    """Replace every usage of an imported component with its rendered markup.

    Usages are numbered per import in document order; the n-th usage gets
    ``data-instance="<instance id>-<n>"`` on its root element.
    """
    counters: Dict[str, int] = {}
    reported: set = set()
    position = 0
    while True:
        tag = _next_component_tag(markup, position)
        if tag is None:
            break
        resolved = imports.get(tag.name)
        if resolved is None or resolved.is_store:
            if resolved is None and tag.name not in reported and warnings is not None:
                reported.add(tag.name)
                warnings.warn(
                    f"Component <{tag.name}> is used but not imported",
                    file=filename,
                    suggestion=f'Add <import {tag.name} from "./{tag.name}.zph">',
                )
            position = tag.end
            continue

        end = find_element_end(markup, tag)
        inner_start, inner_end = element_content(markup, tag)
        slot = markup[inner_start:inner_end].strip() if inner_end > inner_start else ""

        counters[tag.name] = counters.get(tag.name, 0) + 1
        if sum(counters.values()) > _MAX_USAGES:
            if warnings is not None:
                warnings.warn(
                    f"Stopped rendering <{tag.name}>: too many nested component usages",
                    file=filename,
                )
            break
        instance = f"{resolved.instance_id}-{counters[tag.name]}"
        rendered = render_usage(resolved.result.html, tag, instance, slot)
        markup = markup[: tag.start] + rendered + markup[end:]
        position = tag.start
    return markup


def render_usage(child_html: str, tag: Tag, instance: str, slot: str = "") -> str:
    """Apply props, slot content and instance attributes to ``child_html``."""
    carried: Dict[str, Optional[str]] = {"data-instance": instance}
    props: Dict[str, str] = {}
    for attribute in tag.attributes:
        if attribute.name.startswith("data-"):
            carried[attribute.name] = html.unescape(attribute.value) if attribute.value is not None else None
        elif not attribute.name.startswith("@"):
            props[attribute.name] = html.unescape(attribute.value) if attribute.value is not None else "true"

    rendered = apply_props(child_html, props)
    rendered = _SLOT.sub(lambda _match: slot, rendered)

    first = next((item for item in iter_tags(rendered) if not item.closing), None)
    if first is None:
        return rewrite_tag("<div>", add=carried) + rendered + "</div>"
    return rendered[: first.start] + rewrite_tag(first.text, add=carried) + rendered[first.end :]


def apply_props(markup: str, props: Mapping[str, str]) -> str:
    """Substitute ``{{ props.key }}`` and ``{{ key }}`` placeholders."""
    for key, value in props.items():
        escaped = html.escape(value)
        pattern = re.compile(r"\{\{\s*(?:props\.)?" + re.escape(key) + r"\s*\}\}")
        markup = pattern.sub(lambda _match: escaped, markup)
    return markup


def _next_component_tag(markup: str, position: int) -> Optional[Tag]:
    for tag in iter_tags(markup, position):
        if not tag.closing and tag.is_component:
            return tag
    return None


def collect_child_scope_ids(imports: Mapping[str, ResolvedImport]) -> List[str]:
    """Scope ids of imported (non-store) components, without duplicates."""
    seen: Dict[str, None] = {}
    for resolved in imports.values():
        if not resolved.is_store:
            seen[resolved.scope_id] = None
    return list(seen)


__all__ = ["apply_props", "collect_child_scope_ids", "render_components", "render_usage"]
