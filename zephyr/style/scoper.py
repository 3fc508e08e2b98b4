"""Rewrites component styles so they only match inside the component."""

from __future__ import annotations

from itertools import groupby
from typing import List, Optional, Sequence

from ..logging import get_logger
from ..naming import scope_marker
from ..session import SelectorCache
from .parser import CssRule, parse_css

logger = get_logger("style")

_INDENT = "  "


class StyleScoper:
    """Prefixes selectors with the component's ``[data-<scope>]`` marker.

    ``:root``, ``@``-preludes, keyframe steps and selectors that already carry
    the marker stay untouched. A non-isolated style additionally emits every
    selector once per child component as ``[parent] [child] selector`` so the
    parent can style what its children render.
    """

    def __init__(self, cache: Optional[SelectorCache] = None) -> None:
        self.cache = cache if cache is not None else SelectorCache()

    def scope(
        self,
        css: str,
        scope_id: str,
        isolated: bool = True,
        child_scope_ids: Sequence[str] = (),
    ) -> str:
        if not css.strip():
            return ""
        marker = scope_marker(scope_id)
        children = [scope_marker(child) for child in child_scope_ids] if not isolated else []
        blocks: List[str] = []
        for at_rules, group in groupby(parse_css(css), key=lambda rule: rule.at_rules):
            body = [self._render_rule(rule, marker, children, len(at_rules)) for rule in group]
            blocks.append(_wrap(at_rules, body))
        logger.debug("Scoped %d block(s) for %s", len(blocks), scope_id)
        return "\n".join(blocks)

    def scope_selector(self, selector: str, marker: str) -> str:
        trimmed = selector.strip()
        cached = self.cache.get(marker, trimmed)
        if cached is not None:
            return cached
        if trimmed.startswith((":root", "@")) or marker in trimmed:
            scoped = trimmed
        else:
            scoped = f"{marker} {trimmed}"
        self.cache.store(marker, trimmed, scoped)
        return scoped

    def _selectors(self, rule: CssRule, marker: str, children: Sequence[str]) -> List[str]:
        if rule.in_keyframes or rule.is_at_rule:
            return list(rule.selectors)
        selectors = [self.scope_selector(selector, marker) for selector in rule.selectors]
        for child in children:
            selectors.extend(
                f"{marker} {child} {selector}"
                for selector in rule.selectors
                if not selector.startswith(":root") and marker not in selector
            )
        return selectors

    def _render_rule(self, rule: CssRule, marker: str, children: Sequence[str], depth: int) -> str:
        indent = _INDENT * depth
        if rule.statement:
            return f"{indent}{rule.selectors[0]};"
        lines = [f"{indent}{', '.join(self._selectors(rule, marker, children))} {{"]
        for declaration in rule.declarations:
            lines.append(f"{indent}{_INDENT}{declaration.name}: {declaration.value};")
        lines.append(f"{indent}}}")
        return "\n".join(lines)


def _wrap(at_rules: Sequence[str], body: List[str]) -> str:
    text = "\n".join(body)
    for depth in range(len(at_rules) - 1, -1, -1):
        indent = _INDENT * depth
        text = f"{indent}{at_rules[depth]} {{\n{text}\n{indent}}}"
    return text


def scope_styles(
    css: str,
    scope_id: str,
    isolated: bool = True,
    child_scope_ids: Sequence[str] = (),
    cache: Optional[SelectorCache] = None,
) -> str:
    return StyleScoper(cache).scope(css, scope_id, isolated, child_scope_ids)


__all__ = ["StyleScoper", "scope_styles"]
