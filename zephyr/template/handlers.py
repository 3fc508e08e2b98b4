"""Inline ``on<event>="..."`` handlers compiled into named global functions."""

from __future__ import annotations

from dataclasses import dataclass, field
import html
from typing import Iterable, List

from ..core.scanner import IDENT, PUNCT, next_significant, prev_significant, tokenize
from ..core.transformer import rewrite_reactive
from ..naming import capitalize
from .context import TemplateContext
from .markup import iter_tags, rewrite_tag

ARRAY_MUTATORS = frozenset(
    {"push", "pop", "shift", "unshift", "splice", "sort", "reverse", "fill", "copyWithin"}
)
_ASSIGNMENTS = frozenset({"=", "+=", "-=", "*=", "/=", "%=", "**=", "++", "--", "&&=", "||=", "??="})


@dataclass
class EventHandler:
    name: str
    event: str
    code: str
    updates: List[str] = field(default_factory=list)


@dataclass
class HandlerResult:
    template: str
    handlers: List[EventHandler] = field(default_factory=list)
    code: str = ""


def mutated_variables(code: str, names: Iterable[str]) -> List[str]:
    """Names whose properties or elements ``code`` mutates in place.

    Covers ``user.name = x``, ``user.count++``, ``items[0] = x`` and
    array mutator calls such as ``items.push(x)``. Plain reassignment goes
    through the accessor and is not reported.
    """
    watched = set(names)
    tokens = tokenize(code)
    found: List[str] = []
    for index, token in enumerate(tokens):
        if token.kind != IDENT or token.text not in watched or token.text in found:
            continue
        previous = prev_significant(tokens, index)
        if previous is not None and tokens[previous].is_punct(".", "?."):
            continue
        cursor = next_significant(tokens, index)
        member = None
        depth = 0
        while cursor is not None:
            current = tokens[cursor]
            if current.is_punct(".", "?."):
                name_index = next_significant(tokens, cursor)
                if name_index is None or tokens[name_index].kind != IDENT:
                    break
                member = tokens[name_index].text
                depth += 1
                cursor = next_significant(tokens, name_index)
            elif current.is_punct("["):
                depth += 1
                member = None
                close = _matching(tokens, cursor)
                if close is None:
                    break
                cursor = next_significant(tokens, close)
            else:
                break
        if depth == 0 or cursor is None:
            continue
        following = tokens[cursor]
        if following.kind == PUNCT and following.text in _ASSIGNMENTS:
            found.append(token.text)
        elif following.is_punct("(") and member in ARRAY_MUTATORS:
            found.append(token.text)
    return found


def _matching(tokens, opener: int):
    depth = 0
    for index in range(opener, len(tokens)):
        if tokens[index].is_punct("[", "(", "{"):
            depth += 1
        elif tokens[index].is_punct("]", ")", "}"):
            depth -= 1
            if depth == 0:
                return index
    return None


def compile_event_handlers(template: str, context: TemplateContext) -> HandlerResult:
    """Lift inline handler code into ``window.handle<n>_<scope>`` functions."""
    handlers: List[EventHandler] = []
    pieces: List[str] = []
    cursor = 0
    for tag in iter_tags(template):
        if tag.closing or tag.is_component:
            continue
        replacements = {}
        for attribute in tag.attributes:
            name = attribute.name.lower()
            if not name.startswith("on") or len(name) <= 2 or not attribute.value:
                continue
            source = html.unescape(attribute.value).strip()
            if not source:
                continue
            number = context.next_id("handler")
            handler_name = f"handle{number}_{context.safe_id}"
            code = rewrite_reactive(source, context.accessor_names).rstrip()
            if not code.endswith((";", "}")):
                code += ";"
            updates = [
                f"update{capitalize(variable)}DOM({variable}())"
                for variable in mutated_variables(source, context.reactive)
            ]
            handlers.append(EventHandler(name=handler_name, event=name[2:], code=code, updates=updates))
            replacements[attribute.name] = f"{handler_name}.call(this, event)"
        if not replacements:
            continue
        pieces.append(template[cursor : tag.start])
        pieces.append(rewrite_tag(tag.text, replace=replacements))
        cursor = tag.end
    pieces.append(template[cursor:])

    code = ""
    if handlers:
        code = context.renderer.render("handler.js.j2", handlers=handlers)
    return HandlerResult(template="".join(pieces), handlers=handlers, code=code)


__all__ = [
    "ARRAY_MUTATORS",
    "EventHandler",
    "HandlerResult",
    "compile_event_handlers",
    "mutated_variables",
]
