"""Component events: ``emit()`` dispatch and ``@event`` listeners."""

from __future__ import annotations

from dataclasses import dataclass, field
import html
import re
from typing import List

from ..codegen import CodeRenderer, default_renderer
from ..naming import scope_marker, scoped_query
from ..template.context import TemplateContext
from ..template.markup import iter_tags, rewrite_tag
from .scanner import IDENT, next_significant, prev_significant, tokenize
from .transformer import rewrite_reactive

DIRECTIVE_ATTRIBUTES = frozenset({"@if", "@else", "@else-if", "@each"})
EVENT_ATTRIBUTE_PREFIX = "data-zph-event-"

_HANDLER_REFERENCE = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")


@dataclass
class EventListener:
    event: str
    handler: str
    source: str
    selector: str
    body: str


@dataclass
class EventListenerResult:
    template: str
    listeners: List[EventListener] = field(default_factory=list)
    code: str = ""


def uses_event_emission(script: str) -> bool:
    """Return True when the script calls ``emit(...)``."""
    tokens = tokenize(script)
    for index, token in enumerate(tokens):
        if token.kind != IDENT or token.text != "emit":
            continue
        previous = prev_significant(tokens, index)
        if previous is not None and (
            tokens[previous].is_punct(".", "?.") or tokens[previous].text == "function"
        ):
            continue
        following = next_significant(tokens, index)
        if following is not None and tokens[following].is_punct("("):
            return True
    return False


def generate_event_emitter(scope_id: str, renderer: CodeRenderer | None = None) -> str:
    renderer = renderer or default_renderer()
    return renderer.render("emitter.js.j2", root_selector=scope_marker(scope_id))


def compile_event_listeners(template: str, context: TemplateContext) -> EventListenerResult:
    """Replace ``@event="handler"`` attributes with listener markers.

    Both component tags and plain elements get a ``data-zph-event-<name>``
    marker; the generated listener looks the marker up inside the scope.
    """
    listeners: List[EventListener] = []
    pieces: List[str] = []
    cursor = 0
    for tag in iter_tags(template):
        if tag.closing:
            continue
        events = [
            attribute
            for attribute in tag.attributes
            if attribute.name.startswith("@") and attribute.name not in DIRECTIVE_ATTRIBUTES
        ]
        if not events:
            continue
        additions = {}
        for attribute in events:
            event = attribute.name[1:]
            handler = html.unescape(attribute.value or "").strip()
            if not event or not handler:
                context.warn(f"Ignoring empty event listener '{attribute.name}' on <{tag.name}>")
                continue
            marker = str(context.next_id("event"))
            marker_attribute = f"{EVENT_ATTRIBUTE_PREFIX}{event}"
            additions[marker_attribute] = marker
            listeners.append(
                EventListener(
                    event=event,
                    handler=handler,
                    source=f"<{tag.name}>",
                    selector=scoped_query(context.scope_id, f'[{marker_attribute}="{marker}"]'),
                    body=_listener_body(handler, context),
                )
            )
        pieces.append(template[cursor : tag.start])
        pieces.append(rewrite_tag(tag.text, remove=[item.name for item in events], add=additions))
        cursor = tag.end
    pieces.append(template[cursor:])

    code = ""
    if listeners:
        code = context.renderer.render("listener.js.j2", listeners=listeners)
    return EventListenerResult(template="".join(pieces), listeners=listeners, code=code)


def _listener_body(handler: str, context: TemplateContext) -> str:
    if _HANDLER_REFERENCE.match(handler):
        return f"{handler}(data)"
    return rewrite_reactive(handler, context.accessor_names).rstrip(";")


__all__ = [
    "DIRECTIVE_ATTRIBUTES",
    "EVENT_ATTRIBUTE_PREFIX",
    "EventListener",
    "EventListenerResult",
    "compile_event_listeners",
    "generate_event_emitter",
    "uses_event_emission",
]
