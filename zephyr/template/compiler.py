"""Runs the template passes for one component in their fixed order."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..core.events import compile_event_listeners
from ..logging import get_logger
from .bindings import compile_bindings, generate_binding_code
from .context import TemplateContext
from .directives import DirectiveResult, compile_directives, generate_directive_code
from .handlers import compile_event_handlers
from .scoping import apply_smart_scope

logger = get_logger("template")


@dataclass
class TemplateResult:
    """Compiled markup plus the JS sections the template contributed."""

    html: str
    binding_js: str = ""
    loop_exports_js: str = ""
    handler_js: str = ""
    listener_js: str = ""
    directive_js: str = ""
    rendered: List[str] = field(default_factory=list)


class TemplateCompiler:
    """Event listeners, directives, interpolation, handlers, then scoping."""

    def compile(self, template: str, context: TemplateContext) -> TemplateResult:
        if not template:
            return TemplateResult(html="")

        listeners = compile_event_listeners(template, context)
        directives: DirectiveResult = compile_directives(listeners.template, context)
        bindings = compile_bindings(directives.template, context)
        handlers = compile_event_handlers(bindings.template, context)
        markup = apply_smart_scope(handlers.template, context.scope_id)

        exports = ""
        if directives.exports:
            exports = context.renderer.render("exports.js.j2", names=directives.exports)

        logger.debug(
            "Template for %s: %d loop(s), %d conditional group(s), %d handler(s), %d binding(s)",
            context.scope_id,
            len(directives.loops),
            len(directives.conditionals),
            len(handlers.handlers),
            len(bindings.bindings),
        )
        return TemplateResult(
            html=markup,
            binding_js=generate_binding_code(bindings.bindings, context),
            loop_exports_js=exports,
            handler_js=handlers.code,
            listener_js=listeners.code,
            directive_js=generate_directive_code(directives, context),
            rendered=bindings.rendered,
        )


__all__ = ["TemplateCompiler", "TemplateResult"]
