"""Interpolation: static substitution, reactive markers and expression bindings."""

from __future__ import annotations

from dataclasses import dataclass, field
import html
import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.literals import is_static
from ..core.scanner import referenced_identifiers
from ..core.transformer import rewrite_reactive
from ..naming import scoped_query
from .context import TemplateContext
from .markup import Tag, iter_tags, rewrite_tag
from .references import ReactiveReference, parse_references

_MISSING = object()


@dataclass
class ExpressionBinding:
    """A ``{{ }}`` expression or attribute value re-rendered at runtime."""

    id: str
    function: str
    expression: str
    dependencies: List[str]
    attribute: Optional[str] = None
    selector: str = ""


@dataclass
class BindingResult:
    template: str
    bindings: List[ExpressionBinding] = field(default_factory=list)
    rendered: List[str] = field(default_factory=list)


def display_value(value: Any) -> str:
    """Format a literal the way the browser would show it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def lookup(constants: Mapping[str, Any], variable: Optional[str], path: Sequence[str]) -> Any:
    """Resolve ``variable.path`` against ``constants``; ``_MISSING`` when unknown."""
    if variable is None or variable not in constants:
        return _MISSING
    value = constants[variable]
    for part in path:
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part == "length":
            value = len(value)
        elif isinstance(value, str) and part == "length":
            value = len(value)
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return _MISSING
    return value if is_static(value) else _MISSING


def static_text(reference: ReactiveReference, constants: Mapping[str, Any]) -> Optional[str]:
    """Return the substituted text for a reference, or None when not static."""
    if not reference.is_simple:
        return None
    value = lookup(constants, reference.variable, reference.path)
    if value is _MISSING:
        return None
    text = display_value(value)
    return text if reference.raw else html.escape(text)


def compile_bindings(template: str, context: TemplateContext) -> BindingResult:
    """Substitute constants and mark reactive interpolations in ``template``."""
    result = BindingResult(template=template)
    template = _compile_attributes(template, context, result)
    result.template = _compile_text(template, context, result)
    return result


def _compile_attributes(template: str, context: TemplateContext, result: BindingResult) -> str:
    pieces: List[str] = []
    cursor = 0
    for tag in iter_tags(template):
        if tag.closing or "{{" not in tag.text:
            continue
        replacement = _rewrite_attributes(tag, context, result)
        if replacement is None:
            continue
        pieces.append(template[cursor : tag.start])
        pieces.append(replacement)
        cursor = tag.end
    pieces.append(template[cursor:])
    return "".join(pieces)


def _rewrite_attributes(tag: Tag, context: TemplateContext, result: BindingResult) -> Optional[str]:
    replacements: Dict[str, str] = {}
    binding_ids: List[str] = []
    for attribute in tag.attributes:
        value = attribute.value
        if value is None or "{{" not in value or attribute.name.lower().startswith("on"):
            continue
        references = parse_references(value)
        if not references:
            continue
        dependencies: List[str] = []
        static_pieces: List[str] = []
        literal_pieces: List[str] = []
        cursor = 0
        for reference in references:
            static_pieces.append(value[cursor : reference.start])
            literal_pieces.append(_escape_literal(html.unescape(value[cursor : reference.start])))
            names = context.dependencies(referenced_identifiers(reference.expression))
            dependencies.extend(names)
            text = static_text(reference, context.constants)
            if text is not None:
                static_pieces.append(text)
            elif tag.is_component or not names:
                static_pieces.append(reference.full_match)
            literal_pieces.append(
                "${" + rewrite_reactive(reference.expression, context.accessor_names) + "}"
            )
            cursor = reference.end
        static_pieces.append(value[cursor:])
        literal_pieces.append(_escape_literal(html.unescape(value[cursor:])))
        replacements[attribute.name] = html.unescape("".join(static_pieces))

        if dependencies and not tag.is_component:
            number = context.next_id("binding")
            binding_id = f"{context.scope_id}-bind-{number}"
            binding_ids.append(binding_id)
            result.bindings.append(
                ExpressionBinding(
                    id=binding_id,
                    function=f"_renderBinding_{context.safe_id}_{number}",
                    expression="`" + "".join(literal_pieces) + "`",
                    dependencies=list(dict.fromkeys(dependencies)),
                    attribute=attribute.name,
                    selector=scoped_query(context.scope_id, f'[data-reactive-bind~="{binding_id}"]'),
                )
            )
    if not replacements:
        return None
    additions = {"data-reactive-bind": " ".join(binding_ids)} if binding_ids else None
    return rewrite_tag(tag.text, replace=replacements, add=additions)


def _compile_text(template: str, context: TemplateContext, result: BindingResult) -> str:
    tag_spans = [(tag.start, tag.end) for tag in iter_tags(template) if not tag.closing]
    pieces: List[str] = []
    cursor = 0
    for reference in parse_references(template):
        if any(start <= reference.start < end for start, end in tag_spans):
            continue
        pieces.append(template[cursor : reference.start])
        pieces.append(_render_reference(reference, context, result))
        cursor = reference.end
    pieces.append(template[cursor:])
    return "".join(pieces)


def _render_reference(reference: ReactiveReference, context: TemplateContext, result: BindingResult) -> str:
    raw_flag = " data-reactive-raw" if reference.raw else ""
    static = static_text(reference, context.constants)

    if reference.is_simple and reference.variable in context.accessor_names:
        marker = reference.variable
        if reference.path:
            marker += ":" + ".".join(reference.path)
        if reference.variable not in result.rendered:
            result.rendered.append(reference.variable)
        context.rendered.add(reference.variable)
        return f'<span data-reactive="{marker}"{raw_flag}>{static or ""}</span>'

    dependencies = context.dependencies(referenced_identifiers(reference.expression))
    if dependencies:
        number = context.next_id("expression")
        binding_id = f"{context.scope_id}-expr-{number}"
        result.bindings.append(
            ExpressionBinding(
                id=binding_id,
                function=f"_renderExpr_{context.safe_id}_{number}",
                expression=rewrite_reactive(reference.expression, context.accessor_names),
                dependencies=dependencies,
                selector=scoped_query(context.scope_id, f'[data-reactive-expr="{binding_id}"]'),
            )
        )
        return f'<span data-reactive-expr="{binding_id}"{raw_flag}></span>'

    if static is not None:
        return static
    return reference.full_match


def _escape_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def generate_binding_code(bindings: Sequence[ExpressionBinding], context: TemplateContext) -> str:
    if not bindings:
        return ""
    blocks = [
        context.renderer.render(
            "expression.js.j2",
            bindings=[
                {
                    "function": binding.function,
                    "expression": binding.expression,
                    "selector": binding.selector,
                    "attribute": binding.attribute,
                }
                for binding in bindings
            ],
        )
    ]
    links = []
    for binding in bindings:
        links.extend(context.wiring_links(binding.dependencies, f"{binding.function}()"))
    if links:
        blocks.append(context.renderer.render("wiring.js.j2", links=links))
    return "\n\n".join(blocks)


__all__ = [
    "BindingResult",
    "ExpressionBinding",
    "compile_bindings",
    "display_value",
    "generate_binding_code",
    "lookup",
    "static_text",
]
