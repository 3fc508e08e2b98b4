"""``@if``/``@else-if``/``@else`` and ``@each`` directives."""

from __future__ import annotations

from dataclasses import dataclass, field
import html
import re
from typing import Dict, List, Optional, Tuple

from ..core.scanner import IDENT, next_significant, prev_significant, referenced_identifiers, tokenize
from ..core.transformer import rewrite_reactive
from ..naming import scoped_query
from .context import TemplateContext
from .markup import Tag, find_element_end, iter_tags, rewrite_tag
from .references import parse_references

IF = "@if"
ELSE_IF = "@else-if"
ELSE = "@else"
EACH = "@each"

_LOOP_PATTERN = re.compile(
    r"^\s*\(?\s*([A-Za-z_$][\w$]*)\s*(?:,\s*([A-Za-z_$][\w$]*)\s*)?\)?\s+(?:in|of)\s+(.+?)\s*$",
    re.S,
)


@dataclass
class ConditionalBranch:
    id: str
    kind: str
    condition: str


@dataclass
class ConditionalGroup:
    id: str
    function: str
    branches: List[ConditionalBranch] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)


@dataclass
class LoopDirective:
    id: str
    function: str
    item: str
    index: Optional[str]
    array: str
    markup: str
    dependencies: List[str] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)


@dataclass
class DirectiveResult:
    template: str
    conditionals: List[ConditionalGroup] = field(default_factory=list)
    loops: List[LoopDirective] = field(default_factory=list)

    @property
    def exports(self) -> List[str]:
        names: Dict[str, None] = {}
        for loop in self.loops:
            for name in loop.exports:
                names[name] = None
        return list(names)


def parse_loop_expression(value: str) -> Optional[Tuple[str, Optional[str], str]]:
    """Split ``(item, index) in items`` into its three parts."""
    match = _LOOP_PATTERN.match(value)
    if match is None:
        return None
    return match.group(1), match.group(2), match.group(3)


def compile_loops(template: str, context: TemplateContext) -> Tuple[str, List[LoopDirective]]:
    """Replace each outermost ``@each`` element with a hidden placeholder."""
    loops: List[LoopDirective] = []
    position = 0
    while True:
        tag = _next_tag_with(template, EACH, position)
        if tag is None:
            break
        end = find_element_end(template, tag)
        attribute = tag.get(EACH)
        parsed = parse_loop_expression(html.unescape(attribute.value or "")) if attribute else None
        if parsed is None:
            context.warn(
                f"Invalid @each expression on <{tag.name}>: '{attribute.value if attribute else ''}'",
                suggestion="Use the form @each=\"item in items\" or @each=\"(item, index) in items\"",
            )
            template = template[: tag.start] + rewrite_tag(tag.text, remove=[EACH]) + template[tag.end :]
            position = tag.start
            continue

        item, index, array = parsed
        number = context.next_id("loop")
        loop_id = f"{context.scope_id}-loop-{number}"
        element = template[tag.start : end]
        if _next_tag_with(element, EACH, len(tag.text)) is not None:
            context.warn(f"Nested @each inside <{tag.name}> is rendered as static markup")

        local_names = {item} | ({index} if index else set())
        names = context.accessor_names - local_names
        markup, reference_names, exports = _loop_markup(element, tag, loop_id, names, local_names)
        dependencies = context.dependencies(
            referenced_identifiers(array) + reference_names, exclude=local_names
        )
        loops.append(
            LoopDirective(
                id=loop_id,
                function=f"renderLoop_{context.safe_id}_{number}",
                item=item,
                index=index,
                array=rewrite_reactive(array, names),
                markup=markup,
                dependencies=dependencies,
                exports=exports,
            )
        )

        placeholder = rewrite_tag(
            tag.text,
            remove=[EACH] + [a.name for a in tag.attributes if a.value and "{{" in a.value],
            add={"data-loop": loop_id, "hidden": None},
        )
        if not tag.is_void:
            placeholder += f"</{tag.name}>"
        template = template[: tag.start] + placeholder + template[end:]
        position = tag.start + len(placeholder)
    return template, loops


def _loop_markup(
    element: str, tag: Tag, loop_id: str, names: frozenset, local_names: set
) -> Tuple[str, List[str], List[str]]:
    """Template literal body for one item, its references and the functions its handlers call."""
    opening = rewrite_tag(tag.text, remove=[EACH], add={"data-loop-item": loop_id})
    element = opening + element[len(tag.text) :]
    element = _rewrite_inline_handlers(element, names)
    exports = _called_functions(element, local_names)

    pieces: List[str] = []
    referenced: List[str] = []
    cursor = 0
    for reference in parse_references(element):
        pieces.append(_escape_literal(element[cursor : reference.start]))
        expression = rewrite_reactive(reference.expression, names)
        referenced.extend(referenced_identifiers(reference.expression))
        if reference.raw:
            pieces.append("${(" + expression + ") ?? ''}")
        else:
            pieces.append("${_zphEscape(" + expression + ")}")
        cursor = reference.end
    pieces.append(_escape_literal(element[cursor:]))
    return "".join(pieces), referenced, exports


def _rewrite_inline_handlers(element: str, names: frozenset) -> str:
    pieces: List[str] = []
    cursor = 0
    for tag in iter_tags(element):
        if tag.closing:
            continue
        replacements = {
            attribute.name: rewrite_reactive(html.unescape(attribute.value), names)
            for attribute in tag.attributes
            if attribute.name.lower().startswith("on") and attribute.value
        }
        if not replacements:
            continue
        pieces.append(element[cursor : tag.start])
        pieces.append(rewrite_tag(tag.text, replace=replacements))
        cursor = tag.end
    pieces.append(element[cursor:])
    return "".join(pieces)


def _called_functions(element: str, local_names: set) -> List[str]:
    names: Dict[str, None] = {}
    for tag in iter_tags(element):
        if tag.closing:
            continue
        for attribute in tag.attributes:
            if not attribute.name.lower().startswith("on") or not attribute.value:
                continue
            tokens = tokenize(html.unescape(attribute.value))
            for index, token in enumerate(tokens):
                if token.kind != IDENT or token.text in local_names:
                    continue
                previous = prev_significant(tokens, index)
                following = next_significant(tokens, index)
                if previous is not None and tokens[previous].is_punct(".", "?."):
                    continue
                if following is not None and tokens[following].is_punct("("):
                    names[token.text] = None
    return list(names)


def _escape_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def compile_conditionals(template: str, context: TemplateContext) -> Tuple[str, List[ConditionalGroup]]:
    """Mark ``@if`` chains with ``data-conditional`` ids and collect conditions."""
    groups: List[ConditionalGroup] = []
    while True:
        first = _next_tag_with(template, IF, 0)
        if first is None:
            break
        number = context.next_id("conditional")
        group = ConditionalGroup(
            id=f"{context.scope_id}-if-{number}",
            function=f"renderConditional_{context.safe_id}_{number}",
        )
        branch_tags = _collect_branches(template, first)
        edits = []
        dependencies: List[str] = []
        for position, (tag, kind) in enumerate(branch_tags):
            branch_id = f"{group.id}-{position}"
            condition = "true"
            if kind != ELSE:
                attribute = tag.get(kind)
                raw_condition = html.unescape(attribute.value or "").strip() if attribute else ""
                if not raw_condition:
                    context.warn(f"Empty {kind} condition on <{tag.name}>")
                    raw_condition = "false"
                condition = rewrite_reactive(raw_condition, context.accessor_names)
                dependencies.extend(referenced_identifiers(raw_condition))
            group.branches.append(ConditionalBranch(id=branch_id, kind=kind, condition=condition))
            edits.append((tag, rewrite_tag(tag.text, remove=[kind], add={"data-conditional": branch_id})))
        group.dependencies = context.dependencies(dependencies)
        for tag, replacement in reversed(edits):
            template = template[: tag.start] + replacement + template[tag.end :]
        groups.append(group)

    for kind in (ELSE_IF, ELSE):
        while True:
            orphan = _next_tag_with(template, kind, 0)
            if orphan is None:
                break
            context.warn(
                f"{kind} on <{orphan.name}> has no preceding @if sibling",
                suggestion="Place the element directly after an element carrying @if",
            )
            template = template[: orphan.start] + rewrite_tag(orphan.text, remove=[kind]) + template[orphan.end :]
    return template, groups


def _collect_branches(template: str, first: Tag) -> List[Tuple[Tag, str]]:
    branches: List[Tuple[Tag, str]] = [(first, IF)]
    current = first
    while True:
        end = find_element_end(template, current)
        following = _adjacent_tag(template, end)
        if following is None:
            break
        if following.has(ELSE_IF):
            branches.append((following, ELSE_IF))
            current = following
            continue
        if following.has(ELSE):
            branches.append((following, ELSE))
        break
    return branches


def _adjacent_tag(template: str, position: int) -> Optional[Tag]:
    """Return the opening tag that follows ``position`` after whitespace/comments."""
    cursor = position
    while True:
        while cursor < len(template) and template[cursor].isspace():
            cursor += 1
        if template.startswith("<!--", cursor):
            close = template.find("-->", cursor)
            if close < 0:
                return None
            cursor = close + 3
            continue
        break
    for tag in iter_tags(template, cursor):
        if tag.start != cursor or tag.closing:
            return None
        return tag
    return None


def _next_tag_with(template: str, attribute: str, position: int) -> Optional[Tag]:
    for tag in iter_tags(template, position):
        if not tag.closing and tag.has(attribute):
            return tag
    return None


def generate_directive_code(result: DirectiveResult, context: TemplateContext) -> str:
    """Render evaluator functions, loop renderers and their wiring."""
    blocks: List[str] = []
    if result.conditionals:
        groups = [
            {
                "id": group.id,
                "function": group.function,
                "branches": [
                    {
                        "selector": scoped_query(context.scope_id, f'[data-conditional="{branch.id}"]'),
                        "condition": branch.condition,
                    }
                    for branch in group.branches
                ],
            }
            for group in result.conditionals
        ]
        blocks.append(context.renderer.render("conditional.js.j2", groups=groups))
    if result.loops:
        loops = [
            {
                "id": loop.id,
                "function": loop.function,
                "anchor": f"_loopAnchor_{loop.function[len('renderLoop_'):]}",
                "placeholder_selector": scoped_query(context.scope_id, f'[data-loop="{loop.id}"]'),
                "item_selector": f'[data-loop-item="{loop.id}"]',
                "item": loop.item,
                "index": loop.index or "_zphIndex",
                "array": loop.array,
                "markup": loop.markup,
            }
            for loop in result.loops
        ]
        blocks.append(context.renderer.render("loop.js.j2", loops=loops))

    links = []
    for group in result.conditionals:
        links.extend(context.wiring_links(group.dependencies, f"{group.function}()"))
    for loop in result.loops:
        links.extend(context.wiring_links(loop.dependencies, f"{loop.function}()"))
    if links:
        blocks.append(context.renderer.render("wiring.js.j2", links=links))
    return "\n\n".join(blocks)


def compile_directives(template: str, context: TemplateContext) -> DirectiveResult:
    """Run the loop pass, then the conditional pass, over ``template``."""
    template, loops = compile_loops(template, context)
    template, conditionals = compile_conditionals(template, context)
    return DirectiveResult(template=template, conditionals=conditionals, loops=loops)


__all__ = [
    "ConditionalBranch",
    "ConditionalGroup",
    "DirectiveResult",
    "LoopDirective",
    "compile_conditionals",
    "compile_directives",
    "compile_loops",
    "generate_directive_code",
    "parse_loop_expression",
]
