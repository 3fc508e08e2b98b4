"""Store components: singleton state shared by every importing component."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import re
from typing import List

from ..codegen import CodeRenderer, default_renderer
from ..logging import get_logger
from ..naming import js_safe
from .constants import extract_constants
from .declarations import PLAIN, scan_declarations
from .reactivity import ReactivityTransformer, collect_reactive_variables
from .scanner import CLOSERS, IDENT, OPENERS, PUNCT, next_significant, tokenize

logger = get_logger("store")

_ARROW_OR_FUNCTION = re.compile(r"^(?:async\s+)?(?:function\b|\([^)]*\)\s*=>|[A-Za-z_$][\w$]*\s*=>)")


@dataclass
class StoreDefinition:
    name: str
    variables: List[str] = field(default_factory=list)
    functions: List[str] = field(default_factory=list)


def parse_store_script(name: str, script: str) -> StoreDefinition:
    """Collect the reactive variables and top-level functions a store exposes."""
    definition = StoreDefinition(name=name)
    definition.variables = list(collect_reactive_variables(script))

    tokens = tokenize(script)
    depth = 0
    for index, token in enumerate(tokens):
        if token.kind == PUNCT:
            if token.text in OPENERS:
                depth += 1
            elif token.text in CLOSERS:
                depth = max(0, depth - 1)
            continue
        if depth or token.kind != IDENT or token.text != "function":
            continue
        following = next_significant(tokens, index)
        if following is not None and tokens[following].kind == IDENT:
            definition.functions.append(tokens[following].text)

    for declaration in scan_declarations(script):
        if declaration.kind == PLAIN and _ARROW_OR_FUNCTION.match(declaration.initializer):
            definition.functions.append(declaration.name)
    return definition


def compile_store(name: str, script: str, scope_id: str, renderer: CodeRenderer | None = None) -> str:
    """Compile a ``<store>`` body into a singleton registered on ``window``."""
    renderer = renderer or default_renderer()
    definition = parse_store_script(name, script)
    variables = collect_reactive_variables(script, extract_constants(script))
    transformed = ReactivityTransformer(scope_id, renderer).transform(script, variables)
    body = transformed.script.strip()
    if transformed.code:
        body = f"{body}\n\n{transformed.code}" if body else transformed.code
    logger.debug(
        "Compiled store %s: %d variable(s), %d function(s)",
        name,
        len(definition.variables),
        len(definition.functions),
    )
    return renderer.render(
        "store.js.j2",
        name=name,
        body=body,
        variables=definition.variables,
        functions=definition.functions,
    )


def store_binding(alias: str, store_name: str) -> str:
    """Statement giving an importing component access to a store."""
    return f"const {js_safe(alias)} = window.__zephyrStores[{json.dumps(store_name)}];"


__all__ = ["StoreDefinition", "compile_store", "parse_store_script", "store_binding"]
