"""Computed properties: ``$computed(() => expr, [deps])`` declarations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..codegen import CodeRenderer, default_renderer
from ..logging import get_logger
from ..naming import capitalize, scoped_query
from .declarations import COMPUTED, Declaration, scan_declarations
from .scanner import IDENT, match_brackets, referenced_identifiers, tokenize
from .transformer import rewrite_reactive

logger = get_logger("computed")


@dataclass
class ComputedVariable:
    """A memoized value derived from reactive state."""

    name: str
    expression: str
    explicit_dependencies: Optional[List[str]] = None
    reactive_dependencies: List[str] = field(default_factory=list)
    computed_dependencies: List[str] = field(default_factory=list)


@dataclass
class ComputedResult:
    script: str
    variables: Dict[str, ComputedVariable]
    code: str
    reactive_dependents: Dict[str, List[str]]
    computed_dependents: Dict[str, List[str]]
    warnings: List[str] = field(default_factory=list)


def find_computed_declarations(script: str) -> List[Declaration]:
    return [item for item in scan_declarations(script) if item.kind == COMPUTED]


def parse_computed_arguments(arguments: str) -> Tuple[str, Optional[List[str]]]:
    """Split ``$computed`` arguments into a value expression and explicit deps."""
    function_text, deps_text = _split_top_level_comma(arguments)
    expression = _function_to_expression(function_text.strip())
    explicit: Optional[List[str]] = None
    if deps_text is not None:
        deps_text = deps_text.strip()
        if deps_text.startswith("[") and deps_text.endswith("]"):
            explicit = [
                token.text for token in tokenize(deps_text[1:-1]) if token.kind == IDENT
            ]
    return expression, explicit


def _split_top_level_comma(text: str) -> Tuple[str, Optional[str]]:
    depth = 0
    for token in tokenize(text):
        if token.is_punct("(", "[", "{"):
            depth += 1
        elif token.is_punct(")", "]", "}"):
            depth -= 1
        elif token.is_punct(",") and depth == 0:
            return text[: token.start], text[token.end :]
    return text, None


def _function_to_expression(function_text: str) -> str:
    depth = 0
    for token in tokenize(function_text):
        if token.is_punct("(", "[", "{"):
            depth += 1
        elif token.is_punct(")", "]", "}"):
            depth -= 1
        elif token.is_punct("=>") and depth == 0:
            body = function_text[token.end :].strip()
            if body.startswith("{"):
                return f"(() => {body})()"
            if body.startswith("(") and _wraps_whole(body):
                return body[1:-1].strip()
            return body
    if function_text.startswith(("function", "async")):
        return f"({function_text})()"
    return f"{function_text}()" if function_text else "undefined"


def _wraps_whole(text: str) -> bool:
    tokens = tokenize(text)
    brackets = match_brackets(tokens)
    return bool(tokens) and brackets.get(0) == len(tokens) - 1


class ComputedEngine:
    """Generates memoized getters and invalidation wiring."""

    def __init__(self, scope_id: str, renderer: CodeRenderer | None = None) -> None:
        self.scope_id = scope_id
        self._renderer = renderer or default_renderer()

    def process(self, script: str, reactive_names: Iterable[str]) -> ComputedResult:
        declarations = find_computed_declarations(script)
        reactive = list(dict.fromkeys(reactive_names))
        reactive_set = set(reactive)
        computed_names = [item.name for item in declarations]
        computed_set = set(computed_names)

        variables: Dict[str, ComputedVariable] = {}
        for declaration in declarations:
            expression, explicit = parse_computed_arguments(declaration.initializer)
            inferred = referenced_identifiers(expression)
            if explicit is not None:
                reactive_deps = [name for name in explicit if name in reactive_set]
                computed_deps = [name for name in explicit if name in computed_set]
                computed_deps += [
                    name for name in inferred if name in computed_set and name not in computed_deps
                ]
            else:
                reactive_deps = [name for name in inferred if name in reactive_set]
                computed_deps = [name for name in inferred if name in computed_set]
            computed_deps = [name for name in computed_deps if name != declaration.name]
            variables[declaration.name] = ComputedVariable(
                name=declaration.name,
                expression=expression,
                explicit_dependencies=explicit,
                reactive_dependencies=reactive_deps,
                computed_dependencies=computed_deps,
            )

        reactive_dependents: Dict[str, List[str]] = {}
        computed_dependents: Dict[str, List[str]] = {}
        warnings: List[str] = []
        for variable in variables.values():
            for dependency in variable.reactive_dependencies:
                reactive_dependents.setdefault(dependency, []).append(variable.name)
            for dependency in variable.computed_dependencies:
                if _reaches(variables, dependency, variable.name):
                    warnings.append(
                        f"Computed property '{variable.name}' and '{dependency}' depend on each other"
                    )
                    continue
                computed_dependents.setdefault(dependency, []).append(variable.name)

        stripped = script
        for declaration in reversed(declarations):
            stripped = (
                stripped[: declaration.start]
                + f"// computed: {declaration.name}"
                + stripped[declaration.end :]
            )

        accessor_names = reactive_set | computed_set
        blocks = [
            self._getter(variable, accessor_names - {variable.name})
            for variable in variables.values()
        ]
        wiring = self._wiring(reactive_dependents, computed_dependents)
        if wiring:
            blocks.append(wiring)

        logger.debug("Processed %d computed propert(ies) in scope %s", len(variables), self.scope_id)
        return ComputedResult(
            script=stripped,
            variables=variables,
            code="\n\n".join(blocks),
            reactive_dependents=reactive_dependents,
            computed_dependents=computed_dependents,
            warnings=warnings,
        )

    def _getter(self, variable: ComputedVariable, names: Set[str]) -> str:
        selector = ", ".join(
            (
                scoped_query(self.scope_id, f'[data-reactive="{variable.name}"]'),
                scoped_query(self.scope_id, f'[data-reactive^="{variable.name}:"]'),
            )
        )
        return self._renderer.render(
            "computed.js.j2",
            name=variable.name,
            expression=rewrite_reactive(variable.expression, names),
            selector=selector,
        )

    def _wiring(
        self,
        reactive_dependents: Dict[str, List[str]],
        computed_dependents: Dict[str, List[str]],
    ) -> str:
        links = []
        for source, dependents in reactive_dependents.items():
            links.append(
                {
                    "target": f"update{capitalize(source)}DOM",
                    "calls": [f"invalidate{capitalize(name)}()" for name in dependents],
                }
            )
        for source, dependents in computed_dependents.items():
            links.append(
                {
                    "target": f"invalidate{capitalize(source)}",
                    "calls": [f"invalidate{capitalize(name)}()" for name in dependents],
                }
            )
        if not links:
            return ""
        return self._renderer.render("wiring.js.j2", links=links)


def _reaches(variables: Dict[str, ComputedVariable], start: str, target: str) -> bool:
    """Return True when ``start`` transitively depends on ``target``."""
    stack = [start]
    seen: Set[str] = set()
    while stack:
        current = stack.pop()
        if current == target:
            return True
        if current in seen or current not in variables:
            continue
        seen.add(current)
        stack.extend(variables[current].computed_dependencies)
    return False


def process_computed(
    script: str,
    reactive_names: Iterable[str],
    scope_id: str,
    renderer: CodeRenderer | None = None,
) -> ComputedResult:
    return ComputedEngine(scope_id, renderer).process(script, reactive_names)


__all__ = [
    "ComputedEngine",
    "ComputedResult",
    "ComputedVariable",
    "find_computed_declarations",
    "parse_computed_arguments",
    "process_computed",
]
