"""Reactive state: declaration rewriting and accessor generation."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..codegen import CodeRenderer, default_renderer
from ..logging import get_logger
from ..naming import capitalize, js_safe, scoped_query
from .declarations import REACTIVE, Declaration, scan_declarations
from .literals import RawExpression, is_static, parse_value, to_js
from .transformer import rewrite_reactive

_PLAIN_KEY = re.compile(r"^[A-Za-z_$][\w$]*$")

logger = get_logger("reactivity")


@dataclass
class ReactiveVariable:
    """A ``$()`` declaration and what the template reads from it."""

    name: str
    initializer: str
    initial_value: Any = None
    is_object: bool = False
    accessed_paths: List[str] = field(default_factory=list)

    @property
    def backing_name(self) -> str:
        return f"_{self.name}"

    @property
    def has_static_value(self) -> bool:
        return is_static(self.initial_value)

    def track_path(self, path: Sequence[str]) -> None:
        """Record ``path`` and every intermediate prefix of it."""
        for depth in range(1, len(path) + 1):
            joined = ".".join(path[:depth])
            if joined not in self.accessed_paths:
                self.accessed_paths.append(joined)

    def initial_js(self) -> str:
        if self.has_static_value:
            return to_js(self.initial_value)
        return self.initializer or "undefined"


@dataclass
class ReactivityResult:
    script: str
    variables: Dict[str, ReactiveVariable]
    code: str


def find_reactive_declarations(script: str) -> List[Declaration]:
    return [item for item in scan_declarations(script) if item.kind == REACTIVE]


def collect_reactive_variables(
    script: str, constants: Mapping[str, Any] | None = None
) -> Dict[str, ReactiveVariable]:
    """Build reactive variables from ``script`` in declaration order."""
    variables: Dict[str, ReactiveVariable] = {}
    for declaration in find_reactive_declarations(script):
        value = parse_value(declaration.initializer) if declaration.initializer else RawExpression("")
        if constants and declaration.name in constants:
            value = constants[declaration.name]
        is_object = isinstance(value, (dict, list)) or declaration.initializer.startswith(("{", "["))
        variables[declaration.name] = ReactiveVariable(
            name=declaration.name,
            initializer=declaration.initializer,
            initial_value=value,
            is_object=is_object,
        )
    return variables


class ReactivityTransformer:
    """Rewrites a script so reactive variables go through accessor functions."""

    def __init__(self, scope_id: str, renderer: CodeRenderer | None = None) -> None:
        self.scope_id = scope_id
        self._renderer = renderer or default_renderer()

    def transform(
        self,
        script: str,
        variables: Mapping[str, ReactiveVariable],
        *,
        extra_names: Iterable[str] = (),
        rendered: Iterable[str] = (),
        has_update_hooks: bool = False,
    ) -> ReactivityResult:
        """Replace declarations, rewrite usages and generate accessors.

        ``extra_names`` are additional accessor-backed names (computed
        properties) whose reads must also become calls. ``rendered`` names
        the variables displayed by the template.
        """
        rewritten = _replace_declarations(script, variables)
        names = set(variables) | set(extra_names)
        rewritten = rewrite_reactive(rewritten, names)

        rendered_set = set(rendered)
        blocks = [
            self._accessor(variable, has_update_hooks, variable.name in rendered_set)
            for variable in variables.values()
        ]
        logger.debug(
            "Transformed %d reactive variable(s) in scope %s", len(variables), self.scope_id
        )
        return ReactivityResult(script=rewritten, variables=dict(variables), code="\n\n".join(blocks))

    def _accessor(self, variable: ReactiveVariable, has_update_hooks: bool, rendered: bool) -> str:
        name = variable.name
        selector = ", ".join(
            (
                scoped_query(self.scope_id, f'[data-reactive="{name}"]'),
                scoped_query(self.scope_id, f'[data-reactive^="{name}:"]'),
            )
        )
        setters = []
        if variable.is_object:
            for path in variable.accessed_paths:
                parts = path.split(".")
                setters.append(
                    {
                        "function": "set" + capitalize(name) + "".join(capitalize(js_safe(p)) for p in parts),
                        "accessor": _property_accessor(parts),
                    }
                )
        return self._renderer.render(
            "reactive.js.j2",
            name=name,
            backing=variable.backing_name,
            selector=selector,
            indicator_selector=scoped_query(self.scope_id, ".indicator"),
            is_mounted=name == "mounted",
            setters=setters,
            update_runner=f"_runUpdateCallbacks_{js_safe(self.scope_id)}" if has_update_hooks else "",
            initial_render=rendered and not variable.has_static_value,
        )


def _replace_declarations(script: str, variables: Mapping[str, ReactiveVariable]) -> str:
    result = script
    for declaration in reversed(find_reactive_declarations(script)):
        variable: Optional[ReactiveVariable] = variables.get(declaration.name)
        if variable is None:
            continue
        replacement = f"let {variable.backing_name} = {variable.initial_js()}"
        result = result[: declaration.start] + replacement + result[declaration.end :]
    return result


def _property_accessor(parts: Sequence[str]) -> str:
    pieces = []
    for part in parts:
        if part.isdigit():
            pieces.append(f"[{part}]")
        elif _PLAIN_KEY.match(part):
            pieces.append(f".{part}")
        else:
            pieces.append(f"[{to_js(part)}]")
    return "".join(pieces)


__all__ = [
    "ReactiveVariable",
    "ReactivityResult",
    "ReactivityTransformer",
    "collect_reactive_variables",
    "find_reactive_declarations",
]
