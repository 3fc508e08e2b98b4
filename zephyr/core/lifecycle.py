"""Lifecycle hooks: ``onMount``, ``onDestroy`` and ``onUpdate`` callbacks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from ..codegen import CodeRenderer, default_renderer
from ..naming import js_safe
from .scanner import IDENT, match_brackets, next_significant, prev_significant, tokenize
from .transformer import rewrite_reactive

MOUNT = "mount"
DESTROY = "destroy"
UPDATE = "update"

HOOK_FUNCTIONS: Dict[str, str] = {"onMount": MOUNT, "onDestroy": DESTROY, "onUpdate": UPDATE}
_LABELS = {MOUNT: "Mount", DESTROY: "Destroy", UPDATE: "Update"}
_ARGUMENTS = {MOUNT: "", DESTROY: "", UPDATE: "changedVars"}


@dataclass(frozen=True)
class LifecycleHook:
    """One hook registration lifted out of the component script."""

    kind: str
    callback: str
    body: str
    start: int
    end: int


@dataclass
class LifecycleResult:
    script: str
    hooks: List[LifecycleHook] = field(default_factory=list)

    def of_kind(self, kind: str) -> List[LifecycleHook]:
        return [hook for hook in self.hooks if hook.kind == kind]

    @property
    def has_update_hooks(self) -> bool:
        return any(hook.kind == UPDATE for hook in self.hooks)


@dataclass
class LifecycleCode:
    declarations: str
    execution: str


def extract_lifecycle_hooks(script: str) -> LifecycleResult:
    """Remove hook calls from ``script`` and return them in source order."""
    tokens = tokenize(script)
    brackets = match_brackets(tokens)
    hooks: List[LifecycleHook] = []
    consumed_until = -1

    for index, token in enumerate(tokens):
        if token.start < consumed_until:
            continue
        if token.kind != IDENT or token.text not in HOOK_FUNCTIONS:
            continue
        previous = prev_significant(tokens, index)
        if previous is not None:
            before = tokens[previous]
            if before.is_punct(".", "?.") or (before.kind == IDENT and before.text == "function"):
                continue
        opener = next_significant(tokens, index)
        if opener is None or not tokens[opener].is_punct("(") or opener not in brackets:
            continue
        closer = brackets[opener]
        end = tokens[closer].end
        terminator = next_significant(tokens, closer)
        if terminator is not None and tokens[terminator].is_punct(";"):
            end = tokens[terminator].end

        callback = _first_argument(script[tokens[opener].end : tokens[closer].start]).strip()
        if not callback:
            continue
        hooks.append(
            LifecycleHook(
                kind=HOOK_FUNCTIONS[token.text],
                callback=callback,
                body=callback_body(callback),
                start=token.start,
                end=end,
            )
        )
        consumed_until = end

    stripped = script
    for hook in reversed(hooks):
        stripped = stripped[: hook.start] + stripped[hook.end :]
    return LifecycleResult(script=stripped, hooks=hooks)


def _first_argument(arguments: str) -> str:
    depth = 0
    for token in tokenize(arguments):
        if token.is_punct("(", "[", "{"):
            depth += 1
        elif token.is_punct(")", "]", "}"):
            depth -= 1
        elif token.is_punct(",") and depth == 0:
            return arguments[: token.start]
    return arguments


def callback_body(callback: str) -> str:
    """Return the statements a hook callback would execute."""
    tokens = tokenize(callback)
    brackets = match_brackets(tokens)
    depth = 0
    for index, token in enumerate(tokens):
        if token.is_punct("(", "[", "{"):
            if depth == 0 and token.text == "{" and index in brackets:
                return callback[token.end : tokens[brackets[index]].start].strip()
            depth += 1
        elif token.is_punct(")", "]", "}"):
            depth -= 1
        elif token.is_punct("=>") and depth == 0:
            body_index = next_significant(tokens, index)
            if body_index is not None and tokens[body_index].is_punct("{") and body_index in brackets:
                closing = tokens[brackets[body_index]]
                return callback[tokens[body_index].end : closing.start].strip()
            return callback[token.end :].strip() + ";"
    return f"{callback}();"


def generate_lifecycle_code(
    scope_id: str,
    hooks: Iterable[LifecycleHook],
    *,
    names: Iterable[str] = (),
    renderer: CodeRenderer | None = None,
) -> LifecycleCode:
    """Render callback registries and their execution for one component.

    Callback text is passed through the reactive rewrite for ``names`` so
    hook bodies use accessor calls like the rest of the script.
    """
    renderer = renderer or default_renderer()
    name_set = frozenset(names)
    grouped: Dict[str, List[str]] = {MOUNT: [], DESTROY: [], UPDATE: []}
    for hook in hooks:
        grouped[hook.kind].append(rewrite_reactive(hook.callback, name_set))

    kinds = [
        {
            "name": kind,
            "label": _LABELS[kind],
            "argument": _ARGUMENTS[kind],
            "callbacks": callbacks,
        }
        for kind, callbacks in grouped.items()
        if callbacks
    ]
    if not kinds:
        return LifecycleCode(declarations="", execution="")

    safe_id = js_safe(scope_id)
    declarations = renderer.render("lifecycle_declarations.js.j2", kinds=kinds, safe_id=safe_id)
    execution = renderer.render(
        "lifecycle_execution.js.j2",
        safe_id=safe_id,
        scope_id=scope_id,
        has_mount=bool(grouped[MOUNT]),
        has_destroy=bool(grouped[DESTROY]),
    )
    return LifecycleCode(declarations=declarations, execution=execution)


__all__ = [
    "DESTROY",
    "HOOK_FUNCTIONS",
    "LifecycleCode",
    "LifecycleHook",
    "LifecycleResult",
    "MOUNT",
    "UPDATE",
    "callback_body",
    "extract_lifecycle_hooks",
    "generate_lifecycle_code",
]
