"""Script normalization: TypeScript syntax removal and import hoisting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from ..errors import ScriptNormalizationError
from ..logging import get_logger
from .scanner import (
    IDENT,
    NUMBER,
    PUNCT,
    STRING,
    TEMPLATE,
    Token,
    find_unbalanced,
    match_brackets,
    next_significant,
    prev_significant,
    tokenize,
)

logger = get_logger("script")

_DECLARING = {"let", "const", "var"}
_TYPE_WORDS = {"keyof", "typeof", "readonly", "unique", "infer"}

Span = Tuple[int, int]


@dataclass
class NormalizedScript:
    body: str
    imports: List[str] = field(default_factory=list)


class ScriptNormalizer(Protocol):
    """Turns a component script into browser JavaScript."""

    def normalize(self, script: str, filename: Optional[str] = None) -> NormalizedScript:
        ...


class TypeScriptStripper:
    """Removes type-only syntax and hoists ``import`` statements.

    Handles annotations on declarations and parameters, return types,
    ``as`` casts, generic parameters on function declarations, and top-level
    ``interface``/``type`` declarations. Anything else passes through.
    """

    def normalize(self, script: str, filename: Optional[str] = None) -> NormalizedScript:
        if not script.strip():
            return NormalizedScript(body="")
        tokens = tokenize(script)
        problem = find_unbalanced(tokens)
        if problem is not None:
            raise ScriptNormalizationError(
                f"unbalanced '{problem.text}' at offset {problem.start}",
                script,
                file=filename,
            )
        brackets = match_brackets(tokens)
        imports: List[str] = []
        spans: List[Span] = []

        depth = 0
        for index, token in enumerate(tokens):
            if token.kind == PUNCT:
                if token.text in ("(", "[", "{"):
                    depth += 1
                    if token.text == "(":
                        spans.extend(_arrow_spans(tokens, index, brackets))
                elif token.text in (")", "]", "}"):
                    depth = max(0, depth - 1)
                continue
            if token.kind != IDENT:
                continue
            previous = prev_significant(tokens, index)
            if previous is not None and tokens[previous].is_punct(".", "?."):
                continue
            if depth == 0 and token.text == "import":
                end = _import_end(tokens, index)
                if end is not None:
                    imports.append(script[token.start : tokens[end - 1].end].strip())
                    spans.append((token.start, tokens[end - 1].end))
                    continue
            if depth == 0 and token.text in ("interface", "type"):
                end = _type_declaration_end(tokens, index, brackets)
                if end is not None:
                    start = token.start
                    if previous is not None and tokens[previous].text in ("export", "declare"):
                        start = tokens[previous].start
                    spans.append((start, tokens[end - 1].end))
                    continue
            spans.extend(_annotation_spans(tokens, index, brackets))

        body = _remove_spans(script, spans).strip()
        logger.debug("Normalized script: %d hoisted import(s)", len(imports))
        return NormalizedScript(body=body, imports=imports)


def _import_end(tokens: Sequence[Token], index: int) -> Optional[int]:
    following = next_significant(tokens, index)
    if following is None or tokens[following].is_punct("(", "."):
        return None
    cursor: Optional[int] = following
    while cursor is not None and tokens[cursor].kind != STRING:
        cursor = next_significant(tokens, cursor)
    if cursor is None:
        return None
    end = cursor + 1
    semicolon = next_significant(tokens, cursor)
    if semicolon is not None and tokens[semicolon].is_punct(";"):
        end = semicolon + 1
    return end


def _type_declaration_end(tokens: Sequence[Token], index: int, brackets: Dict[int, int]) -> Optional[int]:
    name = next_significant(tokens, index)
    if name is None or tokens[name].kind != IDENT:
        return None
    cursor = next_significant(tokens, name)
    if cursor is not None and tokens[cursor].is_punct("<"):
        cursor = next_significant(tokens, _skip_angles(tokens, cursor) - 1)
    if cursor is None:
        return None
    if tokens[index].text == "interface":
        while cursor is not None and not tokens[cursor].is_punct("{"):
            cursor = next_significant(tokens, cursor)
        if cursor is None or cursor not in brackets:
            return None
        return brackets[cursor] + 1
    if not tokens[cursor].is_punct("="):
        return None
    end = _skip_type(tokens, next_significant(tokens, cursor), brackets)
    semicolon = next_significant(tokens, end - 1)
    if semicolon is not None and tokens[semicolon].is_punct(";"):
        return semicolon + 1
    return end


def _annotation_spans(tokens: Sequence[Token], index: int, brackets: Dict[int, int]) -> List[Span]:
    token = tokens[index]
    following = next_significant(tokens, index)
    if following is None:
        return []

    if token.text in _DECLARING and tokens[following].kind == IDENT:
        colon = next_significant(tokens, following)
        if colon is not None and tokens[colon].is_punct(":"):
            end = _skip_type(tokens, next_significant(tokens, colon), brackets)
            return [(tokens[colon].start, tokens[end - 1].end)]
        return []

    if token.text == "as":
        previous = prev_significant(tokens, index)
        if previous is None or not _ends_value(tokens[previous]):
            return []
        if tokens[following].kind in (IDENT, STRING, NUMBER) or tokens[following].is_punct("{", "["):
            end = _skip_type(tokens, following, brackets)
            return [(tokens[previous].end, tokens[end - 1].end)]
        return []

    if token.text == "function":
        spans: List[Span] = []
        cursor: Optional[int] = following
        if tokens[following].kind == IDENT:
            cursor = next_significant(tokens, following)
        if cursor is not None and tokens[cursor].is_punct("<"):
            end = _skip_angles(tokens, cursor)
            spans.append((tokens[cursor].start, tokens[end - 1].end))
            cursor = next_significant(tokens, end - 1)
        if cursor is not None and tokens[cursor].is_punct("("):
            spans.extend(_parameter_spans(tokens, cursor, brackets, declared=True))
        return spans

    if token.text == "catch" and tokens[following].is_punct("("):
        return _parameter_spans(tokens, following, brackets, declared=True)
    return []


def _arrow_spans(tokens: Sequence[Token], opener: int, brackets: Dict[int, int]) -> List[Span]:
    previous = prev_significant(tokens, opener)
    if previous is not None:
        before = tokens[previous]
        if before.kind == IDENT and before.text != "async":
            return []
        if before.is_punct(")", "]"):
            return []
    return _parameter_spans(tokens, opener, brackets, declared=False)


def _parameter_spans(
    tokens: Sequence[Token], opener: int, brackets: Dict[int, int], *, declared: bool
) -> List[Span]:
    """Annotations of the parameter list at ``opener`` and its return type.

    Undeclared lists (arrow functions) only count when ``=>`` follows the
    closing parenthesis or the return type.
    """
    close = brackets.get(opener)
    if close is None:
        return []
    spans: List[Span] = []
    after = next_significant(tokens, close)
    if after is not None and tokens[after].is_punct(":"):
        end = _skip_type(tokens, next_significant(tokens, after), brackets, allow_arrow=declared)
        arrow = next_significant(tokens, end - 1)
        if not declared and (arrow is None or not tokens[arrow].is_punct("=>")):
            return []
        spans.append((tokens[after].start, tokens[end - 1].end))
    elif not declared and (after is None or not tokens[after].is_punct("=>")):
        return []

    cursor = next_significant(tokens, opener)
    while cursor is not None and cursor < close:
        current = tokens[cursor]
        if current.is_punct("[", "{") and cursor in brackets:
            cursor = brackets[cursor]
        elif current.kind != IDENT:
            cursor = next_significant(tokens, cursor)
            continue
        marker = next_significant(tokens, cursor)
        if marker is not None and tokens[marker].is_punct("?"):
            spans.append((tokens[marker].start, tokens[marker].end))
            marker = next_significant(tokens, marker)
        if marker is not None and tokens[marker].is_punct(":"):
            end = _skip_type(tokens, next_significant(tokens, marker), brackets)
            spans.append((tokens[marker].start, tokens[end - 1].end))
            cursor = end - 1
        cursor = _next_parameter(tokens, cursor, close, brackets)
    return spans


def _next_parameter(tokens: Sequence[Token], cursor: int, close: int, brackets: Dict[int, int]) -> Optional[int]:
    """Index of the first token of the parameter after the one at ``cursor``."""
    position: Optional[int] = cursor
    while position is not None and position < close:
        token = tokens[position]
        if token.is_punct("(", "[", "{") and position in brackets:
            position = next_significant(tokens, brackets[position])
            continue
        if token.is_punct(","):
            return next_significant(tokens, position)
        position = next_significant(tokens, position)
    return None


def _ends_value(token: Token) -> bool:
    if token.kind in (IDENT, NUMBER, STRING, TEMPLATE):
        return True
    return token.is_punct(")", "]", "}")


def _skip_angles(tokens: Sequence[Token], opener: int) -> int:
    depth = 0
    for index in range(opener, len(tokens)):
        token = tokens[index]
        if token.kind != PUNCT:
            continue
        if token.text == "<":
            depth += 1
        elif set(token.text) == {">"}:
            depth -= len(token.text)
        if depth <= 0:
            return index + 1
    return len(tokens)


def _skip_type(
    tokens: Sequence[Token],
    start: Optional[int],
    brackets: Dict[int, int],
    *,
    allow_arrow: bool = True,
) -> int:
    """Return the token index just past the type expression at ``start``."""
    if start is None:
        return len(tokens)
    cursor: Optional[int] = start
    end = start + 1
    while cursor is not None:
        token = tokens[cursor]
        if token.is_punct("|", "&") or (token.kind == IDENT and token.text in _TYPE_WORDS):
            cursor = next_significant(tokens, cursor)
            continue
        if token.is_punct("(", "{", "[") and cursor in brackets:
            end = brackets[cursor] + 1
        elif token.kind in (IDENT, STRING, NUMBER):
            end = cursor + 1
        else:
            break
        cursor = next_significant(tokens, end - 1)
        while cursor is not None:
            current = tokens[cursor]
            if current.is_punct("."):
                name = next_significant(tokens, cursor)
                if name is None:
                    break
                end = name + 1
            elif current.is_punct("<"):
                end = _skip_angles(tokens, cursor)
            elif current.is_punct("[") and cursor in brackets:
                end = brackets[cursor] + 1
            elif current.is_punct("=>") and allow_arrow:
                end = _skip_type(tokens, next_significant(tokens, cursor), brackets)
            else:
                break
            cursor = next_significant(tokens, end - 1)
        if cursor is None or not tokens[cursor].is_punct("|", "&"):
            break
    return end


def _remove_spans(script: str, spans: Sequence[Span]) -> str:
    pieces: List[str] = []
    cursor = 0
    for start, end in sorted(set(spans)):
        if start < cursor:
            continue
        pieces.append(script[cursor:start])
        cursor = end
    pieces.append(script[cursor:])
    return "".join(pieces)


__all__ = ["NormalizedScript", "ScriptNormalizer", "TypeScriptStripper"]
