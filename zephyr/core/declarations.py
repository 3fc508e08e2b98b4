"""Top-level variable declarations in component scripts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .scanner import (
    CLOSERS,
    IDENT,
    OPENERS,
    PUNCT,
    Token,
    expression_end,
    match_brackets,
    next_significant,
    prev_significant,
    tokenize,
)

PLAIN = "plain"
REACTIVE = "reactive"
COMPUTED = "computed"

_KEYWORDS = {"let", "const", "var"}
_MARKERS = {"$": REACTIVE, "$computed": COMPUTED}


@dataclass(frozen=True)
class Declaration:
    """``let|const|var name = ...`` at the top level of a script.

    ``start``/``end`` cover the keyword through the initializer, excluding
    any trailing semicolon. For reactive and computed declarations the
    initializer is the text inside the marker call parentheses.
    """

    keyword: str
    name: str
    kind: str
    initializer: str
    start: int
    end: int


def scan_declarations(script: str) -> List[Declaration]:
    tokens = tokenize(script)
    brackets = match_brackets(tokens)
    declarations: List[Declaration] = []
    depth = 0
    for index, token in enumerate(tokens):
        if token.kind == PUNCT:
            if token.text in OPENERS:
                depth += 1
            elif token.text in CLOSERS:
                depth = max(0, depth - 1)
            continue
        if depth or token.kind != IDENT or token.text not in _KEYWORDS:
            continue
        previous = prev_significant(tokens, index)
        if previous is not None and tokens[previous].is_punct(".", "?."):
            continue
        declaration = _read_declaration(script, tokens, brackets, index)
        if declaration is not None:
            declarations.append(declaration)
    return declarations


def _read_declaration(
    script: str, tokens: Sequence[Token], brackets: dict, keyword_index: int
) -> Declaration | None:
    name_index = next_significant(tokens, keyword_index)
    if name_index is None or tokens[name_index].kind != IDENT:
        return None
    cursor = next_significant(tokens, name_index)
    if cursor is not None and tokens[cursor].is_punct(":"):
        cursor = _skip_annotation(tokens, brackets, cursor)
    if cursor is None or not tokens[cursor].is_punct("="):
        return None
    value_index = next_significant(tokens, cursor)
    if value_index is None:
        return None

    keyword = tokens[keyword_index]
    value = tokens[value_index]
    kind = _MARKERS.get(value.text) if value.kind == IDENT else None
    if kind is not None:
        open_index = next_significant(tokens, value_index)
        if open_index is not None and tokens[open_index].is_punct("("):
            close_index = brackets.get(open_index)
            if close_index is None:
                return None
            return Declaration(
                keyword=keyword.text,
                name=tokens[name_index].text,
                kind=kind,
                initializer=script[tokens[open_index].end : tokens[close_index].start].strip(),
                start=keyword.start,
                end=tokens[close_index].end,
            )

    end_index = expression_end(tokens, value_index, brackets)
    last = prev_significant(tokens, end_index)
    if last is None or last < value_index:
        return None
    return Declaration(
        keyword=keyword.text,
        name=tokens[name_index].text,
        kind=PLAIN,
        initializer=script[value.start : tokens[last].end],
        start=keyword.start,
        end=tokens[last].end,
    )


def _skip_annotation(tokens: Sequence[Token], brackets: dict, colon_index: int) -> int | None:
    index = colon_index + 1
    while index < len(tokens):
        token = tokens[index]
        if token.kind == PUNCT:
            if token.text == "=":
                return index
            if token.text in (";", ","):
                return None
            if token.text in OPENERS and index in brackets:
                index = brackets[index] + 1
                continue
        elif not token.significant and "\n" in token.text:
            return None
        index += 1
    return None


__all__ = ["COMPUTED", "Declaration", "PLAIN", "REACTIVE", "scan_declarations"]
