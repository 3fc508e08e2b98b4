"""Token-level rewriting of reactive variable usages into accessor calls.

``count++`` becomes ``count(count() + 1)``, ``count = 5`` becomes
``count(5)``, ``count += n`` becomes ``count(count() + n)`` and a bare read
``count`` becomes ``count()``. Strings, comments, property names, object keys
and names shadowed by parameters or nested declarations are left untouched.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from .scanner import (
    IDENT,
    NUMBER,
    PUNCT,
    STRING,
    TEMPLATE,
    Token,
    expression_end,
    match_brackets,
    next_significant,
    prev_significant,
    split_template,
    tokenize,
)

_COMPOUND_ASSIGNMENTS = {"+=": "+", "-=": "-", "*=": "*", "/=": "/", "%=": "%", "**=": "**"}
_DECLARING_KEYWORDS = {"let", "const", "var", "function", "class"}
_PREFIX_KEYWORDS = {
    "return", "typeof", "void", "delete", "case", "else", "do", "in", "of", "yield",
    "await", "throw", "new",
}

ShadowRange = Tuple[str, int, int]


def rewrite_reactive(code: str, names: Iterable[str]) -> str:
    """Rewrite reads and writes of ``names`` in ``code`` into accessor calls."""
    active = frozenset(names)
    if not active or not code:
        return code
    return _Rewriter(tokenize(code), active).run()


class _Rewriter:
    def __init__(self, tokens: List[Token], names: FrozenSet[str]) -> None:
        self._tokens = tokens
        self._names = names
        self._brackets = match_brackets(tokens)
        self._ranges, self._bindings = _collect_shadows(tokens, self._brackets, names)

    def run(self) -> str:
        return self._emit(0, len(self._tokens))

    def _emit(self, start: int, stop: int) -> str:
        tokens = self._tokens
        out: List[str] = []
        index = start
        while index < stop:
            token = tokens[index]
            if token.kind == TEMPLATE:
                out.append(self._template(token.text, index))
                index += 1
                continue
            if token.is_punct("++", "--") and self._is_prefix(index):
                target = next_significant(tokens, index)
                if target is not None and target < stop and self._rewritable(target):
                    name = tokens[target].text
                    operator = "+" if token.text == "++" else "-"
                    out.append(f"{name}({name}() {operator} 1)")
                    index = target + 1
                    continue
            if token.kind == IDENT and self._rewritable(index):
                text, index = self._identifier(index, stop)
                out.append(text)
                continue
            out.append(token.text)
            index += 1
        return "".join(out)

    def _identifier(self, index: int, stop: int) -> Tuple[str, int]:
        tokens = self._tokens
        name = tokens[index].text
        following = next_significant(tokens, index)
        if following is not None and following < stop:
            token = tokens[following]
            if token.is_punct("++", "--") and not _newline_between(tokens, index, following):
                operator = "+" if token.text == "++" else "-"
                return f"{name}({name}() {operator} 1)", following + 1
            if token.is_punct("=") or token.text in _COMPOUND_ASSIGNMENTS:
                value_start = following + 1
                value_end = min(expression_end(tokens, value_start, self._brackets), stop)
                value = self._emit(value_start, value_end).strip()
                if token.text == "=":
                    return f"{name}({value})", value_end
                operator = _COMPOUND_ASSIGNMENTS[token.text]
                if not _is_simple(value):
                    value = f"({value})"
                return f"{name}({name}() {operator} {value})", value_end
            if token.is_punct("(", "=>"):
                return name, index + 1
        if self._is_shorthand_property(index):
            return f"{name}: {name}()", index + 1
        return f"{name}()", index + 1

    def _template(self, text: str, index: int) -> str:
        names = self._active_names(index)
        pieces: List[str] = []
        for is_expr, part in split_template(text):
            if is_expr:
                pieces.append("${" + rewrite_reactive(part, names) + "}")
            else:
                pieces.append(part)
        closing = "`" if len(text) > 1 and text.endswith("`") else ""
        return "`" + "".join(pieces) + closing

    def _active_names(self, index: int) -> FrozenSet[str]:
        hidden = {name for name, start, end in self._ranges if start <= index < end}
        return self._names - hidden

    def _rewritable(self, index: int) -> bool:
        tokens = self._tokens
        token = tokens[index]
        if token.kind != IDENT or token.text not in self._names or index in self._bindings:
            return False
        for name, start, end in self._ranges:
            if name == token.text and start <= index < end:
                return False
        previous = prev_significant(tokens, index)
        if previous is not None:
            before = tokens[previous]
            if before.is_punct(".", "?."):
                return False
            if before.kind == IDENT and before.text in _DECLARING_KEYWORDS:
                return False
        following = next_significant(tokens, index)
        if (
            following is not None
            and tokens[following].is_punct(":")
            and previous is not None
            and tokens[previous].is_punct("{", ",")
            and self._in_object_literal(index)
        ):
            return False
        return True

    def _is_prefix(self, index: int) -> bool:
        previous = prev_significant(self._tokens, index)
        if previous is None or _newline_between(self._tokens, previous, index):
            return True
        before = self._tokens[previous]
        if before.kind == IDENT:
            return before.text in _PREFIX_KEYWORDS
        if before.kind in (NUMBER, STRING, TEMPLATE):
            return False
        return not before.is_punct(")", "]", "}")

    def _is_shorthand_property(self, index: int) -> bool:
        tokens = self._tokens
        previous = prev_significant(tokens, index)
        following = next_significant(tokens, index)
        if previous is None or following is None:
            return False
        if not tokens[previous].is_punct("{", ",") or not tokens[following].is_punct("}", ","):
            return False
        return self._in_object_literal(index)

    def _in_object_literal(self, index: int) -> bool:
        opener = self._enclosing_opener(index)
        if opener is None or not self._tokens[opener].is_punct("{"):
            return False
        before = prev_significant(self._tokens, opener)
        if before is None:
            return False
        token = self._tokens[before]
        if token.kind == IDENT:
            return token.text in ("return", "yield", "await", "case", "let", "const", "var")
        return token.is_punct("=", "(", ",", ":", "[", "?", "||", "&&", "??", "...")

    def _enclosing_opener(self, index: int) -> Optional[int]:
        depth = 0
        position = index - 1
        tokens = self._tokens
        while position >= 0:
            token = tokens[position]
            if token.kind == PUNCT:
                if token.text in (")", "]", "}"):
                    depth += 1
                elif token.text in ("(", "[", "{"):
                    if depth == 0:
                        return position
                    depth -= 1
            position -= 1
        return None


def _is_simple(value: str) -> bool:
    significant = [token for token in tokenize(value) if token.significant]
    return len(significant) <= 1


def _collect_shadows(
    tokens: Sequence[Token], brackets: Dict[int, int], names: FrozenSet[str]
) -> Tuple[List[ShadowRange], Set[int]]:
    """Find parameter and nested declaration bindings of reactive names."""
    ranges: List[ShadowRange] = []
    bindings: Set[int] = set()
    enclosing = _enclosing_blocks(tokens)
    total = len(tokens)

    def _bind(positions: Iterable[int], start: int, end: int) -> None:
        for position in positions:
            name = tokens[position].text
            if name in names:
                bindings.add(position)
                ranges.append((name, start, end))

    for index, token in enumerate(tokens):
        if token.is_punct("=>"):
            head = prev_significant(tokens, index)
            body = next_significant(tokens, index)
            if head is None or body is None:
                continue
            if tokens[head].kind == IDENT:
                params = [head]
            elif tokens[head].is_punct(")") and head in brackets:
                params = _parameter_positions(tokens, brackets[head], head)
            else:
                continue
            if tokens[body].is_punct("{"):
                end = brackets.get(body, total)
            else:
                end = expression_end(tokens, body, brackets)
            _bind(params, body, end)
        elif token.kind == IDENT and token.text in ("function", "catch"):
            opener = next_significant(tokens, index)
            if opener is not None and tokens[opener].kind == IDENT:
                opener = next_significant(tokens, opener)
            if opener is None or not tokens[opener].is_punct("(") or opener not in brackets:
                continue
            closer = brackets[opener]
            body = next_significant(tokens, closer)
            steps = 0
            while body is not None and not tokens[body].is_punct("{") and steps < 32:
                body = next_significant(tokens, body)
                steps += 1
            if body is None or not tokens[body].is_punct("{"):
                continue
            _bind(_parameter_positions(tokens, opener, closer), opener, brackets.get(body, total))
        elif token.kind == IDENT and token.text in ("let", "const", "var"):
            target = next_significant(tokens, index)
            if target is None:
                continue
            if tokens[target].kind == IDENT:
                positions = [target]
            elif tokens[target].is_punct("{", "[") and target in brackets:
                positions = [
                    position
                    for position in range(target + 1, brackets[target])
                    if tokens[position].kind == IDENT
                    and not _followed_by(tokens, position, ":")
                    and not _preceded_by(tokens, position, "=", ".")
                ]
            else:
                continue

            head = _for_head(tokens, index)
            block = enclosing[index]
            if head is not None:
                _bind(positions, head, _statement_end(tokens, brackets, head))
            elif block is not None:
                _bind(positions, target, brackets.get(block, total))
            elif tokens[target].kind != IDENT:
                # top-level destructuring declares new names but shadows nothing
                bindings.update(position for position in positions if tokens[position].text in names)
    return ranges, bindings


def _for_head(tokens: Sequence[Token], index: int) -> Optional[int]:
    """Opening parenthesis of the ``for`` head declaring at ``index``."""
    opener = prev_significant(tokens, index)
    if opener is None or not tokens[opener].is_punct("("):
        return None
    keyword = prev_significant(tokens, opener)
    if keyword is not None and tokens[keyword].kind == IDENT and tokens[keyword].text == "await":
        keyword = prev_significant(tokens, keyword)
    if keyword is None or tokens[keyword].kind != IDENT or tokens[keyword].text != "for":
        return None
    return opener


def _statement_end(tokens: Sequence[Token], brackets: Dict[int, int], opener: int) -> int:
    total = len(tokens)
    close = brackets.get(opener)
    if close is None:
        return total
    body = next_significant(tokens, close)
    if body is None:
        return total
    if tokens[body].is_punct("{"):
        return brackets.get(body, total)
    return expression_end(tokens, body, brackets, stops=(";",))


def _newline_between(tokens: Sequence[Token], first: int, last: int) -> bool:
    return any("\n" in tokens[position].text for position in range(first + 1, last))


def _parameter_positions(tokens: Sequence[Token], opener: int, closer: int) -> List[int]:
    positions = []
    for position in range(opener + 1, closer):
        token = tokens[position]
        if token.kind != IDENT:
            continue
        previous = prev_significant(tokens, position)
        if previous is not None and tokens[previous].is_punct("(", ",", "...", "{", "["):
            positions.append(position)
    return positions


def _followed_by(tokens: Sequence[Token], index: int, *texts: str) -> bool:
    following = next_significant(tokens, index)
    return following is not None and tokens[following].is_punct(*texts)


def _preceded_by(tokens: Sequence[Token], index: int, *texts: str) -> bool:
    previous = prev_significant(tokens, index)
    return previous is not None and tokens[previous].is_punct(*texts)


def _enclosing_blocks(tokens: Sequence[Token]) -> List[Optional[int]]:
    result: List[Optional[int]] = []
    stack: List[int] = []
    for index, token in enumerate(tokens):
        result.append(stack[-1] if stack else None)
        if token.is_punct("{"):
            stack.append(index)
        elif token.is_punct("}") and stack:
            stack.pop()
    return result


__all__ = ["rewrite_reactive"]
