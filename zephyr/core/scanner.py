"""Tokenizer for the script subset the compiler recognises and rewrites.

The scanner never builds a syntax tree. It splits source text into tokens
that keep their exact text and offsets, so callers can rewrite selected
tokens and join everything back without disturbing strings, comments or
formatting.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

IDENT = "ident"
NUMBER = "number"
STRING = "string"
TEMPLATE = "template"
REGEX = "regex"
COMMENT = "comment"
SPACE = "space"
PUNCT = "punct"

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}

_IDENT_PATTERN = re.compile(r"[A-Za-z_$\u0080-\uffff][\w$\u0080-\uffff]*")
_NUMBER_PATTERN = re.compile(
    r"0[xXbBoO][0-9a-fA-F_]+n?|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?n?"
)
_PUNCTUATORS = sorted(
    [
        ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
        "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--", "+=", "-=",
        "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
    ],
    key=len,
    reverse=True,
)
_REGEX_KEYWORDS = {
    "return", "typeof", "case", "do", "else", "in", "of", "new", "delete", "void",
    "throw", "instanceof", "yield", "await",
}
_CONTINUATION_OPERATORS = {
    ".", "?.", "+", "-", "*", "/", "%", "**", "&&", "||", "??", "?", ":", "==", "===",
    "!=", "!==", "<", ">", "<=", ">=", "&", "|", "^", "<<", ">>", ">>>", "=>", "=",
}
_OPERAND_KINDS = {IDENT, NUMBER, STRING, TEMPLATE, REGEX}


@dataclass(frozen=True)
class Token:
    """A slice of script source with its classification."""

    kind: str
    text: str
    start: int
    end: int

    @property
    def significant(self) -> bool:
        return self.kind not in (SPACE, COMMENT)

    def is_punct(self, *texts: str) -> bool:
        return self.kind == PUNCT and (not texts or self.text in texts)


def tokenize(source: str) -> List[Token]:
    """Split ``source`` into tokens; unterminated constructs run to the end."""
    tokens: List[Token] = []
    index = 0
    length = len(source)
    previous: Optional[Token] = None

    while index < length:
        char = source[index]
        kind = PUNCT
        if char.isspace():
            end = index + 1
            while end < length and source[end].isspace():
                end += 1
            kind = SPACE
        elif source.startswith("//", index):
            end = source.find("\n", index)
            end = length if end < 0 else end
            kind = COMMENT
        elif source.startswith("/*", index):
            end = source.find("*/", index + 2)
            end = length if end < 0 else end + 2
            kind = COMMENT
        elif char in "'\"":
            end = _scan_string(source, index)
            kind = STRING
        elif char == "`":
            end = _scan_template(source, index)
            kind = TEMPLATE
        elif char.isdigit() or (char == "." and source[index + 1 : index + 2].isdigit()):
            match = _NUMBER_PATTERN.match(source, index)
            end = match.end() if match else index + 1
            kind = NUMBER
        elif _IDENT_PATTERN.match(source, index):
            end = _IDENT_PATTERN.match(source, index).end()  # type: ignore[union-attr]
            kind = IDENT
        else:
            end = 0
            if char == "/" and _regex_allowed(previous):
                end = _scan_regex(source, index)
                kind = REGEX
            if not end:
                kind = PUNCT
                end = index + 1
                for punctuator in _PUNCTUATORS:
                    if source.startswith(punctuator, index):
                        end = index + len(punctuator)
                        break

        token = Token(kind=kind, text=source[index:end], start=index, end=end)
        tokens.append(token)
        if token.significant:
            previous = token
        index = end

    return tokens


def _scan_string(source: str, start: int) -> int:
    quote = source[start]
    index = start + 1
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        if char == "\n":
            return index
        index += 1
    return len(source)


def _scan_template(source: str, start: int) -> int:
    index = start + 1
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == "`":
            return index + 1
        if source.startswith("${", index):
            index = _skip_substitution(source, index + 2)
            continue
        index += 1
    return len(source)


def _skip_substitution(source: str, start: int) -> int:
    depth = 1
    index = start
    while index < len(source):
        char = source[index]
        if char in "'\"":
            index = _scan_string(source, index)
            continue
        if char == "`":
            index = _scan_template(source, index)
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1
    return len(source)


def _scan_regex(source: str, start: int) -> int:
    index = start + 1
    in_class = False
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == "\n":
            return 0
        if char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        elif char == "/" and not in_class:
            index += 1
            while index < len(source) and source[index].isalpha():
                index += 1
            return index
        index += 1
    return 0


def _regex_allowed(previous: Optional[Token]) -> bool:
    if previous is None:
        return True
    if previous.kind == PUNCT:
        return previous.text not in (")", "]", "}", "++", "--")
    if previous.kind == IDENT:
        return previous.text in _REGEX_KEYWORDS
    return False


def prev_significant(tokens: Sequence[Token], index: int) -> Optional[int]:
    position = index - 1
    while position >= 0:
        if tokens[position].significant:
            return position
        position -= 1
    return None


def next_significant(tokens: Sequence[Token], index: int) -> Optional[int]:
    position = index + 1
    while position < len(tokens):
        if tokens[position].significant:
            return position
        position += 1
    return None


def match_brackets(tokens: Sequence[Token]) -> Dict[int, int]:
    """Map every matched bracket token index to its partner index."""
    pairs: Dict[int, int] = {}
    stack: List[int] = []
    for index, token in enumerate(tokens):
        if token.kind != PUNCT:
            continue
        if token.text in OPENERS:
            stack.append(index)
        elif token.text in CLOSERS:
            if stack and tokens[stack[-1]].text == CLOSERS[token.text]:
                opener = stack.pop()
                pairs[opener] = index
                pairs[index] = opener
    return pairs


def find_unbalanced(tokens: Sequence[Token]) -> Optional[Token]:
    """Return the first bracket token without a partner, if any."""
    stack: List[Token] = []
    for token in tokens:
        if token.kind != PUNCT:
            continue
        if token.text in OPENERS:
            stack.append(token)
        elif token.text in CLOSERS:
            if not stack or stack[-1].text != CLOSERS[token.text]:
                return token
            stack.pop()
    return stack[0] if stack else None


def _ends_operand(token: Token) -> bool:
    if token.kind in _OPERAND_KINDS:
        return True
    return token.kind == PUNCT and token.text in (")", "]", "}", "++", "--")


def expression_end(
    tokens: Sequence[Token],
    start: int,
    brackets: Dict[int, int],
    stops: Iterable[str] = (";", ","),
) -> int:
    """Return the index of the token that terminates the expression at ``start``.

    An expression stops at a top-level stop punctuator, at a closing bracket
    it did not open, or at a line break once a complete operand has been read
    and the next line does not continue with an operator.
    """
    stop_set = set(stops)
    index = start
    last: Optional[Token] = None
    while index < len(tokens):
        token = tokens[index]
        if token.kind == PUNCT:
            if token.text in stop_set or token.text in CLOSERS:
                return index
            if token.text in OPENERS:
                close = brackets.get(index)
                if close is None:
                    return len(tokens)
                last = tokens[close]
                index = close + 1
                continue
        if token.kind == SPACE and "\n" in token.text and last is not None and _ends_operand(last):
            following = next_significant(tokens, index)
            if following is None or not tokens[following].is_punct(*_CONTINUATION_OPERATORS):
                return index
        if token.significant:
            last = token
        index += 1
    return len(tokens)


def split_template(text: str) -> List[Tuple[bool, str]]:
    """Split a template literal token into literal and ``${}`` expression parts.

    The surrounding backticks are not part of the returned pieces.
    """
    body = text[1:-1] if text.endswith("`") and len(text) > 1 else text[1:]
    parts: List[Tuple[bool, str]] = []
    literal_start = 0
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\":
            index += 2
            continue
        if body.startswith("${", index):
            parts.append((False, body[literal_start:index]))
            end = _skip_substitution(body, index + 2)
            parts.append((True, body[index + 2 : max(index + 2, end - 1)]))
            index = end
            literal_start = index
            continue
        index += 1
    parts.append((False, body[literal_start:]))
    return parts


def referenced_identifiers(code: str) -> List[str]:
    """Identifiers in ``code`` that are not property names after a dot."""
    tokens = tokenize(code)
    names: List[str] = []
    seen: Set[str] = set()
    for index, token in enumerate(tokens):
        if token.kind == TEMPLATE:
            for is_expr, piece in split_template(token.text):
                if is_expr:
                    for name in referenced_identifiers(piece):
                        if name not in seen:
                            seen.add(name)
                            names.append(name)
            continue
        if token.kind != IDENT:
            continue
        previous = prev_significant(tokens, index)
        if previous is not None and tokens[previous].is_punct(".", "?."):
            continue
        if token.text not in seen:
            seen.add(token.text)
            names.append(token.text)
    return names


__all__ = [
    "CLOSERS",
    "COMMENT",
    "IDENT",
    "NUMBER",
    "OPENERS",
    "PUNCT",
    "REGEX",
    "SPACE",
    "STRING",
    "TEMPLATE",
    "Token",
    "expression_end",
    "find_unbalanced",
    "match_brackets",
    "next_significant",
    "prev_significant",
    "referenced_identifiers",
    "split_template",
    "tokenize",
]
