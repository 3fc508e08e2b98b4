"""Structural CSS parser used by the scoper and the leakage checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

SELECTOR = "selector"
PROPERTY = "property"
VALUE = "value"
COMMENT = "comment"
AT_RULE = "at-rule"
STRING = "string"
BETWEEN = "between"

DECLARATION_AT_RULES = frozenset({"@font-face", "@page", "@property", "@counter-style", "@viewport"})
KEYFRAMES_AT_RULES = frozenset({"@keyframes", "@-webkit-keyframes", "@-moz-keyframes", "@-o-keyframes"})


@dataclass
class CssDeclaration:
    name: str
    value: str


@dataclass
class CssRule:
    """One rule, an ``@font-face``-style block, or an ``@import``-style statement.

    ``at_rules`` holds the preludes of the enclosing ``@``-blocks from the
    outside in. Declaration blocks and statements keep their prelude as the
    single selector.
    """

    selectors: List[str]
    declarations: List[CssDeclaration] = field(default_factory=list)
    at_rules: Tuple[str, ...] = ()
    statement: bool = False

    @property
    def is_at_rule(self) -> bool:
        return bool(self.selectors) and self.selectors[0].startswith("@")

    @property
    def in_keyframes(self) -> bool:
        return any(at_rule_name(prelude) in KEYFRAMES_AT_RULES for prelude in self.at_rules)


def at_rule_name(prelude: str) -> str:
    """``"@media (max-width: 1px)"`` -> ``"@media"``."""
    name = prelude.split(None, 1)[0] if prelude.strip() else prelude
    return name.split("(", 1)[0].lower()


def split_selectors(text: str) -> List[str]:
    """Split a selector list on commas outside ``()``, ``[]`` and quotes."""
    selectors: List[str] = []
    depth = 0
    quote: Optional[str] = None
    start = 0
    for index, char in enumerate(text):
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char in "([":
            depth += 1
        elif char in ")]":
            depth = max(0, depth - 1)
        elif char == "," and depth == 0:
            selectors.append(text[start:index])
            start = index + 1
    selectors.append(text[start:])
    return [" ".join(item.split()) for item in selectors if item.strip()]


class CssParser:
    """Character state machine over a stylesheet.

    Never raises: an unterminated rule at the end of the input is dropped and
    stray closing braces are ignored.
    """

    def parse(self, text: str) -> List[CssRule]:
        self._rules: List[CssRule] = []
        self._at_stack: List[str] = []
        self._selectors: List[str] = []
        self._declarations: List[CssDeclaration] = []
        self._property = ""
        self._buffer: List[str] = []
        state = BETWEEN
        resume = BETWEEN
        quote = ""
        paren_depth = 0
        length = len(text)
        index = 0

        while index < length:
            char = text[index]

            if state == COMMENT:
                if text.startswith("*/", index):
                    state = resume
                    index += 2
                else:
                    index += 1
                continue

            if state == STRING:
                self._buffer.append(char)
                if char == "\\" and index + 1 < length:
                    self._buffer.append(text[index + 1])
                    index += 2
                    continue
                if char == quote:
                    state = resume
                index += 1
                continue

            if char == "/" and text.startswith("/*", index):
                resume = state
                state = COMMENT
                index += 2
                continue

            if char in "\"'" and state != BETWEEN:
                resume = state
                quote = char
                state = STRING
                self._buffer.append(char)
                index += 1
                continue

            if state == BETWEEN:
                if char.isspace() or char == ";":
                    pass
                elif char == "}":
                    if self._at_stack:
                        self._at_stack.pop()
                elif char == "@":
                    state = AT_RULE
                    self._buffer = [char]
                elif char in "\"'":
                    state = SELECTOR
                    self._buffer = []
                    continue
                else:
                    state = SELECTOR
                    self._buffer = [char]
                index += 1
                continue

            if state == AT_RULE:
                if char == ";":
                    prelude = self._take()
                    self._rules.append(
                        CssRule(selectors=[prelude], at_rules=tuple(self._at_stack), statement=True)
                    )
                    state = BETWEEN
                elif char == "{":
                    prelude = self._take()
                    if at_rule_name(prelude) in DECLARATION_AT_RULES:
                        self._open_rule([prelude])
                        state = PROPERTY
                    else:
                        self._at_stack.append(prelude)
                        state = BETWEEN
                elif char == "}":
                    self._buffer = []
                    state = BETWEEN
                    continue
                else:
                    self._buffer.append(char)
                index += 1
                continue

            if state == SELECTOR:
                if char == "{":
                    self._open_rule(split_selectors(self._take()))
                    state = PROPERTY
                elif char == "}":
                    self._buffer = []
                    state = BETWEEN
                    continue
                elif char == ";":
                    self._buffer = []
                    state = BETWEEN
                else:
                    self._buffer.append(char)
                index += 1
                continue

            if state == PROPERTY:
                if char == ":":
                    self._property = self._take()
                    paren_depth = 0
                    state = VALUE
                elif char == ";":
                    self._buffer = []
                elif char == "}":
                    self._close_rule()
                    state = BETWEEN
                elif char == "{":
                    index = _skip_block(text, index)
                    self._buffer = []
                    continue
                else:
                    self._buffer.append(char)
                index += 1
                continue

            if state == VALUE:
                if char == "(":
                    paren_depth += 1
                elif char == ")":
                    paren_depth = max(0, paren_depth - 1)
                if char == ";" and paren_depth == 0:
                    self._add_declaration()
                    state = PROPERTY
                elif char == "}":
                    self._add_declaration()
                    self._close_rule()
                    state = BETWEEN
                else:
                    self._buffer.append(char)
                index += 1
                continue

        return self._rules

    def _take(self) -> str:
        text = "".join(self._buffer).strip()
        self._buffer = []
        return text

    def _open_rule(self, selectors: List[str]) -> None:
        self._selectors = selectors
        self._declarations = []
        self._buffer = []

    def _add_declaration(self) -> None:
        value = self._take()
        name = self._property
        self._property = ""
        if name and value:
            self._declarations.append(CssDeclaration(name=name, value=value))

    def _close_rule(self) -> None:
        self._buffer = []
        if self._selectors:
            self._rules.append(
                CssRule(
                    selectors=self._selectors,
                    declarations=self._declarations,
                    at_rules=tuple(self._at_stack),
                )
            )
        self._selectors = []
        self._declarations = []


def _skip_block(text: str, opener: int) -> int:
    depth = 0
    for index in range(opener, len(text)):
        if text[index] == "{":
            depth += 1
        elif text[index] == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return len(text)


def parse_css(text: str) -> List[CssRule]:
    """Parse ``text`` into rules in source order."""
    return CssParser().parse(text)


__all__ = [
    "CssDeclaration",
    "CssParser",
    "CssRule",
    "at_rule_name",
    "parse_css",
    "split_selectors",
]
