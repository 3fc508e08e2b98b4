"""Recursive-descent parser for literal initializer values."""

from __future__ import annotations

from dataclasses import dataclass
import json
import re
from typing import Any, Dict, List

_NUMBER = re.compile(r"-?(?:0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


class LiteralError(ValueError):
    """Raised when text is not a plain literal value."""


@dataclass(frozen=True)
class RawExpression:
    """Initializer text that could not be resolved at compile time."""

    text: str

    def __str__(self) -> str:
        return self.text


class _Undefined:
    def __repr__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


class LiteralParser:
    """Parses numbers, strings, booleans, null, arrays and objects."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def parse(self) -> Any:
        self._skip_space()
        value = self._value()
        self._skip_space()
        if self._pos != len(self._text):
            raise LiteralError(f"Unexpected trailing text at offset {self._pos}")
        return value

    def _value(self) -> Any:
        self._skip_space()
        if self._pos >= len(self._text):
            raise LiteralError("Unexpected end of literal")
        char = self._text[self._pos]
        if char == "[":
            return self._array()
        if char == "{":
            return self._object()
        if char in "'\"":
            return self._string(char)
        if char == "`":
            return self._template()
        number = _NUMBER.match(self._text, self._pos)
        if number and number.end() > self._pos and (char.isdigit() or char in "-."):
            self._pos = number.end()
            return _to_number(number.group(0))
        word = _IDENTIFIER.match(self._text, self._pos)
        if word:
            keyword = word.group(0)
            constants = {"true": True, "false": False, "null": None, "undefined": UNDEFINED}
            if keyword in constants:
                self._pos = word.end()
                return constants[keyword]
        raise LiteralError(f"Unsupported value at offset {self._pos}")

    def _array(self) -> List[Any]:
        self._pos += 1
        items: List[Any] = []
        while True:
            self._skip_space()
            if self._peek() == "]":
                self._pos += 1
                return items
            items.append(self._value())
            self._skip_space()
            separator = self._peek()
            if separator == ",":
                self._pos += 1
            elif separator != "]":
                raise LiteralError(f"Expected ',' or ']' at offset {self._pos}")

    def _object(self) -> Dict[str, Any]:
        self._pos += 1
        result: Dict[str, Any] = {}
        while True:
            self._skip_space()
            if self._peek() == "}":
                self._pos += 1
                return result
            key = self._key()
            self._skip_space()
            if self._peek() != ":":
                raise LiteralError(f"Expected ':' at offset {self._pos}")
            self._pos += 1
            result[key] = self._value()
            self._skip_space()
            separator = self._peek()
            if separator == ",":
                self._pos += 1
            elif separator != "}":
                raise LiteralError(f"Expected ',' or '}}' at offset {self._pos}")

    def _key(self) -> str:
        char = self._peek()
        if char in ("'", '"'):
            return self._string(char)
        word = _IDENTIFIER.match(self._text, self._pos)
        if word:
            self._pos = word.end()
            return word.group(0)
        number = _NUMBER.match(self._text, self._pos)
        if number and number.end() > self._pos:
            self._pos = number.end()
            return number.group(0)
        raise LiteralError(f"Invalid object key at offset {self._pos}")

    def _string(self, quote: str) -> str:
        self._pos += 1
        chars: List[str] = []
        while self._pos < len(self._text):
            char = self._text[self._pos]
            if char == "\\":
                chars.append(self._escape())
                continue
            if char == quote:
                self._pos += 1
                return "".join(chars)
            if char == "\n" and quote != "`":
                break
            chars.append(char)
            self._pos += 1
        raise LiteralError("Unterminated string literal")

    def _template(self) -> str:
        end = self._text.find("`", self._pos + 1)
        if end >= 0 and "${" in self._text[self._pos : end]:
            raise LiteralError("Template literal with substitutions is not constant")
        return self._string("`")

    def _escape(self) -> str:
        self._pos += 1
        if self._pos >= len(self._text):
            raise LiteralError("Dangling escape")
        char = self._text[self._pos]
        self._pos += 1
        if char == "u":
            digits = self._text[self._pos : self._pos + 4]
            try:
                code = int(digits, 16)
            except ValueError as exc:
                raise LiteralError("Invalid unicode escape") from exc
            self._pos += 4
            return chr(code)
        if char == "\n":
            return ""
        return _ESCAPES.get(char, char)

    def _peek(self) -> str:
        return self._text[self._pos] if self._pos < len(self._text) else ""

    def _skip_space(self) -> None:
        while self._pos < len(self._text):
            if self._text[self._pos].isspace():
                self._pos += 1
            elif self._text.startswith("//", self._pos):
                newline = self._text.find("\n", self._pos)
                self._pos = len(self._text) if newline < 0 else newline
            elif self._text.startswith("/*", self._pos):
                close = self._text.find("*/", self._pos + 2)
                self._pos = len(self._text) if close < 0 else close + 2
            else:
                break


def _to_number(text: str) -> int | float:
    if text.lstrip("-").lower().startswith("0x"):
        return int(text, 16)
    if re.fullmatch(r"-?\d+", text):
        return int(text)
    return float(text)


def parse_literal(text: str) -> Any:
    """Parse ``text`` as a literal, raising :class:`LiteralError` otherwise."""
    return LiteralParser(text.strip()).parse()


def parse_value(text: str) -> Any:
    """Parse ``text`` as a literal, falling back to :class:`RawExpression`."""
    stripped = text.strip()
    try:
        return parse_literal(stripped)
    except LiteralError:
        return RawExpression(stripped)


def is_static(value: Any) -> bool:
    """Return True when ``value`` is a fully resolved literal."""
    if isinstance(value, RawExpression) or value is UNDEFINED:
        return False
    if isinstance(value, list):
        return all(is_static(item) for item in value)
    if isinstance(value, dict):
        return all(is_static(item) for item in value.values())
    return True


def to_js(value: Any) -> str:
    """Serialize a parsed literal back to JavaScript source."""
    if isinstance(value, RawExpression):
        return value.text
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, list):
        return "[" + ", ".join(to_js(item) for item in value) + "]"
    if isinstance(value, dict):
        members = ", ".join(f"{json.dumps(str(key))}: {to_js(item)}" for key, item in value.items())
        return "{" + members + "}"
    return json.dumps(value, ensure_ascii=False)


__all__ = [
    "LiteralError",
    "LiteralParser",
    "RawExpression",
    "UNDEFINED",
    "is_static",
    "parse_literal",
    "parse_value",
    "to_js",
]
