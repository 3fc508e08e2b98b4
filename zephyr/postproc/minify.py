"""Whitespace minifiers for compiled HTML, CSS and JS."""

from __future__ import annotations

import re
from typing import List, Optional

from ..core.scanner import COMMENT, SPACE, tokenize

_HTML_COMMENT = re.compile(r"<!--(?!\[if).*?-->", re.S)
_HTML_PRESERVE = re.compile(r"(<(pre|textarea|script|style)\b.*?</\2\s*>)", re.S | re.I)
_CSS_STRING = re.compile(r"(\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*')", re.S)
_CSS_COMMENT = re.compile(r"/\*.*?\*/", re.S)
_CSS_TIGHT = re.compile(r"\s*([{};,>])\s*")
_WORD = re.compile(r"[\w$\\]")
_NO_NEWLINE_AFTER = ("{", ";", ",", "(", "[")


class Minifier:
    """Collapses whitespace and drops comments without changing meaning."""

    def minify_html(self, markup: str) -> str:
        pieces: List[str] = []
        for index, part in enumerate(_HTML_PRESERVE.split(markup)):
            if index % 3 == 2:
                continue
            if index % 3 == 1:
                pieces.append(part)
                continue
            part = _HTML_COMMENT.sub("", part)
            part = re.sub(r">\s*\n\s*<", "><", part)
            part = re.sub(r"\s+", " ", part)
            pieces.append(part)
        return "".join(pieces).strip()

    def minify_css(self, css: str) -> str:
        pieces: List[str] = []
        for index, part in enumerate(_CSS_STRING.split(css)):
            if index % 2 == 1:
                pieces.append(part)
                continue
            part = _CSS_COMMENT.sub("", part)
            part = re.sub(r"\s+", " ", part)
            part = _CSS_TIGHT.sub(r"\1", part)
            part = _tighten_values(part)
            part = part.replace(";}", "}")
            pieces.append(part)
        return "".join(pieces).strip()

    def minify_js(self, code: str) -> str:
        """Drop comments and redundant whitespace token by token.

        Line breaks survive wherever the previous token could end a
        statement, so automatic semicolon insertion behaves the same.
        """
        output: List[str] = []
        pending: Optional[str] = None
        for token in tokenize(code):
            if token.kind in (SPACE, COMMENT):
                if "\n" in token.text:
                    pending = "\n"
                elif pending is None:
                    pending = " "
                continue
            if output and pending is not None:
                previous = output[-1]
                if pending == "\n" and not previous.endswith(_NO_NEWLINE_AFTER):
                    output.append("\n")
                elif _needs_space(previous, token.text):
                    output.append(" ")
            output.append(token.text)
            pending = None
        return "".join(output).strip()


def _needs_space(previous: str, following: str) -> bool:
    last = previous[-1]
    first = following[0]
    if _WORD.match(last) and _WORD.match(first):
        return True
    if last in "+-" and first == last:
        return True
    return last == "/" and first == "/"


def _tighten_values(css: str) -> str:
    # only declaration colons, i.e. those following "{" or ";"
    return re.sub(r"([{;])([^{};:]+):\s+", r"\1\2:", css)


__all__ = ["Minifier"]
