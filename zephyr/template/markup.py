"""Minimal HTML tag scanning and opening-tag editing helpers."""

from __future__ import annotations

from dataclasses import dataclass
import html
import re
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta",
        "param", "source", "track", "wbr",
    }
)

_TAG_PATTERN = re.compile(
    r"<(/?)([A-Za-z][\w:.-]*)"
    r"((?:\s+[^\s=>/\"']+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>\"']+))?)*)"
    r"\s*(/?)>",
    re.S,
)
_ATTRIBUTE_PATTERN = re.compile(
    r"([^\s=>/\"']+)(?:\s*=\s*(\"[^\"]*\"|'[^']*'|[^\s>\"']+))?", re.S
)
_COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.S)


@dataclass(frozen=True)
class Attribute:
    """Attribute inside an opening tag; offsets are relative to the tag text."""

    name: str
    value: Optional[str]
    start: int
    end: int
    quote: str = '"'


@dataclass(frozen=True)
class Tag:
    """An opening or closing tag located in a markup string."""

    name: str
    start: int
    end: int
    text: str
    closing: bool = False
    self_closing: bool = False

    @property
    def attributes(self) -> List[Attribute]:
        return parse_attributes(self.text)

    def get(self, name: str) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    @property
    def is_component(self) -> bool:
        return self.name[:1].isupper()

    @property
    def is_void(self) -> bool:
        return self.self_closing or self.name.lower() in VOID_ELEMENTS


def comment_spans(markup: str) -> List[Tuple[int, int]]:
    return [(match.start(), match.end()) for match in _COMMENT_PATTERN.finditer(markup)]


def iter_tags(markup: str, start: int = 0) -> Iterator[Tag]:
    """Yield opening and closing tags outside HTML comments."""
    comments = comment_spans(markup)
    position = start
    while True:
        match = _TAG_PATTERN.search(markup, position)
        if match is None:
            return
        inside = next((span for span in comments if span[0] <= match.start() < span[1]), None)
        if inside is not None:
            position = inside[1]
            continue
        yield Tag(
            name=match.group(2),
            start=match.start(),
            end=match.end(),
            text=match.group(0),
            closing=bool(match.group(1)),
            self_closing=bool(match.group(4)),
        )
        position = match.end()


def parse_attributes(tag_text: str) -> List[Attribute]:
    """Parse the attributes of an opening tag's source text."""
    head = re.match(r"</?[A-Za-z][\w:.-]*", tag_text)
    if head is None:
        return []
    body_end = len(tag_text) - 1
    if tag_text.endswith("/>"):
        body_end -= 1
    attributes: List[Attribute] = []
    for match in _ATTRIBUTE_PATTERN.finditer(tag_text, head.end(), body_end):
        raw_value = match.group(2)
        value: Optional[str] = None
        quote = '"'
        if raw_value is not None:
            if raw_value[:1] in ("'", '"'):
                quote = raw_value[0]
                value = raw_value[1:-1]
            else:
                value = raw_value
        attributes.append(
            Attribute(name=match.group(1), value=value, start=match.start(), end=match.end(), quote=quote)
        )
    return attributes


def find_element_end(markup: str, tag: Tag) -> int:
    """Return the offset just past the element opened by ``tag``.

    Void and self-closing tags end at the tag itself; an element without a
    matching close tag also ends at its opening tag.
    """
    if tag.is_void:
        return tag.end
    return _find_close(markup, tag)[1]


def element_content(markup: str, tag: Tag) -> Tuple[int, int]:
    """Return the (start, end) offsets of the element's inner content."""
    if tag.is_void:
        return tag.end, tag.end
    close_start, close_end = _find_close(markup, tag)
    if close_end == tag.end:
        return tag.end, tag.end
    return tag.end, close_start


def _find_close(markup: str, tag: Tag) -> Tuple[int, int]:
    depth = 0
    wanted = tag.name if tag.is_component else tag.name.lower()
    for other in iter_tags(markup, tag.end):
        name = other.name if tag.is_component else other.name.lower()
        if name != wanted:
            continue
        if other.closing:
            if depth == 0:
                return other.start, other.end
            depth -= 1
        elif not other.self_closing:
            depth += 1
    return tag.end, tag.end


def rewrite_tag(
    tag_text: str,
    *,
    remove: Sequence[str] = (),
    add: Mapping[str, Optional[str]] | None = None,
    replace: Mapping[str, str] | None = None,
) -> str:
    """Return ``tag_text`` with attributes removed, replaced or appended.

    ``add`` values of ``None`` produce bare attributes. Existing attribute
    text is otherwise preserved byte for byte.
    """
    removals = set(remove)
    replacements: Dict[str, str] = dict(replace or {})
    pieces: List[str] = []
    cursor = 0
    for attribute in parse_attributes(tag_text):
        if attribute.name in removals:
            start = attribute.start
            while start > cursor and tag_text[start - 1].isspace():
                start -= 1
            pieces.append(tag_text[cursor:start])
            cursor = attribute.end
        elif attribute.name in replacements:
            pieces.append(tag_text[cursor : attribute.start])
            pieces.append(format_attribute(attribute.name, replacements.pop(attribute.name)))
            cursor = attribute.end
    pieces.append(tag_text[cursor:])
    rebuilt = "".join(pieces)

    extra = dict(add or {})
    extra.update(replacements)
    if not extra:
        return rebuilt
    suffix = "/>" if rebuilt.endswith("/>") else ">"
    head = rebuilt[: -len(suffix)].rstrip()
    additions = "".join(" " + format_attribute(name, value) for name, value in extra.items())
    trailing = " " if suffix == "/>" else ""
    return f"{head}{additions}{trailing}{suffix}"


def format_attribute(name: str, value: Optional[str]) -> str:
    if value is None:
        return name
    return f'{name}="{html.escape(value, quote=True)}"'


def is_component_name(name: str) -> bool:
    return name[:1].isupper()


__all__ = [
    "Attribute",
    "Tag",
    "VOID_ELEMENTS",
    "comment_spans",
    "element_content",
    "find_element_end",
    "format_attribute",
    "is_component_name",
    "iter_tags",
    "parse_attributes",
    "rewrite_tag",
]
