"""Splits a ``.zph`` source into its script, template, style and store sections."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import List, Optional, Tuple

from .errors import StructuralParseError, WarningCollector, line_and_column
from .logging import get_logger
from .models import ImportDeclaration, ParsedComponent
from .naming import component_name_from_path, generate_scope_id

logger = get_logger("parser")

_IMPORT = re.compile(
    r"<import\s+([A-Za-z_$][\w$]*)\s+from\s+[\"']([^\"']+)[\"']\s*/?>",
    re.I,
)
_ISOLATED = re.compile(r"\b(?:isolated|scoped)\b", re.I)


@dataclass(frozen=True)
class Section:
    """Located section: trimmed content plus the opening tag's attribute text."""

    content: str
    attributes: str
    start: int


def _open_pattern(tag: str) -> re.Pattern:
    return re.compile(rf"<{tag}(?=[\s/>])([^>]*)>", re.I)


def _close_pattern(tag: str) -> re.Pattern:
    return re.compile(rf"</{tag}\s*>", re.I)


def extract_section(content: str, tag: str, filename: str = "") -> Optional[Section]:
    """Return the first ``<tag>`` section, matching nested same-named tags.

    Raises StructuralParseError when the section is opened but never closed.
    """
    opener = _open_pattern(tag)
    closer = _close_pattern(tag)
    match = opener.search(content)
    while match is not None and match.group(0).endswith("/>"):
        match = opener.search(content, match.end())
    if match is None:
        return None

    depth = 1
    position = match.end()
    while depth:
        next_open = opener.search(content, position)
        next_close = closer.search(content, position)
        if next_close is None:
            line, column = line_and_column(content, match.start())
            raise StructuralParseError(
                f"Unclosed <{tag}> section",
                file=filename or None,
                line=line,
                column=column,
                suggestion=f"Add a closing </{tag}> tag",
            )
        if next_open is not None and next_open.start() < next_close.start():
            if not next_open.group(0).endswith("/>"):
                depth += 1
            position = next_open.end()
            continue
        depth -= 1
        if depth == 0:
            body = content[match.end() : next_close.start()]
            return Section(content=body.strip(), attributes=match.group(1), start=match.start())
        position = next_close.end()
    return None


def extract_imports(content: str) -> List[ImportDeclaration]:
    return [ImportDeclaration(name=name, path=path) for name, path in _IMPORT.findall(content)]


def parse_component(
    content: str,
    filename: str,
    warnings: Optional[WarningCollector] = None,
) -> ParsedComponent:
    """Parse ``content`` of the component file ``filename``."""
    if not isinstance(content, str):
        raise StructuralParseError(f"Invalid content for file: {filename}", file=filename or None)
    if not filename or not isinstance(filename, str):
        raise StructuralParseError("Filename is required")

    name = component_name_from_path(filename)
    scope_id = generate_scope_id(name)

    script = extract_section(content, "script", filename)
    template = extract_section(content, "template", filename)
    style = extract_section(content, "style", filename)
    store = extract_section(content, "store", filename)

    template_text = template.content if template else ""
    store_text = store.content if store else ""
    is_store = bool(store_text) and not template_text
    style_isolated = True if style is None else bool(_ISOLATED.search(style.attributes))

    if not template_text and not is_store:
        message = f"No <template> section found in {filename}"
        logger.debug(message)
        if warnings is not None:
            warnings.warn(message, file=filename, suggestion="Add a <template> section")

    imports: Tuple[ImportDeclaration, ...] = tuple(extract_imports(content))
    logger.debug("Parsed %s (%s) with %d import(s)", name, scope_id, len(imports))
    return ParsedComponent(
        name=name,
        scope_id=scope_id,
        script=script.content if script else "",
        template=template_text,
        style=style.content if style else "",
        style_isolated=style_isolated,
        imports=imports,
        store=store_text,
        is_store=is_store,
        path=filename,
    )


__all__ = ["Section", "extract_imports", "extract_section", "parse_component"]
