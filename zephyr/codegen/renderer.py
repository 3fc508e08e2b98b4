"""Renders generated JavaScript from the bundled Jinja2 templates."""

from __future__ import annotations

from functools import lru_cache
import json
from pathlib import Path
from typing import Any, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..naming import capitalize

_DEFAULT_DIR = Path(__file__).with_name("templates")


class CodeRenderer:
    """Thin wrapper around a Jinja2 environment for JS snippets."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = self._create_env(templates_dir)

    def render(self, template_name: str, **context: Any) -> str:
        template = self._env.get_template(template_name)
        return template.render(**context).strip("\n")

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(_DEFAULT_DIR))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        env.filters["capfirst"] = capitalize
        env.filters["js"] = _js_string
        return env


def _js_string(value: Any) -> str:
    return json.dumps(str(value), ensure_ascii=False)


@lru_cache(maxsize=None)
def default_renderer() -> CodeRenderer:
    """Return the shared renderer for the bundled templates."""
    return CodeRenderer()


__all__ = ["CodeRenderer", "default_renderer"]
