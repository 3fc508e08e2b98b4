"""JavaScript code generation backed by Jinja2 templates."""

from .renderer import CodeRenderer, default_renderer

__all__ = ["CodeRenderer", "default_renderer"]
