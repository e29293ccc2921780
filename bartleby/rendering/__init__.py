"""Jinja2-backed rendering of pages and layouts."""

from .pipeline import DEFAULT_LAYOUT, RenderPipeline
from .tags import TagHandler, TagRegistry, page_class

__all__ = ["DEFAULT_LAYOUT", "RenderPipeline", "TagHandler", "TagRegistry", "page_class"]
