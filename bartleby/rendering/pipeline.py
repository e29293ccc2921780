"""Two-phase page rendering: body compile, then layout render."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound

from ..errors import LayoutNotFoundError, TemplateRenderError
from ..logging import get_logger
from ..models import Page
from .tags import TagRegistry

DEFAULT_LAYOUT = "layout"
LAYOUT_SUFFIX = ".html"


class RenderPipeline:
    """Renders pages against shared data, front matter and route metadata.

    Every page body is compiled before any layout is rendered so cross-page
    data seen by layouts is consistent. Any template failure aborts the pass.
    """

    def __init__(
        self,
        search_paths: Sequence[Path],
        *,
        tags: TagRegistry,
        shared_data: Mapping[str, Any] | None = None,
        default_layout: str = DEFAULT_LAYOUT,
    ) -> None:
        self.shared_data: Dict[str, Any] = dict(shared_data or {})
        self.default_layout = default_layout
        self.logger = get_logger("render")
        self._env = Environment(
            loader=FileSystemLoader([str(path) for path in search_paths]),
            autoescape=False,
            keep_trailing_newline=True,
        )
        tags.install(self._env)

    @property
    def environment(self) -> Environment:
        return self._env

    def compile_pages(self, pages: Sequence[Page]) -> None:
        for page in pages:
            page.compiled_body = self.compile_page(page)
        self.logger.debug("Compiled %d page bodies", len(pages))

    def compile_page(self, page: Page) -> str:
        try:
            template = self._env.from_string(page.body)
            return template.render(self._context(page))
        except TemplateError as exc:
            raise TemplateRenderError(page.input_path, "content", _describe(exc)) from exc

    def render_pages(self, pages: Sequence[Page], write: Callable[[str, str], Any]) -> None:
        for page in pages:
            write(page.output_path, self.render_layout(page))
        self.logger.debug("Rendered %d layouts", len(pages))

    def render_layout(self, page: Page) -> str:
        if page.compiled_body is None:
            raise TemplateRenderError(page.input_path, "layout", "page body was not compiled")
        layout = page.layout or self.default_layout
        template_name = f"{layout}{LAYOUT_SUFFIX}"
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as exc:
            if exc.name == template_name:
                raise LayoutNotFoundError(layout, page.input_path) from exc
            raise TemplateRenderError(page.input_path, "layout", _describe(exc)) from exc
        except TemplateError as exc:
            raise TemplateRenderError(page.input_path, "layout", _describe(exc)) from exc

        context = self._context(page)
        context["content"] = page.compiled_body
        try:
            return template.render(context)
        except TemplateError as exc:
            raise TemplateRenderError(page.input_path, "layout", _describe(exc)) from exc

    def _context(self, page: Page) -> Dict[str, Any]:
        context: Dict[str, Any] = dict(self.shared_data)
        context.update(page.front_matter)
        context["page"] = page.route.as_context()
        return context


def _describe(exc: TemplateError) -> str:
    lineno: Optional[int] = getattr(exc, "lineno", None)
    message = exc.message or exc.__class__.__name__
    return f"{message} (line {lineno})" if lineno else message


__all__ = ["DEFAULT_LAYOUT", "RenderPipeline"]
