"""Template tags exposed to page bodies and layouts."""

from __future__ import annotations

import keyword
from typing import Any, Callable, Dict, Mapping

from jinja2 import Environment, pass_context
from jinja2.runtime import Context
from markupsafe import Markup

from ..errors import ConfigError
from ..stores.snippets import SnippetRegistry

TagHandler = Callable[..., Any]


def page_class(page: Mapping[str, Any]) -> str:
    if page.get("url") == "/":
        return "page-home"
    return f"page-{page.get('slug', '')}"


class TagRegistry:
    """Maps tag names to handlers called with the current page metadata first."""

    BUILTINS = ("pageClass", "snippet")

    def __init__(self, snippets: SnippetRegistry) -> None:
        self._snippets = snippets
        self._handlers: Dict[str, TagHandler] = {
            "pageClass": page_class,
            "snippet": self._snippet,
        }

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    def register(self, name: str, handler: TagHandler) -> None:
        if not name.isidentifier() or keyword.iskeyword(name):
            raise ConfigError(f'Tag name "{name}" is not a valid identifier')
        if name in self.BUILTINS:
            raise ConfigError(f'Tag "{name}" is built in and cannot be replaced')
        if not callable(handler):
            raise ConfigError(f'Tag "{name}" handler is not callable')
        self._handlers[name] = handler

    def install(self, env: Environment) -> None:
        for name, handler in self._handlers.items():
            env.globals[name] = _bind(handler)

    def _snippet(self, page: Mapping[str, Any], key: str) -> Markup:
        referrer = page.get("input_path") or "<unknown page>"
        return Markup(self._snippets.lookup(str(key), referrer=referrer))


def _bind(handler: TagHandler) -> Callable[..., Any]:
    @pass_context
    def tag(context: Context, *args: Any, **kwargs: Any) -> Any:
        page = context.get("page") or {}
        return handler(page, *args, **kwargs)

    tag.__name__ = getattr(handler, "__name__", "tag")
    return tag


__all__ = ["TagHandler", "TagRegistry", "page_class"]
