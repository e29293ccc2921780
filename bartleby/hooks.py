"""Build hook registration and dispatch."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from .errors import ConfigError
from .logging import get_logger

HookHandler = Callable[..., Any]

# Hook point -> positional arguments passed to every handler.
HOOK_POINTS: Dict[str, tuple[str, ...]] = {
    "beforeBuild": ("files",),
    "afterCompilePages": ("pages", "files"),
    "afterBuildPages": ("pages", "files"),
    "afterBuild": ("result", "files"),
}


class HookRegistry:
    """Capability table of handlers for the fixed build hook points."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[HookHandler]] = {name: [] for name in HOOK_POINTS}
        self.logger = get_logger("hooks")

    def register(self, name: str, handler: HookHandler) -> None:
        if name not in HOOK_POINTS:
            known = ", ".join(HOOK_POINTS)
            raise ConfigError(f'Unknown hook "{name}"; expected one of: {known}')
        if not callable(handler):
            raise ConfigError(f'Hook "{name}" handler is not callable')
        self._handlers[name].append(handler)

    def handlers(self, name: str) -> List[HookHandler]:
        return list(self._handlers.get(name, []))

    def run(self, name: str, *args: Any) -> None:
        expected = HOOK_POINTS[name]
        if len(args) != len(expected):
            raise TypeError(f"Hook {name} expects arguments {expected}, got {len(args)}")
        for handler in self._handlers[name]:
            self.logger.debug("Running %s hook %s", name, getattr(handler, "__name__", handler))
            handler(*args)


__all__ = ["HOOK_POINTS", "HookHandler", "HookRegistry"]
