"""Exception hierarchy for bartleby build passes."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple


class BartlebyError(RuntimeError):
    """Base class for failures that abort the current build pass."""


class ConfigError(BartlebyError):
    """Raised when site configuration or registration is invalid."""


class SlugCollisionError(ConfigError):
    """Raised when two pages would share a router component identity."""

    def __init__(self, slug: str, existing: Path, incoming: Path) -> None:
        super().__init__(
            f'Pages {existing} and {incoming} both resolve to slug "{slug}"; '
            "rename one of them so every route has its own component."
        )
        self.slug = slug
        self.existing = existing
        self.incoming = incoming


class ComponentIdCollisionError(ConfigError):
    """Raised when two slugs camel-case to the same router component identifier."""

    def __init__(self, page_id: str, existing: Path, incoming: Path) -> None:
        super().__init__(
            f"Pages {existing} and {incoming} both map to component identifier "
            f'"{page_id}"; rename one of them.'
        )
        self.page_id = page_id
        self.existing = existing
        self.incoming = incoming


class FrontMatterError(ConfigError):
    """Raised when a page header cannot be parsed."""


class LayoutNotFoundError(ConfigError):
    """Raised when a page references a layout that does not exist."""

    def __init__(self, layout: str, input_path: Path) -> None:
        super().__init__(f'Layout "{layout}" referenced by {input_path} was not found')
        self.layout = layout
        self.input_path = input_path


class TemplateRenderError(BartlebyError):
    """Raised when Jinja2 fails to compile or render a page."""

    def __init__(self, input_path: Path, phase: str, reason: str) -> None:
        super().__init__(f"Failed to render {input_path} ({phase}): {reason}")
        self.input_path = input_path
        self.phase = phase


class BundleError(BartlebyError):
    """Raised when the bundler fails for one or more entry points."""

    def __init__(self, message: str, failures: Sequence[Tuple[Path, str]] = ()) -> None:
        super().__init__(message)
        self.failures = list(failures)


__all__ = [
    "BartlebyError",
    "BundleError",
    "ComponentIdCollisionError",
    "ConfigError",
    "FrontMatterError",
    "LayoutNotFoundError",
    "SlugCollisionError",
    "TemplateRenderError",
]
