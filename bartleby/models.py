"""Core data models shared across bartleby components."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class PageRouteMeta:
    """Routing metadata derived from a source file's location."""

    input_path: Path
    url: str
    output_path: str
    slug: str
    js_input_path: Optional[Path] = None
    js_output_path: Optional[str] = None

    def as_context(self) -> Dict[str, Any]:
        """Return the ``page`` variable exposed to templates."""
        return {
            "input_path": str(self.input_path),
            "url": self.url,
            "output_path": self.output_path,
            "slug": self.slug,
            "js_input_path": str(self.js_input_path) if self.js_input_path else None,
            "js_output_path": self.js_output_path,
        }


@dataclass(frozen=True)
class SnippetReference:
    """Snippet declared in front matter; ``name`` is a display label only."""

    key: str
    name: Optional[str] = None


@dataclass
class Page:
    """One discovered content file and its render state."""

    id: str
    route: PageRouteMeta
    body: str
    front_matter: Dict[str, Any] = field(default_factory=dict)
    snippets: List[SnippetReference] = field(default_factory=list)
    compiled_body: Optional[str] = None

    @property
    def input_path(self) -> Path:
        return self.route.input_path

    @property
    def route_url(self) -> str:
        return self.route.url

    @property
    def output_path(self) -> str:
        return self.route.output_path

    @property
    def slug(self) -> str:
        return self.route.slug

    @property
    def script_input_path(self) -> Optional[Path]:
        return self.route.js_input_path

    @property
    def script_output_path(self) -> Optional[str]:
        return self.route.js_output_path

    @property
    def layout(self) -> Optional[str]:
        value = self.front_matter.get("layout")
        return str(value) if value else None

    @property
    def router_exclude(self) -> bool:
        return bool(self.front_matter.get("routerExclude"))

    @property
    def title(self) -> Optional[str]:
        value = self.front_matter.get("title")
        return str(value) if value else None

    @property
    def description(self) -> Optional[str]:
        value = self.front_matter.get("description")
        return str(value) if value else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "page": self.route.as_context(),
            "data": dict(self.front_matter),
            "compiled_body": self.compiled_body,
        }


@dataclass(frozen=True)
class RouteMeta:
    title: str
    description: str


@dataclass(frozen=True)
class RouteImport:
    """Static import of a page script under a generated identifier."""

    identifier: str
    source: Path


@dataclass(frozen=True)
class RouteEntry:
    """One row of the client-side router table."""

    slug: str
    path: str
    template: str
    meta: RouteMeta
    component: Optional[str] = None


@dataclass
class RouteManifest:
    """Typed router table prior to code generation."""

    imports: List[RouteImport] = field(default_factory=list)
    routes: List[RouteEntry] = field(default_factory=list)


@dataclass
class BuildResult:
    """Summary returned by a completed build pass."""

    pages: List[Page]
    snippets: Dict[str, str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages": [page.to_dict() for page in self.pages],
            "snippets": dict(self.snippets),
        }
