"""Router table assembly and bundle source generation.

The manifest is produced in two explicit stages: :class:`RouteManifestBuilder`
turns rendered pages into a typed :class:`~bartleby.models.RouteManifest`, and
:func:`emit_imports` / :func:`emit_routes` generate the JavaScript source that
is substituted into the main bundle entry.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

from ..models import Page, RouteEntry, RouteImport, RouteManifest, RouteMeta
from .resolver import SCRIPT_SUFFIX, component_identifier, resolve_route

DATA_DIR_NAME = "_data"


def discover_scripts(pages_root: Path) -> Dict[str, Path]:
    """Map slug to script path for every script under the content root."""
    scripts: Dict[str, Path] = {}
    if not pages_root.is_dir():
        return scripts
    for path in sorted(pages_root.rglob(f"*{SCRIPT_SUFFIX}")):
        relative = path.relative_to(pages_root)
        if relative.parts and relative.parts[0] == DATA_DIR_NAME:
            continue
        scripts[resolve_route(path, pages_root).slug] = path
    return scripts


class RouteManifestBuilder:
    """Derives the router table and its imports from compiled pages."""

    def __init__(self, shared_data: Mapping[str, Any] | None = None) -> None:
        seo = (shared_data or {}).get("seo")
        seo = seo if isinstance(seo, Mapping) else {}
        self.default_title = str(seo.get("defaultTitle") or "")
        self.base_title = str(seo.get("baseTitle") or "")
        self.default_description = str(seo.get("defaultDescription") or "")

    def build(self, pages: Iterable[Page], scripts: Mapping[str, Path]) -> RouteManifest:
        manifest = RouteManifest()
        for page in pages:
            if page.router_exclude:
                continue
            script = scripts.get(page.slug)
            component = None
            if script is not None:
                component = component_identifier(page.id)
                manifest.imports.append(RouteImport(identifier=component, source=script))
            manifest.routes.append(
                RouteEntry(
                    slug=page.slug,
                    path=page.route_url,
                    template=page.compiled_body or "",
                    meta=self._meta_for(page),
                    component=component,
                )
            )
        return manifest

    def _meta_for(self, page: Page) -> RouteMeta:
        title = page.title or self.default_title
        return RouteMeta(
            title=f"{title}{self.base_title}",
            description=page.description or self.default_description,
        )


def emit_imports(manifest: RouteManifest) -> str:
    """Render one default-import statement per routed page script."""
    return "".join(
        f"import {item.identifier} from {json.dumps(item.source.as_posix())};\n"
        for item in manifest.imports
    )


def emit_routes(manifest: RouteManifest) -> str:
    """Render the route table as a JavaScript array literal.

    ``component`` is written as a bare identifier referencing the matching
    import, so the result is bundle source rather than JSON.
    """
    return "[" + ",".join(_emit_route(entry) for entry in manifest.routes) + "]"


def _emit_route(entry: RouteEntry) -> str:
    fields: List[str] = [
        f'"slug":{json.dumps(entry.slug)}',
        f'"path":{json.dumps(entry.path)}',
        f'"template":{json.dumps(entry.template)}',
    ]
    if entry.component is not None:
        fields.append(f'"component":{entry.component}')
    meta = {"title": entry.meta.title, "description": entry.meta.description}
    fields.append(f'"meta":{json.dumps(meta, separators=(",", ":"))}')
    return "{" + ",".join(fields) + "}"


__all__ = ["RouteManifestBuilder", "discover_scripts", "emit_imports", "emit_routes"]
