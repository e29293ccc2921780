"""Route derivation and router manifest generation."""

from .manifest import RouteManifestBuilder, discover_scripts, emit_imports, emit_routes
from .resolver import (
    HOME_SLUG,
    OUTPUT_FILENAME,
    component_identifier,
    resolve_route,
    script_output_path,
    slug_to_id,
)

__all__ = [
    "HOME_SLUG",
    "OUTPUT_FILENAME",
    "RouteManifestBuilder",
    "component_identifier",
    "discover_scripts",
    "emit_imports",
    "emit_routes",
    "resolve_route",
    "script_output_path",
    "slug_to_id",
]
