"""Page discovery and loading from the content root."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import ConfigError, FrontMatterError
from ..models import Page, SnippetReference
from ..routing.manifest import DATA_DIR_NAME
from ..routing.resolver import resolve_route, slug_to_id
from .frontmatter import parse

PAGE_SUFFIX = ".html"
_DATA_SUFFIXES = (".yml", ".yaml", ".json")


def discover_pages(pages_root: Path) -> List[Path]:
    """Return content files, shallow pages first, then alphabetically."""
    if not pages_root.is_dir():
        raise FileNotFoundError(f"Missing pages directory: {pages_root}")
    found = [
        path
        for path in pages_root.rglob(f"*{PAGE_SUFFIX}")
        if path.relative_to(pages_root).parts[0] != DATA_DIR_NAME
    ]
    return sorted(found, key=lambda path: _discovery_key(path, pages_root))


def load_page(input_path: Path, pages_root: Path) -> Page:
    """Read, parse and resolve one content file into a :class:`Page`."""
    try:
        parsed = parse(input_path.read_text(encoding="utf-8"))
    except FrontMatterError as exc:
        raise FrontMatterError(f"{input_path}: {exc}") from exc

    route = resolve_route(input_path, pages_root)
    data = dict(parsed.data)
    snippets: List[SnippetReference] = []
    declared = data.get("snippets")
    if declared:
        items = declared if isinstance(declared, list) else [declared]
        for item in items:
            reference = normalize_snippet(item)
            if reference is not None:
                snippets.append(reference)
        data["snippets"] = [{"key": ref.key, "name": ref.name} for ref in snippets]

    return Page(
        id=slug_to_id(route.slug),
        route=route,
        body=parsed.body,
        front_matter=data,
        snippets=snippets,
    )


def normalize_snippet(value: Any) -> Optional[SnippetReference]:
    if isinstance(value, str):
        return SnippetReference(key=value) if value else None
    if isinstance(value, dict):
        key = value.get("key")
        if not key:
            return None
        name = value.get("name")
        return SnippetReference(key=str(key), name=str(name) if name is not None else None)
    return None


def load_global_data(pages_root: Path) -> Dict[str, Any]:
    """Load ``_data/*.{yml,yaml,json}`` keyed by file stem."""
    data_dir = pages_root / DATA_DIR_NAME
    shared: Dict[str, Any] = {}
    if not data_dir.is_dir():
        return shared
    for path in sorted(data_dir.iterdir()):
        if not path.is_file() or path.suffix not in _DATA_SUFFIXES:
            continue
        text = path.read_text(encoding="utf-8")
        try:
            if path.suffix == ".json":
                shared[path.stem] = json.loads(text) if text.strip() else {}
            else:
                shared[path.stem] = yaml.safe_load(text) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to parse shared data {path.name}: {exc}") from exc
    return shared


def _discovery_key(path: Path, pages_root: Path) -> tuple[int, str]:
    relative = path.relative_to(pages_root)
    return len(relative.parts), relative.as_posix()


__all__ = [
    "PAGE_SUFFIX",
    "discover_pages",
    "load_global_data",
    "load_page",
    "normalize_snippet",
]
