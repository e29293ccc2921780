"""Map content files to route metadata."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable

from ..models import PageRouteMeta

HOME_SLUG = "home"
OUTPUT_FILENAME = "index.html"
SCRIPT_SUFFIX = ".js"

_WHITESPACE = re.compile(r"\s")
_INVALID_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_$]")


def resolve_route(
    input_path: Path,
    pages_root: Path,
    *,
    exists: Callable[[Path], bool] = Path.exists,
) -> PageRouteMeta:
    """Derive url, slug, output and script paths for ``input_path``.

    ``foo/foo.html`` and ``foo/index.html`` both route to ``/foo/``; the root
    ``index.html`` routes to ``/`` with the ``home`` slug. The sibling script
    lookup touches the filesystem through ``exists``.
    """
    try:
        relative = input_path.relative_to(pages_root)
    except ValueError as exc:
        raise ValueError(f"{input_path} is not inside content root {pages_root}") from exc

    directory = relative.parent.as_posix()
    if directory == ".":
        directory = ""
    name = relative.stem
    parent_name = relative.parent.name

    segments = [directory] if name in {"index", parent_name} else [directory, name]
    joined = "/".join(segment for segment in segments if segment)
    url = f"/{joined}/" if joined else "/"
    output_path = f"{url}{OUTPUT_FILENAME}"

    slug = "-".join(part for part in _WHITESPACE.sub("", url).split("/") if part) or HOME_SLUG

    script_candidate = pages_root / relative.parent / f"{name}{SCRIPT_SUFFIX}"
    js_input_path = script_candidate if exists(script_candidate) else None
    js_output_path = script_output_path(url, slug) if js_input_path is not None else None

    return PageRouteMeta(
        input_path=input_path,
        url=url,
        output_path=output_path,
        slug=slug,
        js_input_path=js_input_path,
        js_output_path=js_output_path,
    )


def script_output_path(url: str, slug: str) -> str:
    """Return the bundled script path: the last slug segment beside the page."""
    return f"{url}{slug.split('-')[-1]}{SCRIPT_SUFFIX}"


def slug_to_id(slug: str) -> str:
    """Camel-case a slug into a JavaScript-safe identifier."""
    parts = [part for part in slug.split("-") if part]
    camel = "".join(
        part if index == 0 else part[:1].upper() + part[1:]
        for index, part in enumerate(parts)
    )
    identifier = _INVALID_IDENTIFIER_CHARS.sub("_", camel) or HOME_SLUG
    if identifier[0].isdigit():
        identifier = f"_{identifier}"
    return identifier


def component_identifier(page_id: str) -> str:
    return f"{page_id}Component"


__all__ = [
    "HOME_SLUG",
    "OUTPUT_FILENAME",
    "SCRIPT_SUFFIX",
    "component_identifier",
    "resolve_route",
    "script_output_path",
    "slug_to_id",
]
