"""Front-matter parsing for content files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict

import yaml

from ..errors import FrontMatterError

_FENCE_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?P<header>.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


@dataclass
class FrontMatter:
    body: str
    data: Dict[str, Any] = field(default_factory=dict)


def parse(raw: str) -> FrontMatter:
    """Split a ``---`` fenced YAML header from the template body."""
    text = raw.lstrip("\ufeff")
    match = _FENCE_PATTERN.match(text)
    if match is None:
        return FrontMatter(body=text)

    header = match.group("header")
    try:
        loaded = yaml.safe_load(header) if header.strip() else None
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid front matter: {exc}") from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise FrontMatterError("Front matter must be a mapping")
    return FrontMatter(body=text[match.end():], data=loaded)


__all__ = ["FrontMatter", "parse"]
