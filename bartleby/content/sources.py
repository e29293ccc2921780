"""Content-source collaborators that supply snippet bodies."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Protocol, Set
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

import yaml

from ..errors import ConfigError
from ..logging import get_logger


@dataclass(frozen=True)
class SnippetContent:
    key: str
    content: str


class SnippetSource(Protocol):
    """Fetches snippet bodies for a set of keys."""

    def fetch_snippets(self, keys: Set[str]) -> List[SnippetContent]:
        """Return content for the requested keys; unknown keys are omitted."""


class StaticSnippetSource:
    """In-memory source, used when no snippet backend is configured."""

    def __init__(self, snippets: Mapping[str, str] | None = None) -> None:
        self._snippets = dict(snippets or {})

    def fetch_snippets(self, keys: Set[str]) -> List[SnippetContent]:
        return _select(self._snippets, keys)


class YamlSnippetSource:
    """Reads a ``key: content`` mapping from a YAML file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.logger = get_logger("snippets")

    def fetch_snippets(self, keys: Set[str]) -> List[SnippetContent]:
        if not self.path.exists():
            self.logger.warning("Snippet file %s does not exist", self.path)
            return []
        try:
            loaded = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self.path.name}: {exc}") from exc
        if loaded is None:
            return []
        if not isinstance(loaded, dict):
            raise ConfigError(f"{self.path.name} must contain a mapping of snippet keys")
        return _select(loaded, keys)


class HttpSnippetSource:
    """Posts the key set to a JSON endpoint returning ``[{key, content}]``."""

    def __init__(
        self,
        url: str,
        *,
        request_timeout: float = 30.0,
        fetcher: Callable[[str, bytes, float], Any] | None = None,
    ) -> None:
        self.url = url
        self.request_timeout = request_timeout
        self._fetcher = fetcher or self._default_fetcher

    def fetch_snippets(self, keys: Set[str]) -> List[SnippetContent]:
        if not keys:
            return []
        payload = json.dumps({"keys": sorted(keys)}).encode("utf-8")
        data = self._fetcher(self.url, payload, self.request_timeout)
        if not isinstance(data, list):
            raise ConfigError(f"Snippet endpoint {self.url} did not return a list")
        snippets: List[SnippetContent] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            key = item.get("key")
            content = item.get("content")
            if isinstance(key, str) and key in keys:
                snippets.append(SnippetContent(key=key, content=str(content or "")))
        return snippets

    @staticmethod
    def _default_fetcher(url: str, payload: bytes, timeout: float) -> Any:
        request = Request(
            url,
            data=payload,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urlopen(request, timeout=timeout) as response:  # noqa: S310
                return json.loads(response.read().decode("utf-8"))
        except HTTPError as exc:
            raise ConfigError(f"Snippet endpoint {url} returned HTTP {exc.code}") from exc
        except (URLError, OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Snippet endpoint {url} is unavailable: {exc}") from exc


def _select(snippets: Mapping[Any, Any], keys: Iterable[str]) -> List[SnippetContent]:
    wanted = set(keys)
    return [
        SnippetContent(key=str(key), content="" if value is None else str(value))
        for key, value in snippets.items()
        if str(key) in wanted
    ]


__all__ = [
    "HttpSnippetSource",
    "SnippetContent",
    "SnippetSource",
    "StaticSnippetSource",
    "YamlSnippetSource",
]
