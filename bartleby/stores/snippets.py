"""Registry of snippet keys referenced by pages."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Set

from ..content.sources import SnippetSource
from ..logging import get_logger


class SnippetRegistry:
    """Tracks referenced snippet keys and their resolved content.

    Known keys only ever grow. Content is fetched once per session, before the
    first build; keys registered later stay unresolved until restart.
    """

    def __init__(self) -> None:
        self._known: Set[str] = set()
        self._resolved: Dict[str, str] = {}
        self._fetched = False
        self.logger = get_logger("snippets")

    @property
    def known_keys(self) -> FrozenSet[str]:
        return frozenset(self._known)

    @property
    def resolved(self) -> Dict[str, str]:
        return dict(self._resolved)

    @property
    def fetched(self) -> bool:
        return self._fetched

    def register_keys(self, keys: Iterable[str]) -> None:
        for key in keys:
            if key:
                self._known.add(key)

    def resolve_all(self, source: SnippetSource) -> Dict[str, str]:
        if self._fetched:
            return self.resolved
        keys = set(self._known)
        for entry in source.fetch_snippets(keys):
            self._resolved[entry.key] = entry.content
        self._fetched = True
        missing = sorted(keys - set(self._resolved))
        if missing:
            self.logger.warning("No content found for snippets: %s", ", ".join(missing))
        self.logger.debug("Resolved %d of %d snippets", len(self._resolved), len(keys))
        return self.resolved

    def lookup(self, key: str, *, referrer: Path | str) -> str:
        if key not in self._known:
            self.logger.warning(
                'Invalid snippet key "%s" in %s. Register the snippet in the page front matter.',
                key,
                referrer,
            )
            return ""
        content = self._resolved.get(key)
        if content is None:
            self.logger.warning(
                'Snippet "%s" used by %s has no content; snippets are fetched once at startup.',
                key,
                referrer,
            )
            return ""
        return content


__all__ = ["SnippetRegistry"]
