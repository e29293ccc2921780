"""Ordered in-memory collection of pages keyed by route url."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional

from ..errors import ComponentIdCollisionError, SlugCollisionError
from ..models import Page
from .snippets import SnippetRegistry


class PageStore:
    """Keeps pages in discovery order; registers snippet keys on insert."""

    def __init__(self, snippets: SnippetRegistry | None = None) -> None:
        self._pages: List[Page] = []
        self.snippets = snippets if snippets is not None else SnippetRegistry()

    def __iter__(self) -> Iterator[Page]:
        return iter(list(self._pages))

    def __len__(self) -> int:
        return len(self._pages)

    @property
    def pages(self) -> List[Page]:
        return list(self._pages)

    def add(self, page: Page) -> None:
        self._check_identity(page, skip=None)
        self._pages.append(page)
        self._register(page)

    def replace(self, old_url: str, page: Page) -> None:
        index = self._index_of(old_url)
        if index is None:
            raise KeyError(old_url)
        self._check_identity(page, skip=index)
        self._pages[index] = page
        self._register(page)

    def remove(self, url: str) -> Optional[Page]:
        index = self._index_of(url)
        if index is None:
            return None
        return self._pages.pop(index)

    def find(self, url: str) -> Optional[Page]:
        index = self._index_of(url)
        return self._pages[index] if index is not None else None

    def find_by_input(self, input_path: Path) -> Optional[Page]:
        for page in self._pages:
            if page.input_path == input_path:
                return page
        return None

    def _index_of(self, url: str) -> Optional[int]:
        for index, page in enumerate(self._pages):
            if page.route_url == url:
                return index
        return None

    def _check_identity(self, page: Page, *, skip: Optional[int]) -> None:
        for index, existing in enumerate(self._pages):
            if index == skip:
                continue
            if existing.slug == page.slug:
                raise SlugCollisionError(page.slug, existing.input_path, page.input_path)
            if existing.id == page.id:
                raise ComponentIdCollisionError(page.id, existing.input_path, page.input_path)

    def _register(self, page: Page) -> None:
        self.snippets.register_keys(reference.key for reference in page.snippets)


__all__ = ["PageStore"]
