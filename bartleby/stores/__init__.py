"""State stores shared by a build session."""

from .pages import PageStore
from .snippets import SnippetRegistry

__all__ = ["PageStore", "SnippetRegistry"]
