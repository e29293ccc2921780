"""Content loading: front matter, pages, shared data and snippet sources."""

from .frontmatter import FrontMatter, parse
from .loader import PAGE_SUFFIX, discover_pages, load_global_data, load_page, normalize_snippet
from .sources import (
    HttpSnippetSource,
    SnippetContent,
    SnippetSource,
    StaticSnippetSource,
    YamlSnippetSource,
)

__all__ = [
    "FrontMatter",
    "HttpSnippetSource",
    "PAGE_SUFFIX",
    "SnippetContent",
    "SnippetSource",
    "StaticSnippetSource",
    "YamlSnippetSource",
    "discover_pages",
    "load_global_data",
    "load_page",
    "normalize_snippet",
    "parse",
]
