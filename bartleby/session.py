"""Explicit per-build state shared by the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from .bundling import Bundler
from .config import BartlebyConfig
from .content import SnippetSource, load_page
from .fileservice import FileService
from .hooks import HookRegistry
from .models import Page
from .rendering import RenderPipeline
from .stores import PageStore, SnippetRegistry


@dataclass
class BuildSession:
    """Everything one site build needs; nothing is held in module globals."""

    config: BartlebyConfig
    store: PageStore
    snippets: SnippetRegistry
    renderer: RenderPipeline
    bundler: Bundler
    snippet_source: SnippetSource
    hooks: HookRegistry
    files: FileService
    shared_data: Dict[str, Any] = field(default_factory=dict)
    initialized: bool = False

    @property
    def pages_root(self) -> Path:
        return self.config.pages_dir

    def load_page(self, input_path: Path) -> Page:
        return load_page(input_path, self.config.pages_dir)


__all__ = ["BuildSession"]
