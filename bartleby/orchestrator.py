"""Pipeline orchestration for one-shot builds and rebuild passes."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Dict, List, Optional

from .bundling import Bundler, EsbuildBundler, ScriptJob, Transform, bundle_page_scripts, wrap_as_factory
from .config import BartlebyConfig, load_config, load_handler
from .content import (
    HttpSnippetSource,
    SnippetSource,
    StaticSnippetSource,
    YamlSnippetSource,
    discover_pages,
    load_global_data,
)
from .fileservice import FileService
from .hooks import HookRegistry
from .logging import get_logger
from .models import BuildResult, Page, RouteManifest
from .rendering import RenderPipeline, TagRegistry
from .routing import (
    RouteManifestBuilder,
    discover_scripts,
    emit_imports,
    emit_routes,
    script_output_path,
)
from .session import BuildSession
from .stores import PageStore, SnippetRegistry

ROUTE_IMPORTS_PLACEHOLDER = "process.env.BARTLEBY_ROUTE_IMPORTS"
ROUTES_PLACEHOLDER = "process.env.BARTLEBY_ROUTES"
MAIN_BUNDLE = "main.js"


class Orchestrator:
    """Coordinates discovery, rendering, bundling and output for a site."""

    def __init__(
        self,
        bundler: Bundler | None = None,
        snippet_source: SnippetSource | None = None,
    ) -> None:
        self._bundler = bundler
        self._snippet_source = snippet_source
        self.logger = get_logger("orchestrator")

    def run_build(self, path: str) -> BuildResult:
        """Build the site rooted at ``path`` once."""
        config = load_config(Path(path))
        session = self.create_session(config)
        self.initialize(session)
        return self.build(session)

    def create_session(self, config: BartlebyConfig) -> BuildSession:
        snippets = SnippetRegistry()
        shared_data = load_global_data(config.pages_dir)

        tags = TagRegistry(snippets)
        for name, reference in config.tags.items():
            tags.register(name, load_handler(name, reference))
        hooks = HookRegistry()
        for name, reference in config.hooks.items():
            hooks.register(name, load_handler(name, reference))

        renderer = RenderPipeline(
            [config.includes_dir, config.assets_dir],
            tags=tags,
            shared_data=shared_data,
            default_layout=config.default_layout,
        )
        return BuildSession(
            config=config,
            store=PageStore(snippets),
            snippets=snippets,
            renderer=renderer,
            bundler=self._bundler or self._default_bundler(config),
            snippet_source=self._snippet_source or self._default_snippet_source(config),
            hooks=hooks,
            files=FileService(config.output_dir),
            shared_data=shared_data,
        )

    def initialize(self, session: BuildSession) -> None:
        """Discover pages and resolve snippet content; runs once per session."""
        if session.initialized:
            return
        for input_path in discover_pages(session.pages_root):
            session.store.add(session.load_page(input_path))
        self.logger.info("Discovered %d pages under %s", len(session.store), session.pages_root)
        session.snippets.resolve_all(session.snippet_source)
        session.initialized = True

    def build(self, session: BuildSession) -> BuildResult:
        """Run a full build pass over the pages currently in the store."""
        started = time.perf_counter()
        pages = session.store.pages

        session.hooks.run("beforeBuild", session.files)
        session.renderer.compile_pages(pages)
        session.hooks.run("afterCompilePages", pages, session.files)
        self.build_scripts(session, pages)
        session.renderer.render_pages(pages, session.files.save_file)
        session.hooks.run("afterBuildPages", pages, session.files)
        self.copy_static_assets(session)

        result = BuildResult(pages=pages, snippets=session.snippets.resolved)
        session.hooks.run("afterBuild", result, session.files)
        self.logger.info(
            "Built %d pages into %s in %.2fs",
            len(pages),
            session.config.output_dir,
            time.perf_counter() - started,
        )
        return result

    def build_scripts(self, session: BuildSession, pages: List[Page]) -> Optional[RouteManifest]:
        """Bundle the router entry and every routed page script."""
        entry = session.config.entry
        if not entry.is_file():
            self.logger.warning("Bundle entry %s not found; skipping scripts", entry)
            return None

        scripts = discover_scripts(session.pages_root)
        manifest = RouteManifestBuilder(session.shared_data).build(pages, scripts)
        defines = {
            ROUTE_IMPORTS_PLACEHOLDER: emit_imports(manifest),
            ROUTES_PLACEHOLDER: emit_routes(manifest),
        }
        transforms: Dict[Path, Transform] = {item.source: wrap_as_factory for item in manifest.imports}
        session.files.save_file(
            MAIN_BUNDLE,
            session.bundler.compile(entry, defines=defines, transforms=transforms),
        )

        jobs = [
            ScriptJob(source=scripts[route.slug], output_path=script_output_path(route.path, route.slug))
            for route in manifest.routes
            if route.component is not None
        ]
        written = bundle_page_scripts(session.bundler, jobs, session.files.save_file)
        self.logger.debug("Bundled %s and %d page scripts", MAIN_BUNDLE, len(written))
        return manifest

    def copy_static_assets(self, session: BuildSession) -> None:
        assets = session.config.assets_dir
        session.files.copy_dir(assets / "images", Path("assets") / "images")
        session.files.copy_file(assets / "favicon.ico", "favicon.ico")

    @staticmethod
    def _default_bundler(config: BartlebyConfig) -> Bundler:
        return EsbuildBundler(
            config.bundler.executable,
            output_format=config.bundler.output_format,
        )

    @staticmethod
    def _default_snippet_source(config: BartlebyConfig) -> SnippetSource:
        if config.snippets.url:
            return HttpSnippetSource(config.snippets.url)
        if config.snippets.source is not None:
            return YamlSnippetSource(config.snippets.source)
        return StaticSnippetSource()


__all__ = ["MAIN_BUNDLE", "Orchestrator", "ROUTES_PLACEHOLDER", "ROUTE_IMPORTS_PLACEHOLDER"]
