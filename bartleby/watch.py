"""Incremental rebuilds driven by file-change events, plus the serve loop."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from livereload import Server
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import load_config
from .errors import BartlebyError
from .logging import get_logger
from .orchestrator import Orchestrator
from .routing import resolve_route
from .session import BuildSession

EVENT_KINDS = ("add", "change", "unlink")
WATCHED_SUFFIXES = frozenset({".html", ".js", ".css", ".scss"})
ASSET_SUFFIXES = frozenset({".png", ".jpg", ".gif"})
RELOAD_TRIGGER = Path(".bartleby") / "reload"


class RebuildState(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    REBUILDING = "rebuilding"


@dataclass(frozen=True)
class FileEvent:
    kind: str
    path: Path


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def watch_roots(session: BuildSession) -> List[Path]:
    """Directories whose sources feed a rebuild, without nested duplicates."""
    config = session.config
    roots: List[Path] = []
    for candidate in (config.website_dir, config.pages_dir, config.includes_dir):
        if not any(candidate.is_relative_to(root) for root in roots):
            roots.append(candidate)
    return roots


def _thread_timer(delay: float, callback: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class IncrementalRebuildController:
    """Debounces file events into batched rebuild cycles.

    States move Idle -> Collecting -> Rebuilding -> Idle. Each event restarts
    the quiescence timer; on expiry the queued events are taken, applied to
    the page store, and one rebuild runs. Events that arrive mid-rebuild wait
    for the next cycle.
    """

    def __init__(
        self,
        session: BuildSession,
        rebuild: Callable[[], object],
        *,
        reload: Callable[[], None] | None = None,
        quiescence: float = 0.1,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self.session = session
        self._rebuild = rebuild
        self._reload = reload
        self.quiescence = quiescence
        self._timer_factory = timer_factory or _thread_timer
        self._lock = threading.Lock()
        self._queue: List[FileEvent] = []
        self._timer: Optional[TimerHandle] = None
        self._state = RebuildState.IDLE
        self.cycles = 0
        self.logger = get_logger("watch")

    @property
    def state(self) -> RebuildState:
        return self._state

    @property
    def pending(self) -> List[FileEvent]:
        with self._lock:
            return list(self._queue)

    def is_relevant(self, path: Path) -> bool:
        if path.suffix not in WATCHED_SUFFIXES:
            return False
        return any(path.is_relative_to(root) for root in watch_roots(self.session))

    def notify(self, kind: str, path: Path | str) -> bool:
        """Queue a file event; returns False when the path is not watched."""
        if kind not in EVENT_KINDS:
            raise ValueError(f"Unknown file event {kind!r}")
        event = FileEvent(kind=kind, path=Path(path))
        if not self.is_relevant(event.path):
            return False
        with self._lock:
            self._queue.append(event)
            if self._state is RebuildState.IDLE:
                self._state = RebuildState.COLLECTING
            self._arm_timer()
        self.logger.debug("Queued %s %s", kind, event.path)
        return True

    def flush(self) -> bool:
        """Run one rebuild cycle for the queued events (timer expiry)."""
        with self._lock:
            if self._state is RebuildState.REBUILDING:
                return False
            self._timer = None
            if not self._queue:
                self._state = RebuildState.IDLE
                return False
            events, self._queue = self._queue, []
            self._state = RebuildState.REBUILDING

        self.logger.info("Rebuilding after %d file event(s)", len(events))
        try:
            self.apply_events(events)
            self._rebuild()
            if self._reload is not None:
                self._reload()
        except BartlebyError as exc:
            self.logger.error("Rebuild failed: %s", exc)
        except Exception:
            self.logger.exception("Rebuild failed")
        finally:
            with self._lock:
                self.cycles += 1
                if self._queue:
                    self._state = RebuildState.COLLECTING
                    self._arm_timer()
                else:
                    self._state = RebuildState.IDLE
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def apply_events(self, events: List[FileEvent]) -> None:
        """Apply every event to the page store.

        A failing event does not stop the rest of the batch; the first error
        is raised once all events have been applied so the rebuild is skipped.
        """
        pages_root = self.session.pages_root
        first_error: Optional[BartlebyError] = None
        for event in events:
            if not event.path.is_relative_to(pages_root):
                continue
            try:
                if event.path.suffix == ".html":
                    self._apply_page_event(event)
                elif event.path.suffix == ".js":
                    self._refresh_script_owner(event.path)
            except BartlebyError as exc:
                self.logger.error("Could not apply %s %s: %s", event.kind, event.path, exc)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def _apply_page_event(self, event: FileEvent) -> None:
        store = self.session.store
        existing = store.find_by_input(event.path)
        if event.kind == "unlink":
            url = existing.route_url if existing else self._route_url(event.path)
            store.remove(url)
            return
        try:
            page = self.session.load_page(event.path)
        except FileNotFoundError:
            self.logger.debug("%s disappeared before it could be loaded", event.path)
            if existing is not None:
                store.remove(existing.route_url)
            return
        if existing is not None:
            store.replace(existing.route_url, page)
        else:
            store.add(page)

    def _refresh_script_owner(self, script_path: Path) -> None:
        """Re-resolve the sibling page's route; its body and data are kept."""
        owner = script_path.with_suffix(".html")
        existing = self.session.store.find_by_input(owner)
        if existing is None:
            return
        route = resolve_route(owner, self.session.pages_root)
        self.session.store.replace(existing.route_url, replace(existing, route=route))

    def _route_url(self, path: Path) -> str:
        return resolve_route(path, self.session.pages_root, exists=lambda _: False).url

    def _arm_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._timer_factory(self.quiescence, self.flush)
        self._timer.start()


class WatchHandler(FileSystemEventHandler):
    """Translates watchdog events into controller notifications."""

    def __init__(self, controller: IncrementalRebuildController) -> None:
        self.controller = controller

    def _notify(self, kind: str, path: str | bytes) -> None:
        self.controller.notify(kind, os.fsdecode(path))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._notify("add", event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._notify("change", event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._notify("unlink", event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._notify("unlink", event.src_path)
            self._notify("add", event.dest_path)


class StaticAssetHandler(FileSystemEventHandler):
    """Copies static assets on change without triggering a rebuild."""

    def __init__(self, copy_assets: Callable[[], None]) -> None:
        self.copy_assets = copy_assets
        self.logger = get_logger("watch")

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if Path(os.fsdecode(event.src_path)).suffix.lower() not in ASSET_SUFFIXES:
            return
        try:
            self.copy_assets()
        except OSError as exc:
            self.logger.error("Copying static assets failed: %s", exc)


class LiveReloadNotifier:
    """Signals the live-reload server by touching a watched trigger file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def notify(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()


def serve(
    path: str,
    *,
    orchestrator: Orchestrator | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Build once, then rebuild on changes while serving the output root."""
    logger = get_logger("watch")
    orchestrator = orchestrator or Orchestrator()
    config = load_config(Path(path))
    session = orchestrator.create_session(config)
    orchestrator.initialize(session)
    try:
        orchestrator.build(session)
    except BartlebyError as exc:
        logger.error("Initial build failed: %s", exc)

    notifier = LiveReloadNotifier(config.root / RELOAD_TRIGGER)
    notifier.notify()
    controller = IncrementalRebuildController(
        session,
        rebuild=lambda: orchestrator.build(session),
        reload=notifier.notify,
        quiescence=config.quiescence,
    )

    observer = Observer()
    handler = WatchHandler(controller)
    for root in watch_roots(session):
        if root.is_dir():
            observer.schedule(handler, str(root), recursive=True)
    if config.assets_dir.is_dir():
        observer.schedule(
            StaticAssetHandler(lambda: orchestrator.copy_static_assets(session)),
            str(config.assets_dir),
            recursive=True,
        )
    observer.start()

    server = Server()
    server.watch(str(notifier.path))
    config.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Serving %s at http://%s:%d", config.output_dir, host or config.serve.host, port or config.serve.port)
    try:
        server.serve(
            root=str(config.output_dir),
            host=host or config.serve.host,
            port=port or config.serve.port,
        )
    finally:
        controller.cancel()
        observer.stop()
        observer.join()


__all__ = [
    "EVENT_KINDS",
    "FileEvent",
    "IncrementalRebuildController",
    "LiveReloadNotifier",
    "RebuildState",
    "StaticAssetHandler",
    "WatchHandler",
    "serve",
    "watch_roots",
]
