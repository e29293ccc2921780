"""Tests for the debounced incremental rebuild controller."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from bartleby.errors import ConfigError
from bartleby.orchestrator import Orchestrator
from bartleby.session import BuildSession
from bartleby.watch import (
    IncrementalRebuildController,
    LiveReloadNotifier,
    RebuildState,
    StaticAssetHandler,
    WatchHandler,
    serve,
    watch_roots,
)
from tests._fixtures.doubles import FakeTimerFactory, RecordingBundler
from tests._fixtures.site_builder import SiteBuilder


@pytest.fixture
def session(site_builder: SiteBuilder) -> BuildSession:
    site_builder.write(
        {
            "website/main.js": "process.env.BARTLEBY_ROUTES;\n",
            "website/includes/layout.html": "{{ content }}",
            "website/pages/index.html": "<h1>Home</h1>\n",
            "website/pages/about/about.html": "<h1>About</h1>\n",
            "website/pages/about/about.js": "console.log('about');\n",
        }
    )
    orchestrator = Orchestrator(bundler=RecordingBundler())
    built = orchestrator.create_session(site_builder.config())
    orchestrator.initialize(built)
    return built


class Rebuilds:
    def __init__(self, session: BuildSession) -> None:
        self.session = session
        self.snapshots: List[List[Tuple[str, str]]] = []

    def __call__(self) -> None:
        self.snapshots.append([(page.route_url, page.body) for page in self.session.store])


def _controller(session: BuildSession, rebuild, timers: FakeTimerFactory, **kwargs) -> IncrementalRebuildController:
    return IncrementalRebuildController(session, rebuild, quiescence=0.05, timer_factory=timers, **kwargs)


def test_burst_of_events_runs_one_rebuild_with_latest_content(
    session: BuildSession, site_builder: SiteBuilder
) -> None:
    timers = FakeTimerFactory()
    rebuilds = Rebuilds(session)
    controller = _controller(session, rebuilds, timers)
    about = site_builder.pages / "about" / "about.html"
    index = site_builder.pages / "index.html"

    about.write_text("<h1>About v1</h1>\n", encoding="utf-8")
    controller.notify("change", about)
    about.write_text("<h1>About v2</h1>\n", encoding="utf-8")
    controller.notify("change", about)
    index.write_text("<h1>Home v2</h1>\n", encoding="utf-8")
    controller.notify("change", index)

    assert controller.state is RebuildState.COLLECTING
    assert len(timers.timers) == 3
    assert len(timers.active) == 1
    assert timers.active[0].delay == 0.05

    timers.fire_latest()

    assert rebuilds.snapshots == [[("/", "<h1>Home v2</h1>\n"), ("/about/", "<h1>About v2</h1>\n")]]
    assert controller.cycles == 1
    assert controller.state is RebuildState.IDLE
    assert controller.pending == []


def test_added_page_joins_store(session: BuildSession, site_builder: SiteBuilder) -> None:
    timers = FakeTimerFactory()
    controller = _controller(session, Rebuilds(session), timers)

    path = site_builder.page("blog/post.html", "<p>New</p>")
    controller.notify("add", path)
    timers.fire_latest()

    assert session.store.find("/blog/post/") is not None
    assert len(session.store) == 3


def test_unlinked_page_leaves_store(session: BuildSession, site_builder: SiteBuilder) -> None:
    timers = FakeTimerFactory()
    controller = _controller(session, Rebuilds(session), timers)
    about = site_builder.pages / "about" / "about.html"

    about.unlink()
    controller.notify("unlink", about)
    timers.fire_latest()

    assert session.store.find("/about/") is None
    assert [page.route_url for page in session.store] == ["/"]


def test_add_for_known_page_replaces_it(session: BuildSession, site_builder: SiteBuilder) -> None:
    timers = FakeTimerFactory()
    controller = _controller(session, Rebuilds(session), timers)
    index = site_builder.page("index.html", "<h1>Replaced</h1>")

    controller.notify("add", index)
    timers.fire_latest()

    assert len(session.store) == 2
    assert session.store.find("/").body == "<h1>Replaced</h1>"


def test_script_event_refreshes_owner_route_only(session: BuildSession, site_builder: SiteBuilder) -> None:
    timers = FakeTimerFactory()
    controller = _controller(session, Rebuilds(session), timers)
    script = site_builder.pages / "about" / "about.js"
    assert session.store.find("/about/").script_input_path == script

    script.unlink()
    (site_builder.pages / "about" / "about.html").write_text("<h1>Unsaved</h1>\n", encoding="utf-8")
    controller.notify("unlink", script)
    timers.fire_latest()

    assert session.store.find("/about/").script_input_path is None
    assert session.store.find("/about/").body == "<h1>About</h1>\n"


def test_bad_page_does_not_drop_rest_of_batch(
    session: BuildSession, site_builder: SiteBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    timers = FakeTimerFactory()
    rebuilds = Rebuilds(session)
    controller = _controller(session, rebuilds, timers)
    index = site_builder.pages / "index.html"
    about = site_builder.pages / "about" / "about.html"

    index.write_text("---\ntitle: [unclosed\n---\n<h1>Home</h1>\n", encoding="utf-8")
    controller.notify("change", index)
    about.write_text("<h1>About v2</h1>\n", encoding="utf-8")
    controller.notify("change", about)
    with caplog.at_level(logging.ERROR, logger="bartleby"):
        timers.fire_latest()

    assert rebuilds.snapshots == []
    assert session.store.find("/about/").body == "<h1>About v2</h1>\n"
    assert str(index) in caplog.text

    index.write_text("<h1>Home fixed</h1>\n", encoding="utf-8")
    controller.notify("change", index)
    timers.fire_latest()

    assert rebuilds.snapshots == [[("/", "<h1>Home fixed</h1>\n"), ("/about/", "<h1>About v2</h1>\n")]]
    assert controller.state is RebuildState.IDLE


def test_events_during_rebuild_wait_for_next_cycle(session: BuildSession, site_builder: SiteBuilder) -> None:
    timers = FakeTimerFactory()
    index = site_builder.pages / "index.html"
    states: List[RebuildState] = []
    controller: IncrementalRebuildController

    def rebuild() -> None:
        states.append(controller.state)
        if len(states) == 1:
            index.write_text("<h1>Mid rebuild</h1>\n", encoding="utf-8")
            controller.notify("change", index)
            assert controller.flush() is False

    controller = _controller(session, rebuild, timers)
    controller.notify("change", index)
    timers.fire_latest()

    assert states == [RebuildState.REBUILDING]
    assert controller.state is RebuildState.COLLECTING
    assert len(controller.pending) == 1
    assert len(timers.active) == 1

    timers.fire_latest()

    assert states == [RebuildState.REBUILDING, RebuildState.REBUILDING]
    assert controller.cycles == 2
    assert controller.state is RebuildState.IDLE
    assert session.store.find("/").body == "<h1>Mid rebuild</h1>\n"


def test_failed_rebuild_returns_to_idle(
    session: BuildSession, site_builder: SiteBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    timers = FakeTimerFactory()
    reloads: List[str] = []

    def rebuild() -> None:
        raise ConfigError("layout missing")

    controller = _controller(session, rebuild, timers, reload=lambda: reloads.append("reload"))

    with caplog.at_level(logging.ERROR, logger="bartleby"):
        controller.notify("change", site_builder.pages / "index.html")
        timers.fire_latest()

    assert controller.state is RebuildState.IDLE
    assert controller.cycles == 1
    assert reloads == []
    assert "layout missing" in caplog.text
    assert controller.notify("change", site_builder.pages / "index.html") is True


def test_successful_rebuild_triggers_reload(session: BuildSession, site_builder: SiteBuilder) -> None:
    timers = FakeTimerFactory()
    reloads: List[str] = []
    controller = _controller(session, Rebuilds(session), timers, reload=lambda: reloads.append("reload"))

    controller.notify("change", site_builder.website / "includes" / "layout.html")
    timers.fire_latest()

    assert reloads == ["reload"]


def test_irrelevant_paths_are_ignored(session: BuildSession, site_builder: SiteBuilder, tmp_path: Path) -> None:
    timers = FakeTimerFactory()
    controller = _controller(session, Rebuilds(session), timers)

    assert controller.notify("change", site_builder.pages / "notes.md") is False
    assert controller.notify("change", tmp_path / "elsewhere.html") is False
    assert timers.timers == []
    assert controller.state is RebuildState.IDLE


def test_unknown_event_kind_is_rejected(session: BuildSession, site_builder: SiteBuilder) -> None:
    controller = _controller(session, Rebuilds(session), FakeTimerFactory())

    with pytest.raises(ValueError):
        controller.notify("rename", site_builder.pages / "index.html")


def test_flush_without_events_is_noop(session: BuildSession) -> None:
    rebuilds = Rebuilds(session)
    controller = _controller(session, rebuilds, FakeTimerFactory())

    assert controller.flush() is False
    assert rebuilds.snapshots == []


def test_cancel_stops_pending_timer(session: BuildSession, site_builder: SiteBuilder) -> None:
    timers = FakeTimerFactory()
    controller = _controller(session, Rebuilds(session), timers)
    controller.notify("change", site_builder.pages / "index.html")

    controller.cancel()

    assert timers.active == []


def test_watch_roots_drop_nested_directories(session: BuildSession, site_builder: SiteBuilder) -> None:
    assert watch_roots(session) == [site_builder.website]


class RecordingController:
    def __init__(self) -> None:
        self.events: List[Tuple[str, str]] = []

    def notify(self, kind: str, path: str) -> bool:
        self.events.append((kind, path))
        return True


def test_watch_handler_maps_watchdog_events() -> None:
    controller = RecordingController()
    handler = WatchHandler(controller)  # type: ignore[arg-type]

    handler.dispatch(FileCreatedEvent("/site/a.html"))
    handler.dispatch(FileModifiedEvent("/site/a.html"))
    handler.dispatch(FileMovedEvent("/site/a.html", "/site/b.html"))
    handler.dispatch(FileDeletedEvent("/site/b.html"))
    handler.dispatch(DirCreatedEvent("/site/new"))

    assert controller.events == [
        ("add", "/site/a.html"),
        ("change", "/site/a.html"),
        ("unlink", "/site/a.html"),
        ("add", "/site/b.html"),
        ("unlink", "/site/b.html"),
    ]


def test_static_asset_handler_copies_images_only() -> None:
    copies: List[str] = []
    handler = StaticAssetHandler(lambda: copies.append("copy"))

    handler.dispatch(FileModifiedEvent("/site/website/assets/images/logo.png"))
    handler.dispatch(FileModifiedEvent("/site/website/assets/styles.css"))

    assert copies == ["copy"]


def test_live_reload_notifier_touches_trigger(tmp_path: Path) -> None:
    notifier = LiveReloadNotifier(tmp_path / ".bartleby" / "reload")

    notifier.notify()

    assert notifier.path.is_file()


class FakeObserver:
    def __init__(self) -> None:
        self.scheduled: List[Tuple[object, str]] = []
        self.stopped = False

    def schedule(self, handler, path: str, recursive: bool = False) -> None:
        self.scheduled.append((handler, path))

    def start(self) -> None:
        pass

    def stop(self) -> None:
        self.stopped = True

    def join(self) -> None:
        pass


class FakeServer:
    instances: List["FakeServer"] = []

    def __init__(self) -> None:
        self.watched: List[str] = []
        self.served: dict = {}
        FakeServer.instances.append(self)

    def watch(self, path: str) -> None:
        self.watched.append(path)

    def serve(self, **kwargs) -> None:
        self.served = kwargs


def test_serve_builds_then_watches_and_serves_output(
    site_builder: SiteBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    site_builder.write(
        {
            "website/includes/layout.html": "{{ content }}",
            "website/pages/index.html": "<h1>Home</h1>\n",
            "website/assets/images/logo.png": "png",
        }
    )
    observer = FakeObserver()
    monkeypatch.setattr("bartleby.watch.Observer", lambda: observer)
    monkeypatch.setattr("bartleby.watch.Server", FakeServer)
    FakeServer.instances.clear()

    serve(str(site_builder.root), orchestrator=Orchestrator(bundler=RecordingBundler()), port=4000)

    server = FakeServer.instances[0]
    trigger = site_builder.root / ".bartleby" / "reload"
    assert (site_builder.output / "index.html").read_text(encoding="utf-8") == "<h1>Home</h1>\n"
    assert server.watched == [str(trigger)]
    assert trigger.is_file()
    assert server.served == {"root": str(site_builder.output), "host": "localhost", "port": 4000}
    assert [path for _, path in observer.scheduled] == [
        str(site_builder.website),
        str(site_builder.website / "assets"),
    ]
    assert isinstance(observer.scheduled[0][0], WatchHandler)
    assert observer.stopped
