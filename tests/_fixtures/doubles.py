"""Recording test doubles for bartleby collaborators."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Set

from bartleby.content import SnippetContent
from bartleby.errors import BundleError


class RecordingBundler:
    """Bundler double returning deterministic source and recording calls."""

    def __init__(self, fail_on: Set[str] | None = None) -> None:
        self.calls: List[Dict[str, object]] = []
        self.fail_on = fail_on or set()
        self._lock = threading.Lock()

    def compile(self, entry: Path, *, defines=None, transforms=None) -> str:
        with self._lock:
            self.calls.append(
                {
                    "entry": entry,
                    "defines": dict(defines or {}),
                    "transforms": dict(transforms or {}),
                }
            )
        if entry.name in self.fail_on:
            raise BundleError(f"cannot bundle {entry.name}")
        source = entry.read_text(encoding="utf-8")
        for placeholder, replacement in (defines or {}).items():
            source = source.replace(placeholder, replacement)
        return f"/* bundled {entry.name} */\n{source}"

    def entries(self) -> List[str]:
        return sorted(call["entry"].name for call in self.calls)  # type: ignore[union-attr]


class RecordingSnippetSource:
    """Snippet source double counting fetches."""

    def __init__(self, snippets: Mapping[str, str]) -> None:
        self.snippets = dict(snippets)
        self.requests: List[Set[str]] = []

    def fetch_snippets(self, keys: Set[str]) -> List[SnippetContent]:
        self.requests.append(set(keys))
        return [SnippetContent(key=key, content=self.snippets[key]) for key in sorted(keys) if key in self.snippets]


class FakeTimer:
    """Timer handle that only fires when the test says so."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class FakeTimerFactory:
    """Collects every timer the controller arms."""

    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> List[FakeTimer]:
        return [timer for timer in self.timers if timer.started and not timer.cancelled]

    def fire_latest(self) -> None:
        self.timers[-1].fire()


__all__ = ["FakeTimer", "FakeTimerFactory", "RecordingBundler", "RecordingSnippetSource"]
