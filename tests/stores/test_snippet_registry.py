"""Tests for the snippet registry."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bartleby.stores import SnippetRegistry
from tests._fixtures.doubles import RecordingSnippetSource


def test_register_keys_is_idempotent() -> None:
    registry = SnippetRegistry()
    registry.register_keys(["a", "b"])
    registry.register_keys(["a", ""])

    assert registry.known_keys == {"a", "b"}


def test_resolve_all_fetches_once() -> None:
    registry = SnippetRegistry()
    registry.register_keys(["hero"])
    source = RecordingSnippetSource({"hero": "<h1>Hello</h1>", "unused": "x"})

    first = registry.resolve_all(source)
    registry.register_keys(["late"])
    second = registry.resolve_all(source)

    assert first == {"hero": "<h1>Hello</h1>"}
    assert second == first
    assert source.requests == [{"hero"}]
    assert registry.fetched is True


def test_lookup_returns_resolved_content() -> None:
    registry = SnippetRegistry()
    registry.register_keys(["hero"])
    registry.resolve_all(RecordingSnippetSource({"hero": "Hi"}))

    assert registry.lookup("hero", referrer="index.html") == "Hi"


def test_unknown_key_logs_referrer_and_returns_empty(caplog: pytest.LogCaptureFixture) -> None:
    registry = SnippetRegistry()
    registry.resolve_all(RecordingSnippetSource({}))
    referrer = Path("/site/website/pages/about/about.html")

    with caplog.at_level(logging.WARNING, logger="bartleby"):
        value = registry.lookup("missing-key", referrer=referrer)

    assert value == ""
    messages = [record.getMessage() for record in caplog.records]
    assert len(messages) == 1
    assert "missing-key" in messages[0]
    assert str(referrer) in messages[0]


def test_key_registered_after_startup_stays_unresolved(caplog: pytest.LogCaptureFixture) -> None:
    registry = SnippetRegistry()
    registry.resolve_all(RecordingSnippetSource({"late": "content"}))
    registry.register_keys(["late"])

    with caplog.at_level(logging.WARNING, logger="bartleby"):
        assert registry.lookup("late", referrer="page.html") == ""

    assert "fetched once" in caplog.text
