"""Configuration loading for bartleby (bartleby.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "bartleby.yml"
_HANDLER_GROUP = "bartleby.handlers"


@dataclass
class SnippetConfig:
    """Where snippet content is fetched from at startup."""

    source: Optional[Path] = None
    url: Optional[str] = None


@dataclass
class BundlerConfig:
    """Bundler executable settings."""

    executable: str = "esbuild"
    output_format: str = "iife"


@dataclass
class ServeConfig:
    """Development server settings."""

    host: str = "localhost"
    port: int = 3000


@dataclass
class BartlebyConfig:
    """Represents the settings defined in bartleby.yml."""

    root: Path
    website_dir: Path
    pages_dir: Path
    includes_dir: Path
    output_dir: Path
    entry: Path
    default_layout: str = "layout"
    quiescence_ms: int = 100
    snippets: SnippetConfig = field(default_factory=SnippetConfig)
    bundler: BundlerConfig = field(default_factory=BundlerConfig)
    serve: ServeConfig = field(default_factory=ServeConfig)
    tags: Dict[str, str] = field(default_factory=dict)
    hooks: Dict[str, str] = field(default_factory=dict)

    @property
    def assets_dir(self) -> Path:
        return self.website_dir / "assets"

    @property
    def quiescence(self) -> float:
        return self.quiescence_ms / 1000.0


def default_config(root: Path) -> BartlebyConfig:
    root = root.resolve()
    website = root / "website"
    return BartlebyConfig(
        root=root,
        website_dir=website,
        pages_dir=website / "pages",
        includes_dir=website / "includes",
        output_dir=root / "dist",
        entry=website / "main.js",
    )


def load_config(config_path: Path) -> BartlebyConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    config = default_config(root)

    if not config_file.exists():
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    website_dir = _as_str(data.get("website_dir"))
    if website_dir:
        config.website_dir = root / website_dir
        config.pages_dir = config.website_dir / "pages"
        config.includes_dir = config.website_dir / "includes"
        config.entry = config.website_dir / "main.js"

    pages_dir = _as_str(data.get("pages_dir"))
    if pages_dir:
        config.pages_dir = root / pages_dir
    includes_dir = _as_str(data.get("includes_dir"))
    if includes_dir:
        config.includes_dir = root / includes_dir
    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = root / output_dir
    entry = _as_str(data.get("entry"))
    if entry:
        config.entry = config.website_dir / entry

    config.default_layout = _as_str(data.get("default_layout")) or config.default_layout
    quiescence = _as_int(data.get("quiescence_ms"))
    if quiescence is not None and quiescence >= 0:
        config.quiescence_ms = quiescence

    snippet_data = _as_dict(data.get("snippets"))
    if snippet_data:
        source = _as_str(snippet_data.get("source"))
        config.snippets = SnippetConfig(
            source=root / source if source else None,
            url=_as_str(snippet_data.get("url")),
        )

    bundler_data = _as_dict(data.get("bundler"))
    if bundler_data:
        config.bundler = BundlerConfig(
            executable=_as_str(bundler_data.get("executable")) or config.bundler.executable,
            output_format=_as_str(bundler_data.get("format")) or config.bundler.output_format,
        )

    serve_data = _as_dict(data.get("serve"))
    if serve_data:
        config.serve = ServeConfig(
            host=_as_str(serve_data.get("host")) or config.serve.host,
            port=_as_int(serve_data.get("port")) or config.serve.port,
        )

    config.tags = _as_str_map(data.get("tags"))
    config.hooks = _as_str_map(data.get("hooks"))
    return config


def load_handler(name: str, reference: str) -> Callable[..., Any]:
    """Import a ``module:attribute`` handler reference."""
    if ":" not in reference:
        raise ConfigError(f'Handler "{name}" must be given as "module:attribute", got "{reference}"')
    entry = metadata.EntryPoint(name=name, value=reference, group=_HANDLER_GROUP)
    try:
        loaded = entry.load()
    except (ImportError, AttributeError, ValueError) as exc:
        raise ConfigError(f'Failed to load handler "{name}" from {reference}: {exc}') from exc
    if not callable(loaded):
        raise ConfigError(f'Handler "{name}" ({reference}) is not callable')
    return loaded


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_map(value: Any) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for key, item in _as_dict(value).items():
        text = _as_str(item)
        if text:
            result[str(key)] = text
    return result


__all__ = [
    "BartlebyConfig",
    "BundlerConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "ServeConfig",
    "SnippetConfig",
    "default_config",
    "load_config",
    "load_handler",
]
