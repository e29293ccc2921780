"""Bundler collaborator and page-script bundling."""

from .bundler import (
    Bundler,
    EsbuildBundler,
    ScriptJob,
    Transform,
    bundle_page_scripts,
    wrap_as_factory,
)

__all__ = [
    "Bundler",
    "EsbuildBundler",
    "ScriptJob",
    "Transform",
    "bundle_page_scripts",
    "wrap_as_factory",
]
