"""Static site builder with a pre-rendered client-side router."""

from .models import BuildResult, Page, PageRouteMeta, RouteEntry, RouteManifest
from .orchestrator import Orchestrator

__all__ = [
    "BuildResult",
    "Orchestrator",
    "Page",
    "PageRouteMeta",
    "RouteEntry",
    "RouteManifest",
]

__version__ = "0.1.0"
