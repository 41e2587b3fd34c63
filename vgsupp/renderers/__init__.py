"""Renderer implementations for suppression output.

This package contains the available output formats:
- valgrind: canonical suppression syntax, re-readable by Valgrind
- csv: one row per suppression, continuation rows for extra frames
- html: standalone HTML page with collapsible suppressions

All renderers are automatically registered via decorators.
"""

from .base import SuppressionRenderer, renderer_registry
from .valgrind import ValgrindRenderer, render
from .csv import CsvRenderer
from .html import HtmlRenderer

__all__ = [
    "SuppressionRenderer",
    "renderer_registry",
    "ValgrindRenderer",
    "CsvRenderer",
    "HtmlRenderer",
    "render",
]
