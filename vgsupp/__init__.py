"""Top level package for the Valgrind suppressions library.

This package reads, models and writes the suppression files consumed
by Valgrind's ``--suppressions`` option.  It does not match
suppressions against stack traces; it only parses, models and prints
them.

Key concepts:

* **Model classes** represent frames, suppression kinds, single
  suppressions and ordered collections.  See :mod:`vgsupp.model`.
* **Parser** turns suppression text into a collection, failing on
  the first malformed line.  See :mod:`vgsupp.parser`.
* **Renderers** provide pluggable output formats (Valgrind, CSV,
  HTML).  See :mod:`vgsupp.renderers`.
* **Registry** enables decorator-based plugin registration.
  See :mod:`vgsupp.registry`.
"""

from .model import (
    Frame,
    FrameWildcard,
    ObjFrame,
    FunFrame,
    SuppressionKind,
    MemcheckKind,
    MemcheckAddr,
    MemcheckCond,
    MemcheckFree,
    MemcheckLeak,
    MemcheckOverlap,
    MemcheckParam,
    MemcheckValue,
    OtherKind,
    Suppression,
    Suppressions,
    resolve_kind,
)

from .errors import SuppressionParseError
from .parser import SuppressionParser, parse
from .registry import Registry
from .renderers import SuppressionRenderer, ValgrindRenderer, CsvRenderer, HtmlRenderer, renderer_registry, render

__all__ = [
    "Frame",
    "FrameWildcard",
    "ObjFrame",
    "FunFrame",
    "SuppressionKind",
    "MemcheckKind",
    "MemcheckAddr",
    "MemcheckCond",
    "MemcheckFree",
    "MemcheckLeak",
    "MemcheckOverlap",
    "MemcheckParam",
    "MemcheckValue",
    "OtherKind",
    "Suppression",
    "Suppressions",
    "resolve_kind",
    "SuppressionParseError",
    "SuppressionParser",
    "parse",
    "Registry",
    "SuppressionRenderer",
    "ValgrindRenderer",
    "CsvRenderer",
    "HtmlRenderer",
    "renderer_registry",
    "render",
]
