"""Canonical Valgrind suppression syntax.

The text produced here is what ``valgrind --suppressions=FILE`` reads
back: one brace-delimited block per record, body lines indented by
three spaces.  Kinds that were not interpreted by the parser are
written as ``?Tool:Category``.
"""

from __future__ import annotations

from typing import Iterable, Union

from ..model import Frame, Suppression, SuppressionKind, Suppressions
from .base import SuppressionRenderer, renderer_registry

Renderable = Union[Frame, SuppressionKind, Suppression, Suppressions]


def render(value: Renderable) -> str:
    """Return the canonical text of any model value.

    Frames and kinds render as a single line without a terminator, a
    :class:`Suppression` as one block without a trailing newline, and a
    :class:`Suppressions` collection as its blocks, each followed by a
    newline.

    Raises:
        TypeError: If ``value`` is not a model value.
    """
    if isinstance(value, (Frame, SuppressionKind, Suppression, Suppressions)):
        return str(value)
    raise TypeError(f"cannot render {type(value).__name__} as a suppression")


@renderer_registry.register("valgrind")
class ValgrindRenderer(SuppressionRenderer):
    """Render suppressions in the syntax Valgrind reads."""

    def render_suppressions(self, suppressions: Iterable[Suppression]) -> str:
        if not isinstance(suppressions, Suppressions):
            suppressions = Suppressions(suppressions)
        return render(suppressions)
