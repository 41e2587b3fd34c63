"""Base renderer class and registry.

This module defines the abstract :class:`SuppressionRenderer`
interface and the ``renderer_registry`` through which concrete output
formats are looked up by name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ..model import Suppression
from ..registry import Registry

# Registry for renderer implementations
renderer_registry = Registry("renderer")


class SuppressionRenderer(ABC):
    """Abstract base class for rendering a set of suppressions."""

    @abstractmethod
    def render_suppressions(self, suppressions: Iterable[Suppression]) -> str:
        """Render suppressions in this renderer's format.

        Args:
            suppressions: Iterable of :class:`Suppression` objects,
                typically a :class:`vgsupp.model.Suppressions`.

        Returns:
            The complete formatted document.
        """
        raise NotImplementedError
