"""Generic registry for plugin-style class registration.

Output formats register themselves under a short key so that new
formats can be added without touching the CLI or the parser.

Example usage::

    renderer_registry = Registry("renderer")

    @renderer_registry.register("valgrind")
    class ValgrindRenderer(SuppressionRenderer):
        ...

    # Later, create an instance by key (e.g. from ``--format``)
    renderer = renderer_registry.create("valgrind")
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Type, TypeVar

T = TypeVar("T")


class Registry:
    """Map string keys to classes registered through a decorator."""

    def __init__(self, name: str = "registry") -> None:
        """Initialize the registry.

        Args:
            name: Human-readable name used in error messages.
        """
        self._name = name
        self._items: Dict[str, Type[Any]] = {}

    def register(self, key: str) -> Callable[[Type[T]], Type[T]]:
        """Decorator registering a class under ``key``.

        Raises:
            ValueError: If ``key`` is already taken.
        """
        def decorator(cls: Type[T]) -> Type[T]:
            if key in self._items:
                raise ValueError(
                    f"{self._name}: key '{key}' already registered "
                    f"to {self._items[key].__name__}"
                )
            self._items[key] = cls
            return cls
        return decorator

    def get(self, key: str) -> Type[Any]:
        """Return the class registered under ``key``.

        Raises:
            KeyError: If ``key`` is unknown; the message lists the
                available keys.
        """
        try:
            return self._items[key]
        except KeyError:
            available = ", ".join(sorted(self._items))
            raise KeyError(
                f"{self._name}: unknown key '{key}'. Available: {available}"
            ) from None

    def create(self, key: str, **kwargs: Any) -> Any:
        """Instantiate the class registered under ``key`` with ``kwargs``."""
        return self.get(key)(**kwargs)

    def keys(self) -> List[str]:
        """Registered keys in registration order (handy for argparse choices)."""
        return list(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
