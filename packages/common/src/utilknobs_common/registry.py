"""Registries for named items and memoised values.

This module provides the two registry flavours the utilknobs packages share:

- ``Registry``: a thread-safe mapping of unique keys to items, used for the
  extensible lookup tables (built-in type predicates, class aliases).
- ``MemoRegistry``: a registry that builds missing items on demand from a
  factory and keeps them for the lifetime of the process, used for values
  that are pure functions of their key (parsed type specs, reflected classes).

Example:
    ```python
    from utilknobs_common.registry import MemoRegistry, Registry

    predicates = Registry[Callable[[Any], bool]]("predicates")
    predicates.register("array", lambda v: isinstance(v, (list, tuple, dict)))

    specs = MemoRegistry[CompositeTypeSpec]("type_specs")
    spec = specs.get_or_create("NullOrInt", lambda: _parse("NullOrInt"))
    ```
"""

import threading
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterator,
    List,
    TypeVar,
)

from utilknobs_common.exceptions import NotFoundError, OperationError

T = TypeVar("T")


class Registry(Generic[T]):
    """Thread-safe registry of items by unique key.

    Attributes:
        name: Name of the registry (for logging/debugging)

    Example:
        ```python
        registry = Registry[str]("my_registry")
        registry.register("key1", "value1")
        registry.get("key1")
        # 'value1'
        registry.count()
        # 1
        ```
    """

    def __init__(self, name: str):
        """Initialize the registry.

        Args:
            name: Registry name for identification
        """
        self._name = name
        self._items: Dict[str, T] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        """Get registry name."""
        return self._name

    def register(self, key: str, item: T, allow_overwrite: bool = False) -> None:
        """Register an item by key.

        Args:
            key: Unique identifier for the item
            item: Item to register
            allow_overwrite: Whether to allow overwriting existing items

        Raises:
            OperationError: If item already exists and allow_overwrite is False
        """
        with self._lock:
            if not allow_overwrite and key in self._items:
                raise OperationError(
                    f"Item '{key}' already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._items[key] = item

    def unregister(self, key: str) -> T:
        """Unregister and return an item by key.

        Raises:
            NotFoundError: If item not found
        """
        with self._lock:
            if key not in self._items:
                raise NotFoundError(
                    f"Item not found: {key}",
                    context={"key": key, "registry": self._name},
                )
            return self._items.pop(key)

    def get(self, key: str) -> T:
        """Get an item by key.

        Raises:
            NotFoundError: If item not found
        """
        with self._lock:
            if key not in self._items:
                raise NotFoundError(
                    f"Item not found: {key}",
                    context={
                        "key": key,
                        "registry": self._name,
                        "available_keys": list(self._items.keys()),
                    },
                )
            return self._items[key]

    def get_optional(self, key: str) -> T | None:
        """Get an item by key, returning None if not found."""
        with self._lock:
            return self._items.get(key)

    def has(self, key: str) -> bool:
        """Check if item exists."""
        with self._lock:
            return key in self._items

    def list_keys(self) -> List[str]:
        """List all registered keys in registration order."""
        with self._lock:
            return list(self._items.keys())

    def count(self) -> int:
        """Get count of registered items."""
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        """Clear all items from registry."""
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[T]:
        with self._lock:
            return iter(list(self._items.values()))


class MemoRegistry(Registry[T]):
    """Registry that creates missing items on first use and keeps them.

    Items never expire: a memo registry is meant for values that are pure
    functions of their key. The factory runs outside the registry lock, so two
    threads missing the same key at the same time may both build the item; the
    last one stored wins, which is harmless because both are equivalent.

    Example:
        ```python
        memo = MemoRegistry[int]("lengths")
        memo.get_or_create("abc", lambda: len("abc"))
        # 3
        memo.get_stats()
        # {'name': 'lengths', 'size': 1, 'hits': 0, 'misses': 1}
        ```
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._hits = 0
        self._misses = 0

    def get_or_create(self, key: str, factory: Callable[[], T]) -> T:
        """Get the item for a key, building it with factory on a miss.

        Exceptions raised by the factory propagate and nothing is stored.

        Args:
            key: Memo key
            factory: Callable that creates the item if not present

        Returns:
            The memoised or newly created item
        """
        with self._lock:
            if key in self._items:
                self._hits += 1
                return self._items[key]
            self._misses += 1

        item = factory()
        with self._lock:
            self._items[key] = item
        return item

    def invalidate(self, key: str | None = None) -> None:
        """Drop one memoised item, or all of them when key is None."""
        with self._lock:
            if key is None:
                self._items.clear()
            else:
                self._items.pop(key, None)

    def get_stats(self) -> Dict[str, Any]:
        """Get memo statistics.

        Returns:
            Dictionary with the registry name, size, hits and misses
        """
        with self._lock:
            return {
                "name": self._name,
                "size": len(self._items),
                "hits": self._hits,
                "misses": self._misses,
            }


__all__ = ["Registry", "MemoRegistry"]
