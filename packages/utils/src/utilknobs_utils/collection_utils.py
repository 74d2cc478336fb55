"""Utility functions for working with collections of heterogeneous items.

Items are read through property_access, so the same path works whether an
item is an object, a mapping or a sequence.
"""

from typing import Any, Callable, Dict, Iterable, List, TypeVar

from utilknobs_utils.property_access import PathLike, get_value

T = TypeVar("T")


def first_or_default(items: Iterable[T], predicate: Callable[[T], bool], default: Any = None) -> Any:
    """Get the first item satisfying predicate, or default if none does."""
    for item in items:
        if predicate(item):
            return item
    return default


def select(items: Iterable[Any], path: PathLike) -> List[Any]:
    """Project each item through a property path.

    Args:
        items: Objects, mappings or sequences
        path: Path (or callable) applied to each item

    Returns:
        The values at path, in item order

    Raises:
        PropertyAccessError: If an item has no readable value at path
    """
    return [get_value(item, path) for item in items]


def order_by(items: Iterable[T], path: PathLike, descending: bool = False) -> List[T]:
    """Sort items by the value at a property path.

    The sort is stable. Values are compared as read, so strings holding
    numbers sort as strings. None sorts before every other value in
    ascending order.

    Raises:
        PropertyAccessError: If an item has no readable value at path
        TypeError: If the values at path cannot be compared with each other
    """
    def sort_key(item: T) -> Any:
        value = get_value(item, path)
        return (value is not None, value)

    return sorted(items, key=sort_key, reverse=descending)


def group_by(items: Iterable[T], path: PathLike) -> Dict[Any, List[T]]:
    """Group items by the value at a property path.

    Groups appear in the order their keys are first seen, and items keep
    their relative order within a group.
    """
    groups: Dict[Any, List[T]] = {}
    for item in items:
        groups.setdefault(get_value(item, path), []).append(item)
    return groups
