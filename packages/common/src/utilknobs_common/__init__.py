"""Common utilities and base classes for utilknobs packages.

This package provides shared functionality used across all utilknobs packages:

- **Exceptions**: Unified exception hierarchy with context support
- **Registry**: Thread-safe registries for named items and memoised values

Example:
    ```python
    from utilknobs_common import ConfigurationError, MemoRegistry

    cache = MemoRegistry[str]("names")
    cache.get_or_create("key", lambda: "value")

    raise ConfigurationError("Unknown token", context={"token": "Foo"})
    ```
"""

from utilknobs_common.exceptions import (
    ClassNotFoundError,
    CoercionError,
    ConfigurationError,
    NoSuchPropertyError,
    NotFoundError,
    OperationError,
    PropertyAccessError,
    TypeCheckError,
    UtilknobsError,
    ValidationError,
)
from utilknobs_common.registry import MemoRegistry, Registry

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "UtilknobsError",
    "ValidationError",
    "CoercionError",
    "TypeCheckError",
    "ConfigurationError",
    "NotFoundError",
    "ClassNotFoundError",
    "OperationError",
    "PropertyAccessError",
    "NoSuchPropertyError",
    # Registry
    "Registry",
    "MemoRegistry",
]
