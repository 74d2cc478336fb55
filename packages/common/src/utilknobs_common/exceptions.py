"""Common exception hierarchy for all utilknobs packages.

Every error raised by the checking and access engine derives from
``UtilknobsError`` and carries an optional context dictionary with the
structured details of the failure (parameter names, offending values, the
type tokens that were tried, ...).

The hierarchy separates three kinds of failure:
- ``ConfigurationError``: a programming mistake (malformed identifier, unknown
  class token, bad argument kinds). Always propagated.
- ``ValidationError``: the supplied data does not have the expected shape.
- ``OperationError``: an operation such as reading or writing a property path
  could not be carried out.

Example:
    ```python
    from utilknobs_common.exceptions import TypeCheckError

    try:
        check("mode", value, "NullOrIntOrBool")
    except TypeCheckError as e:
        logger.error("Bad mode: %s", e)
        logger.error("Attempted: %s", e.context["attempted"])
    ```
"""

from typing import Any, Dict


class UtilknobsError(Exception):
    """Base exception for all utilknobs packages.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (parameter, value, ...)
        details: Alternative to context (both are supported for compatibility)

    Example:
        ```python
        error = UtilknobsError(
            "Operation failed",
            context={"operation": "read", "path": "[a][b]"}
        )
        str(error)
        # 'Operation failed'
        error.context
        # {'operation': 'read', 'path': '[a][b]'}
        ```
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize the exception with optional context.

        Args:
            message: Error message
            context: Optional context dictionary
            details: Optional details dictionary (takes precedence over context)
        """
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(UtilknobsError):
    """Raised when a value fails validation.

    Example:
        ```python
        raise ValidationError(
            "Value is empty",
            context={"parameter": "name", "value": ""}
        )
        ```
    """

    pass


class CoercionError(ValidationError):
    """Raised when a scalar value cannot be converted to a requested scalar type.

    The context holds the ``value`` that was supplied and the ``scalar_type``
    it was being converted to.
    """

    pass


class TypeCheckError(ValidationError):
    """Raised when a parameter does not satisfy any of its expected types.

    The context holds the ``parameter`` name, the supplied ``value``, the
    human-readable names of every ``attempted`` type and the optional
    ``caller`` label.
    """

    pass


class ConfigurationError(UtilknobsError):
    """Raised when the engine is used incorrectly.

    Configuration errors indicate a programming mistake rather than bad input
    data, for example:
    - A malformed validator identifier such as ``"OrInt"``
    - A class token that cannot be resolved
    - An unknown scalar type name
    - A malformed property path

    Example:
        ```python
        raise ConfigurationError(
            "Unknown type token",
            context={"token": "Foo", "identifier": "NullOrFoo"}
        )
        ```
    """

    pass


class NotFoundError(UtilknobsError):
    """Raised when a requested item is not found.

    Example:
        ```python
        raise NotFoundError(
            "Item not found",
            context={"key": "array", "registry": "predicates"}
        )
        ```
    """

    pass


class ClassNotFoundError(NotFoundError):
    """Raised when a class name cannot be resolved to a class."""

    pass


class OperationError(UtilknobsError):
    """Raised when an operation fails.

    Example:
        ```python
        raise OperationError(
            "Item already registered",
            context={"key": "array", "registry": "predicates"}
        )
        ```
    """

    pass


class PropertyAccessError(OperationError):
    """Raised when no strategy could read or write a property path.

    The original failure is chained as ``__cause__``.
    """

    pass


class NoSuchPropertyError(PropertyAccessError):
    """Raised when a container has no readable or writable member for a path segment."""

    pass


__all__ = [
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
]
