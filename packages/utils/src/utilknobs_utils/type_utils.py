"""Evaluation of a value against a single type token.

A type token names one kind a value may satisfy. Tokens are resolved, in
order, as:

1. a scalar type ("Integer", "Int", "Float", "String", "Bool", ...), which
   converts the value with scalar_utils.parse_scalar;
2. a registered predicate ("Array", "Callable", "Null", "Object", ...),
   which tests the value without converting it;
3. a class, given directly or by name (see reflection_utils.resolve_class),
   which accepts instances of the class and of its subclasses.

A token that resolves to none of these is a ConfigurationError, never a
rejection of the value.
"""

from collections.abc import Iterable, Mapping, Sized
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Tuple, Union

from utilknobs_common.exceptions import ClassNotFoundError, ConfigurationError
from utilknobs_common.registry import Registry

from utilknobs_utils import reflection_utils
from utilknobs_utils.scalar_utils import FLOAT_RE, ScalarType, is_scalar, try_parse_scalar
from utilknobs_utils.string_utils import is_null_or_whitespace

Predicate = Callable[[Any], bool]

CONTAINER_TYPES = (list, tuple, dict, set, frozenset, bytes, bytearray)


class TokenKind(Enum):
    SCALAR = "scalar"
    PREDICATE = "predicate"
    CLASS = "class"


@dataclass(frozen=True)
class TypeToken:
    """A type token resolved to its evaluation strategy.

    Attributes:
        name: The token as written ("Int", "Array", "datetime.datetime")
        kind: Which evaluation strategy applies
        target: The ScalarType, predicate function or class for the strategy
    """

    name: str
    kind: TokenKind
    target: Any

    @property
    def display_name(self) -> str:
        """Human-readable name used in diagnostics."""
        if self.kind is TokenKind.CLASS:
            return reflection_utils.qualified_name(self.target)
        return self.name.lower()


@dataclass(frozen=True)
class Accepted:
    """The value satisfied the token; value is the (possibly converted) value."""

    value: Any

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """The value satisfied none of the attempted tokens; value is the original value."""

    attempted: Tuple[TypeToken, ...]
    value: Any

    @property
    def accepted(self) -> bool:
        return False


ValidationOutcome = Union[Accepted, Rejected]


def is_empty(value: Any) -> bool:
    """Determine whether a value counts as empty.

    Empty values are None, False, numeric zero, "" and "0", and sized
    containers with no items. Everything else (including objects that do not
    define a length) is non-empty.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value in ("", "0")
    if isinstance(value, (bool, int, float)):
        return value == 0
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and FLOAT_RE.match(value.strip()) is not None


def _is_object(value: Any) -> bool:
    return value is not None and not is_scalar(value) and not isinstance(value, CONTAINER_TYPES)


BUILTIN_PREDICATES: Dict[str, Predicate] = {
    "array": lambda v: isinstance(v, (list, tuple, Mapping)),
    "list": lambda v: isinstance(v, list),
    "tuple": lambda v: isinstance(v, tuple),
    "dict": lambda v: isinstance(v, Mapping),
    "set": lambda v: isinstance(v, (set, frozenset)),
    "callable": callable,
    "null": lambda v: v is None,
    "none": lambda v: v is None,
    "object": _is_object,
    "numeric": _is_numeric,
    "iterable": lambda v: isinstance(v, Iterable),
    "scalar": is_scalar,
    "countable": lambda v: isinstance(v, Sized),
    "bytes": lambda v: isinstance(v, (bytes, bytearray)),
    "class": lambda v: isinstance(v, type),
}


def _build_predicate_registry() -> Registry[Predicate]:
    registry: Registry[Predicate] = Registry("type_predicates")
    for name, predicate in BUILTIN_PREDICATES.items():
        registry.register(name, predicate)
    return registry


_predicates = _build_predicate_registry()


def register_predicate(name: str, predicate: Predicate, allow_overwrite: bool = False) -> None:
    """Register a named predicate usable as a type token.

    Names are case-insensitive. Scalar type names cannot be registered,
    because scalar tokens always take precedence.

    Raises:
        ConfigurationError: If name is blank or names a scalar type
        OperationError: If the name is taken and allow_overwrite is False
    """
    if is_null_or_whitespace(name) or ScalarType.lookup(name) is not None:
        raise ConfigurationError(
            f"'{name}' cannot be used as a predicate name",
            context={"name": name},
        )
    _predicates.register(name.strip().lower(), predicate, allow_overwrite=allow_overwrite)


def unregister_predicate(name: str) -> Predicate:
    return _predicates.unregister(name.strip().lower())


def resolve_token(token: str | type | TypeToken) -> TypeToken:
    """Resolve a token name (or class) to its evaluation strategy.

    Raises:
        ConfigurationError: If the token is blank or does not resolve
    """
    if isinstance(token, TypeToken):
        return token
    if isinstance(token, type):
        return TypeToken(token.__name__, TokenKind.CLASS, token)
    if not isinstance(token, str) or is_null_or_whitespace(token):
        raise ConfigurationError(
            "A type token must be a class or a non-blank name",
            context={"token": token},
        )

    name = token.strip()
    scalar_type = ScalarType.lookup(name)
    if scalar_type is not None:
        return TypeToken(name, TokenKind.SCALAR, scalar_type)
    predicate = _predicates.get_optional(name.lower())
    if predicate is not None:
        return TypeToken(name, TokenKind.PREDICATE, predicate)
    try:
        cls = reflection_utils.resolve_class(name)
    except ClassNotFoundError as e:
        raise ConfigurationError(
            f"Type token '{name}' is neither a scalar type, a known predicate nor a class",
            context={"token": name},
        ) from e
    return TypeToken(name, TokenKind.CLASS, cls)


def evaluate(value: Any, token: str | type | TypeToken) -> ValidationOutcome:
    """Check a value against a single type token.

    Args:
        value: The value to check
        token: Token name, class, or already resolved TypeToken

    Returns:
        Accepted with the converted value for scalar tokens (the value itself
        otherwise), or Rejected with the token and the original value

    Raises:
        ConfigurationError: If the token does not resolve
    """
    resolved = resolve_token(token)
    if resolved.kind is TokenKind.SCALAR:
        ok, result = try_parse_scalar(value, resolved.target)
        return Accepted(result) if ok else Rejected((resolved,), value)
    if resolved.kind is TokenKind.PREDICATE:
        matched = resolved.target(value)
    else:
        matched = isinstance(value, resolved.target)
    return Accepted(value) if matched else Rejected((resolved,), value)
