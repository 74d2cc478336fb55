"""Conversion of scalar values between string, integer, float and boolean.

The conversion rules are deliberately strict and ordered:

- STRING: strings are returned unchanged, booleans become "true"/"false",
  anything else scalar goes through str().
- BOOLEAN: strings are trimmed; "0", "false" (any case), 0, 0.0 and False
  convert to False before the generic filter runs. The filter then accepts
  "1", "true", "yes", "on" (any case), 1, 1.0 and True as True and rejects
  everything else.
- INTEGER / FLOAT: strings are trimmed and must match a strict numeric
  literal; integral floats convert to int; True converts to 1, False is
  rejected.

A failed conversion always raises CoercionError; no sentinel value is ever
returned in place of a result.
"""

import math
import re
from enum import Enum
from typing import Any, Tuple, Union

from utilknobs_common.exceptions import CoercionError, ConfigurationError

from utilknobs_utils.messages import render_value

INT_RE = re.compile(r"^[+-]?(0|[1-9][0-9]*)$")
FLOAT_RE = re.compile(r"^[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?$")

TRUE_STRINGS = frozenset(("1", "true", "yes", "on"))


class ScalarType(Enum):
    """The scalar kinds a value can be converted to."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"

    @classmethod
    def lookup(cls, name: str) -> Union["ScalarType", None]:
        """Find the scalar type for a (case-insensitive) name or alias.

        Args:
            name: A type name such as "Integer", "INT", "bool" or "Str"

        Returns:
            The matching ScalarType, or None when the name is not a scalar type
        """
        if not isinstance(name, str):
            return None
        return _SCALAR_NAMES.get(name.strip().lower())


_SCALAR_NAMES = {
    "integer": ScalarType.INTEGER,
    "int": ScalarType.INTEGER,
    "float": ScalarType.FLOAT,
    "string": ScalarType.STRING,
    "str": ScalarType.STRING,
    "boolean": ScalarType.BOOLEAN,
    "bool": ScalarType.BOOLEAN,
}


def is_scalar_type_valid(scalar_type: str | ScalarType) -> bool:
    """Determine whether scalar_type names a known scalar type."""
    return isinstance(scalar_type, ScalarType) or ScalarType.lookup(scalar_type) is not None


def is_scalar(value: Any) -> bool:
    """Determine whether value is a str, int, float or bool."""
    return isinstance(value, (str, int, float, bool))


def _to_scalar_type(scalar_type: str | ScalarType) -> ScalarType:
    if isinstance(scalar_type, ScalarType):
        return scalar_type
    result = ScalarType.lookup(scalar_type)
    if result is None:
        raise ConfigurationError(
            f"Unknown scalar type '{scalar_type}'",
            context={"scalar_type": scalar_type, "known": sorted(_SCALAR_NAMES)},
        )
    return result


def _reject(value: Any, scalar_type: ScalarType) -> CoercionError:
    return CoercionError(
        f"Value {render_value(value)} couldn't be parsed to scalar type '{scalar_type.value}'",
        context={"value": value, "scalar_type": scalar_type.value},
    )


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    try:
        return str(value)
    except ValueError as e:
        raise _reject(value, ScalarType.STRING) from e


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value == "0" or value.lower() == "false":
            return False
        if value.lower() in TRUE_STRINGS:
            return True
        raise _reject(value, ScalarType.BOOLEAN)
    if value == 0:
        return False
    if value == 1:
        return True
    raise _reject(value, ScalarType.BOOLEAN)


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        if value:
            return 1
        raise _reject(value, ScalarType.INTEGER)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        raise _reject(value, ScalarType.INTEGER)
    if INT_RE.match(value):
        try:
            return int(value)
        except ValueError as e:
            # exceeds the int string conversion digit limit
            raise _reject(value, ScalarType.INTEGER) from e
    raise _reject(value, ScalarType.INTEGER)


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        if value:
            return 1.0
        raise _reject(value, ScalarType.FLOAT)
    try:
        if isinstance(value, int):
            return float(value)
        if isinstance(value, str):
            if not FLOAT_RE.match(value):
                raise _reject(value, ScalarType.FLOAT)
            value = float(value)
    except OverflowError as e:
        raise _reject(value, ScalarType.FLOAT) from e
    if not math.isfinite(value):
        raise _reject(value, ScalarType.FLOAT)
    return value


_CONVERTERS = {
    ScalarType.BOOLEAN: _to_boolean,
    ScalarType.INTEGER: _to_integer,
    ScalarType.FLOAT: _to_float,
}


def parse_scalar(value: Any, scalar_type: str | ScalarType) -> Any:
    """Convert a scalar value to the given scalar type.

    Args:
        value: The value to convert; must be a str, int, float or bool
        scalar_type: Target ScalarType or its name ("Integer", "int",
            "Float", "String", "Boolean", "bool", ...)

    Returns:
        The converted value

    Raises:
        ConfigurationError: If scalar_type is not a known scalar type
        CoercionError: If value is not a scalar or cannot be converted
    """
    target = _to_scalar_type(scalar_type)
    if not is_scalar(value):
        raise CoercionError(
            f"Value of type '{type(value).__name__}' is not a scalar",
            context={"value": value, "scalar_type": target.value},
        )
    if target is ScalarType.STRING:
        return _to_string(value)
    if isinstance(value, str):
        value = value.strip()
    return _CONVERTERS[target](value)


def try_parse_scalar(value: Any, scalar_type: str | ScalarType) -> Tuple[bool, Any]:
    """Convert a scalar value, reporting failure instead of raising.

    Configuration errors (an unknown scalar_type) still raise.

    Returns:
        (True, converted_value) on success, or (False, value) when the value
        could not be converted
    """
    try:
        return True, parse_scalar(value, scalar_type)
    except CoercionError:
        return False, value
