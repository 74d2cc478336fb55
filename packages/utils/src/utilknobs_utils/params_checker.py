"""Parameter checks driven by type tokens and validator identifiers.

The central operation is ``check``, which asserts that a value satisfies at
least one of the alternatives named by a validator identifier:

    ```python
    from utilknobs_utils import params_checker as pc

    mode = pc.check("mode", mode, "NullOrIntOrBool", caller="Job.run")
    name = pc.check("name", name, "NotEmptyString")
    ```

Alternatives are tried in the order they are written and the first one that
accepts the value wins. Scalar alternatives convert the value, so callers
should always use the returned value: ``check("p", "5", "StringOrInt")``
returns the string "5", while ``check("p", "5", "IntOrString")`` returns 5.

When no alternative accepts the value a TypeCheckError is raised listing
every alternative that was attempted. Identifiers or tokens that cannot be
resolved raise ConfigurationError instead.

The module also provides the simpler checks that accompany type checks in
argument validation: emptiness, counts, lengths, ranges and membership.
"""

import logging
from collections.abc import Iterable, Sequence, Sized
from typing import Any, List, Tuple

from utilknobs_common.exceptions import (
    ClassNotFoundError,
    ConfigurationError,
    TypeCheckError,
)

from utilknobs_utils import reflection_utils
from utilknobs_utils.messages import create_error, render_value
from utilknobs_utils.string_utils import is_null_or_whitespace, join_words
from utilknobs_utils.type_spec import CompositeTypeSpec, parse_type_spec
from utilknobs_utils.type_utils import (
    Accepted,
    Rejected,
    TokenKind,
    TypeToken,
    ValidationOutcome,
    evaluate,
    is_empty,
    resolve_token,
)

logger = logging.getLogger(__name__)

Alternative = Tuple[TypeToken, bool]

ONE_OF_TEMPLATE = (
    "Parameter {parameter} is expected to be one of these types: {types}. "
    "Value passed to {parameter}: {value}"
)
SINGLE_TYPE_TEMPLATE = "Parameter {parameter} is expected to be a(n) {type}. Value passed to {parameter}: {value}"
INSTANCE_TEMPLATE = (
    "Parameter {parameter} is expected to be an instance of a class '{type}'. "
    "Value passed to {parameter}: {value}"
)


def _require_parameter_name(parameter: str) -> None:
    if not isinstance(parameter, str) or is_null_or_whitespace(parameter):
        raise ConfigurationError(
            "Parameter name cannot be None, empty or whitespace",
            context={"parameter": parameter},
        )


def _describe(alternative: Alternative) -> str:
    token, require_non_empty = alternative
    return f"non empty {token.display_name}" if require_non_empty else token.display_name


def dispatch(value: Any, alternatives: Sequence[Alternative]) -> ValidationOutcome:
    """Try alternatives in order and return the first acceptance.

    Args:
        value: The value to check
        alternatives: (token, require_non_empty) pairs in try-order

    Returns:
        Accepted with the converted value from the first alternative that
        accepts the value (and, when required, finds it non-empty), or
        Rejected with every attempted token and the original value
    """
    for token, require_non_empty in alternatives:
        outcome = evaluate(value, token)
        if isinstance(outcome, Accepted):
            if not require_non_empty or not is_empty(outcome.value):
                return outcome
            logger.debug("Value of type %s accepted as %s but is empty", type(value).__name__, token.display_name)
        else:
            logger.debug("Value of type %s rejected as %s", type(value).__name__, token.display_name)
    return Rejected(tuple(token for token, _ in alternatives), value)


def _raise_one_of(
    parameter: str, value: Any, alternatives: Sequence[Alternative], caller: str | None, types: str
) -> None:
    raise create_error(
        parameter,
        ONE_OF_TEMPLATE,
        caller=caller,
        context={"value": value, "attempted": [_describe(alt) for alt in alternatives]},
        types=types,
        value=render_value(value),
    )


def check(
    parameter: str,
    value: Any,
    spec: str | CompositeTypeSpec,
    caller: str | None = None,
) -> Any:
    """Check a value against a validator identifier or parsed type spec.

    Args:
        parameter: Name of the parameter being checked (for messages)
        value: The value to check
        spec: Validator identifier such as "NotEmptyStringOrInt" (an "is"
            prefix is allowed) or an already parsed CompositeTypeSpec
        caller: Optional label of the calling function for messages

    Returns:
        The value as converted by the first accepting alternative

    Raises:
        TypeCheckError: If no alternative accepts the value
        ConfigurationError: If the identifier is malformed or names an
            unknown type
    """
    _require_parameter_name(parameter)
    composite = spec if isinstance(spec, CompositeTypeSpec) else parse_type_spec(spec)
    alternatives = [(resolve_token(entry.token), entry.require_non_empty) for entry in composite]
    outcome = dispatch(value, alternatives)
    if isinstance(outcome, Rejected):
        _raise_one_of(parameter, value, alternatives, caller, ", ".join(_describe(alt) for alt in alternatives))
    return outcome.value


def check_type(parameter: str, value: Any, token: str | type, caller: str | None = None) -> Any:
    """Check a value against a single type token.

    Args:
        parameter: Name of the parameter being checked
        value: The value to check
        token: Scalar type name, predicate name, class name or class

    Returns:
        The (possibly converted) value

    Raises:
        TypeCheckError: If the value does not satisfy the token
        ConfigurationError: If the token cannot be resolved
    """
    _require_parameter_name(parameter)
    resolved = resolve_token(token)
    outcome = evaluate(value, resolved)
    if isinstance(outcome, Rejected):
        template = INSTANCE_TEMPLATE if resolved.kind is TokenKind.CLASS else SINGLE_TYPE_TEMPLATE
        raise create_error(
            parameter,
            template,
            caller=caller,
            context={"value": value, "attempted": [resolved.display_name]},
            type=resolved.display_name,
            value=render_value(value),
        )
    return outcome.value


def check_any_of(
    parameter: str,
    value: Any,
    tokens: Sequence[str | type],
    caller: str | None = None,
) -> Any:
    """Check a value against a list of type tokens, first match wins.

    Raises:
        TypeCheckError: If no token accepts the value
        ConfigurationError: If tokens is empty or contains an unknown token
    """
    _require_parameter_name(parameter)
    if isinstance(tokens, (str, type)) or not tokens:
        raise ConfigurationError(
            "A non-empty list of type tokens is required",
            context={"parameter": parameter, "tokens": tokens},
        )
    alternatives = [(resolve_token(token), False) for token in tokens]
    outcome = dispatch(value, alternatives)
    if isinstance(outcome, Rejected):
        names = [_describe(alt) for alt in alternatives]
        _raise_one_of(parameter, value, alternatives, caller, join_words(names, ", ", " or "))
    return outcome.value


def not_whitespace_or_none(parameter: str, value: Any, caller: str | None = None) -> None:
    """Require a string that is not empty and not only whitespace."""
    _require_parameter_name(parameter)
    if not isinstance(value, str) or is_null_or_whitespace(value):
        raise create_error(
            parameter,
            'Parameter {parameter} cannot be None or an empty string ("") and cannot consist '
            "only of white-space characters. Value passed to {parameter}: {value}",
            caller=caller,
            context={"value": value},
            value=render_value(value),
        )


def not_empty(parameter: str, value: Any, caller: str | None = None) -> None:
    """Require a value that is not empty (see type_utils.is_empty)."""
    _require_parameter_name(parameter)
    if is_empty(value):
        raise create_error(
            parameter,
            "Parameter {parameter} is empty. Value passed to {parameter}: {value}",
            caller=caller,
            context={"value": value},
            value=render_value(value),
        )


def class_exists(parameter: str, value: Any, caller: str | None = None) -> None:
    """Require a value that names an existing class."""
    _require_parameter_name(parameter)
    not_whitespace_or_none(parameter, value, caller=caller)
    if not reflection_utils.class_exists(value):
        raise create_error(
            parameter,
            "Passed value to {parameter} is not a valid class name. Value passed to {parameter}: {value}",
            caller=caller,
            context={"value": value},
            value=render_value(value),
        )


def is_instance_of(parameter: str, value: Any, cls: str | type, caller: str | None = None) -> None:
    """Require an instance of cls or of one of its subclasses.

    Raises:
        TypeCheckError: If value is not such an instance
        ConfigurationError: If cls does not name an existing class
    """
    _require_parameter_name(parameter)
    try:
        resolved = reflection_utils.resolve_class(cls)
    except ClassNotFoundError as e:
        raise ConfigurationError(f"'{cls}' is not a valid class name", context={"class_name": cls}) from e
    if not isinstance(value, resolved):
        raise create_error(
            parameter,
            INSTANCE_TEMPLATE,
            caller=caller,
            context={"value": value, "attempted": [reflection_utils.qualified_name(resolved)]},
            type=reflection_utils.qualified_name(resolved),
            value=render_value(value),
        )


def _check_bounds(
    parameter: str,
    value: Any,
    actual: Any,
    minimum: Any,
    maximum: Any,
    phrases: Tuple[str, str, str],
    suffix: str,
    caller: str | None,
) -> None:
    if minimum is None and maximum is None:
        raise ConfigurationError(
            "Minimum and maximum cannot both be None",
            context={"parameter": parameter},
        )
    at_most, at_least, between = phrases
    if minimum is None:
        phrase = at_most if actual > maximum else None
    elif maximum is None:
        phrase = at_least if actual < minimum else None
    else:
        phrase = between if actual < minimum or actual > maximum else None
    if phrase is None:
        return
    raise create_error(
        parameter,
        f"Parameter {{parameter}} is expected to {phrase}. {suffix}",
        caller=caller,
        context={"value": value, "actual": actual, "minimum": minimum, "maximum": maximum},
        minimum=minimum,
        maximum=maximum,
        actual=actual,
        value=render_value(value),
    )


def count(
    parameter: str,
    value: Iterable,
    min_count: int | None = None,
    max_count: int | None = None,
    caller: str | None = None,
) -> None:
    """Require the number of items in value to lie within the given bounds.

    Raises:
        TypeCheckError: If the item count is out of bounds
        ConfigurationError: If both bounds are None
    """
    _require_parameter_name(parameter)
    actual = len(value) if isinstance(value, Sized) else sum(1 for _ in value)
    _check_bounds(
        parameter,
        value,
        actual,
        min_count,
        max_count,
        (
            "contain less than or equal to {maximum} items",
            "contain more than or equal to {minimum} items",
            "contain from {minimum} to {maximum} items",
        ),
        "Count of passed {parameter} is {actual} ({value}).",
        caller,
    )


def length(
    parameter: str,
    value: str,
    min_length: int | None = None,
    max_length: int | None = None,
    caller: str | None = None,
) -> None:
    """Require the length of a string to lie within the given bounds."""
    _require_parameter_name(parameter)
    value = check_type(parameter, value, "String", caller=caller)
    _check_bounds(
        parameter,
        value,
        len(value),
        min_length,
        max_length,
        (
            "have length lower than or equal to {maximum}",
            "have length higher than or equal to {minimum}",
            "have length in range from {minimum} to {maximum}",
        ),
        "Length of passed {parameter} is {actual} ({value}).",
        caller,
    )


def value_range(
    parameter: str,
    value: Any,
    min_value: int | float | None = None,
    max_value: int | float | None = None,
    caller: str | None = None,
) -> None:
    """Require a number to lie within the given bounds (inclusive).

    Numeric strings are accepted and compared as numbers.

    Raises:
        TypeCheckError: If the value (or a bound) is not a number, or the
            value is out of bounds
        ConfigurationError: If both bounds are None
    """
    _require_parameter_name(parameter)
    number = check(parameter, value, "IntOrFloat", caller=caller)
    min_value = check("min_value", min_value, "NullOrIntOrFloat", caller="value_range")
    max_value = check("max_value", max_value, "NullOrIntOrFloat", caller="value_range")
    _check_bounds(
        parameter,
        value,
        number,
        min_value,
        max_value,
        (
            "be lower than or equal to {maximum}",
            "be higher than or equal to {minimum}",
            "be in range from {minimum} to {maximum}",
        ),
        "Value passed to {parameter}: {value}",
        caller,
    )


def _strictly_contains(values: Iterable, value: Any) -> bool:
    return any(type(item) is type(value) and item == value for item in values)


def in_values(parameter: str, value: Any, values: Iterable, caller: str | None = None) -> None:
    """Require value to be one of values (same type and equal)."""
    _require_parameter_name(parameter)
    allowed: List[Any] = list(values)
    if not _strictly_contains(allowed, value):
        raise create_error(
            parameter,
            "Invalid value provided to a parameter {parameter}. Parameter {parameter} expects one of "
            "these values: {values}. Value passed to {parameter}: {value}",
            caller=caller,
            context={"value": value, "values": allowed},
            values=join_words((render_value(v) for v in allowed), ", ", " and "),
            value=render_value(value),
        )


def not_in_values(parameter: str, value: Any, values: Iterable, caller: str | None = None) -> None:
    """Require value not to be one of values (same type and equal)."""
    _require_parameter_name(parameter)
    forbidden: List[Any] = list(values)
    if _strictly_contains(forbidden, value):
        raise create_error(
            parameter,
            "Invalid value provided to a parameter {parameter}. Parameter {parameter} expects not to be "
            "one of these values: {values}. Value passed to {parameter}: {value}",
            caller=caller,
            context={"value": value, "values": forbidden},
            values=join_words((render_value(v) for v in forbidden), ", ", " and "),
            value=render_value(value),
        )


__all__ = [
    "TypeCheckError",
    "dispatch",
    "check",
    "check_type",
    "check_any_of",
    "not_whitespace_or_none",
    "not_empty",
    "class_exists",
    "is_instance_of",
    "count",
    "length",
    "value_range",
    "in_values",
    "not_in_values",
]
