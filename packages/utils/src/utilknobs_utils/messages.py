"""Construction of parameterized validation failure messages.

Messages are written as templates with ``{placeholder}`` markers. The
``{parameter}`` marker is always replaced with the quoted parameter name;
other markers are replaced from keyword arguments. When a caller label is
given (typically the qualified name of the function whose argument failed)
the message is prefixed with it:

    Wrong parameter value was provided to 'Job.run'. Parameter 'mode' is
    expected to be one of these types: null, int, bool. Value passed to
    'mode': 'Hello'
"""

import re
import reprlib
from typing import Any, Dict, Type

from utilknobs_common.exceptions import TypeCheckError, UtilknobsError

PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")
CALLER_PREFIX = "Wrong parameter value was provided to '{caller}'. "

class _ValueRepr(reprlib.Repr):
    def repr_int(self, x: int, level: int) -> str:
        try:
            return super().repr_int(x, level)
        except ValueError:
            # too many digits for int-to-str conversion
            return f"<int of {x.bit_length()} bits>"


_value_repr = _ValueRepr()
_value_repr.maxstring = 120
_value_repr.maxother = 120
_value_repr.maxlist = 10
_value_repr.maxdict = 10


def render_value(value: Any) -> str:
    """Render a value for a message, truncating long or deeply nested values."""
    return _value_repr.repr(value)


def format_parameter(name: str) -> str:
    return f"'{name}'"


def build_message(
    parameter: str,
    template: str,
    caller: str | None = None,
    **placeholders: Any,
) -> str:
    """Build a message from a template.

    Placeholder values are inserted as given; use render_value() for values
    that should appear as literals.

    Args:
        parameter: Name of the parameter the message is about
        template: Message template with {parameter} and named placeholders
        caller: Optional label of the calling function or method
        **placeholders: Values for the other placeholders in the template

    Returns:
        The finished message
    """
    values = {key: str(value) for key, value in placeholders.items()}
    values["parameter"] = format_parameter(parameter)
    message = PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), template)
    if caller is not None:
        message = CALLER_PREFIX.replace("{caller}", caller) + message
    return message


def create_error(
    parameter: str,
    template: str,
    caller: str | None = None,
    error_cls: Type[UtilknobsError] = TypeCheckError,
    context: Dict[str, Any] | None = None,
    **placeholders: Any,
) -> UtilknobsError:
    """Build an exception whose message and context describe a failed check.

    The context always holds the parameter name and the caller label, merged
    with any extra context given.

    Returns:
        An instance of error_cls, ready to be raised
    """
    error_context: Dict[str, Any] = {"parameter": parameter, "caller": caller}
    if context:
        error_context.update(context)
    return error_cls(
        build_message(parameter, template, caller=caller, **placeholders),
        context=error_context,
    )
