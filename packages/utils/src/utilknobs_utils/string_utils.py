"""Small string helpers used by the type-spec parser and message builders."""

import re
from collections.abc import Iterable
from typing import Any

CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def is_null_or_whitespace(text: str | None) -> bool:
    """Determine whether text is None, empty, or only whitespace."""
    return text is None or text.strip() == ""


def first_to_upper(text: str) -> str:
    return text[:1].upper() + text[1:]


def first_to_lower(text: str) -> str:
    return text[:1].lower() + text[1:]


def camel_to_snake(text: str) -> str:
    """Convert a camelCase or PascalCase name to snake_case.

    Names that are already snake_case are returned unchanged.

    Args:
        text: The name to convert, e.g. "firstName" or "HTTPServer"

    Returns:
        The snake_case name, e.g. "first_name" or "http_server"
    """
    return CAMEL_BOUNDARY_RE.sub("_", text).lower()


def snake_to_camel(text: str, pascal: bool = False) -> str:
    """Convert a snake_case name to camelCase (or PascalCase)."""
    parts = [part for part in text.split("_") if part]
    if not parts:
        return text
    result = parts[0].lower() + "".join(first_to_upper(part) for part in parts[1:])
    return first_to_upper(result) if pascal else result


def equals_ignore_case(text_a: str, text_b: str) -> bool:
    return text_a.casefold() == text_b.casefold()


def strip_prefix(text: str, prefix: str) -> str:
    """Remove prefix from the start of text when present."""
    return text[len(prefix) :] if prefix and text.startswith(prefix) else text


def join_words(items: Iterable[Any], separator: str, last_separator: str | None = None) -> str:
    """Join items with a separator, optionally using a different final separator.

    Args:
        items: Items to join; each is converted with str()
        separator: Separator placed between items
        last_separator: Separator placed before the final item (defaults to
            separator)

    Returns:
        The joined string, e.g. "a, b and c" for
        join_words(["a", "b", "c"], ", ", " and ")
    """
    parts = [str(item) for item in items]
    if len(parts) < 2:
        return "".join(parts)
    last = separator if last_separator is None else last_separator
    return separator.join(parts[:-1]) + last + parts[-1]
