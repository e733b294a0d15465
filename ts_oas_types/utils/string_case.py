"""
String case and identifier utilities for TypeScript generation.

This module provides the case conversions used to derive TypeScript member
names (for example the paths enum) and the rules for deciding when an object
key must be quoted.

Based on https://github.com/okunishinishi/python-stringcase
with additional TypeScript-specific naming conventions.
"""

import json
import re
from collections.abc import Callable
from typing import Final

# Regex patterns for case conversion
_SNAKE_CASE_DELIMITER_PATTERN: Final = re.compile(r"[\-\.\s/{}:]+")
_ACRONYM_PATTERN: Final = re.compile(r"([A-Z])([A-Z][a-z])")
_LOWER_UPPER_PATTERN: Final = re.compile(r"([a-z0-9])([A-Z])")
_NON_IDENTIFIER_PATTERN: Final = re.compile(r"[^a-zA-Z0-9_$]")
_TS_IDENTIFIER_PATTERN: Final = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_NUMERIC_KEY_PATTERN: Final = re.compile(r"^(0|[1-9][0-9]*)$")

# Reserved words that can't be used as enum member names
TS_RESERVED_WORDS: Final = frozenset(
    {
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "import",
        "in",
        "instanceof",
        "new",
        "null",
        "return",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
    }
)


def _convert_if_not_empty(string: str | None, conversion_func: Callable[[str], str]) -> str:
    """Safely convert a string, returning empty string if input is None or empty."""
    return conversion_func(string) if string else ""


def snakecase(string: str | None) -> str:
    """Convert string into snake_case.

    Path separators and template braces count as word delimiters, so URL
    paths convert cleanly.

    Args:
        string: String to convert.

    Returns:
        Snake case string.

    Examples:
        >>> snakecase("HelloWorld")
        'hello_world'
        >>> snakecase("/pets/{petId}")
        'pets_pet_id'
    """

    def _snakecase(s: str) -> str:
        s = _SNAKE_CASE_DELIMITER_PATTERN.sub("_", s)
        s = _ACRONYM_PATTERN.sub(r"\1_\2", s)
        s = _LOWER_UPPER_PATTERN.sub(r"\1_\2", s)
        return s.strip("_").lower()

    return _convert_if_not_empty(string, _snakecase)


def pascalcase(string: str | None) -> str:
    """Convert string into PascalCase.

    Examples:
        >>> pascalcase("hello_world")
        'HelloWorld'
        >>> pascalcase("/store/order/{orderId}")
        'StoreOrderOrderId'
    """

    def _pascalcase(s: str) -> str:
        return "".join(word.capitalize() for word in snakecase(s).split("_"))

    return _convert_if_not_empty(string, _pascalcase)


def is_ts_identifier(name: str) -> bool:
    """Check whether a string can be used unquoted as a TypeScript property name."""
    return bool(_TS_IDENTIFIER_PATTERN.fullmatch(name))


def ts_string_literal(text: str) -> str:
    """Format text as a double-quoted TypeScript string literal."""
    return json.dumps(text, ensure_ascii=False)


def ts_property_key(name: str) -> str:
    """Return an object key, quoted unless it is a plain identifier or integer.

    Integers with a leading zero, or written with non-ASCII digits, are quoted.

    Examples:
        >>> ts_property_key("petId")
        'petId'
        >>> ts_property_key("application/json")
        '"application/json"'
        >>> ts_property_key("200")
        '200'
    """
    if is_ts_identifier(name) or _NUMERIC_KEY_PATTERN.fullmatch(name):
        return name
    return ts_string_literal(name)


def normalize_ts_identifier(name: str | None) -> str:
    """Normalize name to be a valid TypeScript identifier.

    Invalid characters become underscores, and a leading digit or reserved
    word gets an underscore prefix.

    Examples:
        >>> normalize_ts_identifier("123invalid")
        '_123invalid'
        >>> normalize_ts_identifier("delete")
        '_delete'
    """

    def _normalize(s: str) -> str:
        normalized = _NON_IDENTIFIER_PATTERN.sub("_", s)
        if normalized[0].isdigit() or normalized in TS_RESERVED_WORDS:
            normalized = f"_{normalized}"
        return normalized

    return _convert_if_not_empty(name, _normalize)
