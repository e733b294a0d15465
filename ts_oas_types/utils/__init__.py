"""
Utilities Module for TypeScript Type Generation

This module provides file helpers, JSON pointer handling and string case
conversions shared by the parser and the generator.
"""

from .file_utils import write_output
from .json_pointer import escape_token, join_pointer, split_ref, unescape_token
from .string_case import (
    is_ts_identifier,
    normalize_ts_identifier,
    pascalcase,
    snakecase,
    ts_property_key,
    ts_string_literal,
)

__all__ = [
    "escape_token",
    "is_ts_identifier",
    "join_pointer",
    "normalize_ts_identifier",
    "pascalcase",
    "snakecase",
    "split_ref",
    "ts_property_key",
    "ts_string_literal",
    "unescape_token",
    "write_output",
]
