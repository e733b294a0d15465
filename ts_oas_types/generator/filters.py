"""
Jinja2 filters for TypeScript declaration output.

This module provides the custom filters registered on the template
environment: JSDoc comments, string literals and object keys.
"""

from __future__ import annotations

from ts_oas_types.generator.expressions import Doc
from ts_oas_types.utils.string_case import ts_string_literal

_DOC_BULLET_PREFIXES = frozenset({"* ", "- ", "+ "})
_DOC_LINE_PREFIX = " * "


def _escape_comment(text: str) -> str:
    return text.replace("*/", "*\\/")


def doc_lines(doc: Doc | str | None) -> list[str]:
    """Flatten documentation into JSDoc lines (without comment markers).

    Example:
        >>> doc_lines(Doc(description="Pet id", format="int64"))
        ['Pet id', 'Format: int64']
    """
    if not doc:
        return []
    if isinstance(doc, str):
        doc = Doc(description=doc)

    lines: list[str] = []
    if doc.description:
        lines.extend(line.rstrip() for line in doc.description.strip().split("\n"))
    if doc.format:
        lines.append(f"Format: {doc.format}")
    if doc.default is not None:
        lines.append(f"@default {doc.default}")
    if doc.deprecated:
        lines.append("@deprecated")
    if doc.example is not None:
        lines.append(f"@example {doc.example}")
    return [_escape_comment(line) for line in lines]


def ts_doc_comment(doc: Doc | str | None, indent: int = 0) -> str:
    """Convert documentation to a JSDoc block.

    A single line stays on one line; longer text becomes a block with one
    ``*`` prefix per line. Bullet lines keep their marker.

    Args:
        doc: Text or a :class:`Doc`.
        indent: Number of spaces for base indentation.

    Returns:
        The comment, or an empty string when there is nothing to document.

    Example:
        >>> ts_doc_comment("The pet's name")
        "/** The pet's name */"
        >>> ts_doc_comment(Doc(description="Id", deprecated=True))
        '/**\\n * Id\\n * @deprecated\\n */'
    """
    lines = doc_lines(doc)
    if not lines:
        return ""

    indent_str = " " * indent
    if len(lines) == 1:
        return f"{indent_str}/** {lines[0]} */"

    result = [f"{indent_str}/**"]
    for line in lines:
        stripped = line.strip()
        if not stripped:
            result.append(f"{indent_str} *")
        elif any(stripped.startswith(prefix) for prefix in _DOC_BULLET_PREFIXES):
            result.append(f"{indent_str}{_DOC_LINE_PREFIX}  {stripped}")
        else:
            result.append(f"{indent_str}{_DOC_LINE_PREFIX}{stripped}")
    result.append(f"{indent_str} */")
    return "\n".join(result)


def ts_string(text: str) -> str:
    """Format text as a TypeScript string literal."""
    return ts_string_literal(str(text))


# Filter registry for easy import
FILTERS = {
    "ts_doc_comment": ts_doc_comment,
    "ts_string": ts_string,
}
