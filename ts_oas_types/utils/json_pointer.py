"""
JSON pointer helpers (RFC 6901) used for ``$ref`` targets and error locations.
"""

from typing import Final

ROOT: Final = "#"


def escape_token(token: str | int) -> str:
    """Escape a single reference token (``~`` -> ``~0``, ``/`` -> ``~1``)."""
    return str(token).replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    """Undo :func:`escape_token`."""
    return token.replace("~1", "/").replace("~0", "~")


def join_pointer(base: str, *tokens: str | int) -> str:
    """Append escaped tokens to a pointer.

    Examples:
        >>> join_pointer("#", "paths", "/pets", "get")
        '#/paths/~1pets/get'
    """
    if not tokens:
        return base
    return base + "/" + "/".join(escape_token(token) for token in tokens)


def split_ref(ref: str) -> tuple[str | None, list[str]]:
    """Split a ``$ref`` into its document part and unescaped pointer tokens.

    The document part is ``None`` for a local reference.

    Examples:
        >>> split_ref("#/components/schemas/Pet")
        (None, ['components', 'schemas', 'Pet'])
        >>> split_ref("common.yaml#/definitions/Error")
        ('common.yaml', ['definitions', 'Error'])
    """
    document, _, fragment = ref.partition("#")
    tokens = [unescape_token(token) for token in fragment.split("/") if token]
    return (document or None), tokens
