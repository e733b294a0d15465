"""
Generation options.

A :class:`GeneratorOptions` instance is built once per run and handed to every
stage. It is frozen, so a run can't change the configuration another run sees.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ts_oas_types.constants import (
    DEFAULT_COMMENT_HEADER,
    DEFAULT_HTTP_METHOD,
    OPENAPI_V2,
    OPENAPI_V3,
    SUPPORTED_VERSIONS,
)
from ts_oas_types.errors import ConfigurationError

# Receives the raw schema object; a non-None return value replaces the default rendering.
SchemaFormatter = Callable[[Mapping[str, Any]], str | None]


@dataclass(frozen=True)
class GeneratorOptions:
    """Options threaded through every stage of a generation run."""

    version: int | None = None
    additional_properties: bool = False
    default_non_nullable: bool = False
    immutable_types: bool = False
    content_never: bool = False
    make_paths_enum: bool = False
    path_params_as_types: bool = False
    support_array_length: bool = False
    export_type: bool = False
    raw_schema: bool = False
    formatter: SchemaFormatter | None = None
    comment_header: str = DEFAULT_COMMENT_HEADER
    silent: bool = False
    # Document loader options
    auth: str | None = None
    http_headers: Mapping[str, str] = field(default_factory=dict)
    http_method: str = DEFAULT_HTTP_METHOD
    cwd: Path | None = None

    def with_version(self, version: int) -> GeneratorOptions:
        """Return a copy with the document version pinned."""
        return dataclasses.replace(self, version=version)


def detect_version(document: Mapping[str, Any]) -> int | None:
    """Infer the major version from the ``swagger``/``openapi`` field.

    Returns:
        2 or 3, or None when the document declares neither field.

    Raises:
        ConfigurationError: If the document declares both fields or a version
            this generator doesn't support.
    """
    has_swagger = "swagger" in document
    has_openapi = "openapi" in document
    if has_swagger and has_openapi:
        msg = "Document declares both 'swagger' and 'openapi'; pass an explicit version"
        raise ConfigurationError(msg)
    if has_swagger:
        declared = str(document["swagger"])
    elif has_openapi:
        declared = str(document["openapi"])
    else:
        return None

    major = declared.strip().lstrip("v").split(".")[0]
    if major == "2":
        return OPENAPI_V2
    if major == "3":
        return OPENAPI_V3
    msg = f"Unsupported OpenAPI version '{declared}'"
    raise ConfigurationError(msg)


def validate_options(options: GeneratorOptions, document: Mapping[str, Any]) -> GeneratorOptions:
    """Check option combinations and settle the document version.

    An explicit ``options.version`` wins over the version fields in the
    document. Raw schema collections have no version field, so the version is
    mandatory for them.

    Args:
        options: Options supplied by the caller.
        document: The parsed root document.

    Returns:
        Options with ``version`` set.

    Raises:
        ConfigurationError: On a missing, ambiguous or unsupported version, or
            on options that need paths combined with ``raw_schema``.
    """
    if options.raw_schema:
        if options.version is None:
            msg = "A version must be given when generating from a raw schema collection"
            raise ConfigurationError(msg)
        if options.make_paths_enum or options.path_params_as_types:
            msg = "make_paths_enum and path_params_as_types need paths and can't be used with raw_schema"
            raise ConfigurationError(msg)

    version = options.version
    if version is None:
        version = detect_version(document)
        if version is None:
            msg = "Can't determine the OpenAPI version: document has no 'swagger' or 'openapi' field"
            raise ConfigurationError(msg)

    if version not in SUPPORTED_VERSIONS:
        msg = f"Unsupported OpenAPI version {version!r}; expected one of {sorted(SUPPORTED_VERSIONS)}"
        raise ConfigurationError(msg)

    return options.with_version(version)
