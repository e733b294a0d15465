"""
OpenAPI Parser Module

This module normalizes OpenAPI 2 and 3 documents into one version-agnostic
object model and resolves the ``$ref`` pointers between them.
"""

from .models import (
    ComponentsBag,
    Header,
    MediaType,
    NormalizedDocument,
    Operation,
    Parameter,
    PathItem,
    Reference,
    RequestBody,
    Response,
    SchemaNode,
    SchemaOrRef,
)
from .normalizer import OASNormalizer, is_api_document
from .resolver import ReferenceResolver, RefTarget, Resolution

__all__ = [
    "ComponentsBag",
    "Header",
    "MediaType",
    "NormalizedDocument",
    "OASNormalizer",
    "Operation",
    "Parameter",
    "PathItem",
    "RefTarget",
    "Reference",
    "ReferenceResolver",
    "RequestBody",
    "Resolution",
    "Response",
    "SchemaNode",
    "SchemaOrRef",
    "is_api_document",
]
