"""
Version-agnostic object model for OpenAPI documents.

Every ``X | Reference`` field of the OpenAPI object model is represented as a
two-case union of a concrete dataclass and :class:`Reference`, so later stages
can dispatch with ``isinstance``/``match`` instead of probing raw dictionaries.
Each node remembers ``location``, the JSON pointer where it appeared in its
source document, for error reporting.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias


@dataclass
class Reference:
    """A ``$ref`` pointer. Sibling fields of the raw node are not kept."""

    ref: str
    location: str = "#"
    # Name of the external document holding this reference; None for the root document
    document: str | None = None


@dataclass
class SchemaNode:
    """A JSON-Schema-like type description."""

    type: str | None = None
    properties: dict[str, SchemaOrRef] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    items: SchemaOrRef | None = None
    enum: list[Any] | None = None
    all_of: list[SchemaOrRef] | None = None
    one_of: list[SchemaOrRef] | None = None
    any_of: list[SchemaOrRef] | None = None
    additional_properties: bool | SchemaOrRef | None = None
    nullable: bool = False
    format: str | None = None
    default: Any = None
    has_default: bool = False
    min_items: int | None = None
    max_items: int | None = None
    title: str | None = None
    description: str | None = None
    deprecated: bool = False
    example: Any = None
    has_example: bool = False
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)
    location: str = "#"


SchemaOrRef: TypeAlias = SchemaNode | Reference


@dataclass
class MediaType:
    schema: SchemaOrRef | None = None


@dataclass
class Header:
    schema: SchemaOrRef | None = None
    description: str | None = None
    required: bool = False
    location: str = "#"


@dataclass
class Parameter:
    """A single operation parameter.

    ``param_in`` is the raw ``in`` value. Path parameters are always required.
    """

    name: str
    param_in: str
    required: bool = False
    schema: SchemaOrRef | None = None
    description: str | None = None
    deprecated: bool = False
    location: str = "#"

    def __post_init__(self) -> None:
        if self.param_in == "path":
            self.required = True

    @property
    def key(self) -> tuple[str, str]:
        """Identity of a parameter within an operation: (name, location)."""
        return (self.name, self.param_in)


@dataclass
class RequestBody:
    content: dict[str, MediaType] = field(default_factory=dict)
    required: bool = False
    description: str | None = None
    location: str = "#"


@dataclass
class Response:
    """An operation response.

    V3 responses carry ``content``. V2 responses carry a single ``schema``
    instead, which stays separate until it is projected, using ``media_type``
    as its synthetic content key.
    """

    description: str | None = None
    content: dict[str, MediaType] | None = None
    schema: SchemaOrRef | None = None
    media_type: str | None = None
    headers: dict[str, Header | Reference] = field(default_factory=dict)
    location: str = "#"


@dataclass
class Operation:
    method: str
    operation_id: str | None = None
    summary: str | None = None
    description: str | None = None
    deprecated: bool = False
    parameters: list[Parameter | Reference] = field(default_factory=list)
    request_body: RequestBody | Reference | None = None
    responses: dict[str, Response | Reference] = field(default_factory=dict)
    location: str = "#"


@dataclass
class PathItem:
    operations: dict[str, Operation] = field(default_factory=dict)
    parameters: list[Parameter | Reference] = field(default_factory=list)
    summary: str | None = None
    description: str | None = None
    location: str = "#"


@dataclass
class ComponentsBag:
    """Reusable objects addressable by ``$ref``, keyed by kind then name."""

    schemas: dict[str, SchemaOrRef] = field(default_factory=dict)
    responses: dict[str, Response | Reference] = field(default_factory=dict)
    parameters: dict[str, Parameter | Reference] = field(default_factory=dict)
    request_bodies: dict[str, RequestBody | Reference] = field(default_factory=dict)
    headers: dict[str, Header | Reference] = field(default_factory=dict)
    path_items: dict[str, PathItem | Reference] = field(default_factory=dict)
    # Kinds with no type meaning (examples, securitySchemes, links, callbacks) stay raw
    raw: dict[str, dict[str, Any]] = field(default_factory=dict)

    def section(self, kind: str) -> Mapping[str, Any]:
        """Return the name -> object mapping for a bag kind."""
        match kind:
            case "schemas":
                return self.schemas
            case "responses":
                return self.responses
            case "parameters":
                return self.parameters
            case "requestBodies":
                return self.request_bodies
            case "headers":
                return self.headers
            case "pathItems":
                return self.path_items
            case _:
                return self.raw.get(kind, {})


@dataclass
class NormalizedDocument:
    """One document after version normalization.

    Attributes:
        version: Major OpenAPI version the document was read as.
        components: The reusable-object bag.
        paths: Path template -> path item.
        webhooks: Webhook name -> path item (V3.1).
        sections: Bag kind -> declaration address the emitter publishes it under,
            for example ``("components", "schemas")`` or ``("definitions",)``.
        name: Key of an external document; None for the root document.
        raw_schema: True when the document is a bare schema collection.
        info: The raw ``info`` object.
        servers: The raw ``servers`` list, exposed as-is.
    """

    version: int
    components: ComponentsBag
    paths: dict[str, PathItem | Reference] = field(default_factory=dict)
    webhooks: dict[str, PathItem | Reference] = field(default_factory=dict)
    sections: dict[str, tuple[str, ...]] = field(default_factory=dict)
    name: str | None = None
    raw_schema: bool = False
    info: dict[str, Any] = field(default_factory=dict)
    servers: list[Any] = field(default_factory=list)
