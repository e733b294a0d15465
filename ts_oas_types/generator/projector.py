"""
Path & Operation Projector

Turns path items, operations, parameters, request bodies and responses into
type expressions. Schemas are handed to :class:`SchemaTransformer`; the
projector only builds the shapes around them:

- an operation is ``{ parameters; requestBody; responses }``;
- parameters are grouped by location (``query``, ``header``, ``path``, ``cookie``);
- a response is its content map, wrapped with ``headers`` when it has any.

Operations carrying an ``operationId`` are registered once in
:attr:`PathProjector.operations` and referenced from the paths that use them.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final, TypeVar

from ts_oas_types.config import GeneratorOptions
from ts_oas_types.constants import (
    DEFAULT_MEDIA_TYPE,
    HEADERS,
    PARAMETER_LOCATIONS,
    PARAMETERS,
    PATH_ITEMS,
    PATHS_ENUM_NAME,
    REQUEST_BODIES,
    RESPONSES,
    SCHEMAS,
)
from ts_oas_types.diagnostics import CIRCULAR_REFERENCE
from ts_oas_types.generator.expressions import (
    NEVER,
    STRING,
    UNKNOWN,
    Doc,
    Literal,
    Member,
    ObjectType,
    Primitive,
    RefType,
    TemplateLiteral,
    TypeExpr,
    UnionType,
    union_of,
)
from ts_oas_types.generator.transformer import SchemaTransformer
from ts_oas_types.parser.models import (
    Header,
    Operation,
    Parameter,
    PathItem,
    Reference,
    RequestBody,
    Response,
    SchemaOrRef,
)
from ts_oas_types.parser.resolver import ReferenceResolver
from ts_oas_types.utils.string_case import normalize_ts_identifier, pascalcase

_PATH_TEMPLATE_PATTERN: Final = re.compile(r"\{([^}]+)\}")

OPERATIONS: Final = "operations"

T = TypeVar("T")


@dataclass(frozen=True)
class ProjectedOperation:
    """An operation published under ``operations`` by its ``operationId``."""

    operation_id: str
    type: ObjectType
    source: Operation
    doc: Doc | None = None


@dataclass(frozen=True)
class PathsEnum:
    """Every distinct path string, as enum members and as a literal union."""

    name: str
    members: tuple[tuple[str, str], ...]
    union: TypeExpr


def _template_hole(expression: TypeExpr) -> TypeExpr:
    """Narrow a path parameter type to one a template literal can hold."""
    if isinstance(expression, Primitive):
        return expression
    if isinstance(expression, Literal) and expression.value is not None:
        return expression
    if isinstance(expression, UnionType) and all(_template_hole(member) == member for member in expression.members):
        return expression
    return STRING


class PathProjector:
    """Projects paths and the non-schema bag kinds for one generation run."""

    def __init__(
        self,
        resolver: ReferenceResolver,
        transformer: SchemaTransformer,
        options: GeneratorOptions,
    ) -> None:
        self.resolver = resolver
        self.transformer = transformer
        self.options = options
        self.diagnostics = transformer.diagnostics
        self.operations: dict[str, ProjectedOperation] = {}

    # Resolution helpers

    def _concrete(self, node: Any, kind: type[T]) -> T | None:  # noqa: ANN401
        """Follow a reference to a concrete node of ``kind``; None for cycles or mismatches."""
        if isinstance(node, Reference):
            resolution = self.resolver.resolve(node)
            if resolution.cyclic:
                self.diagnostics.warn(
                    CIRCULAR_REFERENCE, f"'{node.ref}' is part of a reference cycle", node.location
                )
                return None
            node = resolution.node
        return node if isinstance(node, kind) else None

    def _bag_reference(self, reference: Reference, project: Callable[[Any], TypeExpr]) -> TypeExpr:
        """Named reference to a bag entry, or the projected target when it has no name."""
        resolution = self.resolver.resolve(reference)
        if resolution.cyclic:
            self.diagnostics.warn(
                CIRCULAR_REFERENCE, f"'{reference.ref}' is part of a reference cycle", reference.location
            )
            return UNKNOWN
        address = self.transformer.address_of(resolution.target)
        if address is not None:
            return RefType(address=address, pointer=reference.ref)
        return project(resolution.node)

    # Parameters

    def merge_parameters(
        self,
        path_level: Iterable[Parameter | Reference],
        operation_level: Iterable[Parameter | Reference],
    ) -> list[Parameter | Reference]:
        """Merge path-level and operation-level parameters.

        An operation parameter replaces the path-level one with the same
        (name, location) in place; nothing is ever removed.
        """
        merged: dict[tuple[str, str], Parameter | Reference] = {}
        for param in (*path_level, *operation_level):
            concrete = self._concrete(param, Parameter)
            if concrete is not None:
                merged[concrete.key] = param
        return list(merged.values())

    def parameter_value_type(self, parameter: Any) -> TypeExpr:  # noqa: ANN401
        """Type of a parameter's value."""
        if isinstance(parameter, Reference):
            return self._bag_reference(parameter, self.parameter_value_type)
        if not isinstance(parameter, Parameter):
            return UNKNOWN
        return self.transformer.transform(parameter.schema)

    def parameter_doc(self, parameter: Parameter) -> Doc | None:
        doc = self.transformer.doc_for(parameter.schema) or Doc()
        doc = dataclasses.replace(
            doc,
            description=parameter.description or doc.description,
            deprecated=parameter.deprecated or doc.deprecated,
        )
        return doc or None

    def parameters_type(self, parameters: Iterable[Parameter | Reference]) -> ObjectType | None:
        """Group parameters by location; None when there are none to emit.

        Parameters in other locations (V2 ``body``/``formData`` are already
        request bodies) are left out.
        """
        groups: dict[str, list[Member]] = {location: [] for location in PARAMETER_LOCATIONS}
        for param in parameters:
            concrete = self._concrete(param, Parameter)
            if concrete is None or concrete.param_in not in groups:
                continue
            groups[concrete.param_in].append(
                Member(
                    name=concrete.name,
                    type=self.parameter_value_type(param),
                    required=concrete.required,
                    doc=self.parameter_doc(concrete),
                )
            )

        members = tuple(
            Member(name=location, type=ObjectType(tuple(group)), required=any(member.required for member in group))
            for location, group in groups.items()
            if group
        )
        return ObjectType(members) if members else None

    # Bodies and responses

    def header_value_type(self, header: Any) -> TypeExpr:  # noqa: ANN401
        if isinstance(header, Reference):
            return self._bag_reference(header, self.header_value_type)
        if not isinstance(header, Header):
            return UNKNOWN
        return self.transformer.transform(header.schema)

    def request_body_type(self, body: Any) -> TypeExpr:  # noqa: ANN401
        """``{ content: { <media type>: T } }`` for a request body."""
        if isinstance(body, Reference):
            return self._bag_reference(body, self.request_body_type)
        if not isinstance(body, RequestBody):
            return UNKNOWN
        content = ObjectType(
            tuple(
                Member(name=media_type, type=self.transformer.transform(media.schema))
                for media_type, media in body.content.items()
            )
        )
        return ObjectType((Member(name="content", type=content),))

    @staticmethod
    def response_content(response: Response) -> dict[str, SchemaOrRef | None] | None:
        """Media type -> schema map of a response; a V2 ``schema`` gets its synthetic media type here."""
        if response.content:
            return {media_type: media.schema for media_type, media in response.content.items()}
        if response.schema is not None:
            return {response.media_type or DEFAULT_MEDIA_TYPE: response.schema}
        return None

    def response_body_type(self, response: Response) -> TypeExpr:
        """The content map of a response, or never/unknown when it has no body."""
        content = self.response_content(response)
        if content is None:
            return NEVER if self.options.content_never else UNKNOWN
        return ObjectType(
            tuple(
                Member(name=media_type, type=self.transformer.transform(schema))
                for media_type, schema in content.items()
            )
        )

    def response_type(self, response: Any) -> TypeExpr:  # noqa: ANN401
        """Type of one response entry.

        A response with neither headers nor a body is just its body type
        (``never`` or ``unknown``); otherwise it is ``{ headers?; content }``.
        """
        if isinstance(response, Reference):
            return self._bag_reference(response, self.response_type)
        if not isinstance(response, Response):
            return UNKNOWN

        body = self.response_body_type(response)
        headers = []
        for header_name, header in response.headers.items():
            concrete = self._concrete(header, Header)
            description = concrete.description if concrete is not None else None
            headers.append(
                Member(
                    name=header_name,
                    type=self.header_value_type(header),
                    required=concrete.required if concrete is not None else False,
                    doc=Doc(description=description) if description else None,
                )
            )

        if not headers and self.response_content(response) is None:
            return body

        members = []
        if headers:
            members.append(Member(name="headers", type=ObjectType(tuple(headers))))
        members.append(Member(name="content", type=body))
        return ObjectType(tuple(members))

    def _response_doc(self, response: Response | Reference) -> Doc | None:
        concrete = self._concrete(response, Response)
        if concrete is None or not concrete.description:
            return None
        return Doc(description=concrete.description)

    # Operations and path items

    @staticmethod
    def operation_doc(operation: Operation) -> Doc | None:
        description = "\n".join(text for text in (operation.summary, operation.description) if text)
        return Doc(description=description or None, deprecated=operation.deprecated) or None

    def operation_type(
        self,
        operation: Operation,
        path_parameters: Iterable[Parameter | Reference] = (),
    ) -> ObjectType:
        """``{ parameters; requestBody; responses }`` for one operation."""
        members = []

        parameters = self.parameters_type(self.merge_parameters(path_parameters, operation.parameters))
        if parameters is not None:
            members.append(Member(name="parameters", type=parameters))

        if operation.request_body is not None:
            concrete_body = self._concrete(operation.request_body, RequestBody)
            members.append(
                Member(
                    name="requestBody",
                    type=self.request_body_type(operation.request_body),
                    required=concrete_body.required if concrete_body is not None else False,
                    doc=Doc(description=concrete_body.description)
                    if concrete_body is not None and concrete_body.description
                    else None,
                )
            )

        responses = tuple(
            Member(name=status, type=self.response_type(response), doc=self._response_doc(response))
            for status, response in operation.responses.items()
        )
        if responses:
            members.append(Member(name="responses", type=ObjectType(responses)))

        return ObjectType(tuple(members))

    def _operation_entry(self, operation: Operation, path_parameters: list[Parameter | Reference]) -> TypeExpr:
        """Register an operation by ``operationId`` and reference it; inline it otherwise."""
        operation_type = self.operation_type(operation, path_parameters)
        operation_id = operation.operation_id
        if operation_id is None:
            return operation_type

        registered = self.operations.get(operation_id)
        if registered is None:
            self.operations[operation_id] = ProjectedOperation(
                operation_id=operation_id,
                type=operation_type,
                source=operation,
                doc=self.operation_doc(operation),
            )
        elif registered.source is not operation:
            # A second operation reusing the id keeps its own inline shape
            return operation_type
        return RefType(address=(OPERATIONS, operation_id))

    def path_item_type(self, item: Any) -> TypeExpr:  # noqa: ANN401
        """Method -> operation map of a path item, plus its own ``parameters``."""
        if isinstance(item, Reference):
            return self._bag_reference(item, self.path_item_type)
        if not isinstance(item, PathItem):
            return UNKNOWN

        members = [
            Member(
                name=method,
                type=self._operation_entry(operation, item.parameters),
                doc=self.operation_doc(operation),
            )
            for method, operation in item.operations.items()
        ]
        parameters = self.parameters_type(item.parameters)
        if parameters is not None:
            members.append(Member(name="parameters", type=parameters))
        return ObjectType(tuple(members))

    def path_key(self, path: str, item: PathItem | Reference) -> str | TemplateLiteral:
        """Member key for a path; a template literal when path parameters are typed."""
        segments = _PATH_TEMPLATE_PATTERN.split(path)
        if not self.options.path_params_as_types or len(segments) == 1:
            return path

        hole_types = self._path_parameter_types(item)
        parts: list[str | TypeExpr] = []
        for index, segment in enumerate(segments):
            if index % 2 == 0:
                if segment:
                    parts.append(segment)
            else:
                parts.append(hole_types.get(segment, STRING))
        return TemplateLiteral(tuple(parts))

    def _path_parameter_types(self, item: PathItem | Reference) -> dict[str, TypeExpr]:
        concrete_item = self._concrete(item, PathItem)
        if concrete_item is None:
            return {}
        candidates = [*concrete_item.parameters]
        for operation in concrete_item.operations.values():
            candidates.extend(operation.parameters)

        types: dict[str, TypeExpr] = {}
        for param in candidates:
            concrete = self._concrete(param, Parameter)
            if concrete is None or concrete.param_in != "path" or concrete.name in types:
                continue
            types[concrete.name] = _template_hole(self.transformer.transform(concrete.schema))
        return types

    def paths_type(self, paths: Mapping[str, PathItem | Reference], *, templated: bool = True) -> ObjectType:
        """Object type for ``paths`` (or ``webhooks`` with ``templated=False``)."""
        return ObjectType(
            tuple(
                Member(
                    name=self.path_key(path, item) if templated else path,
                    type=self.path_item_type(item),
                )
                for path, item in paths.items()
            )
        )

    def paths_enum(self, paths: Iterable[str]) -> PathsEnum:
        """Collect every distinct path string into an enum and a literal union."""
        unique = list(dict.fromkeys(paths))
        used: dict[str, int] = {}
        members = []
        for path in unique:
            base = normalize_ts_identifier(pascalcase(path)) or "Root"
            used[base] = used.get(base, 0) + 1
            name = base if used[base] == 1 else f"{base}{used[base]}"
            members.append((name, path))
        return PathsEnum(
            name=PATHS_ENUM_NAME,
            members=tuple(members),
            union=union_of(Literal(path) for path in unique),
        )

    # Bag entries

    def bag_entry_type(self, kind: str, node: Any) -> TypeExpr:  # noqa: ANN401
        """Declared type of one reusable object of the given kind."""
        match kind:
            case "schemas":
                return self.transformer.transform(node)
            case "responses":
                return self.response_type(node)
            case "parameters":
                return self.parameter_value_type(node)
            case "requestBodies":
                return self.request_body_type(node)
            case "headers":
                return self.header_value_type(node)
            case "pathItems":
                return self.path_item_type(node)
            case _:
                return UNKNOWN

    def bag_entry_doc(self, kind: str, node: Any) -> Doc | None:  # noqa: ANN401
        if kind == SCHEMAS:
            return self.transformer.doc_for(node)
        if kind == PARAMETERS and isinstance(node, Parameter):
            return self.parameter_doc(node)
        if kind in (RESPONSES, REQUEST_BODIES, HEADERS, PATH_ITEMS):
            description = getattr(node, "description", None)
            return Doc(description=description) if description else None
        return None
