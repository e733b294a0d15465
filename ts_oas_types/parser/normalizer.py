"""
OpenAPI Version Normalizer

This module reads a parsed OpenAPI 2 (Swagger) or OpenAPI 3 document and
produces one :class:`NormalizedDocument`, so that nothing downstream has to
know which version the document was written in.

V2 specifics translated here:

- ``definitions``, top-level ``parameters`` and ``responses`` feed the bag.
- Inline parameter ``type``/``items``/``enum`` become a schema.
- ``in: body`` and ``in: formData`` parameters become a request body.
- ``type: file`` becomes a binary string.
- ``nullable``, ``format`` and the ``trace`` method are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Final

from ts_oas_types.constants import (
    BODY_LOCATIONS,
    DEFAULT_MEDIA_TYPE,
    FORM_URLENCODED_MEDIA_TYPE,
    HEADERS,
    HTTP_METHODS_V2,
    HTTP_METHODS_V3,
    MULTIPART_MEDIA_TYPE,
    OPENAPI_V2,
    OPENAPI_V3,
    PARAMETERS,
    PATH_ITEMS,
    RAW_COMPONENT_KINDS,
    REQUEST_BODIES,
    RESPONSES,
    SCHEMAS,
    TYPED_COMPONENT_KINDS,
    V2_SECTIONS,
)
from ts_oas_types.errors import ConfigurationError
from ts_oas_types.parser.models import (
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
from ts_oas_types.utils.json_pointer import ROOT, join_pointer, split_ref

# Parameter fields that describe an inline (V2) parameter type
_INLINE_SCHEMA_KEYS: Final = (
    "type",
    "format",
    "items",
    "enum",
    "default",
    "minItems",
    "maxItems",
    "minimum",
    "maximum",
    "pattern",
)

# Top-level keys that mark a full API document rather than a bare schema collection
_DOCUMENT_KEYS: Final = frozenset({"swagger", "openapi", "paths", "components", "definitions", "webhooks"})


def is_api_document(document: Mapping[str, Any]) -> bool:
    """Check whether a parsed value is a full API document rather than a schema collection."""
    return any(key in document for key in _DOCUMENT_KEYS)


def _as_mapping(value: Any) -> Mapping[str, Any]:  # noqa: ANN401
    return value if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> list[Any]:  # noqa: ANN401
    return list(value) if isinstance(value, list | tuple) else []


def _optional_int(value: Any) -> int | None:  # noqa: ANN401
    return value if isinstance(value, int) and not isinstance(value, bool) else None


class OASNormalizer:
    """Translates raw V2 or V3 documents into :class:`NormalizedDocument`."""

    def __init__(self, version: int) -> None:
        if version not in (OPENAPI_V2, OPENAPI_V3):
            msg = f"Unsupported OpenAPI version {version!r}"
            raise ConfigurationError(msg)
        self.version = version
        self._document_name: str | None = None
        self._consumes: list[str] = []
        self._produces: list[str] = []
        self._components = ComponentsBag()

    @property
    def is_v2(self) -> bool:
        return self.version == OPENAPI_V2

    @property
    def http_methods(self) -> tuple[str, ...]:
        return HTTP_METHODS_V2 if self.is_v2 else HTTP_METHODS_V3

    def normalize(
        self,
        document: Mapping[str, Any],
        *,
        name: str | None = None,
        raw_schema: bool = False,
    ) -> NormalizedDocument:
        """Normalize one parsed document.

        Args:
            document: The parsed document. It is read, never modified.
            name: Key of an external document, None for the root document.
            raw_schema: Treat ``document`` as a bare ``{name: schema}`` collection.

        Returns:
            The version-agnostic document.
        """
        self._document_name = name
        self._consumes = [str(media) for media in _as_list(document.get("consumes"))] if self.is_v2 else []
        self._produces = [str(media) for media in _as_list(document.get("produces"))] if self.is_v2 else []
        self._components = ComponentsBag()

        if raw_schema:
            return self._normalize_raw_schema(document)
        if self.is_v2:
            return self._normalize_v2(document)
        return self._normalize_v3(document)

    def _normalize_raw_schema(self, document: Mapping[str, Any]) -> NormalizedDocument:
        for schema_name, raw in document.items():
            self._components.schemas[schema_name] = self._schema(raw, join_pointer(ROOT, schema_name))
        section = ("definitions",) if self.is_v2 else (SCHEMAS,)
        return NormalizedDocument(
            version=self.version,
            components=self._components,
            sections={SCHEMAS: section},
            name=self._document_name,
            raw_schema=True,
        )

    def _normalize_v2(self, document: Mapping[str, Any]) -> NormalizedDocument:
        bag = self._components
        for schema_name, raw in _as_mapping(document.get("definitions")).items():
            bag.schemas[schema_name] = self._schema(raw, join_pointer(ROOT, "definitions", schema_name))
        for param_name, raw in _as_mapping(document.get("parameters")).items():
            bag.parameters[param_name] = self._parameter(raw, join_pointer(ROOT, "parameters", param_name))
        for response_name, raw in _as_mapping(document.get("responses")).items():
            bag.responses[response_name] = self._response(
                raw, join_pointer(ROOT, "responses", response_name), self._produces
            )

        return NormalizedDocument(
            version=self.version,
            components=bag,
            paths=self._paths(_as_mapping(document.get("paths")), "paths"),
            sections={kind: (section,) for section, kind in V2_SECTIONS.items()},
            name=self._document_name,
            info=dict(_as_mapping(document.get("info"))),
        )

    def _normalize_v3(self, document: Mapping[str, Any]) -> NormalizedDocument:
        bag = self._components
        components = _as_mapping(document.get("components"))
        base = join_pointer(ROOT, "components")

        for schema_name, raw in _as_mapping(components.get(SCHEMAS)).items():
            bag.schemas[schema_name] = self._schema(raw, join_pointer(base, SCHEMAS, schema_name))
        for param_name, raw in _as_mapping(components.get(PARAMETERS)).items():
            bag.parameters[param_name] = self._parameter(raw, join_pointer(base, PARAMETERS, param_name))
        for response_name, raw in _as_mapping(components.get(RESPONSES)).items():
            bag.responses[response_name] = self._response(raw, join_pointer(base, RESPONSES, response_name), [])
        for body_name, raw in _as_mapping(components.get(REQUEST_BODIES)).items():
            bag.request_bodies[body_name] = self._request_body(raw, join_pointer(base, REQUEST_BODIES, body_name))
        for header_name, raw in _as_mapping(components.get(HEADERS)).items():
            bag.headers[header_name] = self._header(raw, join_pointer(base, HEADERS, header_name))
        for item_name, raw in _as_mapping(components.get(PATH_ITEMS)).items():
            bag.path_items[item_name] = self._path_item(raw, join_pointer(base, PATH_ITEMS, item_name))
        for kind in RAW_COMPONENT_KINDS:
            if kind in components:
                bag.raw[kind] = dict(_as_mapping(components[kind]))

        sections = {kind: ("components", kind) for kind in TYPED_COMPONENT_KINDS}

        return NormalizedDocument(
            version=self.version,
            components=bag,
            paths=self._paths(_as_mapping(document.get("paths")), "paths"),
            webhooks=self._paths(_as_mapping(document.get("webhooks")), "webhooks"),
            sections=sections,
            name=self._document_name,
            info=dict(_as_mapping(document.get("info"))),
            servers=_as_list(document.get("servers")),
        )

    def _reference(self, raw: Mapping[str, Any], location: str) -> Reference:
        return Reference(ref=str(raw["$ref"]), location=location, document=self._document_name)

    def _schema(self, raw: Any, location: str) -> SchemaOrRef:  # noqa: ANN401
        """Parse a Schema Object or Reference."""
        if not isinstance(raw, Mapping):
            return SchemaNode(location=location)
        if "$ref" in raw:
            return self._reference(raw, location)

        schema_type, nullable = self._schema_type(raw)
        any_of = self._schema_list(raw, "anyOf", location)
        if isinstance(raw.get("type"), list) and schema_type is None and any_of is None:
            any_of = self._type_alternatives(raw, location)
        required = [str(name) for name in _as_list(raw.get("required"))]
        enum = raw.get("enum")

        properties = {
            prop_name: self._schema(prop, join_pointer(location, "properties", prop_name))
            for prop_name, prop in _as_mapping(raw.get("properties")).items()
        }

        return SchemaNode(
            type=schema_type,
            properties=properties,
            required=required,
            items=self._schema(raw["items"], join_pointer(location, "items")) if "items" in raw else None,
            enum=list(enum) if isinstance(enum, list) else None,
            all_of=self._schema_list(raw, "allOf", location),
            one_of=self._schema_list(raw, "oneOf", location),
            any_of=any_of,
            additional_properties=self._additional_properties(raw, location),
            nullable=nullable,
            format=None if self.is_v2 else raw.get("format"),
            default=raw.get("default"),
            has_default="default" in raw,
            min_items=_optional_int(raw.get("minItems")),
            max_items=_optional_int(raw.get("maxItems")),
            title=raw.get("title"),
            description=raw.get("description"),
            deprecated=bool(raw.get("deprecated", False)),
            example=raw.get("example"),
            has_example="example" in raw,
            raw=raw,
            location=location,
        )

    def _schema_type(self, raw: Mapping[str, Any]) -> tuple[str | None, bool]:
        """Return the schema type and whether the node is nullable."""
        nullable = not self.is_v2 and bool(raw.get("nullable", False))
        schema_type = raw.get("type")

        # OpenAPI 3.1 allows a list of types; a single non-null entry is kept
        if isinstance(schema_type, list):
            types = [str(entry) for entry in schema_type]
            if "null" in types and not self.is_v2:
                nullable = True
            non_null = [entry for entry in types if entry != "null"]
            schema_type = non_null[0] if len(non_null) == 1 else ("null" if not non_null else None)

        if schema_type == "file":
            return "string", nullable
        return (str(schema_type) if schema_type is not None else None), nullable

    def _type_alternatives(self, raw: Mapping[str, Any], location: str) -> list[SchemaOrRef] | None:
        """Split a multi-type node (``type: [string, integer]``) into one alternative per type."""
        types = [str(entry) for entry in raw["type"] if entry != "null"]
        if len(types) < 2:  # noqa: PLR2004
            return None
        alternatives = {key: value for key, value in raw.items() if key not in ("type", "nullable")}
        return [self._schema({**alternatives, "type": entry}, location) for entry in types]

    def _schema_list(self, raw: Mapping[str, Any], key: str, location: str) -> list[SchemaOrRef] | None:
        if key not in raw:
            return None
        return [
            self._schema(member, join_pointer(location, key, index)) for index, member in enumerate(_as_list(raw[key]))
        ]

    def _additional_properties(self, raw: Mapping[str, Any], location: str) -> bool | SchemaOrRef | None:
        if "additionalProperties" not in raw:
            return None
        value = raw["additionalProperties"]
        if isinstance(value, bool):
            return value
        # An empty schema allows anything
        if isinstance(value, Mapping) and not value:
            return True
        return self._schema(value, join_pointer(location, "additionalProperties"))

    def _inline_parameter_schema(self, raw: Mapping[str, Any], location: str) -> SchemaOrRef | None:
        inline = {key: raw[key] for key in _INLINE_SCHEMA_KEYS if key in raw}
        if not inline:
            return None
        return self._schema(inline, location)

    def _content_schema(self, raw: Mapping[str, Any], location: str) -> SchemaOrRef | None:
        """Schema of the first media type of a V3 parameter/header ``content`` map."""
        for media_type, media in _as_mapping(raw.get("content")).items():
            media_map = _as_mapping(media)
            if "schema" in media_map:
                return self._schema(media_map["schema"], join_pointer(location, "content", media_type, "schema"))
        return None

    def _parameter(self, raw: Any, location: str) -> Parameter | Reference:  # noqa: ANN401
        raw = _as_mapping(raw)
        if "$ref" in raw:
            return self._reference(raw, location)

        if "schema" in raw:
            schema = self._schema(raw["schema"], join_pointer(location, "schema"))
        elif "content" in raw:
            schema = self._content_schema(raw, location)
        else:
            schema = self._inline_parameter_schema(raw, location)

        return Parameter(
            name=str(raw.get("name", "")),
            param_in=str(raw.get("in", "query")),
            required=bool(raw.get("required", False)),
            schema=schema,
            description=raw.get("description"),
            deprecated=bool(raw.get("deprecated", False)),
            location=location,
        )

    def _header(self, raw: Any, location: str) -> Header | Reference:  # noqa: ANN401
        raw = _as_mapping(raw)
        if "$ref" in raw:
            return self._reference(raw, location)
        if "schema" in raw:
            schema = self._schema(raw["schema"], join_pointer(location, "schema"))
        elif "content" in raw:
            schema = self._content_schema(raw, location)
        else:
            schema = self._inline_parameter_schema(raw, location)
        return Header(
            schema=schema,
            description=raw.get("description"),
            required=bool(raw.get("required", False)),
            location=location,
        )

    def _content(self, raw: Any, location: str) -> dict[str, MediaType]:  # noqa: ANN401
        content = {}
        for media_type, media in _as_mapping(raw).items():
            media_map = _as_mapping(media)
            schema = (
                self._schema(media_map["schema"], join_pointer(location, media_type, "schema"))
                if "schema" in media_map
                else None
            )
            content[media_type] = MediaType(schema=schema)
        return content

    def _request_body(self, raw: Any, location: str) -> RequestBody | Reference:  # noqa: ANN401
        raw = _as_mapping(raw)
        if "$ref" in raw:
            return self._reference(raw, location)
        return RequestBody(
            content=self._content(raw.get("content"), join_pointer(location, "content")),
            required=bool(raw.get("required", False)),
            description=raw.get("description"),
            location=location,
        )

    def _response(self, raw: Any, location: str, produces: list[str]) -> Response | Reference:  # noqa: ANN401
        raw = _as_mapping(raw)
        if "$ref" in raw:
            return self._reference(raw, location)

        headers = {
            header_name: self._header(header, join_pointer(location, "headers", header_name))
            for header_name, header in _as_mapping(raw.get("headers")).items()
        }

        if self.is_v2:
            schema = self._schema(raw["schema"], join_pointer(location, "schema")) if "schema" in raw else None
            return Response(
                description=raw.get("description"),
                schema=schema,
                media_type=produces[0] if produces else DEFAULT_MEDIA_TYPE,
                headers=headers,
                location=location,
            )

        return Response(
            description=raw.get("description"),
            content=self._content(raw["content"], join_pointer(location, "content")) if "content" in raw else None,
            headers=headers,
            location=location,
        )

    def _paths(self, raw_paths: Mapping[str, Any], section: str) -> dict[str, PathItem | Reference]:
        return {
            path: self._path_item(raw, join_pointer(ROOT, section, path))
            for path, raw in raw_paths.items()
            if isinstance(raw, Mapping)
        }

    def _path_item(self, raw: Any, location: str) -> PathItem | Reference:  # noqa: ANN401
        raw = _as_mapping(raw)
        if "$ref" in raw:
            return self._reference(raw, location)

        parameters = self._parameters(raw.get("parameters"), join_pointer(location, "parameters"))
        inherited_body: list[Parameter] = []
        if self.is_v2:
            parameters, inherited_body = self._split_body_parameters(parameters)

        operations = {}
        for method in self.http_methods:
            if isinstance(raw.get(method), Mapping):
                operations[method] = self._operation(
                    method, raw[method], join_pointer(location, method), inherited_body
                )

        return PathItem(
            operations=operations,
            parameters=parameters,
            summary=raw.get("summary"),
            description=raw.get("description"),
            location=location,
        )

    def _parameters(self, raw: Any, location: str) -> list[Parameter | Reference]:  # noqa: ANN401
        return [self._parameter(param, join_pointer(location, index)) for index, param in enumerate(_as_list(raw))]

    def _operation(
        self,
        method: str,
        raw: Mapping[str, Any],
        location: str,
        inherited_body: list[Parameter],
    ) -> Operation:
        parameters = self._parameters(raw.get("parameters"), join_pointer(location, "parameters"))
        request_body: RequestBody | Reference | None = None
        produces = self._produces

        if self.is_v2:
            parameters, body_parameters = self._split_body_parameters(parameters)
            overridden = {param.key for param in body_parameters}
            body_parameters = [param for param in inherited_body if param.key not in overridden] + body_parameters
            consumes = [str(media) for media in _as_list(raw.get("consumes"))] or self._consumes
            request_body = self._body_from_parameters(body_parameters, consumes, location)
            produces = [str(media) for media in _as_list(raw.get("produces"))] or self._produces
        elif "requestBody" in raw:
            request_body = self._request_body(raw["requestBody"], join_pointer(location, "requestBody"))

        responses = {
            str(status): self._response(response, join_pointer(location, "responses", str(status)), produces)
            for status, response in _as_mapping(raw.get("responses")).items()
        }

        operation_id = raw.get("operationId")
        return Operation(
            method=method,
            operation_id=str(operation_id) if operation_id else None,
            summary=raw.get("summary"),
            description=raw.get("description"),
            deprecated=bool(raw.get("deprecated", False)),
            parameters=parameters,
            request_body=request_body,
            responses=responses,
            location=location,
        )

    def _lookup_local_parameter(self, reference: Reference) -> Parameter | None:
        """Find the bag parameter a local V2 ``#/parameters/<name>`` reference points at."""
        document, tokens = split_ref(reference.ref)
        if document is not None or len(tokens) != 2 or tokens[0] != PARAMETERS:  # noqa: PLR2004
            return None
        target = self._components.parameters.get(tokens[1])
        return target if isinstance(target, Parameter) else None

    def _split_body_parameters(
        self, parameters: Iterable[Parameter | Reference]
    ) -> tuple[list[Parameter | Reference], list[Parameter]]:
        """Separate V2 ``body``/``formData`` parameters from the others."""
        kept: list[Parameter | Reference] = []
        body: list[Parameter] = []
        for param in parameters:
            resolved = self._lookup_local_parameter(param) if isinstance(param, Reference) else param
            if resolved is not None and resolved.param_in in BODY_LOCATIONS:
                body.append(resolved)
            else:
                kept.append(param)
        return kept, body

    def _body_from_parameters(
        self,
        parameters: list[Parameter],
        consumes: list[str],
        location: str,
    ) -> RequestBody | None:
        """Build a request body from V2 ``body`` or ``formData`` parameters."""
        body_params = [param for param in parameters if param.param_in == "body"]
        if body_params:
            body = body_params[-1]
            media_type = consumes[0] if consumes else DEFAULT_MEDIA_TYPE
            return RequestBody(
                content={media_type: MediaType(schema=body.schema)},
                required=body.required,
                description=body.description,
                location=body.location,
            )

        form_params = [param for param in parameters if param.param_in == "formData"]
        if not form_params:
            return None

        media_type = MULTIPART_MEDIA_TYPE if MULTIPART_MEDIA_TYPE in consumes else FORM_URLENCODED_MEDIA_TYPE
        form_schema = SchemaNode(
            type="object",
            properties={param.name: param.schema or SchemaNode(location=param.location) for param in form_params},
            required=[param.name for param in form_params if param.required],
            additional_properties=False,
            location=join_pointer(location, "parameters"),
        )
        return RequestBody(
            content={media_type: MediaType(schema=form_schema)},
            required=any(param.required for param in form_params),
            location=join_pointer(location, "parameters"),
        )
