"""
Test the path and operation projector.
"""

from collections.abc import Callable
from typing import Any

import pytest

from ts_oas_types.generator.expressions import (
    NEVER,
    NUMBER,
    STRING,
    UNKNOWN,
    ArrayType,
    Doc,
    Literal,
    Member,
    ObjectType,
    RefType,
    TemplateLiteral,
    TypeExpr,
    UnionType,
)
from ts_oas_types.parser.models import Header, Parameter, Response, SchemaNode

PETS_REF = RefType(("components", "schemas", "Pets"), "#/components/schemas/Pets")
LIMIT_REF = RefType(("components", "parameters", "Limit"), "#/components/parameters/Limit")
ERROR_RESPONSE_REF = RefType(("components", "responses", "Error"), "#/components/responses/Error")


def _member_type(expression: TypeExpr, *names: str) -> TypeExpr:
    """Walk nested object members by name."""
    for name in names:
        assert isinstance(expression, ObjectType), f"{name}: {expression!r} is not an object"
        member = expression.member(name)
        assert member is not None, f"no member {name!r}"
        expression = member.type
    return expression


class TestOperations:
    """Test operation projection on the petstore."""

    @pytest.fixture
    def pipeline(self, build_pipeline: Callable[..., Any], petstore_document: dict) -> Any:
        """Pipeline over the OpenAPI 3 petstore."""
        return build_pipeline(petstore_document)

    @pytest.fixture
    def list_pets(self, pipeline: Any) -> ObjectType:
        """Projected listPets operation."""
        item = pipeline.document.paths["/pets"]
        return pipeline.projector.operation_type(item.operations["get"], item.parameters)

    def test_parameters_grouped_by_location(self, list_pets: ObjectType) -> None:
        """Test that parameters are grouped under their location."""
        query = _member_type(list_pets, "parameters", "query")

        assert query == ObjectType(
            (
                Member(
                    "limit",
                    LIMIT_REF,
                    required=False,
                    doc=Doc(description="How many items to return at one time (max 100)"),
                ),
                Member("tag", STRING, required=False),
            )
        )

    def test_optional_location_group(self, list_pets: ObjectType) -> None:
        """Test that a location group with only optional parameters is optional."""
        parameters = _member_type(list_pets, "parameters")

        assert parameters.member("query").required is False

    def test_response_with_headers_and_content(self, list_pets: ObjectType) -> None:
        """Test that a response carries its headers and content map."""
        response = _member_type(list_pets, "responses", "200")

        assert response == ObjectType(
            (
                Member(
                    "headers",
                    ObjectType(
                        (
                            Member(
                                "x-next",
                                STRING,
                                required=False,
                                doc=Doc(description="A link to the next page of responses"),
                            ),
                        )
                    ),
                ),
                Member("content", ObjectType((Member("application/json", PETS_REF),))),
            )
        )

    def test_referenced_response(self, list_pets: ObjectType) -> None:
        """Test that a referenced response points at the bag entry."""
        assert _member_type(list_pets, "responses", "default") == ERROR_RESPONSE_REF

    def test_request_body(self, pipeline: Any) -> None:
        """Test that a required request body becomes a required member."""
        operation = pipeline.document.paths["/pets"].operations["post"]

        projected = pipeline.projector.operation_type(operation)
        request_body = projected.member("requestBody")

        assert request_body.required is True
        assert _member_type(request_body.type, "content", "application/json") == RefType(
            ("components", "schemas", "NewPet"), "#/components/schemas/NewPet"
        )

    def test_path_level_parameters_are_inherited(self, pipeline: Any) -> None:
        """Test that path-level parameters appear on each operation."""
        item = pipeline.document.paths["/pets/{petId}"]

        projected = pipeline.projector.operation_type(item.operations["get"], item.parameters)

        assert _member_type(projected, "parameters", "path", "petId") == NUMBER

    def test_operations_registered_by_id(self, pipeline: Any) -> None:
        """Test that operations with an operationId are referenced from paths."""
        paths = pipeline.projector.paths_type(pipeline.document.paths)

        assert _member_type(paths, "/pets", "get") == RefType(("operations", "listPets"))
        assert list(pipeline.projector.operations) == ["listPets", "createPet", "showPetById"]
        # No operationId: inlined
        assert isinstance(_member_type(paths, "/pets/{petId}", "delete"), ObjectType)

    def test_duplicate_operation_id_is_inlined(self, build_pipeline: Callable[..., Any]) -> None:
        """Test that a second operation reusing an id is inlined."""
        pipeline = build_pipeline(
            {
                "openapi": "3.0.0",
                "paths": {
                    "/a": {"get": {"operationId": "same", "responses": {}}},
                    "/b": {"get": {"operationId": "same", "responses": {}}},
                },
            }
        )

        paths = pipeline.projector.paths_type(pipeline.document.paths)

        assert _member_type(paths, "/a", "get") == RefType(("operations", "same"))
        assert _member_type(paths, "/b", "get") == ObjectType()

    def test_bag_entries(self, pipeline: Any) -> None:
        """Test the declared types of non-schema bag entries."""
        projector = pipeline.projector
        components = pipeline.document.components

        assert projector.bag_entry_type("parameters", components.parameters["Limit"]) == NUMBER
        assert _member_type(
            projector.bag_entry_type("responses", components.responses["Error"]), "content", "application/json"
        ) == RefType(("components", "schemas", "Error"), "#/components/schemas/Error")


class TestParameterMerge:
    """Test merging of path-level and operation-level parameters."""

    def test_operation_overrides_in_place(self, build_pipeline: Callable[..., Any]) -> None:
        """Test that an operation parameter replaces the path-level one and nothing is removed."""
        pipeline = build_pipeline({"openapi": "3.0.0", "paths": {}})
        path_level = [
            Parameter(name="a", param_in="query"),
            Parameter(name="b", param_in="query", schema=SchemaNode(type="string")),
        ]
        operation_level = [
            Parameter(name="b", param_in="query", schema=SchemaNode(type="integer")),
            Parameter(name="b", param_in="header"),
        ]

        merged = pipeline.projector.merge_parameters(path_level, operation_level)

        assert [(param.name, param.param_in) for param in merged] == [("a", "query"), ("b", "query"), ("b", "header")]
        assert merged[1] is operation_level[0]


class TestResponses:
    """Test response body typing."""

    @pytest.mark.parametrize(("content_never", "expected"), [(True, NEVER), (False, UNKNOWN)])
    def test_response_without_content(
        self, build_pipeline: Callable[..., Any], content_never: bool, expected: TypeExpr
    ) -> None:
        """Test that a response without schema or content is never or unknown."""
        pipeline = build_pipeline({"openapi": "3.0.0", "paths": {}}, content_never=content_never)

        assert pipeline.projector.response_type(Response(description="empty")) == expected

    def test_headers_without_content(self, build_pipeline: Callable[..., Any]) -> None:
        """Test that a bodiless response with headers keeps them next to its body type."""
        pipeline = build_pipeline({"openapi": "3.0.0", "paths": {}}, content_never=True)
        response = Response(headers={"X-Rate": Header(schema=SchemaNode(type="integer"), required=True)})

        assert pipeline.projector.response_type(response) == ObjectType(
            (
                Member("headers", ObjectType((Member("X-Rate", NUMBER, required=True),))),
                Member("content", NEVER),
            )
        )

    def test_swagger_schema_gets_media_type(
        self, build_pipeline: Callable[..., Any], petstore_v2_document: dict
    ) -> None:
        """Test that a V2 response schema is projected under its produced media type."""
        pipeline = build_pipeline(petstore_v2_document)
        response = pipeline.document.paths["/pets"].operations["get"].responses["200"]

        projected = pipeline.projector.response_type(response)

        assert _member_type(projected, "content", "application/json") == ArrayType(
            RefType(("definitions", "Pet"), "#/definitions/Pet")
        )


class TestPathKeys:
    """Test path template keys and the paths enum."""

    def test_path_params_as_types(self, build_pipeline: Callable[..., Any], petstore_document: dict) -> None:
        """Test that path parameters become template literal holes."""
        pipeline = build_pipeline(petstore_document, path_params_as_types=True)
        item = pipeline.document.paths["/pets/{petId}"]

        assert pipeline.projector.path_key("/pets/{petId}", item) == TemplateLiteral(("/pets/", NUMBER))
        assert pipeline.projector.path_key("/pets", pipeline.document.paths["/pets"]) == "/pets"

    def test_unmatched_path_parameter_is_string(self, build_pipeline: Callable[..., Any]) -> None:
        """Test that a template segment without a parameter is typed as string."""
        pipeline = build_pipeline(
            {"openapi": "3.0.0", "paths": {"/files/{name}.{ext}": {"get": {"responses": {}}}}},
            path_params_as_types=True,
        )
        item = pipeline.document.paths["/files/{name}.{ext}"]

        assert pipeline.projector.path_key("/files/{name}.{ext}", item) == TemplateLiteral(
            ("/files/", STRING, ".", STRING)
        )

    def test_enum_path_parameter_keeps_literals(self, build_pipeline: Callable[..., Any]) -> None:
        """Test that literal path parameter types stay in the template."""
        parameter = {"name": "kind", "in": "path", "schema": {"type": "string", "enum": ["cat", "dog"]}}
        pipeline = build_pipeline(
            {"openapi": "3.0.0", "paths": {"/pets/{kind}": {"parameters": [parameter]}}},
            path_params_as_types=True,
        )
        item = pipeline.document.paths["/pets/{kind}"]

        assert pipeline.projector.path_key("/pets/{kind}", item) == TemplateLiteral(
            ("/pets/", UnionType((Literal("cat"), Literal("dog"))))
        )

    def test_paths_enum(self, build_pipeline: Callable[..., Any]) -> None:
        """Test that every distinct path becomes an enum member."""
        pipeline = build_pipeline({"openapi": "3.0.0", "paths": {}})

        paths_enum = pipeline.projector.paths_enum(["/", "/pets", "/pets/{petId}", "/pets/{petId}", "/pets-{petId}"])

        assert paths_enum.name == "ApiPaths"
        assert paths_enum.members == (
            ("Root", "/"),
            ("Pets", "/pets"),
            ("PetsPetId", "/pets/{petId}"),
            ("PetsPetId2", "/pets-{petId}"),
        )
        assert paths_enum.union == UnionType(
            (Literal("/"), Literal("/pets"), Literal("/pets/{petId}"), Literal("/pets-{petId}"))
        )
