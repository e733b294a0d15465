"""
Test TypeScript rendering of type expressions and declaration files.
"""

import pytest

from ts_oas_types.config import GeneratorOptions
from ts_oas_types.generator.emitter import (
    DOCUMENT_TEMPLATE,
    TypeRenderer,
    TypeScriptEmitter,
    TypeScriptTemplateEngine,
)
from ts_oas_types.generator.expressions import (
    NEVER,
    NULL,
    NUMBER,
    STRING,
    UNKNOWN,
    ArrayType,
    Doc,
    IndexAccess,
    IntersectionType,
    Literal,
    Member,
    ObjectType,
    RefType,
    TemplateLiteral,
    TupleType,
    TypeExpr,
    UnionType,
    Verbatim,
)
from ts_oas_types.generator.filters import FILTERS, doc_lines, ts_doc_comment, ts_string
from ts_oas_types.generator.graph import Declaration, TypeGraph
from ts_oas_types.generator.projector import PathsEnum

PET_REF = RefType(("components", "schemas", "Pet"), "#/components/schemas/Pet")


@pytest.fixture
def renderer() -> TypeRenderer:
    """Renderer with default options."""
    return TypeRenderer(GeneratorOptions())


@pytest.fixture
def immutable_renderer() -> TypeRenderer:
    """Renderer emitting readonly types."""
    return TypeRenderer(GeneratorOptions(immutable_types=True))


class TestTypeRenderer:
    """Test rendering single expressions."""

    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            (STRING, "string"),
            (UNKNOWN, "unknown"),
            (NEVER, "never"),
            (NULL, "null"),
            (Literal(True), "true"),
            (Literal(1.5), "1.5"),
            (Literal('say "hi"'), '"say \\"hi\\""'),
            (UnionType((Literal("a"), Literal("b"), NULL)), '"a" | "b" | null'),
            (ArrayType(STRING), "string[]"),
            (ArrayType(UnionType((STRING, NUMBER))), "(string | number)[]"),
            (TupleType((STRING, NUMBER)), "[string, number]"),
            (Verbatim("Date"), "Date"),
            (ArrayType(Verbatim("Date")), "(Date)[]"),
            (PET_REF, 'components["schemas"]["Pet"]'),
            (
                IntersectionType((PET_REF, UnionType((STRING, NUMBER)))),
                'components["schemas"]["Pet"] & (string | number)',
            ),
            (
                IntersectionType((PET_REF, Verbatim("A | B"))),
                'components["schemas"]["Pet"] & (A | B)',
            ),
            (ObjectType(), "Record<string, never>"),
        ],
    )
    def test_render(self, renderer: TypeRenderer, expression: TypeExpr, expected: str) -> None:
        """Test rendering of leaf and composite expressions."""
        assert renderer.render(expression) == expected

    def test_indexed_access_address(self, renderer: TypeRenderer) -> None:
        """Test that deep pointers render as chained indexed access."""
        address = ("components", "schemas", "Pets", IndexAccess.NUMBER, "tags", IndexAccess.STRING)

        assert renderer.render_address(address) == 'components["schemas"]["Pets"][number]["tags"][string]'

    def test_object_members(self, renderer: TypeRenderer) -> None:
        """Test object members, optional markers, quoting and the index signature."""
        expression = ObjectType(
            (
                Member("id", NUMBER),
                Member("tag", STRING, required=False),
                Member("application/json", PET_REF),
                Member("200", UNKNOWN),
            ),
            index_signature=UNKNOWN,
        )

        assert renderer.render(expression) == (
            "{\n"
            "  id: number;\n"
            "  tag?: string;\n"
            '  "application/json": components["schemas"]["Pet"];\n'
            "  200: unknown;\n"
            "  [key: string]: unknown;\n"
            "}"
        )

    def test_nested_objects_are_indented(self, renderer: TypeRenderer) -> None:
        """Test that nested objects indent one level per depth."""
        expression = ObjectType((Member("outer", ObjectType((Member("inner", STRING),))),))

        assert renderer.render(expression) == "{\n  outer: {\n    inner: string;\n  };\n}"

    def test_member_doc_comment(self, renderer: TypeRenderer) -> None:
        """Test that documented members get a JSDoc comment above them."""
        member = Member("name", STRING, doc=Doc(description="The pet's name"))

        assert renderer.render_member(member, 1) == "  /** The pet's name */\n  name: string;"

    def test_template_literal_key(self, renderer: TypeRenderer) -> None:
        """Test that templated path keys render as an index signature with a template literal."""
        member = Member(TemplateLiteral(("/pets/", NUMBER)), ObjectType((Member("get", UNKNOWN),)))

        assert renderer.render_member(member, 1) == "  [path: `/pets/${number}`]: {\n    get: unknown;\n  };"

    def test_template_literal_escaping(self, renderer: TypeRenderer) -> None:
        """Test that template text escapes backticks, placeholders and backslashes."""
        assert renderer.render(TemplateLiteral(("a`b${c}\\",))) == r"`a\`b\${c}\\`"

    def test_immutable_types(self, immutable_renderer: TypeRenderer) -> None:
        """Test that immutable mode marks members, arrays and tuples readonly."""
        expression = ObjectType(
            (
                Member("tags", ArrayType(ArrayType(STRING))),
                Member("pair", TupleType((STRING, NUMBER))),
            ),
            index_signature=STRING,
        )

        assert immutable_renderer.render(expression) == (
            "{\n"
            "  readonly tags: readonly (readonly string[])[];\n"
            "  readonly pair: readonly [string, number];\n"
            "  readonly [key: string]: string;\n"
            "}"
        )


class TestDeclarations:
    """Test top-level declarations."""

    def test_interface(self, renderer: TypeRenderer) -> None:
        """Test the default interface form."""
        declaration = Declaration("operations", ObjectType((Member("listPets", UNKNOWN),)))

        assert renderer.render_declaration(declaration) == "export interface operations {\n  listPets: unknown;\n}"

    def test_export_type(self, renderer: TypeRenderer) -> None:
        """Test the type alias form."""
        declaration = Declaration("operations", ObjectType((Member("listPets", UNKNOWN),)))

        assert (
            renderer.render_declaration(declaration, export_type=True)
            == "export type operations = {\n  listPets: unknown;\n};"
        )

    def test_empty_declaration(self, renderer: TypeRenderer) -> None:
        """Test that an empty top-level declaration is an empty interface body."""
        assert renderer.render_declaration(Declaration("components", ObjectType())) == "export interface components {}"


class TestEmitter:
    """Test emitting a whole type graph."""

    @pytest.fixture
    def graph(self) -> TypeGraph:
        """A small graph with paths, one schema and a paths enum."""
        paths = ObjectType((Member("/pets", ObjectType((Member("get", RefType(("operations", "listPets"))),))),))
        schemas = ObjectType((Member("Pet", ObjectType((Member("id", NUMBER),))),))
        return TypeGraph(
            declarations=[
                Declaration("paths", paths),
                Declaration("components", ObjectType((Member("schemas", schemas),)), doc=Doc(description="Shared")),
            ],
            paths_enum=PathsEnum("ApiPaths", (("Pets", "/pets"),), Literal("/pets")),
        )

    def test_emit(self, graph: TypeGraph) -> None:
        """Test the layout of an emitted file."""
        text = TypeScriptEmitter(GeneratorOptions(comment_header="// generated")).emit(graph)

        assert text == (
            "// generated\n"
            "export interface paths {\n"
            '  "/pets": {\n'
            '    get: operations["listPets"];\n'
            "  };\n"
            "}\n"
            "\n"
            "/** Shared */\n"
            "export interface components {\n"
            "  schemas: {\n"
            "    Pet: {\n"
            "      id: number;\n"
            "    };\n"
            "  };\n"
            "}\n"
            "\n"
            "export enum ApiPaths {\n"
            '  Pets = "/pets",\n'
            "}\n"
        )

    def test_default_header(self, graph: TypeGraph) -> None:
        """Test that the default header leads the file."""
        text = TypeScriptEmitter(GeneratorOptions()).emit(graph)

        assert text.startswith("/**\n * This file was auto-generated by ts-oas-types.\n")
        assert "export interface paths {" in text

    def test_no_header(self, graph: TypeGraph) -> None:
        """Test that an empty header is left out."""
        text = TypeScriptEmitter(GeneratorOptions(comment_header="")).emit(graph)

        assert text.startswith("export interface paths {")

    def test_export_type_option(self, graph: TypeGraph) -> None:
        """Test that the export_type option reaches the template."""
        text = TypeScriptEmitter(GeneratorOptions(comment_header="", export_type=True)).emit(graph)

        assert text.startswith("export type paths = {")
        assert "export interface" not in text


class TestFilters:
    """Test the template filters."""

    def test_doc_lines(self) -> None:
        """Test that documentation fields become JSDoc lines in a fixed order."""
        doc = Doc(description="Pet id\n", format="int64", default="1", example="42", deprecated=True)

        assert doc_lines(doc) == ["Pet id", "Format: int64", "@default 1", "@deprecated", "@example 42"]

    def test_single_line_comment(self) -> None:
        """Test that one line of documentation stays on one line."""
        assert ts_doc_comment("The pet's name", indent=2) == "  /** The pet's name */"

    def test_block_comment(self) -> None:
        """Test that multi-line documentation becomes a block with bullets indented."""
        comment = ts_doc_comment("Filters:\n\n- by tag\n*/ closes")

        assert comment == "/**\n * Filters:\n *\n *   - by tag\n * *\\/ closes\n */"

    def test_empty_doc(self) -> None:
        """Test that nothing is emitted without documentation."""
        assert ts_doc_comment(None) == ""
        assert ts_doc_comment(Doc()) == ""

    def test_ts_string(self) -> None:
        """Test the string literal filter."""
        assert ts_string("/pets") == '"/pets"'

    def test_registry_matches_template_usage(self) -> None:
        """Test that every registered filter is used by the document template."""
        engine = TypeScriptTemplateEngine(GeneratorOptions())
        template = (engine.template_dir / DOCUMENT_TEMPLATE).read_text(encoding="utf-8")

        for name in FILTERS:
            assert f"| {name}" in template
