"""
TypeScript Emitter

Renders the canonical type graph as TypeScript declaration text. Type
expressions are rendered by :class:`TypeRenderer`; the file layout lives in
Jinja2 templates rendered by :class:`TypeScriptTemplateEngine`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Final

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ts_oas_types.config import GeneratorOptions
from ts_oas_types.generator.expressions import (
    ArrayType,
    IndexAccess,
    IntersectionType,
    Literal,
    Member,
    NeverType,
    ObjectType,
    Primitive,
    RefType,
    TemplateLiteral,
    TupleType,
    TypeExpr,
    UnionType,
    UnknownType,
    Verbatim,
)
from ts_oas_types.generator.filters import FILTERS, ts_doc_comment
from ts_oas_types.generator.graph import Declaration, TypeGraph
from ts_oas_types.utils.string_case import ts_property_key, ts_string_literal

INDENT: Final = "  "
DOCUMENT_TEMPLATE: Final = "document.ts.j2"
EMPTY_OBJECT: Final = "Record<string, never>"


def _escape_template_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


class TypeRenderer:
    """Renders type expressions as TypeScript type syntax."""

    def __init__(self, options: GeneratorOptions) -> None:
        self.immutable = options.immutable_types

    def render(self, expression: TypeExpr, indent: int = 0) -> str:  # noqa: C901, PLR0911
        """Render one expression; ``indent`` is the nesting level of the line it starts on."""
        match expression:
            case Primitive(name=name):
                return name
            case Literal(value=value):
                return self._literal(value)
            case ArrayType(items=items):
                rendered = self._array_item(items, indent)
                return f"readonly {rendered}[]" if self.immutable else f"{rendered}[]"
            case TupleType(items=items):
                rendered = "[" + ", ".join(self.render(item, indent) for item in items) + "]"
                return f"readonly {rendered}" if self.immutable else rendered
            case ObjectType():
                return self.render_object(expression, indent)
            case UnionType(members=members):
                return " | ".join(self.render(member, indent) for member in members)
            case IntersectionType(members=members):
                return " & ".join(
                    f"({self.render(member, indent)})"
                    if isinstance(member, UnionType | Verbatim)
                    else self.render(member, indent)
                    for member in members
                )
            case RefType(address=address):
                return self.render_address(address)
            case UnknownType():
                return "unknown"
            case NeverType():
                return "never"
            case Verbatim(text=text):
                return text
            case TemplateLiteral(parts=parts):
                return self.render_template_literal(parts, indent)
        msg = f"Can't render type expression {expression!r}"
        raise TypeError(msg)

    @staticmethod
    def _literal(value: Any) -> str:  # noqa: ANN401
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return ts_string_literal(value)
        return json.dumps(value)

    def _array_item(self, items: TypeExpr, indent: int) -> str:
        rendered = self.render(items, indent)
        if isinstance(items, UnionType | IntersectionType | Verbatim) or rendered.startswith("readonly "):
            return f"({rendered})"
        return rendered

    @staticmethod
    def render_address(address: tuple[str | IndexAccess, ...]) -> str:
        """``components["schemas"]["Pet"]`` style indexed access for a declaration address."""
        head, *rest = address
        parts = [str(head)]
        for segment in rest:
            if isinstance(segment, IndexAccess):
                parts.append(f"[{segment.value}]")
            else:
                parts.append(f"[{ts_string_literal(segment)}]")
        return "".join(parts)

    def render_template_literal(self, parts: tuple[str | TypeExpr, ...], indent: int = 0) -> str:
        rendered = []
        for part in parts:
            if isinstance(part, str):
                rendered.append(_escape_template_text(part))
            else:
                rendered.append("${" + self.render(part, indent) + "}")
        return "`" + "".join(rendered) + "`"

    def render_member(self, member: Member, indent: int) -> str:
        """One object member line (plus its doc comment), indented at ``indent``."""
        pad = INDENT * indent
        readonly = "readonly " if self.immutable else ""
        if isinstance(member.name, TemplateLiteral):
            key = f"[path: {self.render_template_literal(member.name.parts, indent)}]"
            optional = ""
        else:
            key = ts_property_key(member.name)
            optional = "" if member.required else "?"

        line = f"{pad}{readonly}{key}{optional}: {self.render(member.type, indent)};"
        comment = ts_doc_comment(member.doc, indent=len(pad))
        return f"{comment}\n{line}" if comment else line

    def render_body(self, expression: ObjectType, indent: int = 0) -> str:
        """Render an object as a ``{ ... }`` block; empty objects render as ``{}``."""
        lines = [self.render_member(member, indent + 1) for member in expression.members]
        if expression.index_signature is not None:
            readonly = "readonly " if self.immutable else ""
            signature = self.render(expression.index_signature, indent + 1)
            lines.append(f"{INDENT * (indent + 1)}{readonly}[key: string]: {signature};")
        if not lines:
            return "{}"
        return "{\n" + "\n".join(lines) + "\n" + INDENT * indent + "}"

    def render_object(self, expression: ObjectType, indent: int = 0) -> str:
        if not expression.members and expression.index_signature is None:
            return EMPTY_OBJECT
        return self.render_body(expression, indent)

    def render_declaration(self, declaration: Declaration, *, export_type: bool = False) -> str:
        """``export interface X {...}`` or, with ``export_type``, ``export type X = {...};``."""
        body = self.render_body(declaration.type)
        if export_type:
            return f"export type {declaration.name} = {body};"
        return f"export interface {declaration.name} {body}"


class TypeScriptTemplateEngine:
    """Template engine for TypeScript declaration files."""

    def __init__(self, options: GeneratorOptions, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent.parent / "templates"

        self.options = options
        self.renderer = TypeRenderer(options)
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

        self._register_filters()
        self._register_globals()

    def _register_filters(self) -> None:
        """Register custom Jinja2 filters for TypeScript output."""
        self.env.filters.update(FILTERS)
        self.env.filters["ts_type"] = self.renderer.render

    def _register_globals(self) -> None:
        """Register global functions available in templates."""
        self.env.globals.update(
            {
                "render_declaration": lambda declaration: self.renderer.render_declaration(
                    declaration, export_type=self.options.export_type
                ),
            }
        )

    def render_template(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a template with the given context."""
        template = self.env.get_template(template_name)
        return template.render(**context)


class TypeScriptEmitter:
    """Serializes a :class:`TypeGraph` to one TypeScript source text."""

    def __init__(self, options: GeneratorOptions, template_engine: TypeScriptTemplateEngine | None = None) -> None:
        self.options = options
        self.template_engine = template_engine or TypeScriptTemplateEngine(options)

    def emit(self, graph: TypeGraph) -> str:
        context = {
            "comment_header": self.options.comment_header,
            "declarations": graph.declarations,
            "paths_enum": graph.paths_enum,
        }
        text = self.template_engine.render_template(DOCUMENT_TEMPLATE, context)
        return text.rstrip("\n") + "\n"
