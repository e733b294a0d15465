"""
Composition Transformer

Maps each schema node to exactly one canonical type expression. Rules apply in
this order, the first match wins:

0. A configured ``formatter`` returning text.
1. A non-empty ``enum`` (union of literals).
2. ``oneOf``/``anyOf`` (union, or the intersection of both unions when a
   node carries both).
3. ``allOf`` (merged object when every member is a plain inline object,
   intersection otherwise). A property declared by several members is typed
   by an ``allOf`` of all its declarations.
4. ``type`` (object, array/tuple, primitives, null).

``nullable`` is applied last. References never recurse into their target:
they become a :class:`RefType` naming the bag entry, which is what keeps
self-referential schemas finite.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from types import MappingProxyType
from typing import Any, Final

from ts_oas_types.config import GeneratorOptions
from ts_oas_types.diagnostics import (
    CIRCULAR_REFERENCE,
    EMPTY_COMPOSITION,
    NO_SCHEMA_SIGNAL,
    REQUIRED_PROPERTY_MISSING,
    UNKNOWN_TYPE,
    DiagnosticCollector,
)
from ts_oas_types.generator.expressions import (
    BOOLEAN,
    NEVER,
    NULL,
    NUMBER,
    STRING,
    UNKNOWN,
    ArrayType,
    Doc,
    IndexAccess,
    Member,
    ObjectType,
    RefType,
    TupleType,
    TypeExpr,
    Verbatim,
    intersection_of,
    literal,
    union_of,
)
from ts_oas_types.parser.models import Reference, SchemaNode, SchemaOrRef
from ts_oas_types.parser.resolver import PATHS, ReferenceResolver, RefTarget

_PRIMITIVES: Final = {
    "string": STRING,
    "number": NUMBER,
    "integer": NUMBER,
    "boolean": BOOLEAN,
    "null": NULL,
}

# Deep-pointer tokens that map onto an indexed-access type
_INDEXED_TOKENS: Final = {"items": IndexAccess.NUMBER, "additionalProperties": IndexAccess.STRING}
_COMPOSITION_TOKENS: Final = frozenset({"allOf", "oneOf", "anyOf"})

EXTERNAL: Final = "external"


def _json_text(value: Any) -> str:  # noqa: ANN401
    return json.dumps(value, ensure_ascii=False, default=str)


def _is_plain_object(node: SchemaNode) -> bool:
    """Check whether an ``allOf`` member can be merged property-wise."""
    return (
        node.type in (None, "object")
        and not node.enum
        and node.all_of is None
        and node.one_of is None
        and node.any_of is None
        and node.items is None
        and not node.nullable
    )


def _all_of_declarations(declarations: list[SchemaOrRef], location: str) -> SchemaNode:
    """Combine several declarations of one property; the last documented one supplies the docs."""
    documented = [node for node in declarations if isinstance(node, SchemaNode) and (node.description or node.title)]
    source = documented[-1] if documented else SchemaNode()
    return SchemaNode(
        all_of=list(declarations),
        title=source.title,
        description=source.description,
        location=location,
    )


class SchemaTransformer:
    """Turns schema nodes into type expressions for one generation run.

    Results are memoized per node, so transforming the same node twice returns
    the same expression.

    Args:
        resolver: Resolver over the run's documents.
        options: Validated generation options.
        diagnostics: Sink for non-fatal problems.
    """

    def __init__(
        self,
        resolver: ReferenceResolver,
        options: GeneratorOptions,
        diagnostics: DiagnosticCollector,
    ) -> None:
        self.resolver = resolver
        self.options = options
        self.diagnostics = diagnostics
        # id(node) -> (node, expression); the node is kept so its id can't be reused
        self._memo: dict[int, tuple[SchemaNode, TypeExpr]] = {}
        self._inlining: set[RefTarget] = set()

    def transform(self, node: SchemaOrRef | None) -> TypeExpr:
        """Return the type expression for a schema or reference."""
        if node is None:
            return UNKNOWN
        if isinstance(node, Reference):
            return self.reference(node)

        cached = self._memo.get(id(node))
        if cached is not None and cached[0] is node:
            return cached[1]
        expression = self._transform_schema(node)
        self._memo[id(node)] = (node, expression)
        return expression

    def reference(self, reference: Reference) -> TypeExpr:
        """Return the expression a ``$ref`` stands for.

        Raises:
            ResolutionError: If the pointer has no target.
        """
        resolution = self.resolver.resolve(reference)
        if resolution.cyclic:
            self.diagnostics.warn(
                CIRCULAR_REFERENCE,
                f"'{reference.ref}' is part of a reference cycle with no schema",
                reference.location,
            )
            return UNKNOWN

        target = resolution.target
        address = self.address_of(target)
        if address is None:
            return self._inline(reference, target, resolution.node)
        return RefType(address=address, pointer=reference.ref)

    def address_of(self, target: RefTarget) -> tuple[str | IndexAccess, ...] | None:
        """Declaration address of a target, or None when it must be inlined.

        Targets inside ``paths``, under kinds that aren't emitted, or below a
        composition array have no name of their own.
        """
        if target.kind == PATHS or _COMPOSITION_TOKENS.intersection(target.subpath):
            return None
        document = self.resolver.document(target.document)
        if document is None or target.kind not in document.sections:
            return None

        address: list[str | IndexAccess] = []
        if target.document is not None:
            address.extend((EXTERNAL, target.document))
        address.extend(document.sections[target.kind])
        address.append(target.name)

        tokens = list(target.subpath)
        while tokens:
            token = tokens.pop(0)
            if token == "properties" and tokens:
                address.append(tokens.pop(0))
            elif token in _INDEXED_TOKENS:
                address.append(_INDEXED_TOKENS[token])
            else:
                return None
        return tuple(address)

    def doc_for(self, node: SchemaOrRef | None) -> Doc | None:
        """Documentation for a member typed by ``node``, or None when there is nothing to say."""
        if not isinstance(node, SchemaNode):
            return None
        doc = Doc(
            description=node.description or node.title,
            format=node.format,
            default=_json_text(node.default) if node.has_default else None,
            example=_json_text(node.example) if node.has_example else None,
            deprecated=node.deprecated,
        )
        return doc or None

    def _inline(self, reference: Reference, target: RefTarget, node: Any) -> TypeExpr:  # noqa: ANN401
        if not isinstance(node, SchemaNode | Reference):
            return UNKNOWN
        if target in self._inlining:
            self.diagnostics.warn(
                CIRCULAR_REFERENCE,
                f"'{reference.ref}' refers back to itself and can't be inlined",
                reference.location,
            )
            return UNKNOWN
        self._inlining.add(target)
        try:
            return self.transform(node)
        finally:
            self._inlining.discard(target)

    def _transform_schema(self, node: SchemaNode) -> TypeExpr:
        if self.options.formatter is not None:
            formatted = self.options.formatter(MappingProxyType(dict(node.raw)))
            if formatted is not None:
                return Verbatim(formatted)

        expression = self._base_type(node)

        if node.nullable and not (self.options.default_non_nullable and node.has_default):
            expression = union_of((expression, NULL))
        return expression

    def _base_type(self, node: SchemaNode) -> TypeExpr:
        if node.enum:
            return union_of(literal(value) for value in node.enum)

        if node.one_of is not None or node.any_of is not None:
            return self._union(node)

        if node.all_of is not None:
            return self._all_of(node)

        schema_type = node.type
        if schema_type is None:
            if node.items is not None:
                schema_type = "array"
            elif node.properties or node.additional_properties is not None or node.required:
                schema_type = "object"
            else:
                self.diagnostics.warn(NO_SCHEMA_SIGNAL, "Schema has no type information", node.location)
                return UNKNOWN

        if schema_type == "object":
            return self._object(node)
        if schema_type == "array":
            return self._array(node)
        if schema_type in _PRIMITIVES:
            return _PRIMITIVES[schema_type]

        self.diagnostics.warn(UNKNOWN_TYPE, f"Unrecognized schema type '{schema_type}'", node.location)
        return UNKNOWN

    def _union(self, node: SchemaNode) -> TypeExpr:
        groups = [group for group in (node.one_of, node.any_of) if group]
        if not groups:
            self.diagnostics.warn(EMPTY_COMPOSITION, "oneOf/anyOf has no members", node.location)
            return NEVER
        expressions = [union_of(self.transform(member) for member in group) for group in groups]
        if node.properties:
            expressions.append(self._object(node))
        return intersection_of(expressions)

    def _all_of(self, node: SchemaNode) -> TypeExpr:
        members = node.all_of or []
        plain = [member for member in members if isinstance(member, SchemaNode) and _is_plain_object(member)]
        if len(plain) == len(members):
            return self._object(self._merge_objects(node, plain))

        expressions = [self.transform(member) for member in members]
        if node.properties:
            expressions.append(self._object(node))
        return intersection_of(expressions)

    @staticmethod
    def _merge_objects(node: SchemaNode, members: Iterable[SchemaNode]) -> SchemaNode:
        """Fold plain ``allOf`` objects (and the node's own properties) into one object schema."""
        declarations: dict[str, list[SchemaOrRef]] = {}
        required: list[str] = []
        additional: bool | SchemaOrRef | None = None
        for part in (*members, node):
            for name, prop in part.properties.items():
                seen = declarations.setdefault(name, [])
                if not any(prop is other for other in seen):
                    seen.append(prop)
            required.extend(name for name in part.required if name not in required)
            if part.additional_properties is not None:
                additional = part.additional_properties
        properties = {
            name: seen[0] if len(seen) == 1 else _all_of_declarations(seen, node.location)
            for name, seen in declarations.items()
        }
        return SchemaNode(
            type="object",
            properties=properties,
            required=required,
            additional_properties=additional,
            location=node.location,
        )

    def _object(self, node: SchemaNode) -> ObjectType:
        members = [
            Member(
                name=name,
                type=self.transform(prop),
                required=name in node.required,
                doc=self.doc_for(prop),
            )
            for name, prop in node.properties.items()
        ]
        for name in node.required:
            if name not in node.properties:
                self.diagnostics.warn(
                    REQUIRED_PROPERTY_MISSING,
                    f"Required property '{name}' is not defined in properties",
                    node.location,
                )
                members.append(Member(name=name, type=UNKNOWN, required=True))

        additional = node.additional_properties
        index_signature: TypeExpr | None
        if additional is True:
            index_signature = UNKNOWN
        elif additional is False:
            index_signature = None
        elif additional is not None:
            index_signature = self.transform(additional)
        elif self.options.additional_properties or not members:
            index_signature = UNKNOWN
        else:
            index_signature = None

        return ObjectType(members=tuple(members), index_signature=index_signature)

    def _array(self, node: SchemaNode) -> TypeExpr:
        items = self.transform(node.items)
        if (
            self.options.support_array_length
            and node.min_items is not None
            and node.min_items == node.max_items
        ):
            return TupleType((items,) * node.min_items)
        return ArrayType(items)
