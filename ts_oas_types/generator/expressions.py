"""
Canonical type expressions.

The transformer turns every schema into one of these immutable values and the
emitter renders them as TypeScript. Expressions are hashable and compare
structurally, so two resolutions of the same pointer produce equal results.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias

LiteralValue: TypeAlias = str | int | float | bool | None


class IndexAccess(Enum):
    """Indexed-access segment of a reference address (``[number]``/``[string]``)."""

    NUMBER = "number"
    STRING = "string"


@dataclass(frozen=True)
class Doc:
    """Documentation carried alongside a member; never affects the type."""

    description: str | None = None
    format: str | None = None
    default: str | None = None
    example: str | None = None
    deprecated: bool = False

    def __bool__(self) -> bool:
        return bool(self.description or self.format or self.default is not None or self.example or self.deprecated)


@dataclass(frozen=True)
class Primitive:
    name: str


@dataclass(frozen=True, eq=False)
class Literal:
    """A literal type. ``True`` and ``1`` are different literals."""

    value: LiteralValue

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Literal) and type(self.value) is type(other.value) and self.value == other.value

    def __hash__(self) -> int:
        return hash((type(self.value), self.value))


@dataclass(frozen=True)
class ArrayType:
    items: TypeExpr


@dataclass(frozen=True)
class TupleType:
    items: tuple[TypeExpr, ...]


@dataclass(frozen=True)
class TemplateLiteral:
    """A template literal type such as `` `/pets/${number}` ``."""

    parts: tuple[str | TypeExpr, ...]


@dataclass(frozen=True)
class Member:
    name: str | TemplateLiteral
    type: TypeExpr
    required: bool = True
    doc: Doc | None = None


@dataclass(frozen=True)
class ObjectType:
    members: tuple[Member, ...] = ()
    index_signature: TypeExpr | None = None

    def member(self, name: str) -> Member | None:
        """Look up a member by name."""
        return next((member for member in self.members if member.name == name), None)


@dataclass(frozen=True)
class UnionType:
    members: tuple[TypeExpr, ...]


@dataclass(frozen=True)
class IntersectionType:
    members: tuple[TypeExpr, ...]


@dataclass(frozen=True)
class RefType:
    """A named reference to a declared type; the handle that makes recursion finite.

    Attributes:
        address: Declaration path, e.g. ``("components", "schemas", "Pet")``.
        pointer: The ``$ref`` string it came from (empty for internal links).
    """

    address: tuple[str | IndexAccess, ...]
    pointer: str = ""


@dataclass(frozen=True)
class UnknownType:
    pass


@dataclass(frozen=True)
class NeverType:
    pass


@dataclass(frozen=True)
class Verbatim:
    """Text supplied by a custom formatter, emitted unchanged."""

    text: str


TypeExpr: TypeAlias = (
    Primitive
    | Literal
    | ArrayType
    | TupleType
    | ObjectType
    | UnionType
    | IntersectionType
    | RefType
    | UnknownType
    | NeverType
    | Verbatim
    | TemplateLiteral
)

STRING = Primitive("string")
NUMBER = Primitive("number")
BOOLEAN = Primitive("boolean")
NULL = Literal(None)
UNKNOWN = UnknownType()
NEVER = NeverType()


def literal(value: Any) -> TypeExpr:  # noqa: ANN401
    """Build a literal type; non-scalar enum values are kept as JSON text."""
    if value is None or isinstance(value, str | int | float | bool):
        return Literal(value)
    return Verbatim(json.dumps(value))


def _flatten(members: Iterable[TypeExpr], kind: type[UnionType | IntersectionType]) -> list[TypeExpr]:
    flat: list[TypeExpr] = []
    for member in members:
        candidates = member.members if isinstance(member, kind) else (member,)
        for candidate in candidates:
            if candidate not in flat:
                flat.append(candidate)
    return flat


def union_of(members: Iterable[TypeExpr]) -> TypeExpr:
    """Union of the given types: flattened, de-duplicated, in first-seen order.

    An empty union is ``never``; a single member is returned unwrapped.
    """
    flat = _flatten(members, UnionType)
    if not flat:
        return NEVER
    if len(flat) == 1:
        return flat[0]
    return UnionType(tuple(flat))


def intersection_of(members: Iterable[TypeExpr]) -> TypeExpr:
    """Intersection of the given types; an empty intersection is ``unknown``."""
    flat = _flatten(members, IntersectionType)
    if not flat:
        return UNKNOWN
    if len(flat) == 1:
        return flat[0]
    return IntersectionType(tuple(flat))
