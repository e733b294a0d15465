"""
The canonical type graph produced by one generation run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ts_oas_types.generator.expressions import Doc, ObjectType
from ts_oas_types.generator.projector import PathsEnum, ProjectedOperation


@dataclass(frozen=True)
class Declaration:
    """One top-level ``export interface``/``export type``."""

    name: str
    type: ObjectType
    doc: Doc | None = None


@dataclass
class TypeGraph:
    """Declarations in emission order, plus what the emitter needs besides them.

    Attributes:
        declarations: Top-level declarations, in output order.
        operations: Operations registered by ``operationId``.
        paths_enum: The paths enum, when requested.
    """

    declarations: list[Declaration] = field(default_factory=list)
    operations: dict[str, ProjectedOperation] = field(default_factory=dict)
    paths_enum: PathsEnum | None = None

    def declaration(self, name: str) -> Declaration | None:
        return next((declaration for declaration in self.declarations if declaration.name == name), None)
