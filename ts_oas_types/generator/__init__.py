"""
TypeScript Generator Module

This module turns normalized documents into a canonical type graph and
renders it as TypeScript declarations with Jinja2 templates.
"""

from .emitter import TypeRenderer, TypeScriptEmitter, TypeScriptTemplateEngine
from .engine import GenerationResult, TypeScriptGenerator, generate_types
from .graph import Declaration, TypeGraph
from .projector import PathProjector, PathsEnum, ProjectedOperation
from .transformer import SchemaTransformer

__all__ = [
    "Declaration",
    "GenerationResult",
    "PathProjector",
    "PathsEnum",
    "ProjectedOperation",
    "SchemaTransformer",
    "TypeGraph",
    "TypeRenderer",
    "TypeScriptEmitter",
    "TypeScriptGenerator",
    "TypeScriptTemplateEngine",
    "generate_types",
]
