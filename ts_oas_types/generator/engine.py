"""
TypeScript Type Generator

Runs the whole pipeline for one document: validate options, normalize,
resolve, transform, project and emit. A generator holds no state between
runs; every run builds its own resolver, transformer and diagnostics.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ts_oas_types.config import GeneratorOptions, detect_version, validate_options
from ts_oas_types.constants import OPENAPI_V3, SCHEMAS, TYPED_COMPONENT_KINDS
from ts_oas_types.diagnostics import Diagnostic, DiagnosticCollector
from ts_oas_types.generator.emitter import TypeScriptEmitter
from ts_oas_types.generator.expressions import Member, ObjectType
from ts_oas_types.generator.graph import Declaration, TypeGraph
from ts_oas_types.generator.projector import OPERATIONS, PathProjector
from ts_oas_types.generator.transformer import EXTERNAL, SchemaTransformer
from ts_oas_types.parser.models import NormalizedDocument
from ts_oas_types.parser.normalizer import OASNormalizer, is_api_document
from ts_oas_types.parser.resolver import PATHS, ReferenceResolver

logger = logging.getLogger(__name__)

WEBHOOKS = "webhooks"
COMPONENTS = "components"

# Nested section name -> (sub)section tree, with ObjectType leaves
SectionTree = dict[str, Any]


@dataclass
class GenerationResult:
    """Output of one run: the declaration text, the type graph and every diagnostic."""

    text: str
    graph: TypeGraph
    diagnostics: list[Diagnostic] = field(default_factory=list)


def _tree_type(tree: SectionTree) -> ObjectType:
    return ObjectType(
        tuple(
            Member(name=key, type=value if isinstance(value, ObjectType) else _tree_type(value))
            for key, value in tree.items()
        )
    )


class TypeScriptGenerator:
    """Generates TypeScript declarations from OpenAPI documents."""

    def __init__(self, options: GeneratorOptions | None = None, emitter: TypeScriptEmitter | None = None) -> None:
        self.options = options or GeneratorOptions()
        self._emitter = emitter

    def generate(
        self,
        document: Mapping[str, Any],
        external: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> GenerationResult:
        """Generate declarations for a parsed document.

        Args:
            document: The parsed root document (or raw schema collection).
            external: Parsed external documents keyed by the document part of
                the ``$ref`` strings that name them.

        Returns:
            The generation result.

        Raises:
            ConfigurationError: On invalid options or an undeterminable version.
            ResolutionError: On a ``$ref`` with no target.
        """
        options = validate_options(self.options, document)
        root = OASNormalizer(options.version).normalize(document, raw_schema=options.raw_schema)
        external_documents = {
            name: self._normalize_external(name, raw, options) for name, raw in (external or {}).items()
        }

        diagnostics = DiagnosticCollector(silent=options.silent)
        resolver = ReferenceResolver(root, external_documents)
        transformer = SchemaTransformer(resolver, options, diagnostics)
        projector = PathProjector(resolver, transformer, options)

        graph = self.build_graph(root, external_documents, projector)
        emitter = self._emitter or TypeScriptEmitter(options)
        text = emitter.emit(graph)

        logger.debug(
            "Generated %d declarations and %d operations with %d diagnostics",
            len(graph.declarations),
            len(graph.operations),
            len(diagnostics.diagnostics),
        )
        return GenerationResult(text=text, graph=graph, diagnostics=list(diagnostics.diagnostics))

    @staticmethod
    def _normalize_external(name: str, raw: Mapping[str, Any], options: GeneratorOptions) -> NormalizedDocument:
        """Normalize an external document; anything that isn't an API document is a schema collection."""
        if not is_api_document(raw):
            return OASNormalizer(options.version or OPENAPI_V3).normalize(raw, name=name, raw_schema=True)
        version = detect_version(raw) or options.version or OPENAPI_V3
        return OASNormalizer(version).normalize(raw, name=name)

    def build_graph(
        self,
        root: NormalizedDocument,
        external: Mapping[str, NormalizedDocument],
        projector: PathProjector,
    ) -> TypeGraph:
        """Project a normalized document into declarations, in output order.

        Order: ``paths``, ``webhooks``, the bag sections, ``operations``,
        ``external``.
        """
        graph = TypeGraph()
        options = projector.options

        if not root.raw_schema:
            graph.declarations.append(Declaration(name=PATHS, type=projector.paths_type(root.paths)))
            if root.webhooks:
                graph.declarations.append(
                    Declaration(name=WEBHOOKS, type=projector.paths_type(root.webhooks, templated=False))
                )
            if options.make_paths_enum:
                graph.paths_enum = projector.paths_enum(root.paths.keys())

        tree = self._section_tree(root, projector)
        if not root.raw_schema and root.version == OPENAPI_V3:
            tree.setdefault(COMPONENTS, {})
        graph.declarations.extend(
            Declaration(name=key, type=value if isinstance(value, ObjectType) else _tree_type(value))
            for key, value in tree.items()
        )

        # External sections are projected before operations, they may register some
        external_members = []
        for name, document in external.items():
            external_tree = self._section_tree(document, projector)
            if external_tree:
                external_members.append(Member(name=name, type=_tree_type(external_tree)))

        if not root.raw_schema:
            operations = ObjectType(
                tuple(
                    Member(name=operation_id, type=projected.type, doc=projected.doc)
                    for operation_id, projected in projector.operations.items()
                )
            )
            graph.declarations.append(Declaration(name=OPERATIONS, type=operations))
            graph.operations = dict(projector.operations)

        if external_members:
            graph.declarations.append(Declaration(name=EXTERNAL, type=ObjectType(tuple(external_members))))

        return graph

    @staticmethod
    def _section_tree(document: NormalizedDocument, projector: PathProjector) -> SectionTree:
        """Nest each non-empty bag kind under the address the document publishes it at."""
        tree: SectionTree = {}
        for kind in TYPED_COMPONENT_KINDS:
            entries = document.components.section(kind)
            if kind not in document.sections or not entries:
                continue
            if document.raw_schema and kind != SCHEMAS:
                continue
            section = ObjectType(
                tuple(
                    Member(
                        name=entry_name,
                        type=projector.bag_entry_type(kind, node),
                        doc=projector.bag_entry_doc(kind, node),
                    )
                    for entry_name, node in entries.items()
                )
            )
            *parents, leaf = document.sections[kind]
            parent = tree
            for key in parents:
                parent = parent.setdefault(key, {})
            parent[leaf] = section
        return tree


def generate_types(
    document: Mapping[str, Any],
    options: GeneratorOptions | None = None,
    external: Mapping[str, Mapping[str, Any]] | None = None,
) -> GenerationResult:
    """Generate TypeScript declarations for a parsed OpenAPI document."""
    return TypeScriptGenerator(options).generate(document, external)
