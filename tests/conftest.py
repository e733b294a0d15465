"""
Shared fixtures for the type generator tests.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import yaml

from ts_oas_types.config import GeneratorOptions, validate_options
from ts_oas_types.diagnostics import DiagnosticCollector
from ts_oas_types.generator.projector import PathProjector
from ts_oas_types.generator.transformer import SchemaTransformer
from ts_oas_types.parser.models import NormalizedDocument
from ts_oas_types.parser.normalizer import OASNormalizer
from ts_oas_types.parser.resolver import ReferenceResolver

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@dataclass
class Pipeline:
    """The stages of one generation run, wired together for unit tests."""

    options: GeneratorOptions
    document: NormalizedDocument
    resolver: ReferenceResolver
    transformer: SchemaTransformer
    projector: PathProjector
    diagnostics: DiagnosticCollector

    def schema(self, name: str) -> Any:
        return self.document.components.schemas[name]


@pytest.fixture
def fixtures_dir() -> Path:
    """Get the path to the fixture documents."""
    return FIXTURES_DIR


@pytest.fixture
def petstore_document() -> dict[str, Any]:
    """Load the OpenAPI 3 petstore document."""
    with (FIXTURES_DIR / "petstore.yaml").open(encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def petstore_v2_document() -> dict[str, Any]:
    """Load the Swagger 2 petstore document."""
    with (FIXTURES_DIR / "petstore_v2.json").open(encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def build_pipeline() -> Callable[..., Pipeline]:
    """Build the resolver, transformer and projector for a raw document."""

    def _build(
        raw: dict[str, Any],
        external: dict[str, NormalizedDocument] | None = None,
        **option_values: Any,
    ) -> Pipeline:
        options = validate_options(GeneratorOptions(**{"silent": True, **option_values}), raw)
        document = OASNormalizer(options.version).normalize(raw, raw_schema=options.raw_schema)
        diagnostics = DiagnosticCollector(silent=options.silent)
        resolver = ReferenceResolver(document, external)
        transformer = SchemaTransformer(resolver, options, diagnostics)
        projector = PathProjector(resolver, transformer, options)
        return Pipeline(options, document, resolver, transformer, projector, diagnostics)

    return _build


@pytest.fixture
def schemas_document() -> Callable[..., dict[str, Any]]:
    """Build a minimal OpenAPI 3 document holding the given component schemas."""

    def _document(schemas: dict[str, Any], **extra: Any) -> dict[str, Any]:
        return {
            "openapi": "3.0.3",
            "info": {"title": "Test", "version": "1"},
            "paths": {},
            "components": {"schemas": schemas},
            **extra,
        }

    return _document
