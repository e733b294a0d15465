"""
TypeScript OpenAPI Type Generator

Generates TypeScript declarations for the request, response and parameter
shapes of an OpenAPI 2 (Swagger) or OpenAPI 3 document.
"""

from .config import GeneratorOptions
from .errors import ConfigurationError, DocumentLoadError, GeneratorError, ResolutionError
from .generator import GenerationResult, TypeScriptGenerator, generate_types
from .loader import LoadedDocument, load_document

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "DocumentLoadError",
    "GenerationResult",
    "GeneratorError",
    "GeneratorOptions",
    "LoadedDocument",
    "ResolutionError",
    "TypeScriptGenerator",
    "generate_types",
    "load_document",
]
