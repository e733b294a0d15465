"""
Error types raised by the TypeScript OpenAPI type generator.

Fatal problems abort a run with one of these exceptions. Non-fatal schema
problems are reported through :mod:`ts_oas_types.diagnostics` instead.
"""


class GeneratorError(Exception):
    """Base class for every error raised by the generator."""


class ConfigurationError(GeneratorError, ValueError):
    """Raised before a run when the options or the declared version are unusable."""


class ResolutionError(GeneratorError, LookupError):
    """Raised when a ``$ref`` pointer has no matching target.

    Attributes:
        pointer: The ``$ref`` string as written in the document.
        location: JSON pointer of the node that holds the reference.
    """

    def __init__(self, pointer: str, location: str) -> None:
        self.pointer = pointer
        self.location = location
        super().__init__(f"Can't resolve $ref '{pointer}' (referenced from {location})")


class DocumentLoadError(GeneratorError):
    """Raised when a document can't be read, fetched or parsed."""
