"""
Non-fatal diagnostics collected while transforming schemas.
"""

import logging
from dataclasses import dataclass, field
from typing import Final

logger = logging.getLogger(__name__)

REQUIRED_PROPERTY_MISSING: Final = "required-property-missing"
EMPTY_COMPOSITION: Final = "empty-composition"
NO_SCHEMA_SIGNAL: Final = "no-schema-signal"
UNKNOWN_TYPE: Final = "unknown-type"
CIRCULAR_REFERENCE: Final = "circular-reference"


@dataclass(frozen=True)
class Diagnostic:
    """A degraded-but-continued schema problem."""

    code: str
    message: str
    location: str

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


@dataclass
class DiagnosticCollector:
    """Collects diagnostics for one run and logs them unless silenced."""

    silent: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def warn(self, code: str, message: str, location: str) -> None:
        diagnostic = Diagnostic(code=code, message=message, location=location)
        self.diagnostics.append(diagnostic)
        if not self.silent:
            logger.warning("%s", diagnostic)
