"""
File utilities for the TypeScript OpenAPI type generator.
"""

from pathlib import Path


def write_output(path: Path, content: str) -> None:
    """Write generated declarations to disk, creating parent directories.

    Args:
        path: Destination file.
        content: Text to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
