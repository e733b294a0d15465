"""
Document loader.

Reads the root document from a path, a URL or an already-parsed mapping, and
then every external document its ``$ref`` strings name, transitively. External
documents are keyed by the document part of the ``$ref`` exactly as written,
which is how the resolver looks them up.

JSON is parsed with :mod:`json` and everything else with PyYAML; remote
documents are fetched with ``requests``.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final
from urllib.parse import urljoin, urlparse

import requests
import yaml

from ts_oas_types.config import GeneratorOptions
from ts_oas_types.errors import DocumentLoadError
from ts_oas_types.utils.json_pointer import split_ref

logger = logging.getLogger(__name__)

# Connect timeout, read timeout
REQUEST_TIMEOUT: Final = (10.0, 30.0)
_URL_SCHEMES: Final = frozenset({"http", "https"})
_JSON_SUFFIXES: Final = (".json",)


@dataclass
class LoadedDocument:
    """A parsed root document and the external documents it references.

    Attributes:
        document: The parsed root document.
        source: Where it was read from (path, URL or ``<memory>``).
        external: Parsed external documents keyed by ``$ref`` document part.
    """

    document: dict[str, Any]
    source: str
    external: dict[str, dict[str, Any]] = field(default_factory=dict)


def is_url(location: str) -> bool:
    """Check whether a location is an http(s) URL."""
    return urlparse(location).scheme in _URL_SCHEMES


def parse_document(text: str, name: str = "<memory>") -> dict[str, Any]:
    """Parse JSON or YAML text into a mapping.

    Raises:
        DocumentLoadError: If the text isn't valid or isn't a mapping.
    """
    try:
        parsed = json.loads(text) if name.lower().endswith(_JSON_SUFFIXES) else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        msg = f"Can't parse {name}: {e}"
        raise DocumentLoadError(msg) from e

    if not isinstance(parsed, dict):
        msg = f"{name} doesn't contain a JSON/YAML object"
        raise DocumentLoadError(msg)
    return parsed


def _request_headers(options: GeneratorOptions) -> dict[str, str]:
    headers = dict(options.http_headers)
    if options.auth:
        headers.setdefault("Authorization", options.auth)
    return headers


def fetch_url(url: str, options: GeneratorOptions) -> str:
    """Fetch a remote document.

    Raises:
        DocumentLoadError: On any request failure or an error status.
    """
    logger.debug("Fetching %s %s", options.http_method, url)
    try:
        response = requests.request(
            options.http_method.upper(),
            url,
            headers=_request_headers(options),
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        msg = f"Can't fetch {url}: {e}"
        raise DocumentLoadError(msg) from e
    return response.text


def _read(location: str, options: GeneratorOptions) -> dict[str, Any]:
    if is_url(location):
        return parse_document(fetch_url(location, options), urlparse(location).path or location)
    path = Path(location)
    text = path.read_text(encoding="utf-8")
    return parse_document(text, path.name)


def _resolve_location(document_part: str, base: str) -> str:
    """Location of an external document relative to the document referencing it."""
    if is_url(document_part):
        return document_part
    if is_url(base):
        return urljoin(base, document_part)
    candidate = Path(document_part)
    if candidate.is_absolute():
        return str(candidate)
    return str(Path(base).parent / candidate)


def iter_external_refs(node: Any) -> Iterator[str]:  # noqa: ANN401
    """Yield the document part of every non-local ``$ref`` below ``node``."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Mapping):
            ref = current.get("$ref")
            if isinstance(ref, str):
                document_part, _ = split_ref(ref)
                if document_part is not None:
                    yield document_part
            stack.extend(current.values())
        elif isinstance(current, list):
            stack.extend(current)


def load_document(
    source: str | Path | Mapping[str, Any],
    options: GeneratorOptions | None = None,
) -> LoadedDocument:
    """Load the root document and, transitively, every external document it references.

    Args:
        source: A file path, an http(s) URL, or an already-parsed mapping.
        options: Loader options (``cwd``, ``auth``, ``http_headers``, ``http_method``).

    Returns:
        The loaded documents.

    Raises:
        FileNotFoundError: If the root document path doesn't exist.
        DocumentLoadError: If a document can't be fetched or parsed.
    """
    options = options or GeneratorOptions()
    cwd = options.cwd or Path.cwd()

    if isinstance(source, Mapping):
        document = dict(source)
        # A file name inside cwd, so relative refs resolve against cwd itself
        base = str(cwd / "<memory>")
        name = "<memory>"
    else:
        location = str(source)
        if not is_url(location) and not Path(location).is_absolute():
            location = str(cwd / location)
        document = _read(location, options)
        base = location
        name = str(source)

    external: dict[str, dict[str, Any]] = {}
    pending = deque((part, base) for part in iter_external_refs(document))
    while pending:
        document_part, referrer = pending.popleft()
        if document_part in external:
            continue
        location = _resolve_location(document_part, referrer)
        logger.debug("Loading external document %s from %s", document_part, location)
        try:
            loaded = _read(location, options)
        except FileNotFoundError as e:
            msg = f"External document '{document_part}' not found at {location}"
            raise DocumentLoadError(msg) from e
        external[document_part] = loaded
        pending.extend((part, location) for part in iter_external_refs(loaded))

    return LoadedDocument(document=document, source=name, external=external)
