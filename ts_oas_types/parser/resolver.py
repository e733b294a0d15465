"""
Reference Resolver

Resolves ``$ref`` pointers against normalized documents. A reference chain
(Reference -> Reference -> ... -> node) is followed iteratively with a visited
set keyed by the fully-qualified target. A target that recurs marks a cycle;
the resolver reports it through :attr:`Resolution.cyclic` instead of raising,
and the transformer decides how to emit it.

Every resolution is memoized for the lifetime of the resolver, so repeated
lookups of the same pointer return the same :class:`Resolution` object.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from ts_oas_types.constants import RAW_COMPONENT_KINDS, SCHEMAS, TYPED_COMPONENT_KINDS, V2_SECTIONS
from ts_oas_types.errors import ResolutionError
from ts_oas_types.parser.models import NormalizedDocument, Reference, SchemaNode
from ts_oas_types.utils.json_pointer import ROOT, join_pointer, split_ref

_COMPONENT_KINDS: Final = frozenset((*TYPED_COMPONENT_KINDS, *RAW_COMPONENT_KINDS))
_COMPOSITION_KEYS: Final = {"allOf": "all_of", "oneOf": "one_of", "anyOf": "any_of"}

PATHS: Final = "paths"


@dataclass(frozen=True)
class RefTarget:
    """Fully-qualified identity of a ``$ref`` target.

    Attributes:
        document: External document key, or None for the root document.
        kind: Bag kind (``schemas``, ``responses``, ...) or ``paths``.
        name: Entry name within the kind.
        subpath: Pointer tokens below the bag entry, for deep pointers.
    """

    document: str | None
    kind: str
    name: str
    subpath: tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        return (self.document or "") + join_pointer(ROOT, self.kind, self.name, *self.subpath)


@dataclass(frozen=True)
class Resolution:
    """Result of following one reference.

    Attributes:
        target: The first target the reference points at.
        node: The concrete (non-reference) node at the end of the chain, or
            None when the chain is cyclic.
        chain: Every target visited, in order.
    """

    target: RefTarget
    node: Any
    chain: tuple[RefTarget, ...]

    @property
    def cyclic(self) -> bool:
        return self.node is None


class ReferenceResolver:
    """Resolves references within one generation run."""

    def __init__(
        self,
        root: NormalizedDocument,
        external: Mapping[str, NormalizedDocument] | None = None,
    ) -> None:
        self.root = root
        self.external = dict(external or {})
        self._cache: dict[tuple[str | None, str], Resolution] = {}

    def document(self, name: str | None) -> NormalizedDocument | None:
        """Return the root document for None, else the named external document."""
        if name is None:
            return self.root
        return self.external.get(name)

    def target_of(self, reference: Reference) -> RefTarget:
        """Parse a reference into the target it names.

        Raises:
            ResolutionError: If the pointer names an unknown document or a
                location outside the reusable-object bag and paths.
        """
        document_part, tokens = split_ref(reference.ref)
        document_name = document_part if document_part is not None else reference.document
        document = self.document(document_name)
        if document is None:
            raise ResolutionError(reference.ref, reference.location)

        if len(tokens) >= 3 and tokens[0] == "components" and tokens[1] in _COMPONENT_KINDS:  # noqa: PLR2004
            return RefTarget(document_name, tokens[1], tokens[2], tuple(tokens[3:]))
        if len(tokens) >= 2 and tokens[0] in V2_SECTIONS:  # noqa: PLR2004
            return RefTarget(document_name, V2_SECTIONS[tokens[0]], tokens[1], tuple(tokens[2:]))
        if len(tokens) >= 2 and tokens[0] == PATHS:  # noqa: PLR2004
            return RefTarget(document_name, PATHS, tokens[1], tuple(tokens[2:]))
        if tokens and document.raw_schema:
            # Bare schema collections are addressed by name directly
            return RefTarget(document_name, SCHEMAS, tokens[0], tuple(tokens[1:]))

        raise ResolutionError(reference.ref, reference.location)

    def resolve(self, reference: Reference) -> Resolution:
        """Follow a reference to the concrete node it designates.

        Args:
            reference: The reference to resolve.

        Returns:
            The memoized resolution. ``resolution.cyclic`` is True when the
            chain loops back on itself without reaching a concrete node.

        Raises:
            ResolutionError: If any hop of the chain has no target.
        """
        cache_key = (reference.document, reference.ref)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        first_target = self.target_of(reference)
        chain: list[RefTarget] = []
        visited: set[RefTarget] = set()
        current: Reference = reference
        target = first_target
        node: Any = None

        while True:
            if target in visited:
                node = None
                break
            visited.add(target)
            chain.append(target)

            node = self.lookup(target, current)
            if not isinstance(node, Reference):
                break
            current = node
            target = self.target_of(current)

        resolution = Resolution(target=first_target, node=node, chain=tuple(chain))
        self._cache.setdefault(cache_key, resolution)
        return self._cache[cache_key]

    def lookup(self, target: RefTarget, reference: Reference) -> Any:  # noqa: ANN401
        """Return the node stored at ``target``, which may itself be a Reference.

        Raises:
            ResolutionError: If the target doesn't exist.
        """
        document = self.document(target.document)
        if document is None:
            raise ResolutionError(reference.ref, reference.location)

        section: Mapping[str, Any] = (
            document.paths if target.kind == PATHS else document.components.section(target.kind)
        )
        if target.name not in section:
            raise ResolutionError(reference.ref, reference.location)

        node = section[target.name]
        if target.subpath:
            node = self._descend(node, target.subpath)
            if node is None:
                raise ResolutionError(reference.ref, reference.location)
        return node

    @staticmethod
    def _descend(node: Any, tokens: tuple[str, ...]) -> Any:  # noqa: ANN401
        """Walk pointer tokens below a bag schema; None when the path doesn't exist."""
        remaining = list(tokens)
        while remaining:
            if not isinstance(node, SchemaNode):
                return None
            token = remaining.pop(0)
            if token == "properties" and remaining:
                node = node.properties.get(remaining.pop(0))
            elif token == "items":
                node = node.items
            elif token == "additionalProperties":
                node = node.additional_properties if not isinstance(node.additional_properties, bool) else None
            elif token in _COMPOSITION_KEYS and remaining and remaining[0].isdigit():
                members = getattr(node, _COMPOSITION_KEYS[token]) or []
                index = int(remaining.pop(0))
                node = members[index] if index < len(members) else None
            else:
                return None
        return node
