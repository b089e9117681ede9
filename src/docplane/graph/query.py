"""Read-only query surface over a built or reloaded reference index."""

from __future__ import annotations

from docplane.config.constants import TOKEN_SEPARATOR
from docplane.graph.models import (
    CodeRecord,
    FeatureRecord,
    InterfaceEdge,
    ReferenceIndex,
    SharedTypeGroup,
    TermEntry,
    TermScope,
    normalize_path,
)


def canonical_group_id(tokens: list[str] | tuple[str, ...]) -> str:
    """Sorted, de-duplicated pair tokens joined by ``_``."""
    return TOKEN_SEPARATOR.join(sorted(set(tokens)))


def group_tokens(group_id: str) -> list[str]:
    return [token for token in group_id.split(TOKEN_SEPARATOR) if token]


class IndexQuery:
    """Lookups by feature id, code path, term name, interface or group."""

    def __init__(self, index: ReferenceIndex) -> None:
        self._index = index

    @property
    def index(self) -> ReferenceIndex:
        return self._index

    def feature(self, feature_id: str) -> FeatureRecord | None:
        return self._index.features.get(feature_id)

    def code(self, path: str) -> CodeRecord | None:
        return self._index.code.get(normalize_path(path))

    def interface(self, interface_id: str) -> InterfaceEdge | None:
        return self._index.interfaces.get(interface_id)

    def term(self, name: str, file: str | None = None) -> TermEntry | None:
        """Global term by name, or a local one when ``file`` is given.

        Aliases of global terms resolve to their canonical entry.
        """
        if file is not None:
            local = self._index.terms.get(f"{file}#{name}")
            if local is not None:
                return local
        entry = self._index.terms.get(name)
        if entry is not None:
            return entry
        for entry in self._index.terms.values():
            if entry.scope is TermScope.GLOBAL and name in entry.aliases:
                return entry
        return None

    def groups_for_interface(self, interface_id: str) -> list[SharedTypeGroup]:
        """Shared-type groups containing ``interface_id``, from group ids alone."""
        groups: dict[str, SharedTypeGroup] = {}
        for edge in self._index.interfaces.values():
            for group_id in edge.shared_types:
                tokens = group_tokens(group_id)
                if interface_id in tokens:
                    groups[group_id] = SharedTypeGroup(
                        canonical_id=canonical_group_id(tokens),
                        group_id=group_id,
                        interfaces=tuple(sorted(set(tokens))),
                    )
        return [groups[key] for key in sorted(groups)]

    def interfaces_for_group(self, group_id: str) -> list[InterfaceEdge]:
        """Interface edges named by a group id, without opening the group file."""
        return [
            edge
            for token in sorted(set(group_tokens(group_id)))
            if (edge := self._index.interfaces.get(token)) is not None
        ]

    def features_documenting(self, path: str) -> list[FeatureRecord]:
        record = self.code(path)
        if record is None:
            return []
        return [self._index.features[f] for f in record.documented_in if f in self._index.features]

    def dependents(self, feature_id: str) -> list[str]:
        record = self.feature(feature_id)
        return list(record.used_by) if record is not None else []
