"""Term registry.

Aggregates term definitions and references from every parsed document and
resolves each reference to at most one definition. Resolution order for a
reference in file F:

1. local canonical name defined in F
2. local alias defined in F
3. global canonical name
4. global alias

Index keys: a global term is keyed by its name, a document-local term by
``<file>#<name>``.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from docplane.graph.models import Document, TermDefinition, TermEntry, TermReference, TermScope
from docplane.validation.models import IssueKind, ValidationIssue


def term_key(definition: TermDefinition) -> str:
    if definition.scope is TermScope.GLOBAL:
        return definition.name
    return f"{definition.file}#{definition.name}"


def _location(definition: TermDefinition) -> str:
    return f"{definition.file}:{definition.line}"


@dataclass(frozen=True)
class RegistryStats:
    global_definitions: int
    local_definitions: int
    references: int
    resolved: int
    undefined: int
    unused: int
    conflicts: int


class TermRegistry:
    """Definition index plus resolved reference lists for one corpus."""

    def __init__(
        self,
        definitions: Iterable[TermDefinition],
        references: Iterable[TermReference],
    ) -> None:
        self._definitions = sorted(definitions, key=lambda d: (d.file, d.line, d.name))
        self._references = sorted(
            references, key=lambda r: (r.file, r.line, r.name, r.context)
        )

        self._global: dict[str, list[TermDefinition]] = defaultdict(list)
        self._global_alias: dict[str, str] = {}
        self._local: dict[tuple[str, str], TermDefinition] = {}
        self._local_alias: dict[tuple[str, str], TermDefinition] = {}

        for definition in self._definitions:
            if definition.scope is TermScope.GLOBAL:
                self._global[definition.name].append(definition)
                for alias in definition.aliases:
                    self._global_alias.setdefault(alias, definition.name)
            else:
                self._local.setdefault((definition.file, definition.name), definition)
                for alias in definition.aliases:
                    self._local_alias.setdefault((definition.file, alias), definition)

        self._usage: dict[str, list[TermReference]] = defaultdict(list)
        self._unresolved: list[TermReference] = []
        for reference in self._references:
            resolved = self.resolve(reference)
            if resolved is None:
                self._unresolved.append(reference)
            else:
                self._usage[term_key(resolved)].append(reference)

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> TermRegistry:
        definitions: list[TermDefinition] = []
        references: list[TermReference] = []
        for document in documents:
            definitions.extend(document.definitions)
            references.extend(document.references)
        return cls(definitions, references)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(self, name: str, file: str | None = None) -> TermDefinition | None:
        """Resolve ``name`` as if it were cited from ``file``."""
        if file is not None:
            local = self._local.get((file, name)) or self._local_alias.get((file, name))
            if local is not None:
                return local
        definitions = self._global.get(name)
        if definitions:
            return definitions[0]
        canonical = self._global_alias.get(name)
        if canonical is not None:
            return self._global[canonical][0]
        return None

    def resolve(self, reference: TermReference) -> TermDefinition | None:
        return self.find(reference.name, reference.file)

    def references_to(self, definition: TermDefinition) -> list[TermReference]:
        return list(self._usage.get(term_key(definition), []))

    def definitions_in(self, file: str) -> list[TermDefinition]:
        return [d for d in self._definitions if d.file == file]

    def references_in(self, file: str) -> list[TermReference]:
        return [r for r in self._references if r.file == file]

    def list_all(self) -> list[TermDefinition]:
        """Every definition, sorted by name then location."""
        return sorted(self._definitions, key=lambda d: (d.name.lower(), d.name, d.file, d.line))

    def search(self, query: str) -> list[TermDefinition]:
        """Definitions whose name, aliases or definition text contain ``query``.

        Case-insensitive. Exact name matches sort first.
        """
        needle = query.strip().lower()
        if not needle:
            return []
        hits = [
            d
            for d in self._definitions
            if needle in d.name.lower()
            or any(needle in alias.lower() for alias in d.aliases)
            or (d.definition is not None and needle in d.definition.lower())
        ]
        return sorted(
            hits, key=lambda d: (d.name.lower() != needle, d.name.lower(), d.file, d.line)
        )

    @property
    def definitions(self) -> list[TermDefinition]:
        return list(self._definitions)

    @property
    def references(self) -> list[TermReference]:
        return list(self._references)

    # ------------------------------------------------------------------
    # Findings
    # ------------------------------------------------------------------

    def conflicts(self) -> dict[str, list[TermDefinition]]:
        """Global names defined more than once, with every definition."""
        return {name: defs for name, defs in sorted(self._global.items()) if len(defs) > 1}

    def undefined(self) -> list[TermReference]:
        """Unresolved references, one per distinct (name, file, line)."""
        seen: set[tuple[str, str, int]] = set()
        result: list[TermReference] = []
        for reference in self._unresolved:
            key = (reference.name, reference.file, reference.line)
            if key not in seen:
                seen.add(key)
                result.append(reference)
        return result

    def unused(self) -> list[TermDefinition]:
        """Global definitions nothing resolves to."""
        return [
            d
            for d in self._definitions
            if d.scope is TermScope.GLOBAL and not self._usage.get(d.name)
        ]

    def parent_cycles(self) -> list[tuple[str, ...]]:
        """Global terms that are their own ancestor through ``Parent`` links.

        Each cycle is reported once, rotated to start at its smallest name and
        closed by repeating that name.
        """
        parents: dict[str, str] = {}
        for name, definitions in self._global.items():
            parent = definitions[0].parent
            if parent is None:
                continue
            target = parent if parent in self._global else self._global_alias.get(parent)
            if target is not None:
                parents[name] = target

        cycles: set[tuple[str, ...]] = set()
        for start in sorted(parents):
            chain = [start]
            current = parents[start]
            while current in parents and current not in chain:
                chain.append(current)
                current = parents[current]
            if current in chain:
                loop = chain[chain.index(current) :]
                pivot = loop.index(min(loop))
                rotated = loop[pivot:] + loop[:pivot]
                cycles.add((*rotated, rotated[0]))
        return sorted(cycles)

    def validate(self) -> list[ValidationIssue]:
        """Term issues: undefined, conflicting, unused and circular."""
        issues: list[ValidationIssue] = []

        for reference in self.undefined():
            issues.append(
                ValidationIssue.error(
                    IssueKind.UNDEFINED_TERM,
                    reference.file,
                    f"Term '{reference.name}' is referenced but not defined",
                    line=reference.line,
                    subject=reference.name,
                )
            )

        for name, definitions in self.conflicts().items():
            first = definitions[0]
            locations = ", ".join(_location(d) for d in definitions)
            issues.append(
                ValidationIssue.error(
                    IssueKind.CONFLICTING_DEFINITION,
                    first.file,
                    f"Global term '{name}' is defined {len(definitions)} times: {locations}",
                    line=first.line,
                    subject=name,
                )
            )

        for definition in self.unused():
            issues.append(
                ValidationIssue.warning(
                    IssueKind.UNUSED_DEFINITION,
                    definition.file,
                    f"Global term '{definition.name}' is defined but never referenced",
                    line=definition.line,
                    subject=definition.name,
                )
            )

        for cycle in self.parent_cycles():
            head = self._global[cycle[0]][0]
            issues.append(
                ValidationIssue.warning(
                    IssueKind.CIRCULAR_REFERENCE,
                    head.file,
                    f"Circular Parent chain: {' -> '.join(cycle)}",
                    line=head.line,
                    subject=cycle[0],
                    cycle=cycle,
                )
            )

        return issues

    def stats(self) -> RegistryStats:
        return RegistryStats(
            global_definitions=sum(len(d) for d in self._global.values()),
            local_definitions=len(self._definitions) - sum(len(d) for d in self._global.values()),
            references=len(self._references),
            resolved=len(self._references) - len(self._unresolved),
            undefined=len(self.undefined()),
            unused=len(self.unused()),
            conflicts=len(self.conflicts()),
        )

    # ------------------------------------------------------------------
    # Index entries
    # ------------------------------------------------------------------

    def entries(self) -> dict[str, TermEntry]:
        """One index entry per canonical term key.

        A conflicting global name keeps its first definition (by path, line).
        """
        entries: dict[str, TermEntry] = {}
        for definition in self._definitions:
            key = term_key(definition)
            if key in entries:
                continue
            entry = TermEntry(
                name=definition.name,
                file=definition.file,
                line=definition.line,
                scope=definition.scope,
                aliases=list(definition.aliases),
                related=list(definition.related),
                parent=definition.parent,
                term_type=definition.term_type,
                definition=definition.definition,
                references=list(self._usage.get(key, [])),
            )
            entry.normalize()
            entries[key] = entry
        return dict(sorted(entries.items()))
