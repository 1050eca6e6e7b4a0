"""AnnotationResolver: reduce overlapping candidates to a disjoint set.

Candidates are walked in descending priority. A candidate is kept only if
none of its atoms are already claimed; otherwise it is dropped whole.
Equal priorities keep pattern-library declaration order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

from molens.groups.library import PriorityTable
from molens.groups.matcher import FunctionalGroupCandidate


@dataclass(frozen=True)
class GroupDetectionResult:
    """Disjoint groups for one molecule; instances are cached and shared between callers."""

    groups: tuple[FunctionalGroupCandidate, ...] = ()
    atom_to_group: Mapping[int, str] = field(default_factory=lambda: MappingProxyType({}))
    suppressed: tuple[str, ...] = ()
    skipped_patterns: tuple[str, ...] = ()

    @property
    def group_ids(self) -> list[str]:
        return [g.id for g in self.groups]

    def get(self, group_id: str) -> Optional[FunctionalGroupCandidate]:
        for g in self.groups:
            if g.id == group_id:
                return g
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "groups": [g.to_dict() for g in self.groups],
            "atom_to_group": {str(k): v for k, v in sorted(self.atom_to_group.items())},
            "suppressed": list(self.suppressed),
            "skipped_patterns": list(self.skipped_patterns),
        }


class AnnotationResolver:
    """
    Args:
        priorities: pattern id -> priority (absent ids rank 0).
        declaration_order: pattern ids in library order, used to break ties.
            Ids missing from it rank after all listed ids, in input order.
    """

    def __init__(self, priorities: PriorityTable, declaration_order: Sequence[str] = ()):
        self.priorities = priorities
        self._order = {pid: i for i, pid in enumerate(declaration_order)}

    def sort_key(self, candidate: FunctionalGroupCandidate) -> tuple[int, int]:
        return (-self.priorities.get(candidate.id), self._order.get(candidate.id, len(self._order)))

    def resolve(self, candidates: Iterable[FunctionalGroupCandidate]) -> GroupDetectionResult:
        kept: list[FunctionalGroupCandidate] = []
        suppressed: list[str] = []
        atom_to_group: dict[int, str] = {}
        for candidate in sorted(candidates, key=self.sort_key):
            if candidate.overlaps(atom_to_group):
                suppressed.append(candidate.id)
                continue
            kept.append(candidate)
            for atom in candidate.atoms:
                atom_to_group[atom] = candidate.id
        return GroupDetectionResult(
            groups=tuple(kept),
            atom_to_group=MappingProxyType(atom_to_group),
            suppressed=tuple(suppressed),
        )
