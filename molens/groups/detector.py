"""GroupDetector: matcher + resolver behind a text-keyed ResultCache."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from molens.config import MolensSettings, load_settings
from molens.core.cache import ResultCache, text_key
from molens.core.logging_utils import get_logger
from molens.groups.library import PatternLibrary, PriorityTable
from molens.groups.matcher import SubstructureMatcher, load_molecule
from molens.groups.resolution import AnnotationResolver, GroupDetectionResult
from molens.parsers.base import MolfileGraph

logger = get_logger(__name__)


class GroupDetector:
    """Detect functional groups in molfile text.

    Results are cached by a hash of the normalized text, so repeated calls
    with the same structure skip pattern evaluation entirely.

    Example:
        >>> detector = GroupDetector()
        >>> result = detector.detect(sdf_text)
        >>> result.group_ids
        ['hydroxyl']
    """

    def __init__(
        self,
        library: Optional[PatternLibrary] = None,
        priorities: Optional[PriorityTable] = None,
        cache: Optional[ResultCache[GroupDetectionResult]] = None,
        matcher: Optional[SubstructureMatcher] = None,
    ) -> None:
        self.matcher = matcher or SubstructureMatcher(library)
        self.library = self.matcher.library
        table = PriorityTable.from_library(self.library)
        if priorities is not None:
            table = table.merged(priorities)
        self.resolver = AnnotationResolver(table, self.library.ids)
        self.cache = cache if cache is not None else ResultCache()

    @classmethod
    def from_settings(cls, settings: Optional[MolensSettings] = None) -> "GroupDetector":
        s = settings or load_settings()
        library = PatternLibrary.from_json(s.pattern_library_path) if s.pattern_library_path else None
        priorities = PriorityTable.from_json(s.priority_table_path) if s.priority_table_path else None
        cache: ResultCache[GroupDetectionResult] = ResultCache(
            max_entries=s.cache_max_entries, ttl_seconds=s.cache_ttl_seconds,
        )
        return cls(library=library, priorities=priorities, cache=cache)

    def detect(self, source: str | MolfileGraph) -> GroupDetectionResult:
        """Detect groups in molfile text or an already parsed MolfileGraph.

        With a graph, candidates touching atoms beyond its parsed atom count
        are discarded before resolution.
        """
        if isinstance(source, MolfileGraph):
            text, atom_limit = source.text, source.num_atoms
        else:
            text, atom_limit = source, None
        key = text_key(text)
        if atom_limit is not None:
            key = f"{key}:atoms={atom_limit}"
        return self.cache.get_or_compute(key, lambda: self._evaluate(text, atom_limit))

    def _evaluate(self, text: str, atom_limit: Optional[int]) -> GroupDetectionResult:
        mol = load_molecule(text)
        if mol is None:
            logger.warning("RDKit could not load the molfile; no groups detected")
            result = GroupDetectionResult()
        else:
            candidates = self.matcher.match(mol)
            if atom_limit is not None:
                in_range = [c for c in candidates if c.atoms[-1] <= atom_limit]
                if len(in_range) < len(candidates):
                    logger.warning("Dropped %d candidates outside the parsed atom range",
                                   len(candidates) - len(in_range))
                candidates = in_range
            result = self.resolver.resolve(candidates)
            logger.debug("Detected %s (suppressed %s)", result.group_ids, result.suppressed)
        return replace(result, skipped_patterns=tuple(self.matcher.skipped_ids))
