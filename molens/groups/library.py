"""Pattern library and priority table loading.

Both are plain JSON so they can be versioned independently of the code:

    functional_groups.json  {"version": ..., "patterns": [{id, name, pattern,
                             fallbackPattern?, description, priority}, ...]}
    priorities.json         {"<pattern id>": <int>, ...}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping, Optional

DEFAULT_LIBRARY_PATH = Path(__file__).resolve().parent / "data" / "functional_groups.json"


@dataclass(frozen=True)
class PatternEntry:
    id: str
    name: str
    pattern: str
    fallback_pattern: Optional[str] = None
    description: str = ""
    priority: int = 0

    @staticmethod
    def from_dict(d: Mapping) -> "PatternEntry":
        if not d.get("id") or not d.get("pattern"):
            raise ValueError(f"Pattern entry needs 'id' and 'pattern': {dict(d)!r}")
        return PatternEntry(
            id=str(d["id"]),
            name=str(d.get("name") or d["id"]),
            pattern=str(d["pattern"]),
            fallback_pattern=d.get("fallbackPattern") or d.get("fallback_pattern"),
            description=str(d.get("description") or ""),
            priority=int(d.get("priority") or 0),
        )


class PatternLibrary:
    """Ordered, immutable collection of pattern entries.

    Declaration order is significant: it breaks ties between equal-priority
    overlapping matches.
    """

    def __init__(self, entries: list[PatternEntry], version: str = ""):
        seen: set[str] = set()
        for e in entries:
            if e.id in seen:
                raise ValueError(f"Duplicate pattern id {e.id!r}")
            seen.add(e.id)
        self._entries = tuple(entries)
        self.version = version

    @classmethod
    def from_json(cls, path: str | Path) -> "PatternLibrary":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, list):
            return cls([PatternEntry.from_dict(d) for d in data])
        return cls(
            [PatternEntry.from_dict(d) for d in data.get("patterns", [])],
            version=str(data.get("version", "")),
        )

    @classmethod
    def default(cls) -> "PatternLibrary":
        return cls.from_json(DEFAULT_LIBRARY_PATH)

    @property
    def ids(self) -> list[str]:
        return [e.id for e in self._entries]

    def get(self, pattern_id: str) -> Optional[PatternEntry]:
        for e in self._entries:
            if e.id == pattern_id:
                return e
        return None

    def __iter__(self) -> Iterator[PatternEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<PatternLibrary version={self.version or '?'} n={len(self)}>"


class PriorityTable:
    """pattern id -> integer priority; absent ids have priority 0."""

    def __init__(self, priorities: Optional[Mapping[str, int]] = None):
        self._priorities = {str(k): int(v) for k, v in (priorities or {}).items()}

    @classmethod
    def from_library(cls, library: PatternLibrary) -> "PriorityTable":
        return cls({e.id: e.priority for e in library})

    @classmethod
    def from_json(cls, path: str | Path) -> "PriorityTable":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if "priorities" in data and isinstance(data["priorities"], dict):
            data = data["priorities"]
        return cls(data)

    def merged(self, overrides: "PriorityTable") -> "PriorityTable":
        combined = dict(self._priorities)
        combined.update(overrides._priorities)
        return PriorityTable(combined)

    def get(self, pattern_id: str) -> int:
        return self._priorities.get(pattern_id, 0)

    def __getitem__(self, pattern_id: str) -> int:
        return self.get(pattern_id)

    def __contains__(self, pattern_id: str) -> bool:
        return pattern_id in self._priorities

    def __len__(self) -> int:
        return len(self._priorities)

    def to_dict(self) -> dict[str, int]:
        return dict(self._priorities)
