"""Value objects and parser interface for small-molecule structure text.

Hierarchy:
    MoleculeRecord (raw text + provenance + dimensionality)
    MolfileGraph (parsed view)
    ├── atoms: list[AtomRecord]     (1-based, source order)
    ├── adjacency: Adjacency        (undirected, deduplicated)
    └── diagnostics: ConversionDiagnostics
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional


# ======================================================================
# Value objects
# ======================================================================

class Dimensionality(str, Enum):
    TWO_D = "2D"
    THREE_D = "3D"


@dataclass(frozen=True)
class MoleculeRecord:
    """Structure text as returned by a provider."""

    text: str
    provenance: str
    dimensionality: Dimensionality

    @property
    def is_3d(self) -> bool:
        return self.dimensionality is Dimensionality.THREE_D


@dataclass(frozen=True)
class AtomRecord:
    """Single atom; ``index`` is 1-based and matches the source order."""

    index: int
    element: str
    x: float
    y: float
    z: float

    @property
    def coords(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class Adjacency:
    """Undirected bond set over atoms ``1..atom_count``.

    Pairs are stored once as ``(low, high)``. Self-loops and out-of-range
    indices are rejected by ``add``.
    """

    def __init__(self, atom_count: int):
        self.atom_count = atom_count
        self._pairs: set[tuple[int, int]] = set()
        self._neighbors: dict[int, set[int]] = {}

    def add(self, a: int, b: int) -> bool:
        """Record bond a-b. Returns False if the pair was rejected."""
        if a == b:
            return False
        if not (1 <= a <= self.atom_count and 1 <= b <= self.atom_count):
            return False
        pair = (a, b) if a < b else (b, a)
        if pair in self._pairs:
            return True
        self._pairs.add(pair)
        self._neighbors.setdefault(a, set()).add(b)
        self._neighbors.setdefault(b, set()).add(a)
        return True

    def neighbors(self, index: int) -> list[int]:
        """Ascending neighbor indices of ``index``."""
        return sorted(self._neighbors.get(index, ()))

    def degree(self, index: int) -> int:
        return len(self._neighbors.get(index, ()))

    @property
    def pairs(self) -> list[tuple[int, int]]:
        return sorted(self._pairs)

    def __contains__(self, pair: tuple[int, int]) -> bool:
        a, b = pair
        return ((a, b) if a < b else (b, a)) in self._pairs

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"<Adjacency atoms={self.atom_count} bonds={len(self)}>"


@dataclass
class ConversionDiagnostics:
    """Counters reported alongside converted PDB text."""

    atoms_declared: int = 0
    atoms_parsed: int = 0
    bonds_declared: int = 0
    bonds_processed: int = 0
    bonds_rejected: int = 0
    conect_lines: int = 0
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "atoms_declared": self.atoms_declared,
            "atoms_parsed": self.atoms_parsed,
            "bonds_declared": self.bonds_declared,
            "bonds_processed": self.bonds_processed,
            "bonds_rejected": self.bonds_rejected,
            "conect_lines": self.conect_lines,
            "warnings": list(self.warnings),
        }


@dataclass
class MolfileGraph:
    """Parsed molfile: atoms in source order plus their bond graph."""

    text: str
    atoms: list[AtomRecord]
    adjacency: Adjacency
    diagnostics: ConversionDiagnostics
    title: str = ""

    @property
    def num_atoms(self) -> int:
        return len(self.atoms)

    @property
    def num_bonds(self) -> int:
        return len(self.adjacency)

    def atom(self, index: int) -> AtomRecord:
        return self.atoms[index - 1]

    def __repr__(self) -> str:
        return f"<MolfileGraph {self.title or '?'} atoms={self.num_atoms} bonds={self.num_bonds}>"


# ======================================================================
# Parser protocol
# ======================================================================

class StructureParser(ABC):
    """Parse structure text of one format.

    Single Responsibility: one parser per format.
    """

    @abstractmethod
    def parse_text(self, text: str) -> Any:
        """Parse in-memory text."""
        ...

    def parse(self, path: Path) -> Any:
        """Parse a file on disk."""
        return self.parse_text(Path(path).read_text(encoding="utf-8", errors="ignore"))

    @staticmethod
    @abstractmethod
    def extensions() -> list[str]:
        """File extensions this parser handles (e.g. ['.sdf', '.mol'])."""
        ...


def parser_for(path: str | Path) -> Optional[StructureParser]:
    """Return a parser instance for ``path`` based on its extension, or None."""
    from molens.parsers.molfile import MolfileParser
    from molens.parsers.pdb_format import PDBFormatParser

    name = str(path).lower()
    for cls in (MolfileParser, PDBFormatParser):
        if any(name.endswith(ext) for ext in cls.extensions()):
            return cls()
    return None
