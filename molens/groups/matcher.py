"""SubstructureMatcher: run the pattern library against one molecule.

Explicit hydrogens are kept when the molfile is loaded and implicit ones are
added after the source atoms, so patterns such as ``[OX2]-[#1]`` match both
hydrogen-complete and heavy-atom-only files. Atom indices in the output are
1-based, match the molfile atom order and never refer to added hydrogens.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Container, Optional, Sequence

from rdkit import Chem

from molens.core.errors import PatternCompileFailure
from molens.core.logging_utils import get_logger
from molens.groups.library import PatternEntry, PatternLibrary
from molens.groups.strategies import DEFAULT_STRATEGIES, CompileStrategy, compile_pattern, quiet_rdkit

logger = get_logger(__name__)

SOURCE_ATOMS_PROP = "molens_source_atoms"


@dataclass(frozen=True)
class FunctionalGroupCandidate:
    id: str
    name: str
    atoms: tuple[int, ...]
    description: str = ""
    pattern: str = ""

    def overlaps(self, claimed: Container[int]) -> bool:
        return any(a in claimed for a in self.atoms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "atoms": list(self.atoms),
            "description": self.description,
            "pattern": self.pattern,
        }


@dataclass(frozen=True)
class CompiledPattern:
    entry: PatternEntry
    expression: str
    strategy: str
    query: Chem.Mol = field(compare=False)


def source_atom_count(mol: Chem.Mol) -> int:
    """Number of atoms that came from the molfile (added hydrogens excluded)."""
    if mol.HasProp(SOURCE_ATOMS_PROP):
        return mol.GetIntProp(SOURCE_ATOMS_PROP)
    return mol.GetNumAtoms()


def load_molecule(text: str) -> Optional[Chem.Mol]:
    """Load molfile text with hydrogens intact, or None if RDKit cannot read it.

    Molecules that fail sanitization are retried unsanitized with a lenient
    property cache so valence oddities do not hide every group. Implicit
    hydrogens are then made explicit; they are appended after the source atoms.
    """
    with quiet_rdkit():
        mol = Chem.MolFromMolBlock(text, removeHs=False)
        if mol is None:
            mol = Chem.MolFromMolBlock(text, sanitize=False, removeHs=False)
            if mol is None:
                return None
            mol.UpdatePropertyCache(strict=False)
            Chem.FastFindRings(mol)
        source_atoms = mol.GetNumAtoms()
        mol = Chem.AddHs(mol)
    mol.SetIntProp(SOURCE_ATOMS_PROP, source_atoms)
    return mol


class SubstructureMatcher:
    """Compile a pattern library once and match it against molecules.

    Each entry's primary expression is compiled through ``strategies`` in
    order, then its fallback expression. Entries that compile under neither
    are skipped and listed in ``skipped``.
    """

    def __init__(
        self,
        library: Optional[PatternLibrary] = None,
        strategies: Sequence[CompileStrategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self.library = library or PatternLibrary.default()
        self.strategies = tuple(strategies)
        self.compiled: list[CompiledPattern] = []
        self.skipped: list[PatternCompileFailure] = []
        for entry in self.library:
            compiled = self._compile(entry)
            if compiled is not None:
                self.compiled.append(compiled)

    def _compile(self, entry: PatternEntry) -> Optional[CompiledPattern]:
        for expression in (entry.pattern, entry.fallback_pattern):
            result = compile_pattern(expression, self.strategies)
            if result is not None:
                strategy, query = result
                if expression != entry.pattern:
                    logger.info("Pattern %s compiled from its fallback expression", entry.id)
                return CompiledPattern(entry, expression, strategy, query)
        failure = PatternCompileFailure(entry.id, entry.pattern, entry.fallback_pattern)
        logger.warning("Skipping pattern: %s", failure)
        self.skipped.append(failure)
        return None

    @property
    def skipped_ids(self) -> list[str]:
        return [f.pattern_id for f in self.skipped]

    def match(self, mol: Chem.Mol) -> list[FunctionalGroupCandidate]:
        """One candidate per pattern with at least one hit, in library order.

        All occurrences of a pattern collapse into a single candidate whose
        atoms are the union of every match. Hydrogens added by load_molecule
        are left out; a match made only of them yields no candidate.
        """
        limit = source_atom_count(mol)
        candidates = []
        for cp in self.compiled:
            try:
                matches = mol.GetSubstructMatches(cp.query, uniquify=True)
            except RuntimeError as e:
                logger.warning("Pattern %s failed during matching: %s", cp.entry.id, e)
                continue
            if not matches:
                continue
            atoms = sorted({i + 1 for match in matches for i in match if i < limit})
            if not atoms:
                continue
            candidates.append(FunctionalGroupCandidate(
                id=cp.entry.id,
                name=cp.entry.name,
                atoms=tuple(atoms),
                description=cp.entry.description,
                pattern=cp.expression,
            ))
        return candidates

    def match_text(self, text: str) -> list[FunctionalGroupCandidate]:
        mol = load_molecule(text)
        if mol is None:
            logger.warning("RDKit could not load the molfile; no groups detected")
            return []
        return self.match(mol)

    def __repr__(self) -> str:
        return f"<SubstructureMatcher patterns={len(self.compiled)} skipped={len(self.skipped)}>"
