"""Pattern compilation strategies, tried in order until one yields a query."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from rdkit import Chem, RDLogger


@contextmanager
def quiet_rdkit() -> Iterator[None]:
    """Silence RDKit's stderr parse errors; failures are reported by the caller."""
    RDLogger.DisableLog("rdApp.*")
    try:
        yield
    finally:
        RDLogger.EnableLog("rdApp.*")


class CompileStrategy(ABC):
    name: str = ""

    @abstractmethod
    def compile(self, pattern: str) -> Optional[Chem.Mol]:
        """Return a query molecule, or None if ``pattern`` is not valid for this strategy."""
        ...


class SmartsStrategy(CompileStrategy):
    name = "smarts"

    def compile(self, pattern: str) -> Optional[Chem.Mol]:
        with quiet_rdkit():
            return Chem.MolFromSmarts(pattern)


class SmilesStrategy(CompileStrategy):
    """Plain SMILES used as a substructure query."""

    name = "smiles"

    def compile(self, pattern: str) -> Optional[Chem.Mol]:
        with quiet_rdkit():
            return Chem.MolFromSmiles(pattern)


DEFAULT_STRATEGIES: tuple[CompileStrategy, ...] = (SmartsStrategy(), SmilesStrategy())


def compile_pattern(
    pattern: Optional[str],
    strategies: Sequence[CompileStrategy] = DEFAULT_STRATEGIES,
) -> Optional[tuple[str, Chem.Mol]]:
    """First (strategy name, query) that compiles ``pattern``, or None."""
    if not pattern:
        return None
    for strategy in strategies:
        query = strategy.compile(pattern)
        if query is not None:
            return strategy.name, query
    return None
