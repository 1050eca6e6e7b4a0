"""Molfile/SDF → PDB conversion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from molens.core.logging_utils import get_logger
from molens.parsers.base import ConversionDiagnostics, MolfileGraph
from molens.parsers.molfile import MolfileParser
from molens.parsers.pdb_format import write_pdb

logger = get_logger(__name__)


@dataclass
class ConversionResult:
    pdb_text: str
    graph: MolfileGraph

    @property
    def diagnostics(self) -> ConversionDiagnostics:
        return self.graph.diagnostics


class FormatConverter:
    """Parse molfile text and emit canonical PDB text.

    Raises MalformedInput only when the counts line is missing or declares
    zero atoms (or when the optional invalid-bond limit is exceeded).
    """

    def __init__(self, max_invalid_bond_fraction: Optional[float] = None):
        self.parser = MolfileParser(max_invalid_bond_fraction=max_invalid_bond_fraction)

    def convert(self, sdf_text: str) -> ConversionResult:
        graph = self.parser.parse_text(sdf_text)
        pdb_text, conect_count = write_pdb(graph.atoms, graph.adjacency)
        graph.diagnostics.conect_lines = conect_count
        logger.debug(
            "Converted molfile: %d ATOM, %d bonds, %d CONECT",
            graph.num_atoms, graph.num_bonds, conect_count,
        )
        return ConversionResult(pdb_text=pdb_text, graph=graph)


def convert_molfile(sdf_text: str, max_invalid_bond_fraction: Optional[float] = None) -> ConversionResult:
    """Convert molfile/SDF text to PDB text with a default FormatConverter."""
    return FormatConverter(max_invalid_bond_fraction=max_invalid_bond_fraction).convert(sdf_text)
