"""molens.parsers: molfile reader and PDB writer/reader.

Architecture:
    - base.py: value objects (AtomRecord, Adjacency, MolfileGraph) and StructureParser
    - molfile.py: MolfileParser (V2000 molfile / SDF)
    - pdb_format.py: PDB writer + PDBFormatParser
    - convert.py: FormatConverter (molfile → PDB)

Usage::

    from molens.parsers import convert_molfile

    result = convert_molfile(sdf_text)
    print(result.pdb_text)
    print(result.diagnostics.to_dict())
"""

from molens.parsers.base import (
    Adjacency,
    AtomRecord,
    ConversionDiagnostics,
    Dimensionality,
    MoleculeRecord,
    MolfileGraph,
    StructureParser,
    parser_for,
)
from molens.parsers.convert import ConversionResult, FormatConverter, convert_molfile
from molens.parsers.molfile import MolfileParser, parse_molfile
from molens.parsers.pdb_format import PDBFormatParser, PDBStructure, write_pdb

__all__ = [
    "Adjacency",
    "AtomRecord",
    "ConversionDiagnostics",
    "Dimensionality",
    "MoleculeRecord",
    "MolfileGraph",
    "StructureParser",
    "parser_for",
    "ConversionResult",
    "FormatConverter",
    "convert_molfile",
    "MolfileParser",
    "parse_molfile",
    "PDBFormatParser",
    "PDBStructure",
    "write_pdb",
]
