"""Molfile / SDF (V2000) reader.

The reader is deliberately tolerant: only a missing counts line (or a zero
atom count) is fatal. Unparsable coordinates fall back to fixed columns, a
missing element symbol defaults to carbon, and bad bond lines are dropped.
"""

from __future__ import annotations

import re
from typing import Optional

from molens.core.errors import MalformedInput
from molens.core.logging_utils import get_logger
from molens.parsers.base import (
    Adjacency,
    AtomRecord,
    ConversionDiagnostics,
    MolfileGraph,
    StructureParser,
)

logger = get_logger(__name__)

COUNTS_SCAN_LINES = 5
_COUNTS_RE = re.compile(r"^\s*(\d+)\s+(\d+)")

# Property block markers; these lines never hold bonds.
_PROPERTY_PREFIXES = ("M  ", "A  ", "V  ", "G  ", "S  SKP", ">")
_TABLE_TERMINATORS = ("M  END", "$$$$")


def find_counts_line(lines: list[str]) -> Optional[tuple[int, int, int]]:
    """Locate the counts line within the first five lines.

    Returns (line_index, atom_count, bond_count) for the first line that starts
    with an integer pair, or None.
    """
    for i, line in enumerate(lines[:COUNTS_SCAN_LINES]):
        m = _COUNTS_RE.match(line)
        if m:
            return i, int(m.group(1)), int(m.group(2))
    return None


def _parse_float(token: str) -> Optional[float]:
    try:
        return float(token)
    except ValueError:
        return None


def parse_atom_line(line: str, index: int) -> AtomRecord:
    tokens = line.split()
    coords: list[Optional[float]] = [_parse_float(t) for t in tokens[:3]]
    element = tokens[3] if len(tokens) > 3 else ""
    if len(coords) < 3 or any(c is None for c in coords):
        # Wide negative values can run together; fall back to the V2000 columns.
        coords = [_parse_float(line[s:e]) for s, e in ((0, 10), (10, 20), (20, 30))]
        element = line[31:34].strip()
    x, y, z = (c if c is not None else 0.0 for c in coords)
    return AtomRecord(index=index, element=element or "C", x=x, y=y, z=z)


def _is_skippable(line: str) -> bool:
    return not line.strip() or line.startswith(_PROPERTY_PREFIXES)


class MolfileParser(StructureParser):
    """Parse molfile/SDF text into a MolfileGraph.

    Only the first record of a multi-record SD file is read.

    Args:
        max_invalid_bond_fraction: if set, raise MalformedInput when more than
            this fraction of the consumed bond lines is rejected.
    """

    def __init__(self, max_invalid_bond_fraction: Optional[float] = None):
        if max_invalid_bond_fraction is not None and not (0 < max_invalid_bond_fraction <= 1):
            raise ValueError("max_invalid_bond_fraction must be in (0, 1]")
        self.max_invalid_bond_fraction = max_invalid_bond_fraction

    def parse_text(self, text: str) -> MolfileGraph:
        lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        counts = find_counts_line(lines)
        if counts is None:
            raise MalformedInput("No counts line found in the first 5 lines of the molfile")
        counts_idx, atom_count, bond_count = counts
        if atom_count == 0:
            raise MalformedInput("Counts line declares zero atoms")

        diag = ConversionDiagnostics(atoms_declared=atom_count, bonds_declared=bond_count)

        atom_lines = lines[counts_idx + 1: counts_idx + 1 + atom_count]
        atoms: list[AtomRecord] = []
        for i, line in enumerate(atom_lines, start=1):
            if not line.strip() or line.startswith(_TABLE_TERMINATORS):
                break
            atoms.append(parse_atom_line(line, i))
        if len(atoms) < atom_count:
            msg = f"Atom block truncated: {len(atoms)} of {atom_count} atoms present"
            logger.warning(msg)
            diag.warnings.append(msg)
        diag.atoms_parsed = len(atoms)

        adjacency = Adjacency(len(atoms))
        consumed = 0
        for line in lines[counts_idx + 1 + atom_count:]:
            if consumed >= bond_count:
                break
            if line.startswith(_TABLE_TERMINATORS):
                break
            if _is_skippable(line):
                continue
            consumed += 1
            tokens = line.split()
            try:
                a, b = int(tokens[0]), int(tokens[1])
            except (ValueError, IndexError):
                logger.debug("Dropping unparsable bond line %r", line)
                diag.bonds_rejected += 1
                continue
            if adjacency.add(a, b):
                diag.bonds_processed += 1
            else:
                logger.debug("Dropping bond %d-%d (self-loop or out of range)", a, b)
                diag.bonds_rejected += 1

        if consumed < bond_count:
            msg = f"Bond block truncated: {consumed} of {bond_count} bonds present"
            logger.warning(msg)
            diag.warnings.append(msg)

        self._check_bond_quality(diag, consumed)
        logger.debug(
            "Parsed molfile: atoms=%d bonds=%d rejected=%d",
            diag.atoms_parsed, diag.bonds_processed, diag.bonds_rejected,
        )
        return MolfileGraph(
            text=text,
            atoms=atoms,
            adjacency=adjacency,
            diagnostics=diag,
            title=lines[0].strip() if counts_idx > 0 else "",
        )

    def _check_bond_quality(self, diag: ConversionDiagnostics, consumed: int) -> None:
        if self.max_invalid_bond_fraction is None or consumed == 0:
            return
        fraction = diag.bonds_rejected / consumed
        if fraction > self.max_invalid_bond_fraction:
            raise MalformedInput(
                f"{diag.bonds_rejected} of {consumed} bond lines rejected "
                f"(limit {self.max_invalid_bond_fraction:.0%})"
            )

    @staticmethod
    def extensions() -> list[str]:
        return [".sdf", ".mol", ".sd", ".mdl"]


def parse_molfile(text: str, max_invalid_bond_fraction: Optional[float] = None) -> MolfileGraph:
    """Convenience wrapper around MolfileParser."""
    return MolfileParser(max_invalid_bond_fraction=max_invalid_bond_fraction).parse_text(text)
