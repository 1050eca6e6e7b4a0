"""Legacy PDB format: fixed-column writer for small molecules and a reader
for downloaded macromolecule entries.

Single Responsibility: only handles PDB format.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from molens.core.logging_utils import get_logger
from molens.parsers.base import Adjacency, AtomRecord, StructureParser

logger = get_logger(__name__)

RESIDUE_NAME = "MOL"
CHAIN_ID = "A"
RESIDUE_SEQ = 1
MAX_CONECT_NEIGHBORS = 4


# ======================================================================
# Writer
# ======================================================================

def atom_name(element: str, serial: int) -> str:
    """Four-character PDB atom-name field derived from element and serial.

    One-letter elements start in column 14, two-letter elements in column 13.
    When element and serial do not fit in four characters the name is the
    element alone; the serial column still identifies the atom.
    """
    name = f"{element}{serial}"
    if len(name) > 4:
        name = element[:4]
    if len(element) == 1 and len(name) < 4:
        return f" {name:<3}"
    return f"{name:<4}"


def format_atom_line(atom: AtomRecord) -> str:
    element = atom.element.upper()
    return (
        f"ATOM  {atom.index:>5} {atom_name(atom.element, atom.index)} "
        f"{RESIDUE_NAME:>3} {CHAIN_ID}{RESIDUE_SEQ:>4}    "
        f"{atom.x:>8.3f}{atom.y:>8.3f}{atom.z:>8.3f}"
        f"{1.0:>6.2f}{0.0:>6.2f}          {element:>2}"
    )


def format_conect_lines(serial: int, neighbors: list[int]) -> list[str]:
    """CONECT records for one atom, at most four ascending neighbors per line."""
    ordered = sorted(neighbors)
    lines = []
    for start in range(0, len(ordered), MAX_CONECT_NEIGHBORS):
        chunk = ordered[start:start + MAX_CONECT_NEIGHBORS]
        lines.append(f"CONECT{serial:>5}" + "".join(f"{n:>5}" for n in chunk))
    return lines


def write_pdb(atoms: Iterable[AtomRecord], adjacency: Adjacency) -> tuple[str, int]:
    """Render ATOM + CONECT + END records.

    Returns (pdb_text, conect_line_count). Output is byte-identical for
    identical input.
    """
    atom_list = list(atoms)
    out = [format_atom_line(a) for a in atom_list]
    conect_count = 0
    for atom in atom_list:
        neighbors = adjacency.neighbors(atom.index)
        if not neighbors:
            continue
        conect = format_conect_lines(atom.index, neighbors)
        conect_count += len(conect)
        out.extend(conect)
    out.append("END")
    return "\n".join(out) + "\n", conect_count


# ======================================================================
# Reader
# ======================================================================

@dataclass
class PDBMetadata:
    entry_id: str = ""
    title: Optional[str] = None
    method: Optional[str] = None
    resolution: Optional[float] = None
    deposit_date: Optional[str] = None


@dataclass
class PDBStructure:
    """Atoms and header metadata of a PDB file."""

    atoms: list[AtomRecord] = field(default_factory=list)
    conect_lines: int = 0
    chain_ids: list[str] = field(default_factory=list)
    metadata: PDBMetadata = field(default_factory=PDBMetadata)

    @property
    def num_atoms(self) -> int:
        return len(self.atoms)

    @property
    def num_chains(self) -> int:
        return len(self.chain_ids)

    def __repr__(self) -> str:
        return (
            f"<PDBStructure {self.metadata.entry_id or '?'} "
            f"chains={self.num_chains} atoms={self.num_atoms}>"
        )


class PDBFormatParser(StructureParser):
    """Parse PDB text (.pdb, .ent) into a PDBStructure."""

    def parse_text(self, text: str) -> PDBStructure:
        s = PDBStructure()
        title = ""
        for line in text.splitlines():
            rec = line[:6].strip()

            if rec in ("ATOM", "HETATM"):
                try:
                    element = line[76:78].strip() if len(line) > 77 else ""
                    s.atoms.append(AtomRecord(
                        index=int(line[6:11]),
                        element=element or line[12:16].strip()[:1],
                        x=float(line[30:38]),
                        y=float(line[38:46]),
                        z=float(line[46:54]),
                    ))
                except (ValueError, IndexError):
                    continue
                cid = line[21] if len(line) > 21 else ""
                if rec == "ATOM" and cid.strip() and cid not in s.chain_ids:
                    s.chain_ids.append(cid)

            elif rec == "CONECT":
                s.conect_lines += 1

            elif rec == "HEADER":
                s.metadata.entry_id = line[62:66].strip()
                date_str = line[50:59].strip()
                if date_str:
                    s.metadata.deposit_date = date_str

            elif rec == "TITLE":
                title += line[10:80].strip() + " "

            elif rec == "EXPDTA":
                s.metadata.method = line[10:79].strip()

            elif rec == "REMARK":
                if line[7:10].strip() == "2" and "RESOLUTION" in line.upper():
                    m = re.search(r"(\d+\.\d+)\s*ANGSTROM", line, re.I)
                    if m:
                        s.metadata.resolution = float(m.group(1))

        s.metadata.title = title.strip() or None
        return s

    @staticmethod
    def extensions() -> list[str]:
        return [".pdb", ".ent"]
