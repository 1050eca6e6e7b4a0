"""3D-validity heuristic for molfile text.

The header check and the sampled Z column are fixed-position contracts: line 2
carries the program/dimension stamp, atom lines 5-29 are sampled, and Z sits in
columns 20-30 of a V2000 atom line.
"""

from __future__ import annotations

from molens.parsers.base import Dimensionality

SAMPLE_FIRST_LINE = 5
SAMPLE_LAST_LINE = 29
Z_COLUMNS = (20, 30)
Z_TOLERANCE = 1e-3
HEADER_LINES = 4


def header_claims_3d(lines: list[str]) -> bool:
    """True if the program line carries a 3D stamp or the header is V3000."""
    header = lines[:HEADER_LINES]
    if any("V3000" in line for line in header):
        return True
    if len(header) > 1:
        return any("3D" in token for token in header[1].split())
    return False


def sampled_nonzero_z(lines: list[str]) -> bool:
    """True if any sampled line has |z| > tolerance at the fixed Z columns."""
    start, end = Z_COLUMNS
    for line in lines[SAMPLE_FIRST_LINE - 1:SAMPLE_LAST_LINE]:
        if len(line) < end:
            continue
        try:
            z = float(line[start:end])
        except ValueError:
            continue
        if abs(z) > Z_TOLERANCE:
            return True
    return False


def is_3d(text: str) -> bool:
    if not text:
        return False
    lines = text.replace("\r\n", "\n").split("\n")
    return header_claims_3d(lines) or sampled_nonzero_z(lines)


def dimensionality(text: str) -> Dimensionality:
    return Dimensionality.THREE_D if is_3d(text) else Dimensionality.TWO_D


def looks_like_molfile(text: str) -> bool:
    """Cheap sanity check on provider output before it is considered at all."""
    if not text or not text.strip():
        return False
    return "M  END" in text or "V2000" in text or "V3000" in text
