"""Tests for the 3D-validity heuristic."""

from molens.parsers.base import Dimensionality
from molens.resolver.dimensionality import dimensionality, header_claims_3d, is_3d, looks_like_molfile


def atom_line(z: float, element: str = "C") -> str:
    return f"{0.0:>10.4f}{0.0:>10.4f}{z:>10.4f} {element:<3} 0  0  0  0  0  0  0  0  0  0  0  0"


def record(program: str, zs: list[float]) -> str:
    lines = ["mol", program, "", f"{len(zs):>3}  0  0  0  0  0  0  0  0  0999 V2000"]
    lines += [atom_line(z) for z in zs]
    lines.append("M  END")
    return "\n".join(lines)


def test_v3000_header_is_3d() -> None:
    text = "mol\n  prog  2D\n\n  0  0  0     0  0            999 V3000\nM  V30 BEGIN CTAB\nM  END\n"
    assert is_3d(text)


def test_2d_header_with_flat_atoms_is_2d() -> None:
    assert not is_3d(record("     RDKit          2D", [0.0, 0.0, 0.0005]))


def test_headerless_with_one_nonzero_z_is_3d() -> None:
    assert is_3d(record("", [0.0, 0.0, 0.0, -0.75]))


def test_3d_program_stamp_is_3d() -> None:
    assert header_claims_3d(["2519", "  -OEChem-03132416033D", "", ""])
    assert is_3d(record("  -OEChem-03132416033D", [0.0]))


def test_z_outside_sample_window_is_ignored() -> None:
    zs = [0.0] * 26 + [1.5]
    # The 27th atom sits on line 31, past the sampled lines 5-29.
    assert not is_3d(record("", zs))


def test_fixture_dimensionality(caffeine_sdf: str, flat_ethanol_sdf: str) -> None:
    assert dimensionality(caffeine_sdf) is Dimensionality.THREE_D
    assert dimensionality(flat_ethanol_sdf) is Dimensionality.TWO_D


def test_looks_like_molfile() -> None:
    assert looks_like_molfile(record("", [0.0]))
    assert not looks_like_molfile("<html>Page not found</html>")
    assert not looks_like_molfile("")
