"""Tests for molfile parsing and PDB output."""

import math

import pytest

from molens.core.errors import MalformedInput
from molens.parsers import FormatConverter, convert_molfile, parse_molfile
from molens.parsers.base import Adjacency
from molens.parsers.molfile import find_counts_line, parse_atom_line
from molens.parsers.pdb_format import atom_name, format_conect_lines


def molfile(atoms, bonds, title="test", program="  test  3D") -> str:
    lines = [title, program, "", f"{len(atoms):>3}{len(bonds):>3}  0  0  0  0  0  0  0  0999 V2000"]
    for element, x, y, z in atoms:
        lines.append(f"{x:>10.4f}{y:>10.4f}{z:>10.4f} {element:<3} 0  0  0  0  0  0  0  0  0  0  0  0")
    for a, b in bonds:
        lines.append(f"{a:>3}{b:>3}  1  0")
    lines.append("M  END")
    return "\n".join(lines) + "\n"


def atom_lines(pdb_text: str) -> list[str]:
    return [l for l in pdb_text.splitlines() if l.startswith("ATOM")]


def conect_lines(pdb_text: str) -> list[str]:
    return [l for l in pdb_text.splitlines() if l.startswith("CONECT")]


# -- atom records -------------------------------------------------------------


def test_one_atom_record_per_declared_atom(caffeine_sdf: str) -> None:
    result = convert_molfile(caffeine_sdf)
    lines = atom_lines(result.pdb_text)
    assert len(lines) == 24
    assert [int(l[6:11]) for l in lines] == list(range(1, 25))


def test_atom_record_columns(ethanol_sdf: str) -> None:
    first = atom_lines(convert_molfile(ethanol_sdf).pdb_text)[0]
    expected = (
        "ATOM      1  O1  MOL A   1    "
        "  -1.171   0.300   0.000"
        "  1.00  0.00"
        "           O"
    )
    assert first == expected
    assert first[17:20] == "MOL"
    assert first[21] == "A"
    assert first[76:78] == " O"


def test_atom_name_alignment() -> None:
    assert atom_name("C", 7) == " C7 "
    assert atom_name("C", 12) == " C12"
    assert atom_name("Cl", 3) == "Cl3 "
    assert atom_name("C", 999) == "C999"


def test_atom_name_past_four_characters_uses_element() -> None:
    assert atom_name("C", 1000) == " C  "
    assert atom_name("C", 1234) == " C  "
    assert atom_name("Cl", 100) == "Cl  "
    names = {atom_name("C", n) for n in range(1000, 1100)}
    assert names == {" C  "}
    assert " C  " not in {atom_name("C", n) for n in range(1, 1000)}


def test_pdb_ends_with_end(caffeine_sdf: str) -> None:
    assert convert_molfile(caffeine_sdf).pdb_text.endswith("END\n")


# -- CONECT records -----------------------------------------------------------


def test_conect_line_count_per_atom(caffeine_sdf: str) -> None:
    result = convert_molfile(caffeine_sdf)
    adjacency = result.graph.adjacency
    lines = conect_lines(result.pdb_text)
    for atom in result.graph.atoms:
        k = adjacency.degree(atom.index)
        own = [l for l in lines if int(l[6:11]) == atom.index]
        assert len(own) == math.ceil(k / 4)
    assert result.diagnostics.conect_lines == len(lines)


def test_conect_neighbors_sorted_and_split() -> None:
    atoms = [("C", 0.0, 0.0, 0.0)] + [("H", float(i), 1.0, 0.5) for i in range(1, 7)]
    text = molfile(atoms, [(1, 7), (1, 3), (1, 2), (1, 6), (1, 4), (1, 5)])
    lines = conect_lines(convert_molfile(text).pdb_text)
    first_atom = [l for l in lines if l.startswith("CONECT    1")]
    assert first_atom == [
        "CONECT    1    2    3    4    5",
        "CONECT    1    6    7",
    ]


def test_format_conect_lines_without_neighbors() -> None:
    assert format_conect_lines(3, []) == []


def test_isolated_atom_has_no_conect() -> None:
    text = molfile([("Na", 0.0, 0.0, 0.0), ("Cl", 2.4, 0.0, 0.0)], [])
    result = convert_molfile(text)
    assert conect_lines(result.pdb_text) == []
    assert len(atom_lines(result.pdb_text)) == 2


def test_conversion_is_deterministic(caffeine_sdf: str) -> None:
    first = convert_molfile(caffeine_sdf).pdb_text
    second = FormatConverter().convert(caffeine_sdf).pdb_text
    assert first == second


# -- parsing ------------------------------------------------------------------


def test_graph_counts(caffeine_sdf: str) -> None:
    graph = parse_molfile(caffeine_sdf)
    assert graph.title == "caffeine"
    assert graph.num_atoms == 24
    assert graph.num_bonds == 25
    assert graph.atom(1).element == "O"
    assert (7, 1) in graph.adjacency
    d = graph.diagnostics
    assert (d.atoms_declared, d.atoms_parsed) == (24, 24)
    assert (d.bonds_declared, d.bonds_processed, d.bonds_rejected) == (25, 25, 0)


def test_counts_line_found_within_first_five_lines() -> None:
    lines = ["", "", "title", "", "  3  2  0  0  0  0  0  0  0  0999 V2000"]
    assert find_counts_line(lines) == (4, 3, 2)
    assert find_counts_line(["x"] * 5 + ["  3  2"]) is None


def test_missing_counts_line_is_malformed() -> None:
    with pytest.raises(MalformedInput):
        convert_molfile("not\na\nmolfile\nat\nall\n  3  2\n")


def test_zero_atoms_is_malformed() -> None:
    with pytest.raises(MalformedInput):
        convert_molfile(molfile([], []))


def test_missing_element_defaults_to_carbon() -> None:
    atom = parse_atom_line("    1.0000    2.0000    3.0000", 1)
    assert atom.element == "C"
    assert atom.coords == (1.0, 2.0, 3.0)


def test_run_together_coordinates_use_fixed_columns() -> None:
    atom = parse_atom_line("   -1.2345-1234.5678    0.5000 N   0  0", 2)
    assert atom.coords == (-1.2345, -1234.5678, 0.5)
    assert atom.element == "N"


def test_invalid_bonds_are_dropped() -> None:
    atoms = [("C", 0.0, 0.0, 0.1), ("O", 1.2, 0.0, 0.1), ("H", 2.0, 0.5, 0.1)]
    text = molfile(atoms, [(1, 2), (2, 2), (2, 9), (2, 3), (1, 2)])
    result = convert_molfile(text)
    d = result.diagnostics
    assert d.bonds_rejected == 2
    assert d.bonds_processed == 3
    assert result.graph.adjacency.pairs == [(1, 2), (2, 3)]


def test_property_lines_do_not_consume_bond_count() -> None:
    atoms = [("C", 0.0, 0.0, 0.1), ("O", 1.2, 0.0, 0.1), ("N", 2.0, 0.5, 0.1)]
    text = molfile(atoms, [(1, 2), (2, 3)])
    lines = text.split("\n")
    bond_start = 4 + len(atoms)
    lines.insert(bond_start + 1, "")
    lines.insert(bond_start + 2, "M  CHG  1   3   1")
    graph = parse_molfile("\n".join(lines))
    assert graph.adjacency.pairs == [(1, 2), (2, 3)]
    assert graph.diagnostics.warnings == []


def test_truncated_bond_block_warns() -> None:
    atoms = [("C", 0.0, 0.0, 0.1), ("O", 1.2, 0.0, 0.1)]
    text = molfile(atoms, [(1, 2)]).replace("  2  1  0  0", "  2  3  0  0", 1)
    graph = parse_molfile(text)
    assert graph.num_bonds == 1
    assert any("Bond block truncated" in w for w in graph.diagnostics.warnings)


def test_invalid_bond_fraction_escalates() -> None:
    atoms = [("C", 0.0, 0.0, 0.1), ("O", 1.2, 0.0, 0.1)]
    text = molfile(atoms, [(1, 5), (2, 7), (1, 2)])
    assert convert_molfile(text).diagnostics.bonds_rejected == 2
    with pytest.raises(MalformedInput):
        convert_molfile(text, max_invalid_bond_fraction=0.5)


def test_invalid_bond_fraction_range() -> None:
    with pytest.raises(ValueError):
        FormatConverter(max_invalid_bond_fraction=0)


# -- Adjacency ----------------------------------------------------------------


def test_adjacency_rejects_and_dedupes() -> None:
    adj = Adjacency(3)
    assert adj.add(1, 2)
    assert adj.add(2, 1)
    assert not adj.add(2, 2)
    assert not adj.add(0, 1)
    assert not adj.add(3, 4)
    assert len(adj) == 1
    assert adj.neighbors(1) == [2]
    assert adj.neighbors(3) == []
