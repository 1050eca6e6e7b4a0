"""Tests for the batch manifest."""

from pathlib import Path

import pytest

from molens.core.manifest import MANIFEST_COLUMNS, Manifest

ROWS = [
    {"identifier": "caffeine", "molecule_type": "small molecule", "status": "ok",
     "provenance": "pubchem_3d", "dimensionality": "3D", "atom_count": 24, "bond_count": 25,
     "conect_lines": 24, "group_ids": "purine_core;imide", "error": None},
    {"identifier": "unobtainium", "molecule_type": "small molecule", "status": "STRUCTURE_NOT_FOUND",
     "error": "No structure found"},
]


def test_from_rows_fills_columns() -> None:
    m = Manifest.from_rows(ROWS)
    assert list(m.df.columns) == MANIFEST_COLUMNS
    assert m.count() == 2
    assert m.failed().count() == 1
    assert m.total_atoms() == 24


@pytest.mark.parametrize("name", ["manifest.csv", "out/manifest.parquet"])
def test_save_and_load(tmp_path: Path, name: str) -> None:
    path = tmp_path / name
    Manifest.from_rows(ROWS).save(path)
    loaded = Manifest.load(path)
    assert loaded.count() == 2
    assert loaded.df["identifier"].tolist() == ["caffeine", "unobtainium"]
    assert loaded.failed().df["status"].tolist() == ["STRUCTURE_NOT_FOUND"]
