"""Tests for the typer CLI."""

import json
from pathlib import Path

import pandas as pd
from typer.testing import CliRunner

from fakes import FakeCactus, FakeNist, FakePubChem
from molens import cli
from molens.config import MolensSettings
from molens.pipeline import Pipeline
from molens.resolver import CascadeStep, ConformerResolver, StepUnavailable

FIXTURES = Path(__file__).resolve().parent / "fixtures"
runner = CliRunner()


def fixture_resolver(texts: dict) -> ConformerResolver:
    def serve(ctx):
        if ctx.identifier not in texts:
            raise StepUnavailable("not a fixture")
        return texts[ctx.identifier]

    return ConformerResolver(
        steps=[CascadeStep("fixture", serve, accept_2d=True)],
        pubchem=FakePubChem(), nist=FakeNist(), cactus=FakeCactus(),
    )


def use_fixtures(monkeypatch, caffeine_sdf: str) -> None:
    resolver = fixture_resolver({"caffeine": caffeine_sdf})
    monkeypatch.setattr(cli, "ConformerResolver", lambda settings=None: resolver)
    monkeypatch.setattr(cli, "_make_pipeline", lambda: Pipeline(resolver=resolver, settings=MolensSettings()))


def test_convert_to_stdout() -> None:
    result = runner.invoke(cli.app, ["convert", str(FIXTURES / "caffeine.sdf")])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert sum(l.startswith("ATOM") for l in lines) == 24
    assert lines[-1] == "END"


def test_convert_to_file(tmp_path: Path) -> None:
    out = tmp_path / "ethanol.pdb"
    result = runner.invoke(cli.app, ["convert", str(FIXTURES / "ethanol.sdf"), "--out", str(out)])
    assert result.exit_code == 0
    assert out.read_text().count("ATOM") == 9


def test_convert_malformed_exits_nonzero(tmp_path: Path) -> None:
    bad = tmp_path / "bad.sdf"
    bad.write_text("nothing\nto\nsee\nhere\n")
    result = runner.invoke(cli.app, ["convert", str(bad)])
    assert result.exit_code == 1


def test_groups_table() -> None:
    result = runner.invoke(cli.app, ["groups", str(FIXTURES / "ethanol.sdf")])
    assert result.exit_code == 0
    assert result.stdout.strip() == "hydroxyl\tHydroxyl\t1,9"


def test_groups_json() -> None:
    result = runner.invoke(cli.app, ["groups", str(FIXTURES / "caffeine.sdf"), "--json"])
    assert result.exit_code == 0
    report = json.loads(result.stdout)
    ids = [g["id"] for g in report["groups"]]
    assert "purine_core" in ids and "imide" in ids
    assert report["skipped_patterns"] == []


def test_resolve(monkeypatch, caffeine_sdf: str, tmp_path: Path) -> None:
    use_fixtures(monkeypatch, caffeine_sdf)
    out = tmp_path / "caffeine.sdf"
    result = runner.invoke(cli.app, ["resolve", "caffeine", "--out", str(out)])
    assert result.exit_code == 0
    assert out.read_text() == caffeine_sdf
    assert runner.invoke(cli.app, ["resolve", "unobtainium"]).exit_code == 1


def test_annotate(monkeypatch, caffeine_sdf: str, tmp_path: Path) -> None:
    use_fixtures(monkeypatch, caffeine_sdf)
    json_out = tmp_path / "caffeine.json"
    result = runner.invoke(cli.app, ["annotate", "caffeine", "--json-out", str(json_out)])
    assert result.exit_code == 0
    assert result.stdout.startswith("caffeine\tfixture\t3D")
    assert "purine_core" in result.stdout
    assert json.loads(json_out.read_text())["diagnostics"]["atoms_parsed"] == 24


def test_annotate_rejects_unknown_type() -> None:
    result = runner.invoke(cli.app, ["annotate", "caffeine", "--type", "protein"])
    assert result.exit_code != 0


def test_batch_writes_manifest(monkeypatch, caffeine_sdf: str, tmp_path: Path) -> None:
    use_fixtures(monkeypatch, caffeine_sdf)
    ids = tmp_path / "ids.txt"
    ids.write_text("# compounds\ncaffeine\nunobtainium\n")
    manifest = tmp_path / "manifest.csv"
    result = runner.invoke(cli.app, ["batch", "--input", str(ids), "--manifest", str(manifest), "--no-progress"])
    assert result.exit_code == 0
    df = pd.read_csv(manifest)
    assert df["identifier"].tolist() == ["caffeine", "unobtainium"]
    assert df["status"].tolist() == ["ok", "STRUCTURE_NOT_FOUND"]


def test_batch_reads_csv_column(monkeypatch, caffeine_sdf: str, tmp_path: Path) -> None:
    use_fixtures(monkeypatch, caffeine_sdf)
    table = tmp_path / "ids.csv"
    pd.DataFrame({"name": ["caffeine"]}).to_csv(table, index=False)
    manifest = tmp_path / "manifest.parquet"
    result = runner.invoke(
        cli.app,
        ["batch", "--input", str(table), "--column", "name", "--manifest", str(manifest), "--no-progress"],
    )
    assert result.exit_code == 0
    assert pd.read_parquet(manifest)["group_ids"].iloc[0].startswith("purine_core")
