from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pandas as pd
import typer

from molens.config import load_settings
from molens.core.errors import MalformedInput, StructureNotFound
from molens.core.logging_utils import get_logger
from molens.groups.detector import GroupDetector
from molens.parsers.convert import FormatConverter
from molens.pipeline import MOLECULE_TYPES, SMALL_MOLECULE, Pipeline
from molens.resolver.cascade import ConformerResolver

logger = get_logger(__name__)
app = typer.Typer(no_args_is_help=True)


def _make_pipeline() -> Pipeline:
    return Pipeline(settings=load_settings())


def _write_or_echo(text: str, out: Optional[Path]) -> None:
    if out is None:
        typer.echo(text, nl=False)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", out)


def _read_identifiers(path: Path, column: str) -> list[str]:
    """One identifier per line, or the ``column`` of a CSV / parquet table."""
    if path.suffix == ".parquet":
        return pd.read_parquet(path)[column].dropna().astype(str).tolist()
    if path.suffix == ".csv":
        return pd.read_csv(path)[column].dropna().astype(str).tolist()
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]


@app.command("resolve")
def resolve(
    identifier: str = typer.Argument(..., help="Compound name, PubChem CID or SMILES."),
    cas: Optional[str] = typer.Option(None, help="CAS registry number, if known."),
    out: Optional[Path] = typer.Option(None, help="Write the SDF here instead of stdout."),
):
    """Resolve an identifier to molfile text through the provider cascade."""
    try:
        result = ConformerResolver(settings=load_settings()).resolve(identifier, cas=cas)
    except StructureNotFound as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)
    logger.info(
        "Resolved %r from %s (%s)", identifier, result.provenance, result.record.dimensionality.value,
    )
    _write_or_echo(result.sdf_text, out)


@app.command("convert")
def convert(
    sdf: Path = typer.Argument(..., exists=True, dir_okay=False, help="Input molfile / SDF."),
    out: Optional[Path] = typer.Option(None, help="Write the PDB here instead of stdout."),
    max_invalid_bond_fraction: Optional[float] = typer.Option(
        None, help="Fail if more than this fraction of bond lines is invalid."
    ),
):
    """Convert a molfile / SDF to PDB text with CONECT records."""
    limit = max_invalid_bond_fraction
    if limit is None:
        limit = load_settings().max_invalid_bond_fraction
    try:
        result = FormatConverter(max_invalid_bond_fraction=limit).convert(sdf.read_text(encoding="utf-8"))
    except MalformedInput as e:
        logger.error("%s: %s", sdf, e)
        raise typer.Exit(code=1)
    d = result.diagnostics
    logger.info(
        "Converted %s: atoms=%d bonds=%d rejected=%d conect=%d",
        sdf.name, d.atoms_parsed, d.bonds_processed, d.bonds_rejected, d.conect_lines,
    )
    _write_or_echo(result.pdb_text, out)


@app.command("groups")
def groups(
    sdf: Path = typer.Argument(..., exists=True, dir_okay=False, help="Input molfile / SDF."),
    as_json: bool = typer.Option(False, "--json", help="Print the full detection report as JSON."),
):
    """Detect functional groups in a molfile / SDF."""
    detector = GroupDetector.from_settings(load_settings())
    result = detector.detect(sdf.read_text(encoding="utf-8"))
    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return
    for g in result.groups:
        typer.echo(f"{g.id}\t{g.name}\t{','.join(str(a) for a in g.atoms)}")
    if result.suppressed:
        logger.info("Suppressed by priority: %s", ", ".join(result.suppressed))
    if result.skipped_patterns:
        logger.warning("Skipped patterns: %s", ", ".join(result.skipped_patterns))


@app.command("annotate")
def annotate(
    identifier: str = typer.Argument(..., help="Compound name / CID / SMILES, or PDB id for macromolecules."),
    molecule_type: str = typer.Option(SMALL_MOLECULE, "--type", help="'small molecule' or 'macromolecule'."),
    cas: Optional[str] = typer.Option(None, help="CAS registry number, if known."),
    pdb_out: Optional[Path] = typer.Option(None, help="Write PDB text here."),
    sdf_out: Optional[Path] = typer.Option(None, help="Write SDF text here (small molecules)."),
    json_out: Optional[Path] = typer.Option(None, help="Write the full result as JSON here."),
):
    """Resolve, convert and annotate one compound."""
    if molecule_type not in MOLECULE_TYPES:
        raise typer.BadParameter(f"--type must be one of {', '.join(MOLECULE_TYPES)}")
    try:
        result = _make_pipeline().annotate(identifier, molecule_type=molecule_type, cas=cas)
    except (StructureNotFound, MalformedInput) as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)

    if pdb_out:
        _write_or_echo(result.pdb_text, pdb_out)
    if sdf_out and result.sdf_text:
        _write_or_echo(result.sdf_text, sdf_out)
    if json_out:
        _write_or_echo(json.dumps(result.to_dict(), indent=2), json_out)

    typer.echo(f"{result.identifier}\t{result.provenance}\t{result.dimensionality}")
    for g in result.groups:
        typer.echo(f"  {g.id}\t{g.name}\t{','.join(str(a) for a in g.atoms)}")


@app.command("batch")
def batch(
    input_path: Path = typer.Option(..., "--input", exists=True, dir_okay=False, help="Identifiers: .txt (one per line), .csv or .parquet."),
    manifest: Path = typer.Option(..., help="Output manifest path (.parquet or .csv)."),
    column: str = typer.Option("identifier", help="Identifier column for .csv / .parquet input."),
    molecule_type: str = typer.Option(SMALL_MOLECULE, "--type", help="'small molecule' or 'macromolecule'."),
    no_progress: bool = typer.Option(False, help="Disable the progress bar."),
):
    """Annotate many identifiers and write a manifest with one row each."""
    if molecule_type not in MOLECULE_TYPES:
        raise typer.BadParameter(f"--type must be one of {', '.join(MOLECULE_TYPES)}")
    identifiers = _read_identifiers(input_path, column)
    m = _make_pipeline().annotate_many(identifiers, molecule_type=molecule_type, show_progress=not no_progress)
    m.save(manifest)
    logger.info("Annotated %d identifiers (%d failed) -> %s", m.count(), m.failed().count(), manifest)


if __name__ == "__main__":
    app()
