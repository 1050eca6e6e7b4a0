#!/usr/bin/env python3
"""Resolve one compound, convert it to PDB and list its functional groups.

Usage:
    python examples/annotate_compound.py caffeine --out-dir out/
    python examples/annotate_compound.py 4HHB --type macromolecule --out-dir out/
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from molens.pipeline import MOLECULE_TYPES, SMALL_MOLECULE, Pipeline

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
logger = logging.getLogger(__name__)


def main() -> None:
    p = argparse.ArgumentParser(description="Annotate a compound by name, CID, SMILES or PDB id")
    p.add_argument("identifier", help="Compound identifier")
    p.add_argument("--type", default=SMALL_MOLECULE, choices=MOLECULE_TYPES, help="Molecule type")
    p.add_argument("--cas", default=None, help="CAS registry number, if known")
    p.add_argument("--out-dir", default="out", help="Directory for .pdb / .sdf / .json output")
    args = p.parse_args()

    result = Pipeline().annotate(args.identifier, molecule_type=args.type, cas=args.cas)

    out = Path(args.out_dir)
    out.mkdir(parents=True, exist_ok=True)
    stem = args.identifier.replace("/", "_").replace(" ", "_")
    (out / f"{stem}.pdb").write_text(result.pdb_text)
    if result.sdf_text:
        (out / f"{stem}.sdf").write_text(result.sdf_text)
    (out / f"{stem}.json").write_text(json.dumps(result.to_dict(), indent=2))

    logger.info("Source: %s (%s)", result.provenance, result.dimensionality)
    for g in result.groups:
        logger.info("  %-20s atoms=%s", g.name, ",".join(map(str, g.atoms)))
    logger.info("Wrote results to %s", out)


if __name__ == "__main__":
    main()
