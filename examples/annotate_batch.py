#!/usr/bin/env python3
"""Annotate a list of compounds and summarize the manifest.

Usage:
    python examples/annotate_batch.py --input compounds.txt --manifest manifests/compounds.parquet
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from molens.pipeline import Pipeline

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
logger = logging.getLogger(__name__)


def main() -> None:
    p = argparse.ArgumentParser(description="Annotate compounds listed one per line")
    p.add_argument("--input", required=True, help="Text file with one identifier per line")
    p.add_argument("--manifest", required=True, help="Output manifest (.parquet or .csv)")
    args = p.parse_args()

    identifiers = Path(args.input).read_text().splitlines()
    m = Pipeline().annotate_many(identifiers)
    m.save(Path(args.manifest))

    df = m.df
    logger.info("Annotated %d compounds, %d failed", m.count(), m.failed().count())
    logger.info("By source:\n%s", df["provenance"].value_counts(dropna=False).to_string())
    groups = df["group_ids"].fillna("").str.split(";").explode()
    logger.info("Most common groups:\n%s", groups[groups != ""].value_counts().head(10).to_string())


if __name__ == "__main__":
    main()
