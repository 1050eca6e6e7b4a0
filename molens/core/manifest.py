from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

MANIFEST_COLUMNS = [
    "identifier",
    "molecule_type",
    "status",
    "provenance",
    "dimensionality",
    "atom_count",
    "bond_count",
    "conect_lines",
    "group_ids",
    "error",
]


@dataclass(frozen=True)
class Manifest:
    """A batch annotation manifest.

    Convention:
      - one row per requested identifier, in request order
      - `status` is "ok" or the error code of the failure
      - `group_ids` is a ";"-joined list of kept functional-group ids
    """

    df: pd.DataFrame

    @staticmethod
    def from_rows(rows: Iterable[dict]) -> "Manifest":
        return Manifest(pd.DataFrame(list(rows), columns=MANIFEST_COLUMNS))

    def save(self, path: Path) -> None:
        """Write parquet for ``.parquet`` paths, CSV otherwise."""
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix == ".parquet":
            self.df.to_parquet(path, index=False)
        else:
            self.df.to_csv(path, index=False)

    @staticmethod
    def load(path: Path) -> "Manifest":
        if path.suffix == ".parquet":
            return Manifest(pd.read_parquet(path))
        return Manifest(pd.read_csv(path))

    def count(self) -> int:
        return int(len(self.df))

    def failed(self) -> "Manifest":
        return Manifest(self.df[self.df["status"] != "ok"].reset_index(drop=True))

    def total_atoms(self) -> Optional[int]:
        if "atom_count" not in self.df.columns:
            return None
        return int(self.df["atom_count"].fillna(0).sum())
