"""In-memory stand-ins for the structure providers used by cascade tests."""

from __future__ import annotations

from typing import Optional

from molens.core.errors import NetworkFailure
from molens.sources.pubchem import CompoundInfo


def _missing(source: str, what: str) -> NetworkFailure:
    return NetworkFailure(source, f"fake://{source}/{what}", "Not Found", status=404)


class FakePubChem:
    def __init__(
        self,
        cid: Optional[int] = 2519,
        sdf3d: Optional[str] = None,
        sdf2d: Optional[str] = None,
        conformers: tuple[str, ...] = (),
        conformer_text: Optional[str] = None,
        info: Optional[CompoundInfo] = None,
    ) -> None:
        self.cid = cid
        self.sdf3d = sdf3d
        self.sdf2d = sdf2d
        self.conformers = list(conformers)
        self.conformer_text = conformer_text
        self.info = info
        self.calls: list[str] = []

    def resolve_cid(self, identifier: str) -> Optional[int]:
        self.calls.append("resolve_cid")
        return self.cid

    def sdf_3d(self, cid: int) -> str:
        self.calls.append("sdf_3d")
        if self.sdf3d is None:
            raise _missing("pubchem", "3d")
        return self.sdf3d

    def sdf_2d(self, cid: int) -> str:
        self.calls.append("sdf_2d")
        if self.sdf2d is None:
            raise _missing("pubchem", "2d")
        return self.sdf2d

    def conformer_ids(self, cid: int) -> list[str]:
        self.calls.append("conformer_ids")
        return self.conformers

    def conformer_sdf(self, conformer_id: str) -> str:
        self.calls.append("conformer_sdf")
        if self.conformer_text is None:
            raise _missing("pubchem", "conformer")
        return self.conformer_text

    def compound_info(self, cid: int) -> CompoundInfo:
        self.calls.append("compound_info")
        return self.info or CompoundInfo(cid=cid)


class FakeNist:
    def __init__(self, by_cas: Optional[dict[str, str]] = None) -> None:
        self.by_cas = by_cas or {}
        self.calls: list[str] = []

    def mol_by_cas(self, cas: str) -> str:
        self.calls.append(cas)
        if cas not in self.by_cas:
            raise _missing("nist", cas)
        return self.by_cas[cas]


class FakeCactus:
    def __init__(self, responses: Optional[dict[str, str]] = None) -> None:
        self.responses = responses or {}
        self.calls: list[str] = []

    def sdf(self, identifier: str) -> str:
        self.calls.append(identifier)
        if identifier not in self.responses:
            raise _missing("cactus", identifier)
        return self.responses[identifier]


class FakeRCSB:
    def __init__(self, entries: Optional[dict[str, str]] = None, meta: Optional[dict] = None) -> None:
        self.entries = entries or {}
        self.meta = meta or {}

    def resolve_pdb_id(self, query: str) -> Optional[str]:
        q = query.strip().upper()
        return q if q in self.entries else None

    def download_pdb(self, entry_id: str) -> str:
        if entry_id not in self.entries:
            raise _missing("rcsb", entry_id)
        return self.entries[entry_id]

    def get_entry(self, entry_id: str) -> dict:
        if not self.meta:
            raise _missing("rcsb", f"entry/{entry_id}")
        return self.meta
