"""RCSB PDB clients for the macromolecule path: Data API, Search API, file download."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from molens.core.errors import NetworkFailure
from molens.core.http import fetch_json, fetch_text
from molens.core.logging_utils import get_logger

logger = get_logger(__name__)

FILES_URL = "https://files.rcsb.org/download"
DATA_API_BASE = "https://data.rcsb.org/rest/v1/core"
SEARCH_URL = "https://search.rcsb.org/rcsbsearch/v2/query"
SOURCE = "rcsb"

PDB_ID_RE = re.compile(r"^[A-Za-z0-9]{4}$")


@dataclass
class EntryInfo:
    """Entry metadata extracted from a Data API response."""

    pdb_id: str
    title: Optional[str] = None
    resolution: Optional[float] = None
    experimental_method: Optional[str] = None
    formula_weight: Optional[float] = None
    chain_count: Optional[int] = None
    publication_year: Optional[int] = None
    keywords: list[str] = field(default_factory=list)
    organism_scientific: Optional[str] = None
    deposition_date: Optional[str] = None

    @staticmethod
    def from_entry(pdb_id: str, meta: dict) -> "EntryInfo":
        entry_info = meta.get("rcsb_entry_info") or {}
        resolution = entry_info.get("resolution_combined") or [None]
        keywords = (meta.get("struct_keywords") or {}).get("pdbx_keywords") or ""
        organisms = meta.get("rcsb_entity_source_organism") or [{}]
        return EntryInfo(
            pdb_id=pdb_id,
            title=(meta.get("struct") or {}).get("title"),
            resolution=resolution[0],
            experimental_method=entry_info.get("experimental_method"),
            formula_weight=entry_info.get("molecular_weight"),
            chain_count=entry_info.get("deposited_polymer_entity_instance_count"),
            publication_year=(meta.get("rcsb_primary_citation") or {}).get("year"),
            keywords=[k.strip() for k in keywords.split(",") if k.strip()],
            organism_scientific=organisms[0].get("scientific_name"),
            deposition_date=(meta.get("rcsb_accession_info") or {}).get("deposit_date"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RCSBClient:
    """Client for RCSB file downloads, Data API and Search API."""

    def __init__(
        self,
        files_url: str = FILES_URL,
        data_base: str = DATA_API_BASE,
        search_url: str = SEARCH_URL,
        timeout: float = 30,
        user_agent: str = "molens/1.0",
    ) -> None:
        self.files_url = files_url.rstrip("/")
        self.data_base = data_base.rstrip("/")
        self.search_url = search_url
        self.timeout = timeout
        self.user_agent = user_agent

    # --- Data API REST -------------------------------------------------------

    def get_entry(self, entry_id: str) -> dict:
        """GET /rest/v1/core/entry/{entry_id}"""
        url = f"{self.data_base}/entry/{entry_id.upper()}"
        return fetch_json(url, SOURCE, timeout=self.timeout, user_agent=self.user_agent) or {}

    # --- Files ---------------------------------------------------------------

    def download_pdb(self, entry_id: str) -> str:
        """GET {files}/{entry_id}.pdb"""
        url = f"{self.files_url}/{entry_id.upper()}.pdb"
        return fetch_text(url, SOURCE, timeout=self.timeout, user_agent=self.user_agent)

    # --- Search API ----------------------------------------------------------

    def search_full_text(self, term: str, rows: int = 20) -> list[str]:
        """POST a full_text query; return 4-character entry ids by score."""
        payload = {
            "query": {"type": "terminal", "service": "full_text", "parameters": {"value": term}},
            "return_type": "entry",
            "request_options": {
                "paginate": {"start": 0, "rows": rows},
                "sort": [{"sort_by": "score", "direction": "desc"}],
            },
        }
        data = fetch_json(
            self.search_url, SOURCE, method="POST", data=payload,
            timeout=self.timeout, user_agent=self.user_agent,
        )
        result_set = (data or {}).get("result_set") or []
        return [r["identifier"] for r in result_set if PDB_ID_RE.match(r.get("identifier", ""))]

    def resolve_pdb_id(self, query: str) -> Optional[str]:
        """Exact 4-character id, else the best full-text hit, else None."""
        term = query.strip()
        if PDB_ID_RE.match(term):
            return term.upper()
        try:
            hits = self.search_full_text(term)
        except NetworkFailure as e:
            logger.warning("RCSB full-text search failed for %r: %s", term, e)
            return None
        if hits:
            logger.info("RCSB full-text %r -> %s", term, hits[0])
            return hits[0].upper()
        logger.warning("No RCSB entry matches %r", term)
        return None
