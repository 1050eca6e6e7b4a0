"""PubChem PUG REST client (primary structure database)."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional
from urllib.parse import quote

from molens.core.errors import NetworkFailure
from molens.core.http import fetch_json, fetch_text
from molens.core.logging_utils import get_logger
from molens.core.names import candidate_strings, first_cas, is_cid, looks_like_smiles

logger = get_logger(__name__)

PUBCHEM_URL = "https://pubchem.ncbi.nlm.nih.gov/rest/pug"
AUTOCOMPLETE_URL = "https://pubchem.ncbi.nlm.nih.gov/rest/autocomplete/compound"
SOURCE = "pubchem"

_PROPERTIES = "MolecularFormula,MolecularWeight,CanonicalSMILES,IsomericSMILES,InChI,InChIKey,Charge"


@dataclass
class CompoundInfo:
    """Descriptive properties of a compound; every field is optional."""

    cid: Optional[int] = None
    formula: Optional[str] = None
    formula_weight: Optional[float] = None
    canonical_smiles: Optional[str] = None
    isomeric_smiles: Optional[str] = None
    inchi: Optional[str] = None
    inchikey: Optional[str] = None
    formal_charge: Optional[int] = None
    synonyms: list[str] = field(default_factory=list)

    @property
    def cas(self) -> Optional[str]:
        return first_cas(self.synonyms)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["cas"] = self.cas
        return d


def _information(data: Any) -> dict:
    items = (data or {}).get("InformationList", {}).get("Information") or [{}]
    return items[0]


class PubChemClient:
    """Thin PUG REST wrapper. Structure methods raise NetworkFailure."""

    def __init__(
        self,
        base_url: str = PUBCHEM_URL,
        autocomplete_url: str = AUTOCOMPLETE_URL,
        timeout: float = 30,
        user_agent: str = "molens/1.0",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.autocomplete_url = autocomplete_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent

    def _json(self, url: str) -> Any:
        return fetch_json(url, SOURCE, timeout=self.timeout, user_agent=self.user_agent)

    def _text(self, url: str) -> str:
        return fetch_text(url, SOURCE, timeout=self.timeout, user_agent=self.user_agent)

    # --- identifier resolution ----------------------------------------------

    def cids_by_name(self, name: str) -> list[int]:
        """GET /compound/name/{name}/cids/JSON"""
        url = f"{self.base_url}/compound/name/{quote(name, safe='')}/cids/JSON"
        data = self._json(url)
        return list((data or {}).get("IdentifierList", {}).get("CID") or [])

    def cids_by_smiles(self, smiles: str) -> list[int]:
        """GET /compound/smiles/cids/JSON?smiles=..."""
        url = f"{self.base_url}/compound/smiles/cids/JSON?smiles={quote(smiles, safe='')}"
        data = self._json(url)
        return [c for c in (data or {}).get("IdentifierList", {}).get("CID") or [] if c]

    def autocomplete(self, term: str, limit: int = 20) -> list[str]:
        url = f"{self.autocomplete_url}/{quote(term, safe='')}/JSON?limit={limit}"
        data = self._json(url)
        return list((data or {}).get("dictionary_terms", {}).get("compound") or [])

    def resolve_cid(self, identifier: str) -> Optional[int]:
        """Map a CID string, SMILES or free-form name to a CID, or None.

        Lookup failures are logged and never raised.
        """
        ident = identifier.strip()
        if not ident:
            return None
        if is_cid(ident):
            return int(ident)

        if looks_like_smiles(ident):
            try:
                cids = self.cids_by_smiles(ident)
                if cids:
                    return cids[0]
            except NetworkFailure as e:
                logger.info("SMILES lookup failed for %r: %s", ident, e)

        candidates = candidate_strings(ident)
        for cand in candidates:
            try:
                cids = self.cids_by_name(cand)
            except NetworkFailure:
                continue
            if cids:
                logger.info("Resolved %r via name %r -> CID %d", ident, cand, cids[0])
                return cids[0]

        for cand in candidates:
            try:
                suggestions = self.autocomplete(cand)
            except NetworkFailure:
                continue
            for name in suggestions:
                try:
                    cids = self.cids_by_name(name)
                except NetworkFailure:
                    continue
                if cids:
                    logger.info("Resolved %r via autocomplete %r -> CID %d", ident, name, cids[0])
                    return cids[0]

        logger.warning("No PubChem CID for %r", ident)
        return None

    # --- structures ----------------------------------------------------------

    def sdf_3d(self, cid: int) -> str:
        """GET /compound/cid/{cid}/SDF?record_type=3d"""
        return self._text(f"{self.base_url}/compound/cid/{cid}/SDF?record_type=3d")

    def sdf_2d(self, cid: int) -> str:
        """GET /compound/cid/{cid}/SDF"""
        return self._text(f"{self.base_url}/compound/cid/{cid}/SDF")

    def conformer_ids(self, cid: int) -> list[str]:
        """GET /compound/cid/{cid}/conformers/JSON"""
        data = self._json(f"{self.base_url}/compound/cid/{cid}/conformers/JSON")
        return list(_information(data).get("ConformerID") or [])

    def conformer_sdf(self, conformer_id: str) -> str:
        """GET /conformers/{conformer_id}/SDF"""
        return self._text(f"{self.base_url}/conformers/{quote(str(conformer_id), safe='')}/SDF")

    # --- descriptive data ----------------------------------------------------

    def synonyms(self, cid: int) -> list[str]:
        data = self._json(f"{self.base_url}/compound/cid/{cid}/synonyms/JSON")
        return list(_information(data).get("Synonym") or [])

    def properties(self, cid: int) -> dict:
        data = self._json(f"{self.base_url}/compound/cid/{cid}/property/{_PROPERTIES}/JSON")
        props = (data or {}).get("PropertyTable", {}).get("Properties") or [{}]
        return props[0]

    def compound_info(self, cid: int) -> CompoundInfo:
        """Properties plus synonyms. Partial failures leave fields empty."""
        info = CompoundInfo(cid=cid)
        try:
            p = self.properties(cid)
        except NetworkFailure as e:
            logger.warning("PubChem properties failed for CID %d: %s", cid, e)
            p = {}
        info.formula = p.get("MolecularFormula")
        if p.get("MolecularWeight") is not None:
            info.formula_weight = float(p["MolecularWeight"])
        info.canonical_smiles = p.get("CanonicalSMILES") or p.get("ConnectivitySMILES")
        info.isomeric_smiles = p.get("IsomericSMILES") or p.get("SMILES")
        info.inchi = p.get("InChI")
        info.inchikey = p.get("InChIKey")
        if p.get("Charge") is not None:
            info.formal_charge = int(p["Charge"])
        try:
            info.synonyms = self.synonyms(cid)
        except NetworkFailure as e:
            logger.warning("PubChem synonyms failed for CID %d: %s", cid, e)
        return info
