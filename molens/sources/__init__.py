"""External structure providers: PubChem, NIST WebBook, NCI CACTUS, RCSB."""

from molens.sources.cactus import CactusClient
from molens.sources.nist import NistClient
from molens.sources.pubchem import CompoundInfo, PubChemClient
from molens.sources.rcsb import EntryInfo, RCSBClient

__all__ = [
    "CactusClient",
    "NistClient",
    "CompoundInfo",
    "PubChemClient",
    "EntryInfo",
    "RCSBClient",
]
