from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_env_path = Path(__file__).resolve().parents[1] / ".env"
if _env_path.is_file():
    load_dotenv(_env_path, override=False)


def _optional_float(name: str) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else None


def _optional_path(name: str) -> Optional[str]:
    raw = os.environ.get(name, "").strip()
    return raw or None


@dataclass
class MolensSettings:
    """Configuration loaded from MOLENS_* environment variables.

    HTTP / providers:
      MOLENS_HTTP_TIMEOUT=30
      MOLENS_USER_AGENT=molens/1.0
      MOLENS_PUBCHEM_URL=https://pubchem.ncbi.nlm.nih.gov/rest/pug
      MOLENS_CACTUS_URL=https://cactus.nci.nih.gov/chemical/structure
      MOLENS_NIST_URL=https://webbook.nist.gov/cgi/cbook.cgi

    Group detection:
      MOLENS_CACHE_MAX_ENTRIES=1024
      MOLENS_CACHE_TTL_SECONDS=3600
      MOLENS_PATTERN_LIBRARY=/path/to/functional_groups.json
      MOLENS_PRIORITY_TABLE=/path/to/priorities.json

    Conversion:
      MOLENS_MAX_INVALID_BOND_FRACTION=0.5
    """

    http_timeout: float = 30
    user_agent: str = "molens/1.0"

    # Providers
    pubchem_url: str = "https://pubchem.ncbi.nlm.nih.gov/rest/pug"
    pubchem_autocomplete_url: str = "https://pubchem.ncbi.nlm.nih.gov/rest/autocomplete/compound"
    cactus_url: str = "https://cactus.nci.nih.gov/chemical/structure"
    nist_url: str = "https://webbook.nist.gov/cgi/cbook.cgi"
    rcsb_files_url: str = "https://files.rcsb.org/download"
    rcsb_data_url: str = "https://data.rcsb.org/rest/v1/core"
    rcsb_search_url: str = "https://search.rcsb.org/rcsbsearch/v2/query"

    # Group detection cache
    cache_max_entries: int = 1024
    cache_ttl_seconds: Optional[float] = None

    # Pattern data overrides
    pattern_library_path: Optional[str] = None
    priority_table_path: Optional[str] = None

    # Molfile conversion
    max_invalid_bond_fraction: Optional[float] = None

    log_level: str = "INFO"


def load_settings() -> MolensSettings:
    """Load settings from environment variables."""
    defaults = MolensSettings()
    return MolensSettings(
        http_timeout=float(os.environ.get("MOLENS_HTTP_TIMEOUT", str(defaults.http_timeout))),
        user_agent=os.environ.get("MOLENS_USER_AGENT", defaults.user_agent),
        pubchem_url=os.environ.get("MOLENS_PUBCHEM_URL", defaults.pubchem_url),
        pubchem_autocomplete_url=os.environ.get(
            "MOLENS_PUBCHEM_AUTOCOMPLETE_URL", defaults.pubchem_autocomplete_url
        ),
        cactus_url=os.environ.get("MOLENS_CACTUS_URL", defaults.cactus_url),
        nist_url=os.environ.get("MOLENS_NIST_URL", defaults.nist_url),
        rcsb_files_url=os.environ.get("MOLENS_RCSB_FILES_URL", defaults.rcsb_files_url),
        rcsb_data_url=os.environ.get("MOLENS_RCSB_DATA_URL", defaults.rcsb_data_url),
        rcsb_search_url=os.environ.get("MOLENS_RCSB_SEARCH_URL", defaults.rcsb_search_url),
        cache_max_entries=int(os.environ.get("MOLENS_CACHE_MAX_ENTRIES", str(defaults.cache_max_entries))),
        cache_ttl_seconds=_optional_float("MOLENS_CACHE_TTL_SECONDS"),
        pattern_library_path=_optional_path("MOLENS_PATTERN_LIBRARY"),
        priority_table_path=_optional_path("MOLENS_PRIORITY_TABLE"),
        max_invalid_bond_fraction=_optional_float("MOLENS_MAX_INVALID_BOND_FRACTION"),
        log_level=os.environ.get("MOLENS_LOG_LEVEL", defaults.log_level).upper(),
    )
