"""NIST Chemistry WebBook: 3D mol files by CAS registry number."""

from __future__ import annotations

from molens.core.http import fetch_text

NIST_URL = "https://webbook.nist.gov/cgi/cbook.cgi"
SOURCE = "nist"


class NistClient:
    def __init__(self, base_url: str = NIST_URL, timeout: float = 30, user_agent: str = "molens/1.0") -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.user_agent = user_agent

    def mol_by_cas(self, cas: str) -> str:
        """GET ?Str3File=C{cas digits}"""
        digits = cas.replace("-", "").strip()
        url = f"{self.base_url}?Str3File=C{digits}"
        return fetch_text(url, SOURCE, timeout=self.timeout, user_agent=self.user_agent)
