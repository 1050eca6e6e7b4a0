"""NCI/CADD Chemical Identifier Resolver (tertiary resolver)."""

from __future__ import annotations

from urllib.parse import quote

from molens.core.http import fetch_text

CACTUS_URL = "https://cactus.nci.nih.gov/chemical/structure"
SOURCE = "cactus"


class CactusClient:
    def __init__(self, base_url: str = CACTUS_URL, timeout: float = 30, user_agent: str = "molens/1.0") -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent

    def sdf(self, identifier: str) -> str:
        """GET /{identifier}/file?format=sdf&get3d=true"""
        url = f"{self.base_url}/{quote(identifier, safe='')}/file?format=sdf&get3d=true"
        return fetch_text(url, SOURCE, timeout=self.timeout, user_agent=self.user_agent)
