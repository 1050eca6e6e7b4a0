"""Identifier helpers: classification, name sanitizing and CAS extraction."""

from __future__ import annotations

import re
from typing import Iterable, Optional

CAS_RE = re.compile(r"^(\d{2,7})-(\d{2})-(\d)$")
_QUOTES_RE = re.compile(r"[\"'‘’“”]")
_POSSESSIVE_RE = re.compile(r"\b([A-Za-z0-9\-]+)['’]s\b")
_PUNCT_RE = re.compile(r"[.,;:?!()]")
_WORD_JUNK_RE = re.compile(r"[^A-Za-z0-9+\-\[\]]")
# Characters that occur in SMILES but not in ordinary compound names.
_SMILES_CHARS_RE = re.compile(r"[=#@\[\]()/\\]")


def is_cid(identifier: str) -> bool:
    return identifier.strip().isdigit()


def looks_like_smiles(identifier: str) -> bool:
    s = identifier.strip()
    if not s or any(ch.isspace() for ch in s):
        return False
    if _SMILES_CHARS_RE.search(s):
        return True
    # Ring closures in otherwise bare atom strings, e.g. "c1ccccc1"
    return bool(re.fullmatch(r"[BCNOSPFIbcnops0-9]+", s)) and any(ch.isdigit() for ch in s)


def sanitize_name(name: str) -> str:
    """Display name with quotes, possessives and simple punctuation removed."""
    s = name.strip()
    s = _POSSESSIVE_RE.sub(r"\1", s)
    s = _QUOTES_RE.sub("", s)
    s = _PUNCT_RE.sub("", s)
    return re.sub(r"\s+", " ", s).strip()


def candidate_strings(text: str) -> list[str]:
    """Ordered lookup candidates for a free-form compound name.

    Most specific first: the raw string, then cleaned variants, then single
    words of three or more characters, then bigrams.
    """
    seen: dict[str, None] = {}

    raw = text.strip()
    if raw:
        seen[raw] = None

    s = _POSSESSIVE_RE.sub(r"\1", raw)
    s = _QUOTES_RE.sub("", s)
    if s != raw:
        seen[s] = None

    punct_free = _PUNCT_RE.sub("", s)
    if punct_free != s:
        seen[punct_free] = None

    words = [w for w in (_WORD_JUNK_RE.sub("", w) for w in punct_free.split()) if w]
    for w in words:
        if len(w) >= 3:
            seen[w] = None
    for first, second in zip(words, words[1:]):
        seen[f"{first} {second}"] = None

    return [c for c in seen if c]


def is_valid_cas(cas: str) -> bool:
    """CAS registry number format plus check digit."""
    m = CAS_RE.match(cas.strip())
    if not m:
        return False
    digits = (m.group(1) + m.group(2))[::-1]
    checksum = sum(int(d) * (i + 1) for i, d in enumerate(digits)) % 10
    return checksum == int(m.group(3))


def first_cas(synonyms: Iterable[str]) -> Optional[str]:
    for syn in synonyms:
        if is_valid_cas(syn):
            return syn.strip()
    return None
