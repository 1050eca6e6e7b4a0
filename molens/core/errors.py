"""Error taxonomy shared by the resolver, converter and group detector.

Only ``StructureNotFound`` and ``MalformedInput`` reach callers of the public
API. ``NetworkFailure`` drives the provider cascade and ``PatternCompileFailure``
is logged and skipped by the matcher.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from molens.resolver.cascade import SourceAttempt


class MolensError(Exception):
    """Base class for molens errors.

    Attributes:
        code: Machine-readable error code (e.g. "STRUCTURE_NOT_FOUND").
        message: Human-readable description.
    """

    code = "MOLENS_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class NetworkFailure(MolensError):
    """A single provider request failed (HTTP error, timeout, empty or unparsable body)."""

    code = "NETWORK_FAILURE"

    def __init__(
        self,
        source: str,
        url: str,
        reason: str,
        status: Optional[int] = None,
    ):
        self.source = source
        self.url = url
        self.reason = reason
        self.status = status
        status_part = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"{source}: {reason}{status_part} [{url}]")

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d.update({"source": self.source, "url": self.url, "status": self.status})
        return d


class StructureNotFound(MolensError):
    """Every provider in the cascade failed for an identifier."""

    code = "STRUCTURE_NOT_FOUND"

    def __init__(self, identifier: str, attempts: Sequence["SourceAttempt"] = ()):
        self.identifier = identifier
        self.attempts = list(attempts)
        tried = ", ".join(a.source for a in self.attempts) or "none"
        super().__init__(f"No structure found for {identifier!r} (tried: {tried})")

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["identifier"] = self.identifier
        d["attempts"] = [a.to_dict() for a in self.attempts]
        return d


class MalformedInput(MolensError):
    """Molfile text could not be interpreted (no counts line, zero atoms, unusable bond block)."""

    code = "MALFORMED_INPUT"

    def __init__(self, message: str, identifier: Optional[str] = None):
        self.identifier = identifier
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["identifier"] = self.identifier
        return d


class PatternCompileFailure(MolensError):
    """Neither the primary nor the fallback expression of a pattern compiled."""

    code = "PATTERN_COMPILE_FAILURE"

    def __init__(self, pattern_id: str, pattern: str, fallback: Optional[str] = None):
        self.pattern_id = pattern_id
        self.pattern = pattern
        self.fallback = fallback
        tail = f" or fallback {fallback!r}" if fallback else ""
        super().__init__(f"Pattern {pattern_id!r}: could not compile {pattern!r}{tail}")
