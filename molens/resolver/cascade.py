"""ConformerResolver: ordered provider cascade for 3D structure text.

Steps run sequentially and each at most once. A step's failure is recorded
as a ``SourceAttempt`` and the cascade moves on; the first 3D result wins,
and the final PubChem 2D step is accepted unconditionally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from molens.config import MolensSettings, load_settings
from molens.core.errors import NetworkFailure, StructureNotFound
from molens.core.logging_utils import get_logger
from molens.parsers.base import Dimensionality, MoleculeRecord
from molens.resolver.dimensionality import is_3d, looks_like_molfile
from molens.core.names import looks_like_smiles, sanitize_name
from molens.sources.cactus import CactusClient
from molens.sources.nist import NistClient
from molens.sources.pubchem import CompoundInfo, PubChemClient

logger = get_logger(__name__)


class StepUnavailable(Exception):
    """A step's precondition (CID, CAS number, SMILES) could not be met."""


@dataclass
class SourceAttempt:
    """Outcome of one cascade step."""

    source: str
    ok: bool
    is_3d: bool = False
    skipped: bool = False
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "ok": self.ok,
            "is_3d": self.is_3d,
            "skipped": self.skipped,
            "error": self.error,
        }


@dataclass
class ConformerResult:
    record: MoleculeRecord
    attempts: list[SourceAttempt] = field(default_factory=list)
    cid: Optional[int] = None
    info: Optional[CompoundInfo] = None

    @property
    def sdf_text(self) -> str:
        return self.record.text

    @property
    def provenance(self) -> str:
        return self.record.provenance


class LookupContext:
    """Per-request state shared by the steps; CID and compound info are fetched lazily."""

    def __init__(
        self,
        identifier: str,
        pubchem: PubChemClient,
        nist: NistClient,
        cactus: CactusClient,
        cas: Optional[str] = None,
    ) -> None:
        self.identifier = identifier.strip()
        self.pubchem = pubchem
        self.nist = nist
        self.cactus = cactus
        self._cas = cas
        self._cid: Optional[int] = None
        self._cid_resolved = False
        self._info: Optional[CompoundInfo] = None

    @property
    def cid(self) -> Optional[int]:
        if not self._cid_resolved:
            self._cid = self.pubchem.resolve_cid(self.identifier)
            self._cid_resolved = True
        return self._cid

    def require_cid(self) -> int:
        if self.cid is None:
            raise StepUnavailable(f"{self.identifier!r} did not resolve to a PubChem CID")
        return self.cid

    @property
    def known_cid(self) -> Optional[int]:
        """CID if already looked up; never triggers a request."""
        return self._cid

    @property
    def known_info(self) -> Optional[CompoundInfo]:
        return self._info

    @property
    def info(self) -> Optional[CompoundInfo]:
        if self._info is None and self.cid is not None:
            self._info = self.pubchem.compound_info(self.cid)
        return self._info

    def require_cas(self) -> str:
        if self._cas:
            return self._cas
        cas = self.info.cas if self.info else None
        if not cas:
            raise StepUnavailable("no CAS number among PubChem synonyms")
        return cas

    def require_smiles(self) -> str:
        if looks_like_smiles(self.identifier):
            return self.identifier
        smiles = self.info.canonical_smiles if self.info else None
        if not smiles:
            raise StepUnavailable("no canonical SMILES available")
        return smiles


@dataclass(frozen=True)
class CascadeStep:
    name: str
    fetch: Callable[[LookupContext], str]
    accept_2d: bool = False


def _cactus_by_name(ctx: LookupContext) -> str:
    name = sanitize_name(ctx.identifier)
    if not name or name == ctx.identifier:
        raise StepUnavailable("sanitized name is identical to the identifier")
    return ctx.cactus.sdf(name)


def _pubchem_conformer(ctx: LookupContext) -> str:
    ids = ctx.pubchem.conformer_ids(ctx.require_cid())
    if not ids:
        raise StepUnavailable("no computed conformers listed")
    return ctx.pubchem.conformer_sdf(ids[0])


DEFAULT_STEPS: tuple[CascadeStep, ...] = (
    CascadeStep("pubchem_3d", lambda ctx: ctx.pubchem.sdf_3d(ctx.require_cid())),
    CascadeStep("nist_cas", lambda ctx: ctx.nist.mol_by_cas(ctx.require_cas())),
    CascadeStep("cactus_id", lambda ctx: ctx.cactus.sdf(ctx.identifier)),
    CascadeStep("cactus_smiles", lambda ctx: ctx.cactus.sdf(ctx.require_smiles())),
    CascadeStep("cactus_name", _cactus_by_name),
    CascadeStep("pubchem_conformer", _pubchem_conformer),
    CascadeStep("pubchem_2d", lambda ctx: ctx.pubchem.sdf_2d(ctx.require_cid()), accept_2d=True),
)


class ConformerResolver:
    """Resolve a compound identifier to molfile text, preferring 3D.

    Args:
        steps: ordered cascade; defaults to DEFAULT_STEPS.
        pubchem, nist, cactus: provider clients (built from settings if omitted).
    """

    def __init__(
        self,
        steps: Sequence[CascadeStep] = DEFAULT_STEPS,
        pubchem: Optional[PubChemClient] = None,
        nist: Optional[NistClient] = None,
        cactus: Optional[CactusClient] = None,
        settings: Optional[MolensSettings] = None,
    ) -> None:
        s = settings or load_settings()
        self.steps = list(steps)
        self.pubchem = pubchem or PubChemClient(
            s.pubchem_url, s.pubchem_autocomplete_url, timeout=s.http_timeout, user_agent=s.user_agent,
        )
        self.nist = nist or NistClient(s.nist_url, timeout=s.http_timeout, user_agent=s.user_agent)
        self.cactus = cactus or CactusClient(s.cactus_url, timeout=s.http_timeout, user_agent=s.user_agent)

    def context(self, identifier: str, cas: Optional[str] = None) -> LookupContext:
        return LookupContext(identifier, self.pubchem, self.nist, self.cactus, cas=cas)

    def resolve(self, identifier: str, cas: Optional[str] = None) -> ConformerResult:
        """Run the cascade. Raises StructureNotFound if no step produced molfile text."""
        ctx = self.context(identifier, cas=cas)
        attempts: list[SourceAttempt] = []
        fallback: Optional[tuple[str, str]] = None

        for step in self.steps:
            try:
                text = step.fetch(ctx)
            except StepUnavailable as e:
                logger.info("[%s] skipped for %r: %s", step.name, ctx.identifier, e)
                attempts.append(SourceAttempt(step.name, ok=False, skipped=True, error=str(e)))
                continue
            except NetworkFailure as e:
                logger.warning("[%s] failed for %r: %s", step.name, ctx.identifier, e)
                attempts.append(SourceAttempt(step.name, ok=False, error=str(e)))
                continue

            if not looks_like_molfile(text):
                logger.warning("[%s] returned no molfile for %r", step.name, ctx.identifier)
                attempts.append(SourceAttempt(step.name, ok=False, error="response is not a molfile"))
                continue

            three_d = is_3d(text)
            attempts.append(SourceAttempt(step.name, ok=True, is_3d=three_d))
            if three_d:
                logger.info("[%s] 3D structure for %r", step.name, ctx.identifier)
                return self._result(ctx, text, step.name, Dimensionality.THREE_D, attempts)
            if step.accept_2d:
                logger.info("[%s] accepting 2D structure for %r", step.name, ctx.identifier)
                return self._result(ctx, text, step.name, Dimensionality.TWO_D, attempts)
            logger.info("[%s] rejected 2D structure for %r", step.name, ctx.identifier)
            if fallback is None:
                fallback = (step.name, text)

        if fallback is not None:
            source, text = fallback
            logger.info("No 3D structure for %r; using 2D result from %s", ctx.identifier, source)
            return self._result(ctx, text, source, Dimensionality.TWO_D, attempts)

        raise StructureNotFound(ctx.identifier, attempts)

    @staticmethod
    def _result(
        ctx: LookupContext,
        text: str,
        source: str,
        dim: Dimensionality,
        attempts: list[SourceAttempt],
    ) -> ConformerResult:
        return ConformerResult(
            record=MoleculeRecord(text=text, provenance=source, dimensionality=dim),
            attempts=attempts,
            cid=ctx.known_cid,
            info=ctx.known_info,
        )
