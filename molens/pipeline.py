"""End-to-end annotation: identifier -> {pdb_text, sdf_text, groups, diagnostics}.

Small molecules go through the provider cascade, molfile -> PDB conversion
and functional-group detection. Macromolecules are fetched from RCSB as PDB
text and only summarized; no group detection runs on that path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from tqdm import tqdm

from molens.config import MolensSettings, load_settings
from molens.core.errors import MalformedInput, MolensError, NetworkFailure, StructureNotFound
from molens.core.logging_utils import get_logger
from molens.core.manifest import Manifest
from molens.groups.detector import GroupDetector
from molens.groups.matcher import FunctionalGroupCandidate
from molens.groups.resolution import GroupDetectionResult
from molens.parsers.convert import FormatConverter
from molens.parsers.pdb_format import PDBFormatParser
from molens.resolver.cascade import ConformerResolver, SourceAttempt
from molens.resolver.dimensionality import dimensionality
from molens.sources.rcsb import EntryInfo, RCSBClient

logger = get_logger(__name__)

SMALL_MOLECULE = "small molecule"
MACROMOLECULE = "macromolecule"
MOLECULE_TYPES = (SMALL_MOLECULE, MACROMOLECULE)


@dataclass
class AnnotatedMolecule:
    identifier: str
    molecule_type: str
    pdb_text: str
    provenance: str
    sdf_text: Optional[str] = None
    dimensionality: Optional[str] = None
    detection: Optional[GroupDetectionResult] = None
    diagnostics: dict[str, Any] = field(default_factory=dict)
    attempts: list[SourceAttempt] = field(default_factory=list)
    info: Optional[dict[str, Any]] = None

    @property
    def groups(self) -> list[FunctionalGroupCandidate]:
        return list(self.detection.groups) if self.detection else []

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "molecule_type": self.molecule_type,
            "provenance": self.provenance,
            "dimensionality": self.dimensionality,
            "pdb_text": self.pdb_text,
            "sdf_text": self.sdf_text,
            "groups": [g.to_dict() for g in self.groups],
            "diagnostics": self.diagnostics,
            "attempts": [a.to_dict() for a in self.attempts],
            "info": self.info,
        }

    def manifest_row(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "molecule_type": self.molecule_type,
            "status": "ok",
            "provenance": self.provenance,
            "dimensionality": self.dimensionality,
            "atom_count": self.diagnostics.get("atoms_parsed"),
            "bond_count": self.diagnostics.get("bonds_processed"),
            "conect_lines": self.diagnostics.get("conect_lines"),
            "group_ids": ";".join(g.id for g in self.groups),
            "error": None,
        }


def _failure_row(identifier: str, molecule_type: str, error: MolensError) -> dict[str, Any]:
    return {
        "identifier": identifier,
        "molecule_type": molecule_type,
        "status": error.code,
        "provenance": None,
        "dimensionality": None,
        "atom_count": None,
        "bond_count": None,
        "conect_lines": None,
        "group_ids": "",
        "error": error.message,
    }


class Pipeline:
    """Wire resolver, converter, detector and RCSB client together.

    Every collaborator is optional and built from settings on first use.
    """

    def __init__(
        self,
        resolver: Optional[ConformerResolver] = None,
        converter: Optional[FormatConverter] = None,
        detector: Optional[GroupDetector] = None,
        rcsb: Optional[RCSBClient] = None,
        settings: Optional[MolensSettings] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self._resolver = resolver
        self._detector = detector
        self._rcsb = rcsb
        self.converter = converter or FormatConverter(
            max_invalid_bond_fraction=self.settings.max_invalid_bond_fraction,
        )

    @property
    def resolver(self) -> ConformerResolver:
        if self._resolver is None:
            self._resolver = ConformerResolver(settings=self.settings)
        return self._resolver

    @property
    def detector(self) -> GroupDetector:
        if self._detector is None:
            self._detector = GroupDetector.from_settings(self.settings)
        return self._detector

    @property
    def rcsb(self) -> RCSBClient:
        if self._rcsb is None:
            s = self.settings
            self._rcsb = RCSBClient(
                s.rcsb_files_url, s.rcsb_data_url, s.rcsb_search_url,
                timeout=s.http_timeout, user_agent=s.user_agent,
            )
        return self._rcsb

    def annotate(
        self,
        identifier: str,
        molecule_type: str = SMALL_MOLECULE,
        cas: Optional[str] = None,
    ) -> AnnotatedMolecule:
        """Resolve and annotate one identifier.

        Raises:
            StructureNotFound: no provider produced a structure.
            MalformedInput: the structure text could not be parsed.
        """
        if molecule_type not in MOLECULE_TYPES:
            raise ValueError(f"molecule_type must be one of {MOLECULE_TYPES}, got {molecule_type!r}")
        if molecule_type == MACROMOLECULE:
            return self._annotate_macromolecule(identifier)

        conformer = self.resolver.resolve(identifier, cas=cas)
        result = self.annotate_text(
            conformer.sdf_text,
            identifier=identifier,
            provenance=conformer.provenance,
        )
        result.attempts = conformer.attempts
        result.dimensionality = conformer.record.dimensionality.value
        if conformer.info is not None:
            result.info = conformer.info.to_dict()
        elif conformer.cid is not None:
            result.info = {"cid": conformer.cid}
        return result

    def annotate_text(self, sdf_text: str, identifier: str = "", provenance: str = "input") -> AnnotatedMolecule:
        """Convert and annotate molfile text that is already at hand."""
        try:
            converted = self.converter.convert(sdf_text)
        except MalformedInput as e:
            raise MalformedInput(e.message, identifier=identifier or None) from e
        detection = self.detector.detect(converted.graph)
        diagnostics = converted.diagnostics.to_dict()
        diagnostics["skipped_patterns"] = list(detection.skipped_patterns)
        diagnostics["suppressed_groups"] = list(detection.suppressed)
        return AnnotatedMolecule(
            identifier=identifier,
            molecule_type=SMALL_MOLECULE,
            pdb_text=converted.pdb_text,
            provenance=provenance,
            sdf_text=sdf_text,
            dimensionality=dimensionality(sdf_text).value,
            detection=detection,
            diagnostics=diagnostics,
        )

    def _annotate_macromolecule(self, identifier: str) -> AnnotatedMolecule:
        pdb_id = self.rcsb.resolve_pdb_id(identifier)
        if pdb_id is None:
            raise StructureNotFound(identifier, [SourceAttempt("rcsb", ok=False, error="no matching entry")])
        try:
            pdb_text = self.rcsb.download_pdb(pdb_id)
        except NetworkFailure as e:
            logger.warning("[rcsb] download failed for %s: %s", pdb_id, e)
            raise StructureNotFound(identifier, [SourceAttempt("rcsb", ok=False, error=str(e))]) from e

        structure = PDBFormatParser().parse_text(pdb_text)
        if structure.num_atoms == 0:
            raise MalformedInput(f"PDB entry {pdb_id} contains no ATOM/HETATM records", identifier=identifier)

        try:
            info: Optional[dict[str, Any]] = EntryInfo.from_entry(pdb_id, self.rcsb.get_entry(pdb_id)).to_dict()
        except NetworkFailure as e:
            logger.warning("[rcsb] entry metadata unavailable for %s: %s", pdb_id, e)
            info = None

        logger.info("[rcsb] %s -> %s (%d atoms)", identifier, pdb_id, structure.num_atoms)
        return AnnotatedMolecule(
            identifier=identifier,
            molecule_type=MACROMOLECULE,
            pdb_text=pdb_text,
            provenance="rcsb",
            dimensionality="3D",
            diagnostics={
                "pdb_id": pdb_id,
                "atoms_parsed": structure.num_atoms,
                "conect_lines": structure.conect_lines,
                "chains": list(structure.chain_ids),
            },
            attempts=[SourceAttempt("rcsb", ok=True, is_3d=True)],
            info=info,
        )

    def annotate_many(
        self,
        identifiers: Iterable[str],
        molecule_type: str = SMALL_MOLECULE,
        show_progress: bool = True,
    ) -> Manifest:
        """Annotate each identifier; failures become manifest rows, not exceptions."""
        ids = [i.strip() for i in identifiers if i and i.strip()]
        rows = []
        for identifier in tqdm(ids, desc="Annotating", unit="mol", disable=not show_progress):
            try:
                rows.append(self.annotate(identifier, molecule_type=molecule_type).manifest_row())
            except (StructureNotFound, MalformedInput) as e:
                logger.warning("Failed %r: %s", identifier, e)
                rows.append(_failure_row(identifier, molecule_type, e))
        return Manifest.from_rows(rows)


_default_pipeline: Optional[Pipeline] = None


def annotate(
    identifier: str,
    molecule_type: str = SMALL_MOLECULE,
    cas: Optional[str] = None,
) -> AnnotatedMolecule:
    """Annotate with a lazily created default Pipeline."""
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = Pipeline()
    return _default_pipeline.annotate(identifier, molecule_type=molecule_type, cas=cas)
