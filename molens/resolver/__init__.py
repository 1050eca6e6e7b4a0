"""molens.resolver: identifier to molfile text via an ordered provider cascade."""

from molens.resolver.cascade import (
    DEFAULT_STEPS,
    CascadeStep,
    ConformerResolver,
    ConformerResult,
    LookupContext,
    SourceAttempt,
    StepUnavailable,
)
from molens.resolver.dimensionality import dimensionality, is_3d, looks_like_molfile

__all__ = [
    "DEFAULT_STEPS",
    "CascadeStep",
    "ConformerResolver",
    "ConformerResult",
    "LookupContext",
    "SourceAttempt",
    "StepUnavailable",
    "dimensionality",
    "is_3d",
    "looks_like_molfile",
]
