"""Functional-group detection.

    PatternLibrary / PriorityTable  : versionable JSON data
    SubstructureMatcher             : RDKit substructure search, one candidate per pattern
    AnnotationResolver              : priority-ordered, atom-disjoint selection
    GroupDetector                   : the above behind a ResultCache
"""

from molens.groups.detector import GroupDetector
from molens.groups.library import PatternEntry, PatternLibrary, PriorityTable
from molens.groups.matcher import FunctionalGroupCandidate, SubstructureMatcher, load_molecule
from molens.groups.resolution import AnnotationResolver, GroupDetectionResult
from molens.groups.strategies import CompileStrategy, SmartsStrategy, SmilesStrategy

__all__ = [
    "AnnotationResolver",
    "CompileStrategy",
    "FunctionalGroupCandidate",
    "GroupDetectionResult",
    "GroupDetector",
    "PatternEntry",
    "PatternLibrary",
    "PriorityTable",
    "SmartsStrategy",
    "SmilesStrategy",
    "SubstructureMatcher",
    "load_molecule",
]
