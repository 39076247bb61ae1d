"""
CIE Extraction - Clause Detection and Proposition Generation Package

This package turns one dependency graph into the clauses of the sentence
and the propositions they imply: clause detection, clause-type
classification, coordination rewriting, constituent optionality and
proposition enumeration.

Modules:
    relations: Predicates and helpers over dependency edges
    constituents: Constituent variants and roles
    clause: Clause structure, type classification and flags
    clause_detector: Clause discovery over the sentence graph
    coordination: Coordinated heads and constituent alternatives
    proposition_generator: Proposition enumeration and rendering
    extractor: Per-sentence and batch facade
"""

from cie_extraction.constituents import (
    ConstituentKind,
    Role,
    Flag,
    Constituent,
    TextConstituent,
    IndexedConstituent,
    XcompConstituent,
)

from cie_extraction.clause import (
    Clause,
    ClauseType,
)

from cie_extraction.clause_detector import (
    ClauseDetector,
    exclude_siblings,
)

from cie_extraction.coordination import (
    CoordinationRewriter,
    find_coordinated_heads,
    shares_dependent,
    conjunction_binds,
)

from cie_extraction.proposition_generator import (
    Proposition,
    PropositionGenerator,
)

from cie_extraction.extractor import (
    ClausalExtractor,
    SentenceExtraction,
    ExtractionResult,
    detect_clauses,
    generate_propositions,
    extract_from_graph,
    extract_from_graphs,
)

__version__ = "1.0.0"

__all__ = [
    "ConstituentKind",
    "Role",
    "Flag",
    "Constituent",
    "TextConstituent",
    "IndexedConstituent",
    "XcompConstituent",
    "Clause",
    "ClauseType",
    "ClauseDetector",
    "exclude_siblings",
    "CoordinationRewriter",
    "find_coordinated_heads",
    "shares_dependent",
    "conjunction_binds",
    "Proposition",
    "PropositionGenerator",
    "ClausalExtractor",
    "SentenceExtraction",
    "ExtractionResult",
    "detect_clauses",
    "generate_propositions",
    "extract_from_graph",
    "extract_from_graphs",
]
