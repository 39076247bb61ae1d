"""
CIE Extraction Extractor - Per-sentence and batch extraction facade

Runs clause detection and proposition generation over one dependency graph
or a batch of them. Detection failures are reported per sentence; the batch
continues with the next sentence and emits nothing for the failed one.
"""

from __future__ import annotations
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Any

from cie_core.config_runtime import ExtractionOptions
from cie_core.exceptions import InputFormatError, MalformedGraphError
from cie_core.logging_monitoring import get_extraction_logger
from cie_core.models import DependencyGraph
from cie_extraction.clause import Clause
from cie_extraction.clause_detector import ClauseDetector
from cie_extraction.proposition_generator import Proposition, PropositionGenerator

logger = logging.getLogger(__name__)
extraction_logger = get_extraction_logger(__name__)


@dataclass
class SentenceExtraction:
    """Clauses and propositions of one sentence"""
    sentence_id: Optional[str]
    graph: DependencyGraph
    clauses: List[Clause] = field(default_factory=list)
    propositions: List[Proposition] = field(default_factory=list)
    text: Optional[str] = None

    def to_dict(self, options: Optional[ExtractionOptions] = None) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "sentence_id": self.sentence_id,
            "text": self.text,
            "clauses": [c.to_dict(options) for c in self.clauses],
            "propositions": [p.to_dict() for p in self.propositions]
        }


@dataclass
class ExtractionResult:
    """Result of batch extraction"""
    sentences: List[SentenceExtraction]

    total_sentences: int = 0
    total_clauses: int = 0
    total_propositions: int = 0

    clause_type_counts: Dict[str, int] = field(default_factory=dict)

    errors: List[str] = field(default_factory=list)

    processing_time_ms: float = 0.0

    def to_dict(self, options: Optional[ExtractionOptions] = None) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "total_sentences": self.total_sentences,
            "total_clauses": self.total_clauses,
            "total_propositions": self.total_propositions,
            "clause_type_counts": self.clause_type_counts,
            "sentences": [s.to_dict(options) for s in self.sentences],
            "errors": self.errors,
            "processing_time_ms": self.processing_time_ms
        }


def _unpack(item: Any):
    """(sentence_id, graph, text) from a tuple or a parsed-sentence object"""
    if isinstance(item, (tuple, list)):
        if len(item) == 2:
            return item[0], item[1], None
        if len(item) == 3:
            return item[0], item[1], item[2]
        raise InputFormatError(f"expected (id, graph[, text]), got {len(item)} values")
    graph = getattr(item, "graph", None)
    if graph is None:
        raise InputFormatError(f"no dependency graph in {type(item).__name__}")
    return getattr(item, "sentence_id", None), graph, getattr(item, "text", None)


class ClausalExtractor:
    """Extracts clauses and propositions from dependency graphs"""

    def __init__(self, options: Optional[ExtractionOptions] = None):
        self.options = options or ExtractionOptions()
        self.detector = ClauseDetector(self.options)
        self.generator = PropositionGenerator(self.options)

    def detect_clauses(self, graph: DependencyGraph) -> List[Clause]:
        """Detect the clauses of a sentence"""
        return self.detector.detect(graph)

    def generate_propositions(self, clauses: List[Clause]) -> List[Proposition]:
        """Generate propositions from detected clauses"""
        return self.generator.generate(clauses)

    def extract(
        self,
        graph: DependencyGraph,
        sentence_id: Optional[str] = None,
        text: Optional[str] = None
    ) -> SentenceExtraction:
        """Extract from one sentence; detection errors propagate"""
        if not isinstance(graph, DependencyGraph):
            raise InputFormatError(f"expected a DependencyGraph, got {type(graph).__name__}")

        try:
            clauses = self.detect_clauses(graph)
            propositions = self.generate_propositions(clauses)
        except MalformedGraphError as e:
            if e.sentence_id is None:
                e.sentence_id = sentence_id
            raise

        return SentenceExtraction(
            sentence_id=sentence_id,
            graph=graph,
            clauses=clauses,
            propositions=propositions,
            text=text
        )

    def extract_batch(self, items: Iterable[Any]) -> ExtractionResult:
        """
        Extract from many sentences.

        Items are ``(sentence_id, graph)`` or ``(sentence_id, graph, text)``
        tuples, or objects with ``sentence_id``, ``graph`` and ``text``
        attributes (such as parsed CoNLL-U sentences).
        """
        import time
        start_time = time.time()

        sentences = []
        clause_type_counts = defaultdict(int)
        errors = []
        total = 0

        for position, item in enumerate(items, 1):
            total += 1
            sentence_id = None
            try:
                sentence_id, graph, text = _unpack(item)
                if sentence_id is None:
                    sentence_id = str(position)
                sentence = self.extract(graph, sentence_id, text)
            except (MalformedGraphError, InputFormatError) as e:
                label = sentence_id if sentence_id is not None else position
                extraction_logger.error(f"Error in sentence {label}: {e}", sentence_id=str(label))
                errors.append(f"Error in sentence {label}: {str(e)}")
                continue

            for clause in sentence.clauses:
                clause_type_counts[clause.clause_type.value] += 1
            sentences.append(sentence)

        result = ExtractionResult(
            sentences=sentences,
            total_sentences=total,
            total_clauses=sum(len(s.clauses) for s in sentences),
            total_propositions=sum(len(s.propositions) for s in sentences),
            clause_type_counts=dict(clause_type_counts),
            errors=errors,
            processing_time_ms=(time.time() - start_time) * 1000
        )

        logger.info(
            f"Extracted {result.total_propositions} propositions from "
            f"{len(sentences)}/{total} sentences ({len(errors)} errors)"
        )
        return result


def detect_clauses(
    graph: DependencyGraph,
    options: Optional[ExtractionOptions] = None
) -> List[Clause]:
    """Detect the clauses of a sentence"""
    return ClauseDetector(options).detect(graph)


def generate_propositions(
    clauses: List[Clause],
    options: Optional[ExtractionOptions] = None
) -> List[Proposition]:
    """Generate propositions from detected clauses"""
    return PropositionGenerator(options).generate(clauses)


def extract_from_graph(
    graph: DependencyGraph,
    options: Optional[ExtractionOptions] = None,
    sentence_id: Optional[str] = None
) -> SentenceExtraction:
    """Extract clauses and propositions from one sentence"""
    extractor = ClausalExtractor(options)
    return extractor.extract(graph, sentence_id)


def extract_from_graphs(
    items: Iterable[Any],
    options: Optional[ExtractionOptions] = None
) -> ExtractionResult:
    """Extract clauses and propositions from many sentences"""
    extractor = ClausalExtractor(options)
    return extractor.extract_batch(items)
