"""
CIE Extraction Proposition Generator - From clauses to propositions

For every clause the generator:

1. collects the alternatives of every constituent (coordination splits,
   flattened open clausal complements)
2. enumerates which positions to include (all non-ignored positions in
   n-ary mode, required positions plus bounded subsets of optional ones in
   triple mode)
3. renders one proposition per inclusion vector and choice of alternatives
"""

from __future__ import annotations
import itertools
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Any, Sequence, Tuple

from cie_core.config_runtime import ExtractionOptions
from cie_core.exceptions import MalformedGraphError, UnsupportedConstituentError
from cie_core.models import GrammaticalRelation
from cie_extraction.clause import Clause
from cie_extraction.constituents import (
    Constituent,
    ConstituentKind,
    Flag,
    IndexedConstituent,
    TextConstituent,
    XcompConstituent,
)
from cie_extraction.coordination import CoordinationRewriter
from cie_extraction.relations import remove_edges

logger = logging.getLogger(__name__)

R = GrammaticalRelation

# Subtrees never rendered as part of a constituent
EXCLUDE_RELATIONS = frozenset({R.RCMOD, R.APPOS, R.PARATAXIS})

# The verb also drops unspecified dependents (stray adverbs and auxiliaries)
EXCLUDE_RELATIONS_VERB = EXCLUDE_RELATIONS | {R.DEP}


@dataclass(frozen=True)
class Proposition:
    """
    A flat (subject, relation, arguments...) tuple.

    Position 0 is the subject (absent for subject-less embedded clauses),
    position 1 the relation, later positions the arguments. ``optional``
    holds the positions that may be dropped.
    """
    fields: Tuple[str, ...]
    optional: FrozenSet[int] = frozenset()

    def field(self, i: int) -> str:
        return self.fields[i]

    def is_optional(self, i: int) -> bool:
        return i in self.optional

    def arity(self) -> int:
        return len(self.fields)

    @property
    def subject(self) -> str:
        return self.fields[0]

    @property
    def relation(self) -> str:
        return self.fields[1]

    def argument(self, i: int) -> str:
        """The i-th argument (0-based), i.e. field i + 2"""
        return self.fields[i + 2]

    @property
    def arguments(self) -> List[str]:
        return list(self.fields[2:])

    def is_optional_argument(self, i: int) -> bool:
        return self.is_optional(i + 2)

    def __str__(self) -> str:
        parts = []
        for i, text in enumerate(self.fields):
            parts.append(f'"{text}"' + ("?" if i in self.optional else ""))
        return f"({', '.join(parts)})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "fields": list(self.fields),
            "optional": sorted(self.optional),
            "text": str(self)
        }


class PropositionGenerator:
    """
    Generates propositions from detected clauses.

    Generation never modifies the clauses: each pass works on a clone whose
    constituents are swapped by reference.
    """

    def __init__(self, options: Optional[ExtractionOptions] = None):
        self.options = options or ExtractionOptions()
        self.rewriter = CoordinationRewriter(self.options)

    def generate(self, clauses: Sequence[Clause], xcomp: bool = False) -> List[Proposition]:
        """
        Propositions of all clauses in clause order.

        ``xcomp`` marks clauses detected inside an open clausal complement;
        their subject is borrowed from the outer clause and never split.
        """
        result: List[Proposition] = []
        for clause in clauses:
            result.extend(self.generate_clause(clause, xcomp))
        return result

    def generate_clause(self, clause: Clause, xcomp: bool = False) -> List[Proposition]:
        """Propositions of one clause"""
        if clause.verb < 0:
            raise MalformedGraphError(f"Clause without a verb: {clause.describe()}")

        alternatives = [
            self._alternatives(clause, i, xcomp)
            for i in range(len(clause.constituents))
        ]
        flags = [clause.flag(i, self.options) for i in range(len(clause.constituents))]

        propositions: List[Proposition] = []
        temp = clause.clone()
        for include in self._inclusion_vectors(flags):
            positions = [i for i, included in enumerate(include) if included]
            for choice in itertools.product(*(alternatives[i] for i in positions)):
                for position, constituent in zip(positions, choice):
                    temp.constituents[position] = constituent
                propositions.append(self._build(temp, include))

        logger.debug(f"{len(propositions)} proposition(s) for {clause.describe()}")
        return propositions

    def _alternatives(self, clause: Clause, i: int, xcomp: bool) -> List[Constituent]:
        constituent = clause.constituents[i]
        borrowed_subject = xcomp and i == clause.subject
        is_xcomp_slot = i in clause.open_clausal_complements

        if (
            not borrowed_subject
            and isinstance(constituent, IndexedConstituent)
            and not is_xcomp_slot
            and (
                (i == clause.verb and self.options.process_cc_verbs)
                or (i != clause.verb and self.options.process_cc_non_verbs)
            )
        ):
            return self.rewriter.alternatives(constituent)

        if not borrowed_subject and is_xcomp_slot and isinstance(constituent, XcompConstituent):
            embedded = self.generate(constituent.clauses, xcomp=True)
            if embedded:
                return [
                    TextConstituent(" ".join(p.fields[1:]), constituent.role)
                    for p in embedded
                ]

        return [constituent]

    def _inclusion_vectors(self, flags: List[Flag]) -> List[List[bool]]:
        """Which positions each proposition includes"""
        if self.options.nary:
            return [[f != Flag.IGNORE for f in flags]]

        required = [f == Flag.REQUIRED for f in flags]
        optional_count = sum(1 for f in flags if f == Flag.OPTIONAL)
        low = min(self.options.min_optional_args, optional_count)
        high = self.options.max_optional_args

        vectors: List[List[bool]] = []

        def walk(pos: int, selected: int, prefix: List[bool]):
            if pos >= len(flags):
                if low <= selected <= high:
                    vectors.append(list(prefix))
                return
            if required[pos]:
                walk(pos + 1, selected, prefix + [True])
                return
            if flags[pos] != Flag.IGNORE:
                walk(pos + 1, selected + 1, prefix + [True])
            walk(pos + 1, selected, prefix + [False])

        walk(0, 0, [])
        return vectors

    def _build(self, clause: Clause, include: List[bool]) -> Proposition:
        fields: List[str] = []
        optional = set()

        if clause.subject > -1 and include[clause.subject]:
            fields.append(self.render(clause, clause.subject))

        if not include[clause.verb]:
            raise MalformedGraphError(f"Verb excluded from proposition: {clause.describe()}")
        fields.append(self.render(clause, clause.verb))

        verb_index = clause.verb_constituent.root_index

        def before_verb(i: int) -> bool:
            index = clause.constituents[i].root_index
            return verb_index is not None and index is not None and index < verb_index

        positions = sorted(set(
            clause.indirect_objects
            + clause.direct_objects
            + clause.open_clausal_complements
            + clause.clausal_complements
            + clause.adjectival_complements
            + clause.adverbials
            + ([clause.complement] if clause.complement >= 0 else [])
        ))
        for i in positions:
            if i in clause.adverbials and before_verb(i):
                continue
            if include[i]:
                fields.append(self.render(clause, i))

        for i in sorted(set(clause.adverbials)):
            if not before_verb(i):
                break
            if include[i]:
                fields.append(self.render(clause, i))
                if clause.flag(i, self.options) == Flag.OPTIONAL:
                    optional.add(len(fields) - 1)

        if not self.options.nary:
            optional.clear()
            if len(fields) > 3:
                fields = fields[:2] + [" ".join(fields[2:])]

        return Proposition(tuple(fields), frozenset(optional))

    def render(self, clause: Clause, index: int) -> str:
        """Text of the constituent at ``index``"""
        constituent = clause.constituents[index]
        excluded = EXCLUDE_RELATIONS_VERB if index == clause.verb else EXCLUDE_RELATIONS
        return self.render_constituent(constituent, excluded)

    def render_constituent(self, constituent: Constituent, excluded_relations=EXCLUDE_RELATIONS) -> str:
        kind = getattr(constituent, "kind", None)
        if kind == ConstituentKind.LITERAL:
            return constituent.root_text

        if kind in (ConstituentKind.GRAPH_SPAN, ConstituentKind.EMBEDDED_CLAUSE):
            subgraph = constituent.reduced_graph()
            remove_edges(subgraph, constituent.root, excluded_relations=excluded_relations)
            words = set(subgraph.descendants(constituent.root))
            for token in constituent.additional_tokens:
                words.update(subgraph.descendants(token))

            lemmatize = self.options.lemmatize
            parts = []
            if constituent.is_prepositional_phrase():
                words.discard(constituent.root)
                parts.append(constituent.root.lemma if lemmatize else constituent.root.word)
            parts.extend(t.lemma if lemmatize else t.word for t in sorted(words))
            return " ".join(parts)

        raise UnsupportedConstituentError(kind or type(constituent).__name__)
