"""
CIE Extraction Clause Detector - Discovering clauses in a dependency graph

A single ordered pass over the edges of the sentence graph triggers clause
construction:

- subject edges build a base clause around the predicate head
- appositions build "X is Y" clauses
- possessives build "X has Y" clauses
- participial modifiers build "X be <participle> ..." clauses

Each base clause carves its constituents out of a private copy of the
sentence graph; the sentence graph itself is never modified.
"""

from __future__ import annotations
import logging
from collections import deque
from typing import List, Optional, Set, Tuple

from cie_core.config_runtime import ExtractionOptions
from cie_core.exceptions import MalformedGraphError, RecursionLimitError
from cie_core.models import DependencyEdge, DependencyGraph, GrammaticalRelation, Token
from cie_extraction.clause import Clause, ClauseType
from cie_extraction.constituents import (
    Constituent,
    IndexedConstituent,
    Role,
    TextConstituent,
    XcompConstituent,
)
from cie_extraction.coordination import find_coordinated_heads
from cie_extraction import relations as rel

logger = logging.getLogger(__name__)

R = GrammaticalRelation

# Dependents that do not belong to a copular complement
EXCLUDE_RELATIONS_COMPLEMENT = (R.AUX, R.AUXPASS, R.SUBJ, R.COP, R.ADVMOD)

# Dependents of a complement that belong to the copula instead
INCLUDE_RELATIONS_VERB = (R.AUX, R.AUXPASS, R.NEG)


def exclude_siblings(clause: Clause):
    """Each graph constituent excludes the roots of all other graph constituents"""
    indexed = [c for c in clause.constituents if isinstance(c, IndexedConstituent)]
    for constituent in indexed:
        for other in indexed:
            if other is constituent:
                continue
            constituent.excluded_tokens.add(other.root)
            constituent.excluded_tokens.update(other.additional_tokens)


def drop_shared_xcomp_subjects(clause: Clause):
    """
    An embedded subject that is also an argument of the outer clause
    ("Bell asked John to leave") is rendered by the outer argument only.
    """
    outer_roots = {
        c.root for c in clause.constituents
        if isinstance(c, IndexedConstituent) and not isinstance(c, XcompConstituent)
    }
    for i in clause.open_clausal_complements:
        xcomp = clause.constituents[i]
        if not isinstance(xcomp, XcompConstituent):
            continue
        for nested in xcomp.clauses:
            verb = nested.verb_constituent
            if isinstance(verb, IndexedConstituent):
                shared = verb.additional_tokens & outer_roots
                verb.additional_tokens -= shared
                verb.excluded_tokens |= shared


def _is_adverbial_edge(edge: DependencyEdge) -> bool:
    return (
        rel.is_any_prep(edge)
        or rel.is_pobj(edge)
        or rel.is_tmod(edge)
        or rel.is_advcl(edge)
        or rel.is_npadvmod(edge)
        or rel.is_purpcl(edge)
        or rel.is_advmod(edge)
        or rel.is_partmod(edge)
    )


class _DetectionRun:
    """State of one detection pass over one sentence graph"""

    def __init__(self, graph: DependencyGraph, options: ExtractionOptions):
        self.graph = graph
        self.options = options
        self.clauses: List[Clause] = []
        self.roots: List[Optional[Token]] = []

    def run(self) -> List[Clause]:
        options = self.options
        for edge in self.graph.edges():
            if rel.is_any_subject(edge):
                self.add_subject_clause(self.roots, self.clauses, edge.dependent, edge.governor, False, 0)
            elif options.process_appositions and rel.is_appos(edge):
                self.add_apposition_clause(edge.governor, edge.dependent)
                self.roots.append(None)
            elif options.process_possessives and rel.is_poss(edge):
                self.add_possessive_clause(edge.dependent, edge.governor)
                self.roots.append(None)
            elif options.process_partmods and rel.is_partmod(edge):
                self.add_subject_clause(self.roots, self.clauses, edge.governor, edge.dependent, True, 0)

        for i, clause in enumerate(self.clauses):
            root = self.roots[i]
            if root is not None:
                clause.parent = self._parent_of(i, root)
            exclude_siblings(clause)

        return self.clauses

    def _parent_of(self, position: int, head: Token) -> Optional[int]:
        """Position of the clause headed by the nearest ancestor of ``head``"""
        heads = {}
        for j, root in enumerate(self.roots):
            if root is not None and j != position:
                heads.setdefault(root, j)

        visited: Set[Token] = {head}
        queue = deque(self.graph.parents(head))
        while queue:
            token = queue.popleft()
            if token in visited:
                continue
            visited.add(token)
            if token in heads:
                return heads[token]
            queue.extend(self.graph.parents(token))
        return None

    def _span(
        self,
        graph: DependencyGraph,
        root: Token,
        role: Role,
        additional: Optional[Set[Token]] = None,
        excluded: Optional[Set[Token]] = None
    ) -> IndexedConstituent:
        return IndexedConstituent(graph, root, role, additional, excluded, sentence_graph=self.graph)

    def _relative_constituent(self, graph: DependencyGraph, root: Token, role: Role) -> IndexedConstituent:
        """Span at the antecedent of a relative clause, stripped of its copula chain"""
        if rel.contains_relation(graph.outgoing_edges(root), R.COP):
            excluded = rel.exclude_dependents(graph, EXCLUDE_RELATIONS_COMPLEMENT, root)
            return self._span(graph, root, role, excluded=excluded)
        return self._span(graph, root, role)

    def _possessive_relative_constituent(
        self,
        graph: DependencyGraph,
        poss: DependencyEdge,
        rcmod: DependencyEdge,
        governor: Token,
        role: Role
    ) -> IndexedConstituent:
        """Span for "whose X": the antecedent replaces the possessive pronoun"""
        new_graph = graph.copy()
        new_graph.add_edge(poss.governor, rcmod.governor, R.POSS)
        excluded = rel.exclude_dependents(new_graph, EXCLUDE_RELATIONS_COMPLEMENT, rcmod.governor)
        new_graph.remove_edge(poss)
        new_graph.remove_edge(rcmod)
        return self._span(new_graph, governor, role, excluded=excluded)

    def _argument(
        self,
        graph: DependencyGraph,
        token: Token,
        role: Role,
        rcmod: Optional[DependencyEdge],
        poss: Optional[DependencyEdge],
        const_root: Constituent
    ) -> Tuple[IndexedConstituent, bool]:
        """Argument span, resolving relative pronouns; the flag tells if ``rcmod`` was used"""
        if rcmod is not None and rel.is_wh_word(token):
            if isinstance(const_root, IndexedConstituent):
                const_root.excluded_tokens.add(token)
            return self._relative_constituent(graph, rcmod.governor, role), True
        if rcmod is not None and poss is not None and poss.governor == token:
            return self._possessive_relative_constituent(graph, poss, rcmod, token, role), True
        return self._span(graph, token, role), False

    def add_subject_clause(
        self,
        roots: List[Optional[Token]],
        clauses: List[Clause],
        subject: Token,
        clause_root: Token,
        partmod: bool,
        depth: int
    ):
        """
        Build one clause per coordinated head of ``clause_root``.

        ``roots`` and ``clauses`` are the lists the new clauses are appended
        to: the sentence lists at top level, private lists inside an open
        clausal complement.
        """
        if depth > self.options.max_recursion_depth:
            raise RecursionLimitError(depth, token=clause_root)

        options = self.options
        graph = self.graph.copy()
        heads, to_remove = find_coordinated_heads(graph, clause_root, options)
        graph.remove_edges(to_remove)

        for head in heads:
            out_edges = graph.outgoing_edges(head)
            in_edges = graph.incoming_edges(head)
            clause = Clause()

            cop = rel.find_first_of_relation(out_edges, R.COP)
            if cop is not None:
                exclude = rel.exclude_dependents(graph, EXCLUDE_RELATIONS_COMPLEMENT, head)
                include = rel.exclude_dependents(graph, INCLUDE_RELATIONS_VERB, head)
            else:
                exclude = set()
                include = set()

            rcmod = rel.find_first_of_relation(in_edges, R.RCMOD)
            poss = None
            if rcmod is not None:
                poss = rel.find_descendant_relative_relation(graph, head, R.POSS)

            # Verb and complement
            if cop is not None:
                const_root: Constituent = self._span(graph, head, Role.COMPLEMENT, excluded=exclude)
                clause.complement = clause.add(const_root)
                if partmod:
                    verb: Constituent = TextConstituent(f"be {clause_root.word}", Role.VERB)
                else:
                    verb = self._span(graph, cop.dependent, Role.VERB, additional=include)
                clause.verb = clause.add(verb)
            else:
                if partmod:
                    const_root = TextConstituent(f"be {clause_root.word}", Role.VERB)
                else:
                    const_root = self._span(graph, head, Role.VERB, excluded=exclude)
                clause.verb = clause.add(const_root)

            # Subject
            if rcmod is not None and rel.is_wh_word(subject):
                if isinstance(const_root, IndexedConstituent):
                    const_root.excluded_tokens.add(subject)
                subject_const = self._relative_constituent(graph, rcmod.governor, Role.SUBJECT)
                rcmod = None
            elif rcmod is not None and poss is not None and poss.governor == subject:
                subject_const = self._possessive_relative_constituent(graph, poss, rcmod, subject, Role.SUBJECT)
                rcmod = None
            elif partmod and rel.is_verb_tag(subject):
                own = rel.find_first_of_relation_or_descendant(self.graph.outgoing_edges(subject), R.SUBJ)
                subject_const = self._span(graph, own.dependent if own else subject, Role.SUBJECT)
            else:
                subject_const = self._span(graph, subject, Role.SUBJECT)
            clause.subject = clause.add(subject_const)

            if partmod:
                # "He is the man crying the whole day"
                subject_const.excluded_tokens.add(clause_root)
                subject_edges = self.graph.outgoing_edges(subject)
                copula = rel.find_first_of_relation_or_descendant(subject_edges, R.COP)
                if copula is not None:
                    subject_const.excluded_tokens.add(copula.dependent)
                    own = rel.find_first_of_relation_or_descendant(subject_edges, R.SUBJ)
                    if own is not None:
                        subject_const.excluded_tokens.add(own.dependent)

            # Predicate constituents
            for edge in out_edges:
                dependent = edge.dependent

                if rel.is_complm(edge) or rel.is_mark(edge):
                    if isinstance(const_root, IndexedConstituent):
                        const_root.excluded_tokens.add(dependent)

                elif rel.is_iobj(edge):
                    constituent, used = self._argument(
                        graph, dependent, Role.INDIRECT_OBJECT, rcmod, poss, const_root
                    )
                    clause.indirect_objects.append(clause.add(constituent))
                    if used:
                        rcmod = None

                elif rel.is_dobj(edge):
                    constituent, used = self._argument(
                        graph, dependent, Role.DIRECT_OBJECT, rcmod, poss, const_root
                    )
                    clause.direct_objects.append(clause.add(constituent))
                    if used:
                        rcmod = None

                elif rel.is_ccomp(edge):
                    constituent = self._span(graph, dependent, Role.CLAUSAL_COMPLEMENT)
                    clause.clausal_complements.append(clause.add(constituent))

                elif rel.is_xcomp(edge):
                    clause.open_clausal_complements.append(
                        clause.add(self._xcomp_constituent(graph, subject, dependent, depth))
                    )

                elif rel.is_acomp(edge):
                    constituent = self._span(graph, dependent, Role.ADJECTIVAL_COMPLEMENT)
                    clause.adjectival_complements.append(clause.add(constituent))

                elif _is_adverbial_edge(edge):
                    constituent = self._span(graph, dependent, Role.ADVERBIAL)
                    clause.adverbials.append(clause.add(constituent))

                elif rel.is_rel(edge):
                    # "I saw the house in which I grew"
                    self._process_rel(graph, dependent, rcmod, clause)
                    rcmod = None

                elif rel.is_expl(edge):
                    clause.clause_type = ClauseType.EXISTENTIAL

            if rcmod is not None:
                self._attach_zero_relative(graph, rcmod, out_edges, clause)
            drop_shared_xcomp_subjects(clause)

            parataxis = rel.find_first_of_relation(in_edges, R.PARATAXIS)
            if parataxis is not None and len(clause.constituents) < 3:
                # "My dog, John said, is great"
                self.add_parataxis_clause(parataxis.governor, parataxis.dependent)
                continue

            roots.append(head)
            if partmod:
                clause.clause_type = ClauseType.SVA
            else:
                clause.detect_type(options)
            clauses.append(clause)
            logger.debug(f"Detected clause {clause.describe()}")

    def _xcomp_constituent(
        self,
        graph: DependencyGraph,
        subject: Token,
        xcomp_root: Token,
        depth: int
    ) -> XcompConstituent:
        """Embedded clauses of an open clausal complement, sharing the outer subject"""
        own = rel.find_first_of_relation_or_descendant(graph.outgoing_edges(xcomp_root), R.SUBJ)
        xcomp_subject = own.dependent if own else None

        nested_roots: List[Optional[Token]] = []
        nested: List[Clause] = []
        self.add_subject_clause(nested_roots, nested, subject, xcomp_root, False, depth + 1)

        for clause in nested:
            verb = clause.verb_constituent
            if xcomp_subject is not None and isinstance(verb, IndexedConstituent):
                verb.additional_tokens.add(xcomp_subject)
            exclude_siblings(clause)

        return XcompConstituent(graph, xcomp_root, nested, sentence_graph=self.graph)

    def _process_rel(
        self,
        graph: DependencyGraph,
        dependent: Token,
        rcmod: Optional[DependencyEdge],
        clause: Clause
    ):
        """Turn a preposition governing a relative pronoun into an adverbial about the antecedent"""
        if rcmod is None:
            return

        new_graph = graph.copy()
        out_edges = new_graph.outgoing_edges(dependent)
        pobj = rel.find_first_of_relation(out_edges, R.POBJ)
        poss_pobj = None
        if pobj is not None and not rel.is_wh_word(pobj.dependent):
            poss_pobj = rel.find_first_of_relation(out_edges, R.POSS)

        if pobj is not None and rel.is_wh_word(pobj.dependent):
            new_graph.add_edge(dependent, rcmod.governor, R.POBJ)
            new_graph.remove_edge(pobj)
        elif pobj is not None and poss_pobj is not None:
            new_graph.add_edge(poss_pobj.governor, rcmod.governor, R.POSS)
            new_graph.remove_edge(poss_pobj)
        else:
            return

        adverbial = self._relative_constituent(new_graph, rcmod.governor, Role.ADVERBIAL)
        adverbial.root = dependent
        clause.adverbials.append(clause.add(adverbial))
        clause.relative_adverbial = True

    def _attach_zero_relative(
        self,
        graph: DependencyGraph,
        rcmod: DependencyEdge,
        out_edges: List[DependencyEdge],
        clause: Clause
    ):
        """
        Place the antecedent of a relative clause without a relative pronoun
        ("the house I grew up in", "the house I like", "the man I gave the book").
        """
        candidate = None
        for constituent in clause.constituents:
            if (
                isinstance(constituent, IndexedConstituent)
                and constituent.root.tag == "IN"
                and not constituent.graph.has_children(constituent.root)
            ):
                candidate = constituent
                break

        if candidate is not None:
            new_graph = candidate.graph.copy()
            relative = self._relative_constituent(new_graph, rcmod.governor, Role.ADVERBIAL)
            new_graph.add_edge(candidate.root, rcmod.governor, R.POBJ)
            candidate.excluded_tokens.update(relative.excluded_tokens)
            candidate.graph = new_graph
        elif rel.find_first_of_relation(out_edges, R.DOBJ) is None:
            constituent = self._relative_constituent(graph, rcmod.governor, Role.DIRECT_OBJECT)
            clause.direct_objects.append(clause.add(constituent))
        elif rel.find_first_of_relation(out_edges, R.IOBJ) is None:
            constituent = self._relative_constituent(graph, rcmod.governor, Role.INDIRECT_OBJECT)
            clause.indirect_objects.append(clause.add(constituent))

    def add_apposition_clause(self, subject: Token, apposition: Token):
        """"Sam, my brother" becomes (Sam, is, my brother)"""
        clause = Clause()
        clause.subject = clause.add(self._span(self.graph, subject, Role.SUBJECT))
        clause.verb = clause.add(TextConstituent(self.options.apposition_verb, Role.VERB))
        clause.complement = clause.add(self._span(self.graph, apposition, Role.COMPLEMENT))
        clause.clause_type = ClauseType.SVC
        self.clauses.append(clause)
        logger.debug(f"Detected apposition clause {clause.describe()}")

    def add_possessive_clause(self, possessor: Token, possessed: Token):
        """"Bill's clothes" becomes (Bill, has, clothes)"""
        graph = self.graph.copy()
        exclude_subject: Set[Token] = set()
        exclude_object: Set[Token] = {possessor}

        for edge in graph.outgoing_edges(possessed):
            if (
                rel.is_advcl(edge)
                or rel.is_advmod(edge)
                or rel.is_any_object(edge)
                or rel.is_any_subject(edge)
                or rel.is_aux(edge)
                or rel.is_cop(edge)
                or rel.is_tmod(edge)
                or (rel.is_any_conj(edge) and self.options.process_cc_non_verbs)
            ):
                exclude_object.add(edge.dependent)

        rcmod = None
        if rel.is_wh_word(possessor):
            # "I saw the man in whose wife I trust"
            root = graph.parent(possessed)
            if root is None:
                raise MalformedGraphError("Relative possessive without a governor", token=possessed)
            if root.tag == "IN":
                root = graph.parent(root)
                if root is None:
                    raise MalformedGraphError("Relative possessive without a clause head", token=possessed)
            rcmod = rel.find_first_of_relation(graph.incoming_edges(root), R.RCMOD)
        else:
            marker = rel.find_first_of_relation(graph.outgoing_edges(possessor), R.POSSESSIVE)
            if marker is not None:
                exclude_subject.add(marker.dependent)

        clause = Clause()
        if rcmod is not None:
            subject = self._relative_constituent(graph, rcmod.governor, Role.SUBJECT)
            subject.excluded_tokens.update(exclude_subject)
        else:
            subject = self._span(graph, possessor, Role.SUBJECT, excluded=exclude_subject)
        clause.subject = clause.add(subject)
        clause.verb = clause.add(TextConstituent(self.options.possessive_verb, Role.VERB))
        clause.direct_objects.append(
            clause.add(self._span(graph, possessed, Role.DIRECT_OBJECT, excluded=exclude_object))
        )
        clause.clause_type = ClauseType.SVO
        self.clauses.append(clause)
        logger.debug(f"Detected possessive clause {clause.describe()}")

    def add_parataxis_clause(self, governor: Token, dependent: Token):
        """"My dog, John said, is great" becomes (John, said, My dog is great)"""
        subject = rel.find_first_of_relation_or_descendant(self.graph.outgoing_edges(dependent), R.SUBJ)
        if subject is None:
            return

        clause = Clause()
        clause.subject = clause.add(self._span(self.graph, subject.dependent, Role.SUBJECT))
        clause.verb = clause.add(self._span(self.graph, dependent, Role.VERB))
        clause.direct_objects.append(
            clause.add(self._span(self.graph, governor, Role.DIRECT_OBJECT, excluded={dependent}))
        )
        clause.clause_type = ClauseType.SVO
        self.clauses.append(clause)
        self.roots.append(None)
        logger.debug(f"Detected parataxis clause {clause.describe()}")


class ClauseDetector:
    """
    Detects the clauses of a sentence.

    Example:
        detector = ClauseDetector(ExtractionOptions(process_appositions=False))
        for clause in detector.detect(graph):
            print(clause.describe())
    """

    def __init__(self, options: Optional[ExtractionOptions] = None):
        self.options = options or ExtractionOptions()

    def detect(self, graph: DependencyGraph) -> List[Clause]:
        """Detect clauses; the graph is not modified"""
        clauses = _DetectionRun(graph, self.options).run()
        logger.debug(f"Detected {len(clauses)} clause(s)")
        return clauses
