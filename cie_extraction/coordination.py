"""
CIE Extraction Coordination - Splitting coordinated heads and constituents

Two entry points:

- find_coordinated_heads: used by clause detection to split a predicate
  coordinated with other verbs ("Bell makes and sells products") into
  one head per clause, rewriting the graph so each head owns its shared
  dependents.
- CoordinationRewriter.alternatives: used by proposition generation to
  turn one constituent into one alternative per conjunct ("electronic,
  computer and building products").

Parse-tree adjacency is approximated on the dependency graph by linear
token positions: a dependent is shared between two conjuncts unless it
sits strictly between them, and a conjunction binds two conjuncts when it
lies between them and the second conjunct starts at most three tokens
after it.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from cie_core.config_runtime import ExtractionOptions
from cie_core.exceptions import RecursionLimitError
from cie_core.models import DependencyEdge, DependencyGraph, GrammaticalRelation, Token
from cie_extraction.constituents import Constituent, IndexedConstituent, Role
from cie_extraction.relations import (
    find_first_of_relation,
    find_first_of_relation_or_descendant,
    get_edges,
    is_any_conj,
    is_any_subject,
    is_appos,
    is_cc,
    is_dep,
    is_parataxis,
    is_preconj,
    is_predet,
    is_rcmod,
    is_verb_tag,
)

logger = logging.getLogger(__name__)

R = GrammaticalRelation

MAX_CONJUNCTION_DISTANCE = 3


def shares_dependent(conjunct: Token, head: Token, child: Token) -> bool:
    """True if ``child`` of ``head`` also belongs to the coordinated ``conjunct``"""
    low, high = sorted((head.index, conjunct.index))
    return not (low < child.index < high)


def conjunction_binds(
    graph: DependencyGraph,
    first: Token,
    second: Token,
    conjunction: Token
) -> bool:
    """True if ``conjunction`` joins ``first`` and ``second`` rather than an outer list"""
    if not first.index < conjunction.index < second.index:
        return False
    following = [t.index for t in graph.descendants(second) if t.index > conjunction.index]
    second_start = min(following) if following else second.index
    return second_start - conjunction.index <= MAX_CONJUNCTION_DISTANCE


def _shares_all(out_edges: List[DependencyEdge], head: Token, conjunct: Token) -> bool:
    for edge in out_edges:
        if is_any_subject(edge) or edge.dependent == conjunct:
            continue
        if not shares_dependent(conjunct, head, edge.dependent):
            return False
    return True


def _rewrite_graph(graph: DependencyGraph, heads: List[Token]):
    """Give every later head the parents and shared children of the earlier ones"""
    for i, head in enumerate(heads):
        for other in heads[i + 1:]:
            for edge in graph.incoming_edges(head):
                if edge.governor in graph.parents(other):
                    continue
                graph.add_edge(edge.governor, other, edge.relation)

            for edge in graph.outgoing_edges(head):
                child = edge.dependent
                if child in graph.children(other):
                    continue
                if not is_any_conj(edge) and not is_cc(edge) and shares_dependent(other, head, child):
                    graph.add_edge(other, child, edge.relation)


def find_coordinated_heads(
    graph: DependencyGraph,
    root: Token,
    options: ExtractionOptions
) -> Tuple[List[Token], List[DependencyEdge]]:
    """
    Heads of the clauses rooted at ``root`` and its coordinated predicates.

    Rewrites ``graph`` in place when more than one head is found. Returns
    the heads (``root`` first) and the coordination edges the caller must
    remove to disconnect them.
    """
    heads = [root]
    to_remove: List[DependencyEdge] = []
    out_edges = graph.outgoing_edges(root)

    for edge in out_edges:
        if edge.relation is not R.CONJ:
            continue

        conjunct = edge.dependent
        conjunct_edges = graph.outgoing_edges(conjunct)
        cc_verbs = is_verb_tag(conjunct) or is_verb_tag(root)
        cc_copula = find_first_of_relation_or_descendant(conjunct_edges, R.COP) is not None
        main_clause = (
            find_first_of_relation_or_descendant(conjunct_edges, R.SUBJ) is not None
            or find_first_of_relation_or_descendant(conjunct_edges, R.EXPL) is not None
        )
        not_process = (
            not options.process_cc_verbs
            and not conjunct_edges
            and _shares_all(out_edges, root, conjunct)
        )

        if (cc_verbs or cc_copula) and not main_clause and not not_process:
            heads.append(conjunct)

        if ((cc_verbs or cc_copula) and not not_process) or main_clause:
            to_remove.append(edge)
            if options.process_cc_verbs or not not_process:
                for cc in get_edges(out_edges, R.CC):
                    if cc.dependent.index > conjunct.index:
                        continue
                    if conjunction_binds(graph, root, conjunct, cc.dependent):
                        to_remove.append(cc)
                        break

    if len(heads) > 1:
        logger.debug(f"Coordinated heads of {root}: {', '.join(str(h) for h in heads)}")
        _rewrite_graph(graph, heads)

    return heads, to_remove


class CoordinationRewriter:
    """Produces one alternative constituent per conjunct reachable from a constituent"""

    def __init__(self, options: Optional[ExtractionOptions] = None):
        self.options = options or ExtractionOptions()

    def alternatives(self, constituent: IndexedConstituent) -> List[Constituent]:
        """
        The constituent itself followed by one alternative per conjunct.

        Works on a private reduced copy; the input constituent and its graph
        are left untouched.
        """
        copy = constituent.clone()
        copy.graph = copy.reduced_graph()
        result: List[Constituent] = [copy]
        self._generate(copy.graph, copy, copy.root, result, True, 0)
        return result

    def _generate(
        self,
        graph: DependencyGraph,
        constituent: IndexedConstituent,
        root: Token,
        result: List[Constituent],
        first_level: bool,
        depth: int
    ):
        if depth > self.options.max_recursion_depth:
            raise RecursionLimitError(depth, token=root)

        out_edges = graph.outgoing_edges(root)
        cc_edges = get_edges(out_edges, R.CC)

        process = True
        quantmod = find_first_of_relation(out_edges, R.QUANTMOD)
        if quantmod is not None and quantmod.dependent.lemma == "between":
            process = False
        pobj = find_first_of_relation(graph.incoming_edges(root), R.POBJ)
        if pobj is not None and pobj.governor.lemma == "between":
            process = False

        predet = None
        for sibling in graph.siblings(root):
            incoming = graph.incoming_edges(sibling)
            predet = find_first_of_relation(incoming, R.PREDET) or find_first_of_relation(incoming, R.DET)
            if predet is not None:
                break

        for edge in out_edges:
            if is_parataxis(edge) or is_rcmod(edge) or is_appos(edge):
                continue
            if is_dep(edge) and constituent.role == Role.VERB:
                continue

            if is_any_conj(edge) and process:
                if any(
                    cc.dependent.lemma == "&" and conjunction_binds(graph, root, edge.dependent, cc.dependent)
                    for cc in cc_edges
                ):
                    continue
                self._split(graph, constituent, root, edge, out_edges, predet, result, first_level, depth)

            elif (is_cc(edge) or is_preconj(edge)) and process and edge.dependent.lemma != "&":
                graph.remove_edge(edge)

            elif not is_predet(edge) and edge.dependent not in constituent.excluded_tokens:
                self._generate(graph, constituent, edge.dependent, result, False, depth + 1)

    def _split(
        self,
        graph: DependencyGraph,
        constituent: IndexedConstituent,
        root: Token,
        edge: DependencyEdge,
        out_edges: List[DependencyEdge],
        predet: Optional[DependencyEdge],
        result: List[Constituent],
        first_level: bool,
        depth: int
    ):
        """Materialize the alternative rooted at the conjunct of ``edge``"""
        new_root = edge.dependent
        new_graph = graph.copy()

        if predet is not None and predet.dependent.lemma == "both":
            constituent.excluded_tokens.add(predet.dependent)

        new_constituent = constituent.with_graph(new_graph, new_root if first_level else None)
        result.append(new_constituent)

        for parent_edge in new_graph.incoming_edges(root):
            new_graph.add_edge(parent_edge.governor, new_root, parent_edge.relation)

        for child_edge in out_edges:
            child = child_edge.dependent
            if is_predet(child_edge) and child.lemma == "both":
                graph.remove_edge(child_edge)
            elif (
                not is_any_conj(child_edge)
                and not is_cc(child_edge)
                and not is_preconj(child_edge)
                and shares_dependent(new_root, root, child)
            ):
                new_graph.add_edge(new_root, child, child_edge.relation)

        new_graph.remove_edges(new_graph.incoming_edges(root))
        graph.remove_edge(edge)

        self._generate(
            new_graph,
            new_constituent if first_level else constituent,
            new_root,
            result,
            False,
            depth + 1
        )
