"""
CIE Extraction Relations - Predicates and helpers over dependency edges

Family predicates (any subject, any object, any preposition, any
conjunction) follow the relation hierarchy; every other predicate is an
exact label match.
"""

from __future__ import annotations
from typing import Collection, Iterable, List, Optional, Set

from cie_core.models import DependencyEdge, DependencyGraph, GrammaticalRelation, Token

R = GrammaticalRelation


def is_wh_word(token: Token) -> bool:
    return token.tag[:1] == "W"


def is_verb_tag(token: Token) -> bool:
    return token.tag[:1] == "V"


def _is(edge: DependencyEdge, relation: GrammaticalRelation) -> bool:
    return edge.relation is relation


def _descends(edge: DependencyEdge, relation: GrammaticalRelation) -> bool:
    return relation.is_ancestor_of(edge.relation)


# Families

def is_any_subject(edge: DependencyEdge) -> bool:
    return _descends(edge, R.SUBJ)


def is_any_object(edge: DependencyEdge) -> bool:
    return _descends(edge, R.OBJ)


def is_any_prep(edge: DependencyEdge) -> bool:
    return _descends(edge, R.PREP)


def is_any_conj(edge: DependencyEdge) -> bool:
    return _descends(edge, R.CONJ)


# Exact relations

def is_nsubj(edge: DependencyEdge) -> bool:
    return _is(edge, R.NSUBJ)


def is_dobj(edge: DependencyEdge) -> bool:
    return _is(edge, R.DOBJ)


def is_iobj(edge: DependencyEdge) -> bool:
    return _is(edge, R.IOBJ)


def is_pobj(edge: DependencyEdge) -> bool:
    return _is(edge, R.POBJ)


def is_dep(edge: DependencyEdge) -> bool:
    return _is(edge, R.DEP)


def is_appos(edge: DependencyEdge) -> bool:
    return _is(edge, R.APPOS)


def is_purpcl(edge: DependencyEdge) -> bool:
    return _is(edge, R.PURPCL)


def is_xcomp(edge: DependencyEdge) -> bool:
    return _is(edge, R.XCOMP)


def is_complm(edge: DependencyEdge) -> bool:
    return _is(edge, R.COMPLM)


def is_expl(edge: DependencyEdge) -> bool:
    return _is(edge, R.EXPL)


def is_acomp(edge: DependencyEdge) -> bool:
    return _is(edge, R.ACOMP)


def is_cop(edge: DependencyEdge) -> bool:
    return _is(edge, R.COP)


def is_advcl(edge: DependencyEdge) -> bool:
    return _is(edge, R.ADVCL)


def is_rcmod(edge: DependencyEdge) -> bool:
    return _is(edge, R.RCMOD)


def is_ccomp(edge: DependencyEdge) -> bool:
    return _is(edge, R.CCOMP)


def is_advmod(edge: DependencyEdge) -> bool:
    return _is(edge, R.ADVMOD)


def is_npadvmod(edge: DependencyEdge) -> bool:
    return _is(edge, R.NPADVMOD)


def is_mark(edge: DependencyEdge) -> bool:
    return _is(edge, R.MARK)


def is_poss(edge: DependencyEdge) -> bool:
    return _is(edge, R.POSS)


def is_partmod(edge: DependencyEdge) -> bool:
    return _is(edge, R.PARTMOD)


def is_tmod(edge: DependencyEdge) -> bool:
    return _is(edge, R.TMOD)


def is_preconj(edge: DependencyEdge) -> bool:
    return _is(edge, R.PRECONJ)


def is_predet(edge: DependencyEdge) -> bool:
    return _is(edge, R.PREDET)


def is_cc(edge: DependencyEdge) -> bool:
    return _is(edge, R.CC)


def is_aux(edge: DependencyEdge) -> bool:
    return _is(edge, R.AUX)


def is_rel(edge: DependencyEdge) -> bool:
    return _is(edge, R.REL)


def is_parataxis(edge: DependencyEdge) -> bool:
    return _is(edge, R.PARATAXIS)


# Edge search

def find_first_of_relation(
    edges: Iterable[DependencyEdge],
    relation: GrammaticalRelation
) -> Optional[DependencyEdge]:
    """First edge with exactly this relation"""
    for edge in edges:
        if edge.relation is relation:
            return edge
    return None


def find_first_of_relation_or_descendant(
    edges: Iterable[DependencyEdge],
    relation: GrammaticalRelation
) -> Optional[DependencyEdge]:
    """First edge whose relation is this one or one of its kinds"""
    for edge in edges:
        if relation.is_ancestor_of(edge.relation):
            return edge
    return None


def find_descendant_relative_relation(
    graph: DependencyGraph,
    root: Token,
    relation: GrammaticalRelation,
    max_depth: int = 64
) -> Optional[DependencyEdge]:
    """
    Follow the first outgoing edge downwards until it reaches a wh-word
    attached by ``relation`` (or one of its kinds).

    Only the first child is explored at every level.
    """
    current = root
    seen = {root}
    for _ in range(max_depth):
        edges = graph.outgoing_edges(current)
        if not edges:
            return None
        edge = edges[0]
        if is_wh_word(edge.dependent) and relation.is_ancestor_of(edge.relation):
            return edge
        if edge.dependent in seen:
            return None
        seen.add(edge.dependent)
        current = edge.dependent
    return None


def get_edges(
    edges: Iterable[DependencyEdge],
    relation: GrammaticalRelation
) -> List[DependencyEdge]:
    """All edges whose relation is this one or one of its kinds"""
    return [e for e in edges if relation.is_ancestor_of(e.relation)]


def contains_relation(edges: Iterable[DependencyEdge], relation: GrammaticalRelation) -> bool:
    return find_first_of_relation(edges, relation) is not None


def contains_ancestor(relations: Iterable[GrammaticalRelation], edge: DependencyEdge) -> bool:
    return any(r.is_ancestor_of(edge.relation) for r in relations)


def exclude_dependents(
    graph: DependencyGraph,
    relations: Collection[GrammaticalRelation],
    root: Token
) -> Set[Token]:
    """Dependents of ``root`` attached by one of ``relations`` or their kinds"""
    return {
        edge.dependent for edge in graph.outgoing_edges(root)
        if contains_ancestor(relations, edge)
    }


def remove_edges(
    graph: DependencyGraph,
    root: Token,
    excluded_tokens: Collection[Token] = (),
    excluded_relations: Collection[GrammaticalRelation] = ()
):
    """
    Prune the subtree below ``root`` in place.

    Walks down from ``root``; an edge is removed when its dependent is an
    excluded token or its relation is one of the excluded relations (exact
    match). The walk does not descend below removed edges. Nothing happens
    when ``root`` itself is excluded.
    """
    if root in excluded_tokens:
        return

    to_remove: List[DependencyEdge] = []
    stack = [root]
    visited: Set[Token] = set()
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        for edge in graph.outgoing_edges(current):
            if edge.dependent in excluded_tokens or edge.relation in excluded_relations:
                to_remove.append(edge)
            else:
                stack.append(edge.dependent)

    graph.remove_edges(to_remove)


def is_descendant(graph: DependencyGraph, token: Token, ancestor: Token) -> bool:
    """True if ``token`` is reachable from ``ancestor``"""
    return token in graph.descendants(ancestor)
