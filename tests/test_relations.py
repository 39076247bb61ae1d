# tests/test_relations.py
from cie_core.models import DependencyEdge, GrammaticalRelation, Token
from cie_extraction import relations as rel

R = GrammaticalRelation

GOV = Token(1, "gov", tag="VBZ")
DEP = Token(2, "dep", tag="NN")


def edge(relation):
    return DependencyEdge(GOV, DEP, relation)


def test_family_predicates_follow_the_hierarchy():
    assert rel.is_any_subject(edge(R.NSUBJPASS))
    assert rel.is_any_subject(edge(R.CSUBJ))
    assert rel.is_any_object(edge(R.IOBJ))
    assert rel.is_any_prep(edge(R.PREP))
    assert rel.is_any_conj(edge(R.CONJ))
    assert not rel.is_any_object(edge(R.NSUBJ))


def test_exact_predicates_do_not_follow_the_hierarchy():
    assert rel.is_nsubj(edge(R.NSUBJ))
    assert not rel.is_nsubj(edge(R.NSUBJPASS))
    assert rel.is_aux(edge(R.AUX))
    assert not rel.is_aux(edge(R.COP))
    assert rel.is_advmod(edge(R.ADVMOD))
    assert not rel.is_advmod(edge(R.NEG))


def test_find_first_of_relation(simple_svo_graph):
    makes = simple_svo_graph.get_token(2)
    edges = simple_svo_graph.outgoing_edges(makes)
    assert rel.find_first_of_relation(edges, R.DOBJ).dependent.word == "products"
    assert rel.find_first_of_relation(edges, R.SUBJ) is None
    assert rel.find_first_of_relation_or_descendant(edges, R.SUBJ).dependent.word == "Bell"
    assert [e.dependent.word for e in rel.get_edges(edges, R.ARG)] == ["Bell", "products"]


def test_find_descendant_relative_relation(make_graph):
    # man whose dog barked: barked -nsubj-> dog -poss-> whose
    graph = make_graph(
        [("whose", "WP$"), ("dog", "NN"), ("barked", "VBD")],
        [("poss", 2, 1), ("nsubj", 3, 2)]
    )
    barked = graph.get_token(3)
    found = rel.find_descendant_relative_relation(graph, barked, R.POSS)
    assert found is not None
    assert found.dependent.word == "whose"


def test_exclude_dependents(copula_graph):
    company = copula_graph.get_token(4)
    excluded = rel.exclude_dependents(copula_graph, (R.SUBJ, R.COP), company)
    assert sorted(t.word for t in excluded) == ["Bell", "is"]


def test_remove_edges_prunes_excluded_subtrees(bell_products_graph):
    graph = bell_products_graph.copy()
    makes = graph.get_token(2)
    products = graph.get_token(8)
    rel.remove_edges(graph, makes, excluded_tokens={products})
    assert graph.children(makes) == [graph.get_token(1)]
    # Edges below the cut are kept
    assert graph.children(products) == [graph.get_token(3)]


def test_remove_edges_by_relation(bell_products_graph):
    graph = bell_products_graph.copy()
    electronic = graph.get_token(3)
    rel.remove_edges(graph, graph.get_token(2), excluded_relations={R.CONJ})
    assert [t.word for t in graph.children(electronic)] == ["and"]


def test_remove_edges_ignores_excluded_root(simple_svo_graph):
    graph = simple_svo_graph.copy()
    makes = graph.get_token(2)
    rel.remove_edges(graph, makes, excluded_tokens={makes})
    assert len(graph.edges()) == 2


def test_is_descendant(bell_products_graph):
    makes = bell_products_graph.get_token(2)
    building = bell_products_graph.get_token(7)
    assert rel.is_descendant(bell_products_graph, building, makes)
    assert not rel.is_descendant(bell_products_graph, makes, building)
