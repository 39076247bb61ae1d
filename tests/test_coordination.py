# tests/test_coordination.py
from cie_extraction.coordination import (
    CoordinationRewriter,
    conjunction_binds,
    find_coordinated_heads,
    shares_dependent,
)
from cie_extraction.extractor import detect_clauses
from cie_extraction.proposition_generator import PropositionGenerator


def rendered(constituents):
    generator = PropositionGenerator()
    return [generator.render_constituent(c) for c in constituents]


def test_shares_dependent(verb_coordination_graph):
    makes, conj, sells, products = (verb_coordination_graph.get_token(i) for i in (2, 3, 4, 5))
    assert shares_dependent(sells, makes, products)
    assert not shares_dependent(sells, makes, conj)


def test_conjunction_binds(bell_products_graph):
    electronic, computer, conj, building = (bell_products_graph.get_token(i) for i in (3, 5, 6, 7))
    assert conjunction_binds(bell_products_graph, electronic, building, conj)
    assert not conjunction_binds(bell_products_graph, electronic, computer, conj)


def test_find_coordinated_heads(verb_coordination_graph, options):
    graph = verb_coordination_graph.copy()
    makes = graph.get_token(2)
    heads, to_remove = find_coordinated_heads(graph, makes, options)

    assert [h.word for h in heads] == ["makes", "sells"]
    assert sorted(e.relation.value for e in to_remove) == ["cc", "conj"]
    sells = graph.get_token(4)
    assert [t.word for t in graph.children(sells)] == ["Bell", "products"]


def test_find_coordinated_heads_without_coordination(simple_svo_graph, options):
    graph = simple_svo_graph.copy()
    heads, to_remove = find_coordinated_heads(graph, graph.get_token(2), options)
    assert [h.word for h in heads] == ["makes"]
    assert to_remove == []
    assert graph.edges() == simple_svo_graph.edges()


def test_alternatives_split_conjuncts(bell_products_graph):
    clause = detect_clauses(bell_products_graph)[0]
    obj = clause.constituents[clause.direct_objects[0]]
    alternatives = CoordinationRewriter().alternatives(obj)
    assert rendered(alternatives) == ["electronic products", "computer products", "building products"]


def test_alternatives_leave_the_input_untouched(bell_products_graph):
    clause = detect_clauses(bell_products_graph)[0]
    obj = clause.constituents[clause.direct_objects[0]]
    excluded = set(obj.excluded_tokens)
    edges = obj.graph.edges()
    CoordinationRewriter().alternatives(obj)
    assert obj.excluded_tokens == excluded
    assert obj.graph.edges() == edges


def test_single_alternative_without_conjunction(simple_svo_graph):
    clause = detect_clauses(simple_svo_graph)[0]
    obj = clause.constituents[clause.direct_objects[0]]
    assert rendered(CoordinationRewriter().alternatives(obj)) == ["products"]


def test_ampersand_is_not_split(ampersand_graph):
    clause = detect_clauses(ampersand_graph)[0]
    obj = clause.constituents[clause.direct_objects[0]]
    assert rendered(CoordinationRewriter().alternatives(obj)) == ["Procter & Gamble"]


def test_between_is_not_split(between_graph):
    clause = detect_clauses(between_graph)[0]
    adverbial = clause.constituents[clause.adverbials[0]]
    assert len(CoordinationRewriter().alternatives(adverbial)) == 1


def test_prepositional_object_is_split(in_coordination_graph):
    clause = detect_clauses(in_coordination_graph)[0]
    adverbial = clause.constituents[clause.adverbials[0]]
    assert rendered(CoordinationRewriter().alternatives(adverbial)) == ["in Boston", "in Cambridge"]
