# tests/test_clause_detector.py
import pytest

from cie_core.config_runtime import ExtractionOptions
from cie_core.exceptions import MalformedGraphError, RecursionLimitError
from cie_extraction.clause import ClauseType
from cie_extraction.clause_detector import ClauseDetector
from cie_extraction.constituents import Flag, XcompConstituent
from cie_extraction.extractor import detect_clauses


def test_simple_clause(simple_svo_graph):
    clauses = detect_clauses(simple_svo_graph)
    assert len(clauses) == 1
    assert clauses[0].clause_type == ClauseType.SVO
    assert clauses[0].describe() == "SVO (V: makes@2, S: Bell@1, O: products@3)"
    assert clauses[0].parent is None


def test_coordinated_object_stays_one_clause(bell_products_graph):
    clauses = detect_clauses(bell_products_graph)
    assert [c.describe() for c in clauses] == ["SVO (V: makes@2, S: Bell@1, O: products@8)"]


def test_copula(copula_graph):
    clauses = detect_clauses(copula_graph)
    assert [c.describe() for c in clauses] == ["SVC (C: company@4, V: is@2, S: Bell@1)"]


def test_xcomp_clauses_are_embedded(xcomp_graph):
    clauses = detect_clauses(xcomp_graph)
    assert len(clauses) == 1
    outer = clauses[0]
    assert outer.clause_type == ClauseType.SVO
    xcomp = outer.constituents[outer.open_clausal_complements[0]]
    assert isinstance(xcomp, XcompConstituent)
    assert [c.clause_type for c in xcomp.clauses] == [ClauseType.SV]


def test_recursion_limit(nested_xcomp_graph):
    assert len(detect_clauses(nested_xcomp_graph)) == 1
    detector = ClauseDetector(ExtractionOptions(max_recursion_depth=1))
    with pytest.raises(RecursionLimitError):
        detector.detect(nested_xcomp_graph)


def test_apposition(apposition_graph):
    clauses = detect_clauses(apposition_graph)
    assert [c.clause_type for c in clauses] == [ClauseType.SVC, ClauseType.SV]
    assert clauses[0].verb_constituent.root_text == "is"


def test_appositions_can_be_disabled(apposition_graph):
    clauses = detect_clauses(apposition_graph, ExtractionOptions(process_appositions=False))
    assert [c.clause_type for c in clauses] == [ClauseType.SV]


def test_possessive(possessive_graph):
    clauses = detect_clauses(possessive_graph)
    assert [c.clause_type for c in clauses] == [ClauseType.SVO, ClauseType.SVC]
    assert clauses[0].verb_constituent.root_text == "has"


def test_parataxis(parataxis_graph):
    clauses = detect_clauses(parataxis_graph)
    assert [c.clause_type for c in clauses] == [ClauseType.SVO, ClauseType.SVC]
    assert clauses[0].describe() == "SVO (S: John@3, V: said@4, O: great@6)"


def test_relative_clause_links_to_its_parent(relative_graph):
    clauses = detect_clauses(relative_graph)
    assert len(clauses) == 2
    relative, main = clauses
    assert relative.constituents[relative.subject].root_text == "Bell"
    assert relative.parent == 1
    assert main.parent is None


def test_coordinated_verbs_give_one_clause_each(verb_coordination_graph):
    clauses = detect_clauses(verb_coordination_graph)
    assert [c.describe() for c in clauses] == [
        "SVO (V: makes@2, S: Bell@1, O: products@5)",
        "SVO (V: sells@4, S: Bell@1, O: products@5)",
    ]
    assert clauses[0].parent is None
    assert clauses[1].parent == 0


def test_prepositional_adverbial_is_required_for_complex_transitive(between_graph, options):
    clause = detect_clauses(between_graph)[0]
    assert clause.clause_type == ClauseType.SVA
    assert clause.flag(clause.adverbials[0], options) == Flag.REQUIRED


def test_pre_verb_adverbial_is_optional(pre_verb_adverbial_graph, options):
    clause = detect_clauses(pre_verb_adverbial_graph)[0]
    assert clause.clause_type == ClauseType.SV
    assert clause.constituents[clause.adverbials[0]].root_index == 1
    assert clause.flag(clause.adverbials[0], options) == Flag.OPTIONAL


def test_siblings_exclude_each_other(simple_svo_graph):
    clause = detect_clauses(simple_svo_graph)[0]
    verb = clause.verb_constituent
    assert {t.word for t in verb.excluded_tokens} == {"Bell", "products"}


def test_broken_relative_possessive(broken_relative_possessive_graph):
    with pytest.raises(MalformedGraphError):
        detect_clauses(broken_relative_possessive_graph)


@pytest.mark.parametrize("fixture", [
    "bell_products_graph",
    "verb_coordination_graph",
    "relative_graph",
    "possessive_graph",
    "parataxis_graph",
    "nested_xcomp_graph",
])
def test_detection_leaves_the_graph_untouched(fixture, request):
    graph = request.getfixturevalue(fixture)
    before = [str(e) for e in graph.edges()]
    detect_clauses(graph)
    assert [str(e) for e in graph.edges()] == before


def test_empty_graph(make_graph):
    assert detect_clauses(make_graph([("Hello", "UH")], [])) == []


def test_participial_modifier_clause(partmod_graph, options):
    clauses = detect_clauses(partmod_graph)
    assert len(clauses) == 2
    main, partmod = clauses
    assert main.clause_type == ClauseType.SVC
    assert partmod.clause_type == ClauseType.SVA
    assert partmod.describe(options) == 'SVA (V: "be crying", S: man@4, A!: day@8)'
    assert partmod.parent == 0

    subject = partmod.constituents[partmod.subject]
    assert {t.word for t in subject.excluded_tokens} >= {"crying", "is", "He"}


def test_participial_modifiers_can_be_disabled(partmod_graph):
    clauses = detect_clauses(partmod_graph, ExtractionOptions(process_partmods=False))
    assert [c.clause_type for c in clauses] == [ClauseType.SVC]


def test_expletive_makes_existential_clause(existential_graph):
    clauses = detect_clauses(existential_graph)
    assert [c.describe() for c in clauses] == ["EXISTENTIAL (V: is@2, S: dog@4)"]


def test_relative_pronoun_under_preposition(relative_preposition_graph, options):
    clauses = detect_clauses(relative_preposition_graph)
    assert len(clauses) == 2
    relative = clauses[1]
    assert relative.relative_adverbial
    assert relative.describe(options) == "SVA (V: grew@8, S: I@7, A!: in@5)"
    assert relative.parent == 0


def test_zero_relative_becomes_object(zero_relative_object_graph):
    clauses = detect_clauses(zero_relative_object_graph)
    assert [c.describe() for c in clauses] == [
        "SVO (V: know@2, S: I@1, O: house@4)",
        "SVO (V: like@6, S: you@5, O: house@4)",
    ]


def test_zero_relative_fills_stranded_preposition(zero_relative_preposition_graph):
    [clause] = detect_clauses(zero_relative_preposition_graph)
    assert clause.describe() == "SVA (V: grew@4, S: I@3, A: in@6)"
    adverbial = clause.constituents[clause.adverbials[0]]
    assert [t.word for t in adverbial.graph.children(adverbial.root)] == ["house"]


def test_whose_subject_points_at_antecedent(whose_graph):
    clauses = detect_clauses(whose_graph)
    assert [c.clause_type for c in clauses] == [ClauseType.SVO, ClauseType.SVO, ClauseType.SV]
    relative = clauses[2]
    assert relative.describe() == "SV (V: barked@7, S: dog@6)"
    assert relative.parent == 0

    subject = relative.constituents[relative.subject]
    words = {t.word for t in subject.graph.descendants(subject.root)}
    assert "man" in words
    assert "whose" not in words


def test_complementizer_is_cut_from_the_verb(ccomp_graph):
    clauses = detect_clauses(ccomp_graph)
    assert [c.describe() for c in clauses] == [
        "SVO (V: said@2, S: Bell@1, CCOMP: left@5)",
        "SV (V: left@5, S: Bob@4)",
    ]
    assert "that" in {t.word for t in clauses[1].verb_constituent.excluded_tokens}


def test_marker_is_cut_from_the_verb(mark_graph):
    clauses = detect_clauses(mark_graph)
    assert [c.clause_type for c in clauses] == [ClauseType.SVA, ClauseType.SV]
    assert "because" in {t.word for t in clauses[1].verb_constituent.excluded_tokens}


def test_indirect_object(iobj_graph):
    [clause] = detect_clauses(iobj_graph)
    assert clause.describe() == "SVOO (V: gave@2, S: Bell@1, IO: John@3, O: book@5)"
    assert len(clause.indirect_objects) == 1
    assert len(clause.direct_objects) == 1


def test_embedded_subject_shared_with_outer_object(xcomp_object_graph):
    outer = detect_clauses(xcomp_object_graph)[0]
    xcomp = outer.constituents[outer.open_clausal_complements[0]]
    verb = xcomp.clauses[0].verb_constituent
    assert "John" not in {t.word for t in verb.additional_tokens}
    assert "John" in {t.word for t in verb.excluded_tokens}


def test_adverbials_follow_sentence_order(adverbials_around_verb_graph):
    [clause] = detect_clauses(adverbials_around_verb_graph)
    roots = [clause.constituents[i].root_index for i in clause.adverbials]
    assert roots == sorted(roots) == [1, 4]


GRAPH_FIXTURES = [
    "simple_svo_graph",
    "bell_products_graph",
    "xcomp_graph",
    "nested_xcomp_graph",
    "copula_graph",
    "apposition_graph",
    "possessive_graph",
    "parataxis_graph",
    "relative_graph",
    "verb_coordination_graph",
    "between_graph",
    "in_coordination_graph",
    "ampersand_graph",
    "pre_verb_adverbial_graph",
    "partmod_graph",
    "existential_graph",
    "relative_preposition_graph",
    "zero_relative_object_graph",
    "zero_relative_preposition_graph",
    "whose_graph",
    "ccomp_graph",
    "mark_graph",
    "iobj_graph",
    "xcomp_object_graph",
    "adverbials_around_verb_graph",
]


@pytest.mark.parametrize("fixture", GRAPH_FIXTURES)
def test_every_clause_is_typed_with_required_verb_and_subject(fixture, request, options):
    for clause in detect_clauses(request.getfixturevalue(fixture)):
        assert clause.clause_type != ClauseType.UNKNOWN
        assert 0 <= clause.verb < len(clause.constituents)
        assert clause.flag(clause.verb, options) == Flag.REQUIRED
        if clause.subject >= 0:
            assert clause.flag(clause.subject, options) == Flag.REQUIRED
