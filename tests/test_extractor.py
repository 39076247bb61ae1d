# tests/test_extractor.py
import pytest

from cie_core.exceptions import InputFormatError, MalformedGraphError
from cie_extraction.extractor import ClausalExtractor, extract_from_graph, extract_from_graphs


def test_extract_one_sentence(copula_graph):
    sentence = extract_from_graph(copula_graph, sentence_id="s1")
    assert sentence.sentence_id == "s1"
    assert [p.fields for p in sentence.propositions] == [("Bell", "is", "a company")]

    data = sentence.to_dict()
    assert data["clauses"][0]["type"] == "SVC"
    assert data["propositions"][0]["text"] == '("Bell", "is", "a company")'


def test_extract_rejects_non_graphs():
    with pytest.raises(InputFormatError):
        ClausalExtractor().extract("Bell makes products")


def test_extract_tags_errors_with_the_sentence(broken_relative_possessive_graph):
    with pytest.raises(MalformedGraphError) as excinfo:
        ClausalExtractor().extract(broken_relative_possessive_graph, sentence_id="7")
    assert excinfo.value.sentence_id == "7"


def test_batch_counts(simple_svo_graph, bell_products_graph, apposition_graph):
    result = extract_from_graphs([
        ("a", simple_svo_graph),
        ("b", bell_products_graph, "Bell makes electronic, computer and building products"),
        ("c", apposition_graph),
    ])
    assert result.total_sentences == 3
    assert result.total_clauses == 4
    assert result.total_propositions == 1 + 3 + 2
    assert result.clause_type_counts == {"SVO": 2, "SVC": 1, "SV": 1}
    assert result.errors == []
    assert result.sentences[1].text.startswith("Bell makes")


def test_batch_continues_after_errors(simple_svo_graph, broken_relative_possessive_graph):
    result = extract_from_graphs([
        ("s1", "not a graph"),
        ("s2", broken_relative_possessive_graph),
        ("s3", simple_svo_graph),
    ])
    assert result.total_sentences == 3
    assert [s.sentence_id for s in result.sentences] == ["s3"]
    assert len(result.errors) == 2
    assert result.errors[0].startswith("Error in sentence s1: Invalid input")
    assert result.errors[1].startswith("Error in sentence s2")


def test_batch_accepts_parsed_sentence_objects(simple_svo_graph):
    class Parsed:
        sentence_id = None
        graph = simple_svo_graph
        text = "Bell makes products"

    result = extract_from_graphs([Parsed(), Parsed()])
    assert [s.sentence_id for s in result.sentences] == ["1", "2"]


def test_batch_rejects_malformed_items(simple_svo_graph):
    result = extract_from_graphs([("only-an-id",), object()])
    assert result.sentences == []
    assert len(result.errors) == 2


def test_result_to_dict(simple_svo_graph):
    data = extract_from_graphs([("a", simple_svo_graph)]).to_dict()
    assert data["total_propositions"] == 1
    assert data["sentences"][0]["propositions"][0]["fields"] == ["Bell", "makes", "products"]
