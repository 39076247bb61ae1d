# tests/test_format_converters.py
import pytest

from cie_core.exceptions import InputFormatError
from cie_core.models import GrammaticalRelation, Token
from cie_io.format_converters import convert_ud_to_stanford, is_ud_label, upos_to_ptb

R = GrammaticalRelation


def tokens(*specs):
    return [Token(i, word, lemma=lemma, tag=tag) for i, (word, lemma, tag) in enumerate(specs, 1)]


def edge_strings(graph):
    return [str(e) for e in graph.edges()]


def test_case_marked_nominal_becomes_prep_and_pobj():
    # Bell went to the park .
    words = tokens(
        ("Bell", "Bell", "NNP"), ("went", "go", "VBD"), ("to", "to", "IN"),
        ("the", "the", "DT"), ("park", "park", "NN"), (".", ".", "."),
    )
    graph = convert_ud_to_stanford(
        words, [2, 0, 5, 5, 2, 2], ["nsubj", "root", "case", "det", "obl", "punct"]
    )
    assert edge_strings(graph) == [
        "nsubj(went-2, Bell-1)",
        "prep(went-2, to-3)",
        "pobj(to-3, park-5)",
        "det(park-5, the-4)",
    ]


def test_punctuation_can_be_kept():
    words = tokens(("Bell", "Bell", "NNP"), ("arrived", "arrive", "VBD"), (".", ".", "."))
    graph = convert_ud_to_stanford(words, [2, 0, 2], ["nsubj", "root", "punct"], keep_punctuation=True)
    assert "punct(arrived-2, .-3)" in edge_strings(graph)


def test_cc_moves_to_the_first_conjunct():
    # Bell makes and sells
    words = tokens(
        ("Bell", "Bell", "NNP"), ("makes", "make", "VBZ"), ("and", "and", "CC"), ("sells", "sell", "VBZ"),
    )
    graph = convert_ud_to_stanford(words, [2, 0, 4, 2], ["nsubj", "root", "cc", "conj"])
    assert edge_strings(graph) == [
        "nsubj(makes-2, Bell-1)",
        "cc(makes-2, and-3)",
        "conj(makes-2, sells-4)",
    ]


def test_label_rewrites():
    # Bell , which does not grow , seems happy to stay
    words = tokens(
        ("Bell", "Bell", "NNP"), ("which", "which", "WDT"), ("does", "do", "VBZ"),
        ("not", "not", "RB"), ("grow", "grow", "VB"), ("seems", "seem", "VBZ"),
        ("happy", "happy", "JJ"), ("to", "to", "TO"), ("stay", "stay", "VB"),
    )
    graph = convert_ud_to_stanford(
        words,
        [6, 5, 5, 5, 1, 0, 6, 9, 7],
        ["nsubj", "nsubj", "aux", "advmod", "acl:relcl", "root", "xcomp", "mark", "xcomp"]
    )
    relations = {(e.governor.index, e.dependent.index): e.relation for e in graph.edges()}
    assert relations[(5, 4)] is R.NEG
    assert relations[(1, 5)] is R.RCMOD
    assert relations[(6, 7)] is R.ACOMP
    assert relations[(9, 8)] is R.AUX


def test_possessive_marker():
    # Bell 's clothes
    words = tokens(("Bell", "Bell", "NNP"), ("'s", "'s", "POS"), ("clothes", "clothes", "NNS"))
    graph = convert_ud_to_stanford(words, [3, 1, 0], ["nmod:poss", "case", "root"])
    assert edge_strings(graph) == ["possessive(Bell-1, 's-2)", "poss(clothes-3, Bell-1)"]


def test_inconsistent_input_is_rejected():
    words = tokens(("Bell", "Bell", "NNP"), ("arrived", "arrive", "VBD"))
    with pytest.raises(InputFormatError):
        convert_ud_to_stanford(words, [2], ["nsubj", "root"])
    with pytest.raises(InputFormatError):
        convert_ud_to_stanford(words, [7, 0], ["nsubj", "root"])


@pytest.mark.parametrize("upos, feats, expected", [
    ("PROPN", None, "NNP"),
    ("NOUN", None, "NN"),
    ("PRON", {"PronType": "Rel"}, "WP"),
    ("DET", {"PronType": "Int"}, "WDT"),
    ("PRON", {"Poss": "Yes"}, "PRP$"),
    ("VERB", {"VerbForm": "Part", "Tense": "Past"}, "VBN"),
    ("VERB", {"VerbForm": "Ger"}, "VBG"),
    (None, None, "FW"),
])
def test_upos_to_ptb(upos, feats, expected):
    assert upos_to_ptb(upos, feats) == expected


def test_is_ud_label():
    assert is_ud_label("obj")
    assert is_ud_label("obl:tmod")
    assert is_ud_label("nsubj:pass")
    assert not is_ud_label("nsubj")
    assert not is_ud_label("dobj")
