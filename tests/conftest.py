# tests/conftest.py
import logging

import pytest

from cie_core.config_runtime import ExtractionOptions, RuntimeConfig
from cie_core.models import DependencyGraph, GrammaticalRelation, Token


def build_graph(words, edges):
    """
    Build a Stanford-labelled graph.

    ``words`` holds (word, tag) or (word, tag, lemma) tuples in sentence
    order; ``edges`` holds (relation, governor index, dependent index).
    """
    tokens = []
    for index, item in enumerate(words, 1):
        word, tag = item[0], item[1]
        lemma = item[2] if len(item) > 2 else ""
        tokens.append(Token(index=index, word=word, lemma=lemma, tag=tag))

    graph = DependencyGraph(tokens)
    for relation, governor, dependent in edges:
        graph.add_edge(
            graph.get_token(governor),
            graph.get_token(dependent),
            GrammaticalRelation.from_label(relation)
        )
    return graph


@pytest.fixture
def make_graph():
    return build_graph


@pytest.fixture
def options():
    return ExtractionOptions()


@pytest.fixture(autouse=True)
def isolated_runtime_config(tmp_path, monkeypatch):
    """Every test gets its own settings directory"""
    monkeypatch.setenv("CIE_CONFIG_DIR", str(tmp_path / "cie_config"))
    RuntimeConfig.reset()
    yield
    RuntimeConfig.reset()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging replaces the root handlers; put them back afterwards"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def bell_products_graph():
    # Bell makes electronic, computer and building products
    return build_graph(
        [
            ("Bell", "NNP"),
            ("makes", "VBZ", "make"),
            ("electronic", "JJ"),
            (",", ","),
            ("computer", "NN"),
            ("and", "CC"),
            ("building", "NN"),
            ("products", "NNS", "product"),
        ],
        [
            ("nsubj", 2, 1),
            ("dobj", 2, 8),
            ("amod", 8, 3),
            ("conj", 3, 5),
            ("cc", 3, 6),
            ("conj", 3, 7),
        ]
    )


@pytest.fixture
def simple_svo_graph():
    # Bell makes products
    return build_graph(
        [("Bell", "NNP"), ("makes", "VBZ", "make"), ("products", "NNS", "product")],
        [("nsubj", 2, 1), ("dobj", 2, 3)]
    )


@pytest.fixture
def xcomp_graph():
    # Bell decided to expand
    return build_graph(
        [("Bell", "NNP"), ("decided", "VBD", "decide"), ("to", "TO"), ("expand", "VB")],
        [("nsubj", 2, 1), ("xcomp", 2, 4), ("aux", 4, 3)]
    )


@pytest.fixture
def nested_xcomp_graph():
    # Bell wants to try to expand
    return build_graph(
        [
            ("Bell", "NNP"),
            ("wants", "VBZ", "want"),
            ("to", "TO"),
            ("try", "VB"),
            ("to", "TO"),
            ("expand", "VB"),
        ],
        [("nsubj", 2, 1), ("xcomp", 2, 4), ("aux", 4, 3), ("xcomp", 4, 6), ("aux", 6, 5)]
    )


@pytest.fixture
def copula_graph():
    # Bell is a company
    return build_graph(
        [("Bell", "NNP"), ("is", "VBZ", "be"), ("a", "DT"), ("company", "NN")],
        [("nsubj", 4, 1), ("cop", 4, 2), ("det", 4, 3)]
    )


@pytest.fixture
def apposition_graph():
    # Sam, a doctor, arrived
    return build_graph(
        [("Sam", "NNP"), ("a", "DT"), ("doctor", "NN"), ("arrived", "VBD", "arrive")],
        [("nsubj", 4, 1), ("appos", 1, 3), ("det", 3, 2)]
    )


@pytest.fixture
def possessive_graph():
    # Bill's clothes are expensive
    return build_graph(
        [
            ("Bill", "NNP"),
            ("'s", "POS"),
            ("clothes", "NNS"),
            ("are", "VBP", "be"),
            ("expensive", "JJ"),
        ],
        [("poss", 3, 1), ("possessive", 1, 2), ("nsubj", 5, 3), ("cop", 5, 4)]
    )


@pytest.fixture
def parataxis_graph():
    # The dog, John said, is great
    return build_graph(
        [
            ("The", "DT"),
            ("dog", "NN"),
            ("John", "NNP"),
            ("said", "VBD", "say"),
            ("is", "VBZ", "be"),
            ("great", "JJ"),
        ],
        [
            ("det", 2, 1),
            ("nsubj", 6, 2),
            ("cop", 6, 5),
            ("parataxis", 6, 4),
            ("nsubj", 4, 3),
        ]
    )


@pytest.fixture
def relative_graph():
    # Bell, which makes products, grew
    return build_graph(
        [
            ("Bell", "NNP"),
            ("which", "WDT"),
            ("makes", "VBZ", "make"),
            ("products", "NNS", "product"),
            ("grew", "VBD", "grow"),
        ],
        [("nsubj", 5, 1), ("rcmod", 1, 3), ("nsubj", 3, 2), ("dobj", 3, 4)]
    )


@pytest.fixture
def verb_coordination_graph():
    # Bell makes and sells products
    return build_graph(
        [
            ("Bell", "NNP"),
            ("makes", "VBZ", "make"),
            ("and", "CC"),
            ("sells", "VBZ", "sell"),
            ("products", "NNS", "product"),
        ],
        [("nsubj", 2, 1), ("cc", 2, 3), ("conj", 2, 4), ("dobj", 2, 5)]
    )


def _located_graph(preposition):
    return build_graph(
        [
            ("Bell", "NNP"),
            ("sits", "VBZ", "sit"),
            (preposition, "IN"),
            ("Boston", "NNP"),
            ("and", "CC"),
            ("Cambridge", "NNP"),
        ],
        [("nsubj", 2, 1), ("prep", 2, 3), ("pobj", 3, 4), ("cc", 4, 5), ("conj", 4, 6)]
    )


@pytest.fixture
def between_graph():
    # Bell sits between Boston and Cambridge
    return _located_graph("between")


@pytest.fixture
def in_coordination_graph():
    # Bell sits in Boston and Cambridge
    return _located_graph("in")


@pytest.fixture
def ampersand_graph():
    # Bell joined Procter & Gamble
    return build_graph(
        [
            ("Bell", "NNP"),
            ("joined", "VBD", "join"),
            ("Procter", "NNP"),
            ("&", "CC"),
            ("Gamble", "NNP"),
        ],
        [("nsubj", 2, 1), ("dobj", 2, 3), ("cc", 3, 4), ("conj", 3, 5)]
    )


@pytest.fixture
def pre_verb_adverbial_graph():
    # Yesterday Bell arrived
    return build_graph(
        [("Yesterday", "NN", "yesterday"), ("Bell", "NNP"), ("arrived", "VBD", "arrive")],
        [("tmod", 3, 1), ("nsubj", 3, 2)]
    )


@pytest.fixture
def broken_relative_possessive_graph():
    # whose dog (relative possessive with nothing above it)
    return build_graph(
        [("whose", "WP$"), ("dog", "NN")],
        [("poss", 2, 1)]
    )


@pytest.fixture
def partmod_graph():
    # He is the man crying the whole day
    return build_graph(
        [
            ("He", "PRP"),
            ("is", "VBZ", "be"),
            ("the", "DT"),
            ("man", "NN"),
            ("crying", "VBG", "cry"),
            ("the", "DT"),
            ("whole", "JJ"),
            ("day", "NN"),
        ],
        [
            ("nsubj", 4, 1),
            ("cop", 4, 2),
            ("det", 4, 3),
            ("partmod", 4, 5),
            ("tmod", 5, 8),
            ("det", 8, 6),
            ("amod", 8, 7),
        ]
    )


@pytest.fixture
def existential_graph():
    # There is a dog
    return build_graph(
        [("There", "EX", "there"), ("is", "VBZ", "be"), ("a", "DT"), ("dog", "NN")],
        [("expl", 2, 1), ("nsubj", 2, 4), ("det", 4, 3)]
    )


@pytest.fixture
def relative_preposition_graph():
    # I saw the house in which I grew up
    return build_graph(
        [
            ("I", "PRP"),
            ("saw", "VBD", "see"),
            ("the", "DT"),
            ("house", "NN"),
            ("in", "IN"),
            ("which", "WDT"),
            ("I", "PRP"),
            ("grew", "VBD", "grow"),
            ("up", "RP"),
        ],
        [
            ("nsubj", 2, 1),
            ("dobj", 2, 4),
            ("det", 4, 3),
            ("rcmod", 4, 8),
            ("rel", 8, 5),
            ("pobj", 5, 6),
            ("nsubj", 8, 7),
            ("prt", 8, 9),
        ]
    )


@pytest.fixture
def zero_relative_object_graph():
    # I know the house you like
    return build_graph(
        [
            ("I", "PRP"),
            ("know", "VBP"),
            ("the", "DT"),
            ("house", "NN"),
            ("you", "PRP"),
            ("like", "VBP"),
        ],
        [("nsubj", 2, 1), ("dobj", 2, 4), ("det", 4, 3), ("rcmod", 4, 6), ("nsubj", 6, 5)]
    )


@pytest.fixture
def zero_relative_preposition_graph():
    # the house I grew up in
    return build_graph(
        [
            ("the", "DT"),
            ("house", "NN"),
            ("I", "PRP"),
            ("grew", "VBD", "grow"),
            ("up", "RP"),
            ("in", "IN"),
        ],
        [("det", 2, 1), ("rcmod", 2, 4), ("nsubj", 4, 3), ("prt", 4, 5), ("prep", 4, 6)]
    )


@pytest.fixture
def whose_graph():
    # I saw the man whose dog barked
    return build_graph(
        [
            ("I", "PRP"),
            ("saw", "VBD", "see"),
            ("the", "DT"),
            ("man", "NN"),
            ("whose", "WP$"),
            ("dog", "NN"),
            ("barked", "VBD", "bark"),
        ],
        [
            ("nsubj", 2, 1),
            ("dobj", 2, 4),
            ("det", 4, 3),
            ("rcmod", 4, 7),
            ("poss", 6, 5),
            ("nsubj", 7, 6),
        ]
    )


@pytest.fixture
def ccomp_graph():
    # Bell said that Bob left
    return build_graph(
        [
            ("Bell", "NNP"),
            ("said", "VBD", "say"),
            ("that", "IN"),
            ("Bob", "NNP"),
            ("left", "VBD", "leave"),
        ],
        [("nsubj", 2, 1), ("ccomp", 2, 5), ("complm", 5, 3), ("nsubj", 5, 4)]
    )


@pytest.fixture
def mark_graph():
    # Bob left because Bell arrived
    return build_graph(
        [
            ("Bob", "NNP"),
            ("left", "VBD", "leave"),
            ("because", "IN"),
            ("Bell", "NNP"),
            ("arrived", "VBD", "arrive"),
        ],
        [("nsubj", 2, 1), ("advcl", 2, 5), ("mark", 5, 3), ("nsubj", 5, 4)]
    )


@pytest.fixture
def iobj_graph():
    # Bell gave John a book
    return build_graph(
        [
            ("Bell", "NNP"),
            ("gave", "VBD", "give"),
            ("John", "NNP"),
            ("a", "DT"),
            ("book", "NN"),
        ],
        [("nsubj", 2, 1), ("iobj", 2, 3), ("dobj", 2, 5), ("det", 5, 4)]
    )


@pytest.fixture
def xcomp_object_graph():
    # Bell asked John to leave
    return build_graph(
        [
            ("Bell", "NNP"),
            ("asked", "VBD", "ask"),
            ("John", "NNP"),
            ("to", "TO"),
            ("leave", "VB"),
        ],
        [("nsubj", 2, 1), ("dobj", 2, 3), ("xcomp", 2, 5), ("aux", 5, 4), ("xsubj", 5, 3)]
    )


@pytest.fixture
def adverbials_around_verb_graph():
    # Yesterday Bell arrived in Boston
    return build_graph(
        [
            ("Yesterday", "NN", "yesterday"),
            ("Bell", "NNP"),
            ("arrived", "VBD", "arrive"),
            ("in", "IN"),
            ("Boston", "NNP"),
        ],
        [("tmod", 3, 1), ("nsubj", 3, 2), ("prep", 3, 4), ("pobj", 4, 5)]
    )
