"""
CIE IO - Input/Output Module for Dependency Parses and Propositions

This package reads dependency parses in CoNLL-U / CoNLL-X format, converts
Universal Dependencies analyses into the Stanford vocabulary used by clause
detection, and writes extracted propositions.

Modules:
    conllu_io: CoNLL-U / CoNLL-X reading
    format_converters: UD to Stanford conversion, UPOS to PTB tags
    proposition_io: TSV and JSON-lines proposition output
"""

from cie_io.format_converters import (
    UDToStanfordConverter,
    UPOS_TO_PTB,
    upos_to_ptb,
    is_ud_label,
    convert_ud_to_stanford,
)

from cie_io.conllu_io import (
    CoNLLUReader,
    CoNLLURow,
    ParsedSentence,
    parse_conllu_string,
    parse_conllu_file,
)

from cie_io.proposition_io import (
    PropositionWriter,
)

__version__ = "1.0.0"

__all__ = [
    "UDToStanfordConverter",
    "UPOS_TO_PTB",
    "upos_to_ptb",
    "is_ud_label",
    "convert_ud_to_stanford",
    "CoNLLUReader",
    "CoNLLURow",
    "ParsedSentence",
    "parse_conllu_string",
    "parse_conllu_file",
    "PropositionWriter",
]
