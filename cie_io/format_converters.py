"""
CIE IO Format Converters - Universal Dependencies to Stanford Dependencies

Clause detection works on the Stanford basic dependency vocabulary. This
module rewrites UD v2 analyses (as produced by current parsers and
treebanks) into that vocabulary:

- relation labels are renamed (obj -> dobj, acl:relcl -> rcmod, ...)
- case-marked nominals are re-rooted under their preposition
  (obl(went, park) + case(park, to) -> prep(went, to) + pobj(to, park))
- coordinating conjunctions move from the later conjunct to the first one
- UPOS tags are mapped onto Penn Treebank tags when no XPOS is available
"""

from __future__ import annotations
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from cie_core.exceptions import InputFormatError
from cie_core.models import DependencyGraph, GrammaticalRelation, Token

logger = logging.getLogger(__name__)

R = GrammaticalRelation


UPOS_TO_PTB: Dict[str, str] = {
    "ADJ": "JJ",
    "ADP": "IN",
    "ADV": "RB",
    "AUX": "VB",
    "CCONJ": "CC",
    "DET": "DT",
    "INTJ": "UH",
    "NOUN": "NN",
    "NUM": "CD",
    "PART": "RP",
    "PRON": "PRP",
    "PROPN": "NNP",
    "PUNCT": ".",
    "SCONJ": "IN",
    "SYM": "SYM",
    "VERB": "VB",
    "X": "FW",
}

# Relative and interrogative forms by UPOS
WH_TAGS: Dict[str, str] = {
    "PRON": "WP",
    "DET": "WDT",
    "ADV": "WRB",
}

NEGATION_WORDS = frozenset({"not", "n't", "never"})

# Labels (or label bases) that only occur in UD analyses
UD_ONLY_LABELS = frozenset({
    "obj", "obl", "nmod", "case", "compound", "flat", "fixed", "nummod", "acl",
    "clf", "orphan", "list", "reparandum", "vocative", "dislocated",
    "nsubj:pass", "csubj:pass", "aux:pass",
})

# Plain renames; anything not listed and unknown to the Stanford vocabulary becomes dep
UD_RELATION_MAP: Dict[str, GrammaticalRelation] = {
    "nsubj": R.NSUBJ,
    "nsubj:pass": R.NSUBJPASS,
    "csubj": R.CSUBJ,
    "csubj:pass": R.CSUBJPASS,
    "obj": R.DOBJ,
    "iobj": R.IOBJ,
    "ccomp": R.CCOMP,
    "xcomp": R.XCOMP,
    "advcl": R.ADVCL,
    "advmod": R.ADVMOD,
    "aux": R.AUX,
    "aux:pass": R.AUXPASS,
    "cop": R.COP,
    "mark": R.MARK,
    "expl": R.EXPL,
    "amod": R.AMOD,
    "nummod": R.NUM,
    "det": R.DET,
    "det:predet": R.PREDET,
    "cc": R.CC,
    "cc:preconj": R.PRECONJ,
    "conj": R.CONJ,
    "appos": R.APPOS,
    "acl:relcl": R.RCMOD,
    "compound": R.NN,
    "compound:prt": R.PRT,
    "flat": R.NN,
    "fixed": R.MWE,
    "nmod:poss": R.POSS,
    "nmod:tmod": R.TMOD,
    "obl:tmod": R.TMOD,
    "nmod:npmod": R.NPADVMOD,
    "obl:npmod": R.NPADVMOD,
    "parataxis": R.PARATAXIS,
    "discourse": R.DISCOURSE,
    "punct": R.PUNCT,
    "goeswith": R.GOESWITH,
    "dep": R.DEP,
}


def upos_to_ptb(upos: Optional[str], feats: Optional[Dict[str, str]] = None) -> str:
    """Penn Treebank tag for a UPOS tag, using PronType for wh-words"""
    upos = (upos or "").upper()
    feats = feats or {}
    if feats.get("PronType") in ("Rel", "Int") and upos in WH_TAGS:
        return WH_TAGS[upos]
    if upos == "PRON" and feats.get("Poss") == "Yes":
        return "PRP$"
    if upos == "VERB" and feats.get("VerbForm") == "Part":
        return "VBG" if feats.get("Tense") == "Pres" else "VBN"
    if upos == "VERB" and feats.get("VerbForm") == "Ger":
        return "VBG"
    return UPOS_TO_PTB.get(upos, "FW")


def is_ud_label(label: str) -> bool:
    """True if the label only occurs in UD analyses"""
    label = (label or "").lower()
    return label in UD_ONLY_LABELS or label.split(":", 1)[0] in UD_ONLY_LABELS


def _is_preposition(token: Token) -> bool:
    return token.tag in ("IN", "TO")


class UDToStanfordConverter:
    """
    Converts one UD-annotated sentence into a Stanford-labelled graph.

    Example:
        converter = UDToStanfordConverter()
        graph = converter.convert(tokens, heads, labels)
    """

    def __init__(self, keep_punctuation: bool = False):
        self.keep_punctuation = keep_punctuation

    def convert(
        self,
        tokens: Sequence[Token],
        heads: Sequence[int],
        labels: Sequence[str],
        feats: Optional[Sequence[Dict[str, str]]] = None
    ) -> DependencyGraph:
        """
        Build the Stanford graph.

        ``heads`` and ``labels`` are parallel to ``tokens``; a head of 0
        marks the sentence root.
        """
        if not (len(tokens) == len(heads) == len(labels)):
            raise InputFormatError(
                f"token/head/label counts differ: {len(tokens)}/{len(heads)}/{len(labels)}"
            )
        feats = list(feats) if feats is not None else [{} for _ in tokens]

        by_index = {t.index: t for t in tokens}
        head_of = {t.index: h for t, h in zip(tokens, heads)}
        label_of = {t.index: (l or "dep").lower() for t, l in zip(tokens, labels)}
        feats_of = {t.index: f or {} for t, f in zip(tokens, feats)}

        children: Dict[int, List[int]] = defaultdict(list)
        for token in tokens:
            children[head_of[token.index]].append(token.index)

        # Nominals re-rooted under their case marker
        prepositions: Dict[int, int] = {}
        for token in tokens:
            base = label_of[token.index].split(":", 1)[0]
            if base not in ("obl", "nmod") or label_of[token.index] in UD_RELATION_MAP:
                continue
            for child in children[token.index]:
                if label_of[child] == "case" and _is_preposition(by_index[child]):
                    prepositions[token.index] = child
                    break
        case_markers = {case: noun for noun, case in prepositions.items()}

        graph = DependencyGraph(tokens)
        for token in tokens:
            index = token.index
            head = head_of[index]
            label = label_of[index]
            if head == 0 or label == "root":
                continue

            governor = by_index.get(head)
            if governor is None:
                raise InputFormatError(f"token {index} has unknown head {head}")

            if index in case_markers:
                noun = by_index[case_markers[index]]
                graph.add_edge(token, noun, R.POBJ)
                noun_governor = by_index.get(head_of[noun.index])
                if noun_governor is not None:
                    graph.add_edge(noun_governor, token, self._preposition_relation(
                        noun, noun_governor, label_of
                    ))
                continue

            if index in prepositions:
                continue

            relation, governor = self._relation(
                token, governor, label, label_of, head_of, feats_of[index], by_index
            )
            if relation is R.PUNCT and not self.keep_punctuation:
                continue
            graph.add_edge(governor, token, relation)

        return graph

    def _preposition_relation(self, noun: Token, governor: Token, label_of: Dict[int, str]) -> GrammaticalRelation:
        # "the house in which I grew"
        if noun.is_wh_word and label_of.get(governor.index) == "acl:relcl":
            return R.REL
        return R.PREP

    def _relation(
        self,
        token: Token,
        governor: Token,
        label: str,
        label_of: Dict[int, str],
        head_of: Dict[int, int],
        feats: Dict[str, str],
        by_index: Dict[int, Token]
    ) -> Tuple[GrammaticalRelation, Token]:
        """Stanford relation and governor of one UD edge"""
        if label == "cc":
            # Attach to the first conjunct
            while label_of.get(governor.index) == "conj" and head_of.get(governor.index, 0) in by_index:
                governor = by_index[head_of[governor.index]]
            return R.CC, governor

        if label == "advmod" and (token.lemma.lower() in NEGATION_WORDS or feats.get("Polarity") == "Neg"):
            return R.NEG, governor

        if label == "xcomp" and token.tag.startswith("JJ"):
            return R.ACOMP, governor

        if label == "mark" and (token.tag == "TO" or (token.word.lower() == "to" and token.tag == "RP")):
            return R.AUX, governor

        if label == "case":
            if label_of.get(governor.index) == "nmod:poss":
                return R.POSSESSIVE, governor
            return R.DEP, governor

        if label == "acl":
            if token.tag in ("VBG", "VBN"):
                return R.PARTMOD, governor
            return R.INFMOD, governor

        if label in UD_RELATION_MAP:
            return UD_RELATION_MAP[label], governor

        base = label.split(":", 1)[0]
        if base == "obl":
            return R.NPADVMOD, governor
        if base in UD_RELATION_MAP:
            return UD_RELATION_MAP[base], governor
        return R.from_label(label), governor


def convert_ud_to_stanford(
    tokens: Sequence[Token],
    heads: Sequence[int],
    labels: Sequence[str],
    feats: Optional[Sequence[Dict[str, str]]] = None,
    keep_punctuation: bool = False
) -> DependencyGraph:
    """Convert one UD-annotated sentence into a Stanford-labelled graph"""
    converter = UDToStanfordConverter(keep_punctuation=keep_punctuation)
    return converter.convert(tokens, heads, labels, feats)
