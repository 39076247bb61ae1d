"""
CIE Extraction Clause - Clause structure, type classification and flags

A clause is an ordered list of constituents plus integer role pointers into
that list. Positions are stable and used as addresses everywhere else.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Any
from enum import Enum

from cie_core.config_runtime import ExtractionOptions
from cie_extraction.constituents import (
    Constituent,
    Flag,
    IndexedConstituent,
    ROLE_CODES,
    Role,
)

logger = logging.getLogger(__name__)


class ClauseType(Enum):
    """Syntactic clause patterns"""
    SV = "SV"
    SVC = "SVC"
    SVA = "SVA"
    SVO = "SVO"
    SVOO = "SVOO"
    SVOC = "SVOC"
    SVOA = "SVOA"
    EXISTENTIAL = "EXISTENTIAL"
    UNKNOWN = "UNKNOWN"


FLAG_CODES: Dict[Flag, str] = {
    Flag.IGNORE: "-",
    Flag.OPTIONAL: "?",
    Flag.REQUIRED: "!",
}


class Clause:
    """
    One subject-predicate unit of a sentence.

    ``subject``, ``verb`` and ``complement`` are positions in
    ``constituents`` (-1 when absent); the other role lists hold positions
    in insertion order. ``parent`` is the position of the enclosing clause
    in the list the clause was detected into.
    """

    def __init__(self):
        self.constituents: List[Constituent] = []
        self.clause_type: ClauseType = ClauseType.UNKNOWN
        self.subject: int = -1
        self.verb: int = -1
        self.complement: int = -1
        self.direct_objects: List[int] = []
        self.indirect_objects: List[int] = []
        self.open_clausal_complements: List[int] = []
        self.clausal_complements: List[int] = []
        self.adjectival_complements: List[int] = []
        self.adverbials: List[int] = []
        self.relative_adverbial: bool = False
        self.parent: Optional[int] = None

    def add(self, constituent: Constituent) -> int:
        """Append a constituent and return its position"""
        self.constituents.append(constituent)
        return len(self.constituents) - 1

    def clone(self) -> "Clause":
        """Working copy: role lists are duplicated, constituents are shared"""
        clause = Clause()
        clause.constituents = list(self.constituents)
        clause.clause_type = self.clause_type
        clause.subject = self.subject
        clause.verb = self.verb
        clause.complement = self.complement
        clause.direct_objects = list(self.direct_objects)
        clause.indirect_objects = list(self.indirect_objects)
        clause.open_clausal_complements = list(self.open_clausal_complements)
        clause.clausal_complements = list(self.clausal_complements)
        clause.adjectival_complements = list(self.adjectival_complements)
        clause.adverbials = list(self.adverbials)
        clause.relative_adverbial = self.relative_adverbial
        clause.parent = self.parent
        return clause

    @property
    def verb_constituent(self) -> Constituent:
        return self.constituents[self.verb]

    def complement_count(self) -> int:
        """Direct objects, subject complement, open and closed clausal complements"""
        return (
            len(self.direct_objects)
            + (1 if self.complement >= 0 else 0)
            + len(self.open_clausal_complements)
            + len(self.clausal_complements)
        )

    def has_candidate_adverbial(self) -> bool:
        """True if some adverbial could be obligatory"""
        if not self.adverbials:
            return False
        if self.relative_adverbial:
            return True

        last = self.constituents[self.adverbials[-1]].root_index
        verb = self.verb_constituent.root_index
        if last is None or verb is None:
            return False
        return last > verb

    def detect_type(self, options: ExtractionOptions):
        """Assign the clause type if it is still unknown"""
        if self.clause_type != ClauseType.UNKNOWN:
            return

        complements = self.complement_count()
        verb_root = getattr(self.verb_constituent, "root", None)
        copular = verb_root is not None and options.is_copular(verb_root)

        has_direct_object = bool(self.direct_objects) or (
            self.complement < 0 and complements > 0 and not copular
        )
        has_indirect_object = bool(self.indirect_objects)

        if has_direct_object or has_indirect_object:
            if complements > 0 and has_indirect_object:
                self.clause_type = ClauseType.SVOO
            elif complements > 1:
                self.clause_type = ClauseType.SVOC
            elif not (self.has_candidate_adverbial() and has_direct_object):
                self.clause_type = ClauseType.SVO
            elif verb_root is not None and options.is_complex_transitive(verb_root):
                self.clause_type = ClauseType.SVOA
            elif options.conservative_svoa:
                self.clause_type = ClauseType.SVOA
            else:
                self.clause_type = ClauseType.SVO
        else:
            if self.complement >= 0 or (complements > 0 and copular) or self.adjectival_complements:
                self.clause_type = ClauseType.SVC
            elif not self.has_candidate_adverbial():
                self.clause_type = ClauseType.SV
            elif verb_root is not None and options.is_not_ext_copular(verb_root):
                self.clause_type = ClauseType.SV
            elif verb_root is not None and options.is_ext_copular(verb_root):
                self.clause_type = ClauseType.SVA
            elif options.conservative_sva:
                self.clause_type = ClauseType.SVA
            else:
                self.clause_type = ClauseType.SV

    def _adverb_lemma(self, index: int) -> Optional[str]:
        """Lemma of a single childless adverbial, None if it spans more than one token"""
        constituent = self.constituents[index]
        if isinstance(constituent, IndexedConstituent):
            if constituent.graph.has_children(constituent.root):
                return None
            return constituent.root.lemma
        return constituent.root_text

    def _is_ignored_adverbial(self, index: int, options: ExtractionOptions) -> bool:
        lemma = self._adverb_lemma(index)
        if lemma is None:
            return False
        return lemma in options.adverbs_ignore or (
            options.process_cc_non_verbs and lemma in options.adverbs_conj
        )

    def _is_included_adverbial(self, index: int, options: ExtractionOptions) -> bool:
        lemma = self._adverb_lemma(index)
        return lemma is not None and lemma in options.adverbs_include

    def flag(self, index: int, options: ExtractionOptions) -> Flag:
        """Optionality of the constituent at ``index``"""
        first = True
        verb_index = self.verb_constituent.root_index
        for i in self.adverbials:
            if i == index and self._is_ignored_adverbial(i, options):
                return Flag.IGNORE
            elif i == index and self._is_included_adverbial(i, options):
                return Flag.REQUIRED

            adverbial_index = self.constituents[i].root_index
            before_verb = (
                verb_index is not None
                and adverbial_index is not None
                and adverbial_index < verb_index
            )
            if before_verb and not self.relative_adverbial:
                if i == index:
                    return Flag.OPTIONAL
            else:
                if i == index:
                    if not first:
                        return Flag.OPTIONAL
                    if self.clause_type in (ClauseType.SVA, ClauseType.SVOA):
                        return Flag.REQUIRED
                    return Flag.OPTIONAL
                first = False
        return Flag.REQUIRED

    def describe(self, options: Optional[ExtractionOptions] = None) -> str:
        """One-line summary such as ``SVO (V: makes@2, S: Bell@1, O: products@8)``"""
        parts = []
        for index, constituent in enumerate(self.constituents):
            code = ROLE_CODES[constituent.role]
            if constituent.role == Role.ADVERBIAL and options is not None:
                code += FLAG_CODES[self.flag(index, options)]
            parts.append(f"{code}: {constituent.describe()}")
        return f"{self.clause_type.value} ({', '.join(parts)})"

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"Clause({self.describe()})"

    def to_dict(self, options: Optional[ExtractionOptions] = None) -> Dict[str, Any]:
        """Convert to dictionary"""
        constituents = []
        for index, constituent in enumerate(self.constituents):
            item = constituent.to_dict()
            if options is not None:
                item["flag"] = self.flag(index, options).value
            constituents.append(item)

        return {
            "type": self.clause_type.value,
            "description": self.describe(options),
            "constituents": constituents,
            "subject": self.subject,
            "verb": self.verb,
            "complement": self.complement,
            "direct_objects": self.direct_objects,
            "indirect_objects": self.indirect_objects,
            "open_clausal_complements": self.open_clausal_complements,
            "clausal_complements": self.clausal_complements,
            "adjectival_complements": self.adjectival_complements,
            "adverbials": self.adverbials,
            "relative_adverbial": self.relative_adverbial,
            "parent": self.parent
        }
