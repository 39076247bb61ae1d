"""
CIE Core Models - Tokens, Grammatical Relations and Dependency Graphs

This module defines the data structures every extraction step works on:
sentence tokens, the typed grammatical-relation vocabulary (Stanford basic
dependencies, organised as an is-a hierarchy) and the labelled dependency
multigraph over the tokens of one sentence.

The models support:
- Relation family queries ("is nsubjpass a kind of subj?")
- Sorted edge access per token and parent/child/sibling queries
- Cheap structural copies for copy-on-write rewriting
- Cycle-safe descendant computation
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Iterable, Iterator, Set, Tuple
from enum import Enum

from cie_core.exceptions import MalformedGraphError


@dataclass(frozen=True, order=True)
class Token:
    """
    A token of the analyzed sentence.

    Tokens are immutable and ordered by their 1-based position, so sets
    of tokens can be sorted back into sentence order.
    """
    index: int
    word: str = field(compare=False)
    lemma: str = field(default="", compare=False)
    tag: str = field(default="", compare=False)

    def __post_init__(self):
        if not self.lemma:
            object.__setattr__(self, "lemma", self.word)

    @property
    def is_wh_word(self) -> bool:
        """Relative or interrogative pronoun/determiner/adverb (WDT, WP, WP$, WRB)"""
        return self.tag[:1] == "W"

    @property
    def is_verb(self) -> bool:
        """Verbal Penn Treebank tag"""
        return self.tag[:1] == "V"

    def __str__(self) -> str:
        return f"{self.word}-{self.index}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "index": self.index,
            "word": self.word,
            "lemma": self.lemma,
            "tag": self.tag
        }


class GrammaticalRelation(Enum):
    """Stanford basic dependency relations"""
    ROOT = "root"
    DEP = "dep"
    AUX = "aux"
    AUXPASS = "auxpass"
    COP = "cop"
    ARG = "arg"
    AGENT = "agent"
    COMP = "comp"
    ACOMP = "acomp"
    CCOMP = "ccomp"
    XCOMP = "xcomp"
    COMPLM = "complm"
    MARK = "mark"
    REL = "rel"
    PCOMP = "pcomp"
    OBJ = "obj"
    DOBJ = "dobj"
    IOBJ = "iobj"
    POBJ = "pobj"
    SUBJ = "subj"
    NSUBJ = "nsubj"
    NSUBJPASS = "nsubjpass"
    CSUBJ = "csubj"
    CSUBJPASS = "csubjpass"
    XSUBJ = "xsubj"
    EXPL = "expl"
    MOD = "mod"
    ADVCL = "advcl"
    PURPCL = "purpcl"
    DET = "det"
    PREDET = "predet"
    PRECONJ = "preconj"
    INFMOD = "infmod"
    PARTMOD = "partmod"
    ADVMOD = "advmod"
    NEG = "neg"
    RCMOD = "rcmod"
    QUANTMOD = "quantmod"
    NPADVMOD = "npadvmod"
    TMOD = "tmod"
    NN = "nn"
    NUM = "num"
    NUMBER = "number"
    APPOS = "appos"
    POSSESSIVE = "possessive"
    POSS = "poss"
    PRT = "prt"
    PREP = "prep"
    AMOD = "amod"
    MWE = "mwe"
    DISCOURSE = "discourse"
    CONJ = "conj"
    CC = "cc"
    REF = "ref"
    SDEP = "sdep"
    PARATAXIS = "parataxis"
    PUNCT = "punct"
    GOESWITH = "goeswith"

    @property
    def parent(self) -> Optional["GrammaticalRelation"]:
        """Direct super-relation in the hierarchy"""
        return RELATION_PARENTS.get(self)

    def ancestors(self) -> List["GrammaticalRelation"]:
        """This relation followed by all of its super-relations"""
        chain = []
        current: Optional[GrammaticalRelation] = self
        while current is not None:
            chain.append(current)
            current = current.parent
        return chain

    def is_ancestor_of(self, other: "GrammaticalRelation") -> bool:
        """Reflexive is-a test: True if ``other`` is this relation or one of its kinds"""
        return self in other.ancestors()

    @classmethod
    def from_label(cls, label: str) -> "GrammaticalRelation":
        """Resolve a relation label, falling back on its base for collapsed/sub-typed labels"""
        label = (label or "").strip().lower()
        if label in _BY_LABEL:
            return _BY_LABEL[label]

        for separator in (":", "_"):
            if separator in label:
                base = label.split(separator, 1)[0]
                if base in _BY_LABEL:
                    return _BY_LABEL[base]
                if base == "prepc":
                    return cls.PREP

        return cls.DEP


_R = GrammaticalRelation

RELATION_PARENTS: Dict[GrammaticalRelation, Optional[GrammaticalRelation]] = {
    _R.ROOT: None,
    _R.DEP: None,
    _R.AUX: _R.DEP,
    _R.AUXPASS: _R.AUX,
    _R.COP: _R.AUX,
    _R.ARG: _R.DEP,
    _R.AGENT: _R.ARG,
    _R.COMP: _R.ARG,
    _R.ACOMP: _R.COMP,
    _R.CCOMP: _R.COMP,
    _R.XCOMP: _R.COMP,
    _R.COMPLM: _R.COMP,
    _R.MARK: _R.COMP,
    _R.REL: _R.COMP,
    _R.PCOMP: _R.COMP,
    _R.OBJ: _R.COMP,
    _R.DOBJ: _R.OBJ,
    _R.IOBJ: _R.OBJ,
    _R.POBJ: _R.OBJ,
    _R.SUBJ: _R.ARG,
    _R.NSUBJ: _R.SUBJ,
    _R.NSUBJPASS: _R.NSUBJ,
    _R.CSUBJ: _R.SUBJ,
    _R.CSUBJPASS: _R.CSUBJ,
    _R.XSUBJ: _R.SUBJ,
    _R.EXPL: _R.DEP,
    _R.MOD: _R.DEP,
    _R.ADVCL: _R.MOD,
    _R.PURPCL: _R.MOD,
    _R.DET: _R.MOD,
    _R.PREDET: _R.MOD,
    _R.PRECONJ: _R.MOD,
    _R.INFMOD: _R.MOD,
    _R.PARTMOD: _R.MOD,
    _R.ADVMOD: _R.MOD,
    _R.NEG: _R.ADVMOD,
    _R.RCMOD: _R.MOD,
    _R.QUANTMOD: _R.MOD,
    _R.NPADVMOD: _R.MOD,
    _R.TMOD: _R.NPADVMOD,
    _R.NN: _R.MOD,
    _R.NUM: _R.MOD,
    _R.NUMBER: _R.MOD,
    _R.APPOS: _R.MOD,
    _R.POSSESSIVE: _R.MOD,
    _R.POSS: _R.MOD,
    _R.PRT: _R.MOD,
    _R.PREP: _R.MOD,
    _R.AMOD: _R.MOD,
    _R.MWE: _R.MOD,
    _R.DISCOURSE: _R.MOD,
    _R.CONJ: _R.DEP,
    _R.CC: _R.DEP,
    _R.REF: _R.DEP,
    _R.SDEP: _R.DEP,
    _R.PARATAXIS: _R.DEP,
    _R.PUNCT: _R.DEP,
    _R.GOESWITH: _R.DEP,
}

_BY_LABEL: Dict[str, GrammaticalRelation] = {r.value: r for r in GrammaticalRelation}


@dataclass(frozen=True)
class DependencyEdge:
    """Typed edge governor -relation-> dependent"""
    governor: Token
    dependent: Token
    relation: GrammaticalRelation

    def sort_key(self) -> Tuple[int, int, str]:
        return (self.governor.index, self.dependent.index, self.relation.value)

    def __str__(self) -> str:
        return f"{self.relation.value}({self.governor}, {self.dependent})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "governor": self.governor.index,
            "dependent": self.dependent.index,
            "relation": self.relation.value
        }


class DependencyGraph:
    """
    Labelled directed multigraph over the tokens of one sentence.

    Edges are stored per governor and per dependent. All edge accessors
    return fresh, sorted lists, so callers may mutate the graph while
    iterating over a previously returned list.
    """

    def __init__(self, tokens: Optional[Iterable[Token]] = None):
        self._tokens: Dict[int, Token] = {}
        self._out: Dict[int, List[DependencyEdge]] = {}
        self._in: Dict[int, List[DependencyEdge]] = {}
        for token in tokens or []:
            self.add_token(token)

    def add_token(self, token: Token) -> Token:
        """Add a token (vertex) to the graph"""
        existing = self._tokens.get(token.index)
        if existing is not None and existing.to_dict() != token.to_dict():
            raise MalformedGraphError(f"Duplicate token index {token.index}", token=token)
        self._tokens[token.index] = token
        self._out.setdefault(token.index, [])
        self._in.setdefault(token.index, [])
        return token

    def get_token(self, index: int) -> Optional[Token]:
        """Get token by 1-based index"""
        return self._tokens.get(index)

    def contains(self, token: Token) -> bool:
        return token.index in self._tokens

    @property
    def tokens(self) -> List[Token]:
        """All tokens in sentence order"""
        return [self._tokens[i] for i in sorted(self._tokens)]

    def __len__(self) -> int:
        return len(self._tokens)

    def add_edge(
        self,
        governor: Token,
        dependent: Token,
        relation: GrammaticalRelation
    ) -> DependencyEdge:
        """Add an edge; both endpoints are added as vertices if missing"""
        self.add_token(governor)
        self.add_token(dependent)
        edge = DependencyEdge(governor, dependent, relation)
        if edge not in self._out[governor.index]:
            self._out[governor.index].append(edge)
            self._in[dependent.index].append(edge)
        return edge

    def remove_edge(self, edge: DependencyEdge) -> bool:
        """Remove an edge, returning False if it was not present"""
        out_edges = self._out.get(edge.governor.index)
        if not out_edges or edge not in out_edges:
            return False
        out_edges.remove(edge)
        self._in[edge.dependent.index].remove(edge)
        return True

    def remove_edges(self, edges: Iterable[DependencyEdge]):
        """Remove several edges"""
        for edge in list(edges):
            self.remove_edge(edge)

    def has_edge(self, edge: DependencyEdge) -> bool:
        return edge in self._out.get(edge.governor.index, [])

    def get_edge(self, governor: Token, dependent: Token) -> Optional[DependencyEdge]:
        """First edge between two tokens, if any"""
        for edge in self.outgoing_edges(governor):
            if edge.dependent == dependent:
                return edge
        return None

    def edges(self) -> List[DependencyEdge]:
        """All edges ordered by governor, dependent and relation label"""
        result = [e for edges in self._out.values() for e in edges]
        return sorted(result, key=DependencyEdge.sort_key)

    def __iter__(self) -> Iterator[DependencyEdge]:
        return iter(self.edges())

    def outgoing_edges(self, token: Token) -> List[DependencyEdge]:
        """Outgoing edges of a token sorted by dependent position"""
        edges = self._out.get(token.index, [])
        return sorted(edges, key=lambda e: (e.dependent.index, e.relation.value))

    def incoming_edges(self, token: Token) -> List[DependencyEdge]:
        """Incoming edges of a token sorted by governor position"""
        edges = self._in.get(token.index, [])
        return sorted(edges, key=lambda e: (e.governor.index, e.relation.value))

    def children(self, token: Token) -> List[Token]:
        """Distinct dependents in sentence order"""
        return sorted({e.dependent for e in self._out.get(token.index, [])})

    def parents(self, token: Token) -> List[Token]:
        """Distinct governors in sentence order"""
        return sorted({e.governor for e in self._in.get(token.index, [])})

    def parent(self, token: Token) -> Optional[Token]:
        """First governor of a token, if any"""
        parents = self.parents(token)
        return parents[0] if parents else None

    def siblings(self, token: Token) -> List[Token]:
        """Other dependents of this token's governors"""
        result: Set[Token] = set()
        for governor in self.parents(token):
            result.update(self.children(governor))
        result.discard(token)
        return sorted(result)

    def has_children(self, token: Token) -> bool:
        return bool(self._out.get(token.index))

    def relation_between(self, governor: Token, dependent: Token) -> Optional[GrammaticalRelation]:
        edge = self.get_edge(governor, dependent)
        return edge.relation if edge else None

    def descendants(self, token: Token) -> Set[Token]:
        """The token plus everything reachable from it along outgoing edges"""
        seen: Set[Token] = {token}
        stack = [token]
        while stack:
            current = stack.pop()
            for edge in self._out.get(current.index, []):
                if edge.dependent not in seen:
                    seen.add(edge.dependent)
                    stack.append(edge.dependent)
        return seen

    @property
    def roots(self) -> List[Token]:
        """Tokens with outgoing but no incoming edges"""
        return [
            t for t in self.tokens
            if not self._in.get(t.index) and self._out.get(t.index)
        ]

    def copy(self) -> "DependencyGraph":
        """Structural copy; tokens are shared, edge lists are not"""
        clone = DependencyGraph()
        clone._tokens = dict(self._tokens)
        clone._out = {i: list(edges) for i, edges in self._out.items()}
        clone._in = {i: list(edges) for i, edges in self._in.items()}
        return clone

    def describe(self) -> str:
        """One ``rel(gov-i, dep-j)`` line per edge"""
        return "\n".join(str(edge) for edge in self.edges())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "tokens": [t.to_dict() for t in self.tokens],
            "edges": [e.to_dict() for e in self.edges()]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DependencyGraph":
        """Build a graph from the ``to_dict`` layout"""
        graph = cls()
        for item in data.get("tokens", []):
            graph.add_token(Token(
                index=int(item["index"]),
                word=item["word"],
                lemma=item.get("lemma") or "",
                tag=item.get("tag") or ""
            ))
        for item in data.get("edges", []):
            governor = graph.get_token(int(item["governor"]))
            dependent = graph.get_token(int(item["dependent"]))
            if governor is None or dependent is None:
                raise MalformedGraphError(
                    f"Edge refers to unknown token: {item.get('governor')} -> {item.get('dependent')}"
                )
            graph.add_edge(governor, dependent, GrammaticalRelation.from_label(item["relation"]))
        return graph

    def __repr__(self) -> str:
        return f"DependencyGraph(tokens={len(self._tokens)}, edges={len(self.edges())})"
