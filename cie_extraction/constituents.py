"""
CIE Extraction Constituents - Addressable slots of a clause

A constituent is one of three closed variants:

- IndexedConstituent: a span of a dependency graph rooted at a token, with
  additional attachment points and tokens pruned at render time
- TextConstituent: a literal string with no token (synthesized verbs)
- XcompConstituent: a span that also owns the clauses detected inside an
  open clausal complement
"""

from __future__ import annotations
from typing import ClassVar, Dict, Iterable, List, Optional, Any, Set, TYPE_CHECKING
from enum import Enum

from cie_core.models import DependencyGraph, Token
from cie_extraction.relations import is_any_prep, is_rel, remove_edges

if TYPE_CHECKING:
    from cie_extraction.clause import Clause


class ConstituentKind(Enum):
    """Closed set of constituent variants"""
    GRAPH_SPAN = "graph_span"
    LITERAL = "literal"
    EMBEDDED_CLAUSE = "embedded_clause"


class Role(Enum):
    """Role of a constituent within its clause"""
    SUBJECT = "subject"
    VERB = "verb"
    COMPLEMENT = "complement"
    DIRECT_OBJECT = "direct_object"
    INDIRECT_OBJECT = "indirect_object"
    CLAUSAL_COMPLEMENT = "clausal_complement"
    OPEN_CLAUSAL_COMPLEMENT = "open_clausal_complement"
    ADJECTIVAL_COMPLEMENT = "adjectival_complement"
    ADVERBIAL = "adverbial"
    UNKNOWN = "unknown"


class Flag(Enum):
    """Whether a constituent must, may or must not appear in a proposition"""
    REQUIRED = "required"
    OPTIONAL = "optional"
    IGNORE = "ignore"


ROLE_CODES: Dict[Role, str] = {
    Role.SUBJECT: "S",
    Role.VERB: "V",
    Role.COMPLEMENT: "C",
    Role.DIRECT_OBJECT: "O",
    Role.INDIRECT_OBJECT: "IO",
    Role.CLAUSAL_COMPLEMENT: "CCOMP",
    Role.OPEN_CLAUSAL_COMPLEMENT: "XCOMP",
    Role.ADJECTIVAL_COMPLEMENT: "ACOMP",
    Role.ADVERBIAL: "A",
    Role.UNKNOWN: "?",
}


class Constituent:
    """Base of the constituent variants"""

    kind: ClassVar[ConstituentKind]

    def __init__(self, role: Role = Role.UNKNOWN):
        self.role = role

    @property
    def root_text(self) -> str:
        raise NotImplementedError

    @property
    def root_index(self) -> Optional[int]:
        """Sentence position of the root token, None for literals"""
        return None

    def clone(self) -> "Constituent":
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "kind": self.kind.value,
            "role": self.role.value,
            "text": self.root_text
        }


class TextConstituent(Constituent):
    """A literal string standing in for a constituent"""

    kind = ConstituentKind.LITERAL

    def __init__(self, text: str, role: Role = Role.UNKNOWN):
        super().__init__(role)
        self.text = text

    @property
    def root_text(self) -> str:
        return self.text

    def clone(self) -> "TextConstituent":
        return TextConstituent(self.text, self.role)

    def describe(self) -> str:
        return f'"{self.text}"'

    def __repr__(self) -> str:
        return f"TextConstituent({self.text!r}, {self.role.name})"


class IndexedConstituent(Constituent):
    """
    A constituent backed by a dependency graph.

    ``graph`` is the (possibly rewritten) graph the span lives in;
    ``sentence_graph`` is the untouched sentence graph, used to decide
    whether the span is a prepositional phrase. ``additional_tokens`` are
    further roots whose descendants belong to the span; ``excluded_tokens``
    are cut from the span together with their subtrees.
    """

    kind = ConstituentKind.GRAPH_SPAN

    def __init__(
        self,
        graph: DependencyGraph,
        root: Token,
        role: Role = Role.UNKNOWN,
        additional_tokens: Optional[Iterable[Token]] = None,
        excluded_tokens: Optional[Iterable[Token]] = None,
        sentence_graph: Optional[DependencyGraph] = None
    ):
        super().__init__(role)
        self.graph = graph
        self.root = root
        self.additional_tokens: Set[Token] = set(additional_tokens or [])
        self.excluded_tokens: Set[Token] = set(excluded_tokens or [])
        self.sentence_graph = sentence_graph if sentence_graph is not None else graph

    @property
    def root_text(self) -> str:
        return self.root.word

    @property
    def root_index(self) -> Optional[int]:
        return self.root.index

    def is_prepositional_phrase(self) -> bool:
        """True if the root hangs off its governor by a prepositional or rel edge"""
        for edge in self.sentence_graph.incoming_edges(self.root):
            if is_any_prep(edge) or is_rel(edge):
                return True
        return False

    def reduced_graph(self) -> DependencyGraph:
        """Copy of the graph with excluded tokens cut away below every root"""
        reduced = self.graph.copy()
        remove_edges(reduced, self.root, self.excluded_tokens)
        for token in sorted(self.additional_tokens):
            remove_edges(reduced, token, self.excluded_tokens)
        return reduced

    def _copy_into(self, other: "IndexedConstituent") -> "IndexedConstituent":
        other.additional_tokens = set(self.additional_tokens)
        other.excluded_tokens = set(self.excluded_tokens)
        return other

    def clone(self) -> "IndexedConstituent":
        return self._copy_into(
            IndexedConstituent(self.graph, self.root, self.role, sentence_graph=self.sentence_graph)
        )

    def with_graph(self, graph: DependencyGraph, root: Optional[Token] = None) -> "IndexedConstituent":
        """Clone bound to another graph, optionally at another root"""
        clone = self.clone()
        clone.graph = graph
        if root is not None:
            clone.root = root
        return clone

    def describe(self) -> str:
        return f"{self.root.word}@{self.root.index}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = super().to_dict()
        result["root"] = self.root.index
        if self.additional_tokens:
            result["additional"] = sorted(t.index for t in self.additional_tokens)
        if self.excluded_tokens:
            result["excluded"] = sorted(t.index for t in self.excluded_tokens)
        return result

    def __repr__(self) -> str:
        return f"IndexedConstituent({self.describe()}, {self.role.name})"


class XcompConstituent(IndexedConstituent):
    """Open clausal complement together with the clauses detected inside it"""

    kind = ConstituentKind.EMBEDDED_CLAUSE

    def __init__(
        self,
        graph: DependencyGraph,
        root: Token,
        clauses: Optional[List["Clause"]] = None,
        role: Role = Role.OPEN_CLAUSAL_COMPLEMENT,
        additional_tokens: Optional[Iterable[Token]] = None,
        excluded_tokens: Optional[Iterable[Token]] = None,
        sentence_graph: Optional[DependencyGraph] = None
    ):
        super().__init__(graph, root, role, additional_tokens, excluded_tokens, sentence_graph)
        self.clauses: List["Clause"] = list(clauses or [])

    def clone(self) -> "XcompConstituent":
        return self._copy_into(XcompConstituent(
            self.graph, self.root, self.clauses, self.role, sentence_graph=self.sentence_graph
        ))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = super().to_dict()
        result["clauses"] = [c.to_dict() for c in self.clauses]
        return result

    def __repr__(self) -> str:
        return f"XcompConstituent({self.describe()}, {len(self.clauses)} clauses)"
