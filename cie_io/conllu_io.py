"""
CIE IO CoNLL-U - Reading dependency parses from CoNLL-U and CoNLL-X

This module turns CoNLL-U (UD treebanks, Stanza output) and CoNLL-X
(Stanford-labelled parses) text into dependency graphs ready for clause
detection.

Supports:
- Sentence metadata comments (sent_id, text)
- Multi-word token ranges and empty nodes (skipped)
- UD labels (converted to Stanford labels) and Stanford labels (used as is)
- XPOS tags, or Penn Treebank tags derived from UPOS and features
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Any, TextIO, Union

from cie_core.exceptions import InputFormatError
from cie_core.models import DependencyGraph, GrammaticalRelation, Token
from cie_io.format_converters import UDToStanfordConverter, is_ud_label, upos_to_ptb

logger = logging.getLogger(__name__)


CONLLU_FIELD_COUNT = 10
CONLLU_FIELDS = ["ID", "FORM", "LEMMA", "UPOS", "XPOS", "FEATS", "HEAD", "DEPREL", "DEPS", "MISC"]

SCHEMES = ("auto", "stanford", "ud")


@dataclass
class CoNLLURow:
    """One word line"""
    index: int
    form: str
    lemma: Optional[str] = None
    upos: Optional[str] = None
    xpos: Optional[str] = None
    feats: Dict[str, str] = field(default_factory=dict)
    head: Optional[int] = None
    deprel: Optional[str] = None

    @property
    def tag(self) -> str:
        """Penn Treebank tag: XPOS if present, else derived from UPOS"""
        if self.xpos:
            return self.xpos
        return upos_to_ptb(self.upos, self.feats)

    def to_token(self) -> Token:
        return Token(index=self.index, word=self.form, lemma=self.lemma or "", tag=self.tag)


@dataclass
class ParsedSentence:
    """A sentence with its dependency graph"""
    sentence_id: str
    text: str
    graph: DependencyGraph
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "sentence_id": self.sentence_id,
            "text": self.text,
            "graph": self.graph.to_dict(),
            "metadata": self.metadata
        }


class CoNLLUReader:
    """Reader for CoNLL-U and CoNLL-X dependency parses"""

    def __init__(self, scheme: str = "auto", keep_punctuation: bool = False, strict: bool = False):
        if scheme not in SCHEMES:
            raise ValueError(f"Unknown annotation scheme: {scheme}")
        self.scheme = scheme
        self.keep_punctuation = keep_punctuation
        self.strict = strict
        self._converter = UDToStanfordConverter(keep_punctuation=keep_punctuation)
        self._line_number = 0
        self._sentence_count = 0

    def read_file(self, file_path: Union[str, Path]) -> List[ParsedSentence]:
        """Read a CoNLL-U file"""
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            return list(self.iter_sentences(f))

    def read_string(self, conllu_string: str) -> List[ParsedSentence]:
        """Read CoNLL-U text"""
        return list(self.iter_sentences(conllu_string))

    def iter_sentences(self, source: Union[str, TextIO]) -> Iterator[ParsedSentence]:
        """Iterate over the sentences of CoNLL-U text or an open file"""
        self._line_number = 0
        self._sentence_count = 0
        lines = source.split("\n") if isinstance(source, str) else source

        current_lines: List[str] = []
        start_line = 1
        for line in lines:
            self._line_number += 1
            line = line.rstrip("\r\n")

            if line.strip() == "":
                if current_lines:
                    sentence = self._parse_sentence(current_lines, start_line)
                    if sentence:
                        yield sentence
                    current_lines = []
            else:
                if not current_lines:
                    start_line = self._line_number
                current_lines.append(line)

        if current_lines:
            sentence = self._parse_sentence(current_lines, start_line)
            if sentence:
                yield sentence

    def _parse_sentence(self, lines: List[str], start_line: int) -> Optional[ParsedSentence]:
        """Parse a single sentence from lines"""
        metadata: Dict[str, Any] = {}
        rows: List[CoNLLURow] = []

        for offset, line in enumerate(lines):
            line_number = start_line + offset
            if line.startswith("#"):
                key, value = self._parse_comment(line)
                if key:
                    metadata[key] = value
                continue

            token_id = line.split("\t", 1)[0]
            if "-" in token_id or "." in token_id:
                continue

            row = self._parse_row(line, line_number)
            if row:
                rows.append(row)

        if not rows:
            return None

        self._sentence_count += 1
        sentence_id = str(metadata.get("sent_id") or self._sentence_count)
        text = metadata.get("text") or " ".join(r.form for r in rows)

        graph = self._build_graph(rows, start_line)
        return ParsedSentence(sentence_id=sentence_id, text=text, graph=graph, metadata=metadata)

    def _parse_comment(self, line: str):
        """Parse comment line"""
        line = line[1:].strip()

        if "=" in line:
            key, value = line.split("=", 1)
            return key.strip(), value.strip()

        return None, line

    def _parse_row(self, line: str, line_number: int) -> Optional[CoNLLURow]:
        """Parse a single word line"""
        fields = line.split("\t")

        if len(fields) != CONLLU_FIELD_COUNT:
            if self.strict:
                raise InputFormatError(
                    f"expected {CONLLU_FIELD_COUNT} fields, got {len(fields)}", line_number
                )
            if len(fields) < 8:
                logger.warning(f"Skipping line {line_number}: only {len(fields)} fields")
                return None
            while len(fields) < CONLLU_FIELD_COUNT:
                fields.append("_")

        try:
            index = int(fields[0])
        except ValueError:
            if self.strict:
                raise InputFormatError(f"invalid token id '{fields[0]}'", line_number)
            logger.warning(f"Skipping line {line_number}: invalid token id '{fields[0]}'")
            return None

        head = None
        if fields[6] != "_":
            try:
                head = int(fields[6])
            except ValueError:
                if self.strict:
                    raise InputFormatError(f"invalid head '{fields[6]}'", line_number)
                logger.warning(f"Ignoring invalid head '{fields[6]}' at line {line_number}")

        return CoNLLURow(
            index=index,
            form=fields[1],
            lemma=fields[2] if fields[2] != "_" else None,
            upos=fields[3] if fields[3] != "_" else None,
            xpos=fields[4] if fields[4] != "_" else None,
            feats=self._parse_feats(fields[5]),
            head=head,
            deprel=fields[7] if fields[7] != "_" else None
        )

    def _parse_feats(self, feats_str: str) -> Dict[str, str]:
        """Parse feature string"""
        feats = {}
        if feats_str and feats_str != "_":
            for feat in feats_str.split("|"):
                if "=" in feat:
                    key, value = feat.split("=", 1)
                    feats[key] = value
        return feats

    def _uses_ud(self, rows: List[CoNLLURow]) -> bool:
        if self.scheme == "ud":
            return True
        if self.scheme == "stanford":
            return False
        return any(is_ud_label(r.deprel or "") for r in rows)

    def _build_graph(self, rows: List[CoNLLURow], start_line: int) -> DependencyGraph:
        tokens = [r.to_token() for r in rows]
        known = {r.index for r in rows}

        for row in rows:
            if row.head is None or row.head == 0 or row.head in known:
                continue
            if self.strict:
                raise InputFormatError(f"token {row.index} has unknown head {row.head}", start_line)
            logger.warning(f"Ignoring edge to unknown head {row.head} of token {row.index}")
            row.head = None

        if self._uses_ud(rows):
            return self._converter.convert(
                tokens,
                [r.head or 0 for r in rows],
                [r.deprel or "dep" for r in rows],
                [r.feats for r in rows]
            )

        graph = DependencyGraph(tokens)
        by_index = {t.index: t for t in tokens}
        for row, token in zip(rows, tokens):
            if not row.head:
                continue
            relation = GrammaticalRelation.from_label(row.deprel or "dep")
            if relation is GrammaticalRelation.PUNCT and not self.keep_punctuation:
                continue
            graph.add_edge(by_index[row.head], token, relation)
        return graph


def parse_conllu_string(
    conllu_string: str,
    scheme: str = "auto",
    keep_punctuation: bool = False
) -> List[ParsedSentence]:
    """Parse CoNLL-U text"""
    reader = CoNLLUReader(scheme=scheme, keep_punctuation=keep_punctuation)
    return reader.read_string(conllu_string)


def parse_conllu_file(
    file_path: Union[str, Path],
    scheme: str = "auto",
    keep_punctuation: bool = False
) -> List[ParsedSentence]:
    """Parse a CoNLL-U file"""
    reader = CoNLLUReader(scheme=scheme, keep_punctuation=keep_punctuation)
    return reader.read_file(file_path)
