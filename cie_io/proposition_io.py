"""
CIE IO Propositions - Writing extraction output

Two formats:

- tsv: one line per proposition, ``id<TAB>"field1"<TAB>"field2"...``,
  optionally preceded by the sentence and by ``#`` comment lines
  describing the graph and the detected clauses (verbose mode)
- json: one JSON object per sentence (JSON lines)
"""

from __future__ import annotations
import json
import logging
import sys
from typing import List, Optional, TextIO

from cie_core.config_runtime import ExtractionOptions
from cie_extraction.extractor import ExtractionResult, SentenceExtraction

logger = logging.getLogger(__name__)

FORMATS = ("tsv", "json")

TSV_ESCAPES = {"\\": "\\\\", '"': '\\"', "\t": "\\t", "\n": "\\n", "\r": "\\r"}


def quote_field(text: str) -> str:
    """Double-quoted tsv field; backslashes, quotes, tabs and line breaks are escaped"""
    return '"' + "".join(TSV_ESCAPES.get(ch, ch) for ch in text) + '"'



class PropositionWriter:
    """Formats sentence extractions for output"""

    def __init__(
        self,
        fmt: str = "tsv",
        print_sentence: bool = False,
        verbose: bool = False,
        options: Optional[ExtractionOptions] = None
    ):
        if fmt not in FORMATS:
            raise ValueError(f"Unknown output format: {fmt}")
        self.fmt = fmt
        self.print_sentence = print_sentence
        self.verbose = verbose
        self.options = options or ExtractionOptions()

    def header(self) -> List[str]:
        """Option listing printed once in verbose tsv mode"""
        if self.fmt == "tsv" and self.verbose:
            return self.options.describe("# ").splitlines()
        return []

    def format_sentence(self, sentence: SentenceExtraction, line_number: Optional[int] = None) -> List[str]:
        """Output lines for one sentence"""
        if self.fmt == "json":
            return [json.dumps(sentence.to_dict(self.options), ensure_ascii=False)]

        lines: List[str] = []
        if self.verbose:
            location = f"# Line {line_number}" if line_number is not None else "# Sentence"
            lines.append(f"{location} (id {sentence.sentence_id}): {sentence.text or ''}")
            graph_lines = sentence.graph.describe().splitlines() or [""]
            lines.append(f"# Semantic graph: {graph_lines[0]}")
            lines.extend(f"#                 {g}" for g in graph_lines[1:])
            lines.append(f"#   Detected {len(sentence.clauses)} clause(s).")
            lines.extend(f"#   - {c.describe(self.options)}" for c in sentence.clauses)

        if self.print_sentence and sentence.text:
            lines.append(sentence.text)

        for proposition in sentence.propositions:
            fields = "\t".join(quote_field(f) for f in proposition.fields)
            lines.append(f"{sentence.sentence_id}\t{fields}")
        return lines

    def write_sentence(
        self,
        sentence: SentenceExtraction,
        stream: Optional[TextIO] = None,
        line_number: Optional[int] = None
    ):
        stream = stream or sys.stdout
        for line in self.format_sentence(sentence, line_number):
            stream.write(line + "\n")

    def write_result(self, result: ExtractionResult, stream: Optional[TextIO] = None):
        """Write every sentence of a batch result"""
        stream = stream or sys.stdout
        for line in self.header():
            stream.write(line + "\n")
        for sentence in result.sentences:
            self.write_sentence(sentence, stream)
        logger.debug(f"Wrote {result.total_propositions} propositions as {self.fmt}")
