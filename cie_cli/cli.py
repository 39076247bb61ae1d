"""
CIE CLI - Main Command Line Interface

This module provides the ``cie`` command: extraction from CoNLL-U
parses, extraction from raw text through a parser engine, option
inspection and the HTTP server.
"""

from __future__ import annotations
import logging
import sys
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, TextIO, Tuple
import argparse

from cie_core import __version__
from cie_core.config_runtime import ExtractionOptions, get_setting, load_options
from cie_core.logging_monitoring import configure_logging, get_extraction_logger
from cie_extraction.extractor import ClausalExtractor
from cie_io.conllu_io import SCHEMES, CoNLLUReader, ParsedSentence
from cie_io.proposition_io import FORMATS, PropositionWriter

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, debug: bool = False, json_logs: bool = False):
    """Setup logging configuration"""
    configure_logging(verbose=verbose, debug=debug, json_format=json_logs)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        prog="cie",
        description="Clause-based open information extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cie extract -f parses.conllu -o propositions.tsv
  cie extract -f parses.conllu --format json --nary
  cie parse -f sentences.txt -l -s
  cie config show -c settings.json
  cie server start --port 8000
        """
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output"
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write log records as JSON"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    add_extract_commands(subparsers)
    add_parse_commands(subparsers)
    add_config_commands(subparsers)
    add_server_commands(subparsers)

    return parser


def _add_output_arguments(command_parser):
    command_parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    command_parser.add_argument("-c", "--config", help="JSON settings file")
    command_parser.add_argument("--format", choices=list(FORMATS), default="tsv", help="Output format")
    command_parser.add_argument("--nary", action="store_true", help="Generate n-ary propositions")
    command_parser.add_argument("--lemmatize", action="store_true", help="Lemmatize verbs")
    command_parser.add_argument("-s", "--print-sentence", action="store_true", help="Print each sentence before its propositions")
    command_parser.add_argument("--show-clauses", action="store_true", help="Print graphs and detected clauses as comments")


def add_extract_commands(subparsers):
    """Add CoNLL-U extraction command"""
    extract_parser = subparsers.add_parser("extract", help="Extract propositions from CoNLL-U parses")
    extract_parser.add_argument("-f", "--file", help="CoNLL-U input file (default: stdin)")
    extract_parser.add_argument("--scheme", choices=list(SCHEMES), default="auto", help="Dependency label scheme")
    extract_parser.add_argument("--keep-punctuation", action="store_true", help="Keep punctuation edges")
    _add_output_arguments(extract_parser)


def add_parse_commands(subparsers):
    """Add raw-text extraction command"""
    parse_parser = subparsers.add_parser("parse", help="Parse raw sentences and extract propositions")
    parse_parser.add_argument("-f", "--file", help="Input file, one sentence per line (default: stdin)")
    parse_parser.add_argument("-l", "--sentence-ids", action="store_true", help="Input lines are <id><TAB><sentence>")
    parse_parser.add_argument("--language", default=None, help="Parser language")
    parse_parser.add_argument("--engine", default=None, help="Parser engine")
    _add_output_arguments(parse_parser)


def add_config_commands(subparsers):
    """Add configuration commands"""
    config_parser = subparsers.add_parser("config", help="Configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    show_parser = config_subparsers.add_parser("show", help="Show effective options")
    show_parser.add_argument("-c", "--config", help="JSON settings file")


def add_server_commands(subparsers):
    """Add server commands"""
    server_parser = subparsers.add_parser("server", help="Server operations")
    server_subparsers = server_parser.add_subparsers(dest="server_command")

    start_parser = server_subparsers.add_parser("start", help="Start server")
    start_parser.add_argument("--host", default=None, help="Host to bind")
    start_parser.add_argument("--port", type=int, default=None, help="Port to bind")


@contextmanager
def open_input(path: Optional[str]) -> Iterator[TextIO]:
    if path:
        with open(path, "r", encoding="utf-8") as f:
            yield f
    else:
        yield sys.stdin


@contextmanager
def open_output(path: Optional[str]) -> Iterator[TextIO]:
    if path:
        with open(path, "w", encoding="utf-8") as f:
            yield f
    else:
        yield sys.stdout


def build_options(args) -> ExtractionOptions:
    """Options from the settings file plus command line flags"""
    options = load_options(getattr(args, "config", None))
    changes = {}
    if getattr(args, "nary", False):
        changes["nary"] = True
    if getattr(args, "lemmatize", False):
        changes["lemmatize"] = True
    return options.replace(**changes) if changes else options


def build_writer(args, options: ExtractionOptions) -> PropositionWriter:
    return PropositionWriter(
        fmt=args.format,
        print_sentence=args.print_sentence,
        verbose=args.verbose or args.show_clauses,
        options=options
    )


def read_sentence_lines(stream: TextIO, with_ids: bool = False) -> Iterator[Tuple[int, str, str]]:
    """
    Yield (line_number, sentence_id, sentence) for every input sentence.

    Blank lines and lines starting with ``#`` are skipped. Without ids, the
    sentence id is the line number.
    """
    for line_number, line in enumerate(stream, 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if with_ids:
            if "\t" not in line:
                logger.warning(f"Skipping line {line_number}: expected <id><TAB><sentence>")
                continue
            sentence_id, sentence = line.split("\t", 1)
            yield line_number, sentence_id.strip(), sentence.strip()
        else:
            yield line_number, str(line_number), line


def handle_extract_command(args):
    """Handle CoNLL-U extraction"""
    options = build_options(args)
    writer = build_writer(args, options)
    reader = CoNLLUReader(scheme=args.scheme, keep_punctuation=args.keep_punctuation)
    extractor = ClausalExtractor(options)

    timer = get_extraction_logger(__name__)
    source_name = args.file or "stdin"
    with timer.context(command="extract", source=source_name), open_input(args.file) as source:
        with timer.timed(f"extraction from {source_name}"):
            result = extractor.extract_batch(reader.iter_sentences(source))

    with open_output(args.output) as out:
        writer.write_result(result, out)

    logger.info(
        f"{result.total_sentences} sentences, {result.total_clauses} clauses, "
        f"{result.total_propositions} propositions in {result.processing_time_ms:.1f} ms"
    )


def handle_parse_command(args):
    """Handle raw-text extraction"""
    from cie_parsing.base_engine import create_engine

    options = build_options(args)
    writer = build_writer(args, options)
    extractor = ClausalExtractor(options)

    engine = create_engine(
        args.engine or get_setting("parser", "default_engine", "stanza"),
        language=args.language or get_setting("parser", "language", "en"),
        use_gpu=get_setting("parser", "use_gpu", False),
        download_models=get_setting("parser", "download_models", True)
    )

    parsed: List[ParsedSentence] = []
    line_of: Dict[str, int] = {}
    with engine, open_input(args.file) as source:
        for line_number, sentence_id, sentence in read_sentence_lines(source, args.sentence_ids):
            for position, parse in enumerate(engine.parse(sentence)):
                parse.sentence_id = sentence_id if position == 0 else f"{sentence_id}-{position + 1}"
                parse.text = sentence if position == 0 else parse.text
                line_of[parse.sentence_id] = line_number
                parsed.append(parse)

    result = extractor.extract_batch(parsed)

    with open_output(args.output) as out:
        for line in writer.header():
            out.write(line + "\n")
        for sentence in result.sentences:
            writer.write_sentence(sentence, out, line_of.get(sentence.sentence_id))

    logger.info(f"{result.total_propositions} propositions from {len(parsed)} parsed sentences")


def handle_config_command(args):
    """Handle configuration commands"""
    if args.config_command == "show":
        options = load_options(args.config)
        print(options.describe("# "))

    else:
        print("Usage: cie config <command>")
        print("Commands: show")


def handle_server_command(args):
    """Handle server commands"""
    if args.server_command == "start":
        import uvicorn
        from cie_api.app import APIConfig, create_app

        host = args.host or get_setting("server", "host", "127.0.0.1")
        port = args.port or get_setting("server", "port", 8000)
        print(f"Starting server on {host}:{port}...")

        app = create_app(APIConfig(debug=bool(args.debug)))
        uvicorn.run(app, host=host, port=port)

    else:
        print("Usage: cie server <command>")
        print("Commands: start")


def cli(args: Optional[List[str]] = None):
    """Main CLI entry point"""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(parsed_args.verbose, parsed_args.debug, parsed_args.json_logs)

    if not parsed_args.command:
        parser.print_help()
        return 0

    try:
        if parsed_args.command == "extract":
            handle_extract_command(parsed_args)
        elif parsed_args.command == "parse":
            handle_parse_command(parsed_args)
        elif parsed_args.command == "config":
            handle_config_command(parsed_args)
        elif parsed_args.command == "server":
            handle_server_command(parsed_args)
        else:
            parser.print_help()

        return 0

    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=parsed_args.debug)
        print(f"Error: {e}")
        return 1


def main():
    """Main entry point"""
    sys.exit(cli())


if __name__ == "__main__":
    main()
