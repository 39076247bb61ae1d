"""
CIE Parsing - Raw Text Parser Engines

Engines turn raw text into Stanford-labelled dependency graphs.

Modules:
    base_engine: Engine interface, status and factory
    stanza_engine: Stanza pipeline adapter
"""

from cie_parsing.base_engine import (
    EngineStatus,
    ParserConfig,
    ParserEngine,
    create_engine,
)

from cie_parsing.stanza_engine import (
    StanzaConfig,
    StanzaEngine,
    create_stanza_engine,
)

__version__ = "1.0.0"

__all__ = [
    "EngineStatus",
    "ParserConfig",
    "ParserEngine",
    "create_engine",
    "StanzaConfig",
    "StanzaEngine",
    "create_stanza_engine",
]
