"""
CIE Core - Clausal Information Extraction Core Module

This package provides the dependency-graph data model, the error taxonomy,
extraction options with their word-list dictionaries, runtime settings and
logging infrastructure shared by all other packages.

Modules:
    models: Token, grammatical relation hierarchy, dependency graph
    exceptions: Error taxonomy
    config_runtime: Extraction options, dictionaries and runtime settings
    logging_monitoring: Console/JSON logging and operation timing
"""

from cie_core.models import (
    Token,
    GrammaticalRelation,
    DependencyEdge,
    DependencyGraph,
)

from cie_core.exceptions import (
    ClausalIEError,
    MalformedGraphError,
    RecursionLimitError,
    UnsupportedConstituentError,
    ConfigurationError,
    InputFormatError,
    ParserUnavailableError,
)

from cie_core.config_runtime import (
    Dictionary,
    ExtractionOptions,
    RuntimeConfig,
    get_runtime_config,
    get_setting,
    load_options,
)

from cie_core.logging_monitoring import (
    LogLevel,
    ExtractionLogger,
    configure_logging,
    get_extraction_logger,
)

__version__ = "1.0.0"

__all__ = [
    "Token",
    "GrammaticalRelation",
    "DependencyEdge",
    "DependencyGraph",
    "ClausalIEError",
    "MalformedGraphError",
    "RecursionLimitError",
    "UnsupportedConstituentError",
    "ConfigurationError",
    "InputFormatError",
    "ParserUnavailableError",
    "Dictionary",
    "ExtractionOptions",
    "RuntimeConfig",
    "get_runtime_config",
    "get_setting",
    "load_options",
    "LogLevel",
    "ExtractionLogger",
    "configure_logging",
    "get_extraction_logger",
]
