"""
CIE Core Exceptions - Error taxonomy for clause detection and extraction

Detection errors are fatal for one sentence only; configuration errors are
fatal at startup; renderer errors signal an internal invariant violation.
"""

from __future__ import annotations
from typing import Any, Optional


class ClausalIEError(Exception):
    """Base class for all extraction errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


# --- Per-sentence errors ---

class MalformedGraphError(ClausalIEError):
    """Raised when a dependency graph lacks a structural property detection relies on."""
    def __init__(self, message: str, sentence_id: Optional[str] = None, token: Any = None):
        self.sentence_id = sentence_id
        self.token = token
        if token is not None:
            message = f"{message} (at {token})"
        super().__init__(message)


class RecursionLimitError(MalformedGraphError):
    """Raised when clause nesting or coordination recursion exceeds the configured ceiling."""
    def __init__(self, depth: int, token: Any = None):
        self.depth = depth
        super().__init__(f"Recursion depth {depth} exceeded", token=token)


class InputFormatError(ClausalIEError):
    """Raised when CoNLL input or a graph payload cannot be read."""
    def __init__(self, reason: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            reason = f"line {line_number}: {reason}"
        super().__init__(f"Invalid input: {reason}")


# --- Internal errors ---

class UnsupportedConstituentError(ClausalIEError):
    """Raised when the renderer meets a constituent kind it does not know."""
    def __init__(self, kind: Any):
        super().__init__(f"Constituent kind '{kind}' is not supported by the renderer.")


# --- Startup errors ---

class ConfigurationError(ClausalIEError):
    """Raised when an option or dictionary is missing or invalid."""
    def __init__(self, reason: str):
        super().__init__(f"Invalid configuration: {reason}")


class ParserUnavailableError(ClausalIEError):
    """Raised when a raw-text parser engine cannot be initialised."""
    def __init__(self, engine: str, details: str = ""):
        self.engine = engine
        message = f"Parser engine '{engine}' is not available"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)
