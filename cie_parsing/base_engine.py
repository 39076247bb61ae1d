"""
CIE Parsing Base Engine - Abstract Base Class for Dependency Parsers

Raw text reaches the extractor through a parser engine that tokenizes,
tags and dependency-parses it, returning one ParsedSentence (with a
Stanford-labelled graph) per sentence.
"""

from __future__ import annotations
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from cie_io.conllu_io import ParsedSentence

logger = logging.getLogger(__name__)


class EngineStatus(Enum):
    """Status of a parser engine"""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    PROCESSING = "processing"
    ERROR = "error"
    SHUTDOWN = "shutdown"


@dataclass
class ParserConfig:
    """Base configuration for parser engines"""
    language: str = "en"

    use_gpu: bool = False
    keep_punctuation: bool = False
    download_models: bool = True

    custom_options: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "language": self.language,
            "use_gpu": self.use_gpu,
            "keep_punctuation": self.keep_punctuation,
            "download_models": self.download_models,
            "custom_options": self.custom_options
        }


class ParserEngine(ABC):
    """Abstract base class for parser engines"""

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self._status = EngineStatus.UNINITIALIZED
        self._lock = threading.Lock()
        self._initialized = False
        self._sentences_parsed = 0

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name"""
        pass

    @property
    @abstractmethod
    def version(self) -> str:
        """Engine version"""
        pass

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status == EngineStatus.READY

    @abstractmethod
    def initialize(self) -> bool:
        """Load models; True on success"""
        pass

    @abstractmethod
    def shutdown(self):
        """Release models"""
        pass

    @abstractmethod
    def _parse_text(self, text: str) -> List[ParsedSentence]:
        pass

    def parse(self, text: str) -> List[ParsedSentence]:
        """Split, tag and parse raw text"""
        if not self.is_ready:
            self.initialize()

        with self._lock:
            self._status = EngineStatus.PROCESSING
        try:
            sentences = self._parse_text(text)
            self._sentences_parsed += len(sentences)
            return sentences
        finally:
            with self._lock:
                if self._status == EngineStatus.PROCESSING:
                    self._status = EngineStatus.READY

    def get_status_info(self) -> Dict[str, Any]:
        """Get detailed status information"""
        return {
            "name": self.name,
            "version": self.version,
            "status": self._status.value,
            "sentences_parsed": self._sentences_parsed,
            "config": self.config.to_dict()
        }

    def __enter__(self):
        """Enter context manager"""
        if not self.is_ready:
            self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager"""
        self.shutdown()


def create_engine(name: str, **kwargs) -> ParserEngine:
    """Factory function to create parser engines"""
    from cie_parsing.stanza_engine import StanzaConfig, StanzaEngine

    engine_map = {
        "stanza": (StanzaEngine, StanzaConfig),
    }

    entry = engine_map.get(name.lower())
    if entry is None:
        raise ValueError(f"Unknown engine type: {name}")

    engine_class, config_class = entry
    return engine_class(config_class(**kwargs))
