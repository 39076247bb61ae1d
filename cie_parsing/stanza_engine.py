"""
CIE Parsing Stanza Engine - Stanza Integration

Stanza produces Universal Dependencies analyses; every sentence is passed
through the UD to Stanford converter before it reaches clause detection.
Stanza itself is imported lazily so the rest of the package works without it.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from cie_core.exceptions import ParserUnavailableError
from cie_core.models import Token
from cie_io.conllu_io import ParsedSentence
from cie_io.format_converters import UDToStanfordConverter, upos_to_ptb
from cie_parsing.base_engine import EngineStatus, ParserConfig, ParserEngine

logger = logging.getLogger(__name__)


@dataclass
class StanzaConfig(ParserConfig):
    """Configuration for Stanza engine"""
    package: Optional[str] = None

    processors: str = "tokenize,pos,lemma,depparse"

    tokenize_pretokenized: bool = False

    model_dir: Optional[str] = None

    logging_level: str = "WARN"

    def get_pipeline_config(self) -> Dict[str, Any]:
        """Get Stanza pipeline configuration"""
        config = {
            "lang": self.language,
            "processors": self.processors,
            "tokenize_pretokenized": self.tokenize_pretokenized,
            "use_gpu": self.use_gpu,
            "logging_level": self.logging_level,
        }

        if self.package:
            config["package"] = self.package

        if self.model_dir:
            config["dir"] = self.model_dir

        return config


def _parse_feats(feats: Optional[str]) -> Dict[str, str]:
    result = {}
    for feat in (feats or "").split("|"):
        if "=" in feat:
            key, value = feat.split("=", 1)
            result[key] = value
    return result


class StanzaEngine(ParserEngine):
    """Stanza-based dependency parser"""

    def __init__(self, config: Optional[StanzaConfig] = None):
        super().__init__(config or StanzaConfig())
        self._nlp = None
        self._stanza_version = None
        self._converter = UDToStanfordConverter(keep_punctuation=self.config.keep_punctuation)

    @property
    def name(self) -> str:
        return "StanzaEngine"

    @property
    def version(self) -> str:
        if self._stanza_version:
            return f"Stanza {self._stanza_version}"
        return "Stanza (not loaded)"

    def initialize(self) -> bool:
        """Initialize Stanza pipeline"""
        if self._initialized and self._nlp is not None:
            return True

        try:
            import stanza
        except ImportError:
            self._status = EngineStatus.ERROR
            logger.error("Stanza is not installed. Install with: pip install stanza")
            raise ParserUnavailableError("stanza", "install with: pip install stanza")

        self._stanza_version = getattr(stanza, "__version__", None)
        self._status = EngineStatus.INITIALIZING

        config = self.config
        pipeline_config = config.get_pipeline_config()

        model_dir = pipeline_config.get("dir")
        if model_dir:
            os.makedirs(model_dir, exist_ok=True)

        try:
            try:
                self._nlp = stanza.Pipeline(**pipeline_config)
            except Exception as load_error:
                if not config.download_models:
                    raise
                logger.info(f"Downloading Stanza model for {config.language} ({load_error})")
                stanza.download(
                    config.language,
                    package=pipeline_config.get("package", "default"),
                    model_dir=model_dir
                )
                self._nlp = stanza.Pipeline(**pipeline_config)
        except Exception as e:
            self._status = EngineStatus.ERROR
            logger.exception(f"Failed to initialize Stanza: {e}")
            raise ParserUnavailableError("stanza", str(e)) from e

        self._status = EngineStatus.READY
        self._initialized = True
        logger.info(f"Stanza engine initialized for {config.language}")
        return True

    def shutdown(self):
        """Shutdown Stanza pipeline"""
        self._nlp = None
        self._initialized = False
        self._status = EngineStatus.SHUTDOWN
        logger.info("Stanza engine shutdown")

    def _parse_text(self, text: str) -> List[ParsedSentence]:
        """Process text with Stanza"""
        doc = self._nlp(text)

        sentences = []
        for sent_idx, stanza_sent in enumerate(doc.sentences):
            sentences.append(self._convert_sentence(stanza_sent, sent_idx))

        logger.debug(f"Parsed {len(sentences)} sentence(s)")
        return sentences

    def _convert_sentence(self, stanza_sent: Any, sent_idx: int) -> ParsedSentence:
        tokens = []
        heads = []
        labels = []
        feats = []

        for word in stanza_sent.words:
            word_feats = _parse_feats(word.feats)
            tokens.append(Token(
                index=int(word.id),
                word=word.text,
                lemma=word.lemma or word.text,
                tag=word.xpos or upos_to_ptb(word.upos, word_feats)
            ))
            heads.append(word.head or 0)
            labels.append(word.deprel or "dep")
            feats.append(word_feats)

        graph = self._converter.convert(tokens, heads, labels, feats)
        return ParsedSentence(
            sentence_id=str(sent_idx + 1),
            text=stanza_sent.text,
            graph=graph,
            metadata={"engine": self.name, "language": self.config.language}
        )


def create_stanza_engine(
    language: str = "en",
    package: Optional[str] = None,
    use_gpu: bool = False,
    model_dir: Optional[str] = None
) -> StanzaEngine:
    """Factory function to create Stanza engine"""
    config = StanzaConfig(
        language=language,
        package=package,
        use_gpu=use_gpu,
        model_dir=model_dir
    )
    return StanzaEngine(config)
