"""
CIE API Routes Extraction - Clause and Proposition Extraction Endpoints

This module provides REST API endpoints for extracting clauses and
propositions from dependency graphs, CoNLL-U text and raw text.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from cie_core.config_runtime import ExtractionOptions, get_runtime_config, get_setting
from cie_core.exceptions import InputFormatError, MalformedGraphError
from cie_core.models import DependencyGraph
from cie_extraction.extractor import ClausalExtractor
from cie_io.conllu_io import SCHEMES, CoNLLUReader
from cie_parsing.base_engine import ParserEngine, create_engine

logger = logging.getLogger(__name__)

router = APIRouter()

_engines: Dict[str, ParserEngine] = {}


class TokenSchema(BaseModel):
    """Schema for a graph token"""
    index: int = Field(..., description="1-based token position")
    word: str = Field(..., description="Surface form")
    lemma: Optional[str] = Field(None, description="Lemma (defaults to the word)")
    tag: str = Field(..., description="Penn Treebank tag")


class EdgeSchema(BaseModel):
    """Schema for a labelled dependency edge"""
    governor: int = Field(..., description="Governor token index")
    dependent: int = Field(..., description="Dependent token index")
    relation: str = Field(..., description="Stanford dependency label")


class GraphExtractionRequest(BaseModel):
    """Schema for extraction from a dependency graph"""
    tokens: List[TokenSchema] = Field(..., description="Tokens of the sentence")
    edges: List[EdgeSchema] = Field(default_factory=list, description="Dependency edges")
    sentence_id: Optional[str] = Field(None, description="Sentence identifier")
    text: Optional[str] = Field(None, description="Sentence text")
    options: Optional[Dict[str, Any]] = Field(None, description="Option overrides")


class CoNLLUExtractionRequest(BaseModel):
    """Schema for extraction from CoNLL-U text"""
    conllu: str = Field(..., description="CoNLL-U or CoNLL-X text")
    scheme: str = Field("auto", description="Annotation scheme: auto, ud or stanford")
    keep_punctuation: bool = Field(False, description="Keep punctuation edges")
    options: Optional[Dict[str, Any]] = Field(None, description="Option overrides")


class TextExtractionRequest(BaseModel):
    """Schema for extraction from raw text"""
    text: str = Field(..., description="Raw text, one or more sentences")
    language: Optional[str] = Field(None, description="Parser language")
    options: Optional[Dict[str, Any]] = Field(None, description="Option overrides")


class SentenceResponse(BaseModel):
    """Schema for one sentence's clauses and propositions"""
    sentence_id: Optional[str] = None
    text: Optional[str] = None
    clauses: List[Dict[str, Any]]
    propositions: List[Dict[str, Any]]


class BatchResponse(BaseModel):
    """Schema for a multi-sentence extraction"""
    total_sentences: int
    total_clauses: int
    total_propositions: int
    clause_type_counts: Dict[str, int]
    sentences: List[SentenceResponse]
    errors: List[str]
    processing_time_ms: float


def resolve_options(overrides: Optional[Dict[str, Any]] = None) -> ExtractionOptions:
    """Runtime options with request overrides applied"""
    base = get_runtime_config().build_options()
    if not overrides:
        return base
    # Validates names and types
    ExtractionOptions.from_dict(overrides)
    return base.replace(**overrides)


def get_engine(language: Optional[str] = None) -> ParserEngine:
    """Shared parser engine for a language"""
    language = language or get_setting("parser", "language", "en")
    engine = _engines.get(language)
    if engine is None:
        engine = create_engine(
            get_setting("parser", "default_engine", "stanza"),
            language=language,
            use_gpu=get_setting("parser", "use_gpu", False),
            download_models=get_setting("parser", "download_models", True)
        )
        engine.initialize()
        _engines[language] = engine
    return engine


def shutdown_engines():
    """Release every loaded parser engine"""
    for engine in _engines.values():
        engine.shutdown()
    _engines.clear()


@router.post("/graph", response_model=SentenceResponse)
async def extract_from_graph(request: GraphExtractionRequest):
    """Extract clauses and propositions from one dependency graph"""
    options = resolve_options(request.options)

    try:
        graph = DependencyGraph.from_dict({
            "tokens": [t.model_dump() for t in request.tokens],
            "edges": [e.model_dump() for e in request.edges]
        })
    except MalformedGraphError as e:
        raise InputFormatError(e.message) from e

    sentence = ClausalExtractor(options).extract(graph, request.sentence_id, request.text)
    return SentenceResponse(**sentence.to_dict(options))


@router.post("/conllu", response_model=BatchResponse)
async def extract_from_conllu(request: CoNLLUExtractionRequest):
    """Extract from every sentence of CoNLL-U text"""
    if request.scheme not in SCHEMES:
        raise HTTPException(status_code=400, detail=f"Unknown annotation scheme: {request.scheme}")

    options = resolve_options(request.options)
    reader = CoNLLUReader(scheme=request.scheme, keep_punctuation=request.keep_punctuation)
    sentences = reader.read_string(request.conllu)

    result = ClausalExtractor(options).extract_batch(sentences)
    return BatchResponse(**result.to_dict(options))


@router.post("/text", response_model=BatchResponse)
async def extract_from_text(request: TextExtractionRequest):
    """Parse raw text and extract from every sentence"""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Text is empty")

    options = resolve_options(request.options)
    engine = get_engine(request.language)
    sentences = engine.parse(request.text)

    result = ClausalExtractor(options).extract_batch(sentences)
    return BatchResponse(**result.to_dict(options))


@router.get("/options")
async def get_options():
    """Effective default options"""
    options = get_runtime_config().build_options()
    return options.to_dict()
