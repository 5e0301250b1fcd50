from .answer import (
    NO_ANSWER_MESSAGE,
    NO_CONTEXT_MESSAGE,
    NO_DOCUMENTS_MESSAGE,
    AnswerSynthesizer,
    SynthesizerSettings,
    build_context,
    get_answer_synthesizer,
)
from .base import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TOP_K,
    create_embedder_from_config,
    create_llm_from_config,
    create_store_from_config,
    create_translator_from_config,
)
from .ingestion import IngestionPipeline

__all__ = [
    "AnswerSynthesizer",
    "IngestionPipeline",
    "SynthesizerSettings",
    "build_context",
    "get_answer_synthesizer",
    "create_embedder_from_config",
    "create_llm_from_config",
    "create_store_from_config",
    "create_translator_from_config",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_TOP_K",
    "NO_ANSWER_MESSAGE",
    "NO_CONTEXT_MESSAGE",
    "NO_DOCUMENTS_MESSAGE",
]
