import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from adapters import BaseEmbedder, BaseLLM, BaseTranslator
from adapters.utils import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY, call_with_retry
from config import get_config_value, load_config
from errors import ValidationError
from models import Answer, EmbeddedChunk
from similarity import rank
from stores import BaseCorpusStore
from .base import (
    DEFAULT_ORGANIZATION,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_K,
    create_embedder_from_config,
    create_llm_from_config,
    create_store_from_config,
    create_translator_from_config,
)
from .ingestion import IngestionPipeline

logger = logging.getLogger(__name__)

NO_DOCUMENTS_MESSAGE = (
    "No PDF documents found. Please ensure PDFs are in the correct directory."
)
NO_CONTEXT_MESSAGE = (
    "Sorry, I couldn't find relevant information in the {organization} documents."
)
NO_ANSWER_MESSAGE = "No answer generated."

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant for parents who answers questions using only "
    "the official {organization} documents provided. Be specific, and say so "
    "when the documents do not contain the answer."
)
CONTEXT_PREAMBLE = "Relevant {organization} documents:\n\n"
CONTEXT_SEPARATOR = "\n\n---\n\n"


@dataclass
class SynthesizerSettings:
    top_k: int = DEFAULT_TOP_K
    temperature: float = DEFAULT_TEMPERATURE
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_delay: float = DEFAULT_RETRY_DELAY
    organization: str = DEFAULT_ORGANIZATION
    system_prompt: str = DEFAULT_SYSTEM_PROMPT

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "SynthesizerSettings":
        return cls(
            top_k=get_config_value(config, "retrieval.top_k", DEFAULT_TOP_K),
            temperature=get_config_value(config, "llm.temperature", DEFAULT_TEMPERATURE),
            max_attempts=get_config_value(
                config, "retrieval.max_attempts", DEFAULT_MAX_ATTEMPTS
            ),
            retry_delay=get_config_value(
                config, "retrieval.retry_delay", DEFAULT_RETRY_DELAY
            ),
            organization=get_config_value(
                config, "assistant.organization", DEFAULT_ORGANIZATION
            ),
            system_prompt=get_config_value(
                config, "assistant.system_prompt", DEFAULT_SYSTEM_PROMPT
            ),
        )


def build_context(chunks: list[EmbeddedChunk], organization: str) -> str:
    """Join retrieved chunks, each labelled with its source file."""
    if not chunks:
        return ""
    body = CONTEXT_SEPARATOR.join(
        f"From {chunk.filename}:\n{chunk.content}" for chunk in chunks
    )
    return CONTEXT_PREAMBLE.format(organization=organization) + body


class AnswerSynthesizer:
    """Answers questions from the district corpus.

    On a cold start the corpus is populated by the ingestion pipeline
    before answering; concurrent cold-start requests share one ingestion run.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        llm: BaseLLM,
        store: BaseCorpusStore,
        ingestion: IngestionPipeline,
        translator: BaseTranslator,
        settings: SynthesizerSettings | None = None,
    ):
        self.embedder = embedder
        self.llm = llm
        self.store = store
        self.ingestion = ingestion
        self.translator = translator
        self.settings = settings or SynthesizerSettings()
        self._ready_lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls, config: dict[str, Any], config_path: Path
    ) -> "AnswerSynthesizer":
        """Build the synthesizer and its collaborators from configuration.

        The embedder and store are created once and shared with the
        ingestion pipeline.
        """
        embedder = create_embedder_from_config(config)
        llm = create_llm_from_config(config)
        store = create_store_from_config(config, config_path)
        ingestion = IngestionPipeline.from_config(
            config, config_path, embedder=embedder, store=store
        )
        return cls(
            embedder=embedder,
            llm=llm,
            store=store,
            ingestion=ingestion,
            translator=create_translator_from_config(config, llm),
            settings=SynthesizerSettings.from_config(config),
        )

    async def ensure_ready(self) -> int:
        """Run ingestion if the corpus is empty. Returns chunks newly stored."""
        if await self.store.count() > 0:
            return 0
        async with self._ready_lock:
            if await self.store.count() > 0:
                return 0
            logger.info("Corpus store is empty, running ingestion")
            return await self.ingestion.run()

    async def retrieve(self, question: str) -> list[EmbeddedChunk]:
        chunks = await self.store.all()
        if not chunks:
            return []
        query = await self.embedder.aembed(question)
        indices = rank(query, [c.embedding for c in chunks], self.settings.top_k)
        logger.info(f"Retrieved {len(indices)} of {len(chunks)} chunks")
        return [chunks[i] for i in indices]

    async def complete(self, context: str, question: str) -> str:
        messages = [
            {
                "role": "system",
                "content": self.settings.system_prompt.format(
                    organization=self.settings.organization
                ),
            },
            {"role": "user", "content": f"{context}\n\nQuestion: {question}"},
        ]
        content = await call_with_retry(
            lambda: self.llm.achat(messages, temperature=self.settings.temperature),
            max_attempts=self.settings.max_attempts,
            delay=self.settings.retry_delay,
            description="completion",
        )
        return content or NO_ANSWER_MESSAGE

    async def _finish(self, question: str, answer: str, language: str | None) -> Answer:
        translated = answer
        if language and language != "en":
            translated = await self.translator.translate(answer, language)
        return Answer(question=question, answer=answer, translated=translated)

    async def answer(self, question: str, language: str | None = "en") -> Answer:
        """Answer a question from the corpus.

        Raises:
            ValidationError: If the question is missing or blank.
            EmbeddingUnavailable: If the question cannot be embedded.
            CompletionRequestFailed: If the completion call exhausts its retries.
            StoreUnavailable: If the corpus store cannot be read.
        """
        if not isinstance(question, str) or not question.strip():
            raise ValidationError("Question is required.")

        await self.ensure_ready()
        if await self.store.count() == 0:
            return await self._finish(question, NO_DOCUMENTS_MESSAGE, language)

        chunks = await self.retrieve(question)
        context = build_context(chunks, self.settings.organization)
        if not context:
            message = NO_CONTEXT_MESSAGE.format(organization=self.settings.organization)
            return await self._finish(question, message, language)

        answer = await self.complete(context, question)
        return await self._finish(question, answer, language)


def get_answer_synthesizer(config_path: Path = Path("config.toml")) -> AnswerSynthesizer:
    config = load_config(config_path)
    return AnswerSynthesizer.from_config(config, config_path)
