from typing import Any

from adapters.base import BaseLLM, BaseTranslator
from adapters.utils import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY, call_with_retry

TRANSLATION_PROMPT = (
    "Translate the user's message into the language with code '{language}'. "
    "Reply with the translation only."
)


class EchoTranslator(BaseTranslator):
    """No-op translator: returns the text unchanged."""

    def __init__(self, **kwargs: Any):
        self.kwargs = kwargs

    async def translate(self, text: str, target_language: str) -> str:
        return text


class LLMTranslator(BaseTranslator):
    """Translates through a chat-completion model, with the completion retry policy."""

    def __init__(
        self,
        llm: BaseLLM,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        **kwargs: Any,
    ):
        self.llm = llm
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.kwargs = kwargs

    async def translate(self, text: str, target_language: str) -> str:
        messages = [
            {
                "role": "system",
                "content": TRANSLATION_PROMPT.format(language=target_language),
            },
            {"role": "user", "content": text},
        ]
        translated = await call_with_retry(
            lambda: self.llm.achat(messages, temperature=0),
            max_attempts=self.max_attempts,
            delay=self.retry_delay,
            description="translation",
        )
        return translated or text
