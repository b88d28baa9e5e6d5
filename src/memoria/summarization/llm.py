"""Summarizer backed by an LLM provider."""

from collections.abc import Sequence
from typing import TYPE_CHECKING

from memoria.core.logging import get_logger
from memoria.llm.base import LLMConfig, LLMProvider, ProviderType
from memoria.llm.gemini import GeminiProvider
from memoria.llm.openai_compat import OpenAICompatProvider
from memoria.memory.base import MemoryEntry
from memoria.summarization.base import Summarizer, SummarizerUnavailableError, SummaryMode
from memoria.summarization.prompts import build_prompt

if TYPE_CHECKING:
    from memoria.core.config import Settings

logger = get_logger("summarization.llm")


class LLMSummarizer(Summarizer):
    """Formats a prompt for the mode and asks the provider for plain text."""

    def __init__(self, provider: LLMProvider, config: LLMConfig):
        self.provider = provider
        self.config = config

    def summarize(
        self,
        entries: Sequence[MemoryEntry],
        mode: SummaryMode,
        subject: str | None = None,
    ) -> str | None:
        if not entries:
            return None

        prompt = build_prompt(entries, mode, subject)
        logger.debug(f"Summarizing {len(entries)} entries ({mode.value}), prompt {len(prompt)} chars")

        try:
            response = self.provider.complete([{"role": "user", "content": prompt}], self.config)
        except Exception as e:
            logger.warning(f"{mode.value} summarization failed: {e}")
            return None

        text = response.content.strip()
        if not text:
            logger.warning(f"{mode.value} summarization returned empty content")
            return None
        return text

    def health_check(self) -> bool:
        return self.provider.health_check()


def create_provider(settings: "Settings") -> LLMProvider:
    """Build the provider named by settings.summarizer_provider."""
    try:
        provider_type = ProviderType(settings.summarizer_provider.lower())
    except ValueError:
        raise SummarizerUnavailableError(
            f"Unknown summarizer provider: {settings.summarizer_provider}"
        ) from None

    base_url = settings.summarizer_base_url or None
    if provider_type == ProviderType.GOOGLE:
        if not settings.summarizer_api_key:
            raise SummarizerUnavailableError("Google Gemini requires an API key")
        return GeminiProvider(settings.summarizer_api_key, base_url, settings.summarizer_timeout)

    if provider_type == ProviderType.LITELLM:
        from memoria.llm.litellm_adapter import LiteLLMProvider

        return LiteLLMProvider(settings.summarizer_api_key, base_url, settings.summarizer_timeout)

    # OpenAI proper needs a key; a custom base URL may point at a local server
    if not settings.summarizer_api_key and not base_url:
        raise SummarizerUnavailableError("OpenAI requires an API key or a base URL")
    return OpenAICompatProvider(settings.summarizer_api_key, base_url, settings.summarizer_timeout)


def create_summarizer(settings: "Settings") -> Summarizer | None:
    """LLM summarizer from settings, or None to use rule-based summaries only."""
    if not settings.use_ai_summarization:
        logger.info("AI summarization disabled, using rule-based summary")
        return None

    try:
        provider = create_provider(settings)
    except SummarizerUnavailableError as e:
        logger.warning(f"AI summarization unavailable ({e}), using rule-based summary")
        return None

    logger.info(
        f"AI summarization ready: provider={provider.provider_type.value}, "
        f"model={settings.summarizer_model}"
    )
    config = LLMConfig(
        model=settings.summarizer_model,
        max_tokens=settings.summarizer_max_tokens,
        temperature=settings.summarizer_temperature,
    )
    return LLMSummarizer(provider, config)
