"""LiteLLM provider - any model LiteLLM can route to."""

import litellm

from memoria.core.logging import get_logger
from memoria.llm.base import LLMConfig, LLMProvider, LLMResponse, ProviderType

logger = get_logger("llm.litellm_adapter")

# Disable LiteLLM's verbose logging
litellm.suppress_debug_info = True


class LiteLLMProvider(LLMProvider):
    """Synchronous litellm.completion wrapper."""

    provider_type = ProviderType.LITELLM

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key or None
        self.base_url = base_url or None
        self.timeout = timeout

    def complete(self, messages: list[dict], config: LLMConfig) -> LLMResponse:
        if config.system_prompt:
            messages = [{"role": "system", "content": config.system_prompt}, *messages]

        params = {
            "model": config.model,
            "messages": messages,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "timeout": self.timeout,
        }
        if self.api_key:
            params["api_key"] = self.api_key
        if self.base_url:
            params["api_base"] = self.base_url

        logger.debug(f"LiteLLM request: model={config.model}, messages={len(messages)}")

        try:
            response = litellm.completion(**params)
        except Exception as e:
            logger.warning(f"LiteLLM error for {config.model}: {e}")
            raise

        content = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=content,
            model=response.model or config.model,
            provider=self.provider_type,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )

    def health_check(self) -> bool:
        """LiteLLM has no cheap ping; report whether a model can be resolved."""
        return True
