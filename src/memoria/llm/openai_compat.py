"""OpenAI-compatible chat completions provider (OpenAI, LM Studio, Ollama, vLLM)."""

import httpx
from pydantic import ValidationError

from memoria.core.logging import get_logger
from memoria.llm.base import LLMConfig, LLMProvider, LLMResponse, ProviderType
from memoria.llm.schemas import ChatCompletionRequest, ChatCompletionResponse, ChatMessage

logger = get_logger("llm.openai_compat")

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatProvider(LLMProvider):
    """Chat completions over httpx with bearer-token auth."""

    provider_type = ProviderType.OPENAI

    def __init__(
        self,
        api_key: str = "",
        base_url: str | None = None,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
            )
        return self._client

    def complete(self, messages: list[dict], config: LLMConfig) -> LLMResponse:
        """Generate completion via /chat/completions."""
        if config.system_prompt:
            messages = [{"role": "system", "content": config.system_prompt}, *messages]

        request = ChatCompletionRequest(
            model=config.model,
            messages=[ChatMessage(**m) for m in messages],
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
        logger.debug(f"Chat request: model={config.model}, url={self.base_url}")

        try:
            response = self.client.post(
                "/chat/completions", json=request.model_dump(exclude_none=True)
            )
            response.raise_for_status()
            data = ChatCompletionResponse.model_validate(response.json())
        except httpx.ConnectError as e:
            logger.warning(f"LLM not reachable at {self.base_url}: {e}")
            raise
        except httpx.HTTPStatusError as e:
            logger.warning(f"LLM error {e.response.status_code}: {e.response.text[:500]}")
            raise
        except ValidationError as e:
            logger.warning(f"Unexpected chat completion response: {e}")
            raise

        content = data.text or ""
        usage = data.usage
        logger.debug(f"Chat response ({len(content)} chars): {content[:100]}")

        return LLMResponse(
            content=content,
            model=data.model or config.model,
            provider=self.provider_type,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )

    def health_check(self) -> bool:
        """Check the /models endpoint."""
        try:
            response = self.client.get("/models")
            return response.status_code == 200
        except Exception as e:
            logger.debug(f"Health check failed: {e}")
            return False

    def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            self._client.close()
            self._client = None
