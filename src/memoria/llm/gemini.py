"""Google Gemini generateContent provider."""

import httpx
from pydantic import ValidationError

from memoria.core.logging import get_logger
from memoria.llm.base import LLMConfig, LLMProvider, LLMResponse, ProviderType
from memoria.llm.schemas import (
    GeminiContent,
    GeminiGenerationConfig,
    GeminiPart,
    GeminiRequest,
    GeminiResponse,
)

logger = get_logger("llm.gemini")

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(LLMProvider):
    """Gemini over httpx; the API key travels as a query parameter."""

    provider_type = ProviderType.GOOGLE

    def __init__(
        self,
        api_key: str,
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
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def _build_request(self, messages: list[dict], config: LLMConfig) -> GeminiRequest:
        contents = [
            GeminiContent(
                role="model" if m["role"] == "assistant" else "user",
                parts=[GeminiPart(text=m["content"])],
            )
            for m in messages
            if m["role"] != "system"
        ]
        system = config.system_prompt or "\n".join(
            m["content"] for m in messages if m["role"] == "system"
        )
        return GeminiRequest(
            contents=contents,
            generation_config=GeminiGenerationConfig(
                temperature=config.temperature,
                max_output_tokens=config.max_tokens,
            ),
            system_instruction=GeminiContent(parts=[GeminiPart(text=system)]) if system else None,
        )

    def complete(self, messages: list[dict], config: LLMConfig) -> LLMResponse:
        """Generate completion via models/{model}:generateContent."""
        request = self._build_request(messages, config)
        logger.debug(f"Gemini request: model={config.model}")

        try:
            response = self.client.post(
                f"/models/{config.model}:generateContent",
                params={"key": self.api_key},
                json=request.model_dump(by_alias=True, exclude_none=True),
            )
            response.raise_for_status()
            data = GeminiResponse.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.warning(f"Gemini error {e.response.status_code}: {e.response.text[:500]}")
            raise
        except ValidationError as e:
            logger.warning(f"Unexpected Gemini response: {e}")
            raise

        content = data.text or ""
        usage = data.usage_metadata
        return LLMResponse(
            content=content,
            model=config.model,
            provider=self.provider_type,
            input_tokens=usage.prompt_token_count if usage else 0,
            output_tokens=usage.candidates_token_count if usage else 0,
        )

    def health_check(self) -> bool:
        try:
            response = self.client.get("/models", params={"key": self.api_key})
            return response.status_code == 200
        except Exception as e:
            logger.debug(f"Gemini health check failed: {e}")
            return False

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None
