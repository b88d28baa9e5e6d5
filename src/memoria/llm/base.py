"""
LLM provider interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ProviderType(Enum):
    OPENAI = "openai"
    GOOGLE = "google"
    LITELLM = "litellm"


@dataclass
class LLMResponse:
    """Response from LLM provider."""

    content: str
    model: str
    provider: ProviderType
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class LLMConfig:
    """Configuration for LLM call."""

    model: str
    max_tokens: int = 200
    temperature: float = 0.7
    system_prompt: str | None = None


class LLMProvider(ABC):
    """Abstract LLM provider."""

    provider_type: ProviderType

    @abstractmethod
    def complete(self, messages: list[dict], config: LLMConfig) -> LLMResponse:
        """
        Generate completion from messages.

        Args:
            messages: OpenAI-style role/content messages
            config: LLM configuration

        Returns:
            LLMResponse with the generated text
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Check if provider is available."""
        ...

    def close(self) -> None:
        """Release network resources."""
        return None
