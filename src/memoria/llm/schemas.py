"""Request and response bodies for the HTTP summarization backends."""

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    role: str
    content: str | None = None


class ChatCompletionRequest(BaseModel):
    """OpenAI chat completions request."""

    model: str
    messages: list[ChatMessage]
    temperature: float = 0.7
    max_tokens: int = 200
    stream: bool = False


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: ChatMessage


class ChatUsage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt_tokens: int = 0
    completion_tokens: int = 0


class ChatCompletionResponse(BaseModel):
    """OpenAI chat completions response."""

    model_config = ConfigDict(extra="ignore")

    model: str = ""
    choices: list[ChatChoice] = Field(default_factory=list)
    usage: ChatUsage | None = None

    @property
    def text(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].message.content


class GeminiPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str | None = None


class GeminiContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str | None = None
    parts: list[GeminiPart] = Field(default_factory=list)


class GeminiGenerationConfig(BaseModel):
    temperature: float = 0.7
    max_output_tokens: int = Field(default=200, serialization_alias="maxOutputTokens")


class GeminiRequest(BaseModel):
    """Gemini generateContent request."""

    contents: list[GeminiContent]
    generation_config: GeminiGenerationConfig = Field(
        default_factory=GeminiGenerationConfig,
        serialization_alias="generationConfig",
    )
    system_instruction: GeminiContent | None = Field(
        default=None, serialization_alias="systemInstruction"
    )


class GeminiCandidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: GeminiContent | None = None


class GeminiUsage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    prompt_token_count: int = Field(default=0, alias="promptTokenCount")
    candidates_token_count: int = Field(default=0, alias="candidatesTokenCount")


class GeminiResponse(BaseModel):
    """Gemini generateContent response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    candidates: list[GeminiCandidate] = Field(default_factory=list)
    usage_metadata: GeminiUsage | None = Field(default=None, alias="usageMetadata")

    @property
    def text(self) -> str | None:
        for candidate in self.candidates:
            if candidate.content is None:
                continue
            texts = [p.text for p in candidate.content.parts if p.text]
            if texts:
                return "".join(texts)
        return None
