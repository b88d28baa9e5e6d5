"""
LLM module - language model backends for summarization.

Providers:
- openai: OpenAI-compatible chat completions (OpenAI, local servers)
- google: Gemini generateContent API
- litellm: Any model LiteLLM can route to

All providers are synchronous; they run on summarizer worker threads.
"""
