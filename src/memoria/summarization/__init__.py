"""
Summarization module - compresses tier overflow into summary entries.

- base: Summarizer interface, modes, request fingerprints
- scheduler: Background worker pool with dedup and result pickup
- fallback: Rule-based summary, always available
- prompts: Prompt text for LLM-backed summarizers
- llm: Summarizer built on an LLM provider
"""
