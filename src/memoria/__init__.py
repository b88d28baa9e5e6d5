"""
Memoria - tiered episodic memory for simulated characters.

Package structure:
- core: Configuration, logging, clock, per-agent manager
- memory: Entries, tagging, decay, retrieval and the four-tier store
- summarization: Background scheduler, prompts, rule-based fallback
- llm: Language model backends used for summarization
"""

__version__ = "0.1.0"
