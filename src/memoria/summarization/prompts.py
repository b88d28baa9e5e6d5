"""Prompt templates for LLM-backed summarization."""

from collections.abc import Sequence

from memoria.memory.base import MemoryEntry
from memoria.summarization.base import SummaryMode

MAX_PROMPT_MEMORIES = 20

STANDARD_PROMPT = """Summarize the following memories of {subject}.

Memories:
{memories}

Requirements:
1. Extract places, people and events
2. Merge similar events and mark their frequency (×N)
3. Be extremely concise, no more than 80 words
4. Output only the summary text, no JSON or other formatting"""

DEEP_ARCHIVE_PROMPT = """These are summarized event logs of {subject} covering an earlier period.
Condense them into a long-term memory record.

Event logs:
{memories}

Requirements:
1. Keep only lasting facts: relationships, major events, losses and achievements
2. Drop routine, repeated activity unless it defines the period
3. No more than 60 words
4. Output only the record text, no JSON or other formatting"""

_TEMPLATES = {
    SummaryMode.STANDARD: STANDARD_PROMPT,
    SummaryMode.DEEP_ARCHIVE: DEEP_ARCHIVE_PROMPT,
}


def build_prompt(
    entries: Sequence[MemoryEntry],
    mode: SummaryMode,
    subject: str | None = None,
) -> str:
    """Render the prompt for mode, listing at most 20 memories."""
    memories = "\n".join(
        f"{i}. {m.content}" for i, m in enumerate(entries[:MAX_PROMPT_MEMORIES], start=1)
    )
    return _TEMPLATES[mode].format(subject=subject or "this character", memories=memories)
