"""Read-side helpers over a TieredMemoryStore.

Short-term / long-term views for callers written against the older two-tier
API, plus the prompt-building helpers used by conversation generation.
"""

from memoria.memory.base import MemoryEntry, MemoryQuery
from memoria.memory.store import TieredMemoryStore

IMPORTANT_MARK = 0.8
MINOR_MARK = 0.3


def short_term_view(store: TieredMemoryStore) -> list[MemoryEntry]:
    """Situational tier."""
    return list(store.situational)


def long_term_view(store: TieredMemoryStore) -> list[MemoryEntry]:
    """EventLog followed by Archive."""
    return [*store.event_log, *store.archive]


def relevant_memories(store: TieredMemoryStore, count: int = 5) -> list[MemoryEntry]:
    return store.retrieve(MemoryQuery(max_count=count, include_context=True))


def _ticks_ago(entry: MemoryEntry, now: int) -> str:
    age = entry.age(now)
    return "just now" if age == 0 else f"{age} ticks ago"


def memory_context(store: TieredMemoryStore, count: int = 5) -> str:
    """One line per relevant memory: '- [type] content (age)'."""
    now = store.clock()
    return "".join(
        f"- [{m.type.value}] {m.content} ({_ticks_ago(m, now)})\n"
        for m in relevant_memories(store, count)
    )


def _importance_marker(entry: MemoryEntry) -> str:
    if entry.importance > IMPORTANT_MARK:
        return "[Important] "
    if entry.importance < MINOR_MARK:
        return "[Minor] "
    return ""


def mental_state_summary(store: TieredMemoryStore) -> str:
    """Short 'Recent experiences' block, empty when there is nothing to say."""
    memories = relevant_memories(store, 3)
    if not memories:
        return ""
    lines = ["Recent experiences:"]
    lines.extend(f"- {_importance_marker(m)}{m.content}" for m in memories)
    return "\n".join(lines) + "\n"


def prompt_with_memory(store: TieredMemoryStore | None, base_prompt: str) -> str:
    """Prefix base_prompt with the agent's memory context."""
    if store is None:
        return base_prompt
    context = memory_context(store)
    if not context:
        return base_prompt
    return f"{context}\n{base_prompt}"


def clear_all(store: TieredMemoryStore) -> None:
    """Clear every tier except Archive."""
    store.active.clear()
    store.situational.clear()
    store.event_log.clear()


def clear_short_term(store: TieredMemoryStore) -> None:
    store.active.clear()
    store.situational.clear()


def clear_long_term(store: TieredMemoryStore) -> None:
    """Clear EventLog; Archive is kept."""
    store.event_log.clear()
