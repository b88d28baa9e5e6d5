"""Query matching and ranked retrieval across tiers.

Everything here is a pure function of the entries and the query: no
entry is mutated and identical inputs give identical output order.
"""

from collections.abc import Iterable, Sequence

from memoria.memory.base import MemoryEntry, MemoryLayer, MemoryQuery

KEYWORD_WEIGHT = 1.0
IMPORTANCE_WEIGHT = 0.5
ACTIVITY_WEIGHT = 0.3

SITUATIONAL_LIMIT = 5
ARCHIVE_LIMIT = 3


def matches_query(entry: MemoryEntry, query: MemoryQuery) -> bool:
    """Every set filter must equal (or, for tags, intersect) the entry's field."""
    if query.type is not None and entry.type != query.type:
        return False
    if query.layer is not None and entry.layer != query.layer:
        return False
    if query.related_agent and entry.related_agent != query.related_agent:
        return False
    if query.tags and not (query.tags & entry.tags):
        return False
    return True


def matches_active(entry: MemoryEntry, query: MemoryQuery) -> bool:
    """Active entries skip the layer and tag filters."""
    if query.type is not None and entry.type != query.type:
        return False
    if query.related_agent and entry.related_agent != query.related_agent:
        return False
    return True


def score_entry(entry: MemoryEntry, keywords: Iterable[str] = ()) -> float:
    """Retrieval score: keyword overlap, importance and activity."""
    wanted = {k.lower() for k in keywords}
    overlap = len(wanted & entry.keywords) if wanted else 0
    return (
        KEYWORD_WEIGHT * overlap
        + IMPORTANCE_WEIGHT * entry.importance
        + ACTIVITY_WEIGHT * entry.activity
    )


def rank_entries(
    entries: Sequence[MemoryEntry],
    query: MemoryQuery,
    limit: int,
) -> list[MemoryEntry]:
    """Matching entries by descending score; earlier (more recent) wins ties."""
    if limit <= 0:
        return []
    candidates = [
        (score_entry(entry, query.keywords), index, entry)
        for index, entry in enumerate(entries)
        if matches_query(entry, query)
    ]
    candidates.sort(key=lambda c: (-c[0], c[1]))
    return [entry for _, _, entry in candidates[:limit]]


def rank_by_importance(
    entries: Sequence[MemoryEntry],
    query: MemoryQuery,
    limit: int,
) -> list[MemoryEntry]:
    candidates = [
        (entry.importance, index, entry)
        for index, entry in enumerate(entries)
        if matches_query(entry, query)
    ]
    candidates.sort(key=lambda c: (-c[0], c[1]))
    return [entry for _, _, entry in candidates[:limit]]


def compose_results(
    active: Sequence[MemoryEntry],
    situational: Sequence[MemoryEntry],
    event_log: Sequence[MemoryEntry],
    archive: Sequence[MemoryEntry],
    query: MemoryQuery,
    active_capacity: int,
) -> list[MemoryEntry]:
    """Layered retrieval for prompt construction.

    1. Active entries (type and related-agent filters only)
    2. Top situational matches
    3. Event log matches when context is requested and room remains
    4. Top archive entries by importance, only for archive queries
    """
    results = [m for m in active[:active_capacity] if matches_active(m, query)]

    results.extend(rank_entries(situational, query, SITUATIONAL_LIMIT))

    if query.include_context and len(results) < query.max_count:
        results.extend(rank_entries(event_log, query, query.max_count - len(results)))

    if query.layer == MemoryLayer.ARCHIVE:
        results.extend(rank_by_importance(archive, query, ARCHIVE_LIMIT))

    return results[: max(0, query.max_count)]
