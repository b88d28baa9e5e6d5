"""Four-tier memory store for a single agent.

Active -> Situational -> EventLog -> Archive. Every tier list is ordered
most-recent-first. All methods are meant to run on the owning simulation
thread; only the summarization scheduler does work elsewhere.
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from memoria.core.clock import Clock, ManualClock
from memoria.core.logging import get_logger
from memoria.memory.base import MemoryEntry, MemoryLayer, MemoryQuery, MemoryTags, MemoryType
from memoria.memory.decay import DecayEngine
from memoria.memory.retrieval import compose_results
from memoria.memory.tagger import tag_entry
from memoria.summarization.base import SummaryMode, fingerprint
from memoria.summarization.fallback import simple_summary
from memoria.summarization.scheduler import SummarizationScheduler

if TYPE_CHECKING:
    from memoria.core.config import Settings

logger = get_logger("memory.store")

EVENT_LOG_IMPORTANCE_BONUS = 0.2
ARCHIVE_IMPORTANCE_BONUS = 0.3


def _preview(text: str, length: int = 30) -> str:
    return text if len(text) <= length else text[:length] + "..."


def _group_by_type(entries: Iterable[MemoryEntry]) -> dict[MemoryType, list[MemoryEntry]]:
    groups: dict[MemoryType, list[MemoryEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.type, []).append(entry)
    return groups


def _mean_importance(entries: Sequence[MemoryEntry]) -> float:
    return sum(m.importance for m in entries) / len(entries)


class TieredMemoryStore:
    """Per-agent tiered memory with promotion, summarization and decay."""

    def __init__(
        self,
        agent_id: str,
        agent_name: str | None = None,
        *,
        max_active: int = 3,
        max_situational: int = 20,
        max_event_log: int = 50,
        overflow_factor: float = 1.5,
        scheduler: SummarizationScheduler | None = None,
        decay_engine: DecayEngine | None = None,
        clock: Clock | None = None,
        deep_archive_fallback: bool = False,
    ):
        self.agent_id = agent_id
        self.agent_name = agent_name or agent_id
        self.max_active = max(1, max_active)
        self.max_situational = max(1, max_situational)
        self.max_event_log = max(1, max_event_log)
        self.overflow_factor = max(1.0, overflow_factor)
        self.scheduler = scheduler or SummarizationScheduler()
        self.decay_engine = decay_engine or DecayEngine()
        self.clock = clock or ManualClock()
        self.deep_archive_fallback = deep_archive_fallback

        self.active: list[MemoryEntry] = []
        self.situational: list[MemoryEntry] = []
        self.event_log: list[MemoryEntry] = []
        self.archive: list[MemoryEntry] = []

        # Rule-derived event log entries whose AI summary may still arrive
        self._awaiting_ai: dict[str, str] = {}

    @classmethod
    def from_settings(
        cls,
        agent_id: str,
        settings: "Settings",
        agent_name: str | None = None,
        scheduler: SummarizationScheduler | None = None,
        decay_engine: DecayEngine | None = None,
        clock: Clock | None = None,
    ) -> "TieredMemoryStore":
        return cls(
            agent_id,
            agent_name,
            max_active=settings.max_active_memories,
            max_situational=settings.max_situational_memories,
            max_event_log=settings.max_event_log_memories,
            overflow_factor=settings.situational_overflow_factor,
            scheduler=scheduler,
            decay_engine=decay_engine or DecayEngine.from_settings(settings),
            clock=clock,
            deep_archive_fallback=settings.deep_archive_fallback,
        )

    # Tier access

    def tier(self, layer: MemoryLayer) -> list[MemoryEntry]:
        """Live list backing layer."""
        return {
            MemoryLayer.ACTIVE: self.active,
            MemoryLayer.SITUATIONAL: self.situational,
            MemoryLayer.EVENT_LOG: self.event_log,
            MemoryLayer.ARCHIVE: self.archive,
        }[layer]

    def counts(self) -> dict[MemoryLayer, int]:
        return {layer: len(self.tier(layer)) for layer in MemoryLayer}

    def get_all(self) -> list[MemoryEntry]:
        """All entries, Active first."""
        return [*self.active, *self.situational, *self.event_log, *self.archive]

    def get(self, memory_id: str) -> MemoryEntry | None:
        """Find entry by id, searching Active -> Situational -> EventLog -> Archive."""
        for layer in MemoryLayer:
            for entry in self.tier(layer):
                if entry.id == memory_id:
                    return entry
        return None

    def __len__(self) -> int:
        return sum(self.counts().values())

    # Ingestion and promotion

    def add_active(
        self,
        content: str,
        memory_type: MemoryType,
        importance: float = 1.0,
        related_agent: str | None = None,
    ) -> MemoryEntry:
        """Record a new memory at the Active head, promoting the oldest on overflow."""
        entry = MemoryEntry(
            content=content,
            type=memory_type,
            layer=MemoryLayer.ACTIVE,
            importance=importance,
            related_agent=related_agent,
            timestamp=self.clock(),
        )
        tag_entry(entry)
        self.active.insert(0, entry)
        logger.debug(f"{self.agent_name} active: {_preview(content)}")

        if len(self.active) > self.max_active:
            self._promote_to_situational(self.active.pop())
        return entry

    def _promote_to_situational(self, entry: MemoryEntry) -> None:
        entry.layer = MemoryLayer.SITUATIONAL
        self.situational.insert(0, entry)
        logger.debug(f"{self.agent_name} active -> situational: {_preview(entry.content)}")

        if len(self.situational) > self.max_situational * self.overflow_factor:
            logger.warning(
                f"{self.agent_name} situational overflow ({len(self.situational)}), "
                "waiting for scheduled summarization"
            )

    def clear_active(self) -> None:
        """Move every Active entry to Situational, keeping recency order."""
        for entry in reversed(self.active):
            self._promote_to_situational(entry)
        self.active.clear()
        logger.info(f"{self.agent_name}: active memory cleared")

    # Summarization

    def summarize(self) -> int:
        """Drain Situational into one EventLog summary per memory type.

        Returns the number of summary entries created.
        """
        if not self.situational:
            logger.debug(f"{self.agent_name}: no situational memories to summarize")
            return 0

        logger.info(f"{self.agent_name}: summarizing {len(self.situational)} situational memories")
        created = 0
        fallback_count = 0

        for mem_type, memories in _group_by_type(self.situational).items():
            key = fingerprint(self.agent_id, memories, SummaryMode.STANDARD)
            ai_summary = self._request_summary(key, memories, SummaryMode.STANDARD)
            summary = ai_summary or simple_summary(memories)

            entry = MemoryEntry(
                content=summary,
                type=mem_type,
                layer=MemoryLayer.EVENT_LOG,
                importance=_mean_importance(memories) + EVENT_LOG_IMPORTANCE_BONUS,
                timestamp=self.clock(),
            )
            for m in memories:
                entry.keywords |= m.keywords
                entry.tags |= m.tags
            if ai_summary:
                entry.tags.add(MemoryTags.AI_SUMMARY)
            else:
                entry.tags.add(MemoryTags.RULE_SUMMARY)
                fallback_count += 1
                if self.scheduler.is_pending(key) or self.scheduler.has_result(key):
                    self._awaiting_ai[key] = entry.id

            self.event_log.insert(0, entry)
            created += 1
            logger.debug(f"{self.agent_name} situational -> event log: {_preview(summary, 50)}")

        logger.info(
            f"{self.agent_name}: summarization complete - {created} summaries "
            f"({fallback_count} rule-based)"
        )
        self.situational.clear()
        self.archive_overflow()
        return created

    def archive_overflow(self) -> int:
        """Fold the oldest EventLog entries beyond capacity into Archive summaries.

        Groups with no summary available are dropped. Returns the number of
        archive entries created.
        """
        if len(self.event_log) <= self.max_event_log:
            return 0

        to_archive = self.event_log[self.max_event_log :]
        logger.info(f"{self.agent_name}: event log overflow ({len(self.event_log)}), archiving")

        created = 0
        for mem_type, memories in _group_by_type(to_archive).items():
            key = fingerprint(self.agent_id, memories, SummaryMode.DEEP_ARCHIVE)
            summary = self._request_summary(key, memories, SummaryMode.DEEP_ARCHIVE)
            if not summary:
                # The source entries are removed below, so a later result has no taker
                self.scheduler.discard(key)
                if self.deep_archive_fallback:
                    summary = simple_summary(memories)
            if not summary:
                logger.info(
                    f"{self.agent_name}: no archive summary for {len(memories)} "
                    f"{mem_type.value} entries, dropping"
                )
                continue

            entry = MemoryEntry(
                content=summary,
                type=mem_type,
                layer=MemoryLayer.ARCHIVE,
                importance=_mean_importance(memories) + ARCHIVE_IMPORTANCE_BONUS,
                timestamp=self.clock(),
            )
            entry.tags.add(MemoryTags.DEEP_ARCHIVE)
            entry.tags.add(MemoryTags.archive_source(len(memories)))
            self.archive.insert(0, entry)
            created += 1
            logger.debug(f"{self.agent_name} event log -> archive: {_preview(summary, 50)}")

        del self.event_log[self.max_event_log :]
        return created

    def adopt_completed_summaries(self) -> int:
        """Swap rule-based EventLog summaries for AI summaries that arrived late.

        The replacement is a new entry in the same position. Entries that
        were edited, moved or deleted in the meantime are left alone.
        Returns the number of entries replaced.
        """
        replaced = 0
        for key, entry_id in list(self._awaiting_ai.items()):
            result = self.scheduler.try_consume(key)
            if result is None:
                if not self.scheduler.is_pending(key) and not self.scheduler.has_result(key):
                    del self._awaiting_ai[key]
                continue
            del self._awaiting_ai[key]

            index = next((i for i, m in enumerate(self.event_log) if m.id == entry_id), None)
            if index is None or self.event_log[index].is_user_edited:
                continue

            old = self.event_log[index]
            entry = MemoryEntry(
                content=result,
                type=old.type,
                layer=MemoryLayer.EVENT_LOG,
                importance=old.importance,
                related_agent=old.related_agent,
                timestamp=old.timestamp,
                keywords=set(old.keywords),
                tags=(old.tags - {MemoryTags.RULE_SUMMARY}) | {MemoryTags.AI_SUMMARY},
                is_pinned=old.is_pinned,
            )
            self.event_log[index] = entry
            replaced += 1
            logger.info(f"{self.agent_name}: adopted AI summary {_preview(result, 50)}")
        return replaced

    def _request_summary(
        self,
        key: str,
        memories: list[MemoryEntry],
        mode: SummaryMode,
    ) -> str | None:
        """Submit to the scheduler and pick up a result if one is already waiting."""
        try:
            self.scheduler.submit(key, memories, mode, subject=self.agent_name)
            return self.scheduler.try_consume(key)
        except Exception as e:
            logger.warning(f"{self.agent_name}: {mode.value} summary request failed: {e}")
            return None

    # Decay and retrieval

    def decay(self) -> int:
        """Apply one decay step, return number of evicted entries."""
        return self.decay_engine.decay(self)

    def retrieve(self, query: MemoryQuery) -> list[MemoryEntry]:
        """Ranked memories for prompt construction. No side effects."""
        return compose_results(
            self.active,
            self.situational,
            self.event_log,
            self.archive,
            query,
            self.max_active,
        )

    # User operations

    def edit(self, memory_id: str, new_content: str, notes: str | None = None) -> None:
        """Replace content of an entry; unknown ids are ignored."""
        entry = self.get(memory_id)
        if entry is None:
            return
        entry.content = new_content
        entry.is_user_edited = True
        entry.activity = 1.0
        # Keywords and content tags are rebuilt from the new text
        entry.keywords = set()
        entry.tags = {t for t in entry.tags if MemoryTags.survives_edit(t)}
        if notes:
            entry.notes = notes
            entry.tags.add(MemoryTags.NOTES)
        tag_entry(entry)
        logger.info(f"Memory edited: {memory_id}")

    def pin(self, memory_id: str, pinned: bool = True) -> None:
        entry = self.get(memory_id)
        if entry is None:
            return
        entry.is_pinned = pinned
        logger.info(f"Memory {'pinned' if pinned else 'unpinned'}: {memory_id}")

    def delete(self, memory_id: str) -> None:
        """Remove the first entry with memory_id; unknown ids are ignored."""
        for layer in MemoryLayer:
            tier = self.tier(layer)
            for i, entry in enumerate(tier):
                if entry.id == memory_id:
                    del tier[i]
                    logger.info(f"Memory deleted: {memory_id}")
                    return

    # Persistence hand-off

    def snapshot(self) -> dict[MemoryLayer, list[MemoryEntry]]:
        """Tier lists for an external persistence layer."""
        return {layer: list(self.tier(layer)) for layer in MemoryLayer}

    def load(self, tiers: dict[MemoryLayer, Iterable[MemoryEntry]]) -> None:
        """Replace tier contents, fixing each entry's layer to match its list."""
        for layer in MemoryLayer:
            entries = list(tiers.get(layer, ()))
            for entry in entries:
                entry.layer = layer
            self.tier(layer)[:] = entries
        for key in self._awaiting_ai:
            self.scheduler.discard(key)
        self._awaiting_ai.clear()

    @classmethod
    def from_snapshot(
        cls,
        agent_id: str,
        tiers: dict[MemoryLayer, Iterable[MemoryEntry]],
        **kwargs,
    ) -> "TieredMemoryStore":
        store = cls(agent_id, **kwargs)
        store.load(tiers)
        return store
