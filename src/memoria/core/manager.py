"""Memory manager - one store per agent and tick-driven maintenance jobs."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from memoria.core.clock import Clock, ManualClock
from memoria.core.config import Settings, get_settings
from memoria.core.logging import get_logger
from memoria.memory.base import MemoryEntry, MemoryQuery, MemoryType
from memoria.memory.conversation import ConversationRecorder
from memoria.memory.decay import DecayEngine
from memoria.memory.store import TieredMemoryStore
from memoria.summarization.base import Summarizer
from memoria.summarization.scheduler import SummarizationScheduler

logger = get_logger("core.manager")


class JobPriority(Enum):
    LOW = 1
    NORMAL = 2
    HIGH = 3


@dataclass
class PeriodicJob:
    """Maintenance job run every `interval` ticks."""

    name: str
    callback: Callable[[], object]
    interval: int
    next_run: int
    priority: JobPriority = JobPriority.NORMAL
    last_run: int | None = None
    enabled: bool = True


class MemoryManager:
    """Owns every agent's store plus the shared scheduler and decay engine.

    The host calls tick() from its main loop; decay, summarization and
    conversation cache cleanup run when their interval has elapsed.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        summarizer: Summarizer | None = None,
        clock: Clock | None = None,
        scheduler: SummarizationScheduler | None = None,
    ):
        self.settings = settings or get_settings()
        self.clock = clock or ManualClock()
        self.scheduler = scheduler or SummarizationScheduler(
            summarizer, max_workers=self.settings.summarizer_workers
        )
        self.decay_engine = DecayEngine.from_settings(self.settings)
        self._stores: dict[str, TieredMemoryStore] = {}
        self.conversations = ConversationRecorder(
            self.store_for,
            self.clock,
            cleanup_interval=self.settings.cache_cleanup_interval_ticks,
            enabled=self.settings.enable_conversation_memory,
        )

        self._jobs: dict[str, PeriodicJob] = {}
        self.schedule_job("summarize", self.summarize_all, self.settings.summarization_interval_ticks)
        self.schedule_job("decay", self.decay_all, self.settings.decay_interval_ticks)
        self.schedule_job(
            "conversation_cache",
            lambda: self.conversations.cleanup(force=True),
            self.settings.cache_cleanup_interval_ticks,
            JobPriority.LOW,
        )

    # Stores

    def store_for(self, agent_id: str, agent_name: str | None = None) -> TieredMemoryStore:
        """Get or create the store for agent_id."""
        store = self._stores.get(agent_id)
        if store is None:
            store = TieredMemoryStore.from_settings(
                agent_id,
                self.settings,
                agent_name=agent_name,
                scheduler=self.scheduler,
                decay_engine=self.decay_engine,
                clock=self.clock,
            )
            self._stores[agent_id] = store
            logger.debug(f"Created memory store for {store.agent_name}")
        return store

    def get(self, agent_id: str) -> TieredMemoryStore | None:
        return self._stores.get(agent_id)

    def remove(self, agent_id: str) -> None:
        if self._stores.pop(agent_id, None) is not None:
            logger.debug(f"Removed memory store for {agent_id}")

    @property
    def agents(self) -> list[str]:
        return list(self._stores)

    # Caller API

    def add_memory(
        self,
        agent_id: str,
        content: str,
        memory_type: MemoryType,
        importance: float = 1.0,
        related_agent: str | None = None,
    ) -> MemoryEntry:
        return self.store_for(agent_id).add_active(content, memory_type, importance, related_agent)

    def record_conversation(self, speaker: str | None, listener: str | None, content: str) -> bool:
        return self.conversations.record(speaker, listener, content)

    def retrieve(self, agent_id: str, query: MemoryQuery) -> list[MemoryEntry]:
        store = self.get(agent_id)
        return store.retrieve(query) if store else []

    # Maintenance

    def decay_all(self) -> int:
        evicted = sum(store.decay() for store in self._stores.values())
        if evicted:
            logger.info(f"Decay evicted {evicted} memories")
        return evicted

    def summarize_all(self) -> int:
        return sum(store.summarize() for store in self._stores.values())

    def adopt_completed_summaries(self) -> int:
        return sum(store.adopt_completed_summaries() for store in self._stores.values())

    def schedule_job(
        self,
        name: str,
        callback: Callable[[], object],
        interval: int,
        priority: JobPriority = JobPriority.NORMAL,
    ) -> None:
        """Register a maintenance job; interval <= 0 disables it."""
        self._jobs[name] = PeriodicJob(
            name=name,
            callback=callback,
            interval=interval,
            next_run=self.clock() + max(interval, 0),
            priority=priority,
            enabled=interval > 0,
        )
        logger.debug(f"Scheduled job: {name} (every {interval} ticks)")

    def job(self, name: str) -> PeriodicJob | None:
        return self._jobs.get(name)

    def tick(self) -> list[str]:
        """Run due jobs at the current clock tick, return their names."""
        now = self.clock()
        due = [j for j in self._jobs.values() if j.enabled and j.next_run <= now]
        due.sort(key=lambda j: j.priority.value, reverse=True)

        for job in due:
            try:
                job.callback()
            except Exception as e:
                logger.error(f"Job {job.name} failed: {e}", exc_info=True)
            finally:
                job.last_run = now
                job.next_run = now + job.interval

        self.adopt_completed_summaries()
        return [job.name for job in due]

    def shutdown(self, wait: bool = True) -> None:
        self.scheduler.shutdown(wait=wait)
        logger.info("Memory manager stopped")

    def __enter__(self) -> "MemoryManager":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
