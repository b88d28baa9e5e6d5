"""Conversation capture into speaker and listener memories."""

import hashlib
from collections.abc import Callable

from memoria.core.clock import Clock
from memoria.core.logging import get_logger
from memoria.memory.base import MemoryType
from memoria.memory.store import TieredMemoryStore

logger = get_logger("memory.conversation")

SPEAKER_IMPORTANCE = 0.6
LISTENER_IMPORTANCE = 0.5


class ConversationRecorder:
    """Records each conversation once for both participants.

    The host may report the same line more than once per tick, so recorded
    conversations are remembered until the next periodic cleanup.
    """

    def __init__(
        self,
        store_for: Callable[[str], TieredMemoryStore],
        clock: Clock,
        cleanup_interval: int = 2500,
        enabled: bool = True,
    ):
        self._store_for = store_for
        self._clock = clock
        self.cleanup_interval = cleanup_interval
        self.enabled = enabled
        self._recorded: set[str] = set()
        self._last_cleanup = clock()

    def __len__(self) -> int:
        return len(self._recorded)

    def conversation_id(self, speaker: str | None, listener: str | None, content: str) -> str:
        digest = hashlib.sha1(content.encode("utf-8")).hexdigest()[:16]
        return f"{self._clock()}_{speaker}_{listener}_{digest}"

    def cleanup(self, force: bool = False) -> bool:
        """Drop the dedup cache once cleanup_interval ticks have passed."""
        now = self._clock()
        if not force and now - self._last_cleanup <= self.cleanup_interval:
            return False
        self._recorded.clear()
        self._last_cleanup = now
        logger.debug("Cleaned conversation cache")
        return True

    def record(self, speaker: str | None, listener: str | None, content: str) -> bool:
        """Add the conversation to both participants' Active tiers.

        Returns False when disabled or already recorded.
        """
        if not self.enabled:
            logger.debug("Conversation memory disabled, skipping")
            return False

        self.cleanup()

        conversation_id = self.conversation_id(speaker, listener, content)
        if conversation_id in self._recorded:
            logger.debug(f"Skipped duplicate conversation {conversation_id}")
            return False
        self._recorded.add(conversation_id)

        if speaker is not None:
            listener_name = listener or "self"
            self._store_for(speaker).add_active(
                f"Said to {listener_name}: {content}",
                MemoryType.CONVERSATION,
                SPEAKER_IMPORTANCE,
                listener_name,
            )

        if listener is not None and listener != speaker:
            speaker_name = speaker or "someone"
            self._store_for(listener).add_active(
                f"{speaker_name} said: {content}",
                MemoryType.CONVERSATION,
                LISTENER_IMPORTANCE,
                speaker_name,
            )

        preview = content if len(content) <= 50 else content[:50] + "..."
        logger.info(f"Recorded: {speaker or 'Unknown'} -> {listener or 'self'}: {preview}")
        return True
