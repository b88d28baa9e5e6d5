"""Activity decay and eviction of stale tier entries.

Active entries are bounded by promotion and never decay. Archive entries
decay but are only removed by an explicit delete.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from memoria.core.logging import get_logger
from memoria.memory.base import MemoryEntry, MemoryLayer

if TYPE_CHECKING:
    from memoria.core.config import Settings
    from memoria.memory.store import TieredMemoryStore

logger = get_logger("memory.decay")


@dataclass(frozen=True)
class TierDecay:
    """Per-call decay amount and eviction threshold for one tier."""

    amount: float
    threshold: float | None = None  # None = never evicted


class DecayEngine:
    """Applies per-tier activity decay to a store."""

    def __init__(self, policies: dict[MemoryLayer, TierDecay] | None = None):
        self.policies = policies or {
            MemoryLayer.SITUATIONAL: TierDecay(amount=0.01, threshold=0.1),
            MemoryLayer.EVENT_LOG: TierDecay(amount=0.005, threshold=0.05),
            MemoryLayer.ARCHIVE: TierDecay(amount=0.001),
        }

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DecayEngine":
        return cls(
            {
                MemoryLayer.SITUATIONAL: TierDecay(
                    settings.situational_decay, settings.situational_threshold
                ),
                MemoryLayer.EVENT_LOG: TierDecay(
                    settings.event_log_decay, settings.event_log_threshold
                ),
                MemoryLayer.ARCHIVE: TierDecay(settings.archive_decay),
            }
        )

    def decay(self, store: "TieredMemoryStore") -> int:
        """Decay every non-active tier of store, return number of evicted entries."""
        evicted = 0
        for layer, policy in self.policies.items():
            if layer == MemoryLayer.ACTIVE:
                continue
            tier = store.tier(layer)
            for entry in tier:
                entry.decay(policy.amount)
            if policy.threshold is None:
                continue
            kept = [m for m in tier if not self.should_evict(m, policy.threshold)]
            removed = len(tier) - len(kept)
            if removed:
                tier[:] = kept
                evicted += removed
                logger.debug(f"{store.agent_id}: evicted {removed} stale {layer.value} memories")
        return evicted

    @staticmethod
    def should_evict(entry: MemoryEntry, threshold: float) -> bool:
        if entry.is_pinned or entry.is_user_edited:
            return False
        return entry.activity < threshold
