"""
Summarizer interface.

A summarizer turns a group of memory entries into one short text. It runs
on scheduler worker threads, so implementations must be thread-safe and
report every failure as None instead of raising.
"""

import hashlib
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum

from memoria.memory.base import MemoryEntry


class SummaryMode(Enum):
    STANDARD = "standard"
    DEEP_ARCHIVE = "deep_archive"


class SummarizerUnavailableError(Exception):
    """Raised inside adapters when a backend cannot be used."""


class Summarizer(ABC):
    """Abstract summarization backend."""

    @abstractmethod
    def summarize(
        self,
        entries: Sequence[MemoryEntry],
        mode: SummaryMode,
        subject: str | None = None,
    ) -> str | None:
        """Summarize entries, return None when no summary could be produced."""
        ...

    def health_check(self) -> bool:
        """Check if the backend is reachable."""
        return True


def fingerprint(agent_id: str, entries: Sequence[MemoryEntry], mode: SummaryMode) -> str:
    """Deduplication key for one summarization request."""
    digest = hashlib.sha256()
    digest.update(agent_id.encode("utf-8"))
    digest.update(b"\x00")
    digest.update(mode.value.encode("utf-8"))
    for entry in entries:
        digest.update(b"\x00")
        digest.update(entry.id.encode("utf-8"))
        digest.update(b"\x01")
        digest.update(entry.content.encode("utf-8"))
    return digest.hexdigest()
