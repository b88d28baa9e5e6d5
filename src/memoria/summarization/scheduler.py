"""Background summarization with request dedup and result pickup.

The owning simulation thread calls submit() and try_consume(); summarizer
calls run on a worker pool. Pending and completed state live in one
lock-guarded map so a completion and a pickup can never interleave badly.
"""

import copy
import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for

from memoria.core.logging import get_logger
from memoria.memory.base import MemoryEntry
from memoria.summarization.base import Summarizer, SummaryMode

logger = get_logger("summarization.scheduler")


class SummarizationScheduler:
    """Fire-and-forget summarization keyed by request fingerprint.

    Thread-safe: submit/try_consume may race with worker completions.
    """

    def __init__(self, summarizer: Summarizer | None = None, max_workers: int = 2):
        self.summarizer = summarizer
        self._max_workers = max(1, max_workers)
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()
        self._pending: dict[str, Future | None] = {}
        self._completed: dict[str, str] = {}
        # Pending fingerprints whose result nobody will pick up
        self._discarded: set[str] = set()
        self._closed = False

    @property
    def enabled(self) -> bool:
        return self.summarizer is not None and not self._closed

    def submit(
        self,
        fingerprint: str,
        entries: Sequence[MemoryEntry],
        mode: SummaryMode,
        subject: str | None = None,
    ) -> None:
        """Start background summarization unless already pending or waiting for pickup."""
        if not self.enabled:
            return

        with self._lock:
            if fingerprint in self._pending or fingerprint in self._completed:
                logger.debug(f"Summary {fingerprint[:12]} already in flight, skipping")
                return
            self._pending[fingerprint] = None

        # Workers only ever see copies of the entries
        snapshot = [copy.deepcopy(entry) for entry in entries]
        try:
            future = self._get_executor().submit(
                self._run, fingerprint, snapshot, mode, subject
            )
        except RuntimeError as e:
            logger.warning(f"Summarizer pool rejected {fingerprint[:12]}: {e}")
            with self._lock:
                self._pending.pop(fingerprint, None)
                self._discarded.discard(fingerprint)
            return

        with self._lock:
            if fingerprint in self._pending:
                self._pending[fingerprint] = future
        logger.debug(f"Submitted {mode.value} summary {fingerprint[:12]} ({len(snapshot)} entries)")

    def try_consume(self, fingerprint: str) -> str | None:
        """Return and remove a completed result, None if pending or unknown."""
        with self._lock:
            return self._completed.pop(fingerprint, None)

    def discard(self, fingerprint: str) -> None:
        """Drop a completed result, or have a pending task drop its result on completion."""
        with self._lock:
            if self._completed.pop(fingerprint, None) is not None:
                return
            if fingerprint in self._pending:
                self._discarded.add(fingerprint)

    def is_pending(self, fingerprint: str) -> bool:
        with self._lock:
            return fingerprint in self._pending

    def has_result(self, fingerprint: str) -> bool:
        with self._lock:
            return fingerprint in self._completed

    def completed_fingerprints(self) -> list[str]:
        with self._lock:
            return list(self._completed)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every pending task has finished. Not for the simulation thread."""
        with self._lock:
            futures = [f for f in self._pending.values() if f is not None]
        if not futures:
            return True
        _, not_done = wait_for(futures, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work. Pending tasks still run to completion."""
        self._closed = True
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="memoria-summarizer",
            )
        return self._executor

    def _run(
        self,
        fingerprint: str,
        entries: list[MemoryEntry],
        mode: SummaryMode,
        subject: str | None,
    ) -> None:
        result = None
        try:
            result = self.summarizer.summarize(entries, mode, subject)
        except Exception as e:
            logger.warning(f"Summary {fingerprint[:12]} failed: {e}")

        if result:
            result = result.strip()

        # Pending -> Completed (or cleared) in one critical section
        with self._lock:
            self._pending.pop(fingerprint, None)
            if fingerprint in self._discarded:
                self._discarded.remove(fingerprint)
                result = None
            if result:
                self._completed[fingerprint] = result

        if result:
            logger.info(f"Summary {fingerprint[:12]} ready: {result[:60]}")
        else:
            logger.debug(f"Summary {fingerprint[:12]} produced no result")

    def __enter__(self) -> "SummarizationScheduler":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
