"""Shared fixtures: fake summarizers for scheduler and store tests."""

import threading
from collections.abc import Sequence

import pytest

from memoria.memory.base import MemoryEntry
from memoria.summarization.base import Summarizer, SummaryMode


class RecordingSummarizer(Summarizer):
    """Returns a fixed text, optionally blocking until released."""

    def __init__(self, result: str | None = "AI summary", block: bool = False):
        self.result = result
        self.calls: list[tuple[int, SummaryMode, str | None]] = []
        self.contents: list[list[str]] = []
        self.release = threading.Event()
        self.started = threading.Event()
        if not block:
            self.release.set()

    def summarize(
        self,
        entries: Sequence[MemoryEntry],
        mode: SummaryMode,
        subject: str | None = None,
    ) -> str | None:
        self.calls.append((len(entries), mode, subject))
        self.contents.append([e.content for e in entries])
        self.started.set()
        self.release.wait(timeout=5)
        return self.result


class FailingSummarizer(Summarizer):
    def summarize(self, entries, mode, subject=None):
        raise ConnectionError("backend down")


@pytest.fixture
def summarizer() -> RecordingSummarizer:
    return RecordingSummarizer()


@pytest.fixture
def blocking_summarizer() -> RecordingSummarizer:
    s = RecordingSummarizer(block=True)
    yield s
    s.release.set()


@pytest.fixture
def blank_summarizer() -> RecordingSummarizer:
    """Answers with whitespace only."""
    return RecordingSummarizer(result="   ")


@pytest.fixture
def failing_summarizer() -> FailingSummarizer:
    return FailingSummarizer()
