"""Tests for the four-tier memory store."""

import logging

import pytest

from memoria.memory.base import MemoryEntry, MemoryLayer, MemoryQuery, MemoryTags, MemoryType
from memoria.summarization.base import SummaryMode, fingerprint
from memoria.summarization.scheduler import SummarizationScheduler
from memoria.memory.store import TieredMemoryStore


@pytest.fixture
def store() -> TieredMemoryStore:
    return TieredMemoryStore("colonist-1", "Ann", max_active=3, max_situational=20, max_event_log=50)


def _fill_situational(store: TieredMemoryStore, n: int, memory_type: MemoryType, **kwargs) -> None:
    for i in range(n):
        store.situational.insert(
            0,
            MemoryEntry(
                content=f"memory {i}",
                type=memory_type,
                layer=MemoryLayer.SITUATIONAL,
                **kwargs,
            ),
        )


def test_active_overflow_promotes_oldest(store):
    """Adding A, B, C, D leaves [D, C, B] active and A at the situational head."""
    for content in "ABCD":
        store.add_active(content, MemoryType.ACTION)
    assert [m.content for m in store.active] == ["D", "C", "B"]
    assert store.situational[0].content == "A"
    assert store.situational[0].layer == MemoryLayer.SITUATIONAL


def test_active_never_exceeds_capacity(store):
    """Active size stays within capacity after every add."""
    for i in range(25):
        store.add_active(f"event {i}", MemoryType.EVENT)
        assert len(store.active) <= store.max_active
    assert len(store.situational) == 22


def test_capacity_clamped():
    """Capacities of zero or less become one."""
    store = TieredMemoryStore("a", max_active=0, max_situational=-1, max_event_log=0)
    assert (store.max_active, store.max_situational, store.max_event_log) == (1, 1, 1)


def test_add_active_tags_and_clamps(store):
    """New entries are tagged, timestamped and have clamped importance."""
    store.clock.set(120)
    entry = store.add_active("Bob was injured in the raid", MemoryType.EVENT, importance=4.0, related_agent="Bob")
    assert entry.importance == 1.0
    assert entry.timestamp == 120
    assert {MemoryTags.INJURY, MemoryTags.RAID} <= entry.tags
    assert "injured" in entry.keywords


def test_situational_backlog_only_warns(store, caplog):
    """Exceeding 1.5x situational capacity logs a warning but does not drain."""
    _fill_situational(store, 30, MemoryType.ACTION)
    with caplog.at_level(logging.WARNING, logger="memoria"):
        store.add_active("a", MemoryType.ACTION)
        store.add_active("b", MemoryType.ACTION)
        store.add_active("c", MemoryType.ACTION)
        store.add_active("d", MemoryType.ACTION)
    assert len(store.situational) == 31
    assert store.event_log == []
    assert "overflow" in caplog.text


def test_summarize_single_group_fallback(store):
    """21 conversations drain into one rule-based event log entry."""
    _fill_situational(store, 21, MemoryType.CONVERSATION, importance=0.5, related_agent="Bob")
    assert store.event_log == []

    created = store.summarize()

    assert created == 1
    assert store.situational == []
    assert len(store.event_log) == 1
    summary = store.event_log[0]
    assert summary.layer == MemoryLayer.EVENT_LOG
    assert summary.type == MemoryType.CONVERSATION
    assert summary.importance == pytest.approx(0.7)
    assert MemoryTags.RULE_SUMMARY in summary.tags
    assert summary.content == "Talked with Bob×21 (21 total)"


def test_summarize_groups_by_type(store):
    """One summary per memory type, keywords and tags unioned."""
    store.situational.extend(
        [
            MemoryEntry("a", MemoryType.ACTION, MemoryLayer.SITUATIONAL, keywords={"cook"}, tags={MemoryTags.COOKING}),
            MemoryEntry("b", MemoryType.EVENT, MemoryLayer.SITUATIONAL, importance=0.9),
            MemoryEntry("c", MemoryType.ACTION, MemoryLayer.SITUATIONAL, keywords={"mine"}),
        ]
    )
    assert store.summarize() == 2
    by_type = {m.type: m for m in store.event_log}
    assert by_type[MemoryType.ACTION].keywords == {"cook", "mine"}
    assert MemoryTags.COOKING in by_type[MemoryType.ACTION].tags
    assert by_type[MemoryType.EVENT].importance == 1.0


def test_summarize_empty_is_noop(store):
    assert store.summarize() == 0
    assert store.event_log == []


def test_summarize_uses_ready_ai_result(summarizer):
    """A result already waiting for the group's fingerprint is used directly."""
    with SummarizationScheduler(summarizer) as scheduler:
        store = TieredMemoryStore("a", scheduler=scheduler)
        _fill_situational(store, 4, MemoryType.ACTION)
        key = fingerprint("a", store.situational, SummaryMode.STANDARD)
        scheduler.submit(key, store.situational, SummaryMode.STANDARD)
        scheduler.wait_idle(timeout=5)

        store.summarize()

    assert store.event_log[0].content == "AI summary"
    assert MemoryTags.AI_SUMMARY in store.event_log[0].tags
    assert len(summarizer.calls) == 1


def test_late_ai_summary_adopted(summarizer):
    """A rule-based summary is replaced once its AI summary arrives."""
    summarizer.release.clear()
    with SummarizationScheduler(summarizer) as scheduler:
        store = TieredMemoryStore("a", "Ann", scheduler=scheduler)
        _fill_situational(store, 4, MemoryType.ACTION)
        store.summarize()
        rule_entry = store.event_log[0]
        assert MemoryTags.RULE_SUMMARY in rule_entry.tags

        summarizer.release.set()
        scheduler.wait_idle(timeout=5)
        assert store.adopt_completed_summaries() == 1

    adopted = store.event_log[0]
    assert adopted.content == "AI summary"
    assert adopted.id != rule_entry.id
    assert MemoryTags.AI_SUMMARY in adopted.tags
    assert MemoryTags.RULE_SUMMARY not in adopted.tags
    assert adopted.importance == rule_entry.importance
    assert summarizer.calls == [(4, SummaryMode.STANDARD, "Ann")]


def test_late_ai_summary_skips_edited_entry(summarizer):
    """User edits win over a late AI summary."""
    summarizer.release.clear()
    with SummarizationScheduler(summarizer) as scheduler:
        store = TieredMemoryStore("a", scheduler=scheduler)
        _fill_situational(store, 2, MemoryType.ACTION)
        store.summarize()
        store.edit(store.event_log[0].id, "my own words")
        summarizer.release.set()
        scheduler.wait_idle(timeout=5)
        assert store.adopt_completed_summaries() == 0
    assert store.event_log[0].content == "my own words"


def test_archive_overflow_drops_without_summary():
    """Without a summarizer the oldest overflow is dropped, no archive entry."""
    store = TieredMemoryStore("a", max_event_log=2)
    for i in range(4):
        store.event_log.insert(0, MemoryEntry(f"log {i}", MemoryType.ACTION, MemoryLayer.EVENT_LOG))
    assert store.archive_overflow() == 0
    assert [m.content for m in store.event_log] == ["log 3", "log 2"]
    assert store.archive == []


def test_archive_overflow_with_rule_fallback():
    """deep_archive_fallback keeps overflow as rule-based archive entries."""
    store = TieredMemoryStore("a", max_event_log=2, deep_archive_fallback=True)
    for i in range(5):
        store.event_log.insert(
            0, MemoryEntry(f"log {i}", MemoryType.ACTION, MemoryLayer.EVENT_LOG, importance=0.4)
        )
    assert store.archive_overflow() == 1
    assert len(store.event_log) == 2
    archived = store.archive[0]
    assert archived.layer == MemoryLayer.ARCHIVE
    assert archived.importance == pytest.approx(0.7)
    assert MemoryTags.DEEP_ARCHIVE in archived.tags
    assert MemoryTags.archive_source(3) in archived.tags


def test_archive_overflow_uses_ready_deep_summary(summarizer):
    """A ready deep-archive result becomes an archive entry."""
    with SummarizationScheduler(summarizer) as scheduler:
        store = TieredMemoryStore("a", max_event_log=1, scheduler=scheduler)
        for i in range(3):
            store.event_log.insert(0, MemoryEntry(f"log {i}", MemoryType.EVENT, MemoryLayer.EVENT_LOG))
        overflow = store.event_log[1:]
        key = fingerprint("a", overflow, SummaryMode.DEEP_ARCHIVE)
        scheduler.submit(key, overflow, SummaryMode.DEEP_ARCHIVE)
        scheduler.wait_idle(timeout=5)

        assert store.archive_overflow() == 1

    assert store.archive[0].content == "AI summary"
    assert len(store.event_log) == 1


def test_summarize_triggers_archive_overflow():
    """Draining into a full event log archives the excess."""
    store = TieredMemoryStore("a", max_event_log=1, deep_archive_fallback=True)
    store.event_log.append(MemoryEntry("old", MemoryType.ACTION, MemoryLayer.EVENT_LOG))
    _fill_situational(store, 2, MemoryType.EVENT)
    store.summarize()
    assert len(store.event_log) == 1
    assert store.event_log[0].type == MemoryType.EVENT
    assert store.archive[0].content == "old"


def test_edit_pin_delete(store):
    """User operations find entries in any tier."""
    entry = store.add_active("Planted corn", MemoryType.ACTION)
    entry.activity = 0.3

    store.edit(entry.id, "Planted rice", notes="wet season")
    assert entry.content == "Planted rice"
    assert entry.is_user_edited
    assert entry.activity == 1.0
    assert entry.notes == "wet season"
    assert {MemoryTags.NOTES, MemoryTags.USER_EDITED} <= entry.tags
    assert "rice" in entry.keywords

    store.pin(entry.id, True)
    assert entry.is_pinned
    store.pin(entry.id, False)
    assert not entry.is_pinned

    store.delete(entry.id)
    assert store.get(entry.id) is None


def test_unknown_id_is_noop(store):
    """Edit, pin and delete ignore ids that do not exist."""
    store.add_active("x", MemoryType.ACTION)
    before = [m.to_dict() for m in store.get_all()]
    store.edit("missing", "y")
    store.pin("missing")
    store.delete("missing")
    assert [m.to_dict() for m in store.get_all()] == before


def test_get_all_order(store):
    """get_all lists Active, Situational, EventLog, Archive in that order."""
    store.archive.append(MemoryEntry("arc", MemoryType.ACTION, MemoryLayer.ARCHIVE))
    store.event_log.append(MemoryEntry("log", MemoryType.ACTION, MemoryLayer.EVENT_LOG))
    for content in "ABCD":
        store.add_active(content, MemoryType.ACTION)
    assert [m.content for m in store.get_all()] == ["D", "C", "B", "A", "log", "arc"]


def test_clear_active_keeps_recency(store):
    """Clearing Active moves entries to Situational, newest first."""
    for content in "ABC":
        store.add_active(content, MemoryType.ACTION)
    store.clear_active()
    assert store.active == []
    assert [m.content for m in store.situational] == ["C", "B", "A"]
    assert all(m.layer == MemoryLayer.SITUATIONAL for m in store.situational)


def test_snapshot_and_restore(store):
    """Snapshots restore into a new store with consistent layers."""
    for content in "ABCDE":
        store.add_active(content, MemoryType.ACTION)
    snapshot = store.snapshot()
    restored = TieredMemoryStore.from_snapshot("colonist-1", snapshot, max_active=3)
    assert [m.id for m in restored.get_all()] == [m.id for m in store.get_all()]

    moved = MemoryEntry("misfiled", MemoryType.ACTION, MemoryLayer.ACTIVE)
    restored.load({MemoryLayer.ARCHIVE: [moved]})
    assert restored.archive == [moved]
    assert moved.layer == MemoryLayer.ARCHIVE
    assert restored.active == []


def test_edit_rebuilds_keywords_and_tags(store):
    """Keywords and content tags from the old text do not survive an edit."""
    entry = store.add_active("Harvested potatoes", MemoryType.ACTION, importance=0.5)
    assert MemoryTags.PLANTING in entry.tags

    store.edit(entry.id, "Repaired the wall")

    assert entry.keywords == {"repaired", "wall"}
    assert MemoryTags.PLANTING not in entry.tags
    assert {MemoryTags.BUILDING, MemoryTags.USER_EDITED} <= entry.tags

    store.clear_active()
    assert store.retrieve(MemoryQuery(tags={MemoryTags.PLANTING})) == []
    assert store.retrieve(MemoryQuery(tags={MemoryTags.BUILDING})) == [entry]


def test_edit_keeps_summary_provenance():
    """Provenance and notes tags stay when a summary is edited."""
    store = TieredMemoryStore("a", max_event_log=1, deep_archive_fallback=True)
    for i in range(2):
        store.event_log.insert(0, MemoryEntry(f"log {i}", MemoryType.ACTION, MemoryLayer.EVENT_LOG))
    store.archive_overflow()
    archived = store.archive[0]

    store.edit(archived.id, "The long winter", notes="family lore")

    assert {
        MemoryTags.DEEP_ARCHIVE,
        MemoryTags.archive_source(1),
        MemoryTags.NOTES,
        MemoryTags.USER_EDITED,
    } <= archived.tags


def test_archive_passes_leave_no_stale_results(blocking_summarizer):
    """Archive results that arrive after their group was dropped are not kept."""
    with SummarizationScheduler(blocking_summarizer) as scheduler:
        store = TieredMemoryStore("a", max_event_log=1, scheduler=scheduler)
        for i in range(6):
            store.event_log.insert(0, MemoryEntry(f"log {i}", MemoryType.EVENT, MemoryLayer.EVENT_LOG))
            store.archive_overflow()
            store.adopt_completed_summaries()

        blocking_summarizer.release.set()
        assert scheduler.wait_idle(timeout=5)
        store.adopt_completed_summaries()

        assert scheduler.completed_fingerprints() == []
    assert len(blocking_summarizer.calls) == 5
    assert store.archive == []
    assert [m.content for m in store.event_log] == ["log 5"]


def test_overflow_factor_clamped(caplog):
    """A factor below one is raised to one, so the warning needs a real backlog."""
    store = TieredMemoryStore("a", max_active=1, max_situational=5, overflow_factor=0)
    assert store.overflow_factor == 1.0

    with caplog.at_level(logging.WARNING, logger="memoria"):
        store.add_active("a", MemoryType.ACTION)
        store.add_active("b", MemoryType.ACTION)
    assert "overflow" not in caplog.text
