"""
Memory entry, query and tier definitions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4


class MemoryType(Enum):
    CONVERSATION = "conversation"
    ACTION = "action"
    INTERACTION = "interaction"
    OBSERVATION = "observation"
    EVENT = "event"
    EMOTION = "emotion"


class MemoryLayer(Enum):
    ACTIVE = "active"
    SITUATIONAL = "situational"
    EVENT_LOG = "event_log"
    ARCHIVE = "archive"


class MemoryTags:
    """Closed tag vocabulary."""

    # Emotion
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    ANXIOUS = "anxious"

    # Event
    COMBAT = "combat"
    RAID = "raid"
    INJURY = "injury"
    DEATH = "death"
    TASK_COMPLETE = "task-complete"

    # Social
    CHITCHAT = "chitchat"
    DEEP_TALK = "deep-talk"
    QUARREL = "quarrel"

    # Occupation
    COOKING = "cooking"
    BUILDING = "building"
    PLANTING = "planting"
    MINING = "mining"
    RESEARCH = "research"
    MEDICAL = "medical"

    # Markers
    IMPORTANT = "important"
    USER_EDITED = "user-edited"
    NOTES = "notes"

    # Summary provenance
    AI_SUMMARY = "ai-summary"
    RULE_SUMMARY = "rule-summary"
    DEEP_ARCHIVE = "deep-archive"

    @staticmethod
    def archive_source(count: int) -> str:
        return f"from-{count}-event-log"

    @classmethod
    def survives_edit(cls, tag: str) -> bool:
        """Tags that do not come from the content: notes and summary provenance."""
        if tag in (cls.NOTES, cls.AI_SUMMARY, cls.RULE_SUMMARY, cls.DEEP_ARCHIVE):
            return True
        return tag.startswith("from-") and tag.endswith("-event-log")


def clamp_unit(value: float) -> float:
    """Clamp to [0, 1]."""
    return max(0.0, min(1.0, float(value)))


@dataclass
class MemoryEntry:
    """Single memory record.

    importance and activity are clamped to [0, 1] on every assignment.
    related_agent is a name only; it never owns or keeps the agent alive.
    """

    content: str
    type: MemoryType
    layer: MemoryLayer = MemoryLayer.ACTIVE
    importance: float = 0.5
    related_agent: str | None = None
    timestamp: int = 0  # simulation ticks
    id: str = field(default_factory=lambda: uuid4().hex)
    activity: float = 1.0
    keywords: set[str] = field(default_factory=set)
    tags: set[str] = field(default_factory=set)
    is_pinned: bool = False
    is_user_edited: bool = False
    notes: str | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("importance", "activity"):
            value = clamp_unit(value)
        super().__setattr__(name, value)

    def decay(self, amount: float) -> None:
        """Lower activity by amount, floored at 0."""
        self.activity = max(0.0, self.activity - amount)

    def age(self, now: int) -> int:
        return max(0, now - self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Serialize entry for an external persistence layer."""
        return {
            "id": self.id,
            "content": self.content,
            "type": self.type.value,
            "layer": self.layer.value,
            "importance": self.importance,
            "activity": self.activity,
            "keywords": sorted(self.keywords),
            "tags": sorted(self.tags),
            "related_agent": self.related_agent,
            "timestamp": self.timestamp,
            "is_pinned": self.is_pinned,
            "is_user_edited": self.is_user_edited,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MemoryEntry":
        """Rebuild an entry produced by to_dict."""
        return cls(
            id=data["id"],
            content=data["content"],
            type=MemoryType(data["type"]),
            layer=MemoryLayer(data.get("layer", MemoryLayer.ACTIVE.value)),
            importance=data.get("importance", 0.5),
            activity=data.get("activity", 1.0),
            keywords=set(data.get("keywords", [])),
            tags=set(data.get("tags", [])),
            related_agent=data.get("related_agent"),
            timestamp=data.get("timestamp", 0),
            is_pinned=data.get("is_pinned", False),
            is_user_edited=data.get("is_user_edited", False),
            notes=data.get("notes"),
        )


@dataclass
class MemoryQuery:
    """Retrieval filters. Unset fields do not filter."""

    type: MemoryType | None = None
    layer: MemoryLayer | None = None
    related_agent: str | None = None
    tags: set[str] = field(default_factory=set)  # any-of
    keywords: list[str] = field(default_factory=list)  # scoring only
    include_context: bool = False
    max_count: int = 10
