"""Keyword and tag extraction for memory entries."""

import re

from memoria.memory.base import MemoryEntry, MemoryTags

# Whitespace plus ASCII and CJK punctuation
_SPLIT_RE = re.compile(r"[\s,.!?;:\"'()\[\]，。、！？：；“”‘’（）]+")

STOP_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "if", "of", "to", "in", "on", "at",
        "by", "for", "with", "from", "as", "is", "am", "are", "was", "were", "be",
        "been", "being", "it", "its", "i", "me", "my", "you", "your", "he", "him",
        "his", "she", "her", "we", "us", "our", "they", "them", "their", "this",
        "that", "these", "those", "there", "here", "not", "no", "so", "do", "did",
        "does", "has", "have", "had", "will", "would", "can", "could", "just",
        "said", "says", "about", "into", "than", "then", "very", "already", "now",
    }
)

# Substring rules, matched against lowercased content
TAG_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    # Emotion
    (MemoryTags.HAPPY, ("happy", "glad", "joy", "cheerful", "delighted")),
    (MemoryTags.SAD, ("sad", "grief", "cried", "crying", "upset", "mourn")),
    (MemoryTags.ANGRY, ("angry", "furious", "rage", "enraged", "mad at")),
    (MemoryTags.ANXIOUS, ("anxious", "worried", "nervous", "uneasy", "afraid")),
    # Event
    (MemoryTags.COMBAT, ("combat", "battle", "skirmish", "firefight")),
    (MemoryTags.RAID, ("raid", "attack", "ambush")),
    (MemoryTags.INJURY, ("injured", "hurt", "wounded", "injury")),
    (MemoryTags.DEATH, ("died", "death", "dead", "killed", "passed away")),
    (MemoryTags.TASK_COMPLETE, ("finished", "completed", "done with")),
    # Social
    (MemoryTags.CHITCHAT, ("chitchat", "small talk", "chatted")),
    (MemoryTags.DEEP_TALK, ("deep talk", "deep conversation", "heart to heart")),
    (MemoryTags.QUARREL, ("quarrel", "argued", "argument", "fight", "insulted")),
    # Occupation
    (MemoryTags.COOKING, ("cook", "meal", "kitchen")),
    (MemoryTags.BUILDING, ("build", "construct", "built", "repair")),
    (MemoryTags.PLANTING, ("plant", "grow", "harvest", "sow")),
    (MemoryTags.MINING, ("mine", "mining", "digging")),
    (MemoryTags.RESEARCH, ("research", "study", "studied")),
    (MemoryTags.MEDICAL, ("medical", "heal", "treat", "surgery", "doctor")),
)

DEATH_IMPORTANCE = 0.9
IMPORTANT_THRESHOLD = 0.8


def extract_keywords(content: str) -> set[str]:
    """Split content into lowercase keywords, dropping stop words."""
    keywords = set()
    for token in _SPLIT_RE.split(content.lower()):
        token = token.strip("-_*#")
        if len(token) > 1 and token not in STOP_WORDS:
            keywords.add(token)
    return keywords


def match_tags(content: str) -> set[str]:
    """Tags whose substring rules occur in content."""
    lowered = content.lower()
    return {tag for tag, needles in TAG_RULES if any(n in lowered for n in needles)}


def tag_entry(entry: MemoryEntry) -> MemoryEntry:
    """Populate keywords and tags on entry in place.

    Only adds to the existing sets, so running it again is a no-op. A death
    match raises importance to at least 0.9.
    """
    if not entry.content:
        return entry

    entry.keywords |= extract_keywords(entry.content)

    tags = match_tags(entry.content)
    if MemoryTags.DEATH in tags:
        tags.add(MemoryTags.IMPORTANT)
        entry.importance = max(entry.importance, DEATH_IMPORTANCE)
    if entry.is_user_edited:
        tags.add(MemoryTags.USER_EDITED)
    if entry.importance > IMPORTANT_THRESHOLD:
        tags.add(MemoryTags.IMPORTANT)
    entry.tags |= tags
    return entry
