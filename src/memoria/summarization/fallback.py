"""Rule-based summary used when no AI summary is ready.

Entries are grouped by a normalized content prefix (conversations by the
other party's name), most frequent groups first, repeats marked with ×N.
"""

import re
from collections.abc import Sequence

from memoria.memory.base import MemoryEntry, MemoryType

PREFIX_LENGTH = 20
LABEL_LENGTH = 40
MAX_GROUPS = 5
MAX_SUMMARY_CHARS = 200
SEPARATOR = "; "

_NORMALIZE_RE = re.compile(r"[^\w]+")


def _normalize(content: str) -> str:
    return " ".join(_NORMALIZE_RE.sub(" ", content.lower()).split())[:PREFIX_LENGTH]


def _label(content: str) -> str:
    content = " ".join(content.split())
    if len(content) > LABEL_LENGTH:
        return content[:LABEL_LENGTH] + "..."
    return content


def _group_key(entry: MemoryEntry) -> tuple[str, str]:
    if entry.type == MemoryType.CONVERSATION and entry.related_agent:
        return f"agent:{entry.related_agent}", f"Talked with {entry.related_agent}"
    return f"text:{_normalize(entry.content)}", _label(entry.content)


def simple_summary(entries: Sequence[MemoryEntry]) -> str:
    """Deterministic frequency summary of entries, empty string for no entries."""
    if not entries:
        return ""

    # dict keeps first-seen order; sorted() is stable so ties stay in that order
    groups: dict[str, list] = {}
    for entry in entries:
        key, label = _group_key(entry)
        group = groups.setdefault(key, [label, 0])
        group[1] += 1
    ordered = sorted(groups.values(), key=lambda g: -g[1])

    suffix = f" ({len(entries)} total)" if len(entries) > 3 else ""
    budget = MAX_SUMMARY_CHARS - len(suffix)

    parts: list[str] = []
    for label, count in ordered[:MAX_GROUPS]:
        if not label:
            continue
        part = f"{label}×{count}" if count > 1 else label
        if parts and len(SEPARATOR.join([*parts, part])) > budget:
            break
        parts.append(part)

    if not parts:
        return f"{len(entries)} {entries[0].type.value} memories"
    return SEPARATOR.join(parts)[:budget] + suffix
