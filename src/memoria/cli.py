"""
CLI entry point.

Commands:
- health: Check summarizer configuration and connectivity
- replay <file>: Feed a YAML/JSON event script through the memory system

Flags:
- --debug: Enable debug logging to file
"""

import logging
import sys
from pathlib import Path

import yaml

from memoria.core.clock import ManualClock
from memoria.core.config import Settings, get_settings
from memoria.core.logging import get_logger, setup_logging
from memoria.core.manager import MemoryManager
from memoria.memory.base import MemoryLayer, MemoryType
from memoria.memory.views import memory_context
from memoria.summarization.llm import create_summarizer

USAGE = """Usage: memoria [--debug] <command>
Commands: health, replay <file>
Flags: --debug (enable debug logging to data/memoria.log)"""


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = list(sys.argv[1:] if argv is None else argv)
    settings = get_settings()

    debug_mode = "--debug" in args
    if debug_mode:
        args.remove("--debug")
        setup_logging(level=logging.DEBUG, log_file=settings.log_path)
    else:
        setup_logging(level=logging.WARNING)
    logger = get_logger("cli")

    if not args:
        print(USAGE)
        return 1

    command = args[0]

    if command == "health":
        return _health(settings)

    if command == "replay":
        if len(args) < 2:
            print("Usage: memoria replay <file>")
            return 1
        try:
            return _replay(settings, Path(args[1]))
        except (OSError, yaml.YAMLError, ValueError, KeyError) as e:
            logger.error(f"Replay failed: {e}")
            print(f"Replay failed: {e}")
            return 1

    print(f"Unknown command: {command}")
    print(USAGE)
    return 1


def _health(settings: Settings) -> int:
    summarizer = create_summarizer(settings)
    if summarizer is None:
        print("AI summarization: disabled (rule-based summaries only)")
        return 0

    print(f"AI summarization: {settings.summarizer_provider} / {settings.summarizer_model}")
    ok = summarizer.health_check()
    print(f"Provider reachable: {'yes' if ok else 'no'}")
    return 0 if ok else 1


def load_events(path: Path) -> list[dict]:
    """Read an event script: a list of events or a mapping with an 'events' list."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("events", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of events")
    for i, event in enumerate(data):
        if not isinstance(event, dict):
            raise ValueError(f"{path}: event {i} is not a mapping: {event!r}")
    return sorted(data, key=lambda e: e.get("tick", 0))


def _replay(settings: Settings, path: Path) -> int:
    events = load_events(path)
    clock = ManualClock()

    with MemoryManager(settings, create_summarizer(settings), clock) as manager:
        for event in events:
            clock.set(max(clock(), int(event.get("tick", clock()))))
            manager.tick()

            if "speaker" in event or "listener" in event:
                manager.record_conversation(
                    event.get("speaker"), event.get("listener"), str(event["content"])
                )
                continue

            manager.add_memory(
                str(event["agent"]),
                str(event["content"]),
                MemoryType(event.get("type", MemoryType.OBSERVATION.value)),
                float(event.get("importance", 0.5)),
                event.get("related_agent"),
            )

        manager.summarize_all()

        for agent_id in sorted(manager.agents):
            store = manager.store_for(agent_id)
            counts = store.counts()
            print(f"== {store.agent_name}")
            print(
                "   "
                + ", ".join(f"{layer.value}={counts[layer]}" for layer in MemoryLayer)
            )
            for entry in store.event_log:
                print(f"   [event_log] {entry.content}")
            context = memory_context(store)
            if context:
                print(context, end="")

    return 0


if __name__ == "__main__":
    sys.exit(main())
