"""
Memory module - four-tier episodic memory per agent.

Tiers:
- active: Last few raw events, always part of the prompt
- situational: Recent raw events awaiting summarization
- event_log: Summaries of recent history
- archive: Deeply summarized long-term record (unbounded)

Storage: in-process lists; persistence is left to the host.
"""
