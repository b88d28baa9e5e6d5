"""
Core module - configuration, logging, clock, agent registry.

Components:
- config: Settings management via pydantic-settings
- logging: Logging setup
- clock: Tick source used for timestamps and periodic jobs
- manager: One memory store per agent, tick-driven maintenance
"""

from memoria.core.config import Settings

__all__ = ["Settings"]
