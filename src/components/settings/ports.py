"""
Settings component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.entities import SystemConfig


class ConfigRepoPort(Protocol):
    """Repository interface for the singleton system config."""

    def get(self) -> SystemConfig | None:
        """Get the stored config, or None on first run."""
        ...

    def save(self, config: SystemConfig) -> SystemConfig:
        """Save or update the config (upsert)."""
        ...


class CachePurgePort(Protocol):
    """Cache purge hook invoked when a save carries the invalidate command."""

    def purge(self) -> None:
        """Purge cached responses."""
        ...


class ClockPort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
