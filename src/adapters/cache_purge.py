"""
Logging cache purger.

Records and logs cache purges requested by config saves. The etag itself
is rotated by the config service; this adapter is the hook for anything
else holding cached responses.

Key behaviors:
- Logs each purge at the configured level
- Keeps purge timestamps in memory for test assertions
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


@dataclass
class LoggingCachePurger:
    """Cache purger that logs instead of calling an external cache."""

    purged_at: list[datetime] = field(default_factory=list)
    log_level: int = logging.INFO

    @property
    def purge_count(self) -> int:
        return len(self.purged_at)

    def purge(self) -> None:
        now = datetime.now(UTC)
        self.purged_at.append(now)
        logger.log(self.log_level, "Cache purge requested at %s", now.isoformat())
