"""Retry bookkeeping for tracks that fail to start."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RetryPolicy:
    """Bounded, non-duplicating retry bookkeeping for one guild.

    A track may be retried only while the shared counter is below
    ``max_retries`` and its identity has not been retried before. Success and
    drop both clear the bookkeeping for that identity, so each track gets at
    most one retry per play cycle.
    """

    max_retries: int = 2
    count: int = 0
    retried: set[str] = field(default_factory=set)

    def should_retry(self, identity: str) -> bool:
        return self.count < self.max_retries and identity not in self.retried

    def record_retry(self, identity: str) -> int:
        """Record a retry and return the attempt number it represents."""
        self.count += 1
        self.retried.add(identity)
        return self.count

    def record_success(self, identity: str) -> None:
        self.count = 0
        self.retried.discard(identity)

    def record_drop(self, identity: str) -> None:
        self.count = 0
        self.retried.discard(identity)

    def reset(self) -> None:
        self.count = 0
        self.retried.clear()

    @property
    def is_clean(self) -> bool:
        return self.count == 0 and not self.retried
