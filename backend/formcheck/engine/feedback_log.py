"""Capacity-bounded, newest-first log of per-rep feedback."""

import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterator, Optional, Tuple

from formcheck.engine.catalog import Classification


@dataclass(frozen=True)
class FeedbackEntry:
    """Feedback for one completed rep. Immutable once created."""
    message: str
    classification: Classification
    rep_number: int
    timestamp: float  # Frame timestamp (ms) of the completing frame
    exercise_id: str
    peak_angle: Optional[float] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class FeedbackLog:
    """
    Reverse-chronological feedback history.

    Appending beyond capacity silently drops the oldest entries. The log
    outlives exercise sessions and is only emptied by clear().
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"Feedback log capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: Deque[FeedbackEntry] = deque(maxlen=capacity)

    def append(self, entry: FeedbackEntry) -> None:
        # appendleft on a full deque drops from the right, i.e. the oldest entry
        self._entries.appendleft(entry)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> Tuple[FeedbackEntry, ...]:
        """Snapshot, newest first."""
        return tuple(self._entries)

    @property
    def latest(self) -> Optional[FeedbackEntry]:
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FeedbackEntry]:
        return iter(tuple(self._entries))
