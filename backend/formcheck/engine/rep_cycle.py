"""
Rep-cycle state machine.

One instance per active exercise session. Consumes the exercise's primary
angle once per frame and moves between two stored phases:

- EXTENDED: start/finish position (initial)
- CONTRACTED: the loaded part of the rep, where form is judged

A rep is counted on the CONTRACTED -> EXTENDED crossing, and only when the
exercise's debounce window has elapsed since the last counted rep. The
debounce clock is reset by counted reps only, so angle noise around the
extended threshold cannot register a second completion.

"Transitioning" (between the two thresholds) is derived from the last angle
and never stored.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from formcheck.engine.catalog import ExerciseDefinition

logger = logging.getLogger(__name__)


class RepPhase(Enum):
    """Stored phase of the rep cycle."""
    EXTENDED = "extended"
    CONTRACTED = "contracted"


class RepTransition(Enum):
    """Outcome of feeding one angle to the state machine."""
    NONE = "none"              # no phase change
    STARTED = "started"        # EXTENDED -> CONTRACTED, a new rep phase began
    COMPLETED = "completed"    # CONTRACTED -> EXTENDED, rep counted
    SUPPRESSED = "suppressed"  # extended threshold crossed inside the debounce window


@dataclass(frozen=True)
class RepCompletion:
    """A counted repetition."""
    rep_number: int
    started_at_ms: float
    completed_at_ms: float
    peak_angle: float

    @property
    def duration_ms(self) -> float:
        return self.completed_at_ms - self.started_at_ms


class RepCycleStateMachine:
    """
    Generic rep counter parameterized by an ExerciseDefinition.

    Static holds (rep counting disabled) accept angles but never leave
    EXTENDED and never complete a rep.
    """

    def __init__(self, definition: ExerciseDefinition):
        self.definition = definition
        self.phase = RepPhase.EXTENDED
        self.rep_count = 0
        self.last_rep_time: Optional[float] = None
        self.last_angle: Optional[float] = None
        self.last_completion: Optional[RepCompletion] = None

        # In-progress rep
        self._rep_started_at: Optional[float] = None
        self._peak_angle: Optional[float] = None

    @property
    def peak_angle(self) -> Optional[float]:
        """Most contracted angle of the in-progress rep."""
        return self._peak_angle

    @property
    def is_transitioning(self) -> bool:
        """True when the last angle sits between the two thresholds."""
        if self.last_angle is None or not self.definition.counts_reps:
            return False
        return not (self.definition.is_contracted(self.last_angle)
                    or self.definition.is_extended(self.last_angle))

    def update(self, angle: float, timestamp_ms: float) -> RepTransition:
        """
        Feed one primary-angle reading.

        Args:
            angle: Primary angle for this frame, in degrees
            timestamp_ms: Frame timestamp in milliseconds

        Returns:
            The transition this reading caused
        """
        self.last_angle = angle
        definition = self.definition

        if not definition.counts_reps:
            return RepTransition.NONE

        if self.phase is RepPhase.EXTENDED:
            if definition.is_contracted(angle):
                self.phase = RepPhase.CONTRACTED
                self._rep_started_at = timestamp_ms
                self._peak_angle = angle
                logger.debug(f"{definition.id}: EXTENDED -> CONTRACTED at {angle:.1f} deg")
                return RepTransition.STARTED
            return RepTransition.NONE

        # CONTRACTED
        if definition.further_contracted(angle, self._peak_angle):
            self._peak_angle = angle

        if not definition.is_extended(angle):
            return RepTransition.NONE

        if not self._debounce_elapsed(timestamp_ms):
            logger.debug(f"{definition.id}: completion suppressed, "
                         f"{timestamp_ms - self.last_rep_time:.0f}ms since last rep "
                         f"(debounce {definition.debounce_ms:.0f}ms)")
            return RepTransition.SUPPRESSED

        self.rep_count += 1
        self.last_rep_time = timestamp_ms
        self.last_completion = RepCompletion(
            rep_number=self.rep_count,
            started_at_ms=self._rep_started_at,
            completed_at_ms=timestamp_ms,
            peak_angle=self._peak_angle,
        )
        self.phase = RepPhase.EXTENDED
        self._rep_started_at = None
        self._peak_angle = None
        logger.debug(f"{definition.id}: CONTRACTED -> EXTENDED, rep {self.rep_count}")
        return RepTransition.COMPLETED

    def _debounce_elapsed(self, timestamp_ms: float) -> bool:
        if self.last_rep_time is None:
            return True
        return timestamp_ms - self.last_rep_time >= self.definition.debounce_ms

    def reset(self):
        self.phase = RepPhase.EXTENDED
        self.rep_count = 0
        self.last_rep_time = None
        self.last_angle = None
        self.last_completion = None
        self._rep_started_at = None
        self._peak_angle = None
