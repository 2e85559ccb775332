"""
Exercise sessions and the engine that owns them.

Per-frame pipeline (synchronous, one frame at a time):

    landmarks -> metrics -> rep-cycle state machine -> issue tracker
              -> (on rep completion) feedback entry -> feedback log

The engine is not thread-safe. Callers delivering frames from more than one
thread must serialize calls per engine.
"""

import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from formcheck.config import get_settings
from formcheck.engine.catalog import (
    Classification,
    ExerciseDefinition,
    RuleScope,
    get_exercise,
)
from formcheck.engine.feedback_log import FeedbackEntry, FeedbackLog
from formcheck.engine.issue_tracker import IssueTracker
from formcheck.engine.landmarks import LandmarkFrame
from formcheck.engine.rep_cycle import (
    RepCompletion,
    RepCycleStateMachine,
    RepPhase,
    RepTransition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackItem:
    """One live advisory message."""
    classification: Classification
    message: str


@dataclass
class FrameResult:
    """Everything the UI needs after one processed frame."""
    exercise_id: str
    timestamp_ms: float
    skipped: bool
    rep_count: int
    phase: RepPhase
    primary_angle: Optional[float] = None
    measurements: Dict[str, Optional[float]] = field(default_factory=dict)
    live_feedback: List[FeedbackItem] = field(default_factory=list)
    completed_rep: Optional[FeedbackEntry] = None


@dataclass
class SessionSummary:
    """Statistics for a stopped session."""
    session_id: str
    exercise_id: str
    total_reps: int
    duration_ms: float
    frames_processed: int
    frames_skipped: int
    classification_counts: Dict[str, int] = field(default_factory=dict)


class ExerciseSession:
    """
    Working state for one exercise from start to stop.

    Owns the rep-cycle state machine, the per-rep issue tracker and the live
    feed. Completed reps go to the engine-owned feedback log, which outlives
    the session.
    """

    def __init__(
        self,
        definition: ExerciseDefinition,
        feedback_log: FeedbackLog,
        min_visibility: float = 0.0,
    ):
        self.session_id = str(uuid.uuid4())
        self.definition = definition
        self.min_visibility = min_visibility
        self.state_machine = RepCycleStateMachine(definition)
        self.issue_tracker = IssueTracker()
        self.live_feedback: List[FeedbackItem] = []

        self._feedback_log = feedback_log
        self._classification_counts: Counter = Counter()
        self.frames_processed = 0
        self.frames_skipped = 0
        self.first_frame_ms: Optional[float] = None
        self.last_frame_ms: Optional[float] = None

    @property
    def exercise_id(self) -> str:
        return self.definition.id

    @property
    def rep_count(self) -> int:
        return self.state_machine.rep_count

    @property
    def phase(self) -> RepPhase:
        return self.state_machine.phase

    def process(self, frame: LandmarkFrame) -> FrameResult:
        """Run one landmark frame through the pipeline."""
        definition = self.definition
        timestamp = frame.timestamp_ms

        self.frames_processed += 1
        if self.first_frame_ms is None:
            self.first_frame_ms = timestamp
        self.last_frame_ms = timestamp

        measurements = definition.measure(frame, self.min_visibility)
        angle = measurements[definition.primary_metric]

        if angle is None:
            # No usable primary angle: leave the state machine untouched
            self.frames_skipped += 1
            self.live_feedback = []
            logger.debug(f"{definition.id}: frame at {timestamp:.0f}ms skipped, "
                         f"{definition.primary_metric} landmarks unavailable")
            return FrameResult(
                exercise_id=definition.id,
                timestamp_ms=timestamp,
                skipped=True,
                rep_count=self.rep_count,
                phase=self.phase,
                measurements=measurements,
            )

        transition = self.state_machine.update(angle, timestamp)
        if transition is RepTransition.STARTED:
            self.issue_tracker.reset()

        self.live_feedback = [
            FeedbackItem(form_rule.classification, form_rule.message)
            for form_rule in definition.evaluate(measurements)
        ]

        # Only the loaded part of the rep is judged; a debounced standing frame is not
        if (self.phase is RepPhase.CONTRACTED
                and transition is not RepTransition.SUPPRESSED
                and not definition.is_extended(angle)):
            self.issue_tracker.offer_rules(definition.evaluate(measurements, RuleScope.FRAME))

        completed_rep = None
        if transition is RepTransition.COMPLETED:
            completed_rep = self._complete_rep(self.state_machine.last_completion)

        return FrameResult(
            exercise_id=definition.id,
            timestamp_ms=timestamp,
            skipped=False,
            rep_count=self.rep_count,
            phase=self.phase,
            primary_angle=angle,
            measurements=measurements,
            live_feedback=list(self.live_feedback),
            completed_rep=completed_rep,
        )

    def _complete_rep(self, completion: RepCompletion) -> FeedbackEntry:
        definition = self.definition
        peak = {definition.primary_metric: completion.peak_angle}
        self.issue_tracker.offer_rules(definition.evaluate(peak, RuleScope.PEAK))

        issue = self.issue_tracker.take()
        if issue is None:
            message, classification = definition.good_rep_message, Classification.SUCCESS
        else:
            message, classification = issue.message, issue.classification

        entry = FeedbackEntry(
            message=message,
            classification=classification,
            rep_number=completion.rep_number,
            timestamp=completion.completed_at_ms,
            exercise_id=definition.id,
            peak_angle=completion.peak_angle,
        )
        self._feedback_log.append(entry)
        self._classification_counts[classification.value] += 1

        logger.info(f"{definition.id}: rep {completion.rep_number} "
                    f"({completion.duration_ms:.0f}ms, peak {completion.peak_angle:.1f} deg) "
                    f"-> {classification.value}: {message}")
        return entry

    def summary(self) -> SessionSummary:
        duration = 0.0
        if self.first_frame_ms is not None and self.last_frame_ms is not None:
            duration = self.last_frame_ms - self.first_frame_ms
        return SessionSummary(
            session_id=self.session_id,
            exercise_id=self.exercise_id,
            total_reps=self.rep_count,
            duration_ms=duration,
            frames_processed=self.frames_processed,
            frames_skipped=self.frames_skipped,
            classification_counts={
                classification.value: self._classification_counts[classification.value]
                for classification in Classification
            },
        )


class FormAnalysisEngine:
    """
    Session control surface consumed by the UI layer.

    Usage:
        engine = FormAnalysisEngine()
        engine.start_session("squat")
        for frame in frames:
            result = engine.process_frame(frame)
            if result and result.completed_rep:
                show(result.completed_rep)
        summary = engine.stop_session()
    """

    def __init__(
        self,
        feedback_log_capacity: Optional[int] = None,
        min_visibility: Optional[float] = None,
    ):
        settings = get_settings()
        if feedback_log_capacity is None:
            feedback_log_capacity = settings.feedback_log_capacity
        if min_visibility is None:
            min_visibility = settings.landmark_visibility_threshold

        self.min_visibility = min_visibility
        self.feedback_log = FeedbackLog(feedback_log_capacity)
        self._session: Optional[ExerciseSession] = None

    @property
    def session(self) -> Optional[ExerciseSession]:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def exercise_id(self) -> Optional[str]:
        return self._session.exercise_id if self._session else None

    @property
    def rep_count(self) -> int:
        return self._session.rep_count if self._session else 0

    @property
    def live_feedback(self) -> List[FeedbackItem]:
        return list(self._session.live_feedback) if self._session else []

    @property
    def feedback_entries(self) -> Tuple[FeedbackEntry, ...]:
        return self.feedback_log.entries

    def start_session(self, exercise_id: str) -> ExerciseSession:
        """
        Start analysing an exercise, replacing any running session.

        Raises:
            UnknownExerciseError: exercise_id is not in the catalog. The
                running session, if any, is left untouched.
        """
        definition = get_exercise(exercise_id)
        if self._session is not None:
            self.stop_session()

        self._session = ExerciseSession(definition, self.feedback_log, self.min_visibility)
        logger.info(f"Started {definition.id} session {self._session.session_id}")
        return self._session

    def stop_session(self) -> Optional[SessionSummary]:
        """Discard the running session's state. Returns None if none was running."""
        session, self._session = self._session, None
        if session is None:
            return None
        summary = session.summary()
        logger.info(f"Stopped {summary.exercise_id} session {summary.session_id}: "
                    f"{summary.total_reps} reps, {summary.frames_skipped}/"
                    f"{summary.frames_processed} frames skipped")
        return summary

    def clear_feedback_log(self) -> None:
        self.feedback_log.clear()

    def process_frame(self, frame: LandmarkFrame) -> Optional[FrameResult]:
        """Process one frame, or return None when no session is running."""
        if self._session is None:
            logger.debug("Frame ignored: no active session")
            return None
        return self._session.process(frame)
