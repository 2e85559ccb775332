"""
Real-time exercise-form analysis engine.

PIPELINE COMPONENTS:
1. geometry: planar joint angle at a vertex, folded into [0, 180]
2. landmarks: immutable 33-point landmark frames from the pose model
3. catalog: ExerciseDefinition per exercise (metrics, thresholds, rules)
4. rep_cycle: generic EXTENDED/CONTRACTED rep state machine with debounce
5. issue_tracker: keeps the highest-priority form issue of the current rep
6. feedback_log: newest-first, capacity-bounded per-rep feedback history
7. session: ExerciseSession + FormAnalysisEngine control surface

Usage:
    from formcheck.engine import FormAnalysisEngine, LandmarkFrame

    engine = FormAnalysisEngine()
    engine.start_session("squat")
    result = engine.process_frame(LandmarkFrame.from_points(points, timestamp_ms))
    print(result.rep_count, result.live_feedback)
"""

from formcheck.engine.geometry import angle_between
from formcheck.engine.landmarks import (
    LANDMARK_COUNT,
    Landmark,
    LandmarkFrame,
    PoseLandmark,
)
from formcheck.engine.catalog import (
    EXERCISES,
    Classification,
    Condition,
    ExerciseDefinition,
    FormRule,
    HorizontalOffset,
    JointAngle,
    RepDirection,
    RuleScope,
    UnknownExerciseError,
    VerticalOffset,
    get_exercise,
    list_exercises,
)
from formcheck.engine.rep_cycle import (
    RepCompletion,
    RepCycleStateMachine,
    RepPhase,
    RepTransition,
)
from formcheck.engine.issue_tracker import FormIssue, IssueTracker
from formcheck.engine.feedback_log import FeedbackEntry, FeedbackLog
from formcheck.engine.session import (
    ExerciseSession,
    FeedbackItem,
    FormAnalysisEngine,
    FrameResult,
    SessionSummary,
)

__all__ = [
    # Geometry & input
    "angle_between",
    "LANDMARK_COUNT",
    "Landmark",
    "LandmarkFrame",
    "PoseLandmark",

    # Catalog
    "EXERCISES",
    "Classification",
    "Condition",
    "ExerciseDefinition",
    "FormRule",
    "HorizontalOffset",
    "JointAngle",
    "RepDirection",
    "RuleScope",
    "UnknownExerciseError",
    "VerticalOffset",
    "get_exercise",
    "list_exercises",

    # Rep cycle
    "RepCompletion",
    "RepCycleStateMachine",
    "RepPhase",
    "RepTransition",

    # Issues & feedback
    "FormIssue",
    "IssueTracker",
    "FeedbackEntry",
    "FeedbackLog",

    # Sessions
    "ExerciseSession",
    "FeedbackItem",
    "FormAnalysisEngine",
    "FrameResult",
    "SessionSummary",
]
