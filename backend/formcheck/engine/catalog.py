"""
Exercise catalog.

Every supported exercise is one ExerciseDefinition value: the metrics to
measure, the thresholds that mark the two ends of a rep, the debounce window
and the classification rules. A single generic state machine consumes these
definitions; there is no per-exercise analyzer code.

Thresholds are heuristics tuned for each exercise's recommended camera view.
Treat them as configuration, not physiology.

METRICS:
- JointAngle: angle at a vertex landmark (bilateral = min of left/right)
- HorizontalOffset: point.x - reference.x
- VerticalOffset: point.y - midpoint y of a reference line

RULE SCOPES:
- FRAME: judged on the instantaneous measurement during the active phase
- PEAK: judged once per rep on the extreme primary angle reached
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple, Union

from formcheck.engine.geometry import angle_between
from formcheck.engine.landmarks import Landmark, LandmarkFrame, PoseLandmark as P

logger = logging.getLogger(__name__)

# Rays shorter than this (normalized units) make an angle meaningless
MIN_RAY_LENGTH = 1e-6


class Classification(str, Enum):
    """Feedback classification shown to the user."""
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


class RepDirection(Enum):
    """Which way the primary angle moves when the rep contracts."""
    FLEX = "flex"    # angle falls below the contracted threshold
    RAISE = "raise"  # angle rises above the contracted threshold
    HOLD = "hold"    # static hold, no rep cycle


class RuleScope(Enum):
    """What a rule judges when building per-rep feedback."""
    FRAME = "frame"
    PEAK = "peak"


class UnknownExerciseError(KeyError):
    """Raised when a session is started for an exercise not in the catalog."""

    def __init__(self, exercise_id: str):
        super().__init__(exercise_id)
        self.exercise_id = exercise_id

    def __str__(self) -> str:
        return (f"Unknown exercise {self.exercise_id!r}. "
                f"Available: {', '.join(sorted(EXERCISES))}")


# =============================================================================
# Metrics
# =============================================================================

def _ray_length(a: Landmark, b: Landmark) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


@dataclass(frozen=True)
class JointAngle:
    """Angle at `vertex` between rays to `first` and `last`."""
    first: P
    vertex: P
    last: P
    bilateral: bool = False

    def _sides(self) -> List[Tuple[P, P, P]]:
        sides = [(self.first, self.vertex, self.last)]
        if self.bilateral:
            sides.append((self.first.mirrored, self.vertex.mirrored, self.last.mirrored))
        return sides

    def measure(self, frame: LandmarkFrame, min_visibility: float = 0.0) -> Optional[float]:
        """
        Measure the angle, or None if no side has usable landmarks.

        Bilateral metrics return the smaller of the two angles, falling back
        to whichever side is visible when the other is occluded.
        """
        angles = []
        for indices in self._sides():
            points = [frame.get(index, min_visibility) for index in indices]
            if any(point is None for point in points):
                continue
            a, b, c = points
            if _ray_length(a, b) < MIN_RAY_LENGTH or _ray_length(c, b) < MIN_RAY_LENGTH:
                continue
            angles.append(angle_between(a, b, c))
        if not angles:
            return None
        return min(angles)


@dataclass(frozen=True)
class HorizontalOffset:
    """Horizontal distance of `point` past `reference` (positive = further right)."""
    point: P
    reference: P

    def measure(self, frame: LandmarkFrame, min_visibility: float = 0.0) -> Optional[float]:
        point = frame.get(self.point, min_visibility)
        reference = frame.get(self.reference, min_visibility)
        if point is None or reference is None:
            return None
        return point.x - reference.x


@dataclass(frozen=True)
class VerticalOffset:
    """
    Vertical distance of `point` from the midpoint of a line.

    Image y grows downward, so a positive value means the point sits below
    the line (e.g. sagging hips in a plank).
    """
    point: P
    line_start: P
    line_end: P

    def measure(self, frame: LandmarkFrame, min_visibility: float = 0.0) -> Optional[float]:
        point = frame.get(self.point, min_visibility)
        start = frame.get(self.line_start, min_visibility)
        end = frame.get(self.line_end, min_visibility)
        if point is None or start is None or end is None:
            return None
        return point.y - (start.y + end.y) / 2


Metric = Union[JointAngle, HorizontalOffset, VerticalOffset]


# =============================================================================
# Rules
# =============================================================================

@dataclass(frozen=True)
class Condition:
    """Bounds on one named metric. Every bound that is set must hold."""
    metric: str
    gt: Optional[float] = None
    ge: Optional[float] = None
    lt: Optional[float] = None
    le: Optional[float] = None

    def holds(self, measurements: Mapping[str, Optional[float]]) -> bool:
        value = measurements.get(self.metric)
        if value is None:
            return False
        if self.gt is not None and not value > self.gt:
            return False
        if self.ge is not None and not value >= self.ge:
            return False
        if self.lt is not None and not value < self.lt:
            return False
        if self.le is not None and not value <= self.le:
            return False
        return True


@dataclass(frozen=True)
class FormRule:
    """A classification rule: when all conditions hold, report the message."""
    message: str
    classification: Classification
    priority: int
    conditions: Tuple[Condition, ...]
    scope: RuleScope = RuleScope.FRAME

    def matches(self, measurements: Mapping[str, Optional[float]]) -> bool:
        return all(condition.holds(measurements) for condition in self.conditions)


def rule(
    message: str,
    classification: Classification,
    priority: int,
    *conditions: Condition,
    scope: RuleScope = RuleScope.FRAME,
) -> FormRule:
    return FormRule(message, classification, priority, tuple(conditions), scope)


# =============================================================================
# Exercise definition
# =============================================================================

@dataclass(frozen=True)
class ExerciseDefinition:
    """Static configuration for one exercise variant."""
    id: str
    name: str
    description: str
    recommended_view: str
    primary_metric: str
    metrics: Mapping[str, Metric] = field(hash=False)
    direction: RepDirection
    contracted_threshold: Optional[float] = None
    extended_threshold: Optional[float] = None
    debounce_ms: float = 0.0
    rules: Tuple[FormRule, ...] = ()
    good_rep_message: str = "Good rep!"

    def __post_init__(self):
        if self.primary_metric not in self.metrics:
            raise ValueError(f"{self.id}: primary metric {self.primary_metric!r} is not declared")
        for form_rule in self.rules:
            for condition in form_rule.conditions:
                if condition.metric not in self.metrics:
                    raise ValueError(f"{self.id}: rule {form_rule.message!r} uses "
                                     f"undeclared metric {condition.metric!r}")
        if self.counts_reps:
            if self.contracted_threshold is None or self.extended_threshold is None:
                raise ValueError(f"{self.id}: rep exercises need both thresholds")
            if self.is_extended(self.contracted_threshold):
                raise ValueError(f"{self.id}: contracted threshold lies in the extended range")
        # Highest priority first; live feedback keeps this order
        ordered = tuple(sorted(self.rules, key=lambda r: r.priority, reverse=True))
        object.__setattr__(self, "rules", ordered)

    @property
    def counts_reps(self) -> bool:
        return self.direction is not RepDirection.HOLD

    def is_contracted(self, angle: float) -> bool:
        """True once the angle has crossed past the contracted threshold."""
        if self.direction is RepDirection.FLEX:
            return angle < self.contracted_threshold
        if self.direction is RepDirection.RAISE:
            return angle > self.contracted_threshold
        return False

    def is_extended(self, angle: float) -> bool:
        """True once the angle has crossed past the extended threshold."""
        if self.direction is RepDirection.FLEX:
            return angle > self.extended_threshold
        if self.direction is RepDirection.RAISE:
            return angle < self.extended_threshold
        return False

    def further_contracted(self, angle: float, reference: float) -> bool:
        """True if `angle` is deeper into the contraction than `reference`."""
        if self.direction is RepDirection.RAISE:
            return angle > reference
        return angle < reference

    def measure(
        self,
        frame: LandmarkFrame,
        min_visibility: float = 0.0,
    ) -> Dict[str, Optional[float]]:
        return {
            name: metric.measure(frame, min_visibility)
            for name, metric in self.metrics.items()
        }

    def evaluate(
        self,
        measurements: Mapping[str, Optional[float]],
        scope: Optional[RuleScope] = None,
    ) -> List[FormRule]:
        """Rules matching the measurements, highest priority first."""
        return [
            form_rule for form_rule in self.rules
            if (scope is None or form_rule.scope is scope) and form_rule.matches(measurements)
        ]


# =============================================================================
# Catalog
# =============================================================================

OK, WARN, TIP = Classification.SUCCESS, Classification.WARNING, Classification.INFO
PEAK = RuleScope.PEAK

SQUAT = ExerciseDefinition(
    id="squat",
    name="Bodyweight Squat",
    description="Stand with feet shoulder-width apart",
    recommended_view="side",
    primary_metric="knee",
    metrics={
        "knee": JointAngle(P.LEFT_HIP, P.LEFT_KNEE, P.LEFT_ANKLE, bilateral=True),
        "knee_forward": HorizontalOffset(P.LEFT_KNEE, P.LEFT_ANKLE),
    },
    direction=RepDirection.FLEX,
    contracted_threshold=100.0,
    extended_threshold=160.0,
    debounce_ms=500.0,
    rules=(
        rule("Knees too far forward - push hips back", WARN, 30,
             Condition("knee_forward", gt=0.1)),
        rule("Go deeper - aim for thighs parallel to ground", WARN, 20,
             Condition("knee", gt=90.0, lt=160.0), scope=PEAK),
        rule("Excellent depth!", OK, 10,
             Condition("knee", le=90.0), scope=PEAK),
    ),
)

PUSHUP = ExerciseDefinition(
    id="pushup",
    name="Push-Up",
    description="Start in plank position",
    recommended_view="side",
    primary_metric="elbow",
    metrics={
        "elbow": JointAngle(P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST, bilateral=True),
        "body": JointAngle(P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_KNEE),
    },
    direction=RepDirection.FLEX,
    contracted_threshold=100.0,
    extended_threshold=160.0,
    debounce_ms=500.0,
    rules=(
        rule("Keep body straight - engage your core", WARN, 30,
             Condition("body", lt=165.0)),
        rule("Lower your chest closer to the ground", TIP, 20,
             Condition("elbow", gt=90.0, lt=160.0), scope=PEAK),
        rule("Good depth!", OK, 10,
             Condition("elbow", le=90.0), scope=PEAK),
        rule("Good body alignment!", OK, 5,
             Condition("body", ge=165.0)),
    ),
)

BICEP_CURL = ExerciseDefinition(
    id="bicep_curl",
    name="Bicep Curl",
    description="Stand tall with arms extended, palms facing forward",
    recommended_view="side",
    primary_metric="elbow",
    metrics={
        "elbow": JointAngle(P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST, bilateral=True),
        "upper_arm": JointAngle(P.LEFT_HIP, P.LEFT_SHOULDER, P.LEFT_ELBOW),
    },
    direction=RepDirection.FLEX,
    contracted_threshold=50.0,
    extended_threshold=150.0,
    debounce_ms=600.0,
    rules=(
        rule("Keep elbows pinned to your sides", WARN, 30,
             Condition("upper_arm", gt=35.0)),
        rule("Squeeze higher at the top", TIP, 20,
             Condition("elbow", gt=35.0, lt=150.0), scope=PEAK),
        rule("Full contraction!", OK, 10,
             Condition("elbow", le=35.0), scope=PEAK),
    ),
)

SHOULDER_PRESS = ExerciseDefinition(
    id="shoulder_press",
    name="Shoulder Press",
    description="Start with hands at shoulder height, elbows under wrists",
    recommended_view="front",
    primary_metric="elbow",
    metrics={
        "elbow": JointAngle(P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST, bilateral=True),
        "torso": JointAngle(P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_KNEE),
    },
    direction=RepDirection.RAISE,
    contracted_threshold=160.0,
    extended_threshold=100.0,
    debounce_ms=600.0,
    rules=(
        rule("Avoid leaning back - brace your core", WARN, 30,
             Condition("torso", lt=160.0)),
        rule("Lock out your elbows overhead", TIP, 20,
             Condition("elbow", gt=100.0, lt=170.0), scope=PEAK),
        rule("Full lockout!", OK, 10,
             Condition("elbow", ge=170.0), scope=PEAK),
    ),
)

LATERAL_RAISE = ExerciseDefinition(
    id="lateral_raise",
    name="Lateral Raise",
    description="Stand with arms at your sides, slight bend in the elbows",
    recommended_view="front",
    primary_metric="shoulder",
    metrics={
        "shoulder": JointAngle(P.LEFT_HIP, P.LEFT_SHOULDER, P.LEFT_ELBOW, bilateral=True),
        "elbow": JointAngle(P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST, bilateral=True),
    },
    direction=RepDirection.RAISE,
    contracted_threshold=75.0,
    extended_threshold=30.0,
    debounce_ms=700.0,
    rules=(
        rule("Don't raise above shoulder height", WARN, 30,
             Condition("shoulder", gt=105.0)),
        rule("Keep arms nearly straight", WARN, 25,
             Condition("elbow", lt=140.0)),
        rule("Raise to shoulder height", TIP, 20,
             Condition("shoulder", gt=30.0, lt=85.0), scope=PEAK),
        rule("Great height!", OK, 10,
             Condition("shoulder", ge=85.0, le=105.0), scope=PEAK),
    ),
)

DEADLIFT = ExerciseDefinition(
    id="deadlift",
    name="Deadlift",
    description="Stand with feet hip-width apart, bar over mid-foot",
    recommended_view="side",
    primary_metric="hip",
    metrics={
        "hip": JointAngle(P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_KNEE, bilateral=True),
        "knee": JointAngle(P.LEFT_HIP, P.LEFT_KNEE, P.LEFT_ANKLE),
    },
    direction=RepDirection.FLEX,
    contracted_threshold=110.0,
    extended_threshold=160.0,
    debounce_ms=800.0,
    rules=(
        rule("Hinge at the hips - don't squat the weight", WARN, 30,
             Condition("knee", lt=110.0)),
        rule("Hinge a little deeper", TIP, 20,
             Condition("hip", gt=90.0, lt=160.0), scope=PEAK),
        rule("Good hip hinge!", OK, 10,
             Condition("hip", le=90.0), scope=PEAK),
    ),
)

SITUP = ExerciseDefinition(
    id="situp",
    name="Sit-Up",
    description="Lie on your back with knees bent, feet flat",
    recommended_view="side",
    primary_metric="torso",
    metrics={
        "torso": JointAngle(P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_KNEE, bilateral=True),
        "neck": JointAngle(P.LEFT_EAR, P.LEFT_SHOULDER, P.LEFT_HIP),
    },
    direction=RepDirection.FLEX,
    contracted_threshold=70.0,
    extended_threshold=120.0,
    debounce_ms=700.0,
    rules=(
        rule("Don't pull on your neck", WARN, 30,
             Condition("neck", lt=130.0)),
        rule("Curl all the way up", TIP, 20,
             Condition("torso", gt=50.0, lt=120.0), scope=PEAK),
        rule("Full sit-up!", OK, 10,
             Condition("torso", le=50.0), scope=PEAK),
    ),
)

BENT_OVER_ROW = ExerciseDefinition(
    id="bent_over_row",
    name="Bent-Over Row",
    description="Hinge forward with a flat back, arms hanging below the shoulders",
    recommended_view="side",
    primary_metric="elbow",
    metrics={
        "elbow": JointAngle(P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST, bilateral=True),
        "torso": JointAngle(P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_KNEE),
    },
    direction=RepDirection.FLEX,
    contracted_threshold=90.0,
    extended_threshold=150.0,
    debounce_ms=600.0,
    rules=(
        rule("Hinge forward - keep your torso near 45 degrees", WARN, 30,
             Condition("torso", gt=140.0)),
        rule("Don't round over - lift your chest", WARN, 25,
             Condition("torso", lt=60.0)),
        rule("Pull the weight to your waist", TIP, 20,
             Condition("elbow", gt=70.0, lt=150.0), scope=PEAK),
        rule("Strong pull!", OK, 10,
             Condition("elbow", le=70.0), scope=PEAK),
    ),
)

PLANK = ExerciseDefinition(
    id="plank",
    name="Plank Hold",
    description="Hold plank position with proper form",
    recommended_view="side",
    primary_metric="alignment",
    metrics={
        "alignment": JointAngle(P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_ANKLE),
        "hip_drop": VerticalOffset(P.LEFT_HIP, P.LEFT_SHOULDER, P.LEFT_ANKLE),
    },
    direction=RepDirection.HOLD,
    rules=(
        rule("Hips too high - lower them", WARN, 30,
             Condition("alignment", lt=170.0), Condition("hip_drop", lt=0.0)),
        rule("Hips sagging - engage your core", WARN, 30,
             Condition("alignment", lt=170.0), Condition("hip_drop", ge=0.0)),
        rule("Perfect alignment!", OK, 10,
             Condition("alignment", ge=170.0)),
    ),
)

SIDE_PLANK = ExerciseDefinition(
    id="side_plank",
    name="Side Plank Hold",
    description="Support yourself on one forearm, body in a straight line",
    recommended_view="front",
    primary_metric="alignment",
    metrics={
        "alignment": JointAngle(P.LEFT_SHOULDER, P.LEFT_HIP, P.LEFT_ANKLE),
        "hip_drop": VerticalOffset(P.LEFT_HIP, P.LEFT_SHOULDER, P.LEFT_ANKLE),
    },
    direction=RepDirection.HOLD,
    rules=(
        rule("Hips dropping - lift them toward the ceiling", WARN, 30,
             Condition("alignment", lt=165.0), Condition("hip_drop", ge=0.0)),
        rule("Hips piked - bring them in line", WARN, 30,
             Condition("alignment", lt=165.0), Condition("hip_drop", lt=0.0)),
        rule("Straight line from head to heels!", OK, 10,
             Condition("alignment", ge=165.0)),
    ),
)

EXERCISES: Dict[str, ExerciseDefinition] = {
    definition.id: definition
    for definition in (
        SQUAT,
        PUSHUP,
        BICEP_CURL,
        SHOULDER_PRESS,
        LATERAL_RAISE,
        DEADLIFT,
        SITUP,
        BENT_OVER_ROW,
        PLANK,
        SIDE_PLANK,
    )
}


def get_exercise(exercise_id: str) -> ExerciseDefinition:
    """Look up an exercise, failing loudly for unknown identifiers."""
    try:
        return EXERCISES[exercise_id]
    except KeyError:
        logger.warning(f"Rejected unknown exercise id {exercise_id!r}")
        raise UnknownExerciseError(exercise_id) from None


def list_exercises() -> List[ExerciseDefinition]:
    return list(EXERCISES.values())
