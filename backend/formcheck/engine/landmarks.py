"""
Landmark frames produced by the external pose model.

The engine consumes one frame per processed video frame: 33 indexed body
keypoints in normalized image coordinates (MediaPipe Pose topology). Frames
are immutable; the engine never mutates them.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, Optional, Tuple


LANDMARK_COUNT = 33


class PoseLandmark(IntEnum):
    """Index-to-body-part mapping of the pose model."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32

    @property
    def mirrored(self) -> "PoseLandmark":
        """The same body part on the opposite side (self for midline points)."""
        if self.name.startswith("LEFT_"):
            return PoseLandmark["RIGHT_" + self.name[5:]]
        if self.name.startswith("RIGHT_"):
            return PoseLandmark["LEFT_" + self.name[6:]]
        if self.name.endswith("_LEFT"):
            return PoseLandmark[self.name[:-5] + "_RIGHT"]
        if self.name.endswith("_RIGHT"):
            return PoseLandmark[self.name[:-6] + "_LEFT"]
        return self


@dataclass(frozen=True)
class Landmark:
    """Single keypoint. Visibility is None when the model does not report it."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def is_usable(self, min_visibility: float = 0.0) -> bool:
        """Finite coordinates and, when reported, enough visibility."""
        if not self.is_finite:
            return False
        if self.visibility is None:
            return True
        return self.visibility >= min_visibility


@dataclass(frozen=True)
class LandmarkFrame:
    """
    Full set of landmarks for one instant.

    Missing landmarks are stored as None so indices stay stable even when the
    model drops a keypoint.
    """
    landmarks: Tuple[Optional[Landmark], ...]
    timestamp_ms: float

    @classmethod
    def from_points(
        cls,
        points: Iterable[Any],
        timestamp_ms: float,
    ) -> "LandmarkFrame":
        """
        Build a frame from raw points.

        Each point may be a Landmark, a mapping with x/y (and optional
        z/visibility), an (x, y[, z[, visibility]]) sequence, or None.
        """
        landmarks = []
        for point in points:
            if point is None or isinstance(point, Landmark):
                landmarks.append(point)
            elif isinstance(point, dict):
                landmarks.append(Landmark(
                    x=float(point["x"]),
                    y=float(point["y"]),
                    z=float(point.get("z", 0.0) or 0.0),
                    visibility=point.get("visibility"),
                ))
            else:
                landmarks.append(Landmark(*(float(v) for v in point)))
        return cls(landmarks=tuple(landmarks), timestamp_ms=float(timestamp_ms))

    def __len__(self) -> int:
        return len(self.landmarks)

    def get(self, index: int, min_visibility: float = 0.0) -> Optional[Landmark]:
        """Landmark at index, or None if absent, not finite or not visible."""
        if not 0 <= index < len(self.landmarks):
            return None
        landmark = self.landmarks[index]
        if landmark is None or not landmark.is_usable(min_visibility):
            return None
        return landmark
