"""Synthetic landmark frames with exact joint angles."""

import math
from typing import Dict, Optional, Tuple

from formcheck.engine import (
    LANDMARK_COUNT,
    Landmark,
    LandmarkFrame,
    PoseLandmark,
)

Point = Tuple[float, float]


def place_point(vertex: Point, toward: Point, angle_deg: float, length: float = 0.2) -> Point:
    """Point whose angle at `vertex` with the ray to `toward` is `angle_deg`."""
    base = math.atan2(toward[1] - vertex[1], toward[0] - vertex[0])
    theta = base + math.radians(angle_deg)
    return (vertex[0] + length * math.cos(theta), vertex[1] + length * math.sin(theta))


def build_frame(
    points: Dict[PoseLandmark, Optional[Point]],
    timestamp_ms: float = 0.0,
    visibility: float = 1.0,
) -> LandmarkFrame:
    """Frame with the given landmarks; every other landmark is missing."""
    landmarks = [None] * LANDMARK_COUNT
    for index, point in points.items():
        if point is not None:
            landmarks[index] = Landmark(x=point[0], y=point[1], visibility=visibility)
    return LandmarkFrame(landmarks=tuple(landmarks), timestamp_ms=timestamp_ms)


def squat_points(knee_angle: float, knee_x: float = 0.5, ankle_x: float = 0.5) -> Dict:
    knee = (knee_x, 0.6)
    ankle = (ankle_x, 0.8)
    return {
        PoseLandmark.LEFT_HIP: place_point(knee, ankle, knee_angle),
        PoseLandmark.LEFT_KNEE: knee,
        PoseLandmark.LEFT_ANKLE: ankle,
    }


def arm_points(elbow_angle: float, side: str = "LEFT") -> Dict:
    """Shoulder/elbow/wrist with the given elbow angle (upper arm hanging down)."""
    shoulder = (0.5, 0.3)
    elbow = (0.5, 0.5)
    return {
        PoseLandmark[f"{side}_SHOULDER"]: shoulder,
        PoseLandmark[f"{side}_ELBOW"]: elbow,
        PoseLandmark[f"{side}_WRIST"]: place_point(elbow, shoulder, elbow_angle),
    }


def abduction_points(shoulder_angle: float) -> Dict:
    """Hip/shoulder/elbow with the given shoulder abduction angle, both sides."""
    points = {}
    for side, offset in (("LEFT", 0.1), ("RIGHT", -0.1)):
        shoulder = (0.5 + offset, 0.3)
        hip = (0.5 + offset, 0.6)
        points[PoseLandmark[f"{side}_HIP"]] = hip
        points[PoseLandmark[f"{side}_SHOULDER"]] = shoulder
        points[PoseLandmark[f"{side}_ELBOW"]] = place_point(shoulder, hip, shoulder_angle)
    return points


def plank_points(hip_y: float) -> Dict:
    return {
        PoseLandmark.LEFT_SHOULDER: (0.2, 0.5),
        PoseLandmark.LEFT_HIP: (0.5, hip_y),
        PoseLandmark.LEFT_ANKLE: (0.8, 0.5),
    }


def squat_frames(angles, start_ms: float = 0.0, step_ms: float = 100.0, **kwargs):
    return [
        build_frame(squat_points(angle, **kwargs), start_ms + i * step_ms)
        for i, angle in enumerate(angles)
    ]


FULL_SQUAT = [175, 140, 95, 80, 95, 140, 175]



def hinge_points(hip_angle: float, knee_angle: float = 180.0) -> Dict:
    """Shoulder/hip/knee/ankle for a hip hinge with the given hip and knee angles."""
    hip = (0.5, 0.5)
    knee = (0.5, 0.7)
    return {
        PoseLandmark.LEFT_SHOULDER: place_point(hip, knee, hip_angle),
        PoseLandmark.LEFT_HIP: hip,
        PoseLandmark.LEFT_KNEE: knee,
        PoseLandmark.LEFT_ANKLE: place_point(knee, hip, knee_angle),
    }


def situp_points(torso_angle: float, neck_angle: float = 170.0) -> Dict:
    """Ear/shoulder/hip/knee for a sit-up with the given torso and neck angles."""
    hip = (0.5, 0.7)
    knee = (0.7, 0.6)
    shoulder = place_point(hip, knee, torso_angle, length=0.3)
    return {
        PoseLandmark.LEFT_EAR: place_point(shoulder, hip, neck_angle, length=0.1),
        PoseLandmark.LEFT_SHOULDER: shoulder,
        PoseLandmark.LEFT_HIP: hip,
        PoseLandmark.LEFT_KNEE: knee,
    }


def row_points(elbow_angle: float, torso_angle: float = 90.0) -> Dict:
    """Arm plus shoulder/hip/knee for a bent-over row."""
    points = arm_points(elbow_angle)
    shoulder = points[PoseLandmark.LEFT_SHOULDER]
    hip = (0.7, 0.35)
    points[PoseLandmark.LEFT_HIP] = hip
    points[PoseLandmark.LEFT_KNEE] = place_point(hip, shoulder, torso_angle)
    return points


def frames_for(builder, angles, step_ms: float = 300.0, **kwargs):
    return [build_frame(builder(angle, **kwargs), i * step_ms) for i, angle in enumerate(angles)]
