"""Analyzer, session and frame schemas."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from formcheck.engine import LANDMARK_COUNT
from formcheck.schemas.feedback import FeedbackEntryResponse, FeedbackItemResponse


class LandmarkIn(BaseModel):
    """One landmark in normalized image coordinates."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = Field(None, ge=0.0, le=1.0)


class FrameRequest(BaseModel):
    """
    Schema for one landmark frame.

    Landmarks the pose model did not detect are sent as null so indices stay
    stable.
    """
    landmarks: List[Optional[LandmarkIn]]
    timestamp_ms: Optional[float] = Field(
        None,
        description="Frame time in ms; server monotonic clock if omitted. "
                    "Either always send it or never send it within a session"
    )

    @field_validator("landmarks")
    @classmethod
    def validate_landmark_count(cls, v: List[Optional[LandmarkIn]]) -> List[Optional[LandmarkIn]]:
        if len(v) != LANDMARK_COUNT:
            raise ValueError(f"landmarks must contain exactly {LANDMARK_COUNT} entries, got {len(v)}")
        return v


class SessionStartRequest(BaseModel):
    """Schema for starting an exercise session."""
    exercise_id: str = Field(..., description="Catalog id, e.g. squat or plank")


class AnalyzerResponse(BaseModel):
    """Schema for a created analyzer handle."""
    analyzer_id: str


class SessionStatusResponse(BaseModel):
    """Schema for the current session state of an analyzer."""
    analyzer_id: str
    active: bool
    exercise_id: Optional[str] = None
    session_id: Optional[str] = None
    rep_count: int = 0
    phase: Optional[str] = None
    live_feedback: List[FeedbackItemResponse] = []


class SessionSummaryResponse(BaseModel):
    """Schema for the summary returned when a session stops."""
    session_id: str
    exercise_id: str
    total_reps: int
    duration_ms: float
    frames_processed: int
    frames_skipped: int
    classification_counts: Dict[str, int]

    class Config:
        from_attributes = True


class FrameResponse(BaseModel):
    """Schema for the result of processing one frame."""
    exercise_id: str
    timestamp_ms: float
    skipped: bool
    rep_count: int
    phase: str
    primary_angle: Optional[float] = None
    measurements: Dict[str, Optional[float]]
    live_feedback: List[FeedbackItemResponse]
    completed_rep: Optional[FeedbackEntryResponse] = None
