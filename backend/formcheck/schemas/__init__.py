"""Pydantic schemas for API request/response models."""

from formcheck.schemas.exercise import (
    ExerciseResponse,
    ExerciseListResponse,
)
from formcheck.schemas.feedback import (
    FeedbackItemResponse,
    FeedbackEntryResponse,
    FeedbackLogResponse,
)
from formcheck.schemas.session import (
    LandmarkIn,
    FrameRequest,
    SessionStartRequest,
    AnalyzerResponse,
    SessionStatusResponse,
    SessionSummaryResponse,
    FrameResponse,
)

__all__ = [
    "ExerciseResponse",
    "ExerciseListResponse",
    "FeedbackItemResponse",
    "FeedbackEntryResponse",
    "FeedbackLogResponse",
    "LandmarkIn",
    "FrameRequest",
    "SessionStartRequest",
    "AnalyzerResponse",
    "SessionStatusResponse",
    "SessionSummaryResponse",
    "FrameResponse",
]
