"""Feedback schemas."""

from typing import List, Optional
from pydantic import BaseModel


class FeedbackItemResponse(BaseModel):
    """Schema for one live advisory message."""
    classification: str  # "success", "warning" or "info"
    message: str

    class Config:
        from_attributes = True


class FeedbackEntryResponse(BaseModel):
    """Schema for one completed-rep feedback entry."""
    id: str
    message: str
    classification: str
    rep_number: int
    timestamp: float
    exercise_id: str
    peak_angle: Optional[float] = None

    class Config:
        from_attributes = True


class FeedbackLogResponse(BaseModel):
    """Schema for the feedback log, newest first."""
    items: List[FeedbackEntryResponse]
    total: int
    capacity: int
