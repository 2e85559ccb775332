"""Exercise catalog schemas."""

from typing import List, Optional
from pydantic import BaseModel


class ExerciseResponse(BaseModel):
    """Schema for one catalog entry."""
    id: str
    name: str
    description: str
    recommended_view: str  # "side" or "front"
    counts_reps: bool
    debounce_ms: float
    contracted_threshold: Optional[float] = None
    extended_threshold: Optional[float] = None

    class Config:
        from_attributes = True


class ExerciseListResponse(BaseModel):
    """Schema for the full catalog."""
    items: List[ExerciseResponse]
    total: int
