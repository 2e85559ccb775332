"""
Analyzer API endpoints.

Each analyzer wraps one FormAnalysisEngine. A browser client creates an
analyzer, starts a session for an exercise, then posts one landmark frame per
processed video frame. Every route maps onto a single engine operation.
"""

import time
from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, status

from formcheck.engine import (
    FeedbackEntry,
    FeedbackItem,
    FormAnalysisEngine,
    FrameResult,
    LandmarkFrame,
    UnknownExerciseError,
)
from formcheck.registry import (
    AnalyzerHandle,
    AnalyzerNotFoundError,
    AnalyzerRegistry,
    RegistryFullError,
    get_registry,
)
from formcheck.schemas.feedback import (
    FeedbackEntryResponse,
    FeedbackItemResponse,
    FeedbackLogResponse,
)
from formcheck.schemas.session import (
    AnalyzerResponse,
    FrameRequest,
    FrameResponse,
    SessionStartRequest,
    SessionStatusResponse,
    SessionSummaryResponse,
)

router = APIRouter()


@contextmanager
def _handle(registry: AnalyzerRegistry, analyzer_id: str) -> Iterator[AnalyzerHandle]:
    try:
        with registry.acquire(analyzer_id) as handle:
            yield handle
    except AnalyzerNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Analyzer not found"
        )


@contextmanager
def _engine(registry: AnalyzerRegistry, analyzer_id: str) -> Iterator[FormAnalysisEngine]:
    with _handle(registry, analyzer_id) as handle:
        yield handle.engine


def _item_response(item: FeedbackItem) -> FeedbackItemResponse:
    return FeedbackItemResponse(classification=item.classification.value, message=item.message)


def _entry_response(entry: FeedbackEntry) -> FeedbackEntryResponse:
    return FeedbackEntryResponse(
        id=entry.id,
        message=entry.message,
        classification=entry.classification.value,
        rep_number=entry.rep_number,
        timestamp=entry.timestamp,
        exercise_id=entry.exercise_id,
        peak_angle=entry.peak_angle,
    )


def _status_response(analyzer_id: str, engine: FormAnalysisEngine) -> SessionStatusResponse:
    session = engine.session
    if session is None:
        return SessionStatusResponse(analyzer_id=analyzer_id, active=False)
    return SessionStatusResponse(
        analyzer_id=analyzer_id,
        active=True,
        exercise_id=session.exercise_id,
        session_id=session.session_id,
        rep_count=session.rep_count,
        phase=session.phase.value,
        live_feedback=[_item_response(item) for item in session.live_feedback],
    )


def _frame_response(result: FrameResult) -> FrameResponse:
    return FrameResponse(
        exercise_id=result.exercise_id,
        timestamp_ms=result.timestamp_ms,
        skipped=result.skipped,
        rep_count=result.rep_count,
        phase=result.phase.value,
        primary_angle=result.primary_angle,
        measurements=result.measurements,
        live_feedback=[_item_response(item) for item in result.live_feedback],
        completed_rep=_entry_response(result.completed_rep) if result.completed_rep else None,
    )


@router.post("", response_model=AnalyzerResponse, status_code=status.HTTP_201_CREATED)
async def create_analyzer(registry: AnalyzerRegistry = Depends(get_registry)):
    """Create an analyzer with an empty feedback log and no session."""
    try:
        handle = registry.create()
    except RegistryFullError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )
    return AnalyzerResponse(analyzer_id=handle.analyzer_id)


@router.delete("/{analyzer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_analyzer(
    analyzer_id: str,
    registry: AnalyzerRegistry = Depends(get_registry)
):
    """Stop any running session and drop the analyzer."""
    try:
        registry.remove(analyzer_id)
    except AnalyzerNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Analyzer not found"
        )


@router.get("/{analyzer_id}/session", response_model=SessionStatusResponse)
async def get_session(
    analyzer_id: str,
    registry: AnalyzerRegistry = Depends(get_registry)
):
    """Current session state: exercise, rep count, phase and live feedback."""
    with _engine(registry, analyzer_id) as engine:
        return _status_response(analyzer_id, engine)


@router.put("/{analyzer_id}/session", response_model=SessionStatusResponse)
async def start_session(
    analyzer_id: str,
    request: SessionStartRequest,
    registry: AnalyzerRegistry = Depends(get_registry)
):
    """
    Start (or restart) a session for an exercise.

    The rep count resets to 0; the feedback log is kept.
    """
    with _handle(registry, analyzer_id) as handle:
        try:
            handle.engine.start_session(request.exercise_id)
        except UnknownExerciseError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e)
            )
        handle.timestamp_source = None
        return _status_response(analyzer_id, handle.engine)


@router.delete("/{analyzer_id}/session", response_model=SessionSummaryResponse)
async def stop_session(
    analyzer_id: str,
    registry: AnalyzerRegistry = Depends(get_registry)
):
    """Stop the running session and return its summary."""
    with _engine(registry, analyzer_id) as engine:
        summary = engine.stop_session()
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No active session"
        )
    return SessionSummaryResponse.model_validate(summary)


@router.post("/{analyzer_id}/frames", response_model=FrameResponse)
async def process_frame(
    analyzer_id: str,
    request: FrameRequest,
    registry: AnalyzerRegistry = Depends(get_registry)
):
    """
    Run one landmark frame through the analyzer's active session.

    Frames without timestamp_ms are stamped with the server's monotonic
    clock. A session must use one clock throughout: once its first frame
    has fixed the source, frames from the other source are rejected with 400.
    """
    source = "server" if request.timestamp_ms is None else "client"
    timestamp_ms = request.timestamp_ms
    if timestamp_ms is None:
        timestamp_ms = time.monotonic() * 1000.0

    frame = LandmarkFrame.from_points(
        [lm.model_dump() if lm is not None else None for lm in request.landmarks],
        timestamp_ms=timestamp_ms,
    )

    with _handle(registry, analyzer_id) as handle:
        if handle.engine.is_active:
            if handle.timestamp_source is None:
                handle.timestamp_source = source
            elif handle.timestamp_source != source:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Session uses {handle.timestamp_source} timestamps; "
                           "do not mix frames with and without timestamp_ms"
                )
        result = handle.engine.process_frame(frame)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No active session"
        )
    return _frame_response(result)


@router.get("/{analyzer_id}/feedback", response_model=FeedbackLogResponse)
async def get_feedback(
    analyzer_id: str,
    registry: AnalyzerRegistry = Depends(get_registry)
):
    """Feedback log, newest first."""
    with _engine(registry, analyzer_id) as engine:
        entries = engine.feedback_entries
        capacity = engine.feedback_log.capacity
    return FeedbackLogResponse(
        items=[_entry_response(entry) for entry in entries],
        total=len(entries),
        capacity=capacity,
    )


@router.delete("/{analyzer_id}/feedback", status_code=status.HTTP_204_NO_CONTENT)
async def clear_feedback(
    analyzer_id: str,
    registry: AnalyzerRegistry = Depends(get_registry)
):
    """Empty the feedback log."""
    with _engine(registry, analyzer_id) as engine:
        engine.clear_feedback_log()
