"""Exercise catalog API endpoints."""

from fastapi import APIRouter, HTTPException, status

from formcheck.engine import ExerciseDefinition, UnknownExerciseError, get_exercise, list_exercises
from formcheck.schemas.exercise import ExerciseResponse, ExerciseListResponse

router = APIRouter()


def exercise_response(definition: ExerciseDefinition) -> ExerciseResponse:
    return ExerciseResponse(
        id=definition.id,
        name=definition.name,
        description=definition.description,
        recommended_view=definition.recommended_view,
        counts_reps=definition.counts_reps,
        debounce_ms=definition.debounce_ms,
        contracted_threshold=definition.contracted_threshold,
        extended_threshold=definition.extended_threshold,
    )


@router.get("", response_model=ExerciseListResponse)
async def get_exercises():
    """List every supported exercise."""
    items = [exercise_response(d) for d in list_exercises()]
    return ExerciseListResponse(items=items, total=len(items))


@router.get("/{exercise_id}", response_model=ExerciseResponse)
async def get_exercise_detail(exercise_id: str):
    """Get one exercise definition."""
    try:
        definition = get_exercise(exercise_id)
    except UnknownExerciseError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return exercise_response(definition)
