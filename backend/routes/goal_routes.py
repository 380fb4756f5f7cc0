from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from schemas.goal_progress import (
    GoalHealthResponse,
    GoalProgressBreakdown,
    LinkedCounts,
    ProgressPreviewRequest,
)
from services.goal_progress_service import GoalProgressService
from services.goal_service import get_goal_source

router = APIRouter(prefix="/api/v1/goals", tags=["Goals"])


def get_source(db: Session = Depends(get_db)):
    return get_goal_source(db)


@router.get("/hierarchy")
async def goal_hierarchy(source=Depends(get_source)):
    try:
        return source.get_hierarchy()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/progress/preview", response_model=GoalProgressBreakdown)
async def preview_progress(payload: ProgressPreviewRequest):
    """Run the progress calculation on unsaved data, e.g. while the user edits a goal."""
    return GoalProgressService.compute_progress(
        payload.goal.model_dump(),
        [t.model_dump() for t in payload.tasks],
        [m.model_dump() for m in payload.metrics],
        [h.model_dump() for h in payload.habits],
        today=payload.today,
    )


@router.get("/{goal_id}/progress", response_model=GoalProgressBreakdown)
async def goal_progress(goal_id: int, source=Depends(get_source)):
    try:
        progress = GoalProgressService.load_progress(source, goal_id)
        if progress is None:
            raise HTTPException(status_code=404, detail="Goal not found")
        return progress
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{goal_id}/health", response_model=GoalHealthResponse)
async def goal_health(goal_id: int, source=Depends(get_source)):
    try:
        goal = source.get_goal(goal_id)
        if goal is None:
            raise HTTPException(status_code=404, detail="Goal not found")
        progress = GoalProgressService.load_progress(source, goal_id, goal=goal)
        health = GoalProgressService.calculate_health(goal, progress)
        return GoalHealthResponse(progress=progress, health=health)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{goal_id}/linked-counts", response_model=LinkedCounts)
async def goal_linked_counts(goal_id: int, source=Depends(get_source)):
    try:
        if source.get_goal(goal_id) is None:
            raise HTTPException(status_code=404, detail="Goal not found")
        return source.get_linked_counts(goal_id)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
