from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ecotrack.core.auth import get_current_user_id
from ecotrack.features.challenges.models import ProgressUpdate
from ecotrack.services import AppServices, get_services

router = APIRouter()


@router.get("/v1/challenges")
def list_challenges(
    available_only: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    """Catalog with the caller's progress for the current day/week."""
    if available_only:
        views = services.challenges.available_for(user_id=user_id)
    else:
        views = services.challenges.list_for(user_id=user_id)
    return {"challenges": [v.model_dump(mode="json") for v in views]}


@router.get("/v1/challenges/stats")
def challenge_stats(
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return services.challenges.stats_for(user_id).model_dump(mode="json")


@router.post("/v1/challenges/{challenge_id}/progress")
def update_progress(
    challenge_id: str,
    req: ProgressUpdate,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    view = services.challenges.update_progress(
        user_id=user_id,
        challenge_id=challenge_id,
        progress=req.progress,
    )
    return view.model_dump(mode="json")


@router.post("/v1/challenges/{challenge_id}/complete")
def complete_challenge(
    challenge_id: str,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    """Complete the current-period instance (idempotent)."""
    view, emitted = services.challenges.complete(user_id=user_id, challenge_id=challenge_id)
    return {"challenge": view.model_dump(mode="json"), "emitted": emitted}
