from typing import Optional

from fastapi import APIRouter, Depends, Query

from ecotrack.core.config import settings
from ecotrack.services import AppServices, get_services

router = APIRouter()


@router.get("/v1/leaderboard")
def get_leaderboard(
    limit: Optional[int] = Query(None, ge=1, le=500),
    services: AppServices = Depends(get_services),
):
    """Users ranked by average daily emission, lowest first."""
    board = services.leaderboard.leaderboard(limit=limit or settings.LEADERBOARD_DEFAULT_LIMIT)
    return board.model_dump(mode="json")
