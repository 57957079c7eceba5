from fastapi import APIRouter, Depends

from ecotrack.core.auth import get_current_user_id
from ecotrack.features.profiles.service import ProfileUpdate
from ecotrack.services import AppServices, get_services

router = APIRouter()


@router.get("/v1/profile/me")
def get_my_profile(
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    """Caller's profile with footprint statistics, challenge totals and leaderboard position."""
    profile = services.profiles.current_profile(user_id)
    position = services.leaderboard.position_of(user_id)
    return {
        "profile": profile.model_dump(mode="json"),
        "footprint": services.footprints.summary_for(user_id).model_dump(mode="json"),
        "challenges": services.challenges.stats_for(user_id).model_dump(mode="json"),
        "leaderboard": position.model_dump(mode="json") if position else None,
    }


@router.put("/v1/profile/me")
def update_my_profile(
    req: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return services.profiles.update(user_id, req).model_dump(mode="json")
