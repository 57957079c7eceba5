from fastapi import APIRouter, Depends

from ecotrack.core.auth import get_current_user_id
from ecotrack.services import AppServices, get_services

router = APIRouter()


@router.get("/v1/notifications")
def list_notifications(
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    notifications = services.notifications.notifications_for(user_id)
    return {"notifications": [n.model_dump(mode="json") for n in notifications]}
