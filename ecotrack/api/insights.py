from fastapi import APIRouter, Depends, Query

from ecotrack.core.auth import get_current_user_id
from ecotrack.services import AppServices, get_services

router = APIRouter()


@router.post("/v1/insights/generate")
def generate_insights(
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    """Regenerate trend, tips and goals from the caller's records."""
    report = services.insights.generate(user_id)
    return report.model_dump(mode="json")


@router.get("/v1/insights")
def list_insights(
    unread_only: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    insights = services.insights.list_insights(user_id, unread_only=unread_only)
    return {"insights": [i.model_dump(mode="json") for i in insights]}


@router.get("/v1/insights/trend")
def get_trend(
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return services.insights.trend_for(user_id).model_dump(mode="json")


@router.get("/v1/insights/goals")
def list_goals(
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return {"goals": [g.model_dump(mode="json") for g in services.insights.goals_for(user_id)]}


@router.post("/v1/insights/goals/{goal_id}/accept")
def accept_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    insight = services.insights.accept_goal(user_id, goal_id)
    return insight.model_dump(mode="json")


@router.post("/v1/insights/{insight_id}/read")
def mark_insight_read(
    insight_id: str,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return services.insights.mark_read(user_id, insight_id).model_dump(mode="json")
