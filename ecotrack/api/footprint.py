from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ecotrack.core.auth import get_current_user_id
from ecotrack.models.footprint import QuestionnaireAnswers
from ecotrack.services import AppServices, get_services

router = APIRouter()


@router.post("/v1/footprint/calculate")
def calculate_footprint(
    answers: QuestionnaireAnswers,
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    """
    Score questionnaire answers and append a record for the caller.

    The score is returned even when the record could not be stored
    (persisted=false).
    """
    result = services.footprints.submit(user_id=user_id, answers=answers)
    return result.model_dump(mode="json")


@router.get("/v1/footprint/records")
def list_records(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    records = services.footprints.records_for(user_id, limit=limit)
    return {"records": [r.model_dump(mode="json") for r in records], "count": len(records)}


@router.get("/v1/footprint/summary")
def footprint_summary(
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return services.footprints.summary_for(user_id).model_dump(mode="json")
