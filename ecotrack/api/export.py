"""Export API: download the caller's records or a Markdown report."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ecotrack.core.auth import get_current_user_id
from ecotrack.features.export.service import ExportResponse
from ecotrack.services import AppServices, get_services

router = APIRouter()


def _as_download(export: ExportResponse) -> Response:
    return Response(
        content=export.content,
        media_type=export.content_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/v1/export/records")
def export_records(
    format: Literal["csv", "json"] = Query("csv"),
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return _as_download(services.exports.export_records(user_id, format))


@router.get("/v1/export/report")
def export_report(
    user_id: str = Depends(get_current_user_id),
    services: AppServices = Depends(get_services),
):
    return _as_download(services.exports.report(user_id))
