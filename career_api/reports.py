import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from career_api.dependencies import current_user, ensure_owner, get_user_store
from career_api.errors import InvalidReportError, SchemaError
from career_api.extraction import validate_analysis
from career_api.models import SaveReportRequest
from career_api.persistence import IkigaiStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports")


@router.get("/user/{user_id}")
async def get_user_reports(
    user_id: UUID,
    user: dict = Depends(current_user),
    store: IkigaiStore = Depends(get_user_store),
):
    user_id = str(user_id)
    ensure_owner(user, user_id, "Not authorized to access these reports")
    reports = await store.fetch_reports_by_user(user_id)
    return {"success": True, "data": reports}


@router.get("/report/{report_id}")
async def get_report(
    report_id: UUID,
    user: dict = Depends(current_user),
    store: IkigaiStore = Depends(get_user_store),
):
    report = await store.fetch_report_by_id(str(report_id))
    responses = report.get("ikigai_responses") or None
    owner_id = report.get("user_id") or (responses or {}).get("user_id")
    ensure_owner(user, owner_id, "Not authorized to access this report")

    return {
        "success": True,
        "data": {
            "id": report["id"],
            "created_at": report.get("generated_at") or report.get("created_at"),
            "report_type": report.get("report_type"),
            "report_data": report.get("report_data"),
            "ikigai_responses": responses,
        },
    }


@router.post("")
async def save_report(
    req: SaveReportRequest,
    user: dict = Depends(current_user),
    store: IkigaiStore = Depends(get_user_store),
):
    ensure_owner(user, req.userId, "Not authorized to save reports for this user")
    try:
        validate_analysis(req.reportData)
    except SchemaError as e:
        raise InvalidReportError(f"Invalid report data: {e.message}") from e

    report = await store.save_report(req.userId, req.reportData, req.reportType)
    logger.info("Saved %s report %s for user %s", report.report_type, report.id, req.userId)

    return {
        "success": True,
        "data": {
            "id": report.id,
            "created_at": report.generated_at,
            "report_type": report.report_type,
        },
    }
