import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from career_api.errors import NotFoundError
from career_api.models import IkigaiAnswers, Report
from career_api.supabase import SupabaseClient

logger = logging.getLogger(__name__)

RESPONSES_TABLE = "ikigai_responses"
REPORTS_TABLE = "ikigai_reports"
ANALYTICS_TABLE = "ikigai_analytics"
RESUMES_TABLE = "resumes"
RESUME_BUCKET = "resumes"

RESPONSE_COLUMNS = "id,user_id,love,good_at,paid_for,world_needs,completed_at,created_at,updated_at"
REPORT_COLUMNS = (
    "id,created_at,generated_at,report_type,report_data,user_id,ikigai_response_id,"
    f"ikigai_responses({RESPONSE_COLUMNS})"
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _first(values, key: str | None = None) -> str:
    if not isinstance(values, list) or not values:
        return ""
    item = values[0]
    if key is not None:
        item = item.get(key) if isinstance(item, dict) else None
    return item if isinstance(item, str) else ""


def _section(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


class IkigaiStore:
    """Shapes rows for the ikigai tables and resume storage."""

    def __init__(self, backend: SupabaseClient):
        self.backend = backend

    # ---------------- Responses ----------------

    async def create_response(self, answers: IkigaiAnswers, user_id: str | None = None) -> str:
        now = _now()
        row = await self.backend.insert(RESPONSES_TABLE, {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "love": answers.love,
            "good_at": answers.goodAt,
            "paid_for": answers.paidFor,
            "world_needs": answers.worldNeeds,
            "completed_at": now,
            "created_at": now,
            "updated_at": now,
        })
        return row["id"]

    async def fetch_response(self, response_id: str) -> dict:
        return await self.backend.select(
            RESPONSES_TABLE,
            RESPONSE_COLUMNS,
            filters={"id": response_id},
            single=True,
        )

    # ---------------- Reports ----------------

    async def create_analytics(self, response_id: str, analysis: dict) -> dict:
        alignment = analysis.get("ikigaiAlignment", {})
        return await self.backend.insert(ANALYTICS_TABLE, {
            "ikigai_response_id": response_id,
            "passion_score": alignment.get("passionScore"),
            "mission_score": alignment.get("missionScore"),
            "vocation_score": alignment.get("vocationScore"),
            "profession_score": alignment.get("professionScore"),
            "skill_analysis": analysis.get("skillAnalysis"),
            "market_analysis": analysis.get("marketAnalysis"),
            "action_plan": analysis.get("actionPlan"),
            "career_recommendations": analysis.get("careerRecommendations"),
        })

    async def create_report(
        self,
        response_id: str,
        analysis: dict,
        user_id: str | None = None,
        report_type: str = "comprehensive",
    ) -> Report:
        row = await self.backend.insert(REPORTS_TABLE, {
            "id": str(uuid.uuid4()),
            "ikigai_response_id": response_id,
            "report_type": report_type,
            "report_data": analysis,
            "generated_at": _now(),
            "user_id": user_id,
        })
        return Report.model_validate(row)

    async def save_report(self, user_id: str, report_data: dict, report_type: str = "career_analysis") -> Report:
        """Store a report produced elsewhere, with a response row derived from it."""
        answers = IkigaiAnswers(
            love=_first(_section(report_data, "ikigaiAlignment").get("strengthAreas")),
            goodAt=_first(_section(report_data, "skillAnalysis").get("currentStrengths")),
            paidFor=_first(report_data.get("careerRecommendations"), "title"),
            worldNeeds=_first(_section(report_data, "marketAnalysis").get("opportunityAreas")),
        )
        response_id = await self.create_response(answers, user_id=user_id)
        return await self.create_report(response_id, report_data, user_id=user_id, report_type=report_type)

    async def fetch_reports_by_user(self, user_id: str) -> list[dict]:
        rows = await self.backend.select(
            REPORTS_TABLE,
            REPORT_COLUMNS,
            filters={"user_id": user_id},
            order="generated_at.desc",
        )
        return [{**row, "ikigai_responses": row.get("ikigai_responses") or None} for row in rows or []]

    async def fetch_report_by_id(self, report_id: str) -> dict:
        try:
            return await self.backend.select(
                REPORTS_TABLE,
                REPORT_COLUMNS,
                filters={"id": report_id},
                single=True,
            )
        except NotFoundError:
            raise NotFoundError("Report not found") from None

    # ---------------- Resumes ----------------

    async def store_resume(
        self,
        user_id: str,
        file_name: str,
        content: bytes,
        content_type: str,
        parse_document: Callable[[bytes, str], Awaitable[Any]],
    ) -> dict:
        """Upload, parse and record a resume.

        Once the object is uploaded, any later failure removes it again and
        the original error is re-raised, whatever the cleanup outcome.
        """
        file_id = str(uuid.uuid4())
        file_path = f"{user_id}/{file_id}-{file_name}"

        await self.backend.upload(RESUME_BUCKET, file_path, content, content_type)
        public_url = self.backend.public_url(RESUME_BUCKET, file_path)

        try:
            parsed_data = await parse_document(content, content_type)
            now = _now()
            row = await self.backend.insert(RESUMES_TABLE, {
                "id": file_id,
                "user_id": user_id,
                "file_name": file_name,
                "file_path": file_path,
                "file_type": content_type,
                "resume_url": public_url,
                "parsed_data": parsed_data,
                "created_at": now,
                "updated_at": now,
            })
        except Exception:
            await self._remove_orphan(file_path)
            raise

        return row

    async def _remove_orphan(self, file_path: str) -> None:
        try:
            await self.backend.remove(RESUME_BUCKET, [file_path])
        except Exception as cleanup_error:
            logger.error("Failed to clean up uploaded file %s: %s", file_path, cleanup_error)

    async def fetch_latest_resume(self, user_id: str) -> dict | None:
        try:
            return await self.backend.select(
                RESUMES_TABLE,
                filters={"user_id": user_id},
                order="created_at.desc",
                limit=1,
                single=True,
            )
        except NotFoundError:
            return None
