import logging
from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile

from career_api.dependencies import current_user, ensure_owner, get_resume_parser, get_user_store
from career_api.errors import UploadRejectedError
from career_api.persistence import IkigaiStore
from career_api.resume_parser import ALLOWED_MIME_TYPES, MAX_RESUME_BYTES, ResumeParser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resume")


async def read_resume_upload(resume: UploadFile | None) -> bytes:
    """Validate type and size before anything is stored or parsed."""
    if resume is None:
        raise UploadRejectedError("No file uploaded")
    if resume.content_type not in ALLOWED_MIME_TYPES:
        raise UploadRejectedError("Only PDF and DOCX files are allowed", status_code=415)

    content = await resume.read(MAX_RESUME_BYTES + 1)
    if len(content) > MAX_RESUME_BYTES:
        raise UploadRejectedError("File exceeds the 5MB size limit", status_code=413)
    return content


@router.post("/upload")
async def upload_resume(
    resume: UploadFile | None = File(default=None),
    user: dict = Depends(current_user),
    store: IkigaiStore = Depends(get_user_store),
    parser: ResumeParser = Depends(get_resume_parser),
):
    content = await read_resume_upload(resume)

    row = await store.store_resume(
        user_id=user["id"],
        file_name=Path(resume.filename or "resume").name,
        content=content,
        content_type=resume.content_type,
        parse_document=parser.parse,
    )
    logger.info("Stored resume %s for user %s", row["id"], user["id"])

    return {
        "success": True,
        "resume": {
            "id": row["id"],
            "filename": row["file_name"],
            "uploadedAt": row.get("created_at"),
            "downloadUrl": row["resume_url"],
            "parsedData": row.get("parsed_data"),
        },
    }


@router.get("/user-resume/{user_id}")
async def get_user_resume(
    user_id: UUID,
    user: dict = Depends(current_user),
    store: IkigaiStore = Depends(get_user_store),
):
    user_id = str(user_id)
    ensure_owner(user, user_id, "Not authorized to access this resume")

    data = await store.fetch_latest_resume(user_id)
    if data is None:
        return {"success": True, "resume": None, "message": "No resume found"}

    return {
        "success": True,
        "resume": {
            "id": data["id"],
            "file_name": data.get("file_name"),
            "created_at": data.get("created_at"),
            "resume_url": data.get("resume_url"),
            "file_type": data.get("file_type"),
            "parsed_data": data.get("parsed_data"),
        },
    }
