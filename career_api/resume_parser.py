import io
import json
import logging

import httpx
from docx import Document
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError
from pypdf import PdfReader

from career_api.config import Settings
from career_api.errors import (
    ConfigurationError,
    DocumentReadError,
    ParseError,
    SchemaError,
    TransportError,
    UploadRejectedError,
)
from career_api.models import ResumeData
from career_api.prompts import build_resume_prompt
from career_api.retry import TransportRetryPolicy

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ALLOWED_MIME_TYPES = frozenset({PDF_MIME, DOCX_MIME})
MAX_RESUME_BYTES = 5 * 1024 * 1024

# ---------------------------
# Text extraction
# ---------------------------
def extract_text_from_pdf(content: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(content))
        return "\n".join(page.extract_text() or "" for page in reader.pages).strip()
    except Exception as e:
        logger.error("Error extracting text from PDF: %s", e)
        raise DocumentReadError("Failed to extract text from PDF") from e


def extract_text_from_docx(content: bytes) -> str:
    try:
        document = Document(io.BytesIO(content))
        return "\n".join(p.text for p in document.paragraphs).strip()
    except Exception as e:
        logger.error("Error extracting text from DOCX: %s", e)
        raise DocumentReadError("Failed to extract text from DOCX") from e


def extract_text(content: bytes, mime_type: str) -> str:
    if mime_type == PDF_MIME:
        return extract_text_from_pdf(content)
    if mime_type == DOCX_MIME:
        return extract_text_from_docx(content)
    raise UploadRejectedError("Only PDF and DOCX files are allowed", status_code=415)

# ---------------------------
# Gemini resume extraction
# ---------------------------
class ResumeParser:
    def __init__(
        self,
        api_key: str | None = None,
        client=None,
        model: str = "gemini-2.0-flash",
        transport: TransportRetryPolicy | None = None,
    ):
        if client is None:
            if not api_key:
                raise ConfigurationError("GEMINI_API not configured")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.model = model
        self.transport = transport or TransportRetryPolicy(max_retries=3, base_delay=1.0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResumeParser":
        return cls(
            api_key=settings.require("GEMINI_API"),
            model=settings.gemini_model,
            transport=TransportRetryPolicy(max_retries=3, base_delay=settings.retry_base_delay),
        )

    async def parse(self, content: bytes, mime_type: str) -> dict | None:
        text = extract_text(content, mime_type)
        return await self.extract_details(text)

    async def extract_details(self, resume_text: str) -> dict | None:
        raw_text = await self.transport.call(self._generate, build_resume_prompt(resume_text))

        if not raw_text or not raw_text.strip():
            logger.error("Gemini response did not contain text content")
            return None

        try:
            data = json.loads(raw_text)
        except json.JSONDecodeError as e:
            logger.error("Error parsing Gemini JSON response: %s. Raw text: %s", e, raw_text)
            raise ParseError(f"Failed to parse Gemini API response: {e}") from e

        try:
            ResumeData.model_validate(data)
        except ValidationError as e:
            raise SchemaError(f"Resume data does not match expected shape: {e.error_count()} errors") from e
        return data

    async def _generate(self, prompt: str) -> str | None:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=0.3,
                    max_output_tokens=2000,
                ),
            )
        except genai_errors.APIError as e:
            raise TransportError(
                f"Gemini API failed with status {e.code}: {e.message}",
                status=e.code,
                body=str(e),
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f"Gemini request failed: {e}") from e

        return response.text
