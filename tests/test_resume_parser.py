import asyncio
import io
import json

import pytest
from google.genai import errors as genai_errors
from pypdf import PdfWriter

from career_api.errors import (
    ConfigurationError,
    DocumentReadError,
    ParseError,
    TransportError,
    UploadRejectedError,
)
from career_api.resume_parser import DOCX_MIME, PDF_MIME, ResumeParser, extract_text
from career_api.retry import TransportRetryPolicy

from conftest import StubGemini, docx_bytes, recording_sleep

RESUME_JSON = json.dumps({
    "personal_info": {"name": "Jane Doe", "title": "Engineer", "email": None},
    "professional_experience": [{"company": "Acme", "role": "Engineer", "responsibilities": ["APIs"]}],
    "education": None,
    "technical_skills": {"technical_skills": ["Python"], "frameworks_libraries": [], "tools": None},
    "additional_information": [],
    "projects": [],
})


def blank_pdf_bytes():
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def gemini_error(cls, code, message):
    return cls(code, {"error": {"code": code, "message": message, "status": "UNAVAILABLE"}})


def make_parser(*outcomes):
    sleep, delays = recording_sleep()
    stub = StubGemini(*outcomes)
    parser = ResumeParser(client=stub, transport=TransportRetryPolicy(max_retries=3, base_delay=1.0, sleep=sleep))
    return parser, stub, delays


# ---------------------------
# Text extraction
# ---------------------------
def test_extract_text_from_docx():
    content = docx_bytes("Jane Doe", "Senior Engineer at Acme")
    assert extract_text(content, DOCX_MIME) == "Jane Doe\nSenior Engineer at Acme"


def test_extract_text_from_blank_pdf_is_empty():
    assert extract_text(blank_pdf_bytes(), PDF_MIME) == ""


def test_unreadable_pdf_raises_document_read_error():
    with pytest.raises(DocumentReadError, match="PDF"):
        extract_text(b"definitely not a pdf", PDF_MIME)


def test_unreadable_docx_raises_document_read_error():
    with pytest.raises(DocumentReadError, match="DOCX"):
        extract_text(b"definitely not a docx", DOCX_MIME)


def test_unsupported_type_is_rejected():
    with pytest.raises(UploadRejectedError) as exc:
        extract_text(b"hello", "text/plain")
    assert exc.value.status_code == 415

# ---------------------------
# Gemini extraction
# ---------------------------
def test_extract_details_returns_parsed_json():
    parser, stub, _ = make_parser(RESUME_JSON)

    data = asyncio.run(parser.extract_details("Jane Doe, Engineer at Acme"))

    assert data == json.loads(RESUME_JSON)
    call = stub.calls[0]
    assert call["model"] == "gemini-2.0-flash"
    assert "Jane Doe, Engineer at Acme" in call["contents"]
    assert call["config"].response_mime_type == "application/json"
    assert call["config"].temperature == 0.3
    assert call["config"].max_output_tokens == 2000


def test_transient_gemini_errors_are_retried_with_backoff():
    parser, stub, delays = make_parser(
        gemini_error(genai_errors.ServerError, 503, "The model is overloaded."),
        gemini_error(genai_errors.ClientError, 429, "Resource exhausted."),
        RESUME_JSON,
    )

    assert asyncio.run(parser.extract_details("resume"))["personal_info"]["name"] == "Jane Doe"
    assert len(stub.calls) == 3
    assert delays == [1.0, 2.0]


def test_non_retryable_gemini_error_is_terminal():
    parser, stub, delays = make_parser(gemini_error(genai_errors.ClientError, 400, "Bad request."))

    with pytest.raises(TransportError) as exc:
        asyncio.run(parser.extract_details("resume"))

    assert exc.value.status == 400
    assert len(stub.calls) == 1
    assert delays == []


def test_empty_model_text_yields_none():
    parser, _, _ = make_parser("")
    assert asyncio.run(parser.extract_details("resume")) is None


def test_invalid_json_is_parse_error_without_retry():
    parser, stub, _ = make_parser('{"personal_info": ')

    with pytest.raises(ParseError):
        asyncio.run(parser.extract_details("resume"))
    assert len(stub.calls) == 1


def test_parse_reads_document_then_extracts():
    parser, stub, _ = make_parser(RESUME_JSON)

    asyncio.run(parser.parse(docx_bytes("Jane Doe"), DOCX_MIME))
    assert "Jane Doe" in stub.calls[0]["contents"]


def test_missing_api_key_is_configuration_error():
    with pytest.raises(ConfigurationError, match="GEMINI_API"):
        ResumeParser(api_key=None)
