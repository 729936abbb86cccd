import io
import json
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
from types import SimpleNamespace
from urllib.parse import unquote

import httpx
import pytest
from docx import Document
from fastapi.testclient import TestClient

from career_api.completion import CompletionClient
from career_api.config import Settings
from career_api.index import create_app
from career_api.supabase import SINGLE_OBJECT, SupabaseClient

SUPABASE_URL = "https://project.supabase.co"
ALICE_ID = "5b0c3a52-3d43-4c9e-9b0e-2f3c1f6c9a01"
BOB_ID = "0f3a9c7e-1d2b-4e5f-8a9b-c1d2e3f4a5b6"


# ---------------------------
# Fake managed backend
# ---------------------------
class FakeSupabase:
    """Minimal in-memory stand-in for the PostgREST, Storage and Auth endpoints."""

    def __init__(self):
        self.tables = defaultdict(list)
        self.objects = {}
        self.users = {}
        self.failures = {}
        self.calls = []

    def fail(self, method, target, status=400, body=None):
        self.failures[(method, target)] = (status, body or {"message": "backend failure"})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))

        if path == "/auth/v1/user":
            return self._auth(request)
        if path.startswith("/rest/v1/"):
            return self._rest(request, path[len("/rest/v1/"):])
        if path.startswith("/storage/v1/object/"):
            return self._storage(request, path[len("/storage/v1/object/"):])
        return httpx.Response(404, json={"message": f"unknown path {path}"})

    def _failure(self, method, target):
        if (method, target) in self.failures:
            status, body = self.failures[(method, target)]
            return httpx.Response(status, json=body)
        return None

    def _auth(self, request):
        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        user = self.users.get(token)
        if user is None:
            return httpx.Response(401, json={"msg": "invalid JWT"})
        return httpx.Response(200, json=user)

    def _rest(self, request, table):
        failure = self._failure(request.method, table)
        if failure is not None:
            return failure

        single = request.headers.get("Accept") == SINGLE_OBJECT

        if request.method == "POST":
            row = json.loads(request.content)
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            self.tables[table].append(row)
            return httpx.Response(201, json=row if single else [row])

        params = request.url.params
        rows = list(self.tables[table])
        for column, value in params.items():
            if column in ("select", "order", "limit"):
                continue
            expected = value.removeprefix("eq.")
            rows = [r for r in rows if str(r.get(column)) == expected]

        if "order" in params:
            column, _, direction = params["order"].partition(".")
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=direction == "desc")
        if "limit" in params:
            rows = rows[:int(params["limit"])]

        if table == "ikigai_reports" and "ikigai_responses(" in params.get("select", ""):
            responses = {r["id"]: r for r in self.tables["ikigai_responses"]}
            rows = [{**r, "ikigai_responses": responses.get(r.get("ikigai_response_id"))} for r in rows]

        if single:
            if len(rows) != 1:
                return httpx.Response(406, json={
                    "code": "PGRST116",
                    "message": "JSON object requested, multiple (or no) rows returned",
                })
            return httpx.Response(200, json=rows[0])
        return httpx.Response(200, json=rows)

    def _storage(self, request, rest):
        bucket, _, key = rest.partition("/")
        if request.method == "POST":
            failure = self._failure("POST", f"storage:{bucket}")
            if failure is not None:
                return failure
            self.objects[f"{bucket}/{unquote(key)}"] = request.content
            return httpx.Response(200, json={"Key": f"{bucket}/{key}"})
        if request.method == "DELETE":
            failure = self._failure("DELETE", f"storage:{bucket}")
            if failure is not None:
                return failure
            for prefix in json.loads(request.content)["prefixes"]:
                self.objects.pop(f"{bucket}/{prefix}", None)
            return httpx.Response(200, json=[])
        return httpx.Response(405, json={"message": "method not allowed"})


# ---------------------------
# Scripted upstream services
# ---------------------------
class ScriptedLLM:
    """Chat-completions endpoint that replays a fixed script.

    str -> 200 with that completion text, int -> that HTTP status,
    Exception -> raised as a transport failure.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests = []
        self.headers = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        self.headers.append(request.headers)
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, int):
            return httpx.Response(item, text=f"upstream status {item}")
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": item}}]})


class StubGemini:
    """Stands in for google.genai.Client; only `aio.models.generate_content` is used."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.aio = SimpleNamespace(models=SimpleNamespace(generate_content=self._generate_content))

    async def _generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        item = self.outcomes.pop(0)
        if isinstance(item, Exception):
            raise item
        return SimpleNamespace(text=item)


def docx_bytes(*paragraphs):
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def completion_client(llm: ScriptedLLM, **kwargs) -> CompletionClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(llm))
    return CompletionClient("test-groq-key", http, **kwargs)


def recording_sleep():
    delays = []

    async def sleep(seconds):
        delays.append(seconds)

    return sleep, delays


# ---------------------------
# Fixtures
# ---------------------------
@pytest.fixture
def sample_analysis():
    return {
        "executiveSummary": "A creative educator who turns visual storytelling into learning.",
        "ikigaiAlignment": {
            "passionScore": 88,
            "missionScore": 82,
            "vocationScore": 74,
            "professionScore": 69,
            "overallAlignment": 78,
            "strengthAreas": ["visual communication", "writing", "mentoring"],
            "improvementAreas": ["business development"],
        },
        "careerRecommendations": [
            {
                "title": "Instructional Designer",
                "description": "Designs learning experiences for online courses.",
                "matchScore": 91,
                "industry": "EdTech",
                "salaryRange": "$65,000 - $95,000",
                "growthProjection": "High",
                "requiredSkills": ["curriculum design", "illustration"],
                "timeToEntry": "6 months",
                "companies": ["Coursera", "Khan Academy"],
                "remoteOptions": "High",
            }
        ],
        "skillAnalysis": {
            "currentStrengths": ["writing", "painting"],
            "transferableSkills": ["storytelling"],
            "skillGaps": ["learning analytics"],
            "prioritySkills": [],
        },
        "marketAnalysis": {
            "industryTrends": ["online learning growth"],
            "opportunityAreas": ["open education resources"],
            "competitorAnalysis": "Crowded at entry level.",
            "demandForecast": "Steady growth.",
            "salaryTrends": "Flat to rising.",
            "geographicHotspots": ["Remote"],
        },
        "actionPlan": {"immediate": [], "shortTerm": [], "longTerm": []},
        "personalityInsights": {"workStyle": "Independent with periodic collaboration."},
        "networkingStrategy": {"platforms": ["LinkedIn"]},
        "compensationGuidance": {"negotiationStrategies": ["anchor on portfolio impact"]},
    }


@pytest.fixture
def settings():
    return Settings(
        groq_api_key="test-groq-key",
        gemini_api_key="test-gemini-key",
        supabase_url=SUPABASE_URL,
        supabase_service_role_key="service-key",
        supabase_anon_key="anon-key",
        retry_base_delay=0,
        analysis_timeout_seconds=5,
        log_level="WARNING",
    )


@pytest.fixture
def fake_supabase():
    fake = FakeSupabase()
    fake.users["alice-token"] = {"id": ALICE_ID, "email": "alice@example.com"}
    fake.users["bob-token"] = {"id": BOB_ID, "email": "bob@example.com"}
    return fake


@pytest.fixture
def backend(fake_supabase):
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_supabase))
    return SupabaseClient(SUPABASE_URL, "service-key", anon_key="anon-key", http=http)


@pytest.fixture
def alice():
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def make_client(settings, backend):
    def _make(llm=None, resume_parser=None, **overrides):
        app_settings = replace(settings, **overrides) if overrides else settings
        completion = completion_client(llm) if llm is not None else None
        app = create_app(app_settings, backend=backend, completion=completion, resume_parser=resume_parser)
        return TestClient(app)

    return _make
