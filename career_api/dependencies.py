import httpx
from fastapi import Depends, Header, Request

from career_api.completion import CompletionClient
from career_api.config import Settings
from career_api.errors import AuthenticationError, AuthorizationError
from career_api.persistence import IkigaiStore
from career_api.resume_parser import ResumeParser
from career_api.retry import AnalysisRunner, ParseRetryPolicy, TransportRetryPolicy
from career_api.supabase import SupabaseClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend(request: Request) -> SupabaseClient:
    state = request.app.state
    if state.backend is None:
        state.backend = SupabaseClient.from_settings(state.settings, http=_http(request))
    return state.backend


def get_completion_client(request: Request) -> CompletionClient:
    state = request.app.state
    if state.completion is None:
        state.settings.require("GROQ_API_KEY")
        state.completion = CompletionClient.from_settings(state.settings, _http(request))
    return state.completion


def get_resume_parser(request: Request) -> ResumeParser:
    state = request.app.state
    if state.resume_parser is None:
        state.resume_parser = ResumeParser.from_settings(state.settings)
    return state.resume_parser


def get_runner(
    settings: Settings = Depends(get_settings),
    completion: CompletionClient = Depends(get_completion_client),
) -> AnalysisRunner:
    return AnalysisRunner(
        completion,
        TransportRetryPolicy.from_settings(settings),
        ParseRetryPolicy.from_settings(settings),
    )


def _http(request: Request) -> httpx.AsyncClient:
    state = request.app.state
    if state.http is None:
        state.http = httpx.AsyncClient(timeout=state.settings.llm_timeout_seconds)
    return state.http

# ---------------------------
# Auth
# ---------------------------
def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def current_user(
    token: str | None = Depends(bearer_token),
    backend: SupabaseClient = Depends(get_backend),
) -> dict:
    if not token:
        raise AuthenticationError("No authorization token provided")
    return await backend.as_user(token).get_user()


async def optional_user(
    token: str | None = Depends(bearer_token),
    backend: SupabaseClient = Depends(get_backend),
) -> dict | None:
    if not token:
        return None
    return await backend.as_user(token).get_user()


def get_store(backend: SupabaseClient = Depends(get_backend)) -> IkigaiStore:
    return IkigaiStore(backend)


def get_user_store(
    token: str | None = Depends(bearer_token),
    backend: SupabaseClient = Depends(get_backend),
) -> IkigaiStore:
    if not token:
        raise AuthenticationError("No authorization token provided")
    return IkigaiStore(backend.as_user(token))


def ensure_owner(user: dict, owner_id: str | None, message: str) -> None:
    if owner_id is not None and user["id"] != owner_id:
        raise AuthorizationError(message)
