import asyncio
import logging

from fastapi import APIRouter, Depends

from career_api.config import Settings
from career_api.dependencies import ensure_owner, get_runner, get_settings, get_store, optional_user
from career_api.errors import AnalysisTimeoutError, AuthenticationError, CareerAPIError
from career_api.models import AnalyzeRequest, AnalyzeResponse
from career_api.persistence import IkigaiStore
from career_api.prompts import build_analysis_prompt
from career_api.retry import AnalysisRunner, AnalysisState

logger = logging.getLogger(__name__)

router = APIRouter()


async def generate_career_analysis(
    req: AnalyzeRequest,
    runner: AnalysisRunner,
    store: IkigaiStore,
    user: dict | None = None,
    timeout: float | None = None,
) -> AnalyzeResponse:
    user_id = user["id"] if user else None
    logger.info("Career analysis %s for user %s", AnalysisState.RECEIVED.value, user_id)

    response_id = None
    if req.ikigaiResponseId is not None:
        response_id = str(req.ikigaiResponseId)
        existing = await store.fetch_response(response_id)
        owner_id = existing.get("user_id")
        if owner_id is not None and user is None:
            raise AuthenticationError("Sign in to analyze this response")
        if user is not None:
            ensure_owner(user, owner_id, "Not authorized to analyze this response")

    answers = req.responses
    prompt = build_analysis_prompt(answers.love, answers.goodAt, answers.paidFor, answers.worldNeeds)
    logger.info("Career analysis %s", AnalysisState.PROMPT_BUILT.value)

    try:
        analysis = await asyncio.wait_for(runner.run(prompt), timeout=timeout)
    except asyncio.TimeoutError:
        raise AnalysisTimeoutError(f"Analysis did not complete within {timeout}s") from None

    if response_id is None:
        response_id = await store.create_response(answers, user_id=user_id)
    await store.create_analytics(response_id, analysis)
    report = await store.create_report(response_id, analysis, user_id=user_id)
    logger.info("Career analysis %s, report ID: %s", AnalysisState.PERSISTED.value, report.id)

    return AnalyzeResponse(reportId=report.id, analysis=analysis)

# ---------------------------
# API Endpoint
# ---------------------------
@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    req: AnalyzeRequest,
    runner: AnalysisRunner = Depends(get_runner),
    store: IkigaiStore = Depends(get_store),
    user: dict | None = Depends(optional_user),
    settings: Settings = Depends(get_settings),
):
    try:
        result = await generate_career_analysis(
            req,
            runner,
            store,
            user=user,
            timeout=settings.analysis_timeout_seconds,
        )
    except CareerAPIError as e:
        logger.error("Career analysis %s: %s", AnalysisState.FAILED.value, e.message)
        raise
    logger.info("Career analysis %s", AnalysisState.RESPONDED.value)
    return result
