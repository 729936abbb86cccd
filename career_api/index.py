import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from career_api import career_analysis, reports, resume
from career_api.config import Settings, get_settings
from career_api.errors import CareerAPIError
from career_api.logging_utils import configure_logging
from career_api.supabase import SupabaseClient

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"


def create_app(
    settings: Settings | None = None,
    backend: SupabaseClient | None = None,
    completion=None,
    resume_parser=None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.backend is None:
            app.state.backend = SupabaseClient.from_settings(settings)
        logger.info("Server starting (environment: %s)", settings.environment)
        logger.info("CORS origins: %s", ", ".join(settings.allowed_origins))
        yield
        if app.state.http is not None:
            await app.state.http.aclose()
        await app.state.backend.aclose()

    app = FastAPI(title="Ikigai Career API", version="1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.backend = backend
    app.state.completion = completion
    app.state.resume_parser = resume_parser
    app.state.http = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-user-id"],
    )

    # ---------------------------
    # Error responses
    # ---------------------------
    def error_response(status_code: int, message: str) -> JSONResponse:
        if settings.is_production and status_code >= 500:
            message = GENERIC_ERROR
        return JSONResponse(status_code=status_code, content={"success": False, "error": message})

    @app.exception_handler(CareerAPIError)
    async def handle_career_error(request: Request, exc: CareerAPIError):
        if exc.status_code >= 500:
            logger.error("Error in %s %s: %s", request.method, request.url.path, exc.message)
        else:
            logger.warning("Request %s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error in %s %s", request.method, request.url.path)
        return error_response(500, str(exc) or GENERIC_ERROR)

    # ---------------------------
    # Routes
    # ---------------------------
    @app.get("/api/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    app.include_router(career_analysis.router)
    app.include_router(reports.router)
    app.include_router(resume.router)

    return app
