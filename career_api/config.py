import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from career_api.errors import ConfigurationError

GROQ_CHAT_URL = "https://api.groq.com/openai/v1/chat/completions"

# Environment variable name -> Settings attribute, for credentials checked on use
CREDENTIALS = {
    "GROQ_API_KEY": "groq_api_key",
    "GEMINI_API": "gemini_api_key",
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_SERVICE_ROLE_KEY": "supabase_service_role_key",
    "SUPABASE_ANON_KEY": "supabase_anon_key",
}


@dataclass(frozen=True)
class Settings:
    groq_api_key: str | None = None
    gemini_api_key: str | None = None
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    supabase_anon_key: str | None = None

    cors_origins: tuple[str, ...] = ()
    frontend_url: str = "http://localhost:8081"
    port: int = 3000
    environment: str = "development"
    log_level: str = "INFO"

    llm_endpoint: str = GROQ_CHAT_URL
    llm_model: str = "deepseek-r1-distill-llama-70b"
    llm_max_tokens: int = 8000
    llm_temperature: float = 0.7
    llm_retry_temperature: float = 0.5
    llm_timeout_seconds: float = 120.0
    analysis_timeout_seconds: float = 300.0

    parse_max_retries: int = 1
    transport_max_retries: int = 3
    retry_base_delay: float = 1.0

    gemini_model: str = "gemini-2.0-flash"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def allowed_origins(self) -> list[str]:
        origins = list(self.cors_origins)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    def require(self, name: str) -> str:
        value = getattr(self, CREDENTIALS[name])
        if not value:
            raise ConfigurationError(f"{name} not configured")
        return value


def load_settings(environ=None) -> Settings:
    if environ is None:
        load_dotenv()
        environ = os.environ

    def get(name, default=None):
        value = environ.get(name)
        return value if value not in (None, "") else default

    cors = get("CORS_ORIGIN", "")
    return Settings(
        groq_api_key=get("GROQ_API_KEY"),
        gemini_api_key=get("GEMINI_API"),
        supabase_url=get("SUPABASE_URL"),
        supabase_service_role_key=get("SUPABASE_SERVICE_ROLE_KEY"),
        supabase_anon_key=get("SUPABASE_ANON_KEY"),
        cors_origins=tuple(o.strip() for o in cors.split(",") if o.strip()),
        frontend_url=get("FRONTEND_URL", "http://localhost:8081"),
        port=int(get("PORT", 3000)),
        environment=get("APP_ENV", get("NODE_ENV", "development")),
        log_level=get("LOG_LEVEL", "INFO").upper(),
        llm_endpoint=get("LLM_ENDPOINT", GROQ_CHAT_URL),
        llm_model=get("LLM_MODEL", "deepseek-r1-distill-llama-70b"),
        llm_max_tokens=int(get("LLM_MAX_TOKENS", 8000)),
        llm_temperature=float(get("LLM_TEMPERATURE", 0.7)),
        llm_retry_temperature=float(get("LLM_RETRY_TEMPERATURE", 0.5)),
        llm_timeout_seconds=float(get("LLM_TIMEOUT_SECONDS", 120)),
        analysis_timeout_seconds=float(get("ANALYSIS_TIMEOUT_SECONDS", 300)),
        parse_max_retries=int(get("PARSE_MAX_RETRIES", 1)),
        transport_max_retries=int(get("TRANSPORT_MAX_RETRIES", 3)),
        retry_base_delay=float(get("RETRY_BASE_DELAY", 1.0)),
        gemini_model=get("GEMINI_MODEL", "gemini-2.0-flash"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
