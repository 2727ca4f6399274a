import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    environment: str = "development"

    # Session cookie
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    session_cookie_name: str = "session_user_id"
    session_max_age_days: int = 30

    # Storage
    repository_backend: str = "sql"  # "sql" | "json"
    database_url: str = "sqlite:///./taxsage.db"
    database_echo: bool = False
    data_json_path: Optional[str] = None

    # Chat upstream (OpenRouter)
    openrouter_api_key: Optional[str] = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    chat_model: str = "deepseek/deepseek-chat"
    chat_max_tokens: int = 300
    chat_temperature: float = 0.7
    chat_timeout_seconds: float = 60.0
    app_url: str = "https://taxsage.vercel.app"

    # Google Sheets mirror
    google_service_account_key: Optional[str] = None
    google_sheets_id: Optional[str] = None

    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    enable_debug_routes: Optional[bool] = None

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cookie_secure(self) -> bool:
        return not self.is_development

    @property
    def debug_routes_enabled(self) -> bool:
        if self.enable_debug_routes is None:
            return self.is_development
        return self.enable_debug_routes

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        origins = os.getenv("CORS_ORIGINS")
        debug_routes = os.getenv("ENABLE_DEBUG_ROUTES")
        return cls(
            environment=os.getenv("ENVIRONMENT", defaults.environment),
            secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
            algorithm=os.getenv("ALGORITHM", defaults.algorithm),
            session_cookie_name=os.getenv("SESSION_COOKIE_NAME", defaults.session_cookie_name),
            session_max_age_days=int(os.getenv("SESSION_MAX_AGE_DAYS", defaults.session_max_age_days)),
            repository_backend=os.getenv("REPOSITORY_BACKEND", defaults.repository_backend),
            database_url=os.getenv("DATABASE_URL") or defaults.database_url,
            database_echo=_env_bool("DATABASE_ECHO", defaults.database_echo),
            data_json_path=os.getenv("DATA_JSON_PATH") or None,
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY") or None,
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", defaults.openrouter_base_url),
            chat_model=os.getenv("CHAT_MODEL", defaults.chat_model),
            chat_max_tokens=int(os.getenv("CHAT_MAX_TOKENS", defaults.chat_max_tokens)),
            chat_temperature=float(os.getenv("CHAT_TEMPERATURE", defaults.chat_temperature)),
            chat_timeout_seconds=float(os.getenv("CHAT_TIMEOUT_SECONDS", defaults.chat_timeout_seconds)),
            app_url=os.getenv("APP_URL", defaults.app_url),
            google_service_account_key=os.getenv("GOOGLE_SERVICE_ACCOUNT_KEY") or None,
            google_sheets_id=os.getenv("GOOGLE_SHEETS_ID") or None,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] if origins else defaults.cors_origins,
            enable_debug_routes=_env_bool("ENABLE_DEBUG_ROUTES", False) if debug_routes else None,
        )
