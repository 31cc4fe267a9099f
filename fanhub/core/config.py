import logging

from dotenv import load_dotenv
from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings

load_dotenv()

class Settings(BaseSettings):
    PROJECT_NAME: str = "FanHub"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    # Backend consumed by the client layer
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    REQUEST_TIMEOUT: float = 10.0

    # Persisted session (used by the Streamlit app)
    SESSION_FILE: str = ".fanhub_session.json"

    # Reference backend token signing
    AUTH_SECRET_KEY: str = "fanhub-development-secret-change-me-in-production"
    TOKEN_TTL_SECONDS: int = 60 * 60 * 24

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # CORS
    BACKEND_CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://localhost:8501",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("API_BASE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.upper()
        return v

    model_config = ConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore",
    )

settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Apply LOG_LEVEL to the root logger."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
