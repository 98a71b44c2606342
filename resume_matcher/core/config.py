import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

MIME_PDF = "application/pdf"
MIME_DOC = "application/msword"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _csv_env(name: str, default: str = "") -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class AISettings(BaseModel):
    openrouter_api_key: Optional[str] = Field(default=os.getenv("OPENROUTER_API_KEY"))
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "anthropic/claude-3.5-haiku"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    temperature: float = 0.7
    max_tokens: int = 1500
    timeout_seconds: int = int(os.getenv("AI_TIMEOUT_SECONDS", "60"))

    # USD per million tokens, used for the per-match cost estimate
    input_cost_per_million: float = float(os.getenv("AI_INPUT_COST_PER_MILLION", "3"))
    output_cost_per_million: float = float(os.getenv("AI_OUTPUT_COST_PER_MILLION", "15"))


class Config(BaseModel):
    app_name: str = "Resume Matcher"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    # Blob storage
    storage_backend: str = os.getenv("STORAGE_BACKEND", "local")
    upload_dir: str = os.getenv("UPLOAD_DIR", "uploads")
    legacy_upload_dirs: List[str] = Field(default_factory=lambda: _csv_env("LEGACY_UPLOAD_DIRS"))
    blob_chunk_size: int = 255 * 1024

    # Resume ingestion
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    allowed_content_types: List[str] = [MIME_PDF, MIME_DOC, MIME_DOCX]
    resume_rules_file: Optional[str] = os.getenv("RESUME_RULES_FILE")

    # Matching
    job_description_min_length: int = 50
    job_description_max_length: int = 10000

    # AI Components
    ai: AISettings = AISettings()

    cors_origins: List[str] = Field(
        default_factory=lambda: _csv_env(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        )
    )
    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    upload_rate_limit: str = os.getenv("UPLOAD_RATE_LIMIT", "10/minute")
    match_rate_limit: str = os.getenv("MATCH_RATE_LIMIT", "10/minute")


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("Using insecure default SECRET_KEY, only acceptable in development.")
