import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _csv_env(name: str, default: str) -> List[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class Config(BaseModel):
    app_name: str = "APAS - Appraisal Performance Appraisal System"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./apas.db")
    db_pool_timeout: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))

    # Enterprise Architecture
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: _csv_env(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:3001,"
            "http://127.0.0.1:3000,http://127.0.0.1:3001",
        )
    )

    # Rate limiting
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    login_rate_limit: str = os.getenv("LOGIN_RATE_LIMIT", "10/minute")

    # Appraisal rules
    max_total_weightage: float = 100.00
    peer_excluded_roles: List[str] = Field(
        default_factory=lambda: _csv_env("PEER_EXCLUDED_ROLES", "ADMIN,HR,MANAGER")
    )
    scoring_strategy: str = os.getenv("SCORING_STRATEGY", "weighted_reviews")
    progress_strategy: str = os.getenv("PROGRESS_STRATEGY", "goal_states")

    # Bootstrap
    seed_reference_data: bool = os.getenv("SEED_REFERENCE_DATA", "true").lower() == "true"

settings = Config()

# --- Startup Validation ---
_logger = logging.getLogger(__name__)
if settings.environment == "production" and settings.database_url.startswith("sqlite"):
    _logger.warning("⚠ Running production with SQLite; concurrent goal submissions are serialised per database file.")
