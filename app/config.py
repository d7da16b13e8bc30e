import tempfile
import warnings
from typing import Optional
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "DevFlowHub"
    API_V1_STR: str = "/api/v1"

    # development 會隱式開啟所有 feature flags
    NODE_ENV: str = "development"

    # CORS
    BACKEND_CORS_ORIGINS: str = ""

    # ── Feature flags (env switches) ──
    NEXT_PUBLIC_REBRAND_V1_0: bool = False
    NEXT_PUBLIC_AI_ROUTER: bool = False
    NEXT_PUBLIC_HOMEPAGE_V3: bool = False
    NEXT_PUBLIC_HOMEPAGE_V3_ROLLOUT: int = Field(default=100, ge=0, le=100)
    NEXT_PUBLIC_HERO_COPY_VARIANT: bool = False
    NEXT_PUBLIC_HERO_COPY_ROLLOUT: int = Field(default=50, ge=0, le=100)
    FEATURE_FLAG_STICKY_ROLLOUT: bool = False  # per-user bucket instead of per-call draw

    # Analytics
    ANALYTICS_WEBHOOK_URL: str = ""
    ANALYTICS_TIMEOUT_SECONDS: float = 2.0

    # Operator token for runtime admin endpoints; empty disables them
    ADMIN_API_TOKEN: str = ""

    # Serverless detection (Vercel sets VERCEL=1)
    VERCEL: Optional[str] = None

    # Project storage
    PROJECT_STORAGE_DIR: str = "./storage/projects"
    SERVERLESS_TMP_DIR: str = tempfile.gettempdir()

    # Git (scaffold initial commit)
    GIT_AUTHOR_NAME: str = "DevFlowHub"
    GIT_AUTHOR_EMAIL: str = "scaffold@devflowhub.local"
    GIT_TIMEOUT_SECONDS: int = 30

    # Database
    DATABASE_URL: str = ""
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "devflowhub"

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # OpenAI（模組 AI handler）
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.3
    OPENAI_MAX_TOKENS: int = 1000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _validate_production_security(self) -> "Settings":
        """Block startup if the database password is a default in production / staging."""
        if self.NODE_ENV in ("production", "staging") and not self.DATABASE_URL:
            if self.POSTGRES_PASSWORD in ("postgres", ""):
                raise ValueError(
                    "POSTGRES_PASSWORD is set to default 'postgres'. "
                    "Set a strong password in .env or environment."
                )
        if self.is_serverless and self.PROJECT_STORAGE_DIR != "./storage/projects":
            warnings.warn(
                "PROJECT_STORAGE_DIR is ignored in serverless mode; "
                "projects are written under SERVERLESS_TMP_DIR.",
                UserWarning,
                stacklevel=2,
            )
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"
        )

    @property
    def is_serverless(self) -> bool:
        return bool(self.VERCEL)

    @property
    def is_production(self) -> bool:
        return self.NODE_ENV == "production"

    @property
    def is_staging(self) -> bool:
        return self.NODE_ENV == "staging"

    @property
    def is_development(self) -> bool:
        return self.NODE_ENV == "development"

settings = Settings()
