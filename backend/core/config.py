from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BACKEND_DIR / ".env", env_file_encoding="utf-8")

    database_url: str

    # Auth
    jwt_secret_key: str = Field(
        validation_alias=AliasChoices("jwt_secret_key", "jwt_secret", "JWT_SECRET_KEY", "JWT_SECRET")
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias=AliasChoices("jwt_algorithm", "JWT_ALGORITHM"))
    access_token_expire_minutes: int = Field(
        default=480,
        validation_alias=AliasChoices("access_token_expire_minutes", "ACCESS_TOKEN_EXPIRE_MINUTES"),
    )

    # Runtime
    environment: str = Field(default="development", validation_alias=AliasChoices("environment", "ENVIRONMENT"))
    frontend_origin: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("frontend_origin", "FRONTEND_ORIGIN"),
    )

    # Drafts
    # Push accepted add/remove mutations to the linked saved schedule right away.
    draft_autosync: bool = Field(
        default=True,
        validation_alias=AliasChoices("draft_autosync", "DRAFT_AUTOSYNC"),
    )
    # Components counted toward a draft's credit-hour total (comma separated).
    credit_components: str = Field(
        default="LEC,LAB",
        validation_alias=AliasChoices("credit_components", "CREDIT_COMPONENTS"),
    )

    @field_validator("frontend_origin")
    @classmethod
    def _normalize_frontend_origin(cls, v: str) -> str:
        # Starlette CORS expects the Origin to match exactly (no trailing slash).
        return v.strip().rstrip("/")

    @field_validator("credit_components")
    @classmethod
    def _normalize_credit_components(cls, v: str) -> str:
        parts = [p.strip().upper() for p in (v or "").split(",")]
        return ",".join(p for p in parts if p)

    @property
    def credit_component_list(self) -> list[str]:
        return [p for p in self.credit_components.split(",") if p]


settings = Settings()
