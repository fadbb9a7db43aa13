from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="Storefront Social API", env="APP_NAME", description="Human readable service name")
    environment: str = Field(default="development", env="ENVIRONMENT", description="Deployment environment name")
    debug: bool = Field(default=False, env="DEBUG", description="Enable debug mode")

    cors_origins: Annotated[List[AnyHttpUrl], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:5173",
            "http://localhost:8080",
            "http://127.0.0.1",
            "http://127.0.0.1:5173",
        ],
        env="CORS_ORIGINS",
        description="List of allowed CORS origins",
    )

    database_user: str = Field(default="storefront", env="DB_USER")
    database_password: str = Field(default="storefront", env="DB_PASSWORD")
    database_host: str = Field(default="db", env="DB_HOST")
    database_port: int = Field(default=3306, env="DB_PORT")
    database_name: str = Field(default="storefront", env="DB_NAME")
    database_url_override: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Full SQLAlchemy URL taking precedence over the individual DB_* parts",
    )

    jwt_secret_key: str = Field(default="changeme", env="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", env="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=30, env="ACCESS_TOKEN_EXPIRE_MINUTES")

    placeholder_display_name: str = Field(
        default="User",
        env="PLACEHOLDER_DISPLAY_NAME",
        description="Display name of a synthesized profile when the session has no e-mail",
    )
    unknown_user_display_name: str = Field(
        default="Unknown User",
        env="UNKNOWN_USER_DISPLAY_NAME",
        description="Display name used when a joined author or friend profile is missing",
    )

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"mysql+pymysql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return v
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
