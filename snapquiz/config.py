"""Application settings loaded from the environment / .env file."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed settings; every field can be overridden with a SNAPQUIZ_* variable."""

    model_config = SettingsConfigDict(
        env_prefix="SNAPQUIZ_",
        env_file=".env",
        extra="ignore",
    )

    environment: str = Field(default="development", description="development / production")
    database_url: str = Field(default="sqlite:///./snapquiz.db")
    secret_key: str = Field(default="CHANGE_ME_TO_A_RANDOM_SECRET")
    allowed_origins: list[str] = Field(default=["http://localhost:3000"])
    log_level: str = Field(default="INFO")

    # Chat completion API used to generate tests
    openai_api_key: str = Field(default="")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    openai_model: str = Field(default="gpt-4.1-nano")
    openai_timeout: float = Field(default=60.0)

    max_upload_bytes: int = Field(default=10 * 1024 * 1024)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""
    return Settings()
