from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Keys must be provided via env / .env (never hardcode secrets in code)
    rapidapi_key: str | None = None

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    request_timeout: float = 12.0
    cache_ttl_seconds: float = 45.0
    page_size: int = 15
    batch_concurrency: int = 4  # items fetched in parallel by /bulk-cheapest-perkg

    # itch.io embeds plus localhost for testing
    cors_origin_regex: str = r"https://.*\.itch\.io|https?://localhost(:\d+)?"

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper()


settings = Settings()  # load once at import
