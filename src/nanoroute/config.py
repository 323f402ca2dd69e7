from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Router settings, read from ``NANOROUTE_*`` environment variables.

    ``origin`` is the single allowed CORS origin; ``*`` lets every origin
    through the preflight check.
    """

    model_config = SettingsConfigDict(
        env_prefix="NANOROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    origin: str = "*"
    preflight_max_age: int = Field(default=1728000, ge=0)
    fallback_max_age: int = Field(default=3600, ge=0)

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=0, le=65535)
    workers: int | None = Field(default=None, ge=1)
    max_body_size: int = Field(default=1_048_576, ge=0)
    keep_alive_timeout: float = Field(default=30.0, gt=0)
    max_requests_per_connection: int = Field(default=1000, ge=1)

    log_requests: bool = False


settings = Settings()
