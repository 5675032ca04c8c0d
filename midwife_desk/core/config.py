from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    MIDWIFE_API_BASE_URL: str = "http://localhost:3000"
    MIDWIFE_API_TIMEOUT_SECONDS: float = 10.0

    BUSINESS_TIMEZONE: str = "Europe/Berlin"
    CUSTOM_TIME_STEP_MINUTES: int = 15
    DEFAULT_SERVICE_DURATION_MINUTES: int = 60
    SLOT_OVERLAP_CHECK: bool = False

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    USE_MOCK_BACKEND: bool = False

    @field_validator("MIDWIFE_API_BASE_URL")
    @classmethod
    def _strip_trailing_slashes(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()
