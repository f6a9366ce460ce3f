from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    API_BASE_URL: str = "http://localhost:5000"
    AUTH_SCHEME: str = "Bearer"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    ALLOW_REOPEN: bool = True
    BOOKING_INFLIGHT_GUARD: bool = True

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


settings = Settings()
