"""Application settings loaded from .env file."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Ollama
    OLLAMA_HOST: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "qwen2.5:7b"
    OLLAMA_TIMEOUT_SECONDS: int = 120
    OLLAMA_NUM_CTX: int = 8192
    OLLAMA_TEMPERATURE: float = 0.2

    # Data platform
    DATAPLATFORM_URL: str = "http://localhost:8080"
    DATAPLATFORM_API_KEY: str = ""
    DATAPLATFORM_TIMEOUT_SECONDS: int = 30
    DATAPLATFORM_REQUIRE_SESSION: bool = True
    DEFAULT_SERVICE: str = "sqlserver"

    # Web search (Serper); leave the key empty to disable the webSearch tool
    SERPER_API_KEY: str = ""
    SERPER_URL: str = "https://google.serper.dev/search"
    SEARCH_COUNTRY: str = "us"
    SEARCH_LANGUAGE: str = "en"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:3000"

    # Session cookies
    SESSION_COOKIE_NAME: str = "df_session_token"
    API_KEY_COOKIE_NAME: str = "df_api_key"
    SESSION_MAX_AGE_SECONDS: int = 3600
    COOKIE_SECURE: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
