import logging
from pathlib import Path
from typing import List, Literal

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration settings for the Phayao Hub search intent service.
    Settings are loaded from environment variables and/or a .env file.
    """

    # --- General Service Settings ---
    SERVICE_NAME: str = Field(default="search_intent", description="Name of the service.")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level for the service."
    )
    API_VERSION: str = Field(default="v1", description="API version prefix for REST endpoints.")

    # --- Keyword Data Settings ---
    # Relative paths are resolved against the package directory
    KEYWORDS_FILE_PATH: str = Field(
        default="data/keywords.json",
        description="Path to the JSON file containing keyword sets, intent groups and popular searches.",
    )

    # --- Search Box Settings ---
    SUGGESTION_DEBOUNCE_MS: int = Field(
        default=300,
        ge=0,
        description="Delay in milliseconds before suggestions are computed for the latest input.",
    )
    SHOW_SUGGESTIONS_DEFAULT: bool = Field(
        default=True,
        description="Whether new sessions show the suggestion dropdown.",
    )
    MAX_QUERY_LENGTH: int = Field(
        default=200,
        gt=0,
        description="Maximum accepted length of a search query.",
    )

    # --- Session Store Settings ---
    SESSION_BACKEND: Literal["memory", "redis"] = Field(
        default="memory",
        description="Where per-visitor session state is kept.",
    )
    REDIS_URL: RedisDsn = Field(
        default="redis://localhost:6379/0",
        description="URL for the Redis server used when SESSION_BACKEND is 'redis'.",
    )
    SESSION_KEY_PREFIX: str = Field(default="phayao:session:", description="Redis key prefix for sessions.")
    SESSION_TTL_SECONDS: int = Field(
        default=60 * 60 * 24 * 30,
        gt=0,
        description="Lifetime of a stored session in seconds.",
    )

    # --- WebSocket Settings ---
    WEBSOCKET_MAX_QUEUE_SIZE: int = Field(
        default=100, description="Maximum number of messages queued for a search box connection."
    )

    # --- CORS Settings ---
    CORS_ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173"],  # Vite dev server
        description="List of allowed origins for CORS.",
    )

    # --- API Server Settings ---
    API_HOST: str = Field(default="0.0.0.0", description="Host to bind the API server to.")
    API_PORT: int = Field(default=8007, description="Port to bind the API server to.")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    def get_absolute_keywords_path(self) -> Path:
        """
        Returns the absolute path to the keywords file.
        If KEYWORDS_FILE_PATH is already absolute, it is returned as is.
        Otherwise, it is resolved relative to the package directory.
        """
        path = Path(self.KEYWORDS_FILE_PATH)
        if path.is_absolute():
            return path
        return Path(__file__).resolve().parent / path

    @property
    def debounce_seconds(self) -> float:
        return self.SUGGESTION_DEBOUNCE_MS / 1000.0


# Initialize settings globally for easy access
settings = Settings()

# Configure logging based on settings
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(settings.SERVICE_NAME)

logger.debug(f"Search intent service settings loaded: {settings.model_dump()}")
logger.debug(f"Absolute keywords file path: {settings.get_absolute_keywords_path()}")

if __name__ == "__main__":
    print("Loaded Search Intent Service Settings:")
    for field_name, value in settings.model_dump().items():
        print(f"  {field_name}: {value}")

    keywords_path = settings.get_absolute_keywords_path()
    print(f"\nAbsolute keywords file path: {keywords_path}")
    print(f"Keywords file exists: {keywords_path.exists()}")
