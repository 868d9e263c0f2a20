from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List, Literal


class ConfigurationMissing(ValueError):
    """Raised when a required environment variable is not set."""


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "Image Studio"
    VERSION: str = "1.0.0"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # LaoZhang API (OpenAI-compatible chat completions)
    LAOZHANG_API_KEY: str = ""
    LAOZHANG_BASE_URL: str = ""
    LAOZHANG_MODEL: str = "gemini-2.5-flash-image-preview"
    LAOZHANG_TIMEOUT: float = 120.0  # seconds

    # Alternate key, only read by the browser client
    GEMINI_API_KEY: Optional[str] = None

    # Simulated video generation
    VIDEO_SIMULATION_DELAY: float = 2.0  # seconds

    # Watermark (applied and detected client-side)
    WATERMARK_ENABLED: bool = False
    WATERMARK_TEXT: str = ""

    # Language of user-facing error messages
    MESSAGE_LANGUAGE: Literal["en", "zh"] = "en"

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173"
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Validate required settings
        self._validate_required_settings()

    def _validate_required_settings(self):
        """Validate that all required settings are present."""
        required_fields = ["LAOZHANG_API_KEY", "LAOZHANG_BASE_URL"]
        missing_fields = []

        for field in required_fields:
            if not getattr(self, field, None):
                missing_fields.append(field)

        if missing_fields:
            raise ConfigurationMissing(
                f"Missing required environment variables: {', '.join(missing_fields)}\n"
                f"Please check your .env file or environment variables."
            )

# Global settings instance
settings = Settings()
