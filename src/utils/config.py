"""Configuration management for Keto Recipe Service.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Flowise connection. Any of the three missing selects the mock recipe path.
        self.FLOWISE_API_URL: str = os.getenv("FLOWISE_API_URL", "").rstrip("/")
        self.FLOWISE_API_KEY: str = os.getenv("FLOWISE_API_KEY", "")
        # Flow identifiers: one configured Flowise chatflow per feature
        self.FLOWISE_RECIPE_FLOW_ID: str = os.getenv("FLOWISE_RECIPE_FLOW_ID", "")
        self.FLOWISE_MOTIVATION_FLOW_ID: str = os.getenv("FLOWISE_MOTIVATION_FLOW_ID", "")
        # Total timeout (seconds) for a single prediction call, streaming included
        self.REQUEST_TIMEOUT_SECONDS: int = int(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))
        # LLM overrides sent with every prediction
        # For recipes: 0.5 keeps the JSON shape stable while still varying dishes
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.5"))
        self.MAX_TOKENS: int = int(os.getenv("MAX_TOKENS", "800"))
        # Ask Flowise for a text/event-stream response
        self.ENABLE_STREAMING: bool = _env_bool("ENABLE_STREAMING", "true")
        # STREAM_STRICT_FRAMES: drop stream frames that are neither JSON nor the [DONE] sentinel.
        # Default false: such frames are appended to the buffer as raw text.
        self.STREAM_STRICT_FRAMES: bool = _env_bool("STREAM_STRICT_FRAMES", "false")
        # Recipe cache lifetime in seconds. The background sweep runs on the same period.
        self.CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))

    @property
    def flowise_configured(self) -> bool:
        """True when base URL, API key and recipe flow id are all present."""
        return bool(self.FLOWISE_API_URL and self.FLOWISE_API_KEY and self.FLOWISE_RECIPE_FLOW_ID)

    @property
    def motivation_configured(self) -> bool:
        """True when base URL, API key and motivation flow id are all present."""
        return bool(self.FLOWISE_API_URL and self.FLOWISE_API_KEY and self.FLOWISE_MOTIVATION_FLOW_ID)

    def validate(self) -> None:
        """Validate configuration values.

        Missing Flowise credentials are not an error: they route generation to mock recipes.

        Raises:
            ValueError: If a numeric setting is out of range.
        """
        if self.REQUEST_TIMEOUT_SECONDS < 1:
            raise ValueError(
                f"REQUEST_TIMEOUT_SECONDS must be at least 1, got: {self.REQUEST_TIMEOUT_SECONDS}"
            )
        if not (0.0 <= self.TEMPERATURE <= 1.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 1.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_TOKENS < 1:
            raise ValueError(
                f"MAX_TOKENS must be at least 1, got: {self.MAX_TOKENS}"
            )
        if self.CACHE_TTL_SECONDS <= 0:
            raise ValueError(
                f"CACHE_TTL_SECONDS must be positive, got: {self.CACHE_TTL_SECONDS}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()
