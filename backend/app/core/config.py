"""Configuration settings for the Ask Reddit AI application."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env
    )

    # Reddit OAuth2 (client credentials)
    reddit_client_id: str = ""
    reddit_client_secret: SecretStr = SecretStr("")
    reddit_user_agent: str = "ask-reddit-ai/0.1.0"
    reddit_token_url: str = "https://www.reddit.com/api/v1/access_token"
    reddit_api_base_url: str = "https://oauth.reddit.com"
    reddit_public_url: str = "https://reddit.com"
    reddit_timeout_seconds: float = 10.0
    token_ttl_seconds: int = 50 * 60  # upstream tokens live for 60 minutes

    # Reddit fetch settings
    reddit_default_timeframe: str = "24h"
    reddit_default_limit: int = 25
    reddit_max_limit: int = 100
    comment_post_count: int = 5
    comments_per_post: int = 10

    # OpenAI
    openai_api_key: SecretStr = SecretStr("")

    # Model settings
    default_model: str = "gpt-4o-mini"
    allowed_models: str = "gpt-4o-mini,gpt-3.5-turbo"
    llm_temperature: float = 0.7
    max_tokens: int = 4000
    llm_timeout_seconds: float = 60.0

    @property
    def allowed_models_list(self) -> list[str]:
        """Get the model allow-list as a list."""
        return [item.strip() for item in self.allowed_models.split(",") if item.strip()]

    # Prompt settings
    max_item_chars: int = 1500
    min_content_chars: int = 100
    answer_confidence: float = 0.85

    # Rate limiting (per caller, in memory)
    rate_limit_enabled: bool = False
    rate_limit_max_requests: int = 3
    rate_limit_window_hours: int = 24
    # Hosts whose X-Forwarded-For header is believed, comma separated
    trusted_proxies: str = ""

    @property
    def trusted_proxies_list(self) -> list[str]:
        """Get trusted proxy hosts as a list."""
        return [item.strip() for item in self.trusted_proxies.split(",") if item.strip()]

    # API Settings
    api_v1_str: str = "/api/v1"
    project_name: str = "Ask Reddit AI API"
    project_version: str = "0.1.0"
    log_level: str = "INFO"

    # CORS
    backend_cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [item.strip() for item in self.backend_cors_origins.split(",") if item.strip()]

    # Backend server settings
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000


settings = Settings()
