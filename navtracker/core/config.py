"""Application configuration using Pydantic settings."""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Fixed window size; not derived from the data at runtime.
WINDOW_CAPACITY = 20


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore")

    api_base_url: str = "https://spy-nav-backend.onrender.com"
    nav_path: str = "/api/spy-nav"
    price_path: str = "/api/spy-price"
    nav_field: str = "nav"
    price_field: str = "price"

    # Optional header attached to every upstream request
    api_auth_header: str = "Authorization"
    api_auth_token: Optional[str] = None

    service_name: str = "navtracker"
    service_port: int = 8000
    cors_origins: List[str] = [
        "http://localhost:5173", "http://localhost:3000", "http://localhost:5174"]
    log_level: str = "INFO"

    # Fetch / retry configuration
    request_timeout_seconds: float = 15.0
    max_attempts: int = 3
    retry_delay_seconds: float = 1.0
    retry_backoff_multiplier: float = 1.0

    # Sampling configuration
    poll_interval_seconds: float = 6.0
    window_capacity: int = WINDOW_CAPACITY
    concurrent_fetch: bool = True
    reject_falsy_values: bool = False

    # Mock data fallback
    mock_sample_count: int = WINDOW_CAPACITY


settings = Settings()
