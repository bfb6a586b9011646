"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_anon_key: str = ""

    # "supabase" for the managed database, "memory" for local development
    storage_backend: str = "supabase"

    # Server
    port: int = 3000
    log_level: str = "INFO"

    # Job processing. Defaults are conservative for shared hosting.
    job_poller_enabled: bool = True
    job_poll_interval_ms: int = 30000
    job_batch_size: int = 3
    job_handler_timeout_seconds: Optional[float] = 300.0
    job_stale_after_minutes: Optional[int] = 15
    shutdown_grace_seconds: float = 5.0

    # Input limits
    max_resume_chars: int = 200_000

    # AI. "anthropic" or "openai"; ai_model falls back to the provider default
    ai_provider: str = "anthropic"
    ai_model: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    ai_max_tokens: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def job_poll_interval_seconds(self) -> float:
        return self.job_poll_interval_ms / 1000.0


settings = Settings()
