"""Client configuration loaded from environment variables and .env"""

import logging

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

PLACEHOLDER_SUPABASE_URL = "https://project-placeholder.supabase.co"
PLACEHOLDER_SUPABASE_KEY = "anon-key-placeholder"


class Settings(BaseSettings):
    """Settings for the back-office client.

    Supabase credentials are required to load any data. When they are
    missing the client still starts against a placeholder project so the
    UI can come up and show its error states.
    """

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Query executor defaults
    query_max_retries: int = 2
    query_retry_delay: float = 1.0  # seconds, multiplied by the retry number
    query_error_message: str = "Gagal memuat data"

    # Lists
    page_size: int = 20

    # Logging
    log_dir: str = "logs"
    log_level: str = "INFO"

    @property
    def has_supabase_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def supabase_credentials(self) -> tuple[str, str]:
        """Supabase URL and key, falling back to placeholders when unset"""
        if not self.has_supabase_credentials:
            logger.error(
                "Supabase configuration missing: set SUPABASE_URL and SUPABASE_KEY "
                "in the environment or in .env"
            )
        return (
            self.supabase_url or PLACEHOLDER_SUPABASE_URL,
            self.supabase_key or PLACEHOLDER_SUPABASE_KEY,
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
