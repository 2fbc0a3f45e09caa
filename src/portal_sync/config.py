"""Portal crawl configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class PortalConfig(BaseSettings):
    """Portal crawl configuration loaded from environment variables.

    Settings are loaded from ``PORTAL_*`` environment variables with sensible
    defaults. For local development, create a .env file in the project root.
    """

    # Portal settings (legacy ASP site, no API exists)
    base_url: str = Field(
        default="https://millennium.education/portal",
        description="Portal base path, without trailing slash",
    )
    uid: str = Field(
        default="",
        description="Numeric portal user id; resolved from the landing page when empty",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (X11; Linux x86_64) portal-sync",
        description="User-Agent header sent with every portal request",
    )

    # Crawl window
    anchor_month_value: int = Field(
        default=251,
        description="Portal calendar month value for the reference month (251 = Dec 2025)",
    )
    calendar_offsets_before: int = Field(
        default=3,
        description="Calendar months requested before the anchor month",
    )
    calendar_offsets_after: int = Field(
        default=6,
        description="Calendar months requested after the anchor month",
    )
    notice_window_days: int = Field(
        default=7,
        description="Days either side of today fetched as per-date notice pages",
    )

    # Pacing and hardening
    page_delay_seconds: float = Field(
        default=0.15,
        description="Pause between sequential page fetches",
    )
    fetch_timeout_seconds: float = Field(
        default=30.0,
        description="Per-fetch timeout",
    )

    # Sync endpoint
    sync_url: str = Field(
        default="http://localhost:3000/api/extension/sync",
        description="Endpoint receiving the aggregate record as JSON",
    )
    sync_attempts: int = Field(
        default=3,
        description="Attempts for transient sync failures",
    )

    # Saved browser session
    state_dir: str = Field(
        default="data/state",
        description="Directory for Playwright session state",
    )
    max_session_age_hours: int = Field(
        default=24,
        description="Maximum age of a saved session before it is ignored",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "PORTAL_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: PortalConfig | None = None


def get_config() -> PortalConfig:
    """Get the portal configuration singleton.

    Returns:
        PortalConfig: Portal configuration instance
    """
    global _config
    if _config is None:
        _config = PortalConfig()
    return _config
