"""
SOC Triage configuration.

Only the remote triage API URL is required at startup. Notification sink
settings (Slack) are optional at startup and validated lazily when the sink
is first built via validate_for_sink().
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Maps each notification sink to the settings fields it requires.
_SINK_REQUIRED_FIELDS: dict[str, list[str]] = {
    "log": [],
    "slack": [
        "slack_bot_token",
    ],
}

_KNOWN_SINKS = set(_SINK_REQUIRED_FIELDS.keys())


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Required at startup: ValidationError raised immediately if missing
    # ------------------------------------------------------------------
    soc_triage_api_url: str

    # ------------------------------------------------------------------
    # Remote data service
    # ------------------------------------------------------------------
    organization_id: Optional[int] = None   # queries needing a tenant stay disabled until set
    request_timeout_seconds: float = 30.0
    query_stale_seconds: float = 300.0      # cached results younger than this are served as-is
    max_sessions: int = 32                  # per-organisation sessions kept by the API server

    # ------------------------------------------------------------------
    # Notifications, validated lazily per sink
    # ------------------------------------------------------------------
    notification_sink: str = "log"
    slack_bot_token: Optional[str] = None
    slack_notification_channel: str = "#soc-alerts"

    # App
    log_level: str = "INFO"

    def validate_for_sink(self, sink_name: str) -> None:
        """Assert that all settings required by *sink_name* are present.

        Raises:
            ValueError: If *sink_name* is not a recognised sink.
            RuntimeError: If one or more required settings are absent.
        """
        if sink_name not in _KNOWN_SINKS:
            raise ValueError(
                f"Unknown notification sink '{sink_name}'. "
                f"Known sinks: {', '.join(sorted(_KNOWN_SINKS))}"
            )

        required = _SINK_REQUIRED_FIELDS[sink_name]
        missing = [
            field for field in required if getattr(self, field, None) is None
        ]

        if missing:
            missing_vars = ", ".join(m.upper() for m in missing)
            raise RuntimeError(
                f"Notification sink '{sink_name}' cannot start: "
                f"missing required environment variables: {missing_vars}. "
                f"Set these in your .env file (see .env.example)."
            )


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    In tests, clear the cache with get_settings.cache_clear() after
    patching environment variables, or instantiate Settings() directly
    with _env_file=None to avoid reading the .env file.
    """
    return Settings()
