from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "HTTP_CONNECTIVITY_"


class ConnectivitySettings(BaseSettings):
    """Runtime switches for the process-wide connection manager."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, case_sensitive=False)

    logging_enabled: bool = True
    extra_unreachable_markers: tuple[str, ...] = ()

    @field_validator("extra_unreachable_markers", mode="after")
    @classmethod
    def _normalize_markers(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        normalized = tuple(marker.strip().lower() for marker in value)
        if any(not marker for marker in normalized):
            raise ValueError("extra_unreachable_markers entries must be non-empty")
        return normalized
