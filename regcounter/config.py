"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every option has a default: works out-of-the-box against ./logs
    - registration_group_ids is never empty (an empty set would count nothing, silently)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Collections (group id sets, group membership map) given as JSON in env vars,
      e.g. REGISTRATION_GROUP_IDS='[641, 642]'
"""

import re
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_HH_MM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Log input
    log_folder: Path = Path("./logs")
    log_segment: int = 1
    include_preceding_segment: bool = False

    # Attribution
    registration_group_ids: set[int] = {641}
    admin_group_ids: set[int] = set()
    # group id -> client ids holding it; backs ConfiguredAdminRoster
    admin_group_members: dict[int, list[int]] = {}

    @field_validator("registration_group_ids")
    @classmethod
    def require_registration_groups(cls, v: set[int]) -> set[int]:
        if not v:
            raise ValueError("at least one registration group id is required")
        return v

    # Persisted state
    persisted_state_path: Path = Path("./data/regc.data")
    revalidate_roster_on_load: bool = False

    # Scheduler
    scheduler_enabled: bool = True
    daily_update_time: str = "00:05"

    @field_validator("daily_update_time")
    @classmethod
    def check_daily_update_time(cls, v: str) -> str:
        if not _HH_MM.match(v):
            raise ValueError(f"daily_update_time must be HH:MM, got {v!r}")
        return v

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
