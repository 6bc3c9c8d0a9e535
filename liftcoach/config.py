"""Application configuration with environment-specific profiles.

Supports dev, staging, and production environments via APP_ENV.
All values can be overridden by environment variables. Coaching thresholds
are product policy: the defaults below are the tuned values and should only
be overridden deliberately.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    app_env: str = "dev"
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("http://localhost:3000",))
    request_id_header_name: str = "X-Request-ID"

    # Stall detection
    stall_min_sessions: int = 3
    stall_improvement_pct: float = 1.0
    stall_high_rpe: float = 9.0
    stall_default_rpe: float = 8.0
    stall_low_rep_max: int = 4
    stall_mid_rep_max: int = 8
    deload_factor: float = 0.92
    rep_range_load_factor: float = 0.85

    # Readiness auto-regulation
    reduced_rpe_cap: float = 7.5
    rpe_cap_bonus: float = 0.5
    rpe_cap_ceiling: float = 9.5
    optional_cutoff_minutes: int = 45

    # Planning
    minutes_per_set: int = 3
    default_bar_weight: float = 20.0

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
    },
    "staging": {
        "log_level": "INFO",
    },
    "production": {
        "log_level": "WARNING",
        "cors_origins": (),
    },
}


def _csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])
    cors_env = os.getenv("CORS_ORIGINS")

    return Settings(
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        cors_origins=_csv(cors_env) if cors_env is not None else profile.get("cors_origins", ("http://localhost:3000",)),
        request_id_header_name=os.getenv("REQUEST_ID_HEADER_NAME", "X-Request-ID"),
        stall_min_sessions=int(os.getenv("STALL_MIN_SESSIONS", "3")),
        stall_improvement_pct=float(os.getenv("STALL_IMPROVEMENT_PCT", "1.0")),
        stall_high_rpe=float(os.getenv("STALL_HIGH_RPE", "9.0")),
        stall_default_rpe=float(os.getenv("STALL_DEFAULT_RPE", "8.0")),
        stall_low_rep_max=int(os.getenv("STALL_LOW_REP_MAX", "4")),
        stall_mid_rep_max=int(os.getenv("STALL_MID_REP_MAX", "8")),
        deload_factor=float(os.getenv("DELOAD_FACTOR", "0.92")),
        rep_range_load_factor=float(os.getenv("REP_RANGE_LOAD_FACTOR", "0.85")),
        reduced_rpe_cap=float(os.getenv("REDUCED_RPE_CAP", "7.5")),
        rpe_cap_bonus=float(os.getenv("RPE_CAP_BONUS", "0.5")),
        rpe_cap_ceiling=float(os.getenv("RPE_CAP_CEILING", "9.5")),
        optional_cutoff_minutes=int(os.getenv("OPTIONAL_CUTOFF_MINUTES", "45")),
        minutes_per_set=int(os.getenv("MINUTES_PER_SET", "3")),
        default_bar_weight=float(os.getenv("DEFAULT_BAR_WEIGHT", "20.0")),
    )
