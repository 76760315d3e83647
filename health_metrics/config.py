"""
Runtime profile resolution.

The monitor runs under one of two profiles. Production values form the base
configuration; the development profile replaces individual fields wholesale.
Anything that is not recognizably "development" resolves to production so
the monitor always starts in its safe default mode.
"""
import os
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional


MONITOR_ENV_VAR = "MONITOR_ENV"
GENERIC_ENV_VAR = "ENVIRONMENT"

# Checked in order; the first non-empty value wins
PROFILE_ENV_VARS = (MONITOR_ENV_VAR, GENERIC_ENV_VAR)


class Profile(Enum):
    """Named configuration variants."""
    PRODUCTION = "production"
    DEVELOPMENT = "development"


@dataclass(frozen=True)
class EffectiveConfig:
    """Immutable configuration resolved once at startup."""
    profile: Profile
    version: str
    interval_ms: int
    alert_threshold_percent: float
    metrics_endpoint: str
    debug_mode: bool
    verbose: bool
    memory_log_interval_ms: Optional[int]
    sample_timeout_ms: int

    def __post_init__(self):
        _require_positive_int("interval_ms", self.interval_ms)
        _require_positive_int("sample_timeout_ms", self.sample_timeout_ms)
        if self.memory_log_interval_ms is not None:
            _require_positive_int("memory_log_interval_ms", self.memory_log_interval_ms)
        threshold = self.alert_threshold_percent
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ValueError(f"alert_threshold_percent must be a number, got {threshold!r}")
        if not 0 <= threshold <= 100:
            raise ValueError(f"alert_threshold_percent must be within [0, 100], got {threshold}")

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    @property
    def sample_timeout_seconds(self) -> float:
        return self.sample_timeout_ms / 1000.0

    @property
    def memory_log_interval_seconds(self) -> Optional[float]:
        if self.memory_log_interval_ms is None:
            return None
        return self.memory_log_interval_ms / 1000.0

    @property
    def memory_logging_enabled(self) -> bool:
        return self.memory_log_interval_ms is not None

    def to_dict(self) -> Dict[str, Any]:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["profile"] = self.profile.value
        return result


def _require_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


PRODUCTION_CONFIG = EffectiveConfig(
    profile=Profile.PRODUCTION,
    version="1.0.0",
    interval_ms=60000,  # 1 minute
    alert_threshold_percent=80,
    metrics_endpoint="http://localhost:8080/metrics",
    debug_mode=False,
    verbose=False,
    memory_log_interval_ms=None,  # disabled in production
    sample_timeout_ms=2000,
)

DEVELOPMENT_OVERRIDES: Dict[str, Any] = {
    "profile": Profile.DEVELOPMENT,
    "version": "2.0.0-beta",
    "interval_ms": 5000,  # 5 seconds
    "alert_threshold_percent": 90,
    "metrics_endpoint": "http://localhost:3000/metrics",
    "debug_mode": True,
    "verbose": True,
    "memory_log_interval_ms": 30000,
}

PROFILE_OVERRIDES: Dict[Profile, Dict[str, Any]] = {
    Profile.PRODUCTION: {},
    Profile.DEVELOPMENT: DEVELOPMENT_OVERRIDES,
}


def parse_profile(value: Optional[str]) -> Profile:
    """
    Map a raw profile string to a Profile.

    Matching is case-insensitive and ignores surrounding whitespace.
    Unrecognized or missing values map to PRODUCTION.
    """
    if value and value.strip().lower() == Profile.DEVELOPMENT.value:
        return Profile.DEVELOPMENT
    return Profile.PRODUCTION


def resolve(profile_source: Optional[str]) -> EffectiveConfig:
    """
    Resolve a raw profile string into the effective configuration.

    Args:
        profile_source: The raw environment value, possibly None.

    Returns:
        The production config, with development overrides applied when the
        profile is development.
    """
    profile = parse_profile(profile_source)
    return replace(PRODUCTION_CONFIG, **PROFILE_OVERRIDES[profile])


def profile_source_from_env(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Find the raw profile value in the environment.

    ``MONITOR_ENV`` is checked first, then ``ENVIRONMENT``. Empty values
    are ignored.
    """
    if environ is None:
        environ = os.environ
    for name in PROFILE_ENV_VARS:
        value = environ.get(name)
        if value and value.strip():
            return value
    return None


def resolve_from_env(environ: Optional[Mapping[str, str]] = None) -> EffectiveConfig:
    """Resolve the effective configuration from the process environment."""
    return resolve(profile_source_from_env(environ))
