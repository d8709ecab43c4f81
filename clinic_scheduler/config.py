"""
Centralized configuration with environment variable overrides.

Block length, clinic hours, non-operating weekdays and the two scheduling
policy switches (duration rounding, cancelled-slot reuse) live here.
Nothing is hardcoded in the engine; it receives a SchedulingConfig.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from clinic_scheduler.logging_context import REQUEST_LOG_FORMAT, install_request_id_filter
from clinic_scheduler.utils import parse_time_of_day, parse_weekdays

load_dotenv()

logger = logging.getLogger(__name__)

ROUNDING_MODES = ("floor", "ceil")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var (true/false, yes/no, 1/0)."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


def _safe_weekdays(env_var: str, default: str) -> frozenset[int]:
    raw = os.getenv(env_var, default)
    try:
        return parse_weekdays(raw)
    except ValueError:
        raise ValueError(f"Invalid weekday list for {env_var}: {raw!r}") from None


@dataclass(frozen=True)
class ClinicConfig:
    """Clinic identity and opening hours used to build the slot catalog."""

    name: str = os.getenv("CLINIC_NAME", "Riverside Pet Clinic")
    open_time: str = os.getenv("CLINIC_OPEN_TIME", "09:00")
    close_time: str = os.getenv("CLINIC_CLOSE_TIME", "17:00")


@dataclass(frozen=True)
class SchedulingConfig:
    """Block cadence and booking policy switches."""

    block_length_minutes: int = _safe_int("BLOCK_LENGTH_MINUTES", "30")
    non_operating_weekdays: frozenset[int] = _safe_weekdays(
        "NON_OPERATING_WEEKDAYS", "sat,sun"
    )
    # floor keeps 45 minutes at one block; ceil allocates two.
    duration_rounding: str = os.getenv("DURATION_ROUNDING", "floor").strip().lower()
    cancelled_frees_slot: bool = _safe_bool("CANCELLED_FREES_SLOT", "false")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    clinic: ClinicConfig = field(default_factory=ClinicConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    scheduling = config.scheduling
    if not 1 <= scheduling.block_length_minutes <= 24 * 60:
        raise ValueError(
            "BLOCK_LENGTH_MINUTES must be between 1 and 1440, "
            f"got {scheduling.block_length_minutes}"
        )
    if scheduling.duration_rounding not in ROUNDING_MODES:
        raise ValueError(
            f"DURATION_ROUNDING must be one of {ROUNDING_MODES}, "
            f"got {scheduling.duration_rounding!r}"
        )
    if len(scheduling.non_operating_weekdays) >= 7:
        raise ValueError("NON_OPERATING_WEEKDAYS cannot close every day of the week")

    try:
        opens = parse_time_of_day(config.clinic.open_time)
    except ValueError:
        raise ValueError(
            f"CLINIC_OPEN_TIME must be HH:MM, got {config.clinic.open_time!r}"
        ) from None
    try:
        closes = parse_time_of_day(config.clinic.close_time)
    except ValueError:
        raise ValueError(
            f"CLINIC_CLOSE_TIME must be HH:MM, got {config.clinic.close_time!r}"
        ) from None
    if closes <= opens:
        raise ValueError(
            f"CLINIC_CLOSE_TIME ({config.clinic.close_time}) must be after "
            f"CLINIC_OPEN_TIME ({config.clinic.open_time})"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=REQUEST_LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        install_request_id_filter(handler)
    logger.info("Configuration loaded for '%s'", config.clinic.name)
    return config


# Singleton instance
settings = load_config()
