"""
Centralized configuration with environment variable overrides.

Every timeout, delay, threshold and retry count used by the rush
session lives here. Nothing is hardcoded in orchestrator or
classifier logic.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var ("1", "true", "yes", "on")."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class TimingConfig:
    """Timeouts, delays and polling intervals, all in seconds."""

    response_timeout: float = _safe_float("RESPONSE_TIMEOUT", "15.0")
    api_call_delay: float = _safe_float("API_CALL_DELAY", "2.0")
    delay_between_customers: float = _safe_float("DELAY_BETWEEN_CUSTOMERS", "2.0")
    fade_duration: float = _safe_float("FADE_DURATION", "1.0")
    start_timeout: float = _safe_float("START_TIMEOUT", "10.0")
    termination_timeout: float = _safe_float("TERMINATION_TIMEOUT", "10.0")
    transcript_grace_period: float = _safe_float("TRANSCRIPT_GRACE_PERIOD", "3.0")
    transcript_retries: int = _safe_int("TRANSCRIPT_RETRIES", "5")
    transcript_retry_interval: float = _safe_float("TRANSCRIPT_RETRY_INTERVAL", "1.0")
    activation_settle_delay: float = _safe_float("ACTIVATION_SETTLE_DELAY", "1.0")
    continuation_delay: float = _safe_float("CONTINUATION_DELAY", "3.0")
    closing_delay: float = _safe_float("CLOSING_DELAY", "2.0")
    start_poll_interval: float = _safe_float("START_POLL_INTERVAL", "0.5")
    speech_poll_interval: float = _safe_float("SPEECH_POLL_INTERVAL", "0.1")
    termination_poll_interval: float = _safe_float("TERMINATION_POLL_INTERVAL", "0.5")

    def scaled(self, factor: float) -> "TimingConfig":
        """Return a copy with every duration multiplied by ``factor``.

        Retry counts are left alone so the shape of each wait is preserved.
        """
        if factor <= 0:
            raise ValueError(f"Timing scale factor must be > 0, got {factor}")
        changes = {
            f.name: getattr(self, f.name) * factor
            for f in dataclasses.fields(self)
            if f.type in (float, "float")
        }
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class SessionConfig:
    """Per-customer conversation limits."""

    max_complaint_exchanges: int = _safe_int("MAX_COMPLAINT_EXCHANGES", "3")
    min_utterance_length: int = _safe_int("MIN_UTTERANCE_LENGTH", "10")


@dataclass(frozen=True)
class ClassifierConfig:
    """Complaint classifier switches."""

    # Off by default: an uppercase check makes classification case-sensitive.
    detect_shouting: bool = _safe_bool("DETECT_SHOUTING", "false")


@dataclass(frozen=True)
class SatisfactionConfig:
    """Satisfaction gauge and interaction success thresholds."""

    start: int = _safe_int("SATISFACTION_START", "50")
    step: int = _safe_int("SATISFACTION_STEP", "10")
    success_threshold: int = _safe_int("SUCCESS_THRESHOLD", "70")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    timing: TimingConfig = field(default_factory=TimingConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    satisfaction: SatisfactionConfig = field(default_factory=SatisfactionConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "Barista Rush")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    timing = config.timing
    for name in (
        "response_timeout",
        "start_timeout",
        "termination_timeout",
        "transcript_retry_interval",
        "start_poll_interval",
        "speech_poll_interval",
        "termination_poll_interval",
    ):
        value = getattr(timing, name)
        if value <= 0:
            raise ValueError(f"{name.upper()} must be > 0, got {value}")

    for name in (
        "api_call_delay",
        "delay_between_customers",
        "fade_duration",
        "transcript_grace_period",
        "activation_settle_delay",
        "continuation_delay",
        "closing_delay",
    ):
        value = getattr(timing, name)
        if value < 0:
            raise ValueError(f"{name.upper()} must be >= 0, got {value}")

    if timing.transcript_retries < 0:
        raise ValueError(
            f"TRANSCRIPT_RETRIES must be >= 0, got {timing.transcript_retries}"
        )
    if config.session.max_complaint_exchanges < 1:
        raise ValueError(
            "MAX_COMPLAINT_EXCHANGES must be >= 1, "
            f"got {config.session.max_complaint_exchanges}"
        )
    if config.session.min_utterance_length < 0:
        raise ValueError(
            f"MIN_UTTERANCE_LENGTH must be >= 0, got {config.session.min_utterance_length}"
        )

    satisfaction = config.satisfaction
    for rate_name, rate_value in [
        ("SATISFACTION_START", satisfaction.start),
        ("SUCCESS_THRESHOLD", satisfaction.success_threshold),
    ]:
        if not 0 <= rate_value <= 100:
            raise ValueError(f"{rate_name} must be between 0 and 100, got {rate_value}")
    if not 0 < satisfaction.step <= 100:
        raise ValueError(f"SATISFACTION_STEP must be between 1 and 100, got {satisfaction.step}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
