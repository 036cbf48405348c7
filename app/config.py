"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

TRANSACTION_MODES = frozenset({"auto", "savepoint", "per_row"})


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class CSVImportSettings:
    """
    Runtime settings for the bulk CSV import pipeline.
    """

    batch_size: int = 500
    transaction_mode: str = "auto"
    notify_max_workers: int = 4
    log_row_issues: bool = True
    default_semester: int = 1
    default_designation: str = "Teacher"
    password_length: int = 8


@dataclass(frozen=True)
class MailSettings:
    """
    SMTP settings for outbound email.
    """

    host: str = "smtp.gmail.com"
    port: int = 587
    username: str | None = None
    password: str | None = None
    from_name: str = "Admin Panel"
    timeout_seconds: float = 15.0

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password)


@dataclass(frozen=True)
class SMSSettings:
    """
    Twilio REST API settings for outbound SMS.
    """

    account_sid: str | None = None
    auth_token: str | None = None
    from_number: str | None = None
    base_url: str = "https://api.twilio.com/2010-04-01"
    timeout_seconds: float = 15.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)


@dataclass(frozen=True)
class AlertJobSettings:
    """
    Schedule for the daily guardian attendance alert job.
    """

    enabled: bool = True
    hour: int = 18
    minute: int = 0
    timezone: str = "Asia/Kolkata"


@lru_cache(maxsize=1)
def get_csv_import_settings() -> CSVImportSettings:
    """
    Return cached CSV import settings from environment variables.
    """

    mode = _get_str_env("CSV_IMPORT_TRANSACTION_MODE", "auto").lower()
    if mode not in TRANSACTION_MODES:
        raise RuntimeError(
            f"CSV_IMPORT_TRANSACTION_MODE '{mode}' is not valid. "
            f"Allowed values: {sorted(TRANSACTION_MODES)}."
        )

    return CSVImportSettings(
        batch_size=max(1, _get_int_env("CSV_IMPORT_BATCH_SIZE", 500)),
        transaction_mode=mode,
        notify_max_workers=max(1, _get_int_env("CSV_IMPORT_NOTIFY_MAX_WORKERS", 4)),
        log_row_issues=_get_bool_env("CSV_IMPORT_LOG_ROW_ISSUES", True),
        default_semester=max(1, _get_int_env("CSV_IMPORT_DEFAULT_SEMESTER", 1)),
        default_designation=_get_str_env("CSV_IMPORT_DEFAULT_DESIGNATION", "Teacher"),
        password_length=max(8, _get_int_env("CSV_IMPORT_PASSWORD_LENGTH", 8)),
    )


@lru_cache(maxsize=1)
def get_mail_settings() -> MailSettings:
    """
    Return SMTP settings from environment variables.
    """

    return MailSettings(
        host=_get_str_env("EMAIL_HOST", "smtp.gmail.com"),
        port=_get_int_env("EMAIL_PORT", 587),
        username=_get_optional_str_env("EMAIL_USER"),
        password=_get_optional_str_env("EMAIL_PASS"),
        from_name=_get_str_env("EMAIL_FROM_NAME", "Admin Panel"),
        timeout_seconds=max(1.0, _get_float_env("EMAIL_TIMEOUT_SECONDS", 15.0)),
    )


@lru_cache(maxsize=1)
def get_sms_settings() -> SMSSettings:
    """
    Return Twilio SMS settings from environment variables.
    """

    return SMSSettings(
        account_sid=_get_optional_str_env("TWILIO_ACCOUNT_SID"),
        auth_token=_get_optional_str_env("TWILIO_AUTH_TOKEN"),
        from_number=_get_optional_str_env("TWILIO_PHONE_NUMBER"),
        base_url=_get_str_env("TWILIO_BASE_URL", "https://api.twilio.com/2010-04-01"),
        timeout_seconds=max(1.0, _get_float_env("SMS_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("SMS_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.0, _get_float_env("SMS_BACKOFF_INITIAL_SECONDS", 0.5)),
    )


@lru_cache(maxsize=1)
def get_alert_job_settings() -> AlertJobSettings:
    """
    Return the alert job schedule from environment variables.
    """

    return AlertJobSettings(
        enabled=_get_bool_env("ALERT_JOB_ENABLED", True),
        hour=min(23, max(0, _get_int_env("ALERT_JOB_HOUR", 18))),
        minute=min(59, max(0, _get_int_env("ALERT_JOB_MINUTE", 0))),
        timezone=_get_str_env("ALERT_JOB_TIMEZONE", "Asia/Kolkata"),
    )
