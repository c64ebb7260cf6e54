"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

# Business constants. Not environment driven.
MINUTES_PER_POINT = 240
CAPACITY_MULTIPLIER = 10

DEFAULT_TEAM_AVAILABILITY_PERCENT = 96.36
DEFAULT_HEADER_ROW_OFFSET = 7


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


@dataclass(frozen=True)
class TimesheetIngestionSettings:
    """
    Runtime settings for timesheet spreadsheet imports.
    """

    header_row_offset: int = DEFAULT_HEADER_ROW_OFFSET
    default_team_name: str = "CTS"
    max_validation_errors: int = 500
    log_validation_errors: bool = True
    max_upload_bytes: int = 10 * 1024 * 1024


@dataclass(frozen=True)
class TimesheetReportSettings:
    """
    Runtime settings for report composition and export.
    """

    team_availability_percent: float = DEFAULT_TEAM_AVAILABILITY_PERCENT
    work_item_base_url: str = "https://projects.zoho.com/"
    report_title: str = "Weekly Production Report"
    report_filename_prefix: str = "Weekly_Prod_List"


@lru_cache(maxsize=1)
def get_timesheet_ingestion_settings() -> TimesheetIngestionSettings:
    """
    Return cached timesheet import settings from environment variables.
    """

    return TimesheetIngestionSettings(
        header_row_offset=max(0, _get_int_env("TIMESHEET_HEADER_ROW_OFFSET", DEFAULT_HEADER_ROW_OFFSET)),
        default_team_name=_get_str_env("TIMESHEET_DEFAULT_TEAM_NAME", "CTS"),
        max_validation_errors=max(1, _get_int_env("TIMESHEET_MAX_VALIDATION_ERRORS", 500)),
        log_validation_errors=_get_bool_env("TIMESHEET_LOG_VALIDATION_ERRORS", True),
        max_upload_bytes=max(1024, _get_int_env("TIMESHEET_MAX_UPLOAD_BYTES", 10 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_timesheet_report_settings() -> TimesheetReportSettings:
    """
    Return cached report settings from environment variables.
    """

    return TimesheetReportSettings(
        team_availability_percent=max(
            0.0,
            _get_float_env("TEAM_AVAILABILITY_PERCENT", DEFAULT_TEAM_AVAILABILITY_PERCENT),
        ),
        work_item_base_url=_get_str_env("WORK_ITEM_BASE_URL", "https://projects.zoho.com/"),
        report_title=_get_str_env("TIMESHEET_REPORT_TITLE", "Weekly Production Report"),
        report_filename_prefix=_get_str_env("TIMESHEET_REPORT_FILENAME_PREFIX", "Weekly_Prod_List"),
    )
