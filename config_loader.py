"""Configuration loader for PlantBuddy."""

import logging
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from runtime.defaults import (
    DEFAULT_API_BASE_URL,
    DEFAULT_API_REQUEST_TIMEOUT_S,
    DEFAULT_DASHBOARD_HOST,
    DEFAULT_DASHBOARD_PORT,
    DEFAULT_FETCH_MAX_WORKERS,
    DEFAULT_OVERVIEW_SENSOR_KIND,
    DEFAULT_PAGE_SENSOR_KIND,
    DEFAULT_TIMEZONE_NAME,
    DEFAULT_WINDOW_START,
)
from telemetry.sensor_catalog import SENSOR_KIND_NAMES
from time_utils import format_window_ts

API_USER_ENV_VAR = "PLANTBUDDY_API_USER"
API_PASSWORD_ENV_VAR = "PLANTBUDDY_API_PASSWORD"


def _parse_float(value, default, key_name, min_value=None):
    try:
        result = float(value)
        if min_value is not None and result < min_value:
            raise ValueError("below minimum")
        return result
    except (TypeError, ValueError):
        logging.warning("Config: invalid %s='%s'. Using default %s.", key_name, value, default)
        return default


def _parse_int(value, default, key_name, min_value=None):
    try:
        result = int(value)
        if min_value is not None and result < min_value:
            raise ValueError("below minimum")
        return result
    except (TypeError, ValueError):
        logging.warning("Config: invalid %s='%s'. Using default %s.", key_name, value, default)
        return default


def _parse_timezone(timezone_name):
    try:
        ZoneInfo(timezone_name)
        return timezone_name
    except (ZoneInfoNotFoundError, TypeError, ValueError):
        logging.warning(
            "Config: invalid time.timezone='%s'. Using default '%s'.",
            timezone_name,
            DEFAULT_TIMEZONE_NAME,
        )
        return DEFAULT_TIMEZONE_NAME


def _parse_choice(value, allowed_values, default, key_name):
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if normalized not in allowed_values:
        allowed_text = ", ".join(sorted(allowed_values))
        logging.warning(
            "Config: invalid %s='%s'. Using default '%s'. Allowed values: %s.",
            key_name,
            value,
            default,
            allowed_text,
        )
        return default
    return normalized


def _parse_host(value, default, key_name):
    if value is None:
        return default
    host = str(value).strip()
    if not host:
        logging.warning("Config: invalid %s='%s'. Using default '%s'.", key_name, value, default)
        return default
    return host


def _parse_window_start(value):
    if value is None:
        return DEFAULT_WINDOW_START
    try:
        return format_window_ts(value)
    except (TypeError, ValueError):
        logging.warning(
            "Config: invalid time.default_window_start='%s'. Using default '%s'.",
            value,
            DEFAULT_WINDOW_START,
        )
        return DEFAULT_WINDOW_START


def _parse_base_url(value):
    text = str(value or "").strip()
    if not text.startswith(("http://", "https://")):
        logging.warning("Config: invalid api.base_url='%s'. Using default '%s'.", value, DEFAULT_API_BASE_URL)
        return DEFAULT_API_BASE_URL
    if not text.endswith("/"):
        text += "/"
    return text


def load_config(config_path="config.yaml"):
    """Load configuration from YAML and return validated runtime dict."""
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, "r", encoding="utf-8") as handle:
        yaml_config = yaml.safe_load(handle) or {}

    config = {}

    general = yaml_config.get("general", {}) or {}
    log_level_str = str(general.get("log_level", "INFO")).upper()
    config["LOG_LEVEL"] = getattr(logging, log_level_str, logging.INFO)

    time_cfg = yaml_config.get("time", {}) or {}
    config["TIMEZONE_NAME"] = _parse_timezone(time_cfg.get("timezone", DEFAULT_TIMEZONE_NAME))
    config["DEFAULT_WINDOW_START"] = _parse_window_start(time_cfg.get("default_window_start"))

    api_cfg = yaml_config.get("api", {}) or {}
    config["API_BASE_URL"] = _parse_base_url(api_cfg.get("base_url", DEFAULT_API_BASE_URL))
    # Environment variables take precedence so credentials can stay out of config.yaml.
    config["API_USERNAME"] = os.getenv(API_USER_ENV_VAR) or str(api_cfg.get("username", "") or "")
    config["API_PASSWORD"] = os.getenv(API_PASSWORD_ENV_VAR) or str(api_cfg.get("password", "") or "")
    if not config["API_USERNAME"]:
        logging.warning("Config: no API username configured (api.username or %s).", API_USER_ENV_VAR)
    config["API_REQUEST_TIMEOUT_S"] = _parse_float(
        api_cfg.get("request_timeout_s", DEFAULT_API_REQUEST_TIMEOUT_S),
        DEFAULT_API_REQUEST_TIMEOUT_S,
        "api.request_timeout_s",
        min_value=0.1,
    )

    fetch_cfg = yaml_config.get("fetch", {}) or {}
    config["FETCH_MAX_WORKERS"] = _parse_int(
        fetch_cfg.get("max_workers", DEFAULT_FETCH_MAX_WORKERS),
        DEFAULT_FETCH_MAX_WORKERS,
        "fetch.max_workers",
        min_value=1,
    )

    page_cfg = yaml_config.get("page", {}) or {}
    allowed_kinds = set(SENSOR_KIND_NAMES)
    config["PAGE_DEFAULT_SENSOR_KIND"] = _parse_choice(
        page_cfg.get("default_sensor_kind", DEFAULT_PAGE_SENSOR_KIND),
        allowed_kinds,
        DEFAULT_PAGE_SENSOR_KIND,
        "page.default_sensor_kind",
    )
    config["OVERVIEW_SENSOR_KIND"] = _parse_choice(
        page_cfg.get("overview_sensor_kind", DEFAULT_OVERVIEW_SENSOR_KIND),
        allowed_kinds,
        DEFAULT_OVERVIEW_SENSOR_KIND,
        "page.overview_sensor_kind",
    )

    dashboard_cfg = yaml_config.get("dashboard", {}) or {}
    config["DASHBOARD_HOST"] = _parse_host(
        dashboard_cfg.get("host", DEFAULT_DASHBOARD_HOST),
        DEFAULT_DASHBOARD_HOST,
        "dashboard.host",
    )
    config["DASHBOARD_PORT"] = _parse_int(
        dashboard_cfg.get("port", DEFAULT_DASHBOARD_PORT),
        DEFAULT_DASHBOARD_PORT,
        "dashboard.port",
        min_value=1,
    )

    return config
