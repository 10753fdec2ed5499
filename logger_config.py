"""
Logging setup for PlantBuddy.

Messages follow a "<Component>: <text>" convention ("Telemetry fetcher: ...",
"Page detail: ...", "Overview: ...", "PlantBuddy API: ..."). Records go to
the console, to one file per local day under logs/, and to the in-memory
session log behind the dashboard's Logs tab. Session entries keep the
component as its own field so the tab can filter on it.
"""

import logging
import os
import re
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from runtime.defaults import SESSION_LOG_LIMIT
from runtime.paths import get_logs_dir

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_SUFFIX = "plantbuddy.log"

QUIET_LOGGERS = {
    "werkzeug": logging.ERROR,
    "urllib3": logging.WARNING,
    "dash": logging.WARNING,
}

_COMPONENT_RE = re.compile(r"^(?P<component>[A-Z][\w .-]{0,40}?): (?P<text>.*)$", re.DOTALL)


def split_component(message):
    """Split "Component: text" into (component, text); unprefixed messages give (None, message)."""
    message = str(message)
    match = _COMPONENT_RE.match(message)
    if match is None:
        return None, message
    return match.group("component"), match.group("text")


def _resolve_timezone(timezone_name):
    try:
        return ZoneInfo(str(timezone_name))
    except (TypeError, ValueError, ZoneInfoNotFoundError):
        return datetime.now().astimezone().tzinfo


class SessionLogHandler(logging.Handler):
    """Keep the newest `limit` records in shared_data["session_logs"] for the Logs tab."""

    def __init__(self, shared_data, limit=SESSION_LOG_LIMIT):
        super().__init__()
        self.shared_data = shared_data
        self.limit = max(1, int(limit))

    def emit(self, record):
        try:
            component, text = split_component(record.getMessage())
            if component is None and record.name != "root":
                component = record.name
            entry = {
                "timestamp": datetime.fromtimestamp(record.created).strftime("%H:%M:%S"),
                "level": record.levelname,
                "component": component or "",
                "message": text,
            }
            with self.shared_data["log_lock"]:
                logs = self.shared_data["session_logs"]
                logs.append(entry)
                if len(logs) > self.limit:
                    del logs[: len(logs) - self.limit]
        except Exception:
            self.handleError(record)


class DailyLogFileHandler(logging.FileHandler):
    """
    FileHandler writing to logs/<YYYY-MM-DD>_plantbuddy.log.

    The date is taken from each record in the configured timezone; the
    handler switches files when it changes and publishes the active path as
    shared_data["log_file_path"].
    """

    def __init__(self, logs_dir, timezone_name, shared_data, encoding="utf-8"):
        self.logs_dir = os.path.abspath(logs_dir)
        self.timezone = _resolve_timezone(timezone_name)
        self.shared_data = shared_data
        self.current_date = None
        today = datetime.now(self.timezone).strftime("%Y-%m-%d")
        super().__init__(self.path_for(today), mode="a", encoding=encoding, delay=True)

    def path_for(self, date_str):
        return os.path.join(self.logs_dir, f"{date_str}_{LOG_FILE_SUFFIX}")

    def _switch_to(self, date_str):
        if self.stream is not None:
            self.stream.close()
            self.stream = None
        self.baseFilename = self.path_for(date_str)
        self.current_date = date_str
        with self.shared_data["log_lock"]:
            self.shared_data["log_file_path"] = self.baseFilename

    def emit(self, record):
        try:
            date_str = datetime.fromtimestamp(record.created, tz=self.timezone).strftime("%Y-%m-%d")
            if date_str != self.current_date:
                self._switch_to(date_str)
        except Exception:
            self.handleError(record)
            return
        super().emit(record)


def setup_logging(config, shared_data, logs_dir=None):
    """
    Route the root logger to the console, the daily log file and the session log.

    Args:
        config: Configuration dict; LOG_LEVEL and TIMEZONE_NAME are used.
        shared_data: Runtime dict holding "log_lock" and "session_logs".
        logs_dir: Directory for log files; defaults to <project root>/logs.

    Returns:
        logging.Logger: The configured root logger.
    """
    log_level = config.get("LOG_LEVEL", logging.INFO)
    logs_dir = logs_dir or get_logs_dir(__file__)
    os.makedirs(logs_dir, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = (
        logging.StreamHandler(),
        DailyLogFileHandler(logs_dir, config.get("TIMEZONE_NAME"), shared_data),
        SessionLogHandler(shared_data),
    )
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    return root_logger
