"""Shared runtime defaults used across modules.

Keep this module lightweight (no pandas/heavy imports) so low-level modules can
import shared constants without creating avoidable import dependencies.
"""

DEFAULT_TIMEZONE_NAME = "Europe/Berlin"

DEFAULT_API_BASE_URL = "https://pb.mfloto.com/v1/"
DEFAULT_API_REQUEST_TIMEOUT_S = 10.0

# Earliest timestamp the collaborator has data for.
DEFAULT_WINDOW_START = "2019-01-01T00:00:00.000Z"

DEFAULT_FETCH_MAX_WORKERS = 8

DEFAULT_PAGE_SENSOR_KIND = "soil-moisture"
DEFAULT_OVERVIEW_SENSOR_KIND = "humidity"

DEFAULT_DASHBOARD_HOST = "127.0.0.1"
DEFAULT_DASHBOARD_PORT = 8050

SESSION_LOG_LIMIT = 1000
