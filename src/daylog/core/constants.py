"""daylog constants: filesystem layout, limits, and sentinels."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    NOT_FOUND = 3


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

CONFIG_FILENAME = "daylog.toml"
DEFAULT_ROOT_DIR = "log"
SECURITY_CHANNEL = "security"
ERRORS_CHANNEL = "errors"
DAY_FORMAT = "%Y%m%d"  # partition date inside <prefix>_YYYYMMDD.log

# ---------------------------------------------------------------------------
# Read limits
# ---------------------------------------------------------------------------

DEFAULT_READ_LIMIT = 1000  # substituted for non-numeric / non-finite limits
MIN_READ_LIMIT = 1
MAX_READ_LIMIT = 10000
VIEW_READ_LIMIT = 500  # operator views show the last 500 lines
SEARCH_WINDOW = MAX_READ_LIMIT  # field search scans the last 10000 lines
DEFAULT_SERIES_DAYS = 7

# ---------------------------------------------------------------------------
# Record fields
# ---------------------------------------------------------------------------

ANONYMOUS_ACTOR = "ANONYMOUS"
UNKNOWN_IP = "Unknown"
NO_REQUEST_IP = "N/A"
UNKNOWN_USER_AGENT = "Unknown"
USER_AGENT_MAX_CHARS = 100
ERROR_BACKTRACE_LINES = 5
CRITICAL_BACKTRACE_LINES = 10
BACKTRACE_INDENT = "  "
