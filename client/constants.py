"""
Client-side constants: request headers, default endpoints and payload sizes.

Values the server must agree on come from ``common.protocol``.
"""

from common.protocol import (  # noqa: F401
    API_ROOT,
    DEFAULT_PORT,
    DOWNLOAD_FILE,
    DOWNLOAD_FILE_SIZE,
    DOWNLOAD_PATH,
    NO_STORE,
    PING_PATH,
    UPLOAD_PATH,
)

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = "speedcheck/1.0"

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
    "Accept-Encoding": "identity",
}

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = f"http://localhost:{DEFAULT_PORT}{API_ROOT}"

# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

UPLOAD_DATA_SIZE = 5 * 1024 * 1024      # 5 MiB

# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

BITS_PER_BYTE = 8
BITS_PER_MEBIBIT = 1024 * 1024
SPEED_DECIMALS = 2
EMPTY_RESULT = "-"
ERROR_RESULT = "Error"
