"""
Endpoint layout and payload defaults shared by client and server.

The download asset's name and size are agreed out of band; the client
computes its rate from ``DOWNLOAD_FILE_SIZE``, so the server must serve a
file of exactly that length.
"""

DEFAULT_PORT = 3000

API_ROOT = "/api"
PING_PATH = "/ping"
DOWNLOAD_PATH = "/download"
UPLOAD_PATH = "/upload"

NO_STORE = {"Cache-Control": "no-store"}

DOWNLOAD_FILE = "10MB.bin"
DOWNLOAD_FILE_SIZE = 10 * 1024 * 1024   # 10 MiB
