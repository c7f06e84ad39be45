"""Speed test server -- ping, download and upload endpoints on aiohttp.web."""

from .app import SpeedtestHandlers, create_app
from .assets import PayloadDescriptor, describe_asset, ensure_asset, resolve_asset
from .collector import UploadCollector
from .config import ServerConfig, load_server_config
from .errors import PayloadTooLarge, ServerError, StreamFailure

__all__ = [
    "PayloadDescriptor",
    "PayloadTooLarge",
    "ServerConfig",
    "ServerError",
    "SpeedtestHandlers",
    "StreamFailure",
    "UploadCollector",
    "create_app",
    "describe_asset",
    "ensure_asset",
    "load_server_config",
    "resolve_asset",
]
