from .config import BridgeSettings, get_settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "BridgeSettings",
    "get_logger",
    "get_settings",
    "setup_logging",
]
