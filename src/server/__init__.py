"""Breathing UI server: static page, event pushes, and inbound commands."""

from .config import ServerConfigurationError, UIServerConfig
from .service import CommandHandler, UIServer

__all__ = [
    "CommandHandler",
    "ServerConfigurationError",
    "UIServer",
    "UIServerConfig",
]
