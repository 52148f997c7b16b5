"""
Configuration module for RoomChat application.
Stores all server settings and protocol limits.
"""

import os
from pathlib import Path
from typing import Dict, Any

_STATIC_DIR = Path(__file__).resolve().parent / "web" / "static"


class Config:
    """Application configuration class."""

    # Server Configuration
    DEFAULT_HOST = os.environ.get("ROOMCHAT_HOST", "0.0.0.0")
    DEFAULT_PORT = int(os.environ.get("PORT", 5001))
    DEFAULT_HTTP_PORT = int(os.environ.get("ROOMCHAT_HTTP_PORT", DEFAULT_PORT + 1))

    # Liveness probing (seconds between probes)
    HEARTBEAT_INTERVAL = float(os.environ.get("ROOMCHAT_HEARTBEAT_INTERVAL", 30))

    # Static client files
    PUBLIC_DIR = os.environ.get("ROOMCHAT_PUBLIC_DIR", str(_STATIC_DIR))
    DEFAULT_DOCUMENT = "index.html"

    # Protocol limits
    MAX_NAME_LENGTH = 64
    MAX_ROOM_LENGTH = 64
    MAX_PASSWORD_LENGTH = 64
    MAX_TEXT_LENGTH = 2000

    DEFAULT_USERNAME = "Anon"
    DEFAULT_ROOM = "general"

    # Logging profile: development, production or testing
    ENVIRONMENT = os.environ.get("ROOMCHAT_ENV", "development")

    @classmethod
    def get_config(cls) -> Dict[str, Any]:
        """Get all configuration values as a dictionary."""
        return {
            "DEFAULT_HOST": cls.DEFAULT_HOST,
            "DEFAULT_PORT": cls.DEFAULT_PORT,
            "DEFAULT_HTTP_PORT": cls.DEFAULT_HTTP_PORT,
            "HEARTBEAT_INTERVAL": cls.HEARTBEAT_INTERVAL,
            "PUBLIC_DIR": cls.PUBLIC_DIR,
            "DEFAULT_DOCUMENT": cls.DEFAULT_DOCUMENT,
            "MAX_NAME_LENGTH": cls.MAX_NAME_LENGTH,
            "MAX_ROOM_LENGTH": cls.MAX_ROOM_LENGTH,
            "MAX_PASSWORD_LENGTH": cls.MAX_PASSWORD_LENGTH,
            "MAX_TEXT_LENGTH": cls.MAX_TEXT_LENGTH,
            "DEFAULT_USERNAME": cls.DEFAULT_USERNAME,
            "DEFAULT_ROOM": cls.DEFAULT_ROOM,
            "ENVIRONMENT": cls.ENVIRONMENT,
        }


# Create config instance
config = Config()
