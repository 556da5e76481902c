"""
tablekv Configuration Settings

This module contains all configuration constants for the tablekv server.
Values can be overridden through environment variables or CLI flags.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("KV_TABLE_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("KV_TABLE_PORT", "8080"))

    # Storage settings
    DATABASE: str = os.environ.get("KV_TABLE_DATABASE", "kv_store.db")
    MAX_KEY_LENGTH: int = 256
    MAX_VALUE_LENGTH: int = 1024

    # Connection settings
    READ_BUFFER_SIZE: int = 4096
    READ_TIMEOUT: float = float(os.environ.get("KV_TABLE_READ_TIMEOUT", "0"))  # 0 means wait forever

    # Logging settings
    DEBUG: bool = os.environ.get("KV_TABLE_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("KV_TABLE_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
