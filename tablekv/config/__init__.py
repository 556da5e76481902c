"""Configuration module for tablekv."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
