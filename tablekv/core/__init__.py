"""Command execution module for tablekv."""

from .executor import CommandExecutor

__all__ = ["CommandExecutor"]
