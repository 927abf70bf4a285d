"""
Configuration

Runtime settings loaded from the environment.
"""

from .settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
