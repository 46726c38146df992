"""Shared utilities and components for the monitor service."""

from .config import BaseHttpConfig, BaseLoggingConfig, BaseServiceConfig
from .constants.environments import Environment

__all__ = [
    "Environment",
    "BaseServiceConfig",
    "BaseLoggingConfig",
    "BaseHttpConfig",
]
