"""Shared logger utility.

get_logger falls back to a plain-text basicConfig when nothing configured
logging first, so library code and scripts still print something useful.
"""

from __future__ import annotations

import logging

_configured = False


def get_logger(name: str, auto_configure: bool = True) -> logging.Logger:
    """Get a preconfigured structured logger.

    Args:
        name: Logger name (usually module name)
        auto_configure: Whether to install the fallback config on first use

    Returns:
        Configured logger instance
    """
    global _configured

    if auto_configure and not _configured:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        _configured = True

    logger = logging.getLogger(name)
    logger.propagate = True
    return logger


def mark_configured():
    """Called by shared.logging.json.configure_logging."""
    global _configured
    _configured = True
