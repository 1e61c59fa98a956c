"""
Logging configuration for the coupon service.

Provides a centralized package logger; the level comes from settings.
"""
import logging
import sys

from .config import settings

logger = logging.getLogger("coupon_management")
logger.setLevel(settings.LOG_LEVEL.upper())

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

# Prevent propagation to root logger (avoid duplicate logs)
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (will be appended to 'coupon_management')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"coupon_management.{name}")
    return logger


def set_level(level: str) -> None:
    logger.setLevel(level.upper())
