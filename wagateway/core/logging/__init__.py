"""Logging module for wagateway."""

from .logger import get_app_logger, get_logger, setup_app_logging, setup_logging

__all__ = ["get_app_logger", "get_logger", "setup_app_logging", "setup_logging"]
