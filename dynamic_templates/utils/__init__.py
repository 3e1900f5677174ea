"""Utility modules for Dynamic Templates"""

from .error_handler import ErrorHandler, handle_errors, safe_with_default
from .logger import get_logger, preview_text, setup_logging
from .mixins import LoggerMixin

__all__ = [
    "get_logger",
    "setup_logging",
    "preview_text",
    "LoggerMixin",
    "ErrorHandler",
    "handle_errors",
    "safe_with_default",
]
