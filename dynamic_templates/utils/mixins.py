from typing import Any, cast

import structlog


class LoggerMixin:
    """Mixin class to add logging capabilities to any class"""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        """Get logger instance for this class"""
        return cast(
            "structlog.stdlib.BoundLogger",
            structlog.get_logger(self.__class__.__name__),
        )

    def bind_logger(self, **context: Any) -> structlog.stdlib.BoundLogger:
        """Get a logger carrying per-operation context such as the note path"""
        return self.logger.bind(**context)
