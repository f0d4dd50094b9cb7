"""
Logging utility with console and file output.

Implements ILogger interface for dependency injection.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from hmac_timing.core.interfaces import ILogger


ROOT_LOGGER_NAME = "TimingAttack"


class Logger(ILogger):
    """
    Concrete implementation of logging functionality.

    Provides both console and file logging with configurable levels.
    Loggers named ``TimingAttack.<component>`` without handlers of their
    own propagate to whatever the front end configured on ``TimingAttack``.
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: str = "INFO",
        log_file: Optional[str] = None,
        console: bool = True
    ):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path for log output
            console: Whether to log to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Clear any existing handlers
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @classmethod
    def for_component(cls, component: str) -> "Logger":
        """Child logger that only propagates to the configured root logger."""
        return cls(name=f"{ROOT_LOGGER_NAME}.{component}", level="NOTSET", console=False)

    def debug(self, message: str) -> None:
        """Log debug message."""
        self.logger.debug(message)

    def info(self, message: str) -> None:
        """Log info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log error message."""
        self.logger.error(message)
