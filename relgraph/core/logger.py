"""
RELGRAPH Logging System

This module provides centralized logging for the whole RELGRAPH package.
Every logger lives under the ``relgraph`` namespace; handlers are attached
once to the namespace root so child loggers share them. Console output goes
to stderr so that graph output on stdout stays clean.
"""

import logging
import sys
from typing import Optional

from .config import Config

ROOT_LOGGER_NAME = "relgraph"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Logger:
    """Centralized logging wrapper for RELGRAPH."""

    def __init__(self, name: str = ROOT_LOGGER_NAME, level: Optional[str] = None, config: Optional[Config] = None):
        """Initialize logger.

        Args:
            name: Logger name, placed under the ``relgraph`` namespace
            level: Log level; falls back to ``logging.level`` from config
            config: Optional Config instance
        """
        if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        self.name = name
        self.config = config or Config()

        config_level = level or self.config.get('logging.level', 'INFO')
        self.level = getattr(logging, str(config_level).upper(), logging.INFO)

        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Attach handlers to the namespace root on first use."""
        root = logging.getLogger(ROOT_LOGGER_NAME)

        if not root.handlers:
            root.setLevel(self.level)
            root.propagate = False

            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(console_handler)

            log_file = self.config.get('logging.file')
            if log_file:
                try:
                    file_handler = logging.FileHandler(log_file)
                    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
                    root.addHandler(file_handler)
                except OSError as e:
                    # Console logging still works without the file
                    print(f"Warning: Could not open log file {log_file}: {e}", file=sys.stderr)

        return logging.getLogger(self.name)

    @staticmethod
    def set_level(level: str) -> None:
        """Change the level of every RELGRAPH logger."""
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(getattr(logging, level.upper(), logging.INFO))

    def info(self, message: str, **kwargs) -> None:
        """Log info message."""
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message."""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log error message."""
        self.logger.error(message, extra=kwargs)

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message."""
        self.logger.debug(message, extra=kwargs)

    def critical(self, message: str, **kwargs) -> None:
        """Log critical message."""
        self.logger.critical(message, extra=kwargs)

    def is_debug(self) -> bool:
        return self.logger.isEnabledFor(logging.DEBUG)

    def log_phase_start(self, phase: str, **kwargs) -> None:
        """Log phase start."""
        self.info(f"Starting {phase} phase", phase=phase, **kwargs)

    def log_phase_complete(self, phase: str, **kwargs) -> None:
        """Log phase completion."""
        self.info(f"Completed {phase} phase", phase=phase, **kwargs)
