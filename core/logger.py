#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Centralized logging system with Qt signal support
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional
from PySide6.QtCore import QObject, Signal


LOG_DIRECTORY = Path.home() / '.incident_timeline' / 'logs'


class AppLogger(QObject):
    """Centralized logging with Qt signal support for UI integration"""

    # Qt signal for UI components to receive log messages
    log_message = Signal(str, str)  # level, message

    _instance = None

    def __new__(cls):
        """Singleton pattern ensures single logger instance"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger (only once due to singleton)"""
        if self._initialized:
            return

        super().__init__()
        self._initialized = True

        # Parent of every module logger in the incident_timeline package
        self.logger = logging.getLogger('incident_timeline')
        self.logger.setLevel(logging.DEBUG)

        # Remove any existing handlers to avoid duplicates
        self.logger.handlers.clear()

        self._file_handler = None
        self._setup_console_handler()
        self._setup_file_handler()

        self._debug_enabled = False

    def _setup_console_handler(self):
        """Setup console (stdout) handler"""
        console_handler = logging.StreamHandler(sys.stdout)

        # DEBUG messages hidden unless debug mode
        console_handler.setLevel(logging.INFO)

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        self.logger.addHandler(console_handler)
        self._console_handler = console_handler

    def _setup_file_handler(self):
        """Setup file handler for persistent logs"""
        log_file = LOG_DIRECTORY / f"app_{datetime.now().strftime('%Y%m%d')}.log"

        try:
            LOG_DIRECTORY.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
        except OSError as e:
            # Read-only home directories still get console logging
            self.logger.warning(f"File logging disabled: {e}")
            return

        file_handler.setLevel(logging.DEBUG)  # File always gets all levels

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        file_handler.setFormatter(formatter)

        self.logger.addHandler(file_handler)
        self._file_handler = file_handler

    def enable_debug(self, enabled: bool = True):
        """Enable or disable debug logging to console

        Args:
            enabled: Whether to show debug messages in console
        """
        self._debug_enabled = enabled
        if enabled:
            self._console_handler.setLevel(logging.DEBUG)
            self.info("Debug logging enabled")
        else:
            self._console_handler.setLevel(logging.INFO)
            self.info("Debug logging disabled")

    @property
    def debug_enabled(self) -> bool:
        return self._debug_enabled

    def debug(self, message: str):
        """Log debug message"""
        self.logger.debug(message)
        if self._debug_enabled:
            self.log_message.emit('DEBUG', message)

    def info(self, message: str):
        """Log info message"""
        self.logger.info(message)
        self.log_message.emit('INFO', message)

    def warning(self, message: str):
        """Log warning message"""
        self.logger.warning(message)
        self.log_message.emit('WARNING', message)

    def error(self, message: str, exc_info: bool = False):
        """Log error message

        Args:
            message: Error message to log
            exc_info: Whether to include exception traceback
        """
        self.logger.error(message, exc_info=exc_info)
        self.log_message.emit('ERROR', message)

    def exception(self, message: str):
        """Log exception with automatic traceback"""
        self.logger.exception(message)
        self.log_message.emit('ERROR', f"Exception: {message}")

    def get_log_file_path(self) -> Optional[Path]:
        """Get the current log file path, or None if file logging is unavailable"""
        if self._file_handler is not None:
            return Path(self._file_handler.baseFilename)
        return None

    def cleanup_old_logs(self, days_to_keep: int = 30):
        """Clean up log files older than specified days

        Args:
            days_to_keep: Number of days of logs to keep
        """
        if not LOG_DIRECTORY.exists():
            return

        cutoff_date = datetime.now().timestamp() - (days_to_keep * 24 * 60 * 60)

        for log_file in LOG_DIRECTORY.glob('app_*.log'):
            try:
                if log_file.stat().st_mtime < cutoff_date:
                    log_file.unlink()
                    self.debug(f"Deleted old log file: {log_file.name}")
            except OSError as e:
                self.warning(f"Failed to delete old log {log_file.name}: {e}")


# Global logger instance
logger = AppLogger()
