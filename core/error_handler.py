#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Thread-safe centralized error handling for the Incident Timeline application

Errors are logged immediately by severity and routed to the main thread for
UI notification through a queued Qt signal.
"""

from PySide6.QtCore import QObject, Signal, QThread, QCoreApplication, Qt
from typing import Callable, List, Dict, Any, Optional
import logging
import traceback
from datetime import datetime

from .exceptions import FSAError, ErrorSeverity


def _in_main_thread() -> bool:
    app = QCoreApplication.instance()
    if app is None:
        return True
    return QThread.currentThread() == app.thread()


class ErrorHandler(QObject):
    """
    Thread-safe centralized error handling system

    Routes errors from any thread to the main thread for UI updates while
    providing immediate thread-safe logging.
    """

    error_occurred = Signal(FSAError, dict)  # error, context

    def __init__(self, parent=None, max_recent_errors: int = 100):
        """
        Initialize error handler

        Args:
            parent: Parent QObject for proper Qt lifecycle management
            max_recent_errors: Size of the recent error buffer
        """
        super().__init__(parent)

        self.logger = logging.getLogger('incident_timeline.errors')

        self._ui_callbacks: List[Callable[[FSAError, dict], None]] = []

        self._error_counts = {severity: 0 for severity in ErrorSeverity}

        self._recent_errors: List[Dict[str, Any]] = []
        self._max_recent_errors = max_recent_errors

        self.error_occurred.connect(
            self._handle_error_main_thread,
            Qt.QueuedConnection  # Ensure main thread execution
        )

        self.logger.debug("Error handler initialized")

    def register_ui_callback(self, callback: Callable[[FSAError, dict], None]):
        """
        Register UI callback for error notifications

        Callbacks are invoked in the main thread when errors occur.
        """
        if not _in_main_thread():
            self.logger.warning("UI callback registered from non-main thread")

        self._ui_callbacks.append(callback)

    def unregister_ui_callback(self, callback: Callable[[FSAError, dict], None]):
        """Unregister UI callback"""
        try:
            self._ui_callbacks.remove(callback)
        except ValueError:
            self.logger.warning("Attempted to unregister non-existent UI callback")

    def handle_error(self, error: FSAError, context: Optional[dict] = None):
        """
        Handle error from any thread

        Args:
            error: The error that occurred
            context: Additional context information
        """
        context = dict(context or {})

        current_thread = QThread.currentThread()
        context.update({
            'handler_thread': current_thread.objectName() or current_thread.__class__.__name__,
            'timestamp': datetime.now().isoformat()
        })

        self._log_error(error, context)

        self._error_counts[error.severity] += 1

        self._store_recent_error(error, context)

        if _in_main_thread():
            self._handle_error_main_thread(error, context)
        else:
            self.error_occurred.emit(error, context)

    def _handle_error_main_thread(self, error: FSAError, context: dict):
        """Notify all UI callbacks (main thread only)"""
        for callback in self._ui_callbacks:
            try:
                callback(error, context)
            except Exception as callback_error:
                self.logger.error(f"UI callback failed: {callback_error}")
                self.logger.debug(f"Callback traceback: {traceback.format_exc()}")

    def _log_error(self, error: FSAError, context: dict):
        """Log error by severity"""
        context_items = [
            f"{key}={value}" for key, value in context.items()
            if key not in ('timestamp', 'handler_thread')
        ]

        log_msg = f"[{error.error_code}] {error.message}"
        if context_items:
            log_msg += f" | Context: {', '.join(context_items)}"

        if error.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(log_msg)
        elif error.severity == ErrorSeverity.ERROR:
            self.logger.error(log_msg)
        elif error.severity == ErrorSeverity.WARNING:
            self.logger.warning(log_msg)
        else:
            self.logger.info(log_msg)

    def _store_recent_error(self, error: FSAError, context: dict):
        """Store error in the bounded recent errors list"""
        error_record = error.to_dict()
        error_record['context'] = context.copy()

        self._recent_errors.append(error_record)

        if len(self._recent_errors) > self._max_recent_errors:
            self._recent_errors = self._recent_errors[-self._max_recent_errors:]

    def get_error_statistics(self) -> Dict[str, int]:
        """Get error count statistics keyed by severity value"""
        return {severity.value: count for severity, count in self._error_counts.items()}

    def get_recent_errors(self, count: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get recent errors, newest last"""
        if count is None:
            return self._recent_errors.copy()
        return self._recent_errors[-count:] if self._recent_errors else []

    def clear_statistics(self):
        """Clear error statistics and recent errors"""
        self._error_counts = {severity: 0 for severity in ErrorSeverity}
        self._recent_errors.clear()


# Global singleton instance
_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """
    Get the global error handler instance

    Creates the instance if it doesn't exist.
    """
    global _global_error_handler

    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()

    return _global_error_handler


def shutdown_error_handling():
    """Drop the global error handler (application shutdown and tests)"""
    global _global_error_handler

    if _global_error_handler is not None:
        _global_error_handler.clear_statistics()
        _global_error_handler = None


def handle_error(error: FSAError, context: Optional[dict] = None):
    """Handle an error using the global error handler"""
    get_error_handler().handle_error(error, context)
