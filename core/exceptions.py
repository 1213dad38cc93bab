#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Thread-aware exception hierarchy for the Incident Timeline application

Errors carry a technical message for logs, a user-facing message for the
status bar, a severity and a context dictionary. Service seams return them
inside Result objects instead of raising, so nothing in the ingestion or
playback path is fatal to the process.
"""

from PySide6.QtCore import QThread
from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for categorization and UI display"""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class FSAError(Exception):
    """
    Base exception for all application errors

    Thread-aware exception that captures context information and provides
    user-friendly messages for UI display.
    """

    def __init__(self,
                 message: str,
                 error_code: Optional[str] = None,
                 user_message: Optional[str] = None,
                 recoverable: bool = False,
                 severity: ErrorSeverity = ErrorSeverity.ERROR,
                 context: Optional[Dict[str, Any]] = None):
        """
        Initialize error

        Args:
            message: Technical error message for logging
            error_code: Unique error code for categorization
            user_message: User-friendly message for UI display
            recoverable: Whether operation can be retried
            severity: Error severity level
            context: Additional context information
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.user_message = user_message or self._generate_user_message()
        self.recoverable = recoverable
        self.severity = severity
        self.timestamp = datetime.now()

        # Thread context information
        current_thread = QThread.currentThread()
        self.thread_name = current_thread.objectName() or current_thread.__class__.__name__

    def _generate_user_message(self) -> str:
        """Generate user-friendly message from technical message"""
        return "An error occurred during the operation. Please check the logs for details."

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging and serialization"""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'user_message': self.user_message,
            'severity': self.severity.value,
            'recoverable': self.recoverable,
            'timestamp': self.timestamp.isoformat(),
            'thread_name': self.thread_name,
            'context': self.context
        }


class ValidationError(FSAError):
    """Input and settings validation errors"""

    def __init__(self, field_errors: Dict[str, str], **kwargs):
        """
        Initialize validation error

        Args:
            field_errors: Dictionary mapping field names to error messages
            **kwargs: Additional FSAError arguments
        """
        self.field_errors = field_errors
        context = kwargs.get('context', {})
        context['field_errors'] = field_errors
        kwargs['context'] = context

        message = f"Validation failed: {len(field_errors)} field(s) have errors"
        super().__init__(message, severity=ErrorSeverity.WARNING, **kwargs)

    def _generate_user_message(self) -> str:
        error_count = len(self.field_errors)
        if error_count == 1:
            return "Please correct the validation error."
        return f"Please correct {error_count} validation errors."


class IncidentTimelineError(FSAError):
    """Base class for incident ingestion, filtering and playback errors"""

    def _generate_user_message(self) -> str:
        return "Incident data could not be processed. Please check the logs for details."


class MalformedRowError(IncidentTimelineError):
    """A source row whose coordinates do not parse to finite numbers"""

    def __init__(self, message: str, sequence_index: Optional[int] = None, **kwargs):
        """
        Initialize malformed row error

        Args:
            message: Technical error message
            sequence_index: 1-based position of the row in the source
            **kwargs: Additional FSAError arguments
        """
        self.sequence_index = sequence_index
        context = kwargs.get('context', {})
        if sequence_index is not None:
            context['sequence_index'] = sequence_index
        kwargs['context'] = context
        kwargs.setdefault('severity', ErrorSeverity.WARNING)
        kwargs.setdefault('recoverable', True)

        super().__init__(message, **kwargs)

    def _generate_user_message(self) -> str:
        if self.sequence_index is not None:
            return f"Row {self.sequence_index} was skipped because its coordinates are invalid."
        return "A row was skipped because its coordinates are invalid."


class UnparseableTimestampError(IncidentTimelineError):
    """A timestamp that matches no known format; the record's time becomes unknown"""

    def __init__(self, raw_value: str, **kwargs):
        self.raw_value = raw_value
        context = kwargs.get('context', {})
        context['raw_value'] = raw_value
        kwargs['context'] = context
        kwargs.setdefault('severity', ErrorSeverity.INFO)
        kwargs.setdefault('recoverable', True)

        super().__init__(f"Unparseable timestamp: {raw_value!r}", **kwargs)

    def _generate_user_message(self) -> str:
        return "Some records have an unrecognized time and only appear when no date filter is active."


class EmptyDatasetError(IncidentTimelineError):
    """Playback was requested for a filter that matched no records"""

    def __init__(self, message: str = "No records to play", **kwargs):
        kwargs.setdefault('severity', ErrorSeverity.WARNING)
        kwargs.setdefault('recoverable', True)
        super().__init__(message, **kwargs)

    def _generate_user_message(self) -> str:
        return "No data points to play for this filter."


class InvalidWindowError(IncidentTimelineError):
    """A custom date or date range filter with missing or unparseable input"""

    def __init__(self, message: str, filter_name: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if filter_name:
            context['filter'] = filter_name
        kwargs['context'] = context
        kwargs.setdefault('severity', ErrorSeverity.WARNING)
        kwargs.setdefault('recoverable', True)

        super().__init__(message, **kwargs)

    def _generate_user_message(self) -> str:
        return "Please choose a valid date for this filter."


class PlaybackStateError(IncidentTimelineError):
    """A playback command that is not valid in the current state"""

    def __init__(self, message: str, state: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if state:
            context['state'] = state
        kwargs['context'] = context
        kwargs.setdefault('severity', ErrorSeverity.WARNING)
        kwargs.setdefault('recoverable', True)

        super().__init__(message, **kwargs)

    def _generate_user_message(self) -> str:
        return "That playback command is not available right now."
