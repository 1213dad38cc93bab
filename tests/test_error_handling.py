#!/usr/bin/env python3
"""
Tests for the error hierarchy, Result objects and the error handler
"""
import pytest

from core.error_handler import get_error_handler, handle_error, shutdown_error_handling
from core.exceptions import (
    EmptyDatasetError, ErrorSeverity, FSAError, IncidentTimelineError,
    InvalidWindowError, MalformedRowError, UnparseableTimestampError, ValidationError
)
from core.result_types import Result


class TestExceptions:
    """Error hierarchy"""

    def test_base_error_captures_context(self):
        error = FSAError("boom", context={'a': 1})
        data = error.to_dict()
        assert data['error_code'] == 'FSAError'
        assert data['severity'] == 'error'
        assert data['context'] == {'a': 1}
        assert error.thread_name

    def test_feature_errors_are_recoverable_warnings(self):
        for error in (
            MalformedRowError("bad row", sequence_index=3),
            EmptyDatasetError(),
            InvalidWindowError("bad window", filter_name="custom-date"),
        ):
            assert isinstance(error, IncidentTimelineError)
            assert error.severity == ErrorSeverity.WARNING
            assert error.recoverable

    def test_malformed_row_user_message(self):
        assert "Row 3" in MalformedRowError("bad row", sequence_index=3).user_message

    def test_unparseable_timestamp_is_info(self):
        error = UnparseableTimestampError("soonish")
        assert error.severity == ErrorSeverity.INFO
        assert error.context['raw_value'] == "soonish"

    def test_validation_error_fields(self):
        error = ValidationError({'speed': 'must be positive'})
        assert error.field_errors == {'speed': 'must be positive'}
        assert error.user_message == "Please correct the validation error."


class TestResult:
    """Result value object"""

    def test_success(self):
        result = Result.success(5, count=1)
        assert result.success
        assert result.unwrap() == 5
        assert result.metadata == {'count': 1}

    def test_error_unwrap_raises(self):
        result = Result.error(EmptyDatasetError())
        assert result.unwrap_or("fallback") == "fallback"
        with pytest.raises(EmptyDatasetError):
            result.unwrap()

    def test_map_and_then(self):
        result = Result.success(2).map(lambda value: value * 3)
        assert result.value == 6
        chained = result.and_then(lambda value: Result.error(InvalidWindowError(f"no {value}")))
        assert not chained.success

    def test_map_wraps_failures(self):
        result = Result.success(0).map(lambda value: 1 / value)
        assert not result.success
        assert isinstance(result.error, FSAError)

    def test_warnings(self):
        result = Result.success(None).add_warning("careful")
        assert result.has_warnings()
        assert result.warnings == ["careful"]


class TestErrorHandler:
    """Global error handler"""

    @pytest.fixture
    def handler(self):
        shutdown_error_handling()
        yield get_error_handler()
        shutdown_error_handling()

    def test_statistics_by_severity(self, handler):
        handle_error(MalformedRowError("bad row", sequence_index=1))
        handle_error(IncidentTimelineError("broken"))
        stats = handler.get_error_statistics()
        assert stats['warning'] == 1
        assert stats['error'] == 1

    def test_ui_callbacks_receive_errors(self, handler):
        received = []
        handler.register_ui_callback(lambda error, context: received.append((error, context)))
        handle_error(EmptyDatasetError(), {'method': 'start'})
        assert len(received) == 1
        assert received[0][1]['method'] == 'start'

    def test_failing_callback_does_not_propagate(self, handler):
        def broken(error, context):
            raise RuntimeError("callback bug")

        handler.register_ui_callback(broken)
        handle_error(EmptyDatasetError())
        assert handler.get_error_statistics()['warning'] == 1

    def test_recent_errors(self, handler):
        for index in range(3):
            handle_error(IncidentTimelineError(f"error {index}"))
        recent = handler.get_recent_errors(2)
        assert [entry['message'] for entry in recent] == ["error 1", "error 2"]
        handler.clear_statistics()
        assert handler.get_recent_errors() == []

    def test_unregister_callback(self, handler):
        received = []
        callback = received.append
        handler.register_ui_callback(lambda error, context: callback(error))
        handler.unregister_ui_callback(callback)  # never registered; logged only
        handle_error(EmptyDatasetError())
        assert len(received) == 1
