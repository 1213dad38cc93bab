#!/usr/bin/env python3
"""
Tests for the Qt playback timer
"""
from datetime import datetime

import pytest
from PySide6.QtCore import QEventLoop, QTimer

from incident_timeline.models.incident_models import IncidentRecord, PlaybackState
from incident_timeline.services.playback_controller import PlaybackController
from incident_timeline.workers.playback_timer import PlaybackTimer


def make_subset(size):
    return [
        IncidentRecord(timestamp=datetime(2024, 3, 1, 8, i), latitude=38.0, longitude=-104.0, sequence_index=i + 1)
        for i in range(size)
    ]


class TestPlaybackTimer:
    """Test suite for PlaybackTimer"""

    @pytest.fixture
    def timer(self, qt_app):
        controller = PlaybackController(make_subset(3), interval_ms=10)
        timer = PlaybackTimer(controller)
        snapshots = []
        timer.snapshot_changed.connect(snapshots.append)
        timer.snapshots = snapshots
        yield timer
        timer.stop()

    def test_play_reveals_first_and_schedules(self, timer):
        result = timer.play()
        assert result.success
        assert timer.is_active
        assert timer.snapshots[-1].cursor == 1

    def test_timeout_steps_once(self, timer):
        timer.play()
        timer._on_timeout()
        assert timer.controller.cursor == 2
        assert timer.snapshots[-1].advanced

    def test_timeout_when_not_running_does_nothing(self, timer):
        timer._on_timeout()
        assert timer.controller.cursor == 0
        assert timer.snapshots == []

    def test_finish_emits_signal(self, timer):
        finished = []
        timer.playback_finished.connect(lambda: finished.append(True))
        timer.play()
        for _ in range(3):
            timer._on_timeout()
        assert finished == [True]
        assert timer.controller.state == PlaybackState.IDLE
        assert not timer.is_active

    def test_pause_cancels_schedule(self, timer):
        timer.play()
        result = timer.pause()
        assert result.success
        assert not timer.is_active
        assert timer.controller.state == PlaybackState.PAUSED

    def test_stop_resets(self, timer):
        timer.play()
        snapshot = timer.stop()
        assert snapshot.cursor == 0
        assert not timer.is_active

    def test_play_empty_subset(self, qt_app):
        timer = PlaybackTimer(PlaybackController())
        result = timer.play()
        assert not result.success
        assert not timer.is_active

    def test_runs_to_completion_in_event_loop(self, timer):
        loop = QEventLoop()
        timer.playback_finished.connect(loop.quit)
        QTimer.singleShot(5000, loop.quit)

        timer.play()
        loop.exec()

        assert timer.controller.cursor == 3
        assert timer.controller.state == PlaybackState.IDLE
        assert [snapshot.cursor for snapshot in timer.snapshots] == [1, 2, 3, 3]
