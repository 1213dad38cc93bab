#!/usr/bin/env python3
"""
Playback timer - drives a PlaybackController from the Qt event loop

A single-shot QTimer is re-armed after every step with the controller's
interval at that moment, so a slow event loop delays steps but never fires
two of them for one timeout, and rate changes apply from the next step.
"""

import logging

from PySide6.QtCore import QObject, QTimer, Signal

from core.result_types import Result

from ..models.incident_models import PlaybackSnapshot
from ..services.playback_controller import PlaybackController

logger = logging.getLogger(__name__)


class PlaybackTimer(QObject):
    """
    Event-loop driver for automatic playback

    Signals:
        snapshot_changed(PlaybackSnapshot): after every command or step
        playback_finished(): the subset was exhausted and playback stopped
    """

    snapshot_changed = Signal(object)
    playback_finished = Signal()

    def __init__(self, controller: PlaybackController, parent=None):
        super().__init__(parent)
        self.setObjectName(f"{self.__class__.__name__}_{id(self)}")

        self._controller = controller
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)

    @property
    def controller(self) -> PlaybackController:
        return self._controller

    @property
    def is_active(self) -> bool:
        """True while a step is scheduled"""
        return self._timer.isActive()

    def play(self) -> Result[PlaybackSnapshot]:
        """Start or resume playback and schedule the next step"""
        result = self._controller.start()
        if not result.success:
            logger.debug(f"Playback not started: {result.error.message}")
            return result

        self.snapshot_changed.emit(result.value)
        self._schedule()
        return result

    def pause(self) -> Result[PlaybackSnapshot]:
        self._timer.stop()
        result = self._controller.pause()
        if result.success:
            self.snapshot_changed.emit(result.value)
        return result

    def stop(self) -> PlaybackSnapshot:
        """Cancel any scheduled step and reset the controller"""
        self._timer.stop()
        snapshot = self._controller.reset()
        self.snapshot_changed.emit(snapshot)
        return snapshot

    def _schedule(self):
        if self._controller.running:
            self._timer.start(max(1, int(round(self._controller.interval_ms))))

    def _on_timeout(self):
        if not self._controller.running:
            return

        snapshot = self._controller.step()
        self.snapshot_changed.emit(snapshot)

        if snapshot.running:
            self._schedule()
        else:
            self._timer.stop()
            logger.debug("Playback finished")
            self.playback_finished.emit()
