#!/usr/bin/env python3
"""
Playback Controller - chronological reveal of an ordered record subset

State machine::

    IDLE --start--> RUNNING --pause--> PAUSED --start--> RUNNING
    RUNNING --step past the end--> IDLE
    any --reset--> IDLE

``step()`` is the unit of work. The controller never schedules anything
itself; the caller's timer asks ``next_step_due()`` when to call ``step()``
again and reads the interval at that moment, so a rate change applies from
the next scheduled step.
"""

import logging
from typing import Optional, Sequence, Tuple

from core.exceptions import EmptyDatasetError, PlaybackStateError, ValidationError
from core.result_types import Result

from ..models.incident_models import IncidentRecord, PlaybackSnapshot, PlaybackState

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 1000.0
MIN_INTERVAL_MS = 10.0


class PlaybackController:
    """
    Owned playback session over one ordered subset

    The subset is replaced through ``load()``, which always resets the
    cursor; views computed from an older subset must be discarded by the
    caller.
    """

    def __init__(
        self,
        ordered_subset: Sequence[IncidentRecord] = (),
        interval_ms: float = DEFAULT_INTERVAL_MS,
        min_interval_ms: float = MIN_INTERVAL_MS
    ):
        self._min_interval_ms = float(min_interval_ms)
        self._base_interval_ms = max(float(interval_ms), self._min_interval_ms)
        self._speed = 1.0
        self._subset: Tuple[IncidentRecord, ...] = tuple(ordered_subset)
        self._cursor = 0
        self._running = False
        self._disposed = False

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def total(self) -> int:
        return len(self._subset)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_ms(self) -> float:
        """Milliseconds between automatic steps at the current speed"""
        return max(self._base_interval_ms / self._speed, self._min_interval_ms)

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> PlaybackState:
        if self._running:
            return PlaybackState.RUNNING
        if 0 < self._cursor < len(self._subset):
            return PlaybackState.PAUSED
        return PlaybackState.IDLE

    @property
    def visible_prefix(self) -> Tuple[IncidentRecord, ...]:
        return self._subset[:self._cursor]

    def snapshot(self, advanced: bool = False) -> PlaybackSnapshot:
        return PlaybackSnapshot(
            state=self.state,
            cursor=self._cursor,
            total=len(self._subset),
            interval_ms=self.interval_ms,
            visible=self.visible_prefix,
            advanced=advanced
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def load(self, ordered_subset: Sequence[IncidentRecord]) -> PlaybackSnapshot:
        """Replace the subset (new filter or data refresh) and reset"""
        self._subset = tuple(ordered_subset)
        self._disposed = False
        logger.debug(f"Playback loaded {len(self._subset)} records")
        return self.reset()

    def start(self) -> Result[PlaybackSnapshot]:
        """
        Start or resume playback

        Returns:
            Result with the snapshot, or EmptyDatasetError when there is
            nothing to play (state unchanged)
        """
        if not self._subset:
            return Result.error(EmptyDatasetError())

        if self._cursor >= len(self._subset):
            # Replaying a finished session starts over
            self._cursor = 0

        self._running = True
        advanced = False
        if self._cursor == 0:
            self._cursor = 1
            advanced = True

        logger.debug(f"Playback started at {self._cursor}/{len(self._subset)}")
        return Result.success(self.snapshot(advanced=advanced))

    def step(self) -> PlaybackSnapshot:
        """
        Reveal the next record

        At the end of the subset playback stops and further calls are no-ops
        returning the terminal snapshot.
        """
        if self._cursor < len(self._subset):
            self._cursor += 1
            return self.snapshot(advanced=True)

        if self._running:
            self._running = False
            logger.debug("Playback reached the end of the subset")
        return self.snapshot()

    def pause(self) -> Result[PlaybackSnapshot]:
        """Pause a running playback, keeping the cursor"""
        if not self._running:
            return Result.error(
                PlaybackStateError("Pause requested while not running", state=self.state.value)
            )
        self._running = False
        return Result.success(self.snapshot())

    def reset(self) -> PlaybackSnapshot:
        """Back to IDLE with nothing revealed"""
        self._cursor = 0
        self._running = False
        return self.snapshot()

    def seek(self, position: int) -> Result[PlaybackSnapshot]:
        """
        Move the cursor to reveal exactly ``position`` records

        Positions outside ``[0, total]`` are clamped. The running flag is
        kept, so a running session continues from the new position.
        """
        if isinstance(position, bool) or not isinstance(position, int):
            return Result.error(
                ValidationError({'position': f"Position must be an integer: {position!r}"})
            )
        self._cursor = min(max(position, 0), len(self._subset))
        return Result.success(self.snapshot(advanced=False))

    def set_rate(self, interval_ms: float) -> Result[PlaybackSnapshot]:
        """
        Change the base step interval

        Takes effect from the next scheduled step; an in-flight wait is not
        rescheduled.
        """
        try:
            interval = float(interval_ms)
        except (TypeError, ValueError):
            interval = 0.0
        if not interval > 0:
            return Result.error(
                ValidationError({'interval_ms': f"Interval must be a positive number: {interval_ms!r}"})
            )
        self._base_interval_ms = max(interval, self._min_interval_ms)
        return Result.success(self.snapshot())

    def set_speed(self, multiplier: float) -> Result[PlaybackSnapshot]:
        """Playback speed multiplier; the step interval becomes base / multiplier"""
        try:
            speed = float(multiplier)
        except (TypeError, ValueError):
            speed = 0.0
        if not speed > 0:
            return Result.error(
                ValidationError({'speed': f"Speed must be a positive number: {multiplier!r}"})
            )
        self._speed = speed
        return Result.success(self.snapshot())

    def next_step_due(self, last_step_at: float) -> Optional[float]:
        """
        Monotonic time (seconds) at which the next automatic step may run

        Args:
            last_step_at: Monotonic time of the previous step

        Returns:
            None when not running
        """
        if not self._running:
            return None
        return last_step_at + self.interval_ms / 1000.0

    def dispose(self):
        """End the session and release the subset"""
        self._subset = ()
        self._cursor = 0
        self._running = False
        self._disposed = True
