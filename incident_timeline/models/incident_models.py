#!/usr/bin/env python3
"""
Incident Timeline Data Models

Defines the data structures shared by ingestion, filtering and playback.
Records, windows and filter specifications are frozen dataclasses: a record
set is built once per ingestion and replaced wholesale on refresh.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Dict, Optional, Any, Tuple, Union
from enum import Enum


DateInput = Union[date, datetime, str, None]


class PeriodKind(Enum):
    """Calendar-aligned period buckets"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class RelativeKind(Enum):
    """Units for rolling lookback windows ending today"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class PlaybackState(Enum):
    """Playback controller states"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class TimestampStatus(Enum):
    """Outcome of timestamp normalization"""
    PARSED = "parsed"
    EMPTY = "empty"
    UNPARSEABLE = "unparseable"


class StatusLevel(Enum):
    """Filter status display levels"""
    HIDDEN = "hidden"
    ACTIVE = "active"
    NO_RESULTS = "no-results"


@dataclass(frozen=True)
class IncidentRecord:
    """
    One incident observation

    A record is immutable once built. ``timestamp`` is None when the source
    time is empty or unparseable; such records only appear in the unfiltered
    view. ``sequence_index`` is the 1-based data row position in the source
    and is used for diagnostics only, never for ordering.
    """
    timestamp: Optional[datetime]
    latitude: float
    longitude: float
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    occurrence_count: int = 1
    sequence_index: int = 0
    raw_timestamp: str = ""

    @property
    def has_known_time(self) -> bool:
        return self.timestamp is not None

    @property
    def local_timestamp(self) -> Optional[datetime]:
        """Wall-clock time used for comparisons and ordering

        Naive timestamps are already local to the source. Timestamps carrying
        an offset are converted to the local zone and made naive so they can
        be compared with calendar windows.
        """
        if self.timestamp is None:
            return None
        if self.timestamp.tzinfo is None:
            return self.timestamp
        return self.timestamp.astimezone().replace(tzinfo=None)

    @property
    def display_name(self) -> str:
        """Address parts joined for marker titles"""
        parts = [self.street, self.city, self.state, self.postal_code]
        return ", ".join(part for part in parts if part)

    @property
    def formatted_timestamp(self) -> str:
        if self.local_timestamp is None:
            return self.raw_timestamp
        return self.local_timestamp.strftime('%Y-%m-%d %H:%M:%S')

    @property
    def popup_text(self) -> str:
        """Multi-line label shown when a marker is selected"""
        lines = []
        if self.street:
            lines.append(self.street)
        locality = ", ".join(part for part in (self.city, self.state) if part)
        if self.postal_code:
            locality = f"{locality} {self.postal_code}".strip()
        if locality:
            lines.append(locality)
        lines.append(f"Count: {self.occurrence_count}")
        if self.formatted_timestamp:
            lines.append(f"Timestamp: {self.formatted_timestamp}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'lat': self.latitude,
            'lng': self.longitude,
            'street': self.street,
            'city': self.city,
            'state': self.state,
            'zip': self.postal_code,
            'count': self.occurrence_count,
            'row': self.sequence_index,
            'name': self.display_name,
            'popup': self.popup_text
        }


@dataclass(frozen=True)
class PeriodWindow:
    """Half-open time window: start <= t < end"""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


# Filter specifications. Exactly one is active at a time; switching variant
# discards whatever the previous variant carried.

@dataclass(frozen=True)
class FilterSpec:
    """Base of the filter specification variants"""

    @property
    def name(self) -> str:
        return "all"

    @property
    def requires_known_time(self) -> bool:
        return True


@dataclass(frozen=True)
class AllRecords(FilterSpec):
    """No filtering; records with unknown time are kept"""

    @property
    def requires_known_time(self) -> bool:
        return False


@dataclass(frozen=True)
class RelativeWindow(FilterSpec):
    """Rolling lookback ``[today - count units, today]``, inclusive on both ends"""
    kind: RelativeKind = RelativeKind.WEEK
    count: int = 1

    @property
    def name(self) -> str:
        if self.count == 1:
            return f"last-{self.kind.value}"
        return f"last-{self.count}-{self.kind.value}s"


@dataclass(frozen=True)
class CustomDate(FilterSpec):
    """A single calendar day"""
    day: DateInput = None

    @property
    def name(self) -> str:
        return "custom-date"


@dataclass(frozen=True)
class ExplicitRange(FilterSpec):
    """Calendar days from start through end (end inclusive)"""
    start: DateInput = None
    end: DateInput = None

    @property
    def name(self) -> str:
        return "date-range"


@dataclass(frozen=True)
class PeriodFilter(FilterSpec):
    """Calendar period containing the anchor"""
    kind: PeriodKind = PeriodKind.DAY
    anchor: DateInput = None

    @property
    def name(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Observable playback state handed to the renderer"""
    state: PlaybackState
    cursor: int
    total: int
    interval_ms: float
    visible: Tuple[IncidentRecord, ...] = ()
    advanced: bool = False

    @property
    def current(self) -> Optional[IncidentRecord]:
        """Most recently revealed record"""
        return self.visible[-1] if self.visible else None

    @property
    def running(self) -> bool:
        return self.state == PlaybackState.RUNNING

    @property
    def finished(self) -> bool:
        return self.total > 0 and self.cursor >= self.total and not self.running

    def status_text(self, time_format: str = '%I:%M:%S %p') -> str:
        """Progress line, e.g. ``Playing: 3/10 - 08:15:00 AM``"""
        if self.current is None:
            return "Animation stopped." if self.state == PlaybackState.IDLE else "Ready."
        moment = self.current.local_timestamp
        time_text = moment.strftime(time_format) if moment else "Unknown"
        label = "Playing" if self.running else "Paused" if self.state == PlaybackState.PAUSED else "Finished"
        return f"{label}: {self.cursor}/{self.total} - {time_text}"


@dataclass
class TimelineSettings:
    """Configuration for ingestion and playback"""

    # Ingestion settings
    header_label: str = "timestamp"
    delimiter: str = ","

    # Playback settings
    playback_interval_ms: int = 1000
    playback_speed: float = 1.0
    min_interval_ms: int = 10

    # Display settings
    timeline_time_format: str = '%I:%M:%S %p'
    export_filename: str = "data-points.csv"

    @classmethod
    def from_settings_manager(cls, manager) -> 'TimelineSettings':
        """Build settings from the persisted SettingsManager values"""
        return cls(
            header_label=manager.header_label,
            delimiter=manager.delimiter,
            playback_interval_ms=manager.playback_interval_ms,
            playback_speed=manager.playback_speed
        )

    @property
    def effective_interval_ms(self) -> float:
        """Milliseconds between revealed records at the configured speed"""
        speed = self.playback_speed if self.playback_speed > 0 else 1.0
        return max(self.playback_interval_ms / speed, self.min_interval_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'header_label': self.header_label,
            'delimiter': self.delimiter,
            'playback_interval_ms': self.playback_interval_ms,
            'playback_speed': self.playback_speed
        }


@dataclass
class IngestionResult:
    """
    Result of one ingestion cycle

    Used with Result[T] pattern for error handling.
    """
    records: Tuple[IncidentRecord, ...] = ()
    total_rows: int = 0
    header_skipped: bool = False

    # (sequence_index, reason) for rows dropped at ingestion
    invalid_rows: List[Tuple[int, str]] = field(default_factory=list)

    # Rows kept with unknown time
    unparseable_timestamps: List[int] = field(default_factory=list)
    empty_timestamps: List[int] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return len(self.records)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid_rows)

    def records_by_row(self, sequence_index: int) -> Optional[IncidentRecord]:
        """Record built from the given 1-based source row, if it was kept"""
        for record in self.records:
            if record.sequence_index == sequence_index:
                return record
        return None

    def get_summary(self) -> str:
        """Get human-readable summary"""
        summary = f"Loaded {self.valid_count} valid records"
        if self.invalid_rows:
            summary += f" ({self.invalid_count} invalid rows skipped)"
        unknown = len(self.unparseable_timestamps) + len(self.empty_timestamps)
        if unknown:
            summary += f", {unknown} without a usable timestamp"
        return summary


@dataclass(frozen=True)
class TimelineEntry:
    """One line of the chronological listing"""
    time_text: str
    location: str
    coordinates_text: str
    record: IncidentRecord


@dataclass(frozen=True)
class FilterStatus:
    """Status line describing the active filter"""
    level: StatusLevel
    message: str = ""
