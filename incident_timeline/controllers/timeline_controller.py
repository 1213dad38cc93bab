#!/usr/bin/env python3
"""
Timeline Controller - caller-owned session state

Holds the current record set, the active filter, the period anchor and the
playback session. Every change of record set or filter rebuilds the ordered
subset and reloads playback, so views computed from the previous subset are
never extended.
"""

from datetime import datetime
from typing import Callable, List, Optional, Tuple, Union

from controllers.base_controller import BaseController
from core.result_types import Result
from core.exceptions import InvalidWindowError
from core.services.interfaces import IIncidentTimelineService

from ..models.incident_models import (
    AllRecords, DateInput, FilterSpec, FilterStatus, IncidentRecord,
    IngestionResult, PeriodFilter, PeriodKind, PeriodWindow, PlaybackSnapshot,
    TimelineEntry, TimelineSettings
)
from ..services.filter_engine import filter_spec_from_name, parse_filter_date
from ..services.period_calculator import (
    compute_window, describe_window, next_anchor, previous_anchor, truncate_to_midnight
)
from ..services.playback_controller import PlaybackController


class TimelineController(BaseController):
    """
    Controller for one incident timeline session

    Orchestrates ingestion, filter selection, period navigation and
    playback. The timer that drives automatic playback lives outside (see
    ``PlaybackTimer``) and only calls ``step()``.
    """

    def __init__(
        self,
        settings: Optional[TimelineSettings] = None,
        service: Optional[IIncidentTimelineService] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        super().__init__("TimelineController")

        self.settings = settings or TimelineSettings()
        self._timeline_service = service
        self._clock = clock

        # Session state
        self._records: Tuple[IncidentRecord, ...] = ()
        self._last_ingestion: Optional[IngestionResult] = None
        self._filter_spec: FilterSpec = AllRecords()
        self._filtered: Tuple[IncidentRecord, ...] = ()
        self._period_kind = PeriodKind.DAY
        self._anchor = truncate_to_midnight(clock())

        self.playback = PlaybackController(
            interval_ms=self.settings.playback_interval_ms,
            min_interval_ms=self.settings.min_interval_ms
        )
        if self.settings.playback_speed > 0:
            self.playback.set_speed(self.settings.playback_speed)

    @property
    def timeline_service(self) -> IIncidentTimelineService:
        """Lazy load incident timeline service"""
        if self._timeline_service is None:
            self._timeline_service = self._get_service(IIncidentTimelineService)
        return self._timeline_service

    # ------------------------------------------------------------------
    # Record set
    # ------------------------------------------------------------------

    @property
    def records(self) -> Tuple[IncidentRecord, ...]:
        return self._records

    @property
    def last_ingestion(self) -> Optional[IngestionResult]:
        return self._last_ingestion

    def load_text(self, payload: Union[str, bytes]) -> Result[IngestionResult]:
        """
        Replace the record set from delimited text

        The active filter is kept and re-applied; playback is reset.
        """
        self._log_operation("load_text", f"{len(payload)} characters")
        return self._replace_records(self.timeline_service.ingest_text(payload, self.settings))

    def load_gviz(self, payload: Union[str, bytes]) -> Result[IngestionResult]:
        """Replace the record set from a gviz JSON response"""
        self._log_operation("load_gviz", f"{len(payload)} characters")
        return self._replace_records(self.timeline_service.ingest_gviz(payload))

    def _replace_records(self, result: Result[IngestionResult]) -> Result[IngestionResult]:
        if not result.success:
            # A failed refresh keeps the previous record set
            self._log_operation("load", result.error.message, level="warning")
            return result

        self._last_ingestion = result.value
        self._records = result.value.records
        self._rebuild_subset()
        return result

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    @property
    def filter_spec(self) -> FilterSpec:
        return self._filter_spec

    @property
    def filtered_records(self) -> Tuple[IncidentRecord, ...]:
        """Active subset in chronological order"""
        return self._filtered

    def set_filter(self, spec: FilterSpec) -> Result[PlaybackSnapshot]:
        """Activate a filter specification and reload playback"""
        if isinstance(spec, PeriodFilter):
            self._period_kind = spec.kind
            if spec.anchor is None:
                self._anchor = truncate_to_midnight(self._clock())
            else:
                try:
                    self._anchor = parse_filter_date(spec.anchor)
                except InvalidWindowError as e:
                    self._log_operation("set_filter", f"anchor kept: {e.message}", level="warning")
            # The active window always follows the session anchor
            spec = PeriodFilter(self._period_kind, self._anchor)

        self._filter_spec = spec
        self._log_operation("set_filter", spec.name, level="debug")
        return self._rebuild_subset()

    def select_filter(
        self,
        name: str,
        custom_date: DateInput = None,
        start_date: DateInput = None,
        end_date: DateInput = None
    ) -> Result[PlaybackSnapshot]:
        """Activate a filter by selector name; period names use the current anchor"""
        spec = filter_spec_from_name(
            name,
            custom_date=custom_date,
            start_date=start_date,
            end_date=end_date,
            anchor=self._anchor
        )
        return self.set_filter(spec)

    def _rebuild_subset(self) -> Result[PlaybackSnapshot]:
        result = self.timeline_service.build_playback_subset(self._records, self._filter_spec, self._clock())
        if not result.success:
            self._log_operation("_rebuild_subset", result.error.message, level="warning")
            self._filtered = ()
            self.playback.load(())
            return Result.error(result.error)

        self._filtered = tuple(result.value)
        return Result.success(self.playback.load(self._filtered))

    def filter_status(self) -> FilterStatus:
        return self.timeline_service.describe_filter_status(
            len(self._filtered), len(self._records), self._filter_spec
        )

    # ------------------------------------------------------------------
    # Period navigation
    # ------------------------------------------------------------------

    @property
    def period_kind(self) -> PeriodKind:
        return self._period_kind

    @property
    def anchor(self) -> datetime:
        return self._anchor

    def set_period(self, kind: Union[PeriodKind, str], anchor: DateInput = None) -> Result[PlaybackSnapshot]:
        """Show the period of the given kind containing ``anchor`` (default: current anchor)"""
        kind = kind if isinstance(kind, PeriodKind) else PeriodKind(kind)
        return self.set_filter(PeriodFilter(kind, anchor if anchor is not None else self._anchor))

    def navigate_period(self, forward: bool = True) -> Result[PlaybackSnapshot]:
        """
        Move the anchor one period forward or back

        The period filter is (re)activated for the new anchor. Month, quarter
        and year steps use calendar rollover and are not always reversible.
        """
        step = next_anchor if forward else previous_anchor
        self._anchor = step(self._period_kind, self._anchor)
        self._log_operation(
            "navigate_period",
            f"{'next' if forward else 'previous'} {self._period_kind.value} -> {self._anchor.date()}",
            level="debug"
        )
        return self.set_filter(PeriodFilter(self._period_kind, self._anchor))

    def current_period(self) -> PeriodWindow:
        return compute_window(self._period_kind, self._anchor)

    def current_period_label(self) -> str:
        return describe_window(self._period_kind, self.current_period())

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def current_view(self) -> Tuple[IncidentRecord, ...]:
        """
        Records the map should show

        The visible prefix while playback has revealed anything, otherwise
        the whole filtered subset.
        """
        if self.playback.cursor > 0:
            return self.playback.visible_prefix
        return self._filtered

    def timeline(self) -> List[TimelineEntry]:
        return self.timeline_service.build_timeline(self._filtered, self.settings)

    def export(self) -> Result[str]:
        """CSV text of the filtered subset"""
        return self.timeline_service.export_csv(self._filtered)

    # ------------------------------------------------------------------
    # Playback pass-through
    # ------------------------------------------------------------------

    def start(self) -> Result[PlaybackSnapshot]:
        result = self.playback.start()
        if not result.success:
            self._handle_error(result.error, {'method': 'start'})
        return result

    def pause(self) -> Result[PlaybackSnapshot]:
        return self.playback.pause()

    def step(self) -> PlaybackSnapshot:
        return self.playback.step()

    def reset(self) -> PlaybackSnapshot:
        return self.playback.reset()

    def seek(self, position: int) -> Result[PlaybackSnapshot]:
        return self.playback.seek(position)

    def set_rate(self, interval_ms: float) -> Result[PlaybackSnapshot]:
        result = self.playback.set_rate(interval_ms)
        if result.success:
            self.settings.playback_interval_ms = int(interval_ms)
        return result

    def set_speed(self, multiplier: float) -> Result[PlaybackSnapshot]:
        result = self.playback.set_speed(multiplier)
        if result.success:
            self.settings.playback_speed = float(multiplier)
        return result

    def snapshot(self) -> PlaybackSnapshot:
        return self.playback.snapshot()

    def dispose(self):
        """End the session and release the record set"""
        if self.is_disposed:
            return
        self.playback.dispose()
        self._records = ()
        self._filtered = ()
        self._last_ingestion = None
        self.cleanup()

