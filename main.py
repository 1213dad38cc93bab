#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Incident Timeline - Application Entry Point

Loads an incident feed from a local file, applies a date filter and plays
the filtered records back in chronological order, logging each step.
"""

import argparse
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay geotagged incident records in time order")
    parser.add_argument('source', nargs='?', help="Delimited text file or saved gviz JSON response")
    parser.add_argument('--gviz', action='store_true', help="Source is a Google Visualization JSON response")
    parser.add_argument('--filter', default='all',
                        help="all, last-day, last-week, last-month, last-year, custom-date, "
                             "date-range, day, week, month, quarter or year")
    parser.add_argument('--date', help="Day for custom-date, or anchor for period filters (YYYY-MM-DD)")
    parser.add_argument('--start', help="First day for date-range (YYYY-MM-DD)")
    parser.add_argument('--end', help="Last day for date-range (YYYY-MM-DD)")
    parser.add_argument('--speed', type=float, help="Playback speed multiplier")
    parser.add_argument('--export', type=Path, help="Write the filtered records to this CSV file")
    parser.add_argument('--no-play', action='store_true', help="List the timeline without playback")
    parser.add_argument('--debug', action='store_true', help="Verbose console logging")
    return parser


def main(argv=None) -> int:
    """Application entry point"""
    args = build_parser().parse_args(argv)

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    app.setApplicationName("Incident Timeline")
    app.setOrganizationName("IncidentTimeline")

    from core.logger import logger
    from core.settings_manager import settings
    from core.services import configure_services
    from incident_timeline.controllers.timeline_controller import TimelineController
    from incident_timeline.models.incident_models import TimelineSettings
    from incident_timeline.workers.playback_timer import PlaybackTimer

    logger.enable_debug(args.debug or settings.debug_logging)
    logger.cleanup_old_logs()
    configure_services()

    source = Path(args.source) if args.source else settings.last_input_file
    if source is None:
        logger.error("No source file given and none remembered from a previous run")
        return 2

    try:
        payload = source.read_bytes()
    except OSError as e:
        logger.error(f"Cannot read {source}: {e}")
        return 1
    settings.set_last_input_file(source)

    if args.speed is not None:
        try:
            settings.playback_speed = args.speed
        except ValueError as e:
            logger.warning(str(e))

    controller = TimelineController(TimelineSettings.from_settings_manager(settings))
    loaded = controller.load_gviz(payload) if args.gviz else controller.load_text(payload)
    if not loaded.success:
        logger.error(loaded.error.user_message)
        return 1
    logger.info(loaded.value.get_summary())
    for warning in loaded.warnings:
        logger.warning(warning)

    if args.filter in ('day', 'week', 'month', 'quarter', 'year'):
        controller.set_period(args.filter, args.date)
        logger.info(f"Period: {controller.current_period_label()}")
    else:
        controller.select_filter(args.filter, custom_date=args.date, start_date=args.start, end_date=args.end)

    status = controller.filter_status()
    if status.message:
        logger.info(status.message)

    for entry in controller.timeline():
        logger.info(f"{entry.time_text}  {entry.location}  ({entry.coordinates_text})")

    if args.export:
        exported = controller.export()
        try:
            args.export.write_text(exported.value, encoding='utf-8')
            logger.info(f"Exported {exported.metadata.get('record_count', 0)} records to {args.export}")
        except OSError as e:
            logger.error(f"Cannot write {args.export}: {e}")

    if args.no_play:
        controller.dispose()
        return 0

    timer = PlaybackTimer(controller.playback)
    time_format = controller.settings.timeline_time_format
    timer.snapshot_changed.connect(lambda snapshot: logger.info(snapshot.status_text(time_format)))
    timer.playback_finished.connect(app.quit)

    started = timer.play()
    if not started.success:
        logger.warning(started.error.user_message)
        controller.dispose()
        return 0

    exit_code = app.exec()
    controller.dispose()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
