#!/usr/bin/env python3
"""
Shared fixtures for the Incident Timeline test suite
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session")
def qt_app():
    """QCoreApplication for tests that need an event loop or QSettings"""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv[:1])
    yield app


SAMPLE_FEED = (
    'Timestamp,Latitude,Longitude,Street,City,State,ZIP,Count\n'
    '3/1/2024 8:05:00,38.2544,-104.6091,"100 Main St",Pueblo,CO,81003,3\n'
    '3/1/2024 7:30:00,38.2600,-104.6100,"200 Elm, Apt ""B""",Pueblo,CO,81004,1\n'
    '3/2/2024 12:00:00,38.2700,-104.6200,300 Oak Ave,Pueblo,CO,81005,2\n'
    'not a time,38.2800,-104.6300,400 Pine St,Pueblo,CO,81006,\n'
    '3/5/2024 9:00:00,north,-104.6400,500 Bad Row,Pueblo,CO,81007,1\n'
)


@pytest.fixture
def sample_feed() -> str:
    """Five data rows: three dated, one with an unknown time, one with bad coordinates"""
    return SAMPLE_FEED
