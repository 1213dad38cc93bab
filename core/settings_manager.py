#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Centralized settings management backed by QSettings
"""

from typing import Any, Optional
from pathlib import Path
from PySide6.QtCore import QSettings


class SettingsManager:
    """Centralized settings management"""

    # Canonical keys for all settings
    KEYS = {
        # Ingestion settings
        'HEADER_LABEL': 'ingest.header_label',
        'DELIMITER': 'ingest.delimiter',

        # Playback settings
        'PLAYBACK_INTERVAL_MS': 'playback.interval_ms',
        'PLAYBACK_SPEED': 'playback.speed',

        # Debug settings
        'DEBUG_LOGGING': 'debug.enable_logging',

        # Path settings
        'LAST_INPUT_FILE': 'paths.last_input_file'
    }

    _instance = None

    def __new__(cls, *args, **kwargs):
        """Singleton pattern for settings manager"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, settings: Optional[QSettings] = None):
        """Initialize settings manager

        Args:
            settings: Optional QSettings store, used by tests to point at an ini file
        """
        if self._initialized:
            return

        self._initialized = True
        self._settings = settings or QSettings('IncidentTimeline', 'Settings')

        self._set_defaults()

    @classmethod
    def reset_instance(cls):
        """Forget the singleton so the next construction picks a new store"""
        cls._instance = None

    def _set_defaults(self):
        """Set default values for missing keys"""
        defaults = {
            self.KEYS['HEADER_LABEL']: 'timestamp',
            self.KEYS['DELIMITER']: ',',
            self.KEYS['PLAYBACK_INTERVAL_MS']: 1000,
            self.KEYS['PLAYBACK_SPEED']: 1.0,
            self.KEYS['DEBUG_LOGGING']: False,
        }

        for key, default in defaults.items():
            if not self._settings.contains(key):
                self._settings.setValue(key, default)

    def get(self, key: str, default: Any = None) -> Any:
        """Get setting value

        Args:
            key: Either a KEYS constant or direct key string
            default: Default value if key not found
        """
        canonical_key = self.KEYS.get(key, key)
        return self._settings.value(canonical_key, default)

    def set(self, key: str, value: Any):
        """Set setting value"""
        canonical_key = self.KEYS.get(key, key)
        self._settings.setValue(canonical_key, value)

    def sync(self):
        """Force settings to disk"""
        self._settings.sync()

    def contains(self, key: str) -> bool:
        canonical_key = self.KEYS.get(key, key)
        return self._settings.contains(canonical_key)

    @property
    def header_label(self) -> str:
        """Label that marks the first row as a header row"""
        value = str(self.get('HEADER_LABEL', 'timestamp')).strip()
        return value or 'timestamp'

    @property
    def delimiter(self) -> str:
        """Field delimiter (single character)"""
        value = str(self.get('DELIMITER', ','))
        if value.lower() in ('\\t', 'tab'):
            return '\t'
        if len(value) != 1:
            return ','  # Safe fallback
        return value

    @property
    def playback_interval_ms(self) -> int:
        """Base milliseconds between revealed records (clamped to 10ms - 60s)"""
        try:
            interval = int(float(self.get('PLAYBACK_INTERVAL_MS', 1000)))
        except (TypeError, ValueError):
            return 1000
        return min(max(interval, 10), 60000)

    @property
    def playback_speed(self) -> float:
        """Playback speed multiplier"""
        try:
            speed = float(self.get('PLAYBACK_SPEED', 1.0))
        except (TypeError, ValueError):
            return 1.0
        if speed <= 0:
            return 1.0
        return speed

    @playback_speed.setter
    def playback_speed(self, value: float):
        speed = float(value)
        if speed <= 0:
            raise ValueError(f"Playback speed must be positive: {value}")
        self.set('PLAYBACK_SPEED', speed)

    @property
    def debug_logging(self) -> bool:
        """Whether debug logging is enabled"""
        value = self.get('DEBUG_LOGGING', False)
        # QSettings ini backends return booleans as strings
        if isinstance(value, str):
            return value.lower() in ('true', '1', 'yes')
        return bool(value)

    @property
    def last_input_file(self) -> Optional[Path]:
        """Last loaded incident feed"""
        path_str = self.get('LAST_INPUT_FILE', None)
        return Path(path_str) if path_str else None

    def set_last_input_file(self, path: Path):
        self.set('LAST_INPUT_FILE', str(path))

    def reset_all_settings(self):
        """Clear all stored settings and restore defaults"""
        self._settings.clear()
        self._settings.sync()
        self._set_defaults()


# Global settings instance
settings = SettingsManager()
