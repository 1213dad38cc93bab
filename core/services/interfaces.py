#!/usr/bin/env python3
"""
Service interfaces for dependency injection and testing
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence, Union

from ..result_types import Result


class IService(ABC):
    """Base interface for all services"""
    pass


class IIncidentTimelineService(IService):
    """Interface for incident ingestion, filtering and timeline building"""

    @abstractmethod
    def ingest_text(self, payload: Union[str, bytes], settings=None) -> Result:
        """
        Parse delimited text into a record set

        Args:
            payload: Fetched source body (text or undecoded bytes)
            settings: TimelineSettings with header label and delimiter

        Returns:
            Result containing IngestionResult or error
        """
        pass

    @abstractmethod
    def ingest_gviz(self, payload: Union[str, bytes]) -> Result:
        """
        Parse a Google Visualization JSON response into a record set

        Returns:
            Result containing IngestionResult or error
        """
        pass

    @abstractmethod
    def filter_records(self, records: Sequence, spec, now: Optional[datetime] = None) -> Result[List]:
        """
        Select the records matching a filter specification

        Returns:
            Result containing the matching records in source order
        """
        pass

    @abstractmethod
    def build_playback_subset(self, records: Sequence, spec, now: Optional[datetime] = None) -> Result[List]:
        """Filtered records in chronological order"""
        pass

    @abstractmethod
    def build_timeline(self, records: Sequence, settings=None) -> List:
        """Chronological listing entries for the given records"""
        pass

    @abstractmethod
    def describe_filter_status(self, filtered_count: int, total_count: int, spec):
        """Status line for the active filter"""
        pass

    @abstractmethod
    def export_csv(self, records: Sequence) -> Result[str]:
        """CSV text for the given records"""
        pass
