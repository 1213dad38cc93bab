#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Result objects for the Incident Timeline application

Rich result objects replace boolean returns and raised exceptions at service
and controller seams, carrying the value, the error, warnings and metadata.
"""

from typing import TypeVar, Generic, Optional, List, Dict, Any
from dataclasses import dataclass, field

from .exceptions import FSAError

# Type variable for generic result values
T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """
    Universal result object that replaces boolean returns

    Provides type-safe error handling with rich context information
    and support for warnings and metadata.
    """
    success: bool
    value: Optional[T] = None
    error: Optional[FSAError] = None
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, value: T, warnings: Optional[List[str]] = None, **metadata) -> 'Result[T]':
        """
        Create a successful result

        Args:
            value: The successful result value
            warnings: Optional list of warnings
            **metadata: Additional metadata to store

        Returns:
            Result object indicating success
        """
        return cls(
            success=True,
            value=value,
            warnings=warnings or [],
            metadata=metadata
        )

    @classmethod
    def error(cls, error: FSAError, warnings: Optional[List[str]] = None) -> 'Result[T]':
        """
        Create an error result

        Args:
            error: The error that occurred
            warnings: Optional list of warnings that occurred before the error

        Returns:
            Result object indicating failure
        """
        return cls(
            success=False,
            error=error,
            warnings=warnings or []
        )

    def unwrap(self) -> T:
        """
        Get value or raise error

        Raises:
            FSAError: If the result indicates failure
        """
        if not self.success:
            raise self.error
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get value or return default"""
        return self.value if self.success else default

    def map(self, func) -> 'Result':
        """
        Transform the value if successful

        Args:
            func: Function to apply to the value

        Returns:
            New Result with transformed value, or original error
        """
        if self.success:
            try:
                new_value = func(self.value)
                return Result.success(new_value, self.warnings, **self.metadata)
            except FSAError as e:
                return Result.error(e, self.warnings)
            except Exception as e:
                error = FSAError(f"Mapping function failed: {e}")
                return Result.error(error, self.warnings)
        else:
            return self

    def and_then(self, func) -> 'Result':
        """Chain operations that return Results"""
        if self.success:
            return func(self.value)
        else:
            return self

    def has_warnings(self) -> bool:
        """Check if result has warnings"""
        return len(self.warnings) > 0

    def add_warning(self, warning: str) -> 'Result[T]':
        """Add a warning to this result"""
        self.warnings.append(warning)
        return self
