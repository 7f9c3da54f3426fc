"""
Controller exceptions.

Only construction-time problems raise. Everything that can go wrong while
ticking degrades to a skipped tick (see enums.skip_reason) instead.
"""

from __future__ import annotations

from typing import Any


class DriftControllerError(Exception):
    """Base exception for all drift controller errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class SyncConfigError(DriftControllerError, ValueError):
    """Session configuration is out of range or malformed."""
