"""Errors raised while loading the waste dataset.

Every fatal condition of a dashboard load is a ``WasteDataError``; its
``message`` is safe to show to the end user as-is.
"""

from __future__ import annotations

from typing import Optional


class WasteDataError(Exception):
    """Base exception for fatal dashboard load failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FetchFailure(WasteDataError):
    """Raised when the CSV resource cannot be retrieved."""

    def __init__(self, source: str, *, status: Optional[int] = None, reason: Optional[str] = None) -> None:
        name = source.rstrip("/").rsplit("/", 1)[-1] or source
        if status is not None:
            message = f"HTTP error! Status: {status}. Unable to fetch {name}."
        else:
            message = f"Failed to fetch CSV data. Error: {reason or 'unknown error'}"
        super().__init__(message)
        self.source = source
        self.status = status
        self.reason = reason


class ParseFailure(WasteDataError):
    """Raised when the CSV text cannot be tokenized into rows."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to parse CSV data: {reason}")
        self.reason = reason


class EmptyResult(WasteDataError):
    """Raised when normalization leaves no usable rows."""

    def __init__(self, source: str) -> None:
        super().__init__("No processable data in CSV or data format incorrect.")
        self.source = source
