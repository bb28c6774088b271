"""
Exceptions raised at the edges of the statistics package.
"""
from __future__ import annotations


class EventFormatError(ValueError):
    """
    Raised when a captured event record cannot be turned into a match event.
    """

    def __init__(self, message: str, *, index: int | None = None):
        if index is not None:
            message = f"{message} (record {index})"
        super().__init__(message)
        self.index = index


class ReportConfigError(ValueError):
    """
    Raised when a report configuration is missing required values.
    """
