"""
Handball match statistics package.
"""

from .config import ReportSettings
from .cache import ReportCache
from .exceptions import EventFormatError, ReportConfigError
from .events import MatchEvent, ShotContext, ZONES, event_from_dict, load_events

__all__ = [
    "ReportSettings",
    "ReportCache",
    "EventFormatError",
    "ReportConfigError",
    "MatchEvent",
    "ShotContext",
    "ZONES",
    "event_from_dict",
    "load_events",
    "StatisticsEngine",
    "CalculatedStats",
    "calculate_statistics",
]


def __getattr__(name):
    if name in {"StatisticsEngine", "CalculatedStats", "calculate_statistics"}:
        from .analytics import (  # analytics pulls in pandas
            CalculatedStats,
            StatisticsEngine,
            calculate_statistics,
        )

        values = {
            "StatisticsEngine": StatisticsEngine,
            "CalculatedStats": CalculatedStats,
            "calculate_statistics": calculate_statistics,
        }
        return values[name]
    raise AttributeError(f"module 'handballstats' has no attribute '{name}'")
