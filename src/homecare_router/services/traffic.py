"""Time-of-day traffic adjustment for route durations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from .units import round2

RUSH_HOURS = frozenset({7, 8, 9, 16, 17, 18, 19})
DAYTIME_HOURS = frozenset(range(10, 16))
RUSH_HOUR_MULTIPLIER = 1.3
DAYTIME_MULTIPLIER = 1.1
OFF_PEAK_MULTIPLIER = 1.0


def traffic_multiplier(hour: int) -> float:
    """Static step function over the hour of day."""
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour must be between 0 and 23, got {hour}.")
    if hour in RUSH_HOURS:
        return RUSH_HOUR_MULTIPLIER
    if hour in DAYTIME_HOURS:
        return DAYTIME_MULTIPLIER
    return OFF_PEAK_MULTIPLIER


def adjust_duration(duration_min: float, multiplier: float) -> float:
    """Scale a duration in minutes. Distances are never adjusted."""
    return round2(duration_min * multiplier)


class TrafficModel(ABC):
    """Source of the duration multiplier for a moment in time."""

    @abstractmethod
    def multiplier(self, moment: datetime) -> float:
        raise NotImplementedError


class TimeOfDayTrafficModel(TrafficModel):
    def multiplier(self, moment: datetime) -> float:
        return traffic_multiplier(moment.hour)
