"""Defines references to time series data that is resolved outside of this package."""

from datetime import datetime, timedelta
from typing import Any

from powersys.models import PowerSysValueModel


class TimeSeriesKey(PowerSysValueModel):
    """Base class for time series keys."""

    name: str
    time_series_type: str = "SingleTimeSeries"
    features: dict[str, Any] = {}

    def _render_compact(self) -> str:
        return f"{self.type_name}(name={self.name!r}, time_series_type={self.time_series_type})"


class SingleTimeSeriesKey(TimeSeriesKey):
    """Keys for SingleTimeSeries."""

    length: int
    initial_timestamp: datetime
    resolution: timedelta
