import importlib.metadata as metadata

from loguru import logger

logger.disable("powersys")

__version__ = metadata.metadata("powersys")["Version"]

from .component import Component
from .cost_curves import CostCurve, FuelCurve, ProductionVariableCost, UnitSystem
from .lazy_dict import LazyDictFromIterator
from .system import System
from .time_series_models import SingleTimeSeriesKey, TimeSeriesKey
from .value_curves import AverageRateCurve, IncrementalCurve, InputOutputCurve, ValueCurve

__all__ = (
    "AverageRateCurve",
    "Component",
    "CostCurve",
    "FuelCurve",
    "IncrementalCurve",
    "InputOutputCurve",
    "LazyDictFromIterator",
    "ProductionVariableCost",
    "SingleTimeSeriesKey",
    "System",
    "TimeSeriesKey",
    "UnitSystem",
    "ValueCurve",
)
