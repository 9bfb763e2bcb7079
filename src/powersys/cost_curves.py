"""Defines the variable cost representations of generating units."""

import abc
from enum import StrEnum
from typing import Generic

from pydantic import Field, field_validator
from typing_extensions import Annotated, TypeVar

from powersys.function_data import FunctionData
from powersys.models import INDENT, PowerSysValueModel, indent_lines, render_value
from powersys.time_series_models import TimeSeriesKey
from powersys.value_curves import AverageRateCurve, IncrementalCurve, InputOutputCurve, ValueCurve


class UnitSystem(StrEnum):
    SYSTEM_BASE = "SYSTEM_BASE"
    DEVICE_BASE = "DEVICE_BASE"
    NATURAL_UNITS = "NATURAL_UNITS"


ValueCurveTypes = TypeVar(
    "ValueCurveTypes", bound=InputOutputCurve | IncrementalCurve | AverageRateCurve
)


class ProductionVariableCost(PowerSysValueModel, abc.ABC):
    """Abstract class for the variable cost of a generating unit.

    Concrete types declare `value_curve`, `power_units` and `vom_cost`. Instances are immutable;
    use `model_copy(update=...)` to derive a modified cost.
    """

    def get_value_curve(self) -> ValueCurve:
        """Get the underlying `ValueCurve` representation of this `ProductionVariableCost`"""
        return self.value_curve  # type: ignore[attr-defined]

    def get_vom_cost(self) -> float:
        """Get the variable operation and maintenance cost in $/(power_units h)"""
        return self.vom_cost  # type: ignore[attr-defined]

    def get_power_units(self) -> UnitSystem:
        """Get the units for the x-axis of the curve"""
        return self.power_units  # type: ignore[attr-defined]

    def get_function_data(self) -> FunctionData:
        """Get the `FunctionData` representation of this cost's `ValueCurve`"""
        return self.get_value_curve().get_function_data()

    def get_initial_input(self) -> float | None:
        """Get the `initial_input` field of this cost's `ValueCurve`.

        Raises
        ------
        PSOperationNotAllowed
            Raised for input-output curves, which do not define an initial input.
        """
        return self.get_value_curve().get_initial_input()

    def is_convex(self) -> bool:
        """Calculate the convexity of the underlying data"""
        return self.get_value_curve().is_convex()

    @classmethod
    @abc.abstractmethod
    def zero(cls) -> "ProductionVariableCost":
        """Return an instance representing zero variable cost."""

    @field_validator("vom_cost", check_fields=False)
    @classmethod
    def check_vom_cost(cls, value: float) -> float:
        if value < 0:
            msg = f"vom_cost must not be negative: {value}"
            raise ValueError(msg)
        return value

    def _render_header(self, costs: str) -> str:
        # Short fields go on the first line, the value curve gets the following lines.
        curve = indent_lines(self.get_value_curve().render(compact=True))
        return (
            f"{self.type_name} with power_units {self.get_power_units()}, {costs}, "
            f"and value_curve:\n{INDENT}{curve}"
        )


class CostCurve(ProductionVariableCost, Generic[ValueCurveTypes]):
    """Direct representation of the variable operation cost of a power plant in currency.

    Composed of a Value Curve that may represent input-output, incremental, or average rate
    data. The default units for the x-axis are MW and can be specified with
    `power_units`.
    """

    value_curve: Annotated[
        ValueCurveTypes,
        Field(description="The underlying `ValueCurve` representation of this cost"),
    ]
    power_units: Annotated[
        UnitSystem,
        Field(description="The units for the x-axis of the curve; defaults to natural units (MW)"),
    ] = UnitSystem.NATURAL_UNITS
    vom_cost: Annotated[
        float,
        Field(description="Additional proportional Variable Operation and Maintenance Cost"),
    ] = 0.0

    @classmethod
    def zero(cls) -> "CostCurve":
        """Get a `CostCurve` representing zero variable cost"""
        return cls(value_curve=ValueCurve.zero())

    def _render_compact(self) -> str:
        return self._render_header(f"vom_cost {self.vom_cost}")


class FuelCurve(ProductionVariableCost, Generic[ValueCurveTypes]):
    """Representation of the variable operation cost of a power plant in terms of fuel.

    Fuel units (MBTU, liters, m^3, etc.) coupled with a conversion factor between fuel and currency.
    Composed of a Value Curve that may represent input-output, incremental, or average rate data.
    The default units for the x-axis are MW and can be specified with `power_units`.
    """

    value_curve: Annotated[
        ValueCurveTypes,
        Field(description="The underlying `ValueCurve` representation of this cost"),
    ]
    power_units: Annotated[
        UnitSystem,
        Field(description="The units for the x-axis of the curve; defaults to natural units (MW)"),
    ] = UnitSystem.NATURAL_UNITS
    fuel_cost: Annotated[
        float | TimeSeriesKey,
        Field(
            description="Either a fixed value for fuel cost or the key to a fuel cost time series"
        ),
    ]
    vom_cost: Annotated[
        float,
        Field(description="Additional proportional Variable Operation and Maintenance Cost"),
    ] = 0.0

    @field_validator("fuel_cost")
    @classmethod
    def check_fuel_cost(cls, value: float | TimeSeriesKey) -> float | TimeSeriesKey:
        if isinstance(value, float) and value < 0:
            msg = f"fuel_cost must not be negative: {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def zero(cls) -> "FuelCurve":
        """Get a `FuelCurve` representing zero fuel usage and zero fuel cost"""
        return cls(value_curve=ValueCurve.zero(), fuel_cost=0.0)

    def get_fuel_cost(self) -> float | TimeSeriesKey:
        """Get the fuel cost or the key of the fuel cost time series"""
        return self.fuel_cost

    def _render_compact(self) -> str:
        fuel_cost = render_value(self.fuel_cost)
        return self._render_header(f"fuel_cost {fuel_cost}, vom_cost {self.vom_cost}")
