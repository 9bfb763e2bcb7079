"""Defines the power system components compared across data sources."""

from enum import IntEnum, StrEnum
from typing import NamedTuple

from pydantic import Field
from typing_extensions import Annotated

from powersys.component import Component
from powersys.cost_curves import CostCurve, FuelCurve
from powersys.exceptions import DataFormatError
from powersys.models import PowerSysBaseModel, PowerSysValueModel
from powersys.value_curves import LinearCurve, PiecewisePointCurve


class MinMax(NamedTuple):
    """Lower and upper limit of a value."""

    min: float
    max: float


class UpDown(NamedTuple):
    """Limits of a value when increasing and decreasing."""

    up: float
    down: float


class ACBusTypes(IntEnum):
    PQ = 1
    PV = 2
    REF = 3
    ISOLATED = 4


class ThermalFuels(StrEnum):
    COAL = "COAL"
    NATURAL_GAS = "NATURAL_GAS"
    DISTILLATE_FUEL_OIL = "DISTILLATE_FUEL_OIL"
    RESIDUAL_FUEL_OIL = "RESIDUAL_FUEL_OIL"
    NUCLEAR = "NUCLEAR"
    OTHER = "OTHER"


class PrimeMovers(StrEnum):
    CC = "CC"
    CT = "CT"
    ST = "ST"
    HY = "HY"
    PVe = "PVe"
    WT = "WT"
    OT = "OT"


class ReserveDirection(StrEnum):
    UP = "Up"
    DOWN = "Down"


def get_reserve_direction(direction: str) -> ReserveDirection:
    """Return the reserve direction matching the string exactly ("Up" or "Down").

    Raises
    ------
    DataFormatError
        Raised for any other string, including other capitalizations.
    """
    for member in ReserveDirection:
        if direction == member.value:
            return member
    choices = [x.value for x in ReserveDirection]
    msg = f"invalid reserve direction {direction!r}: must be one of {choices}"
    raise DataFormatError(msg)


class OperationalCost(PowerSysValueModel):
    """Base class for the operation cost of a device."""

    def get_variable(self) -> CostCurve | FuelCurve:
        """Return the production variable cost."""
        return self.variable  # type: ignore[attr-defined]


class ThermalGenerationCost(OperationalCost):
    """Operation cost of a thermal unit."""

    variable: CostCurve | FuelCurve = Field(default_factory=CostCurve.zero)
    fixed: float = 0.0
    start_up: float = 0.0
    shut_down: float = 0.0


class HydroGenerationCost(OperationalCost):
    """Operation cost of a hydro unit."""

    variable: CostCurve | FuelCurve = Field(default_factory=CostCurve.zero)
    fixed: float = 0.0


class RenewableGenerationCost(OperationalCost):
    """Operation cost of a renewable unit."""

    variable: CostCurve = Field(default_factory=CostCurve.zero)
    curtailment_cost: CostCurve = Field(default_factory=CostCurve.zero)


class Bus(Component):
    """Represents an AC bus."""

    number: int
    bustype: ACBusTypes | None = None
    base_voltage: float | None = None

    @classmethod
    def example(cls) -> "Bus":
        return Bus(name="bus-1", number=1, bustype=ACBusTypes.REF, base_voltage=230.0)


class Arc(PowerSysBaseModel):
    """Directed connection between two buses."""

    from_bus: Bus
    to_bus: Bus

    def bus_numbers(self) -> tuple[int, int]:
        return self.from_bus.number, self.to_bus.number


class Device(Component):
    """Base class for devices."""

    available: bool = True


class Generator(Device):
    """Base class for generators. Power values are in natural units (MW, MVar)."""

    bus: Bus
    active_power: float = 0.0
    reactive_power: float = 0.0
    rating: float
    active_power_limits: MinMax
    reactive_power_limits: MinMax | None = None
    ramp_limits: UpDown | None = None
    base_power: Annotated[float, Field(gt=0)] = 100.0

    def get_operation_cost(self) -> OperationalCost:
        return self.operation_cost  # type: ignore[attr-defined]


class ThermalGen(Generator):
    """Base class for thermal generators."""


class ThermalStandard(ThermalGen):
    """Represents a thermal generator."""

    operation_cost: ThermalGenerationCost = Field(default_factory=ThermalGenerationCost)
    fuel: ThermalFuels = ThermalFuels.OTHER
    prime_mover_type: PrimeMovers = PrimeMovers.OT

    @classmethod
    def example(cls) -> "ThermalStandard":
        return ThermalStandard(
            name="thermal-gen",
            bus=Bus.example(),
            active_power=50.0,
            rating=120.0,
            active_power_limits=MinMax(min=20.0, max=100.0),
            reactive_power_limits=MinMax(min=-30.0, max=50.0),
            ramp_limits=UpDown(up=3.0, down=3.0),
            operation_cost=ThermalGenerationCost(
                variable=CostCurve(
                    value_curve=PiecewisePointCurve(
                        [(20.0, 600.0), (60.0, 1500.0), (100.0, 2600.0)]
                    ),
                ),
                fixed=0.0,
                start_up=1000.0,
            ),
            fuel=ThermalFuels.COAL,
            prime_mover_type=PrimeMovers.ST,
        )


class HydroGen(Generator):
    """Base class for hydro generators."""


class HydroDispatch(HydroGen):
    """Represents a dispatchable hydro generator without storage."""

    operation_cost: HydroGenerationCost = Field(default_factory=HydroGenerationCost)
    prime_mover_type: PrimeMovers = PrimeMovers.HY


class RenewableGen(Generator):
    """Base class for renewable generators."""

    power_factor: Annotated[float, Field(ge=0, le=1)] = 1.0


class RenewableDispatch(RenewableGen):
    """Represents a curtailable renewable generator."""

    operation_cost: RenewableGenerationCost = Field(default_factory=RenewableGenerationCost)
    prime_mover_type: PrimeMovers = PrimeMovers.OT

    @classmethod
    def example(cls) -> "RenewableDispatch":
        return RenewableDispatch(
            name="wind-gen",
            bus=Bus.example(),
            rating=50.0,
            active_power_limits=MinMax(min=0.0, max=50.0),
            operation_cost=RenewableGenerationCost(variable=CostCurve(value_curve=LinearCurve())),
            prime_mover_type=PrimeMovers.WT,
        )


class Branch(Device):
    """Base class for branches."""

    arc: Arc


class ACBranch(Branch):
    """Base class for AC branches."""

    r: float = 0.0
    x: float = 0.0
    b: float = 0.0
    rate: float | None = None


class Line(ACBranch):
    """Represents an AC transmission line."""


class TwoTerminalHVDCLine(Branch):
    """Represents a two-terminal HVDC line. Limits are in MW."""

    active_power: float = 0.0
    active_power_limits_from: MinMax
    active_power_limits_to: MinMax


class Service(Component):
    """Base class for services."""


class VariableReserve(Service):
    """Represents a reserve product."""

    direction: ReserveDirection
    requirement: float
    time_frame: float = 0.0
    contributing_devices: list[str] = []
