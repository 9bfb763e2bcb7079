"""Reads MATPOWER case files (``.m``) into a System."""

import re
from collections import Counter
from pathlib import Path
from typing import Any

import numpy as np
from loguru import logger
from pydantic import ValidationError

from powersys.components import (
    ACBusTypes,
    Arc,
    Bus,
    Generator,
    HydroDispatch,
    HydroGenerationCost,
    Line,
    MinMax,
    RenewableDispatch,
    RenewableGenerationCost,
    ThermalGenerationCost,
    ThermalStandard,
    TwoTerminalHVDCLine,
    UpDown,
)
from powersys.cost_curves import CostCurve
from powersys.exceptions import DataFormatError
from powersys.function_data import LinearFunctionData, QuadraticFunctionData
from powersys.models import PowerSysBaseModel
from powersys.parsers.common import (
    HYDRO_FUELS,
    RENEWABLE_FUELS,
    calculate_rating,
    parse_prime_mover,
    parse_thermal_fuel,
)
from powersys.system import System
from powersys.value_curves import InputOutputCurve, PiecewisePointCurve

# Column indices of the MATPOWER matrices.
BUS_I, BUS_TYPE, BASE_KV = 0, 1, 9
GEN_BUS, PG, QG, QMAX, QMIN, MBASE, GEN_STATUS, PMAX, PMIN, RAMP_30 = 0, 1, 2, 3, 4, 6, 7, 8, 9, 18
F_BUS, T_BUS, BR_R, BR_X, BR_B, RATE_A, BR_STATUS = 0, 1, 2, 3, 4, 5, 10
DC_STATUS, DC_PMIN, DC_PMAX = 2, 9, 10
MODEL, STARTUP, SHUTDOWN, NCOST, COST = 0, 1, 2, 3, 4
PW_LINEAR, POLYNOMIAL = 1, 2

_MATRIX_REGEX = re.compile(r"mpc\.(\w+)\s*=\s*\[(.*?)\]\s*;", re.DOTALL)
_CELL_REGEX = re.compile(r"mpc\.(\w+)\s*=\s*\{(.*?)\}\s*;", re.DOTALL)
_SCALAR_REGEX = re.compile(r"mpc\.(\w+)\s*=\s*([^\[\{;\n]+);")
_QUOTED_REGEX = re.compile(r"'([^']*)'|\"([^\"]*)\"")


class MatpowerData(PowerSysBaseModel):
    """Raw contents of a MATPOWER case file."""

    name: str
    base_mva: float
    matrices: dict[str, list[list[float]]]
    cells: dict[str, list[str]] = {}

    def get_matrix(self, key: str, required: bool = False) -> list[list[float]]:
        """Return the rows of a matrix, or an empty list if it is absent and not required."""
        if key not in self.matrices:
            if required:
                msg = f"MATPOWER case {self.name} does not define mpc.{key}"
                raise DataFormatError(msg)
            return []
        return self.matrices[key]

    def get_cell(self, key: str, index: int) -> str | None:
        values = self.cells.get(key)
        if values is None or index >= len(values):
            return None
        return values[index]


def parse_matpower(filename: Path | str) -> MatpowerData:
    """Parse the numeric matrices, cell arrays and scalars of a MATPOWER case file.

    Raises
    ------
    DataFormatError
        Raised if the file does not exist or lacks the bus or generator matrices.
    """
    filename = Path(filename)
    if not filename.is_file():
        msg = f"MATPOWER file {filename} does not exist"
        raise DataFormatError(msg)

    text = "\n".join(_strip_comment(x) for x in filename.read_text().splitlines())
    matrices = {key: _parse_matrix(key, body) for key, body in _MATRIX_REGEX.findall(text)}
    cells = {
        key: [a or b for a, b in _QUOTED_REGEX.findall(body)]
        for key, body in _CELL_REGEX.findall(text)
    }
    scalars = {key: value.strip() for key, value in _SCALAR_REGEX.findall(text)}

    try:
        base_mva = float(scalars.get("baseMVA", "100.0"))
    except ValueError as e:
        msg = f"invalid mpc.baseMVA in {filename}: {scalars['baseMVA']}"
        raise DataFormatError(msg) from e

    data = MatpowerData(name=filename.stem, base_mva=base_mva, matrices=matrices, cells=cells)
    for key in ("bus", "gen"):
        data.get_matrix(key, required=True)
    logger.debug(
        "Parsed MATPOWER file {}: {}",
        filename,
        {key: len(rows) for key, rows in matrices.items()},
    )
    return data


def build_system_from_matpower(data: MatpowerData, name: str | None = None) -> System:
    """Build a System from parsed MATPOWER data.

    Inconsistent records are logged at error level and repaired or skipped: generators
    connected to unknown buses are skipped, branches without a thermal rating get
    ``rate=None`` and invalid cost data falls back to a zero cost.
    """
    system = System(data.base_mva, name=name or data.name)
    buses = _make_buses(data)
    system.add_components(*buses.values())
    system.add_components(*_make_generators(data, buses))
    system.add_components(*_make_branches(data, buses))
    system.add_components(*_make_dc_lines(data, buses))
    logger.info("Built system {} from MATPOWER data", system.label)
    return system


def _strip_comment(line: str) -> str:
    pos = line.find("%")
    return line if pos == -1 else line[:pos]


def _parse_matrix(key: str, body: str) -> list[list[float]]:
    rows = []
    for row in re.split(r"[;\n]", body):
        tokens = row.replace(",", " ").split()
        if not tokens:
            continue
        try:
            rows.append([float(x) for x in tokens])
        except ValueError as e:
            msg = f"invalid value in mpc.{key}: {row.strip()}"
            raise DataFormatError(msg) from e
    return rows


def _make_buses(data: MatpowerData) -> dict[int, Bus]:
    buses = {}
    for i, row in enumerate(data.get_matrix("bus")):
        number = int(row[BUS_I])
        try:
            bustype = ACBusTypes(int(row[BUS_TYPE]))
        except ValueError as e:
            msg = f"Bus {number} has an invalid bus type: {row[BUS_TYPE]}"
            raise DataFormatError(msg) from e
        buses[number] = Bus(
            name=data.get_cell("bus_name", i) or f"bus{number}",
            number=number,
            bustype=bustype,
            base_voltage=row[BASE_KV] if len(row) > BASE_KV else None,
        )
    return buses


def _make_generators(data: MatpowerData, buses: dict[int, Bus]) -> list[Generator]:
    gencost = data.get_matrix("gencost")
    generators = []
    for i, row in enumerate(data.get_matrix("gen")):
        name = data.get_cell("gen_name", i) or f"gen-{int(row[GEN_BUS])}-{i + 1}"
        bus = buses.get(int(row[GEN_BUS]))
        if bus is None:
            logger.error(
                "Generator {} is connected to unknown bus {}; skipping", name, row[GEN_BUS]
            )
            continue

        fuel = (data.get_cell("genfuel", i) or "").upper()
        fields: dict[str, Any] = {
            "name": name,
            "available": row[GEN_STATUS] > 0,
            "bus": bus,
            "active_power": row[PG],
            "reactive_power": row[QG],
            "rating": calculate_rating(row[PMAX], row[QMAX]),
            "active_power_limits": MinMax(min=row[PMIN], max=row[PMAX]),
            "reactive_power_limits": MinMax(min=row[QMIN], max=row[QMAX]),
            "ramp_limits": _get_ramp_limits(row),
            "base_power": row[MBASE] if row[MBASE] > 0 else data.base_mva,
            "prime_mover_type": parse_prime_mover(data.get_cell("gentype", i)),
        }
        cost_row = gencost[i] if i < len(gencost) else None
        variable = _make_variable_cost(name, cost_row)
        if fuel in HYDRO_FUELS:
            generator: Generator = HydroDispatch(
                operation_cost=HydroGenerationCost(variable=variable), **fields
            )
        elif fuel in RENEWABLE_FUELS:
            generator = RenewableDispatch(
                operation_cost=RenewableGenerationCost(variable=variable), **fields
            )
        else:
            generator = ThermalStandard(
                operation_cost=ThermalGenerationCost(
                    variable=variable,
                    start_up=cost_row[STARTUP] if cost_row else 0.0,
                    shut_down=cost_row[SHUTDOWN] if cost_row else 0.0,
                ),
                fuel=parse_thermal_fuel(fuel),
                **fields,
            )
        generators.append(generator)
    return generators


def _get_ramp_limits(row: list[float]) -> UpDown | None:
    if len(row) <= RAMP_30 or row[RAMP_30] <= 0:
        return None
    # MW per 30 minutes to MW per minute
    rate = row[RAMP_30] / 30.0
    return UpDown(up=rate, down=rate)


def _make_variable_cost(name: str, row: list[float] | None) -> CostCurve:
    if row is None:
        return CostCurve.zero()

    model = int(row[MODEL])
    num = int(row[NCOST])
    values = row[COST:]
    try:
        if model == PW_LINEAR:
            if len(values) < 2 * num:
                msg = f"gencost of {name} defines {num} points but has {len(values)} values"
                raise DataFormatError(msg)
            points = list(zip(values[0 : 2 * num : 2], values[1 : 2 * num : 2]))
            return CostCurve(value_curve=PiecewisePointCurve(points))
        if model == POLYNOMIAL:
            return CostCurve(value_curve=_make_polynomial_curve(name, values[:num]))
        msg = f"gencost of {name} has unsupported cost model {model}"
        raise DataFormatError(msg)
    except (DataFormatError, ValidationError) as e:
        logger.error("Invalid cost data for generator {}; using zero cost: {}", name, e)
        return CostCurve.zero()


def _make_polynomial_curve(name: str, coefficients: list[float]) -> InputOutputCurve:
    coefficients = list(np.trim_zeros(np.array(coefficients), trim="f"))
    match len(coefficients):
        case 0:
            data: LinearFunctionData | QuadraticFunctionData = LinearFunctionData(
                proportional_term=0.0, constant_term=0.0
            )
        case 1:
            data = LinearFunctionData(proportional_term=0.0, constant_term=coefficients[0])
        case 2:
            data = LinearFunctionData(
                proportional_term=coefficients[0], constant_term=coefficients[1]
            )
        case 3:
            data = QuadraticFunctionData(
                quadratic_term=coefficients[0],
                proportional_term=coefficients[1],
                constant_term=coefficients[2],
            )
        case _:
            msg = f"gencost of {name} has a polynomial of degree {len(coefficients) - 1}"
            raise DataFormatError(msg)
    return InputOutputCurve(function_data=data)


def _make_branches(data: MatpowerData, buses: dict[int, Bus]) -> list[Line]:
    counts: Counter = Counter()
    lines = []
    for row in data.get_matrix("branch"):
        from_bus, to_bus = buses.get(int(row[F_BUS])), buses.get(int(row[T_BUS]))
        if from_bus is None or to_bus is None:
            logger.error(
                "Branch {}-{} is connected to an unknown bus; skipping", row[F_BUS], row[T_BUS]
            )
            continue
        key = (from_bus.number, to_bus.number)
        counts[key] += 1
        name = f"{from_bus.number}-{to_bus.number}-i_{counts[key]}"
        rate: float | None = row[RATE_A]
        if not rate:
            logger.error("Branch {} has no thermal rating (rate_a = 0)", name)
            rate = None
        lines.append(
            Line(
                name=name,
                available=row[BR_STATUS] > 0,
                arc=Arc(from_bus=from_bus, to_bus=to_bus),
                r=row[BR_R],
                x=row[BR_X],
                b=row[BR_B],
                rate=rate,
            )
        )
    return lines


def _make_dc_lines(data: MatpowerData, buses: dict[int, Bus]) -> list[TwoTerminalHVDCLine]:
    lines = []
    for i, row in enumerate(data.get_matrix("dcline")):
        from_bus, to_bus = buses.get(int(row[F_BUS])), buses.get(int(row[T_BUS]))
        if from_bus is None or to_bus is None:
            logger.error(
                "DC line {}-{} is connected to an unknown bus; skipping", row[F_BUS], row[T_BUS]
            )
            continue
        limits = MinMax(min=row[DC_PMIN], max=row[DC_PMAX])
        lines.append(
            TwoTerminalHVDCLine(
                name=f"dcline-{from_bus.number}-{to_bus.number}-{i + 1}",
                available=row[DC_STATUS] > 0,
                arc=Arc(from_bus=from_bus, to_bus=to_bus),
                active_power_limits_from=limits,
                active_power_limits_to=limits,
            )
        )
    return lines
