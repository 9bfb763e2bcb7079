"""Reads power system data from a directory of CSV tables described by YAML files."""

import math
import re
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Type

import pandas as pd
import yaml
from loguru import logger

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
    VariableReserve,
    get_reserve_direction,
)
from powersys.cost_curves import CostCurve, FuelCurve
from powersys.exceptions import DataFormatError
from powersys.function_data import PiecewiseStepData
from powersys.parsers.common import calculate_rating, parse_prime_mover, parse_thermal_fuel
from powersys.system import System
from powersys.value_curves import IncrementalCurve, PiecewisePointCurve

CATEGORY_FILES = {
    "bus": "bus.csv",
    "generator": "gen.csv",
    "branch": "branch.csv",
    "dc_branch": "dc_branch.csv",
    "reserves": "reserves.csv",
}

GENERATOR_TYPES: dict[str, Type[Generator]] = {
    x.__name__: x for x in (ThermalStandard, HydroDispatch, RenewableDispatch)
}

_OUTPUT_POINT_REGEX = re.compile(r"^output_point_(\d+)$")


class PowerSystemTableData:
    """Tabular power system data read from CSV files.

    Column names are translated to the package's field names with the user descriptor file, a
    YAML mapping of data category to a list of ``{custom_name, name}`` entries. Generators are
    assigned to component types with the generator mapping file, a YAML mapping of component
    type name to a list of ``{fuel, type}`` entries.
    """

    def __init__(
        self,
        directory: Path | str,
        base_power: float,
        user_descriptor_file: Path | str,
        generator_mapping_file: Path | str | None = None,
    ) -> None:
        """Read the tables in directory.

        Raises
        ------
        DataFormatError
            Raised if the directory, the descriptor file or the bus table do not exist or if the
            YAML files are malformed.
        """
        self._directory = Path(directory)
        if not self._directory.is_dir():
            msg = f"table data directory {self._directory} does not exist"
            raise DataFormatError(msg)
        if base_power <= 0:
            msg = f"base_power must be positive: {base_power}"
            raise DataFormatError(msg)

        self._base_power = base_power
        self._descriptors = _read_descriptors(Path(user_descriptor_file))
        self._generator_mapping = _read_generator_mapping(generator_mapping_file)
        self._tables: dict[str, pd.DataFrame] = {}
        for category, filename in CATEGORY_FILES.items():
            path = self._directory / filename
            if path.is_file():
                self._tables[category] = self._read_table(category, path)

        if "bus" not in self._tables:
            msg = f"no bus data found in {self._directory}"
            raise DataFormatError(msg)
        logger.info("Read table data categories {} from {}", sorted(self._tables), self._directory)

    @property
    def base_power(self) -> float:
        return self._base_power

    @property
    def directory(self) -> Path:
        return self._directory

    def has_category(self, category: str) -> bool:
        return category in self._tables

    def get_table(self, category: str) -> pd.DataFrame | None:
        """Return the table of a category with renamed columns, or None if it was not provided."""
        return self._tables.get(category)

    def iter_rows(self, category: str) -> Iterable[dict[str, Any]]:
        """Return the rows of a category as dictionaries. Empty cells are None."""
        table = self._tables.get(category)
        if table is None:
            return
        for record in table.to_dict(orient="records"):
            yield {k: _clean_value(v) for k, v in record.items()}

    def get_generator_type(self, fuel: str | None, unit_type: str | None) -> Type[Generator]:
        """Return the component type of a generator from its fuel and unit type.

        Raises
        ------
        DataFormatError
            Raised if no mapping entry matches.
        """
        fuel_key = (fuel or "").upper()
        type_key = (unit_type or "").upper()
        for type_name, entries in self._generator_mapping.items():
            for entry in entries:
                entry_fuel = str(entry.get("fuel") or "").upper()
                entry_type = entry.get("type")
                if entry_fuel == fuel_key and (
                    entry_type is None or str(entry_type).upper() == type_key
                ):
                    return GENERATOR_TYPES[type_name]

        msg = f"no generator mapping for fuel={fuel!r} unit_type={unit_type!r}"
        raise DataFormatError(msg)

    def _read_table(self, category: str, path: Path) -> pd.DataFrame:
        try:
            table = pd.read_csv(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            msg = f"failed to read {path}: {e}"
            raise DataFormatError(msg) from e

        mapping = {
            x["custom_name"]: x["name"]
            for x in self._descriptors.get(category, [])
            if x["custom_name"] in table.columns
        }
        logger.debug("Read {} rows from {}, renamed {} columns", len(table), path, len(mapping))
        return table.rename(columns=mapping)


def build_system_from_table_data(data: PowerSystemTableData, name: str | None = None) -> System:
    """Build a System from tabular data."""
    system = System(data.base_power, name=name or data.directory.name)
    buses = _make_buses(data)
    system.add_components(*buses.values())
    generators = _make_generators(data, buses)
    system.add_components(*generators)
    system.add_components(*_make_branches(data, buses))
    system.add_components(*_make_dc_lines(data, buses))
    system.add_components(*_make_reserves(data))
    logger.info("Built system {} from table data in {}", system.label, data.directory)
    return system


def _read_descriptors(filename: Path) -> dict[str, list[dict[str, str]]]:
    descriptors = _read_yaml(filename)
    for category, entries in descriptors.items():
        if not isinstance(entries, list) or not all(
            isinstance(x, dict) and {"custom_name", "name"} <= x.keys() for x in entries
        ):
            msg = f"descriptors of {category} in {filename} must be a list of custom_name/name"
            raise DataFormatError(msg)
    return descriptors


def _read_generator_mapping(filename: Path | str | None) -> dict[str, list[dict[str, Any]]]:
    if filename is None:
        default = resources.files("powersys.data").joinpath("generator_mapping.yaml")
        with resources.as_file(default) as path:
            mapping = _read_yaml(path)
    else:
        mapping = _read_yaml(Path(filename))

    unknown = set(mapping).difference(GENERATOR_TYPES)
    if unknown:
        msg = f"generator mapping contains unsupported types: {sorted(unknown)}"
        raise DataFormatError(msg)
    return mapping


def _read_yaml(filename: Path) -> dict[str, Any]:
    if not filename.is_file():
        msg = f"{filename} does not exist"
        raise DataFormatError(msg)
    with open(filename, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"failed to parse {filename}: {e}"
            raise DataFormatError(msg) from e
    if not isinstance(data, dict):
        msg = f"{filename} must contain a mapping"
        raise DataFormatError(msg)
    return data


def _clean_value(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _require(row: dict[str, Any], field: str, category: str) -> Any:
    value = row.get(field)
    if value is None:
        msg = f"{category} row {row.get('name')} is missing required field {field}"
        raise DataFormatError(msg)
    return value


def _get_bus(buses: dict[int, Bus], bus_id: Any, category: str, name: str) -> Bus:
    bus = buses.get(int(bus_id))
    if bus is None:
        msg = f"{category} {name} is connected to unknown bus {bus_id}"
        raise DataFormatError(msg)
    return bus


def _make_buses(data: PowerSystemTableData) -> dict[int, Bus]:
    buses = {}
    for row in data.iter_rows("bus"):
        number = int(_require(row, "bus_id", "bus"))
        bustype = row.get("bus_type")
        buses[number] = Bus(
            name=str(row.get("name") or f"bus{number}"),
            number=number,
            bustype=_get_bus_type(number, bustype) if bustype else None,
            base_voltage=row.get("base_voltage"),
        )
    return buses


def _get_bus_type(number: int, value: Any) -> ACBusTypes:
    try:
        return ACBusTypes[str(value).upper()]
    except KeyError as e:
        msg = f"Bus {number} has an invalid bus type: {value!r}"
        raise DataFormatError(msg) from e


def _make_generators(data: PowerSystemTableData, buses: dict[int, Bus]) -> list[Generator]:
    generators = []
    for row in data.iter_rows("generator"):
        name = str(_require(row, "name", "generator"))
        bus = _get_bus(buses, _require(row, "bus_id", "generator"), "generator", name)
        gen_type = data.get_generator_type(row.get("fuel"), row.get("unit_type"))
        pmax = float(_require(row, "active_power_limits_max", "generator"))
        qmax = row.get("reactive_power_limits_max")
        qmin = row.get("reactive_power_limits_min")
        ramp = row.get("ramp_limits")
        fields: dict[str, Any] = {
            "name": name,
            "available": bool(row.get("available", True)),
            "bus": bus,
            "active_power": row.get("active_power") or 0.0,
            "reactive_power": row.get("reactive_power") or 0.0,
            "rating": calculate_rating(pmax, qmax),
            "active_power_limits": MinMax(min=row.get("active_power_limits_min") or 0.0, max=pmax),
            "reactive_power_limits": None if qmax is None else MinMax(min=qmin or 0.0, max=qmax),
            "ramp_limits": UpDown(up=ramp, down=ramp) if ramp else None,
            "base_power": row.get("base_mva") or data.base_power,
            "prime_mover_type": parse_prime_mover(row.get("unit_type")),
        }
        variable = _make_variable_cost(row, pmax)
        if gen_type is ThermalStandard:
            generator: Generator = ThermalStandard(
                operation_cost=ThermalGenerationCost(
                    variable=variable, start_up=row.get("startup_cost") or 0.0
                ),
                fuel=parse_thermal_fuel(row.get("fuel")),
                **fields,
            )
        elif gen_type is HydroDispatch:
            generator = HydroDispatch(
                operation_cost=HydroGenerationCost(variable=variable), **fields
            )
        else:
            if not isinstance(variable, CostCurve):
                msg = f"renewable generator {name} cannot have a fuel cost"
                raise DataFormatError(msg)
            generator = RenewableDispatch(
                power_factor=row.get("power_factor") or 1.0,
                operation_cost=RenewableGenerationCost(variable=variable),
                **fields,
            )
        generators.append(generator)
    return generators


def _make_variable_cost(row: dict[str, Any], pmax: float) -> CostCurve | FuelCurve:
    """Build the variable cost from cost points, else heat rates, else zero.

    Output points are fractions of the maximum active power.
    """
    indexes = sorted(
        int(m.group(1)) for m in map(_OUTPUT_POINT_REGEX.match, row) if m is not None
    )
    outputs = [row[f"output_point_{i}"] for i in indexes]
    indexes = [i for i, x in zip(indexes, outputs) if x is not None]
    x_coords = [row[f"output_point_{i}"] * pmax for i in indexes]

    costs = [row.get(f"cost_point_{i}") for i in indexes]
    if indexes and all(x is not None for x in costs):
        return CostCurve(value_curve=PiecewisePointCurve(list(zip(x_coords, costs))))

    average = row.get("heat_rate_avg_0")
    incremental = [row.get(f"heat_rate_incr_{i}") for i in indexes[1:]]
    fuel_price = row.get("fuel_price")
    if (
        len(indexes) > 1
        and average is not None
        and fuel_price is not None
        and all(x is not None for x in incremental)
    ):
        return FuelCurve(
            value_curve=IncrementalCurve(
                function_data=PiecewiseStepData(x_coords=x_coords, y_coords=incremental),
                initial_input=average * x_coords[0],
            ),
            fuel_cost=fuel_price,
        )

    logger.debug("Generator {} has no variable cost data; using zero cost", row.get("name"))
    return CostCurve.zero()


def _make_branches(data: PowerSystemTableData, buses: dict[int, Bus]) -> list[Line]:
    lines = []
    for row in data.iter_rows("branch"):
        name = str(_require(row, "name", "branch"))
        from_id = _require(row, "connection_points_from", "branch")
        to_id = _require(row, "connection_points_to", "branch")
        from_bus = _get_bus(buses, from_id, "branch", name)
        to_bus = _get_bus(buses, to_id, "branch", name)
        lines.append(
            Line(
                name=name,
                available=bool(row.get("available", True)),
                arc=Arc(from_bus=from_bus, to_bus=to_bus),
                r=row.get("r") or 0.0,
                x=row.get("x") or 0.0,
                b=row.get("primary_shunt") or 0.0,
                rate=row.get("rate"),
            )
        )
    return lines


def _make_dc_lines(
    data: PowerSystemTableData, buses: dict[int, Bus]
) -> list[TwoTerminalHVDCLine]:
    lines = []
    for row in data.iter_rows("dc_branch"):
        name = str(_require(row, "name", "dc_branch"))
        from_bus = _get_bus(
            buses, _require(row, "connection_points_from", "dc_branch"), "dc_branch", name
        )
        to_bus = _get_bus(
            buses, _require(row, "connection_points_to", "dc_branch"), "dc_branch", name
        )
        limits = MinMax(
            min=_require(row, "min_active_power_flow", "dc_branch"),
            max=_require(row, "max_active_power_flow", "dc_branch"),
        )
        lines.append(
            TwoTerminalHVDCLine(
                name=name,
                available=bool(row.get("available", True)),
                arc=Arc(from_bus=from_bus, to_bus=to_bus),
                active_power_limits_from=limits,
                active_power_limits_to=limits,
            )
        )
    return lines


def _make_reserves(data: PowerSystemTableData) -> list[VariableReserve]:
    unit_types = {}
    for row in data.iter_rows("generator"):
        unit_types[str(row["name"])] = str(row.get("unit_type") or "").upper()

    reserves = []
    for row in data.iter_rows("reserves"):
        name = str(_require(row, "name", "reserves"))
        categories = {
            x.strip().upper()
            for x in str(row.get("eligible_device_subcategories") or "").split(",")
            if x.strip()
        }
        reserves.append(
            VariableReserve(
                name=name,
                direction=get_reserve_direction(str(_require(row, "direction", "reserves"))),
                requirement=_require(row, "requirement", "reserves"),
                time_frame=row.get("time_frame") or 0.0,
                contributing_devices=[k for k, v in unit_types.items() if v in categories],
            )
        )
    return reserves
