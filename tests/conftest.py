from pathlib import Path

import pytest
from loguru import logger

from powersys import System
from powersys.components import (
    ACBusTypes,
    Arc,
    Bus,
    Line,
    MinMax,
    RenewableDispatch,
    ThermalStandard,
    TwoTerminalHVDCLine,
)
from powersys.parsers import PowerSystemTableData

DATA_DIR = Path(__file__).parent / "data"
RTS_MINI_DIR = DATA_DIR / "RTS_mini"
FIVE_BUS_DIR = DATA_DIR / "5-Bus"


@pytest.fixture
def rts_mini_dir() -> Path:
    return RTS_MINI_DIR


@pytest.fixture
def five_bus_dir() -> Path:
    return FIVE_BUS_DIR


@pytest.fixture
def matpower_system() -> System:
    """Creates the reduced RTS system from its MATPOWER case file."""
    return System.from_matpower(RTS_MINI_DIR / "RTS_mini.m")


@pytest.fixture
def table_system() -> System:
    """Creates the reduced RTS system from its CSV tables."""
    data = PowerSystemTableData(RTS_MINI_DIR, 100.0, RTS_MINI_DIR / "user_descriptors.yaml")
    return System.from_table_data(data)


@pytest.fixture
def simple_system() -> System:
    """Creates a system with two buses, a thermal generator, a wind generator and branches."""
    system = System(100.0, name="test-system")
    bus1 = Bus(name="bus1", number=1, bustype=ACBusTypes.REF, base_voltage=230.0)
    bus2 = Bus(name="bus2", number=2, bustype=ACBusTypes.PQ, base_voltage=230.0)
    gen = ThermalStandard.example().model_copy(update={"bus": bus1})
    wind = RenewableDispatch.example().model_copy(update={"bus": bus2})
    line = Line(name="line1", arc=Arc(from_bus=bus1, to_bus=bus2), r=0.01, x=0.1, rate=100.0)
    dc_line = TwoTerminalHVDCLine(
        name="dc1",
        arc=Arc(from_bus=bus2, to_bus=bus1),
        active_power_limits_from=MinMax(min=0.0, max=50.0),
        active_power_limits_to=MinMax(min=0.0, max=50.0),
    )
    system.add_components(bus1, bus2, gen, wind, line, dc_line)
    return system


@pytest.fixture
def caplog(caplog):
    """Enable logging for the package"""
    logger.remove()
    logger.enable("powersys")
    handler_id = logger.add(caplog.handler)
    yield caplog
    logger.remove(handler_id)
