import math

import pytest

from powersys import CostCurve, System
from powersys.components import (
    ACBusTypes,
    Bus,
    HydroDispatch,
    Line,
    MinMax,
    PrimeMovers,
    RenewableDispatch,
    ThermalFuels,
    ThermalStandard,
    TwoTerminalHVDCLine,
    UpDown,
)
from powersys.exceptions import DataFormatError
from powersys.function_data import LinearFunctionData, PiecewiseLinearData, QuadraticFunctionData
from powersys.parsers import build_system_from_matpower, parse_matpower

CASE = """function mpc = case3
mpc.version = '2';
mpc.baseMVA = 100;
mpc.bus = [
\t1\t3\t0\t0\t0\t0\t1\t1\t0\t230\t1\t1.1\t0.9;
\t2\t1\t90\t30\t0\t0\t1\t1\t0\t230\t1\t1.1\t0.9;
];
mpc.gen = [
\t1\t50\t0\t40\t-40\t1\t0\t1\t100\t10\t0\t0\t0\t0\t0\t0\t0\t0\t0\t0\t0;
\t2\t20\t0\t10\t-10\t1\t100\t0\t40\t0\t0\t0\t0\t0\t0\t0\t0\t0\t0\t0\t0;
\t9\t20\t0\t10\t-10\t1\t100\t1\t40\t0\t0\t0\t0\t0\t0\t0\t0\t0\t0\t0\t0;
];
mpc.branch = [
\t1\t2\t0.01\t0.1\t0.02\t250\t250\t250\t0\t0\t1\t-360\t360;
\t1\t2\t0.01\t0.1\t0.02\t250\t250\t250\t0\t0\t0\t-360\t360;
\t1\t7\t0.01\t0.1\t0.02\t250\t250\t250\t0\t0\t1\t-360\t360;
];
mpc.gencost = [
\t2\t0\t0\t3\t0.01\t20\t100;
\t2\t0\t0\t3\t0\t15\t0;
\t1\t0\t0\t2\t0\t0\t10\t200;
];
"""


@pytest.fixture
def case_file(tmp_path):
    filename = tmp_path / "case3.m"
    filename.write_text(CASE)
    return filename


def test_parse_matpower(case_file):
    data = parse_matpower(case_file)
    assert data.name == "case3"
    assert data.base_mva == 100.0
    assert len(data.get_matrix("bus")) == 2
    assert len(data.get_matrix("gen")) == 3
    assert data.get_matrix("dcline") == []
    assert data.get_cell("gen_name", 0) is None


def test_parse_matpower_cells(rts_mini_dir):
    data = parse_matpower(rts_mini_dir / "RTS_mini.m")
    assert data.cells["bus_name"] == ["ABEL", "ADAMS", "ADLER", "BACH", "BACON"]
    assert data.get_cell("genfuel", 2) == "hydro"
    assert len(data.get_matrix("gencost")) == 4
    assert len(data.get_matrix("dcline")) == 1


def test_parse_matpower_errors(tmp_path):
    with pytest.raises(DataFormatError):
        parse_matpower(tmp_path / "missing.m")

    filename = tmp_path / "no_gen.m"
    filename.write_text("mpc.baseMVA = 100;\nmpc.bus = [\n1 3 0 0 0 0 1 1 0 230 1 1.1 0.9;\n];\n")
    with pytest.raises(DataFormatError):
        parse_matpower(filename)

    filename = tmp_path / "bad_value.m"
    filename.write_text("mpc.bus = [\n1 3 abc;\n];\nmpc.gen = [\n1 0;\n];\n")
    with pytest.raises(DataFormatError):
        parse_matpower(filename)


def test_build_system(case_file, caplog):
    system = build_system_from_matpower(parse_matpower(case_file))
    assert system.name == "case3"
    assert system.base_power == 100.0

    bus = system.get_component(Bus, "bus1")
    assert bus.bustype == ACBusTypes.REF
    assert bus.base_voltage == 230.0

    gens = list(system.get_components(ThermalStandard))
    assert [x.name for x in gens] == ["gen-1-1", "gen-2-2"]
    gen1, gen2 = gens
    assert gen1.active_power_limits == MinMax(min=10.0, max=100.0)
    assert gen1.rating == pytest.approx(math.hypot(100.0, 40.0))
    assert gen1.base_power == 100.0
    assert gen1.ramp_limits is None
    assert not gen2.available
    assert gen1.fuel == ThermalFuels.OTHER

    variable = gen1.operation_cost.variable
    assert isinstance(variable, CostCurve)
    assert variable.get_function_data() == QuadraticFunctionData(
        quadratic_term=0.01, proportional_term=20.0, constant_term=100.0
    )
    assert gen2.operation_cost.variable.get_function_data() == LinearFunctionData(
        proportional_term=15.0, constant_term=0.0
    )

    # The generator on bus 9 and the branch to bus 7 are skipped.
    assert "Generator gen-9-3 is connected to unknown bus" in caplog.text
    assert "connected to an unknown bus" in caplog.text
    lines = list(system.get_components(Line))
    assert [x.name for x in lines] == ["1-2-i_1", "1-2-i_2"]
    assert not lines[1].available


def test_invalid_cost_data(tmp_path, caplog):
    # Three points declared but only two given.
    text = CASE.replace("\t2\t0\t0\t3\t0.01\t20\t100;", "\t1\t0\t0\t3\t0\t0\t20\t100;")
    filename = tmp_path / "bad_cost.m"
    filename.write_text(text)
    system = System.from_matpower(filename)
    gen = system.get_component(ThermalStandard, "gen-1-1")
    assert gen.operation_cost.variable == CostCurve.zero()
    assert "Invalid cost data for generator gen-1-1" in caplog.text


def test_invalid_bus_type(tmp_path):
    filename = tmp_path / "bad_bus_type.m"
    filename.write_text(CASE.replace("\t2\t1\t90\t30", "\t2\t7\t90\t30"))
    data = parse_matpower(filename)
    with pytest.raises(DataFormatError, match="Bus 2 has an invalid bus type"):
        build_system_from_matpower(data)


def test_rts_mini(matpower_system):
    assert matpower_system.name == "RTS_mini"
    assert len(list(matpower_system.get_components(Bus))) == 5

    gen = matpower_system.get_component(ThermalStandard, "101_STEAM_1")
    assert gen.bus.name == "ABEL"
    assert gen.fuel == ThermalFuels.COAL
    assert gen.prime_mover_type == PrimeMovers.ST
    assert gen.ramp_limits == UpDown(up=2.0, down=2.0)
    assert gen.operation_cost.start_up == 1000.0
    data = gen.operation_cost.variable.get_function_data()
    assert isinstance(data, PiecewiseLinearData)
    assert data.get_y_coords() == [1000.0, 1400.0, 1800.0, 2300.0]

    hydro = matpower_system.get_component(HydroDispatch, "201_HYDRO_4")
    assert hydro.prime_mover_type == PrimeMovers.HY
    assert hydro.operation_cost.variable == CostCurve.zero()

    wind = matpower_system.get_component(RenewableDispatch, "202_WIND_1")
    assert wind.rating == 100.0
    assert wind.prime_mover_type == PrimeMovers.WT

    dc_line = matpower_system.get_component(TwoTerminalHVDCLine, "dcline-101-202-1")
    assert dc_line.active_power_limits_from == MinMax(min=0.0, max=100.0)

    line = matpower_system.get_component(Line, "102-201-i_1")
    assert line.rate is None


def test_rts_mini_logs_missing_rating(rts_mini_dir, caplog):
    System.from_matpower(rts_mini_dir / "RTS_mini.m")
    errors = [x for x in caplog.records if x.levelname == "ERROR"]
    assert errors
    assert "Branch 102-201-i_1 has no thermal rating" in errors[0].getMessage()
