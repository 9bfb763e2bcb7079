import pytest
from loguru import logger

from powersys import System
from powersys.components import (
    ACBranch,
    ACBusTypes,
    Arc,
    Bus,
    Generator,
    Line,
    MinMax,
    RenewableDispatch,
    RenewableGen,
    ThermalGen,
    ThermalStandard,
    TwoTerminalHVDCLine,
)
from powersys.exceptions import PSAlreadyAttached, PSNotStored, PSOperationNotAllowed
from powersys.loggers import setup_logging


def test_system(simple_system):
    gen = simple_system.get_component(ThermalStandard, "thermal-gen")
    assert gen.bus is simple_system.get_component(Bus, "bus1")
    assert simple_system.get_component_by_uuid(gen.uuid) is gen

    with pytest.raises(PSNotStored):
        simple_system.get_component(ThermalStandard, "not-present")

    assert simple_system.add_components() is None  # type: ignore
    assert simple_system.label == "System.test-system"
    assert simple_system.base_power == 100.0


def test_get_components_by_abstract_type(simple_system):
    assert [x.name for x in simple_system.get_components(ThermalGen)] == ["thermal-gen"]
    assert [x.name for x in simple_system.get_components(RenewableGen)] == ["wind-gen"]
    names = {x.name for x in simple_system.get_components(Generator)}
    assert names == {"thermal-gen", "wind-gen"}

    available = simple_system.get_components(
        Generator, filter_func=lambda x: x.name.startswith("wind")
    )
    assert [x.name for x in available] == ["wind-gen"]
    assert set(simple_system.get_component_types()) == {
        Bus,
        ThermalStandard,
        RenewableDispatch,
        Line,
        TwoTerminalHVDCLine,
    }


def test_system_auto_add_composed_components():
    system = System(auto_add_composed_components=False)
    gen = ThermalStandard.example()

    with pytest.raises(PSOperationNotAllowed):
        system.add_component(gen)

    system.auto_add_composed_components = True
    system.add_component(gen)
    assert system.get_component(Bus, gen.bus.name) is gen.bus


def test_auto_add_buses_of_arcs():
    system = System(auto_add_composed_components=True)
    bus1 = Bus(name="b1", number=1)
    bus2 = Bus(name="b2", number=2)
    system.add_component(Line(name="l1", arc=Arc(from_bus=bus1, to_bus=bus2)))
    assert len(list(system.get_components(Bus))) == 2


def test_add_twice(simple_system):
    bus = simple_system.get_component(Bus, "bus1")
    with pytest.raises(PSAlreadyAttached):
        simple_system.add_component(bus)


def test_duplicate_names():
    system = System()
    system.add_components(Bus(name="bus", number=1), Bus(name="bus", number=2))
    with pytest.raises(PSOperationNotAllowed):
        system.get_component(Bus, "bus")
    assert [x.number for x in system.list_components_by_name(Bus, "bus")] == [1, 2]


def test_remove_component(simple_system):
    line = simple_system.get_component(Line, "line1")
    assert simple_system.remove_component(line) is line
    with pytest.raises(PSNotStored):
        simple_system.get_component(Line, "line1")
    with pytest.raises(PSNotStored):
        simple_system.remove_component(line)
    assert Line not in set(simple_system.get_component_types())


def test_get_branch(simple_system):
    line = simple_system.get_component(Line, "line1")
    dc_line = simple_system.get_component(TwoTerminalHVDCLine, "dc1")
    bus1 = Bus(name="other1", number=1)
    bus2 = Bus(name="other2", number=2)
    bus3 = Bus(name="other3", number=3)

    # Buses match by number in either orientation.
    query = Line(name="q", arc=Arc(from_bus=bus2, to_bus=bus1))
    assert simple_system.get_branch(query) is line
    query = Line(name="q", arc=Arc(from_bus=bus1, to_bus=bus2))
    assert simple_system.get_branch(query) is line

    query = TwoTerminalHVDCLine(
        name="q",
        arc=Arc(from_bus=bus1, to_bus=bus2),
        active_power_limits_from=MinMax(min=0.0, max=1.0),
        active_power_limits_to=MinMax(min=0.0, max=1.0),
    )
    assert simple_system.get_branch(query) is dc_line

    query = Line(name="q", arc=Arc(from_bus=bus1, to_bus=bus3))
    assert simple_system.get_branch(query) is None


def test_get_branch_parallel():
    system = System()
    bus1 = Bus(name="b1", number=1)
    bus2 = Bus(name="b2", number=2)
    line1 = Line(name="l1", arc=Arc(from_bus=bus1, to_bus=bus2), rate=10.0)
    line2 = Line(name="l2", arc=Arc(from_bus=bus1, to_bus=bus2), rate=20.0)
    system.add_components(bus1, bus2, line1, line2)
    query = Line(name="q", arc=Arc(from_bus=bus2, to_bus=bus1))
    match = system.get_branch(query)
    assert isinstance(match, ACBranch)
    assert match is line1
    assert system.get_branch(query, occurrence=1) is line2
    assert system.get_branch(query, occurrence=2) is None


def test_component_examples():
    bus = Bus.example()
    assert bus.bustype == ACBusTypes.REF
    gen = ThermalStandard.example()
    assert gen.get_operation_cost().get_variable().is_convex()
    assert RenewableDispatch.example().power_factor == 1.0


def test_component_name_is_frozen():
    bus = Bus.example()
    with pytest.raises(ValueError):
        bus.name = "new-name"


def test_assign_new_uuid():
    bus = Bus.example()
    uuid = bus.uuid
    bus.assign_new_uuid()
    assert bus.uuid != uuid


def test_info(simple_system, capsys):
    simple_system.info()
    captured = capsys.readouterr()
    assert "test-system" in captured.out
    assert "ThermalStandard" in captured.out


def test_pprint(capsys):
    Bus.example().pprint()
    assert "bus-1" in capsys.readouterr().out


def test_setup_logging(tmp_path):
    filename = tmp_path / "powersys.log"
    setup_logging(filename=filename, level="DEBUG")
    system = System(name="logged")
    system.add_component(Bus.example())
    logger.remove()
    assert "Added Bus.bus-1 to the system" in filename.read_text()
