"""Defines a System"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Type
from uuid import UUID, uuid4

from loguru import logger
from rich import print as _pprint
from rich.table import Table

from powersys.component import Component
from powersys.component_manager import ComponentManager
from powersys.components import ACBranch, Branch, TwoTerminalHVDCLine

if TYPE_CHECKING:
    from powersys.parsers.table_data import PowerSystemTableData


class System:
    """Implements behavior for systems"""

    def __init__(
        self,
        base_power: float = 100.0,
        name: Optional[str] = None,
        description: Optional[str] = None,
        auto_add_composed_components: bool = False,
        uuid: Optional[UUID] = None,
    ) -> None:
        """Constructs a System.

        Parameters
        ----------
        base_power : float
            System base power in MVA.
        name : str | None
            Optional system name
        description : str | None
            Optional system description
        auto_add_composed_components : bool
            Set to True to automatically add composed components to the system in add_components.
            The default behavior is to raise an PSOperationNotAllowed when this condition occurs.

        Examples
        --------
        >>> system = System(100.0, name="my_system")
        """
        self._uuid = uuid or uuid4()
        self._base_power = base_power
        self._name = name
        self._description = description
        self._component_mgr = ComponentManager(auto_add_composed_components)

    @classmethod
    def from_matpower(cls, filename: Path | str, **kwargs: Any) -> "System":
        """Build a system from a MATPOWER case file.

        Examples
        --------
        >>> system = System.from_matpower("RTS_GMLC.m")
        """
        from powersys.parsers.matpower import parse_matpower, build_system_from_matpower

        return build_system_from_matpower(parse_matpower(filename), **kwargs)

    @classmethod
    def from_table_data(cls, data: "PowerSystemTableData", **kwargs: Any) -> "System":
        """Build a system from tabular data.

        Examples
        --------
        >>> data = PowerSystemTableData("RTS_GMLC", 100.0, "user_descriptors.yaml")
        >>> system = System.from_table_data(data)
        """
        from powersys.parsers.table_data import build_system_from_table_data

        return build_system_from_table_data(data, **kwargs)

    @property
    def auto_add_composed_components(self) -> bool:
        """Return the setting for auto_add_composed_components."""
        return self._component_mgr.auto_add_composed_components

    @auto_add_composed_components.setter
    def auto_add_composed_components(self, val: bool) -> None:
        self._component_mgr.auto_add_composed_components = val

    def add_component(self, component: Component) -> None:
        """Add one component to the system.

        Raises
        ------
        PSAlreadyAttached
            Raised if a component is already attached to a system.

        See Also
        --------
        add_components
        """
        return self.add_components(component)

    def add_components(self, *components: Component) -> None:
        """Add one or more components to the system.

        Raises
        ------
        PSAlreadyAttached
            Raised if a component is already attached to a system.

        Examples
        --------
        >>> system.add_components(Bus.example(), ThermalStandard.example())
        """
        return self._component_mgr.add(*components)

    def get_component(self, component_type: Type[Component], name: str) -> Any:
        """Return the component with the passed type and name.

        Raises
        ------
        PSNotStored
            Raised if no component matches the inputs.
        PSOperationNotAllowed
            Raised if more than one component match the inputs.

        Examples
        --------
        >>> system.get_component(ThermalStandard, "gen1")
        """
        return self._component_mgr.get(component_type, name)

    def get_component_by_uuid(self, uuid: UUID) -> Any:
        """Return the component with the input UUID.

        Raises
        ------
        PSNotStored
            Raised if the UUID is not stored.
        """
        return self._component_mgr.get_by_uuid(uuid)

    def get_components(
        self, *component_type: Type[Component], filter_func: Callable | None = None
    ) -> Iterable[Any]:
        """Return the components with the passed type(s) and that optionally match filter_func.

        Parameters
        ----------
        component_type : Type[Component]
            If component_type is an abstract type, all matching subtypes will be returned.
        filter_func : Callable | None
            Optional function to filter the returned values. The function must accept a component
            as a single argument.

        Examples
        --------
        >>> for gen in system.get_components(ThermalGen, filter_func=lambda x: x.available):
            print(gen.label)
        """
        return self._component_mgr.iter(*component_type, filter_func=filter_func)

    def get_component_types(self) -> Iterable[Type[Component]]:
        """Return an iterable of all component types stored in the system."""
        return self._component_mgr.get_types()

    def list_components_by_name(self, component_type: Type[Component], name: str) -> list[Any]:
        """Return all components that match component_type and name."""
        return self._component_mgr.list_by_name(component_type, name)

    def iter_all_components(self) -> Iterable[Any]:
        """Return an iterator over all components."""
        return self._component_mgr.iter_all()

    def remove_component(self, component: Component) -> Any:
        """Remove the component from the system and return it.

        Raises
        ------
        PSNotStored
            Raised if the component is not stored in the system.
        """
        return self._component_mgr.remove(component)

    def get_branch(self, branch: Branch, occurrence: int = 0) -> Any:
        """Return this system's branch that connects the same buses as branch.

        Buses are matched by number in either orientation. AC branches only match AC branches
        and HVDC lines only match HVDC lines.

        Parameters
        ----------
        branch : Branch
            Branch whose buses are looked up.
        occurrence : int
            Selects among parallel branches, counted in storage order from 0.

        Returns
        -------
        Branch | None
            None if fewer than occurrence + 1 branches connect the buses.
        """
        family = TwoTerminalHVDCLine if isinstance(branch, TwoTerminalHVDCLine) else ACBranch
        buses = set(branch.arc.bus_numbers())
        count = 0
        for candidate in self.get_components(family):
            if set(candidate.arc.bus_numbers()) == buses:
                if count == occurrence:
                    return candidate
                count += 1
        logger.debug(
            "System {} has {} branches between buses {}, need index {}",
            self.label,
            count,
            sorted(buses),
            occurrence,
        )
        return None

    @property
    def base_power(self) -> float:
        return self._base_power

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, name: Optional[str]) -> None:
        self._name = name

    @property
    def description(self) -> str | None:
        return self._description

    @description.setter
    def description(self, description: str | None) -> None:
        self._description = description

    @property
    def label(self) -> str:
        """Provides a description of the system."""
        return f"{self.__class__.__name__}.{self.name or self.uuid}"

    @property
    def uuid(self) -> UUID:
        return self._uuid

    def info(self) -> None:
        info = SystemInfo(system=self)
        info.render()


class SystemInfo:
    """Class to store system component info"""

    def __init__(self, system: System) -> None:
        self.system = system

    def render(self) -> None:
        """Render Summary information from the system."""
        mgr = self.system._component_mgr
        system_table = Table(
            title="System",
            show_header=True,
            title_justify="left",
            title_style="bold",
        )
        system_table.add_column("Property")
        system_table.add_column("Value", justify="right")
        system_table.add_row("System name", self.system.name)
        system_table.add_row("Base power", f"{self.system.base_power}")
        system_table.add_row("Components attached", f"{mgr.get_num_components()}")
        system_table.add_row("Description", self.system.description)
        _pprint(system_table)

        component_table = Table(
            title="Component Information",
            show_header=True,
            title_justify="left",
            title_style="bold",
        )
        component_table.add_column("Type", min_width=20)
        component_table.add_column("Count", justify="right")
        counts = {k.__name__: v for k, v in mgr.get_num_components_by_type().items()}
        for component_type, component_count in sorted(counts.items()):
            component_table.add_row(component_type, f"{component_count}")

        if component_table.rows:
            _pprint(component_table)
