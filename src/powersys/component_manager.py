"""Manages components"""

import itertools
from collections import defaultdict
from typing import Any, Callable, Iterable, Type
from uuid import UUID

from loguru import logger

from powersys.component import Component
from powersys.exceptions import PSAlreadyAttached, PSNotStored, PSOperationNotAllowed
from powersys.models import PowerSysBaseModel, make_label


class ComponentManager:
    """Manages components"""

    def __init__(self, auto_add_composed_components: bool) -> None:
        self._components: dict[Type, dict[str, list[Component]]] = {}
        self._components_by_uuid: dict[UUID, Component] = {}
        self._auto_add_composed_components = auto_add_composed_components

    @property
    def auto_add_composed_components(self) -> bool:
        """Return the setting for auto_add_composed_components."""
        return self._auto_add_composed_components

    @auto_add_composed_components.setter
    def auto_add_composed_components(self, val: bool) -> None:
        self._auto_add_composed_components = val

    def add(self, *args: Component) -> None:
        """Add one or more components to the system.

        Raises
        ------
        PSAlreadyAttached
            Raised if a component is already attached to a system.
        """
        for component in args:
            self._add(component)

    def get(self, component_type: Type[Component], name: str) -> Any:
        """Return the component with the passed type and name.

        Raises
        ------
        PSNotStored
            Raised if no component matches the inputs.
        PSOperationNotAllowed
            Raised if more than one component match the inputs.
        """
        components = self.list_by_name(component_type, name)
        if not components:
            msg = f"{make_label(component_type.__name__, name)} is not stored"
            raise PSNotStored(msg)
        if len(components) > 1:
            msg = (
                f"There is more than one {component_type.__name__} with {name=}. Please use "
                "list_by_name instead."
            )
            raise PSOperationNotAllowed(msg)
        return components[0]

    def get_by_uuid(self, uuid: UUID) -> Any:
        """Return the component with the input UUID.

        Raises
        ------
        PSNotStored
            Raised if the UUID is not stored.
        """
        component = self._components_by_uuid.get(uuid)
        if component is None:
            msg = f"No component with {uuid=} is stored"
            raise PSNotStored(msg)
        return component

    def get_num_components(self) -> int:
        """Return the number of stored components."""
        return len(self._components_by_uuid)

    def get_num_components_by_type(self) -> dict[Type, int]:
        """Return the number of stored components by type."""
        counts: dict[Type, int] = defaultdict(int)
        for component_type, components_by_name in self._components.items():
            for components in components_by_name.values():
                counts[component_type] += len(components)
        return counts

    def get_types(self) -> Iterable[Type[Component]]:
        """Return an iterable of all stored types."""
        return self._components.keys()

    def iter(
        self, *component_types: Type[Component], filter_func: Callable | None = None
    ) -> Iterable[Any]:
        """Return the components with the passed type and optionally match filter_func.

        If component_type is an abstract type, all matching subtypes will be returned.
        Components are returned in the order they were added within each concrete type.
        """
        for component_type in component_types:
            yield from self._iter(component_type, filter_func)

    def _iter(
        self, component_type: Type[Component], filter_func: Callable | None
    ) -> Iterable[Any]:
        for subclass in component_type.__subclasses__():
            yield from self._iter(subclass, filter_func)

        if component_type in self._components:
            for component in itertools.chain(*self._components[component_type].values()):
                if filter_func is None or filter_func(component):
                    yield component

    def list_by_name(self, component_type: Type[Component], name: str) -> list[Any]:
        """Return all components that match component_type and name.

        The component_type can be an abstract type.
        """
        return list(self.iter(component_type, filter_func=lambda x: x.name == name))

    def iter_all(self) -> Iterable[Any]:
        """Return an iterator over all components."""
        return self._components_by_uuid.values()

    def remove(self, component: Component) -> Any:
        """Remove the component from the system and return it."""
        self.raise_if_not_attached(component)
        container = self._components[type(component)][component.name]
        container.remove(component)
        if not container:
            self._components[type(component)].pop(component.name)
        if not self._components[type(component)]:
            self._components.pop(type(component))
        self._components_by_uuid.pop(component.uuid)
        logger.debug("Removed component {}", component.label)
        return component

    def _add(self, component: Component) -> None:
        self.raise_if_attached(component)
        self._check_component_addition(component)
        component.check_component_addition()

        cls = type(component)
        if cls not in self._components:
            self._components[cls] = {}

        name = component.name or component.label
        self._components[cls].setdefault(name, []).append(component)
        self._components_by_uuid[component.uuid] = component
        logger.debug("Added {} to the system", component.label)

    def _check_component_addition(self, model: PowerSysBaseModel) -> None:
        """Check the composed components of a model against the setting
        auto_add_composed_components. Recursive."""
        for field in type(model).model_fields:
            val = getattr(model, field)
            values = val if isinstance(val, list) else [val]
            for item in values:
                if isinstance(item, Component):
                    self._handle_composed_component(item)
                    self._check_component_addition(item)
                elif isinstance(item, PowerSysBaseModel):
                    self._check_component_addition(item)

    def _handle_composed_component(self, component: Component) -> None:
        """Do what's needed for a composed component depending on system settings:
        nothing, add, or raise an exception."""
        if component.uuid in self._components_by_uuid:
            return

        if self._auto_add_composed_components:
            logger.debug("Auto-add composed component {}", component.label)
            self._add(component)
        else:
            msg = (
                f"Component {component.label} cannot be added to the system because "
                "it is not already attached."
            )
            raise PSOperationNotAllowed(msg)

    def raise_if_attached(self, component: Component) -> None:
        """Raise an exception if this component is attached to a system."""
        if component.uuid in self._components_by_uuid:
            msg = f"{component.label} is already attached to the system"
            raise PSAlreadyAttached(msg)

    def raise_if_not_attached(self, component: Component) -> None:
        """Raise an exception if this component is not attached to a system."""
        if component.uuid not in self._components_by_uuid:
            msg = f"{component.label} is not attached to the system"
            raise PSNotStored(msg)
