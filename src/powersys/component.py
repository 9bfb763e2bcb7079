"""Defines base models for components."""

from pydantic import Field
from rich import print as _pprint
from typing_extensions import Annotated

from powersys.models import PowerSysBaseModelWithIdentifers


class Component(PowerSysBaseModelWithIdentifers):
    """Base class for all models representing entities that get attached to a System."""

    name: Annotated[str, Field(frozen=True)]

    def check_component_addition(self) -> None:
        """Perform checks on the component before adding it to a system."""

    def pprint(self):
        return _pprint(self)
