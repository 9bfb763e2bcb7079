"""Base models for the package"""

import abc
import sys
from typing import Any, TextIO
from uuid import UUID, uuid4

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_serializer

INDENT = "  "


def make_model_config(**kwargs: Any) -> ConfigDict:
    """Return a Pydantic config"""
    return ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        validate_default=True,
        extra="forbid",
        use_enum_values=False,
        arbitrary_types_allowed=True,
        populate_by_name=True,
        **kwargs,  # type: ignore
    )


class PowerSysBaseModel(BaseModel):
    """Base class for all powersys models"""

    model_config = make_model_config()


class PowerSysValueModel(PowerSysBaseModel):
    """Base class for immutable models that compare and hash by their fields.

    The concrete class is part of the identity: instances of two different classes are never
    equal, even if all of their fields match. Generic parametrizations of the same class (e.g.,
    ``CostCurve[InputOutputCurve]`` and ``CostCurve``) are treated as the same class.
    """

    model_config = make_model_config(frozen=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PowerSysValueModel):
            return NotImplemented
        if get_model_origin(self) is not get_model_origin(other):
            return False
        return all(getattr(self, x) == getattr(other, x) for x in type(self).model_fields)

    def __hash__(self) -> int:
        values = (make_hashable(getattr(self, x)) for x in type(self).model_fields)
        return hash((get_model_origin(self).__name__, *values))

    def __str__(self) -> str:
        return self.render()

    @property
    def type_name(self) -> str:
        """Return the class name without generic parameters."""
        return get_model_origin(self).__name__

    def render(self, compact: bool = True) -> str:
        """Return a human-readable representation of the instance.

        Parameters
        ----------
        compact : bool
            Selects the single-header compact form (default) or the one-line-per-field
            expanded form.
        """
        return self._render_compact() if compact else self._render_expanded(compact=False)

    def show(self, file: TextIO | None = None, compact: bool = True) -> None:
        """Write the rendering of the instance to file (defaults to stdout)."""
        print(self.render(compact=compact), file=file or sys.stdout)

    def _render_compact(self) -> str:
        return self._render_expanded(compact=True)

    def _render_expanded(self, compact: bool) -> str:
        lines = [f"{self.type_name}:"]
        for field in type(self).model_fields:
            text = indent_lines(render_value(getattr(self, field), compact=compact))
            lines.append(f"{INDENT}{field}: {text}")
        return "\n".join(lines)


class PowerSysBaseModelWithIdentifers(PowerSysBaseModel, abc.ABC):
    """Base class for all powersys types with UUIDs"""

    uuid: UUID = Field(default_factory=uuid4, repr=False)

    @field_serializer("uuid")
    def _serialize_uuid(self, _) -> str:
        return str(self.uuid)

    def assign_new_uuid(self):
        """Generate a new UUID."""
        self.uuid = uuid4()
        logger.debug("Assigned new UUID for {}: {}", self.label, self.uuid)

    @classmethod
    def example(cls) -> "PowerSysBaseModelWithIdentifers":
        """Return an example instance of the model.

        Raises
        ------
        NotImplementedError
            Raised if the model does not implement this method.
        """
        msg = f"{cls.__name__} does not implement example()"
        raise NotImplementedError(msg)

    @property
    def label(self) -> str:
        """Provides a description of an instance."""
        class_name = self.__class__.__name__
        name = getattr(self, "name", "") or str(self.uuid)
        return make_label(class_name, name)


def get_model_origin(model: BaseModel) -> type[BaseModel]:
    """Return the unparametrized class of a (possibly generic) model instance."""
    return model.__pydantic_generic_metadata__["origin"] or type(model)


def make_hashable(value: Any) -> Any:
    """Convert containers to tuples so that the value can be hashed."""
    if isinstance(value, (list, tuple)):
        return tuple(make_hashable(x) for x in value)
    if isinstance(value, dict):
        return tuple(sorted((k, make_hashable(v)) for k, v in value.items()))
    return value


def render_value(value: Any, compact: bool = True) -> str:
    """Render a field value, delegating to its own renderer when it has one."""
    if isinstance(value, PowerSysValueModel):
        return value.render(compact=compact)
    return str(value)


def indent_lines(text: str) -> str:
    """Indent every line after the first one by two spaces."""
    return text.replace("\n", "\n" + INDENT)


def make_label(class_name: str, name: str) -> str:
    """Make a string label of an instance."""
    return f"{class_name}.{name}"
