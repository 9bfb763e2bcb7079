"""Compares two systems that were built from different sources describing the same grid."""

from collections import Counter
from enum import StrEnum
from typing import Any, Type

import numpy as np
from loguru import logger
from pydantic import Field
from typing_extensions import Annotated

from powersys.component import Component
from powersys.components import (
    ACBranch,
    Generator,
    HydroGen,
    RenewableGen,
    ThermalGen,
    TwoTerminalHVDCLine,
)
from powersys.cost_curves import FuelCurve, ProductionVariableCost
from powersys.exceptions import PSComponentNotFound, PSInconsistentSystems, PSOperationNotAllowed
from powersys.function_data import PiecewiseLinearData, XYCoords
from powersys.lazy_dict import LazyDictFromIterator
from powersys.models import PowerSysBaseModel
from powersys.system import System
from powersys.value_curves import InputOutputCurve

COST_POINTS_FIELD = "variable_cost_points"


class PointCountPolicy(StrEnum):
    """Behavior when two cost curves have different numbers of points."""

    FAIL = "fail"
    WARN = "warn"
    IGNORE = "ignore"


class MatchBy(StrEnum):
    """How a component finds its counterpart in the reference system."""

    NAME = "name"
    ARC = "arc"


class CategoryCheck(PowerSysBaseModel):
    """Fields to compare for one component category."""

    component_type: Type[Component]
    fields: tuple[str, ...]
    match_by: MatchBy = MatchBy.NAME
    compare_cost_points: bool = False


DEFAULT_CATEGORY_CHECKS = (
    CategoryCheck(
        component_type=HydroGen,
        fields=(
            "available",
            "bus",
            "active_power",
            "reactive_power",
            "rating",
            "active_power_limits",
            "reactive_power_limits",
            "ramp_limits",
        ),
    ),
    CategoryCheck(
        component_type=ThermalGen,
        fields=("available", "bus", "active_power_limits", "reactive_power_limits", "ramp_limits"),
        compare_cost_points=True,
    ),
    CategoryCheck(component_type=RenewableGen, fields=("bus", "rating", "power_factor")),
    CategoryCheck(component_type=ACBranch, fields=("rate",), match_by=MatchBy.ARC),
    CategoryCheck(
        component_type=TwoTerminalHVDCLine,
        fields=("active_power_limits_from",),
        match_by=MatchBy.ARC,
    ),
)


class ConsistencyCheckSettings(PowerSysBaseModel):
    """Settings for SystemConsistencyChecker"""

    cost_point_atol: Annotated[
        float,
        Field(ge=0, description="Absolute tolerance for the y values of cost curve points."),
    ] = 0.1
    point_count_policy: Annotated[
        PointCountPolicy,
        Field(description="Behavior when cost curves have different numbers of points."),
    ] = PointCountPolicy.FAIL
    categories: list[CategoryCheck] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORY_CHECKS)
    )


class FieldResult(PowerSysBaseModel):
    """Values of one field of a component in both systems."""

    component: str
    field: str
    reference_value: Any
    other_value: Any

    def __str__(self) -> str:
        return (
            f"{self.component}.{self.field}: reference={self.reference_value!r} "
            f"other={self.other_value!r}"
        )


class ConsistencyReport(PowerSysBaseModel):
    """Outcome of a consistency check."""

    reference: str
    other: str
    num_compared: int = 0
    mismatches: list[FieldResult] = []
    skipped: list[FieldResult] = []

    @property
    def is_consistent(self) -> bool:
        return not self.mismatches

    def raise_on_mismatch(self) -> None:
        """Raise an exception listing all mismatched fields.

        Raises
        ------
        PSInconsistentSystems
            Raised if any compared field differs.
        """
        if self.mismatches:
            details = "\n".join(f"  {x}" for x in self.mismatches)
            msg = (
                f"{len(self.mismatches)} of {self.num_compared} compared values differ between "
                f"{self.reference} and {self.other}:\n{details}"
            )
            raise PSInconsistentSystems(msg)


class SystemConsistencyChecker:
    """Compares the components of a system against a reference system.

    Every component of the checked categories in ``other`` must have a counterpart in
    ``reference``; generators are matched by case-insensitive name and branches by the buses
    they connect. Fields that are None in either system are skipped with a warning.

    Examples
    --------
    >>> reference = System.from_matpower("RTS_GMLC.m")
    >>> other = System.from_table_data(PowerSystemTableData("RTS_GMLC", 100.0, "descriptors.yaml"))
    >>> SystemConsistencyChecker(reference, other).check().raise_on_mismatch()
    """

    def __init__(
        self,
        reference: System,
        other: System,
        settings: ConsistencyCheckSettings | None = None,
    ) -> None:
        self._reference = reference
        self._other = other
        self._settings = settings or ConsistencyCheckSettings()

    @property
    def settings(self) -> ConsistencyCheckSettings:
        return self._settings

    def check(self) -> ConsistencyReport:
        """Compare the systems.

        Raises
        ------
        PSComponentNotFound
            Raised if a component of the other system has no counterpart in the reference.
        """
        report = ConsistencyReport(reference=self._reference.label, other=self._other.label)
        for category in self._settings.categories:
            self._check_category(category, report)

        logger.info(
            "Compared {} values of {} against {}: {} mismatches, {} skipped",
            report.num_compared,
            report.other,
            report.reference,
            len(report.mismatches),
            len(report.skipped),
        )
        return report

    def _check_category(self, category: CategoryCheck, report: ConsistencyReport) -> None:
        if category.match_by == MatchBy.NAME:
            by_name = LazyDictFromIterator(
                self._reference.get_components(category.component_type), _get_uppercase_name
            )
        else:
            # Parallel branches pair up in storage order.
            num_parallel: Counter[frozenset[int]] = Counter()

        for component in self._other.get_components(category.component_type):
            if category.match_by == MatchBy.NAME:
                counterpart = by_name.get(_get_uppercase_name(component))
            else:
                buses = frozenset(component.arc.bus_numbers())
                counterpart = self._reference.get_branch(component, num_parallel[buses])
                num_parallel[buses] += 1
            if counterpart is None:
                msg = (
                    f"did not find {component.label} of {self._other.label} "
                    f"in {self._reference.label}"
                )
                raise PSComponentNotFound(msg)

            for field in category.fields:
                self._compare_field(counterpart, component, field, report)
            if category.compare_cost_points:
                self._compare_cost_points(counterpart, component, report)

    def _compare_field(
        self, reference: Component, other: Component, field: str, report: ConsistencyReport
    ) -> None:
        if field == "bus":
            ref_val: Any = reference.bus.name.lower()  # type: ignore[attr-defined]
            other_val: Any = other.bus.name.lower()  # type: ignore[attr-defined]
        else:
            ref_val, other_val = getattr(reference, field), getattr(other, field)

        result = FieldResult(
            component=other.label, field=field, reference_value=ref_val, other_value=other_val
        )
        if ref_val is None or other_val is None:
            logger.warning("Skip value with None: {}", result)
            report.skipped.append(result)
            return

        report.num_compared += 1
        if ref_val != other_val:
            report.mismatches.append(result)

    def _compare_cost_points(
        self, reference: Generator, other: Generator, report: ConsistencyReport
    ) -> None:
        ref_points = get_cost_points(reference.get_operation_cost().get_variable())
        other_points = get_cost_points(other.get_operation_cost().get_variable())
        result = FieldResult(
            component=other.label,
            field=COST_POINTS_FIELD,
            reference_value=ref_points,
            other_value=other_points,
        )
        if ref_points is None or other_points is None:
            logger.warning("Skip cost curve without piecewise linear points: {}", result)
            report.skipped.append(result)
            return

        if len(ref_points) != len(other_points):
            self._handle_point_count_mismatch(result, report)
            return

        report.num_compared += 1
        if not np.isclose(
            [p.y for p in ref_points],
            [p.y for p in other_points],
            rtol=0.0,
            atol=self._settings.cost_point_atol,
        ).all():
            report.mismatches.append(result)

    def _handle_point_count_mismatch(self, result: FieldResult, report: ConsistencyReport) -> None:
        match self._settings.point_count_policy:
            case PointCountPolicy.FAIL:
                report.num_compared += 1
                report.mismatches.append(result)
            case PointCountPolicy.WARN:
                logger.warning("Cost curves have different numbers of points: {}", result)
                report.skipped.append(result)
            case PointCountPolicy.IGNORE:
                logger.debug("Ignore cost curves with different numbers of points: {}", result)


def check_system_consistency(reference: System, other: System, **kwargs: Any) -> ConsistencyReport:
    """Compare two systems with settings built from kwargs.

    Examples
    --------
    >>> report = check_system_consistency(mp_system, table_system, point_count_policy="warn")
    """
    settings = ConsistencyCheckSettings(**kwargs)
    return SystemConsistencyChecker(reference, other, settings=settings).check()


def get_cost_points(cost: ProductionVariableCost) -> list[XYCoords] | None:
    """Return the points of a variable cost in currency per hour.

    Incremental and average rate curves are converted to input-output curves and fuel curves
    with a scalar fuel cost are scaled by it. Returns None if the cost cannot be expressed as
    piecewise linear points.
    """
    curve = cost.get_value_curve()
    if not isinstance(curve, InputOutputCurve):
        try:
            curve = curve.to_input_output()
        except PSOperationNotAllowed:
            return None

    data = curve.get_function_data()
    if not isinstance(data, PiecewiseLinearData):
        return None

    points = data.get_points()
    if isinstance(cost, FuelCurve):
        fuel_cost = cost.get_fuel_cost()
        if not isinstance(fuel_cost, float):
            return None
        points = [XYCoords(p.x, p.y * fuel_cost) for p in points]
    return points


def _get_uppercase_name(component: Component) -> str:
    return component.name.upper()
