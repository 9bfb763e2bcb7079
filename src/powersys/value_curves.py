"""Defines classes for value curves using cost functions"""

import abc
from typing import Generic

import numpy as np
from pydantic import Field
from typing_extensions import Annotated, TypeVar

from powersys.exceptions import PSOperationNotAllowed
from powersys.function_data import (
    FunctionData,
    LinearFunctionData,
    PiecewiseLinearData,
    PiecewiseStepData,
    QuadraticFunctionData,
    XYCoords,
    running_sum,
)
from powersys.models import PowerSysValueModel


class ValueCurve(PowerSysValueModel, abc.ABC):
    """Base class for the representations of a cost-vs-power relationship."""

    input_at_zero: Annotated[
        float | None,
        Field(
            description="Optional, an explicit representation of the input value at zero output."
        ),
    ] = None

    @classmethod
    def zero(cls) -> "InputOutputCurve[LinearFunctionData]":
        """Return the curve representing zero input at any output."""
        return InputOutputCurve(function_data=FunctionData.zero())

    def get_function_data(self) -> FunctionData:
        """Return the underlying `FunctionData`."""
        return self.function_data  # type: ignore[attr-defined]

    def get_input_at_zero(self) -> float | None:
        return self.input_at_zero

    def get_initial_input(self) -> float | None:
        """Return the value of f(x) at the least x for which the function is defined.

        Raises
        ------
        PSOperationNotAllowed
            Raised if the curve type does not define an initial input.
        """
        msg = f"{self.type_name} does not define initial_input"
        raise PSOperationNotAllowed(msg)

    @abc.abstractmethod
    def is_convex(self) -> bool:
        """Return True if the curve represents a convex relationship."""

    @abc.abstractmethod
    def to_input_output(self) -> "InputOutputCurve":
        """Return the equivalent input-output curve."""

    def _render_compact(self) -> str:
        details = [f"{name} is {value}" for name, value in self._render_details()]
        details.append(f"function is: {self.get_function_data().render()}")
        return f"{self.type_name} (a type of ValueCurve) where " + ", ".join(details)

    def _render_details(self) -> list[tuple[str, float]]:
        if self.input_at_zero is None:
            return []
        return [("input_at_zero", self.input_at_zero)]


# Valid function data types for each value curve
InputOutputCurveTypes = TypeVar(
    "InputOutputCurveTypes", bound=LinearFunctionData | QuadraticFunctionData | PiecewiseLinearData
)
IncrementalCurveTypes = TypeVar(
    "IncrementalCurveTypes", bound=LinearFunctionData | PiecewiseStepData
)
AverageRateCurveTypes = TypeVar(
    "AverageRateCurveTypes", bound=LinearFunctionData | PiecewiseStepData
)


class InputOutputCurve(ValueCurve, Generic[InputOutputCurveTypes]):
    """Input-output curve relating production quality to cost.

    An input-output curve, directly relating the production quantity to the cost:

    .. math:: y = f(x).

    Can be used, for instance, in the representation of a Cost Curve where :math:`x` is MW and
    :math:`y` is currency/hr, or in the representation of a Fuel Curve where :math:`x` is MW and
    :math:`y` is fuel/hr.
    """

    function_data: Annotated[
        InputOutputCurveTypes,
        Field(description="The underlying `FunctionData` representation of this `ValueCurve`"),
    ]

    def is_convex(self) -> bool:
        return self.function_data.is_convex()

    def to_input_output(self) -> "InputOutputCurve":
        return self


class _InitialInputCurve(ValueCurve):
    initial_input: Annotated[
        float | None,
        Field(
            description="The value of f(x) at the least x for which the function is defined, or \
                the origin for functions with no left endpoint, used for conversion to `InputOutputCurve`"
        ),
    ]

    def get_initial_input(self) -> float | None:
        return self.initial_input

    def _render_details(self) -> list[tuple[str, float]]:
        details = [("initial_input", self.initial_input)]
        return details + super()._render_details()  # type: ignore[operator]

    def _require_initial_input(self) -> float:
        if self.initial_input is None:
            msg = f"Cannot convert `{self.type_name}` with undefined `initial_input`"
            raise PSOperationNotAllowed(msg)
        return self.initial_input


class IncrementalCurve(_InitialInputCurve, Generic[IncrementalCurveTypes]):
    """Incremental/marginal curve to relate production quantity to cost derivative.

    An incremental (or 'marginal') curve, relating the production quantity to the derivative of
    cost:

    ..math:: y = f'(x).

    Can be used, for instance, in the representation of a Cost Curve
    where :math:`x` is MW and :math:`y` is currency/MWh, or in the representation of a Fuel Curve
    where :math:`x` is MW and :math:`y` is fuel/MWh.
    """

    function_data: Annotated[
        IncrementalCurveTypes,
        Field(description="The underlying `FunctionData` representation of this `ValueCurve`"),
    ]

    def is_convex(self) -> bool:
        """Convex if the marginal cost never decreases."""
        match self.function_data:
            case LinearFunctionData():
                return self.function_data.proportional_term >= 0
            case _:
                return self.function_data.is_convex()

    def to_input_output(self) -> InputOutputCurve:
        """Function to convert IncrementalCurve to InputOutputCurve

        If the IncrementalCurve uses LinearFunctionData, the new InputOutputCurve is created with
        linear or quadratic data that correspond to the integral of the original linear function.
        If the input uses PiecewiseStepData, the slopes of each segment are used to calculate the
        corresponding y values for each x value and used to construct PiecewiseLinearData for the
        InputOutputCurve.

        Raises
        ------
        PSOperationNotAllowed
            Raised if `initial_input` is undefined.
        """
        c = self._require_initial_input()
        match self.function_data:
            case LinearFunctionData():
                p = self.function_data.proportional_term
                m = self.function_data.constant_term

                if p == 0:
                    return InputOutputCurve(
                        function_data=LinearFunctionData(proportional_term=m, constant_term=c),
                        input_at_zero=self.input_at_zero,
                    )
                return InputOutputCurve(
                    function_data=QuadraticFunctionData(
                        quadratic_term=p / 2, proportional_term=m, constant_term=c
                    ),
                    input_at_zero=self.input_at_zero,
                )
            case PiecewiseStepData():
                points = running_sum(self.function_data)
                return InputOutputCurve(
                    function_data=PiecewiseLinearData(
                        points=[XYCoords(p.x, p.y + c) for p in points]
                    ),
                    input_at_zero=self.input_at_zero,
                )
            case _:
                msg = "Function is not valid for the type of data provided."
                raise PSOperationNotAllowed(msg)


class AverageRateCurve(_InitialInputCurve, Generic[AverageRateCurveTypes]):
    """Average rate curve relating production quality to average cost rate.

    An average rate curve, relating the production quantity to the average cost rate from the
    origin:

    .. math:: y = f(x)/x.

    Can be used, for instance, in the representation of a
    Cost Curve where :math:`x` is MW and :math:`y` is currency/MWh, or in the representation of a
    Fuel Curve where :math:`x` is MW and :math:`y` is fuel/MWh. Typically calculated by dividing
    absolute values of cost rate or fuel input rate by absolute values of electric power.
    """

    function_data: Annotated[
        AverageRateCurveTypes,
        Field(
            description="The underlying `FunctionData` representation of this `ValueCurve`, or \
                only the oblique asymptote when using `LinearFunctionData`"
        ),
    ]

    def is_convex(self) -> bool:
        """Convex if the equivalent input-output curve is convex.

        Piecewise step data needs `initial_input` to build the equivalent curve.
        """
        match self.function_data:
            case LinearFunctionData():
                return self.function_data.proportional_term >= 0
            case _:
                return self.to_input_output().is_convex()

    def to_input_output(self) -> InputOutputCurve:
        """Function to convert AverageRateCurve to InputOutputCurve

        If the AverageRateCurve uses LinearFunctionData, the new InputOutputCurve is created with
        either linear or quadratic function data, depending on if the original function data is
        constant or linear. If the input uses PiecewiseStepData, new y-values are calculated for
        each x value such that `f(x) = x*y` and used to construct PiecewiseLinearData for the
        InputOutputCurve.

        Raises
        ------
        PSOperationNotAllowed
            Raised if `initial_input` is undefined.
        """
        c = self._require_initial_input()
        match self.function_data:
            case LinearFunctionData():
                p = self.function_data.proportional_term
                m = self.function_data.constant_term

                if p == 0:
                    return InputOutputCurve(
                        function_data=LinearFunctionData(proportional_term=m, constant_term=c),
                        input_at_zero=self.input_at_zero,
                    )
                return InputOutputCurve(
                    function_data=QuadraticFunctionData(
                        quadratic_term=p, proportional_term=m, constant_term=c
                    ),
                    input_at_zero=self.input_at_zero,
                )
            case PiecewiseStepData():
                xs = self.function_data.x_coords
                ys = np.multiply(xs[1:], self.function_data.y_coords).tolist()
                ys.insert(0, c)

                return InputOutputCurve(
                    function_data=PiecewiseLinearData(
                        points=[XYCoords(x, y) for x, y in zip(xs, ys)]
                    ),
                    input_at_zero=self.input_at_zero,
                )
            case _:
                msg = "Function is not valid for the type of data provided."
                raise PSOperationNotAllowed(msg)


def LinearCurve(
    proportional_term: float = 0.0, constant_term: float = 0.0
) -> InputOutputCurve[LinearFunctionData]:
    """Creates a linear curve using the given proportional and constant terms.

    Examples
    --------
    >>> LinearCurve(10, 20).function_data
    LinearFunctionData(proportional_term=10.0, constant_term=20.0)
    """
    return InputOutputCurve(
        function_data=LinearFunctionData(
            proportional_term=proportional_term, constant_term=constant_term
        )
    )


def PiecewisePointCurve(
    points: list[tuple[float, float]],
) -> InputOutputCurve[PiecewiseLinearData]:
    """Creates an input-output curve from a list of (x, y) points."""
    return InputOutputCurve(
        function_data=PiecewiseLinearData(points=[XYCoords(x, y) for x, y in points])
    )
