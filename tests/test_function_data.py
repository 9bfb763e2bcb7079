import pytest
from pydantic import ValidationError

from powersys.function_data import (
    FunctionData,
    LinearFunctionData,
    PiecewiseLinearData,
    PiecewiseStepData,
    QuadraticFunctionData,
    XYCoords,
    running_sum,
)


def test_xycoords():
    test_xy = XYCoords(x=1.0, y=2.0)

    assert isinstance(test_xy, XYCoords)
    assert test_xy.x == 1.0
    assert test_xy.y == 2.0
    assert tuple(test_xy) == (1.0, 2.0)


def test_piecewise_linear():
    # Check validation for minimum x values
    test_coords = [XYCoords(1.0, 2.0)]

    with pytest.raises(ValidationError):
        PiecewiseLinearData(points=test_coords)

    # Check validation for ascending x values
    test_coords = [XYCoords(1.0, 2.0), XYCoords(4.0, 3.0), XYCoords(3.0, 4.0)]

    with pytest.raises(ValidationError):
        PiecewiseLinearData(points=test_coords)

    data = PiecewiseLinearData(points=[(1.0, 2.0), (3.0, 6.0), (4.0, 10.0)])
    assert data.get_x_coords() == [1.0, 3.0, 4.0]
    assert data.get_y_coords() == [2.0, 6.0, 10.0]
    assert data.get_slopes() == [2.0, 4.0]
    assert all(isinstance(x, XYCoords) for x in data.get_points())


def test_piecewise_step():
    # Check minimum x values
    with pytest.raises(ValidationError):
        PiecewiseStepData(x_coords=[2.0], y_coords=[1.0])

    # Check ascending x values
    with pytest.raises(ValidationError):
        PiecewiseStepData(x_coords=[1.0, 4.0, 3.0], y_coords=[2.0, 4.0])

    # Check length of x and y lists
    with pytest.raises(ValidationError):
        PiecewiseStepData(x_coords=[1.0, 2.0, 3.0], y_coords=[2.0, 4.0, 3.0])


def test_running_sum():
    test_x = [1.0, 3.0, 6.0]
    test_y = [2.0, 4.0]

    pws = PiecewiseStepData(x_coords=test_x, y_coords=test_y)

    points = running_sum(pws)

    x_values = [p.x for p in points]
    y_values = [p.y for p in points]

    assert x_values == test_x
    assert y_values == [0.0, 4.0, 16.0]


def test_zero():
    zero = FunctionData.zero()
    assert zero == LinearFunctionData(proportional_term=0.0, constant_term=0.0)


@pytest.mark.parametrize(
    "data, expected",
    [
        (LinearFunctionData(proportional_term=-5.0, constant_term=1.0), True),
        (QuadraticFunctionData(quadratic_term=1.0, proportional_term=-2.0, constant_term=0), True),
        (QuadraticFunctionData(quadratic_term=0.0, proportional_term=1.0, constant_term=0), True),
        (QuadraticFunctionData(quadratic_term=-1.0, proportional_term=1.0, constant_term=0), False),
        (PiecewiseLinearData(points=[(0.0, 0.0), (1.0, 1.0), (2.0, 3.0)]), True),
        (PiecewiseLinearData(points=[(0.0, 0.0), (1.0, 1.0), (2.0, 2.0)]), True),
        (PiecewiseLinearData(points=[(0.0, 0.0), (1.0, 2.0), (2.0, 3.0)]), False),
        (PiecewiseStepData(x_coords=[0.0, 1.0, 2.0], y_coords=[1.0, 2.0]), True),
        (PiecewiseStepData(x_coords=[0.0, 1.0, 2.0], y_coords=[2.0, 1.0]), False),
    ],
)
def test_is_convex(data, expected):
    assert data.is_convex() is expected


def test_equality_and_hash():
    data1 = PiecewiseLinearData(points=[(1.0, 2.0), (3.0, 4.0)])
    data2 = PiecewiseLinearData(points=[XYCoords(1.0, 2.0), XYCoords(3.0, 4.0)])
    data3 = PiecewiseLinearData(points=[(1.0, 2.0), (3.0, 5.0)])
    assert data1 == data2
    assert hash(data1) == hash(data2)
    assert data1 != data3
    assert len({data1, data2, data3}) == 2

    # Same field values in different types are not equal.
    linear = LinearFunctionData(proportional_term=1.0, constant_term=2.0)
    step = PiecewiseStepData(x_coords=[1.0, 2.0], y_coords=[3.0])
    assert linear != step
    assert linear != (1.0, 2.0)


def test_immutable():
    data = LinearFunctionData(proportional_term=1.0, constant_term=2.0)
    with pytest.raises(ValidationError):
        data.proportional_term = 3.0


def test_render():
    linear = LinearFunctionData(proportional_term=1.0, constant_term=2.0)
    assert linear.render() == "LinearFunctionData representing function f(x) = 1.0 x + 2.0"
    assert str(linear) == linear.render()
    assert linear.render(compact=False) == (
        "LinearFunctionData:\n  proportional_term: 1.0\n  constant_term: 2.0"
    )

    quadratic = QuadraticFunctionData(quadratic_term=3.0, proportional_term=1.0, constant_term=2.0)
    assert quadratic.render() == (
        "QuadraticFunctionData representing function f(x) = 3.0 x^2 + 1.0 x + 2.0"
    )

    pwl = PiecewiseLinearData(points=[(1.0, 2.0), (3.0, 4.0)])
    assert pwl.render() == "PiecewiseLinearData with 2 points:\n  (1.0, 2.0)\n  (3.0, 4.0)"


def test_show(capsys):
    step = PiecewiseStepData(x_coords=[1.0, 2.0], y_coords=[3.0])
    step.show()
    captured = capsys.readouterr()
    assert captured.out == f"{step.render()}\n"
    assert "x_coords [1.0, 2.0]" in captured.out


def test_abstract_base():
    with pytest.raises(TypeError):
        FunctionData()  # type: ignore
