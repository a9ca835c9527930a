import pytest

from rinha.rinha_ast import BinaryOp, Int, Location
from rinha.rinha_environment import Scope
from rinha.rinha_errors import DivisionByZero, InvalidOperand
from rinha.rinha_operators import compare
from rinha.rinha_values import INT_MAX, INT_MIN, Closure

HERE = Location(10, 15, "ops")


def op(lhs, name, rhs):
    return compare(lhs, BinaryOp[name], rhs, HERE)


@pytest.mark.parametrize("lhs,name,rhs,expected", [
    (2, "Add", 3, 5),
    (2, "Sub", 3, -1),
    (4, "Mul", -3, -12),
    (7, "Div", 2, 3),
    (-7, "Div", 2, -3),
    (7, "Div", -2, -3),
    (7, "Rem", 3, 1),
    (-7, "Rem", 3, -1),
    (7, "Rem", -3, 1),
    (1, "Lt", 2, True),
    (2, "Gt", 1, True),
    (2, "Lte", 2, True),
    (1, "Gte", 2, False),
    ("a", "Lt", "b", True),
    (True, "And", False, False),
    (True, "Or", False, True),
    ((1, 2), "Eq", (1, 2), True),
    ((1, 2), "Neq", (1, 3), True),
    ("x", "Eq", "x", True),
])
def test_operators(lhs, name, rhs, expected):
    assert op(lhs, name, rhs) == expected


def test_string_concatenation_stringifies_other_operand():
    assert op("n=", "Add", 1) == "n=1"
    assert op(1, "Add", "!") == "1!"
    assert op("t", "Add", (True, 2)) == "t(true, 2)"
    assert op("a", "Add", "b") == "ab"


@pytest.mark.parametrize("name", ["Div", "Rem"])
def test_zero_divisor(name):
    with pytest.raises(DivisionByZero) as exc:
        op(1, name, 0)
    assert isinstance(exc.value, InvalidOperand)
    assert exc.value.location == HERE


@pytest.mark.parametrize("lhs,name,rhs", [
    (1, "Sub", "a"),
    (True, "Add", 1),
    (1, "And", True),
    ("a", "Or", "b"),
    (1, "Eq", "1"),
    (True, "Eq", 1),
    ((1, 2), "Lt", 3),
])
def test_kind_mismatch_is_invalid_operand(lhs, name, rhs):
    with pytest.raises(InvalidOperand) as exc:
        op(lhs, name, rhs)
    assert exc.value.location == HERE
    assert name in exc.value.message


def test_comparing_closures_is_an_error_not_a_crash():
    c = Closure((), Int(0, Location()), Scope())
    with pytest.raises(InvalidOperand):
        op(c, "Eq", c)
    with pytest.raises(InvalidOperand):
        op(c, "Lt", c)


def test_integer_overflow():
    with pytest.raises(InvalidOperand) as exc:
        op(INT_MAX, "Add", 1)
    assert "overflow" in exc.value.full_text
    with pytest.raises(InvalidOperand):
        op(INT_MIN, "Div", -1)
    assert op(INT_MIN, "Rem", -1) == 0
